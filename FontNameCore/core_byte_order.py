#!/usr/bin/env python3
"""
Big-endian integer readers for sfnt data.

Every multi-byte value in an sfnt file (table directory, name table, ...) is
stored big-endian on disk, so reads here are always ">" struct formats and
never depend on the host byte order. All readers bound-check before touching
the buffer and raise OutOfBoundsError instead of reading past the end.

Usage:
    from FontNameCore.core_byte_order import read_u16_be, read_u32_be, read_tag

    fmt = read_u16_be(table, 0)
    tag = read_tag(font_data, 12)
"""

from __future__ import annotations

import struct
from typing import Tuple

from FontNameCore.core_error_handling import OutOfBoundsError

_U16 = struct.Struct(">H")
_U32 = struct.Struct(">I")


def _check_bounds(data: bytes, offset: int, size: int) -> None:
    if offset < 0 or offset + size > len(data):
        raise OutOfBoundsError(
            f"read of {size} bytes at offset {offset} exceeds buffer of {len(data)} bytes",
            offset=offset,
            size=size,
            buffer_length=len(data),
        )


def read_u16_be(data: bytes, offset: int) -> int:
    """
    Read an unsigned 16-bit big-endian integer.

    Examples:
        >>> read_u16_be(b"\\x01\\x02", 0)
        258
    """
    _check_bounds(data, offset, 2)
    return _U16.unpack_from(data, offset)[0]


def read_u32_be(data: bytes, offset: int) -> int:
    """Read an unsigned 32-bit big-endian integer."""
    _check_bounds(data, offset, 4)
    return _U32.unpack_from(data, offset)[0]


def read_u16_array(data: bytes, offset: int, count: int) -> Tuple[int, ...]:
    """
    Read ``count`` consecutive big-endian u16 values in one bounds check.

    Examples:
        >>> read_u16_array(b"\\x00\\x03\\x00\\x01", 0, 2)
        (3, 1)
    """
    if count < 0:
        raise ValueError(f"count must be non-negative, got {count}")
    _check_bounds(data, offset, 2 * count)
    return struct.unpack_from(f">{count}H", data, offset)


def read_tag(data: bytes, offset: int) -> str:
    """Read a 4-byte table tag as text (tags are printable ASCII)."""
    _check_bounds(data, offset, 4)
    return bytes(data[offset : offset + 4]).decode("latin-1")


def tag_to_uint32(tag: str) -> int:
    """
    Reinterpret a 4-character table tag as a big-endian u32.

    This is the key form used by APIs that look tables up by number.

    Examples:
        >>> hex(tag_to_uint32("name"))
        '0x6e616d65'
    """
    raw = tag.encode("latin-1")
    if len(raw) != 4:
        raise ValueError(f"table tag must be 4 characters, got {tag!r}")
    return _U32.unpack(raw)[0]


__all__ = [
    "read_u16_be",
    "read_u32_be",
    "read_u16_array",
    "read_tag",
    "tag_to_uint32",
]
