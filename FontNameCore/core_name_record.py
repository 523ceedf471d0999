#!/usr/bin/env python3
"""
Value types for the name table header and its record array.

A NameRecord is plain data decoded from the 12-byte on-disk entry; which
record a caller wants is decided separately by a SelectionPolicy
(see core_record_selection).

Usage:
    from FontNameCore.core_name_record import NameRecord, NameTableHeader

    header = NameTableHeader.from_bytes(table)
    record = NameRecord.from_bytes(table, 6)
    start, end = record.string_range(header.string_storage_offset)
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Tuple

from FontNameCore.core_byte_order import read_u16_array

# Platform IDs
PID_UNICODE = 0
PID_MAC = 1
PID_WIN = 3

# Encoding IDs
EID_MAC_ROMAN = 0
EID_WIN_SYMBOL = 0
EID_UNICODE_BMP = 1
EID_WIN_UCS4 = 10

LANG_EN_US_INT = 0x0409
LANG_MAC_ENGLISH = 0

# Name IDs
NAME_ID_COPYRIGHT = 0
NAME_ID_FAMILY = 1
NAME_ID_SUBFAMILY = 2
NAME_ID_UNIQUE = 3
NAME_ID_FULL_NAME = 4
NAME_ID_VERSION = 5
NAME_ID_POSTSCRIPT = 6
NAME_ID_TYPOGRAPHIC_FAMILY = 16
NAME_ID_TYPOGRAPHIC_SUBFAMILY = 17

NAME_IDS: Dict[int, str] = {
    0: "Copyright",
    1: "Font Family",
    2: "Font Subfamily",
    3: "Unique Identifier",
    4: "Full Font Name",
    5: "Version",
    6: "PostScript Name",
    7: "Trademark",
    8: "Manufacturer",
    9: "Designer",
    10: "Description",
    11: "Vendor URL",
    12: "Designer URL",
    13: "License Description",
    14: "License URL",
    16: "Typographic Family",
    17: "Typographic Subfamily",
    18: "Compatible Full (Mac)",
    19: "Sample Text",
    20: "PostScript CID findfont Name",
    21: "WWS Family",
    22: "WWS Subfamily",
    23: "Light Background Palette",
    24: "Dark Background Palette",
    25: "Variations PostScript Name Prefix",
}

PLATFORM_NAMES: Dict[int, str] = {
    PID_UNICODE: "Unicode",
    PID_MAC: "Macintosh",
    2: "ISO",
    PID_WIN: "Windows",
    4: "Custom",
}

HEADER_SIZE = 6
RECORD_SIZE = 12


def describe_name_id(name_id: int) -> str:
    """
    Human-readable label for a name ID.

    Examples:
        >>> describe_name_id(4)
        'Full Font Name'
        >>> describe_name_id(256)
        'Font-specific (256)'
    """
    if name_id in NAME_IDS:
        return NAME_IDS[name_id]
    if name_id >= 256:
        return f"Font-specific ({name_id})"
    return f"Reserved ({name_id})"


@dataclass(frozen=True)
class NameTableHeader:
    """The 6-byte header at the start of every name table."""

    format_selector: int
    record_count: int
    string_storage_offset: int

    @classmethod
    def from_bytes(cls, data: bytes) -> "NameTableHeader":
        fmt, count, storage = read_u16_array(data, 0, 3)
        return cls(
            format_selector=fmt, record_count=count, string_storage_offset=storage
        )

    @property
    def records_end(self) -> int:
        """Offset just past the record array."""
        return HEADER_SIZE + self.record_count * RECORD_SIZE


@dataclass(frozen=True)
class NameRecord:
    """
    One entry of the name table's record array.

    ``offset`` is relative to the header's string storage offset; use
    ``string_range`` to get absolute positions in the table buffer.
    ``index`` is the record's position in on-disk order.
    """

    platform_id: int
    encoding_id: int
    language_id: int
    name_id: int
    length: int
    offset: int
    index: int = 0

    @classmethod
    def from_bytes(cls, data: bytes, position: int, index: int = 0) -> "NameRecord":
        """
        Decode the 12-byte record starting at ``position``.

        Raises:
            OutOfBoundsError: fewer than 12 bytes remain at ``position``
        """
        pid, eid, lang, nid, length, offset = read_u16_array(data, position, 6)
        return cls(
            platform_id=pid,
            encoding_id=eid,
            language_id=lang,
            name_id=nid,
            length=length,
            offset=offset,
            index=index,
        )

    @property
    def key(self) -> Tuple[int, int, int, int]:
        return (self.platform_id, self.encoding_id, self.language_id, self.name_id)

    @property
    def platform_encoding(self) -> Tuple[int, int]:
        return (self.platform_id, self.encoding_id)

    def string_range(self, string_storage_offset: int) -> Tuple[int, int]:
        """Absolute ``(start, end)`` of this record's string in the table."""
        start = string_storage_offset + self.offset
        return (start, start + self.length)

    def fits(self, string_storage_offset: int, table_length: int) -> bool:
        """True when the record's string lies entirely inside the table."""
        return self.string_range(string_storage_offset)[1] <= table_length

    def __str__(self) -> str:
        return (
            f"nameID={self.name_id}, "
            f"platformID={self.platform_id}, "
            f"platEncID={self.encoding_id}, "
            f"langID=0x{self.language_id:x}"
        )


__all__ = [
    "PID_UNICODE",
    "PID_MAC",
    "PID_WIN",
    "EID_MAC_ROMAN",
    "EID_WIN_SYMBOL",
    "EID_UNICODE_BMP",
    "EID_WIN_UCS4",
    "LANG_EN_US_INT",
    "LANG_MAC_ENGLISH",
    "NAME_ID_COPYRIGHT",
    "NAME_ID_FAMILY",
    "NAME_ID_SUBFAMILY",
    "NAME_ID_UNIQUE",
    "NAME_ID_FULL_NAME",
    "NAME_ID_VERSION",
    "NAME_ID_POSTSCRIPT",
    "NAME_ID_TYPOGRAPHIC_FAMILY",
    "NAME_ID_TYPOGRAPHIC_SUBFAMILY",
    "NAME_IDS",
    "PLATFORM_NAMES",
    "HEADER_SIZE",
    "RECORD_SIZE",
    "describe_name_id",
    "NameTableHeader",
    "NameRecord",
]
