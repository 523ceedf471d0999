#!/usr/bin/env python3
"""
Decode name record bytes according to their platform/encoding pair.

The character encoding of a name string is implied by the record's
(platform_id, encoding_id). Only pairs with a well-defined rule are decoded;
everything else raises UnsupportedEncodingError instead of guessing.

Supported:
    Windows  (3, 0) symbol, (3, 1) Unicode BMP, (3, 10) UCS-4  -> UTF-16BE
    Unicode  (0, 0..6)                                         -> UTF-16BE
    Macintosh (1, 0) Roman                                     -> Mac Roman
"""

from __future__ import annotations

from enum import Enum

from FontNameCore.core_error_handling import (
    ErrorContext,
    MalformedTableError,
    UnsupportedEncodingError,
)
from FontNameCore.core_name_record import (
    EID_MAC_ROMAN,
    EID_UNICODE_BMP,
    EID_WIN_SYMBOL,
    EID_WIN_UCS4,
    PID_MAC,
    PID_UNICODE,
    PID_WIN,
)


class NameEncoding(Enum):
    """Encodings a name string can be stored in; value is the Python codec."""

    UTF16_BE = "utf-16-be"
    MAC_ROMAN = "mac-roman"

    @property
    def codec(self) -> str:
        return self.value


_WINDOWS_UTF16 = {EID_WIN_SYMBOL, EID_UNICODE_BMP, EID_WIN_UCS4}
_UNICODE_UTF16 = {0, 1, 2, 3, 4, 5, 6}


def encoding_for(platform_id: int, encoding_id: int) -> NameEncoding:
    """
    Resolve the encoding for a platform/encoding pair.

    Raises:
        UnsupportedEncodingError: no decoding rule for the pair

    Examples:
        >>> encoding_for(3, 1)
        <NameEncoding.UTF16_BE: 'utf-16-be'>
        >>> encoding_for(1, 0)
        <NameEncoding.MAC_ROMAN: 'mac-roman'>
    """
    if platform_id == PID_WIN and encoding_id in _WINDOWS_UTF16:
        return NameEncoding.UTF16_BE
    if platform_id == PID_UNICODE and encoding_id in _UNICODE_UTF16:
        return NameEncoding.UTF16_BE
    if platform_id == PID_MAC and encoding_id == EID_MAC_ROMAN:
        return NameEncoding.MAC_ROMAN
    raise UnsupportedEncodingError(
        f"No decoding rule for platformID={platform_id}, platEncID={encoding_id}",
        platform_id=platform_id,
        encoding_id=encoding_id,
    )


def is_supported(platform_id: int, encoding_id: int) -> bool:
    try:
        encoding_for(platform_id, encoding_id)
    except UnsupportedEncodingError:
        return False
    return True


def decode(raw: bytes, platform_id: int, encoding_id: int) -> str:
    """
    Decode raw name bytes to text.

    Args:
        raw: the record's string bytes
        platform_id: record platform ID
        encoding_id: record encoding ID

    Returns:
        Decoded string (may be empty if the record itself is empty)

    Raises:
        UnsupportedEncodingError: pair has no decoding rule
        MalformedTableError: bytes are not valid in the pair's encoding
            (odd UTF-16 length, unpaired surrogate)
    """
    encoding = encoding_for(platform_id, encoding_id)
    try:
        return bytes(raw).decode(encoding.codec)
    except UnicodeDecodeError as e:
        raise MalformedTableError(
            f"Invalid {encoding.codec} string data: {e.reason}",
            context=ErrorContext.DECODING,
            platform_id=platform_id,
            encoding_id=encoding_id,
            length=len(raw),
        ) from e


def encode(text: str, platform_id: int, encoding_id: int) -> bytes:
    """
    Encode text the way a record with this pair stores it.

    Raises:
        UnsupportedEncodingError: pair has no rule, or text is not representable
    """
    encoding = encoding_for(platform_id, encoding_id)
    try:
        return text.encode(encoding.codec)
    except UnicodeEncodeError as e:
        raise UnsupportedEncodingError(
            f"Text not representable in {encoding.codec}: {e.reason}",
            platform_id=platform_id,
            encoding_id=encoding_id,
        ) from e


__all__ = [
    "NameEncoding",
    "encoding_for",
    "is_supported",
    "decode",
    "encode",
]
