#!/usr/bin/env python3
"""
Parser for the sfnt ``name`` table.

Takes the raw bytes of a name table (header at offset 0) and resolves name
strings by name ID under a SelectionPolicy. Parsing is pure: nothing is
cached or shared between calls, and every read is bound-checked.

Usage:
    from FontNameCore.core_name_table import find_name, parse_name_table

    # One-shot lookup
    full_name = find_name(table_bytes, 4, prefer=[(3, 1), (1, 0)])

    # Several lookups on the same table
    table = parse_name_table(table_bytes)
    family = table.get_name(1)
    ranges = table.as_mapping()

Errors (see core_error_handling):
    MalformedTableError     buffer too short for header or records
    OutOfBoundsError        record string range past the buffer (a Malformed)
    UnsupportedFormatError  format selector is not 0
    NameNotFoundError       no record matches name ID + preference list
    UnsupportedEncodingError  matched record has no decoding rule
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Tuple, Union

from FontNameCore.core_byte_order import read_u16_array
from FontNameCore.core_error_handling import (
    ErrorContext,
    MalformedTableError,
    NameNotFoundError,
    NameTableError,
    OutOfBoundsError,
    UnsupportedFormatError,
)
from FontNameCore.core_logging_config import get_logger
from FontNameCore.core_name_record import (
    HEADER_SIZE,
    NameRecord,
    NameTableHeader,
    describe_name_id,
)
from FontNameCore.core_record_selection import coerce_policy
from FontNameCore.core_string_decoder import decode

logger = get_logger(__name__)

SUPPORTED_FORMAT = 0

NameKey = Tuple[int, int, int, int]
ByteRange = Tuple[int, int]
BytesLike = Union[bytes, bytearray, memoryview]


@dataclass(frozen=True)
class NameTable:
    """
    A parsed name table: header, records in on-disk order, and the buffer.

    Record string ranges are not validated up front; a record whose range
    runs past the buffer is skipped by ``as_mapping`` and reported as
    OutOfBoundsError when it is the one being read.
    """

    header: NameTableHeader
    records: Tuple[NameRecord, ...]
    data: bytes

    def __len__(self) -> int:
        return len(self.records)

    def string_range(self, record: NameRecord) -> ByteRange:
        return record.string_range(self.header.string_storage_offset)

    def raw_string(self, record: NameRecord) -> bytes:
        """
        Raw string bytes of ``record``.

        Raises:
            OutOfBoundsError: the range lies outside the table
        """
        start, end = self.string_range(record)
        if end > len(self.data):
            raise OutOfBoundsError(
                f"String for record #{record.index} ({record}) spans bytes "
                f"{start}..{end}, past the end of a {len(self.data)}-byte table",
                index=record.index,
                start=start,
                end=end,
                table_length=len(self.data),
            )
        return self.data[start:end]

    def decode_record(self, record: NameRecord) -> str:
        return decode(self.raw_string(record), record.platform_id, record.encoding_id)

    def as_mapping(self) -> Dict[NameKey, ByteRange]:
        """
        Map ``(platform_id, encoding_id, language_id, name_id)`` to the
        absolute byte range of each usable record's string.

        The first record wins when a key repeats.
        """
        mapping: Dict[NameKey, ByteRange] = {}
        for record in self.records:
            if not record.fits(self.header.string_storage_offset, len(self.data)):
                logger.debug(
                    f"Skipping record #{record.index} ({record}): string out of range"
                )
                continue
            mapping.setdefault(record.key, self.string_range(record))
        return mapping

    def find_record(self, name_id: int, prefer=None) -> NameRecord:
        """
        Select the record for ``name_id``.

        Args:
            name_id: requested name identifier
            prefer: SelectionPolicy, preset name, list of (pid, eid) pairs,
                or None for the default preset

        Raises:
            NameNotFoundError: no qualifying record
        """
        policy = coerce_policy(prefer)
        record = policy.select(self.records, name_id)
        if record is None:
            raise NameNotFoundError(
                f"No record for nameID={name_id} ({describe_name_id(name_id)}) "
                f"with platform/encoding in [{policy}]",
                name_id=name_id,
                preference=str(policy),
            )
        return record

    def get_name(self, name_id: int, prefer=None) -> str:
        """Resolve ``name_id`` to text (see ``find_name``)."""
        return self.decode_record(self.find_record(name_id, prefer))

    def iter_names(
        self,
    ) -> Iterator[Tuple[NameRecord, Optional[str], Optional[NameTableError]]]:
        """
        Decode every record in on-disk order.

        Yields ``(record, text, None)`` for decodable records and
        ``(record, None, error)`` for the rest, so one bad record does not
        hide the others.
        """
        for record in self.records:
            try:
                yield record, self.decode_record(record), None
            except NameTableError as e:
                yield record, None, e


def parse_header(data: BytesLike) -> NameTableHeader:
    """
    Read and validate the name table header.

    Raises:
        MalformedTableError: fewer than 6 bytes, or string storage offset
            beyond the buffer
        UnsupportedFormatError: format selector is not 0
    """
    if len(data) < HEADER_SIZE:
        raise MalformedTableError(
            f"name table is {len(data)} bytes, "
            f"shorter than its {HEADER_SIZE}-byte header",
            context=ErrorContext.HEADER,
            table_length=len(data),
        )
    header = NameTableHeader.from_bytes(data)
    if header.format_selector != SUPPORTED_FORMAT:
        raise UnsupportedFormatError(
            f"Unsupported name table format {header.format_selector}",
            format_selector=header.format_selector,
        )
    if header.string_storage_offset > len(data):
        raise MalformedTableError(
            f"String storage offset {header.string_storage_offset} is past the end "
            f"of a {len(data)}-byte table",
            context=ErrorContext.HEADER,
            string_storage_offset=header.string_storage_offset,
            table_length=len(data),
        )
    return header


def parse_name_table(data: BytesLike) -> NameTable:
    """
    Parse header and record array.

    Args:
        data: name table bytes starting at the table's byte 0

    Returns:
        NameTable holding an immutable copy of ``data``

    Raises:
        MalformedTableError: header or record array truncated
        UnsupportedFormatError: format selector is not 0
    """
    data = bytes(data)
    header = parse_header(data)

    if header.records_end > len(data):
        raise MalformedTableError(
            f"name table declares {header.record_count} records "
            f"({header.records_end} bytes) but holds only {len(data)} bytes",
            record_count=header.record_count,
            table_length=len(data),
        )

    # One bounds-checked read for the whole array, sliced into 6-field rows
    fields = read_u16_array(data, HEADER_SIZE, header.record_count * 6)
    records = tuple(
        NameRecord(*fields[i * 6 : i * 6 + 6], index=i)
        for i in range(header.record_count)
    )
    logger.debug(
        f"Parsed name table: format={header.format_selector}, "
        f"records={header.record_count}, storage={header.string_storage_offset}"
    )
    return NameTable(header=header, records=records, data=data)


def find_record(data: BytesLike, name_id: int, prefer=None) -> NameRecord:
    """Parse ``data`` and return the selected record for ``name_id``."""
    return parse_name_table(data).find_record(name_id, prefer)


def find_name(data: BytesLike, name_id: int, prefer=None) -> str:
    """
    Resolve one name string from raw name table bytes.

    With a pair list, scans records in on-disk order and returns the first
    whose name ID matches and whose platform/encoding pair is in the list.
    Presets (and the default) are ranked, so Windows Unicode wins over Mac.

    Args:
        data: name table bytes
        name_id: requested name identifier (4 = full font name)
        prefer: SelectionPolicy, preset name, ordered (pid, eid) pairs,
            or None for the default preset

    Returns:
        Decoded string

    Examples:
        >>> find_name(table_bytes, 4, prefer=[(3, 1)])
        'Example Font'
    """
    return parse_name_table(data).get_name(name_id, prefer)


__all__ = [
    "SUPPORTED_FORMAT",
    "NameTable",
    "parse_header",
    "parse_name_table",
    "find_record",
    "find_name",
]
