#!/usr/bin/env python3
"""
High-level name extraction from font files.

Ties a Font Table Source to the name table parser. Every function opens the
font, copies the name table out, releases the file, and only then parses, so
no result depends on an open resource.

Usage:
    from FontNameCore.core_font_names import get_full_font_name, list_font_names

    get_full_font_name("Inter-Bold.ttf")                # 'Inter Bold'
    get_font_name("Inter-Bold.ttf", 1, prefer="mac")    # family from Mac record

    for entry in list_font_names("Family.ttc", font_number=1):
        print(entry.record, entry.text or entry.error)

    # Name table dumped to its own file
    resolve_font_name("name.bin", 4, backend="raw")
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from FontNameCore.core_error_handling import NameTableError
from FontNameCore.core_logging_config import get_logger
from FontNameCore.core_name_record import (
    NAME_ID_FULL_NAME,
    NameRecord,
    describe_name_id,
)
from FontNameCore.core_name_table import parse_name_table
from FontNameCore.core_record_selection import coerce_policy
from FontNameCore.core_table_source import (
    DEFAULT_BACKEND,
    NAME_TABLE_TAG,
    BytesTableSource,
    open_table_source,
)

logger = get_logger(__name__)

RAW_BACKEND = "raw"

PathLike = Union[str, Path]


@dataclass
class ResolvedName:
    """
    Outcome of resolving one name record.

    Exactly one of ``text`` and ``error`` is set.
    """

    record: Optional[NameRecord]
    text: Optional[str] = None
    error: Optional[NameTableError] = None
    source: str = ""
    backend: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def name_id(self) -> Optional[int]:
        return self.record.name_id if self.record is not None else None

    @property
    def description(self) -> str:
        if self.record is None:
            return ""
        return describe_name_id(self.record.name_id)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"source": self.source, "backend": self.backend}
        if self.record is not None:
            data.update(
                {
                    "platform_id": self.record.platform_id,
                    "encoding_id": self.record.encoding_id,
                    "language_id": self.record.language_id,
                    "name_id": self.record.name_id,
                    "index": self.record.index,
                }
            )
        if self.error is None:
            data["text"] = self.text
        else:
            data["error"] = {"kind": self.error.kind, "message": str(self.error)}
        data.update(self.extra)
        return data


def _load_table(
    path: PathLike, backend: str, font_number: int
) -> Tuple[bytes, str]:
    """Return (name table bytes, backend that produced them)."""
    if backend == RAW_BACKEND:
        with BytesTableSource.from_file(path) as source:
            return source.read_table(NAME_TABLE_TAG), source.backend
    with open_table_source(path, backend=backend, font_number=font_number) as source:
        return source.read_table(NAME_TABLE_TAG), source.backend


def read_name_table(
    path: PathLike, backend: str = DEFAULT_BACKEND, font_number: int = 0
) -> bytes:
    """
    Raw bytes of the font's name table.

    Args:
        path: font file (or raw table dump when ``backend="raw"``)
        backend: "auto", "sfnt", "fonttools" or "raw"
        font_number: member index inside a collection

    Raises:
        SourceUnavailableError: file missing/unreadable or no name table
        MalformedTableError: corrupt table directory
    """
    data, _ = _load_table(path, backend, font_number)
    return data


def resolve_font_name(
    path: PathLike,
    name_id: int = NAME_ID_FULL_NAME,
    prefer=None,
    backend: str = DEFAULT_BACKEND,
    font_number: int = 0,
) -> ResolvedName:
    """
    Resolve one name ID and report which record and backend produced it.

    Errors propagate; use ``list_font_names`` to collect per-record failures.
    """
    data, used_backend = _load_table(path, backend, font_number)
    table = parse_name_table(data)
    record = table.find_record(name_id, prefer)
    text = table.decode_record(record)
    logger.debug(f"{path}: nameID={name_id} -> {text!r} ({record})")
    return ResolvedName(
        record=record, text=text, source=str(path), backend=used_backend
    )


def get_font_name(
    path: PathLike,
    name_id: int,
    prefer=None,
    backend: str = DEFAULT_BACKEND,
    font_number: int = 0,
) -> str:
    """
    Resolve a name ID from a font file.

    Args:
        path: font file path
        name_id: name identifier to resolve
        prefer: SelectionPolicy, preset name, (pid, eid) pairs, or None for
            the default preset
        backend: table source backend
        font_number: member index inside a collection

    Returns:
        The decoded name string

    Raises:
        NameNotFoundError: no record matches the name ID and preference
        SourceUnavailableError, MalformedTableError, UnsupportedFormatError,
        UnsupportedEncodingError: see core_error_handling
    """
    return resolve_font_name(path, name_id, prefer, backend, font_number).text


def get_full_font_name(
    path: PathLike,
    prefer=None,
    backend: str = DEFAULT_BACKEND,
    font_number: int = 0,
) -> str:
    """Full font name (name ID 4) of a font file."""
    return get_font_name(path, NAME_ID_FULL_NAME, prefer, backend, font_number)


def list_font_names(
    path: PathLike,
    prefer=None,
    backend: str = DEFAULT_BACKEND,
    font_number: int = 0,
) -> List[ResolvedName]:
    """
    Decode every record of the font's name table in on-disk order.

    Records that cannot be decoded are returned with ``error`` set instead
    of raising. When ``prefer`` is given, only records whose platform/encoding
    pair (and language, if the policy filters one) qualify are listed.
    """
    data, used_backend = _load_table(path, backend, font_number)
    table = parse_name_table(data)
    policy = coerce_policy(prefer) if prefer is not None else None

    results: List[ResolvedName] = []
    for record, text, error in table.iter_names():
        if policy is not None and not policy.matches(record):
            continue
        results.append(
            ResolvedName(
                record=record,
                text=text,
                error=error,
                source=str(path),
                backend=used_backend,
            )
        )
    return results


__all__ = [
    "RAW_BACKEND",
    "ResolvedName",
    "read_name_table",
    "resolve_font_name",
    "get_font_name",
    "get_full_font_name",
    "list_font_names",
]
