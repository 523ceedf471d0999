#!/usr/bin/env python3
"""
Font table sources: turn a font file into the raw bytes of one table.

The name table parser only consumes bytes; these classes are the pluggable
collaborators that supply them. Every source is a context manager that owns
its underlying resource (file handle, fontTools reader) and releases it on
every exit path. ``read_table`` always returns an independent ``bytes`` copy,
so parsed data never depends on a released resource.

Backends:
    sfnt       SfntDirectorySource    reads the sfnt/TTC table directory itself
    fonttools  FontToolsTableSource   asks fontTools' reader for the table by tag
                                      (also handles WOFF/WOFF2)
    auto       sniff the file: WOFF/WOFF2 -> fonttools, otherwise sfnt

Usage:
    from FontNameCore.core_table_source import open_table_source

    with open_table_source("MyFont.ttf") as source:
        name_bytes = source.read_table("name")

    with open_table_source("Family.ttc", font_number=2, backend="fonttools") as source:
        name_bytes = source.read_table("name")
"""

from __future__ import annotations

import io
import os
import struct
from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO, Callable, Dict, List, NamedTuple, Optional, Union

from fontTools.ttLib import TTFont, TTLibError  # type: ignore

from FontNameCore.core_byte_order import read_tag, read_u16_be, read_u32_be
from FontNameCore.core_error_handling import (
    ErrorContext,
    MalformedTableError,
    SourceUnavailableError,
)
from FontNameCore.core_logging_config import get_logger

logger = get_logger(__name__)

NAME_TABLE_TAG = "name"

SFNT_SIGNATURES = {
    b"\x00\x01\x00\x00": "TrueType",
    b"true": "TrueType (Apple)",
    b"OTTO": "OpenType (CFF)",
}
COLLECTION_SIGNATURE = b"ttcf"
WOFF_SIGNATURES = {b"wOFF": "WOFF", b"wOF2": "WOFF2"}

OFFSET_TABLE_SIZE = 12
TABLE_RECORD_SIZE = 16

PathLike = Union[str, Path]


class TableEntry(NamedTuple):
    """One record of the sfnt table directory."""

    tag: str
    checksum: int
    offset: int
    length: int


class FontTableSource(ABC):
    """
    Interface for anything that can supply raw font table bytes by tag.

    Subclasses implement ``_has_table``/``_read_table`` and, when they hold a
    resource, ``_release``.
    """

    backend: str = "abstract"

    def __init__(self, label: str = "<memory>"):
        self.label = label
        self._closed = False

    # --- resource lifetime ---
    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._release()
        logger.debug(f"Closed {self.backend} source for {self.label}")

    def _release(self) -> None:
        """Release the underlying resource (no-op by default)."""

    def __enter__(self) -> "FontTableSource":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _ensure_open(self) -> None:
        if self._closed:
            raise SourceUnavailableError(
                f"{self.backend} source for {self.label} is already closed",
                path=self.label,
            )

    # --- table access ---
    def has_table(self, tag: str = NAME_TABLE_TAG) -> bool:
        self._ensure_open()
        return self._has_table(tag)

    def read_table(self, tag: str = NAME_TABLE_TAG) -> bytes:
        """
        Return the raw bytes of table ``tag``.

        Raises:
            SourceUnavailableError: source closed or table missing
            MalformedTableError: directory entry points outside the file
        """
        self._ensure_open()
        if not self._has_table(tag):
            raise SourceUnavailableError(
                f"{self.label} has no '{tag}' table",
                path=self.label,
                tag=tag,
            )
        data = bytes(self._read_table(tag))
        logger.debug(
            f"Read {len(data)} bytes of '{tag}' from {self.label} ({self.backend})"
        )
        return data

    @abstractmethod
    def _has_table(self, tag: str) -> bool: ...

    @abstractmethod
    def _read_table(self, tag: str) -> bytes: ...

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<{type(self).__name__} {self.label!r} ({state})>"


class BytesTableSource(FontTableSource):
    """Source over tables that are already in memory (e.g. a raw name dump)."""

    backend = "bytes"

    def __init__(self, data: bytes, tag: str = NAME_TABLE_TAG, label: str = "<memory>"):
        super().__init__(label)
        self._tables: Dict[str, bytes] = {tag: bytes(data)}

    @classmethod
    def from_file(cls, path: PathLike, tag: str = NAME_TABLE_TAG) -> "BytesTableSource":
        """Load a file that holds exactly one table's bytes."""
        try:
            data = Path(path).read_bytes()
        except OSError as e:
            raise SourceUnavailableError(
                f"Cannot read {path}: {e.strerror or e}",
                context=ErrorContext.FILE_IO,
                path=str(path),
            ) from e
        return cls(data, tag=tag, label=str(path))

    def _has_table(self, tag: str) -> bool:
        return tag in self._tables

    def _read_table(self, tag: str) -> bytes:
        return self._tables[tag]

    def _release(self) -> None:
        self._tables = {}


class SfntDirectorySource(FontTableSource):
    """
    Dependency-free source that walks the font's own table directory.

    Supports plain sfnt files (TrueType, CFF OpenType) and collections
    (``ttcf``), selecting a member with ``font_number``. Only the directory
    and the requested table are read; the file is never loaded whole.
    """

    backend = "sfnt"

    def __init__(self, font: Union[PathLike, BinaryIO], font_number: int = 0):
        if hasattr(font, "read") and hasattr(font, "seek"):
            super().__init__(getattr(font, "name", "<stream>"))
            self._file: Optional[BinaryIO] = font  # type: ignore[assignment]
            self._owns_file = False
        else:
            super().__init__(str(font))
            try:
                self._file = open(font, "rb")
            except OSError as e:
                self._closed = True
                raise SourceUnavailableError(
                    f"Cannot open {font}: {e.strerror or e}",
                    context=ErrorContext.FILE_IO,
                    path=str(font),
                ) from e
            self._owns_file = True

        self.font_number = font_number
        try:
            self._file.seek(0, io.SEEK_END)
            self._size = self._file.tell()
            self.flavor, self._entries = self._read_directory(font_number)
        except BaseException:
            self.close()
            raise

    # --- directory parsing ---
    def _read_at(self, offset: int, size: int, what: str) -> bytes:
        if offset < 0 or offset + size > self._size:
            raise MalformedTableError(
                f"{what} at offset {offset} ({size} bytes) is past the end of "
                f"{self.label} ({self._size} bytes)",
                context=ErrorContext.DIRECTORY,
                offset=offset,
                size=size,
            )
        self._file.seek(offset)
        data = self._file.read(size)
        if len(data) != size:
            raise MalformedTableError(
                f"Short read of {what} in {self.label}",
                context=ErrorContext.DIRECTORY,
            )
        return data

    def _collection_offset(self, font_number: int) -> int:
        header = self._read_at(0, 12, "collection header")
        num_fonts = read_u32_be(header, 8)
        if not 0 <= font_number < num_fonts:
            raise SourceUnavailableError(
                f"{self.label} holds {num_fonts} fonts; "
                f"font number {font_number} is out of range",
                context=ErrorContext.DIRECTORY,
                path=self.label,
                num_fonts=num_fonts,
            )
        offsets = self._read_at(12 + 4 * font_number, 4, "collection offset")
        return read_u32_be(offsets, 0)

    def _read_directory(self, font_number: int):
        if self._size < 4:
            raise MalformedTableError(
                f"{self.label} is too short to be a font",
                context=ErrorContext.DIRECTORY,
            )
        signature = self._read_at(0, 4, "signature")
        if signature in WOFF_SIGNATURES:
            raise SourceUnavailableError(
                f"{self.label} is {WOFF_SIGNATURES[signature]}; "
                "the sfnt reader needs an uncompressed font "
                "(use the fonttools backend)",
                context=ErrorContext.DIRECTORY,
                path=self.label,
            )

        base = 0
        if signature == COLLECTION_SIGNATURE:
            base = self._collection_offset(font_number)
            signature = self._read_at(base, 4, "member signature")

        if signature not in SFNT_SIGNATURES:
            raise MalformedTableError(
                f"{self.label} does not start with a known sfnt signature "
                f"({signature!r})",
                context=ErrorContext.DIRECTORY,
            )

        offset_table = self._read_at(base, OFFSET_TABLE_SIZE, "offset table")
        num_tables = read_u16_be(offset_table, 4)
        directory = self._read_at(
            base + OFFSET_TABLE_SIZE, num_tables * TABLE_RECORD_SIZE, "table directory"
        )

        entries: Dict[str, TableEntry] = {}
        for i in range(num_tables):
            pos = i * TABLE_RECORD_SIZE
            entry = TableEntry(
                tag=read_tag(directory, pos),
                checksum=read_u32_be(directory, pos + 4),
                offset=read_u32_be(directory, pos + 8),
                length=read_u32_be(directory, pos + 12),
            )
            # First entry wins for duplicated tags
            entries.setdefault(entry.tag, entry)

        logger.debug(
            f"{self.label}: {SFNT_SIGNATURES[signature]}, {num_tables} tables "
            f"at base {base}"
        )
        return SFNT_SIGNATURES[signature], entries

    # --- FontTableSource ---
    @property
    def tables(self) -> Dict[str, TableEntry]:
        return dict(self._entries)

    def _has_table(self, tag: str) -> bool:
        return tag in self._entries

    def _read_table(self, tag: str) -> bytes:
        entry = self._entries[tag]
        return self._read_at(entry.offset, entry.length, f"'{tag}' table")

    def _release(self) -> None:
        if self._owns_file and self._file is not None:
            self._file.close()
        self._file = None


class FontToolsTableSource(FontTableSource):
    """
    Source that queries fontTools' font reader for a table by its tag.

    The font is opened lazily so only the requested table is read. WOFF and
    WOFF2 are decompressed by fontTools; collections use ``font_number``.
    """

    backend = "fonttools"

    def __init__(self, font: Union[PathLike, BinaryIO], font_number: int = 0):
        label = getattr(font, "name", None) or str(font)
        super().__init__(str(label))
        self.font_number = font_number
        source = font if hasattr(font, "read") else str(font)
        try:
            self._font: Optional[TTFont] = TTFont(
                source, lazy=True, fontNumber=font_number
            )
        except OSError as e:
            self._closed = True
            raise SourceUnavailableError(
                f"Cannot open {self.label}: {e.strerror or e}",
                context=ErrorContext.FILE_IO,
                path=self.label,
            ) from e
        except (TTLibError, struct.error, EOFError, ValueError) as e:
            self._closed = True
            raise SourceUnavailableError(
                f"fontTools could not read {self.label}: {e}",
                path=self.label,
            ) from e

    @property
    def flavor(self) -> Optional[str]:
        """'woff'/'woff2' for web fonts, None for plain sfnt."""
        return self._font.flavor if self._font is not None else None

    def _has_table(self, tag: str) -> bool:
        return tag in self._font

    def _read_table(self, tag: str) -> bytes:
        try:
            return self._font.getTableData(tag)
        except (TTLibError, struct.error, EOFError, ValueError) as e:
            raise SourceUnavailableError(
                f"fontTools could not read '{tag}' from {self.label}: {e}",
                path=self.label,
                tag=tag,
            ) from e

    def _release(self) -> None:
        if self._font is not None:
            self._font.close()
        self._font = None


# ============================================================================
# BACKEND REGISTRY
# ============================================================================

SourceFactory = Callable[[PathLike, int], FontTableSource]

_BACKENDS: Dict[str, SourceFactory] = {
    "sfnt": SfntDirectorySource,
    "fonttools": FontToolsTableSource,
}

DEFAULT_BACKEND = "auto"


def register_backend(name: str, factory: SourceFactory) -> None:
    """Make another source implementation selectable by name."""
    if name == "auto":
        raise ValueError("'auto' is reserved")
    _BACKENDS[name] = factory


def available_backends() -> List[str]:
    return ["auto"] + sorted(_BACKENDS)


def sniff_signature(path: PathLike) -> bytes:
    """First four bytes of a file (fewer if the file is shorter)."""
    try:
        with open(path, "rb") as f:
            return f.read(4)
    except OSError as e:
        raise SourceUnavailableError(
            f"Cannot open {path}: {e.strerror or e}",
            context=ErrorContext.FILE_IO,
            path=str(path),
        ) from e


def resolve_backend(path: PathLike, backend: str = DEFAULT_BACKEND) -> str:
    """
    Pick the concrete backend for ``path``.

    Raises:
        ValueError: unknown backend name
    """
    if backend == "auto":
        return "fonttools" if sniff_signature(path) in WOFF_SIGNATURES else "sfnt"
    if backend not in _BACKENDS:
        available = ", ".join(available_backends())
        raise ValueError(f"Unknown backend: '{backend}'. Available: {available}")
    return backend


def open_table_source(
    path: PathLike, backend: str = DEFAULT_BACKEND, font_number: int = 0
) -> FontTableSource:
    """
    Open a font file with the requested backend.

    Use the result as a context manager so the resource is released.
    """
    if not os.path.exists(path):
        raise SourceUnavailableError(
            f"No such font file: {path}",
            context=ErrorContext.FILE_IO,
            path=str(path),
        )
    concrete = resolve_backend(path, backend)
    logger.debug(f"Opening {path} with the {concrete} backend")
    return _BACKENDS[concrete](path, font_number)


__all__ = [
    "NAME_TABLE_TAG",
    "TableEntry",
    "FontTableSource",
    "BytesTableSource",
    "SfntDirectorySource",
    "FontToolsTableSource",
    "DEFAULT_BACKEND",
    "register_backend",
    "available_backends",
    "resolve_backend",
    "open_table_source",
]
