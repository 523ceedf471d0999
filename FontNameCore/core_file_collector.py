"""
core_file_collector: collect font files (and raw name table dumps) from files/dirs.

Features:
- Supports TTF, OTF, TTC, OTC, WOFF, WOFF2 by default
- Raw name table dumps via RAW_TABLE_EXTENSIONS
- Optional recursive directory scanning
- Case-insensitive extension matching
- De-duplicates and returns sorted list of absolute paths
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Set


SUPPORTED_EXTENSIONS: Set[str] = {".ttf", ".otf", ".ttc", ".otc", ".woff", ".woff2"}
COLLECTION_EXTENSIONS: Set[str] = {".ttc", ".otc"}
RAW_TABLE_EXTENSIONS: Set[str] = {".bin", ".name"}


def _normalize_paths(paths: Iterable[str | Path]) -> List[Path]:
    """Convert input paths to Path objects, expanding user paths."""
    return [Path(p).expanduser() for p in paths]


def _matches_extension(path: Path, allowed_extensions: Set[str]) -> bool:
    """Check if path has an allowed extension (case-insensitive)."""
    ext = path.suffix.lower()
    if not ext:
        return False
    return ext in {e.lower() for e in allowed_extensions}


def is_collection(path: str | Path) -> bool:
    """True for .ttc/.otc files, which hold several fonts."""
    return Path(path).suffix.lower() in COLLECTION_EXTENSIONS


def _walk_directory(directory: Path, recursive: bool) -> Iterator[Path]:
    if recursive:
        for root, dirs, files in os.walk(directory):
            dirs.sort()
            for filename in sorted(files):
                yield Path(root) / filename
        return
    try:
        entries = sorted(os.listdir(directory))
    except OSError:
        return
    for filename in entries:
        candidate = directory / filename
        if candidate.is_file():
            yield candidate


def iter_font_files(
    paths: Iterable[str | Path],
    recursive: bool = False,
    *,
    allowed_extensions: Optional[Set[str]] = None,
) -> Iterator[str]:
    """Iterate over matching file paths as they are discovered.

    - paths: files and/or directories
    - recursive: recurse into directories
    - allowed_extensions: override supported extensions; compared case-insensitively

    Explicitly named files must still carry an allowed extension.
    Paths that do not exist are skipped (see ``missing_inputs``).

    Yields:
        Absolute file paths (may repeat if inputs overlap)
    """
    allowed = allowed_extensions or SUPPORTED_EXTENSIONS
    for path_obj in _normalize_paths(paths):
        if path_obj.is_file():
            if _matches_extension(path_obj, allowed):
                yield str(path_obj.resolve())
        elif path_obj.is_dir():
            for candidate in _walk_directory(path_obj, recursive):
                if _matches_extension(candidate, allowed):
                    yield str(candidate.resolve())


def collect_font_files(
    paths: Iterable[str | Path],
    recursive: bool = False,
    *,
    allowed_extensions: Optional[Set[str]] = None,
) -> List[str]:
    """Collect font file paths from a list of files and/or directories.

    Returns:
        Sorted, de-duplicated list of absolute file paths
    """
    return sorted(
        set(
            iter_font_files(
                paths, recursive=recursive, allowed_extensions=allowed_extensions
            )
        )
    )


def missing_inputs(paths: Iterable[str | Path]) -> List[str]:
    """Inputs that are neither an existing file nor a directory."""
    return [str(p) for p in paths if not Path(p).expanduser().exists()]


__all__ = [
    "SUPPORTED_EXTENSIONS",
    "COLLECTION_EXTENSIONS",
    "RAW_TABLE_EXTENSIONS",
    "is_collection",
    "iter_font_files",
    "collect_font_files",
    "missing_inputs",
]
