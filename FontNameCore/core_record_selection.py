#!/usr/bin/env python3
"""
Configurable record selection for name table lookups.

A SelectionPolicy holds an ordered list of acceptable platform/encoding
pairs. For a caller-supplied pair list the first record in on-disk order whose
pair is anywhere in the list wins; a ranked policy instead tries the pairs in
list order and only falls back to the next pair when the current one has no
record. Named presets are ranked, so "default" prefers Windows Unicode over
the Mac records that precede it on disk.

Usage:
    from FontNameCore.core_record_selection import SelectionPolicy, get_preset

    policy = SelectionPolicy.from_pairs([(3, 1), (1, 0)])
    record = policy.select(table.records, name_id=4)

    # Windows first, Mac only as a fallback (presets are ranked)
    policy = get_preset("default")

    # First qualifying record on disk, whatever its pair
    policy = get_preset("default").with_options(ranked=False)

    # CLI / config form
    policy = SelectionPolicy.from_pairs(parse_preference("3,1;1,0"))
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Dict, Iterable, Iterator, List, NamedTuple, Optional, Sequence, Tuple

from FontNameCore.core_logging_config import get_logger
from FontNameCore.core_name_record import (
    EID_MAC_ROMAN,
    EID_UNICODE_BMP,
    EID_WIN_SYMBOL,
    EID_WIN_UCS4,
    PID_MAC,
    PID_UNICODE,
    PID_WIN,
    NameRecord,
)

logger = get_logger(__name__)


class PlatformEncoding(NamedTuple):
    platform_id: int
    encoding_id: int

    def __str__(self) -> str:
        return f"{self.platform_id},{self.encoding_id}"


WINDOWS_UNICODE_BMP = PlatformEncoding(PID_WIN, EID_UNICODE_BMP)
WINDOWS_SYMBOL = PlatformEncoding(PID_WIN, EID_WIN_SYMBOL)
WINDOWS_UCS4 = PlatformEncoding(PID_WIN, EID_WIN_UCS4)
MAC_ROMAN = PlatformEncoding(PID_MAC, EID_MAC_ROMAN)

# Unicode platform encodings, most specific first
UNICODE_PAIRS: Tuple[PlatformEncoding, ...] = tuple(
    PlatformEncoding(PID_UNICODE, eid) for eid in (3, 4, 0, 1, 2, 6)
)


def _check_u16(value: int, label: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{label} must be an integer, got {value!r}")
    if not 0 <= value <= 0xFFFF:
        raise ValueError(f"{label} must fit in 16 bits, got {value}")
    return value


@dataclass(frozen=True)
class SelectionPolicy:
    """
    Immutable selection criteria for name records.

    Attributes:
        pairs: acceptable (platform_id, encoding_id) pairs in priority order
        ranked: honor ``pairs`` priority before on-disk record order
        language_id: when set, only records with this language ID qualify
    """

    pairs: Tuple[PlatformEncoding, ...]
    ranked: bool = False
    language_id: Optional[int] = None

    def __post_init__(self):
        if not self.pairs:
            raise ValueError(
                "selection policy needs at least one platform/encoding pair"
            )
        for pair in self.pairs:
            _check_u16(pair.platform_id, "platform_id")
            _check_u16(pair.encoding_id, "encoding_id")
        if self.language_id is not None:
            _check_u16(self.language_id, "language_id")

    @classmethod
    def from_pairs(
        cls,
        pairs: Iterable[Tuple[int, int]],
        ranked: bool = False,
        language_id: Optional[int] = None,
    ) -> "SelectionPolicy":
        """
        Create a policy from plain tuples, dropping repeated pairs.

        Examples:
            >>> SelectionPolicy.from_pairs([(3, 1), (1, 0), (3, 1)]).pairs
            (PlatformEncoding(platform_id=3, encoding_id=1), PlatformEncoding(platform_id=1, encoding_id=0))
        """
        seen: List[PlatformEncoding] = []
        for pid, eid in pairs:
            pair = PlatformEncoding(pid, eid)
            if pair not in seen:
                seen.append(pair)
        return cls(pairs=tuple(seen), ranked=ranked, language_id=language_id)

    def with_options(
        self, ranked: Optional[bool] = None, language_id: Optional[int] = None
    ) -> "SelectionPolicy":
        """Copy of this policy with ranking and/or a language filter changed."""
        changes: Dict[str, object] = {}
        if ranked is not None:
            changes["ranked"] = ranked
        if language_id is not None:
            changes["language_id"] = language_id
        return replace(self, **changes)

    def accepts(self, platform_id: int, encoding_id: int) -> bool:
        return (platform_id, encoding_id) in self.pairs

    def matches(self, record: NameRecord, name_id: Optional[int] = None) -> bool:
        """
        Check whether a record qualifies under this policy.

        Args:
            record: record to check
            name_id: when given, the record's name ID must equal it
        """
        if name_id is not None and record.name_id != name_id:
            return False
        if self.language_id is not None and record.language_id != self.language_id:
            return False
        return self.accepts(record.platform_id, record.encoding_id)

    def iter_matches(
        self, records: Sequence[NameRecord], name_id: int
    ) -> Iterator[NameRecord]:
        """Yield qualifying records in selection order."""
        if not self.ranked:
            for record in records:
                if self.matches(record, name_id):
                    yield record
            return
        for pair in self.pairs:
            for record in records:
                if record.platform_encoding == pair and self.matches(record, name_id):
                    yield record

    def select(
        self, records: Sequence[NameRecord], name_id: int
    ) -> Optional[NameRecord]:
        """
        Pick the record for ``name_id``; None when nothing qualifies.

        Unranked: first qualifying record in on-disk order.
        Ranked: first record (on-disk order) of the highest-priority pair
        that has one.
        """
        for record in self.iter_matches(records, name_id):
            logger.debug(f"Selected record #{record.index}: {record}")
            return record
        return None

    def __str__(self) -> str:
        text = ";".join(str(p) for p in self.pairs)
        if self.ranked:
            text += " (ranked)"
        if self.language_id is not None:
            text += f" lang=0x{self.language_id:x}"
        return text


# ============================================================================
# PRESETS
# ============================================================================

PRESETS: Dict[str, Tuple[PlatformEncoding, ...]] = {
    "windows": (WINDOWS_UNICODE_BMP,),
    "mac": (MAC_ROMAN,),
    "unicode": UNICODE_PAIRS,
    "default": (
        WINDOWS_UNICODE_BMP,
        WINDOWS_UCS4,
        PlatformEncoding(PID_UNICODE, 3),
        PlatformEncoding(PID_UNICODE, 4),
        MAC_ROMAN,
    ),
    "any": (WINDOWS_UNICODE_BMP, WINDOWS_UCS4, WINDOWS_SYMBOL)
    + UNICODE_PAIRS
    + (MAC_ROMAN,),
}

DEFAULT_PRESET = "default"


def get_preset(name: str) -> SelectionPolicy:
    """
    Look up a named preset as a ranked policy.

    Raises:
        ValueError: unknown preset name
    """
    try:
        pairs = PRESETS[name.lower()]
    except KeyError:
        available = ", ".join(sorted(PRESETS))
        raise ValueError(f"Unknown preset: '{name}'. Available: {available}") from None
    return SelectionPolicy(pairs=pairs, ranked=True)


def parse_preference(text: str) -> List[PlatformEncoding]:
    """
    Parse a preference string like ``"3,1;1,0"`` into pairs.

    Pairs are separated by ``;`` (or whitespace), IDs within a pair by ``,``
    or ``:``. Hex IDs (``0x3``) are accepted.

    Examples:
        >>> parse_preference("3,1; 1:0")
        [PlatformEncoding(platform_id=3, encoding_id=1), PlatformEncoding(platform_id=1, encoding_id=0)]
    """
    pairs: List[PlatformEncoding] = []
    for chunk in text.replace(";", " ").split():
        parts = chunk.replace(":", ",").split(",")
        if len(parts) != 2:
            raise ValueError(
                f"Invalid platform/encoding pair '{chunk}', expected PID,EID"
            )
        try:
            pid, eid = (int(p, 0) for p in parts)
        except ValueError:
            raise ValueError(f"Invalid platform/encoding pair '{chunk}'") from None
        _check_u16(pid, "platform_id")
        _check_u16(eid, "encoding_id")
        pairs.append(PlatformEncoding(pid, eid))
    if not pairs:
        raise ValueError(f"No platform/encoding pairs in '{text}'")
    return pairs


def resolve_policy(
    preset: Optional[str] = None,
    pairs: Optional[Iterable[Tuple[int, int]]] = None,
    ranked: Optional[bool] = None,
    language_id: Optional[int] = None,
) -> SelectionPolicy:
    """
    Build a policy from explicit pairs, or a preset, or the default preset.

    Explicit pairs win over a preset. When ``ranked`` is None, explicit pairs
    are matched in on-disk order and presets keep their ranking.
    """
    if pairs is not None:
        return SelectionPolicy.from_pairs(
            pairs, ranked=bool(ranked), language_id=language_id
        )
    base = get_preset(preset or DEFAULT_PRESET)
    return base.with_options(ranked=ranked, language_id=language_id)


def coerce_policy(prefer) -> SelectionPolicy:
    """Accept a SelectionPolicy, a preset name, a pair list or None (default)."""
    if prefer is None:
        return get_preset(DEFAULT_PRESET)
    if isinstance(prefer, SelectionPolicy):
        return prefer
    if isinstance(prefer, str):
        return get_preset(prefer)
    return SelectionPolicy.from_pairs(prefer)


__all__ = [
    "PlatformEncoding",
    "SelectionPolicy",
    "WINDOWS_UNICODE_BMP",
    "WINDOWS_SYMBOL",
    "WINDOWS_UCS4",
    "MAC_ROMAN",
    "UNICODE_PAIRS",
    "PRESETS",
    "DEFAULT_PRESET",
    "get_preset",
    "parse_preference",
    "resolve_policy",
    "coerce_policy",
]
