#!/usr/bin/env python3
"""
Defaults and optional TOML configuration for name extraction tooling.

All keys are optional; anything left out falls back to the module defaults.
Command-line flags override file values (see ``ExtractorConfig.merged``).

Example ``fontname.toml``:
    [selection]
    name_id = 4
    preset = "default"          # or: prefer = [[3, 1], [1, 0]]
    ranked = true               # presets rank by default, prefer lists do not
    language_id = 1033

    [source]
    backend = "auto"
    font_number = 0

    [output]
    json = false
    recursive = false

Usage:
    from FontNameCore.core_config import load_config

    config = load_config("fontname.toml")
    policy = config.policy()
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from FontNameCore.core_error_handling import ErrorContext, NameTableError
from FontNameCore.core_logging_config import get_logger
from FontNameCore.core_name_record import NAME_ID_FULL_NAME
from FontNameCore.core_record_selection import (
    DEFAULT_PRESET,
    PRESETS,
    SelectionPolicy,
    resolve_policy,
)

logger = get_logger(__name__)

DEFAULT_NAME_ID = NAME_ID_FULL_NAME
DEFAULT_BACKEND = "auto"
BACKEND_CHOICES = ("auto", "sfnt", "fonttools")

_SECTIONS: Dict[str, Tuple[str, ...]] = {
    "selection": ("name_id", "preset", "prefer", "ranked", "language_id"),
    "source": ("backend", "font_number"),
    "output": ("json", "recursive"),
}


class ConfigError(NameTableError):
    """Invalid configuration file or option value."""

    kind = "config"
    context = ErrorContext.CONFIG


@dataclass(frozen=True)
class ExtractorConfig:
    name_id: int = DEFAULT_NAME_ID
    preset: str = DEFAULT_PRESET
    prefer: Optional[Tuple[Tuple[int, int], ...]] = None
    ranked: Optional[bool] = None
    language_id: Optional[int] = None
    backend: str = DEFAULT_BACKEND
    font_number: int = 0
    json: bool = False
    recursive: bool = False

    def __post_init__(self):
        if not 0 <= self.name_id <= 0xFFFF:
            raise ConfigError(f"name_id must fit in 16 bits, got {self.name_id}")
        if self.preset.lower() not in PRESETS:
            available = ", ".join(sorted(PRESETS))
            raise ConfigError(
                f"Unknown preset: '{self.preset}'. Available: {available}"
            )
        if self.backend not in BACKEND_CHOICES:
            raise ConfigError(
                f"Unknown backend: '{self.backend}'. "
                f"Available: {', '.join(BACKEND_CHOICES)}"
            )
        if self.font_number < 0:
            raise ConfigError(f"font_number must be >= 0, got {self.font_number}")

    def policy(self) -> SelectionPolicy:
        """Selection policy described by this configuration."""
        try:
            return resolve_policy(
                preset=self.preset,
                pairs=self.prefer,
                ranked=self.ranked,
                language_id=self.language_id,
            )
        except ValueError as e:
            raise ConfigError(str(e)) from e

    def merged(self, **overrides: Any) -> "ExtractorConfig":
        """Copy with every override that is not None applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        if "preset" in changes and "prefer" not in changes:
            # An explicit preset replaces pairs inherited from the file
            changes["prefer"] = None
        return replace(self, **changes)


def _expect(value: Any, types, key: str) -> Any:
    # bool is an int subclass; keep them apart
    if isinstance(value, bool) and bool not in types:
        raise ConfigError(f"'{key}' must be {types[0].__name__}, got {value!r}")
    if not isinstance(value, types):
        raise ConfigError(f"'{key}' must be {types[0].__name__}, got {value!r}")
    return value


def _parse_prefer(value: Any) -> Tuple[Tuple[int, int], ...]:
    if not isinstance(value, list) or not value:
        raise ConfigError("'selection.prefer' must be a non-empty list of [pid, eid]")
    pairs: List[Tuple[int, int]] = []
    for item in value:
        if (
            not isinstance(item, list)
            or len(item) != 2
            or not all(isinstance(v, int) and not isinstance(v, bool) for v in item)
        ):
            raise ConfigError(f"Invalid platform/encoding pair in prefer: {item!r}")
        pairs.append((item[0], item[1]))
    return tuple(pairs)


def config_from_dict(raw: Dict[str, Any]) -> ExtractorConfig:
    """
    Build a config from parsed TOML.

    Raises:
        ConfigError: unknown section/key or wrongly typed value
    """
    values: Dict[str, Any] = {}
    for section, table in raw.items():
        if section not in _SECTIONS:
            raise ConfigError(f"Unknown config section: [{section}]")
        if not isinstance(table, dict):
            raise ConfigError(f"[{section}] must be a table")
        for key, value in table.items():
            if key not in _SECTIONS[section]:
                raise ConfigError(f"Unknown key '{key}' in [{section}]")
            dotted = f"{section}.{key}"
            if key == "prefer":
                values[key] = _parse_prefer(value)
            elif key in ("name_id", "language_id", "font_number"):
                values[key] = _expect(value, (int,), dotted)
            elif key in ("preset", "backend"):
                values[key] = _expect(value, (str,), dotted)
            else:
                values[key] = _expect(value, (bool,), dotted)

    config = ExtractorConfig(**values)
    # Surface bad pairs/language now rather than at first lookup
    config.policy()
    return config


def load_config(path: Optional[Union[str, Path]] = None) -> ExtractorConfig:
    """
    Load configuration from a TOML file, or return defaults when ``path`` is None.

    Raises:
        ConfigError: unreadable file, invalid TOML, or invalid values
    """
    if path is None:
        return ExtractorConfig()

    try:
        with open(path, "rb") as f:
            raw = tomllib.load(f)
    except OSError as e:
        raise ConfigError(
            f"Cannot read config {path}: {e.strerror or e}", path=str(path)
        ) from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}", path=str(path)) from e

    config = config_from_dict(raw)
    logger.debug(f"Loaded config from {path}: {config}")
    return config


__all__ = [
    "DEFAULT_NAME_ID",
    "DEFAULT_BACKEND",
    "BACKEND_CHOICES",
    "ConfigError",
    "ExtractorConfig",
    "config_from_dict",
    "load_config",
]
