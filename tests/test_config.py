"""Tests for TOML configuration loading."""

import pytest

from FontNameCore.core_config import (
    DEFAULT_NAME_ID,
    ConfigError,
    ExtractorConfig,
    config_from_dict,
    load_config,
)
from FontNameCore.core_error_handling import ErrorContext
from FontNameCore.core_record_selection import PRESETS


def _write(tmp_path, text):
    path = tmp_path / "fontname.toml"
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults():
    config = load_config(None)
    assert config.name_id == DEFAULT_NAME_ID == 4
    assert config.backend == "auto"
    assert config.policy().pairs == PRESETS["default"]
    assert config.policy().ranked


def test_full_file(tmp_path):
    path = _write(
        tmp_path,
        """
[selection]
name_id = 1
prefer = [[3, 1], [1, 0]]
ranked = true
language_id = 1033

[source]
backend = "fonttools"
font_number = 2

[output]
json = true
recursive = true
""",
    )
    config = load_config(path)
    assert config.name_id == 1
    assert config.font_number == 2
    assert config.json and config.recursive
    policy = config.policy()
    assert policy.pairs == ((3, 1), (1, 0))
    assert policy.ranked
    assert policy.language_id == 0x409


def test_preset_in_file(tmp_path):
    config = load_config(_write(tmp_path, '[selection]\npreset = "mac"\n'))
    assert config.policy().pairs == ((1, 0),)
    assert config.policy().ranked


def test_prefer_in_file_keeps_disk_order(tmp_path):
    config = load_config(_write(tmp_path, "[selection]\nprefer = [[3, 1], [1, 0]]\n"))
    assert not config.policy().ranked


@pytest.mark.parametrize(
    "text",
    [
        "[display]\ncolor = true\n",
        "[selection]\nnameid = 4\n",
        '[selection]\nname_id = "four"\n',
        "[selection]\nname_id = true\n",
        "[selection]\nname_id = 70000\n",
        '[selection]\npreset = "linux"\n',
        "[selection]\nprefer = [[3]]\n",
        "[selection]\nprefer = []\n",
        "[selection]\nlanguage_id = -1\n",
        '[source]\nbackend = "gdi"\n',
        "[source]\nfont_number = -1\n",
        "[output]\njson = 1\n",
        "selection = 4\n",
    ],
)
def test_invalid_values(tmp_path, text):
    with pytest.raises(ConfigError) as excinfo:
        load_config(_write(tmp_path, text))
    assert excinfo.value.context is ErrorContext.CONFIG
    assert excinfo.value.kind == "config"


def test_invalid_toml(tmp_path):
    with pytest.raises(ConfigError, match="Invalid TOML"):
        load_config(_write(tmp_path, "[selection\n"))


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="Cannot read config"):
        load_config(tmp_path / "missing.toml")


def test_merged_overrides():
    base = config_from_dict({"selection": {"prefer": [[1, 0]], "name_id": 1}})
    merged = base.merged(name_id=None, backend="sfnt", ranked=True)
    assert merged.name_id == 1
    assert merged.backend == "sfnt"
    assert merged.ranked
    assert merged.prefer == ((1, 0),)


def test_merged_preset_replaces_file_pairs():
    base = config_from_dict({"selection": {"prefer": [[1, 0]]}})
    assert base.merged(preset="windows").policy().pairs == ((3, 1),)


def test_merged_validates():
    with pytest.raises(ConfigError):
        ExtractorConfig().merged(backend="gdi")
