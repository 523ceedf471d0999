"""Tests for font table sources."""

import io
import struct

import pytest

from conftest import make_collection, make_name_table, make_sfnt

from FontNameCore.core_error_handling import (
    ErrorContext,
    MalformedTableError,
    SourceUnavailableError,
)
from FontNameCore.core_name_table import find_name
from FontNameCore.core_table_source import (
    BytesTableSource,
    FontTableSource,
    FontToolsTableSource,
    SfntDirectorySource,
    available_backends,
    open_table_source,
    register_backend,
    resolve_backend,
)


# ============================================================================
# sfnt directory reader
# ============================================================================


def test_sfnt_reads_name_table(example_sfnt, example_table):
    with SfntDirectorySource(example_sfnt) as source:
        assert source.has_table("name")
        assert source.has_table("head")
        assert source.read_table("name") == example_table
        assert source.flavor == "TrueType"
        assert set(source.tables) == {"head", "name"}


@pytest.mark.parametrize(
    "signature, flavor", [(b"OTTO", "OpenType (CFF)"), (b"true", "TrueType (Apple)")]
)
def test_sfnt_signatures(tmp_path, example_table, signature, flavor):
    path = tmp_path / "font.otf"
    path.write_bytes(make_sfnt({"name": example_table}, signature=signature))
    with SfntDirectorySource(path) as source:
        assert source.flavor == flavor
        assert find_name(source.read_table("name"), 4, "windows") == "Example Font"


def test_sfnt_missing_table(example_sfnt):
    with SfntDirectorySource(example_sfnt) as source:
        with pytest.raises(SourceUnavailableError, match="no 'OS/2' table"):
            source.read_table("OS/2")


def test_sfnt_closed_source(example_sfnt):
    source = SfntDirectorySource(example_sfnt)
    with source:
        pass
    assert source.closed
    with pytest.raises(SourceUnavailableError):
        source.read_table("name")
    # Closing twice is harmless
    source.close()


def test_sfnt_from_stream(example_table):
    stream = io.BytesIO(make_sfnt({"name": example_table}))
    with SfntDirectorySource(stream) as source:
        assert source.read_table("name") == example_table
    # Streams handed in by the caller stay open
    assert not stream.closed


def test_sfnt_missing_file(tmp_path):
    with pytest.raises(SourceUnavailableError) as excinfo:
        SfntDirectorySource(tmp_path / "nope.ttf")
    assert excinfo.value.context is ErrorContext.FILE_IO


def test_sfnt_bad_signature(tmp_path):
    path = tmp_path / "bad.ttf"
    path.write_bytes(b"GIF89a" + b"\x00" * 64)
    with pytest.raises(MalformedTableError) as excinfo:
        SfntDirectorySource(path)
    assert excinfo.value.context is ErrorContext.DIRECTORY


def test_sfnt_tiny_file(tmp_path):
    path = tmp_path / "tiny.ttf"
    path.write_bytes(b"\x00\x01")
    with pytest.raises(MalformedTableError):
        SfntDirectorySource(path)


def test_sfnt_truncated_directory(tmp_path):
    path = tmp_path / "truncated.ttf"
    path.write_bytes(struct.pack(">4sHHHH", b"\x00\x01\x00\x00", 20, 0, 0, 0) + b"x" * 16)
    with pytest.raises(MalformedTableError) as excinfo:
        SfntDirectorySource(path)
    assert excinfo.value.context is ErrorContext.DIRECTORY


def test_sfnt_table_past_end_of_file(tmp_path):
    header = struct.pack(">4sHHHH", b"\x00\x01\x00\x00", 1, 0, 0, 0)
    entry = struct.pack(">4sIII", b"name", 0, 28, 4096)
    path = tmp_path / "short.ttf"
    path.write_bytes(header + entry + b"\x00" * 8)
    with SfntDirectorySource(path) as source:
        with pytest.raises(MalformedTableError):
            source.read_table("name")


@pytest.mark.parametrize("signature", [b"wOFF", b"wOF2"])
def test_sfnt_rejects_woff(tmp_path, signature):
    path = tmp_path / "web.woff"
    path.write_bytes(signature + b"\x00" * 60)
    with pytest.raises(SourceUnavailableError, match="fonttools backend"):
        SfntDirectorySource(path)


def test_collection_members(example_collection):
    names = []
    for number in (0, 1):
        with SfntDirectorySource(example_collection, font_number=number) as source:
            names.append(find_name(source.read_table("name"), 4, [(3, 1)]))
    assert names == ["Family Regular", "Family Bold"]


def test_collection_font_number_out_of_range(example_collection):
    with pytest.raises(SourceUnavailableError) as excinfo:
        SfntDirectorySource(example_collection, font_number=2)
    assert excinfo.value.details["num_fonts"] == 2


# ============================================================================
# fontTools reader
# ============================================================================


def test_fonttools_matches_sfnt_reader(real_font):
    """Both backends hand back identical name table bytes."""
    with SfntDirectorySource(real_font) as sfnt:
        direct = sfnt.read_table("name")
    with FontToolsTableSource(real_font) as ft:
        assert ft.has_table("name")
        assert not ft.has_table("CFF ")
        assert ft.read_table("name") == direct
    assert find_name(direct, 4, "windows") == "Example Regular"


def test_fonttools_reads_woff(real_woff):
    with FontToolsTableSource(real_woff) as source:
        assert source.flavor == "woff"
        data = source.read_table("name")
    assert find_name(data, 4, "windows") == "Example Bold"


def test_fonttools_collection(example_collection):
    with FontToolsTableSource(example_collection, font_number=1) as source:
        assert find_name(source.read_table("name"), 4, [(3, 1)]) == "Family Bold"


def test_fonttools_garbage_file(tmp_path):
    path = tmp_path / "garbage.ttf"
    path.write_bytes(b"this is not a font file at all")
    with pytest.raises(SourceUnavailableError):
        FontToolsTableSource(path)


def test_fonttools_missing_file(tmp_path):
    with pytest.raises(SourceUnavailableError) as excinfo:
        FontToolsTableSource(tmp_path / "missing.ttf")
    assert excinfo.value.context is ErrorContext.FILE_IO


def test_fonttools_closed_source(real_font):
    source = FontToolsTableSource(real_font)
    source.close()
    with pytest.raises(SourceUnavailableError):
        source.has_table("name")


# ============================================================================
# in-memory source and factory
# ============================================================================


def test_bytes_source(example_table):
    with BytesTableSource(example_table) as source:
        assert source.read_table() == example_table
        assert not source.has_table("head")


def test_bytes_source_from_file(tmp_path, example_table):
    path = tmp_path / "name.bin"
    path.write_bytes(example_table)
    with BytesTableSource.from_file(path) as source:
        assert source.label == str(path)
        assert source.read_table("name") == example_table


def test_bytes_source_missing_file(tmp_path):
    with pytest.raises(SourceUnavailableError):
        BytesTableSource.from_file(tmp_path / "missing.bin")


def test_auto_backend_selection(example_sfnt, real_woff):
    assert resolve_backend(example_sfnt) == "sfnt"
    assert resolve_backend(real_woff) == "fonttools"
    with open_table_source(real_woff) as source:
        assert source.backend == "fonttools"
    with open_table_source(example_sfnt) as source:
        assert isinstance(source, SfntDirectorySource)


def test_explicit_backend(example_sfnt):
    with open_table_source(example_sfnt, backend="fonttools") as source:
        assert isinstance(source, FontToolsTableSource)


def test_open_missing_file(tmp_path):
    with pytest.raises(SourceUnavailableError) as excinfo:
        open_table_source(tmp_path / "missing.ttf")
    assert excinfo.value.context is ErrorContext.FILE_IO


def test_unknown_backend(example_sfnt):
    with pytest.raises(ValueError, match="Unknown backend"):
        open_table_source(example_sfnt, backend="gdi")


def test_register_backend(example_sfnt):
    class FixedSource(BytesTableSource):
        backend = "fixed"

        def __init__(self, path, font_number=0):
            super().__init__(make_name_table([(3, 1, 0x409, 4, "Fixed")]), label=str(path))

    register_backend("fixed", FixedSource)
    assert "fixed" in available_backends()
    with open_table_source(example_sfnt, backend="fixed") as source:
        assert isinstance(source, FontTableSource)
        assert find_name(source.read_table(), 4, [(3, 1)]) == "Fixed"

    with pytest.raises(ValueError):
        register_backend("auto", FixedSource)
