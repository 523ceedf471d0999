"""Tests for the name table parser and name lookup."""

import pytest

from conftest import make_name_table, make_raw_table

from FontNameCore.core_error_handling import (
    ErrorContext,
    MalformedTableError,
    NameNotFoundError,
    OutOfBoundsError,
    UnsupportedEncodingError,
    UnsupportedFormatError,
)
from FontNameCore.core_name_table import (
    find_name,
    find_record,
    parse_header,
    parse_name_table,
)
from FontNameCore.core_record_selection import get_preset


def test_single_windows_full_name():
    table = make_name_table([(3, 1, 0x409, 4, "Example Font")])
    assert find_name(table, 4, prefer=[(3, 1)]) == "Example Font"


def test_first_matching_record_in_disk_order_wins():
    table = make_name_table(
        [
            (3, 1, 0x409, 4, "First"),
            (3, 1, 0x407, 4, "Second"),
            (3, 1, 0x409, 4, "Third"),
        ]
    )
    assert find_name(table, 4, prefer=[(3, 1)]) == "First"


def test_unranked_ignores_preference_order(example_table):
    """Mac record comes first on disk, so it wins even if listed second."""
    assert find_name(example_table, 4, prefer=[(3, 1), (1, 0)]) == "Example Mac"


def test_default_preset_prefers_windows(example_table):
    """Mac records sort first on disk; the ranked default still picks Windows."""
    table = parse_name_table(example_table)
    assert table.get_name(4, "default") == "Example Font"
    assert find_name(example_table, 4) == "Example Font"

    unranked = get_preset("default").with_options(ranked=False)
    assert table.get_name(4, unranked) == "Example Mac"


def test_default_policy(example_table):
    assert find_name(example_table, 1) == "Example"


def test_bytearray_and_memoryview_input():
    table = make_name_table([(3, 1, 0x409, 4, "Example Font")])
    assert find_name(bytearray(table), 4, [(3, 1)]) == "Example Font"
    assert find_name(memoryview(table), 4, [(3, 1)]) == "Example Font"


def test_parsed_table_holds_immutable_copy():
    buffer = bytearray(make_name_table([(3, 1, 0x409, 4, "Example Font")]))
    table = parse_name_table(buffer)
    buffer[:] = b"\x00" * len(buffer)
    assert table.get_name(4, [(3, 1)]) == "Example Font"


def test_record_count_beyond_buffer_is_malformed():
    table = make_raw_table((0, 1000, 6), [(3, 1, 0x409, 4, 0, 0)])
    with pytest.raises(MalformedTableError) as excinfo:
        parse_name_table(table)
    assert excinfo.value.details["record_count"] == 1000


def test_zero_records_is_not_found():
    table = make_raw_table((0, 0, 6), [])
    with pytest.raises(NameNotFoundError):
        find_name(table, 4, prefer=[(3, 1)])


def test_no_matching_pair_is_not_found(example_table):
    with pytest.raises(NameNotFoundError) as excinfo:
        find_name(example_table, 4, prefer=[(0, 3)])
    assert excinfo.value.details["name_id"] == 4


def test_missing_name_id_is_not_found(example_table):
    with pytest.raises(NameNotFoundError):
        find_name(example_table, 6)


def test_record_range_beyond_buffer_is_malformed():
    # Claims 200 bytes of string data, only 4 present
    table = make_raw_table((0, 1, 18), [(3, 1, 0x409, 4, 200, 0)], b"\x00A\x00B")
    with pytest.raises(MalformedTableError) as excinfo:
        find_name(table, 4, prefer=[(3, 1)])
    assert isinstance(excinfo.value, OutOfBoundsError)
    assert excinfo.value.kind == "out_of_bounds"


@pytest.mark.parametrize("length", [0, 5])
def test_short_header_is_malformed(length):
    with pytest.raises(MalformedTableError) as excinfo:
        parse_name_table(b"\x00" * length)
    assert excinfo.value.context is ErrorContext.HEADER


def test_storage_offset_beyond_buffer_is_malformed():
    table = make_raw_table((0, 0, 500), [])
    with pytest.raises(MalformedTableError) as excinfo:
        parse_header(table)
    assert excinfo.value.context is ErrorContext.HEADER


@pytest.mark.parametrize("fmt", [1, 2, 0xFFFF])
def test_nonzero_format_is_unsupported(fmt):
    table = make_name_table([(3, 1, 0x409, 4, "Example Font")], format_selector=fmt)
    with pytest.raises(UnsupportedFormatError):
        find_name(table, 4, prefer=[(3, 1)])


def test_format_checked_before_other_fields():
    """A bad format wins over a bogus storage offset or record count."""
    table = make_raw_table((1, 999, 999), [])
    with pytest.raises(UnsupportedFormatError):
        parse_name_table(table)


@pytest.mark.parametrize(
    "text", ["Example Font", "Grüße Sans", "Ωmega", "日本語フォント", ""]
)
def test_utf16be_round_trip(text):
    table = make_name_table([(3, 1, 0x409, 4, text)])
    assert find_name(table, 4, prefer=[(3, 1)]) == text


def test_mac_roman_record():
    table = make_name_table([(1, 0, 0, 4, "Café Mac")])
    assert find_name(table, 4, prefer="mac") == "Café Mac"


def test_unicode_platform_record():
    table = make_name_table([(0, 3, 0, 4, "Unicode Name")])
    assert find_name(table, 4, prefer="unicode") == "Unicode Name"


def test_selected_unsupported_pair_raises():
    table = make_name_table([(1, 1, 0, 4, b"\x82\xa0")])
    with pytest.raises(UnsupportedEncodingError):
        find_name(table, 4, prefer=[(1, 1)])


def test_find_record(example_table):
    record = find_record(example_table, 4, prefer=[(3, 1)])
    assert record.key == (3, 1, 0x409, 4)
    assert record.index == 3


def test_as_mapping(example_table):
    table = parse_name_table(example_table)
    mapping = table.as_mapping()
    assert set(mapping) == {
        (1, 0, 0, 1),
        (1, 0, 0, 4),
        (3, 1, 0x409, 1),
        (3, 1, 0x409, 4),
    }
    start, end = mapping[(3, 1, 0x409, 4)]
    assert example_table[start:end].decode("utf-16-be") == "Example Font"


def test_as_mapping_first_duplicate_wins_and_skips_bad_ranges():
    storage = "AB".encode("utf-16-be") + "CD".encode("utf-16-be")
    table = make_raw_table(
        (0, 3, 42),
        [
            (3, 1, 0x409, 4, 4, 0),
            (3, 1, 0x409, 4, 4, 4),
            (3, 1, 0x409, 1, 100, 0),
        ],
        storage,
    )
    mapping = parse_name_table(table).as_mapping()
    assert mapping == {(3, 1, 0x409, 4): (42, 46)}


def test_raw_string(example_table):
    table = parse_name_table(example_table)
    record = table.find_record(4, "mac")
    assert table.raw_string(record) == b"Example Mac"


def test_iter_names_reports_per_record_errors():
    table = parse_name_table(
        make_name_table(
            [
                (3, 1, 0x409, 4, "Good"),
                (2, 0, 0, 4, b"legacy"),
                (3, 1, 0x409, 1, b"\x00"),
            ]
        )
    )
    results = list(table.iter_names())
    assert [text for _, text, _ in results] == ["Good", None, None]
    assert results[1][2].kind == "unsupported_encoding"
    assert results[2][2].context is ErrorContext.DECODING


def test_len(example_table):
    assert len(parse_name_table(example_table)) == 4
