"""Tests for big-endian readers."""

import pytest

from FontNameCore.core_byte_order import (
    read_tag,
    read_u16_array,
    read_u16_be,
    read_u32_be,
    tag_to_uint32,
)
from FontNameCore.core_error_handling import MalformedTableError, OutOfBoundsError


def test_read_u16_be_is_big_endian():
    assert read_u16_be(b"\x01\x02", 0) == 0x0102
    assert read_u16_be(b"\x00\xff\xfe", 1) == 0xFFFE


def test_read_u32_be():
    assert read_u32_be(b"\x00\x01\x00\x00", 0) == 0x00010000


def test_read_u16_array():
    assert read_u16_array(b"\x00\x01\x00\x02\x00\x03", 0, 3) == (1, 2, 3)
    assert read_u16_array(b"\x00\x01", 0, 0) == ()


def test_read_tag():
    assert read_tag(b"xxnameyy", 2) == "name"


def test_tag_to_uint32():
    """A tag reads as the big-endian integer of its ASCII bytes."""
    assert tag_to_uint32("name") == 0x6E616D65


@pytest.mark.parametrize(
    "data, offset",
    [(b"", 0), (b"\x01", 0), (b"\x01\x02", 1), (b"\x01\x02", -1)],
)
def test_read_u16_be_out_of_bounds(data, offset):
    with pytest.raises(OutOfBoundsError):
        read_u16_be(data, offset)


def test_out_of_bounds_is_malformed():
    """Running past the buffer always means the table is malformed."""
    with pytest.raises(MalformedTableError) as excinfo:
        read_u16_array(b"\x00\x01\x00", 0, 2)
    assert excinfo.value.kind == "out_of_bounds"
