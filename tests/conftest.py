"""Shared fixtures: synthetic name tables, sfnt/collection files and real fonts."""

import struct
from pathlib import Path

import pytest
from fontTools.fontBuilder import FontBuilder
from fontTools.pens.ttGlyphPen import TTGlyphPen

from FontNameCore.core_logging_config import Verbosity, setup_logging


def encode_name(text, platform_id):
    if isinstance(text, bytes):
        return text
    codec = "mac-roman" if platform_id == 1 else "utf-16-be"
    return text.encode(codec)


def make_name_table(records, format_selector=0, record_count=None, storage_offset=None):
    """
    Build name table bytes.

    records: (platform_id, encoding_id, language_id, name_id, text) tuples,
        text is str (encoded by platform) or raw bytes.
    """
    count = len(records) if record_count is None else record_count
    storage = 6 + 12 * len(records) if storage_offset is None else storage_offset

    header = struct.pack(">HHH", format_selector, count, storage)
    entries = b""
    strings = b""
    for pid, eid, lang, nid, text in records:
        raw = encode_name(text, pid)
        entries += struct.pack(">6H", pid, eid, lang, nid, len(raw), len(strings))
        strings += raw
    table = header + entries
    # Pad up to the storage offset when it points beyond the record array
    table += b"\x00" * max(0, storage - len(table))
    return table + strings


def make_raw_table(header, record_fields, storage=b""):
    """Name table from literal header fields and 6-tuples of record fields."""
    data = struct.pack(">HHH", *header)
    for fields in record_fields:
        data += struct.pack(">6H", *fields)
    return data + storage


def _pad4(data):
    return data + b"\x00" * (-len(data) % 4)


def _sfnt_at(tables, signature, base):
    """sfnt bytes whose table offsets are absolute for a file where it starts at base."""
    tags = sorted(tables)
    header = struct.pack(">4sHHHH", signature, len(tags), 0, 0, 0)
    data_offset = base + 12 + 16 * len(tags)
    directory = b""
    body = b""
    for tag in tags:
        payload = tables[tag]
        directory += struct.pack(
            ">4sIII", tag.encode("ascii"), 0, data_offset + len(body), len(payload)
        )
        body += _pad4(payload)
    return header + directory + body


def make_sfnt(tables, signature=b"\x00\x01\x00\x00"):
    return _sfnt_at(tables, signature, 0)


def make_collection(fonts, signature=b"\x00\x01\x00\x00"):
    """ttcf collection holding one sfnt per table dict in ``fonts``."""
    header_size = 12 + 4 * len(fonts)
    offsets = []
    body = b""
    for tables in fonts:
        offset = header_size + len(body)
        offsets.append(offset)
        body += _pad4(_sfnt_at(tables, signature, offset))
    header = struct.pack(">4sHHI", b"ttcf", 1, 0, len(fonts))
    header += struct.pack(f">{len(fonts)}I", *offsets)
    return header + body


def build_font(path, family="Example", style="Regular", full_name=None,
               mac=True, flavor=None):
    """Write a minimal real TrueType font with fontTools' FontBuilder."""
    full_name = full_name or f"{family} {style}"
    fb = FontBuilder(1000, isTTF=True)
    fb.setupGlyphOrder([".notdef", "A"])
    fb.setupCharacterMap({0x41: "A"})

    pen = TTGlyphPen(None)
    pen.moveTo((0, 0))
    pen.lineTo((0, 500))
    pen.lineTo((500, 500))
    pen.closePath()
    fb.setupGlyf({".notdef": TTGlyphPen(None).glyph(), "A": pen.glyph()})
    fb.setupHorizontalMetrics({".notdef": (500, 0), "A": (500, 0)})
    fb.setupHorizontalHeader(ascent=800, descent=-200)
    fb.setupNameTable(
        {
            "familyName": family,
            "styleName": style,
            "fullName": full_name,
            "psName": f"{family}-{style}".replace(" ", ""),
        },
        mac=mac,
    )
    fb.setupOS2()
    fb.setupPost()
    if flavor:
        fb.font.flavor = flavor
    fb.save(str(path))
    return Path(path)


EXAMPLE_RECORDS = [
    (1, 0, 0, 1, "Example"),
    (1, 0, 0, 4, "Example Mac"),
    (3, 1, 0x409, 1, "Example"),
    (3, 1, 0x409, 4, "Example Font"),
]


@pytest.fixture(autouse=True, scope="session")
def _quiet_logging():
    setup_logging(Verbosity.QUIET)


@pytest.fixture
def example_table():
    return make_name_table(EXAMPLE_RECORDS)


@pytest.fixture
def example_sfnt(tmp_path, example_table):
    path = tmp_path / "Example.ttf"
    path.write_bytes(make_sfnt({"head": b"\x00" * 54, "name": example_table}))
    return path


@pytest.fixture
def example_collection(tmp_path):
    fonts = [
        {"name": make_name_table([(3, 1, 0x409, 4, "Family Regular")])},
        {"name": make_name_table([(3, 1, 0x409, 4, "Family Bold")])},
    ]
    path = tmp_path / "Family.ttc"
    path.write_bytes(make_collection(fonts))
    return path


@pytest.fixture
def real_font(tmp_path):
    return build_font(tmp_path / "Example-Regular.ttf", full_name="Example Regular")


@pytest.fixture
def real_woff(tmp_path):
    return build_font(
        tmp_path / "Example-Bold.woff", style="Bold", full_name="Example Bold",
        flavor="woff",
    )
