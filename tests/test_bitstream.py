import io

import pytest

from bitstream import (
    KIND_CHARACTER,
    KIND_STRING,
    load_table,
    read_list_header,
    read_table,
    save_table,
    write_list_header,
    write_table,
)
from char_codec import END_OF_STRING, HuffmanCharacterCodec
from codec_helpers import fixed_frequencies
from string_codec import ESCAPE, HuffmanStringCodec


def _string_table():
    return HuffmanStringCodec.from_frequencies(fixed_frequencies(), 8).code_table


def test_table_roundtrip():
    table = _string_table()
    f = io.BytesIO()
    write_table(f, table, kind=KIND_STRING)
    f.seek(0)
    kind, loaded, terminator = read_table(f)
    assert kind == KIND_STRING
    assert terminator == ""
    assert loaded == table
    assert loaded.escape == ESCAPE
    for sym in fixed_frequencies():
        assert loaded.code(sym) == table.code(sym)


def test_character_table_file(tmp_path):
    codec = HuffmanCharacterCodec.from_frequencies({"a": 5, "ü": 3, " ": 9})
    path = str(tmp_path / "chars.hct")
    save_table(path, codec.code_table, kind=KIND_CHARACTER, terminator=END_OF_STRING)
    kind, loaded, terminator = load_table(path)
    assert kind == KIND_CHARACTER
    assert terminator == END_OF_STRING
    assert HuffmanCharacterCodec.from_code_table(loaded).code_table == codec.code_table


def test_bad_magic():
    with pytest.raises(ValueError, match="magic"):
        read_table(io.BytesIO(b"NOPE" + b"\x00" * 20))


def test_truncated_table():
    f = io.BytesIO()
    write_table(f, _string_table(), kind=KIND_STRING)
    data = f.getvalue()
    with pytest.raises(ValueError, match="Malformed"):
        read_table(io.BytesIO(data[:-3]))


def test_table_without_escape_rejected():
    from huff_canonical import HuffmanCodeTable
    with pytest.raises(ValueError):
        write_table(io.BytesIO(), HuffmanCodeTable({"a": 1, "b": 1}), kind=KIND_STRING)


def test_list_header():
    f = io.BytesIO()
    write_list_header(f, count=19, payload_bits=12345)
    f.seek(0)
    assert read_list_header(f) == dict(count=19, payload_bits=12345)
    with pytest.raises(ValueError):
        read_list_header(io.BytesIO(b"HCL1"))
