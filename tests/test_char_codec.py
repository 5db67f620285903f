import pytest

from bitpack import BitStorage, OutOfBits
from char_codec import END_OF_STRING, ESCAPE, RAW_CHARACTER_BITS, HuffmanCharacterCodec
from huff_canonical import HuffmanCodeTable, UnknownCode
from symbol_io import Directive, collect
from symbols import SymbolTable


def _codec(maximum_length=8):
    return HuffmanCharacterCodec.from_frequencies(
        {"m": 10_826, "d": 8_154, "j": 8_098, "e": 6_379, "x": 5_566,
         ESCAPE: 1024, END_OF_STRING: 1024}, maximum_length)


def _roundtrip(codec, value):
    storage = BitStorage()
    codec.encode_string(storage, value)
    storage.reset()
    assert codec.decode_string(storage) == value
    assert not storage.has_remaining()


@pytest.mark.parametrize("value", ["", "m", "mdjex", "xxjjmmddee" * 20])
def test_trained_characters(value):
    _roundtrip(_codec(), value)


@pytest.mark.parametrize("value", ["ohkh", "z", "mdz", "€ uro", "\U0001F600", "gxafxac"])
def test_untrained_characters_escape(value):
    _roundtrip(_codec(), value)


def test_sentinel_characters_are_escaped():
    _roundtrip(_codec(), ESCAPE + "m" + END_OF_STRING)


def test_escape_costs_raw_bits():
    codec = _codec()
    escape_length = codec.code_table.code(ESCAPE)[1]
    end_length = codec.code_table.code(END_OF_STRING)[1]
    storage = BitStorage()
    codec.encode_string(storage, "q")
    assert storage.size_in_bits == escape_length + RAW_CHARACTER_BITS + end_length


def test_raw_codec():
    codec = HuffmanCharacterCodec.raw()
    storage = BitStorage()
    codec.encode_string(storage, "ab")
    assert storage.size_in_bits == 2 * (1 + RAW_CHARACTER_BITS) + 1
    storage.reset()
    assert codec.decode_string(storage) == "ab"


def test_from_symbols_adds_sentinels():
    codec = HuffmanCharacterCodec.from_symbols(SymbolTable.build({"a": 3, "b": 1}))
    assert ESCAPE in codec.code_table and END_OF_STRING in codec.code_table
    assert codec.code_table.escape == ESCAPE
    _roundtrip(codec, "abba!")


def test_missing_sentinels_rejected():
    with pytest.raises(ValueError):
        HuffmanCharacterCodec(HuffmanCodeTable({"a": 1, END_OF_STRING: 1}))
    with pytest.raises(ValueError):
        HuffmanCharacterCodec(HuffmanCodeTable({ESCAPE: 1, END_OF_STRING: 2, "ab": 2}))


def test_stream_protocol_decode():
    codec = _codec()
    storage = codec.encode(BitStorage(), "mexdz")
    storage.reset()
    chars = []
    assert codec.decode(storage, collect(chars)) == 5
    assert "".join(chars) == "mexdz"
    assert not storage.has_remaining()


def test_stop_leaves_cursor_on_code_boundary():
    codec = _codec()
    storage = codec.encode(BitStorage(), "mjqdx")
    storage.reset()
    calls = []

    def consumer(index, ch):
        calls.append(index)
        return Directive.STOP if index == 2 else Directive.CONTINUE

    assert codec.decode(storage, consumer) == 3
    assert calls == [0, 1, 2]
    assert codec.read_character(storage) == "d"
    assert codec.read_character(storage) == "x"
    assert codec.read_character(storage) is None


def test_decode_on_empty_storage():
    assert _codec().decode(BitStorage(), collect([])) == 0


def test_truncated_input():
    codec = _codec()
    storage = BitStorage()
    codec.encode_string(storage, "q")
    truncated = BitStorage.from_bytes(storage.to_bytes(), storage.size_in_bits - 5)
    with pytest.raises(OutOfBits):
        codec.decode_string(truncated)


def test_escaped_value_out_of_range():
    codec = HuffmanCharacterCodec.raw()
    storage = BitStorage()
    codec.code_table.write_symbol(storage, ESCAPE)
    storage.write((1 << RAW_CHARACTER_BITS) - 1, RAW_CHARACTER_BITS)
    storage.reset()
    with pytest.raises(UnknownCode):
        codec.decode_string(storage)
