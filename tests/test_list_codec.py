import io
import random

import pytest

from bitpack import BitReader, BitStorage, BitWriter, UnflushedBits
from char_codec import END_OF_STRING, ESCAPE, HuffmanCharacterCodec
from codec_helpers import (
    encode,
    random_character_frequencies,
    random_string_frequencies,
    roundtrip,
)
from list_codec import HuffmanStringListCodec
from string_codec import HuffmanStringCodec
from symbol_io import Directive
from symbols import SymbolTable

BUG_INPUT = ["ohkh", "m", "ohkh", "m", "gxafxac", "ohkh", "gxafxac", "m", "m", "gxafxac",
             "ohkh", "m", "gxafxac", "gxafxac", "gxafxac", "ohkh", "m", "m", "m"]


def _bug_codec():
    strings = HuffmanStringCodec.from_symbols(SymbolTable.build({"m": 8_524, "gxafxac": 9_202}), 8)
    characters = HuffmanCharacterCodec.from_symbols(SymbolTable.build(
        {"m": 10_826, "d": 8_154, "j": 8_098, "e": 6_379, "x": 5_566,
         ESCAPE: 1024, END_OF_STRING: 1024}, escape=ESCAPE, minimum_length=1), 8)
    return HuffmanStringListCodec(strings, characters)


def _decode_all(codec, storage):
    """Decode with a consumer that never stops: ends at the end of storage."""
    decoded = []

    def consumer(index, value):
        assert index == len(decoded)
        decoded.append(value)
        return Directive.CONTINUE

    codec.decode(storage, consumer)
    return decoded


def test_bug_scenario():
    codec = _bug_codec()
    for values in (BUG_INPUT, ["ohkh"]):
        storage = encode(codec, values)
        assert _decode_all(codec, storage) == values
        roundtrip(codec, values)


def test_characters_are_shared():
    codec = _bug_codec()
    assert codec.strings.characters is codec.characters


def test_decode_rewinds_storage():
    codec = _bug_codec()
    storage = encode(codec, ["m", "gxafxac", "zzz"])
    assert storage.cursor == storage.size_in_bits
    assert _decode_all(codec, storage) == ["m", "gxafxac", "zzz"]


def test_decode_list():
    codec = _bug_codec()
    storage = encode(codec, BUG_INPUT)
    assert codec.decode_list(storage, len(BUG_INPUT)) == BUG_INPUT
    assert codec.decode_list(storage, 4) == BUG_INPUT[:4]
    assert codec.decode_list(storage, 0) == []


def test_early_termination():
    codec = _bug_codec()
    storage = encode(codec, BUG_INPUT)
    calls = []

    def consumer(index, value):
        calls.append(index)
        return Directive.STOP if index == 5 else Directive.CONTINUE

    assert codec.decode(storage, consumer) == 6
    assert calls == list(range(6))


def test_random():
    rng = random.Random(5)
    for _ in range(10):
        string_frequencies = random_string_frequencies(rng, 2, 16, 1, 32)
        strings = HuffmanStringCodec.from_frequencies(string_frequencies, 8)
        characters = HuffmanCharacterCodec.from_frequencies(random_character_frequencies(rng, 1, 25), 8)
        codec = HuffmanStringListCodec(strings, characters)

        choices = list(string_frequencies) + list(random_string_frequencies(rng, 2, 8, 1, 32))
        for _ in range(30):
            values = [rng.choice(choices) for _ in range(rng.randint(1, 32))]
            assert _decode_all(codec, encode(codec, values)) == values
            roundtrip(codec, values)


def test_stream_adapters():
    codec = _bug_codec()
    values = ["m", "ohkh", "gxafxac"]
    storage = encode(codec, values)

    reader = BitReader(io.BytesIO(storage.to_bytes()))
    assert codec.decode_list(reader, len(values)) == values

    writer = BitWriter(io.BytesIO())
    codec.encode(writer, values)
    if storage.size_in_bits % 8:
        with pytest.raises(UnflushedBits):
            writer.close()
    else:
        writer.close()


def test_empty_list():
    codec = _bug_codec()
    storage = encode(codec, [])
    assert storage.size_in_bits == 0
    assert _decode_all(codec, storage) == []
