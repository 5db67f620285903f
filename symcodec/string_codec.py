from typing import Dict, Optional

from char_codec import HuffmanCharacterCodec
from huff_canonical import DEFAULT_MAXIMUM_LENGTH, HuffmanCodeTable, build_code_table
from symbol_io import Directive, SymbolConsumer, as_producer
from symbols import SymbolTable

# Reserved vocabulary entry: "the string follows character by character"
ESCAPE = "\x00"


class HuffmanStringCodec:
    """
    Codes whole strings from a trained vocabulary as single symbols.
    Out-of-vocabulary strings are written as ESCAPE followed by the string
    through the character codec.
    """

    def __init__(self, code_table: HuffmanCodeTable, characters: Optional[HuffmanCharacterCodec] = None):
        if ESCAPE not in code_table:
            raise ValueError("string code table is missing the escape entry")
        self.code_table = code_table
        self.characters = characters if characters is not None else HuffmanCharacterCodec.raw()

    @classmethod
    def from_symbols(cls, table: SymbolTable, maximum_length: int = DEFAULT_MAXIMUM_LENGTH,
                     characters: Optional[HuffmanCharacterCodec] = None) -> "HuffmanStringCodec":
        if table.escape != ESCAPE:
            table = SymbolTable.build(table.frequencies(), escape=ESCAPE, minimum_length=table.minimum_length)
        return cls(build_code_table(table, maximum_length), characters)

    @classmethod
    def from_frequencies(cls, frequencies: Dict[str, int], maximum_length: int = DEFAULT_MAXIMUM_LENGTH,
                         characters: Optional[HuffmanCharacterCodec] = None,
                         minimum_length: int = 1) -> "HuffmanStringCodec":
        return cls.from_symbols(SymbolTable.build(frequencies, escape=ESCAPE, minimum_length=minimum_length),
                                maximum_length, characters)

    @classmethod
    def from_code_table(cls, code_table: HuffmanCodeTable,
                        characters: Optional[HuffmanCharacterCodec] = None) -> "HuffmanStringCodec":
        return cls(code_table, characters)

    def with_characters(self, characters: HuffmanCharacterCodec) -> "HuffmanStringCodec":
        return HuffmanStringCodec(self.code_table, characters)

    def encode_value(self, storage, value: str):
        if value != ESCAPE and value in self.code_table:
            self.code_table.write_symbol(storage, value)
        else:
            self.code_table.write_symbol(storage, ESCAPE)
            self.characters.encode_string(storage, value)

    def decode_value(self, storage) -> str:
        sym = self.code_table.read_symbol(storage)
        if sym == ESCAPE:
            return self.characters.decode_string(storage)
        return sym

    def encode(self, storage, producer):
        producer = as_producer(producer)
        while producer.has_next():
            self.encode_value(storage, producer.next())
        return storage

    def decode(self, storage, consumer: SymbolConsumer) -> int:
        """Decode from the current cursor; returns the number of strings delivered."""
        index = 0
        while storage.has_remaining():
            value = self.decode_value(storage)
            directive = consumer(index, value)
            index += 1
            if directive is Directive.STOP:
                break
        return index

    def __repr__(self):
        return f"HuffmanStringCodec({len(self.code_table)} strings, max_length={self.code_table.max_length})"
