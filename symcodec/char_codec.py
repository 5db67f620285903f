from typing import Dict, Optional

from huff_canonical import DEFAULT_MAXIMUM_LENGTH, HuffmanCodeTable, UnknownCode, build_code_table
from symbol_io import Directive, SymbolConsumer, as_producer
from symbols import SymbolTable

# Reserved alphabet entries (never emitted as themselves)
ESCAPE = "\x00"
END_OF_STRING = "\x01"

# Escaped characters are written raw; 21 bits covers every code point
RAW_CHARACTER_BITS = 21
MAX_CODE_POINT = 0x10FFFF


class HuffmanCharacterCodec:
    """
    Codes single characters with a trained table.

    Characters outside the table are written as ESCAPE + RAW_CHARACTER_BITS
    raw bits, and every string ends with END_OF_STRING, so no length
    prefix is needed.
    """

    def __init__(self, code_table: HuffmanCodeTable):
        for sentinel in (ESCAPE, END_OF_STRING):
            if sentinel not in code_table:
                raise ValueError(f"character code table is missing sentinel {sentinel!r}")
        for sym in code_table.symbols():
            if not isinstance(sym, str) or len(sym) != 1:
                raise ValueError(f"character code table holds a non-character symbol: {sym!r}")
        self.code_table = code_table

    @classmethod
    def from_symbols(cls, table: SymbolTable, maximum_length: int = DEFAULT_MAXIMUM_LENGTH) -> "HuffmanCharacterCodec":
        if table.escape != ESCAPE or END_OF_STRING not in table:
            frequencies = table.frequencies()
            frequencies.setdefault(END_OF_STRING, 1)
            table = SymbolTable.build(frequencies, escape=ESCAPE, minimum_length=table.minimum_length)
        return cls(build_code_table(table, maximum_length))

    @classmethod
    def from_frequencies(cls, frequencies: Dict[str, int], maximum_length: int = DEFAULT_MAXIMUM_LENGTH,
                         minimum_length: int = 1) -> "HuffmanCharacterCodec":
        frequencies = dict(frequencies)
        frequencies.setdefault(END_OF_STRING, 1)
        return cls.from_symbols(SymbolTable.build(frequencies, escape=ESCAPE, minimum_length=minimum_length),
                                maximum_length)

    @classmethod
    def from_code_table(cls, code_table: HuffmanCodeTable) -> "HuffmanCharacterCodec":
        return cls(code_table)

    @classmethod
    def raw(cls) -> "HuffmanCharacterCodec":
        """A codec that knows no characters: everything goes out escaped."""
        return cls(HuffmanCodeTable({ESCAPE: 1, END_OF_STRING: 1}, escape=ESCAPE))

    def write_character(self, storage, ch: str):
        if ch != ESCAPE and ch != END_OF_STRING and ch in self.code_table:
            self.code_table.write_symbol(storage, ch)
        else:
            self.code_table.write_symbol(storage, ESCAPE)
            storage.write(ord(ch), RAW_CHARACTER_BITS)

    def read_character(self, storage) -> Optional[str]:
        """Next character, or None at END_OF_STRING."""
        sym = self.code_table.read_symbol(storage)
        if sym == ESCAPE:
            value = storage.read(RAW_CHARACTER_BITS)
            if value > MAX_CODE_POINT:
                raise UnknownCode(f"escaped value {value:#x} is not a character")
            return chr(value)
        if sym == END_OF_STRING:
            return None
        return sym

    def encode_string(self, storage, value: str):
        for ch in value:
            self.write_character(storage, ch)
        self.code_table.write_symbol(storage, END_OF_STRING)

    def decode_string(self, storage) -> str:
        chars = []
        while True:
            ch = self.read_character(storage)
            if ch is None:
                return "".join(chars)
            chars.append(ch)

    def encode(self, storage, producer):
        """Write the produced characters as one END_OF_STRING-terminated string."""
        producer = as_producer(producer)
        while producer.has_next():
            self.write_character(storage, producer.next())
        self.code_table.write_symbol(storage, END_OF_STRING)
        return storage

    def decode(self, storage, consumer: SymbolConsumer) -> int:
        """
        Stream characters to consumer(index, ch) until END_OF_STRING, a STOP
        directive, or the end of storage. Returns the number delivered.
        """
        index = 0
        while storage.has_remaining():
            ch = self.read_character(storage)
            if ch is None:
                break
            directive = consumer(index, ch)
            index += 1
            if directive is Directive.STOP:
                break
        return index

    def __repr__(self):
        return f"HuffmanCharacterCodec({len(self.code_table)} symbols, max_length={self.code_table.max_length})"
