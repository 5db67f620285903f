from typing import List

from char_codec import HuffmanCharacterCodec
from string_codec import HuffmanStringCodec
from symbol_io import SymbolConsumer, as_producer, collect


class HuffmanStringListCodec:
    """
    A sequence of strings, back to back. No element count is stored:
    each string terminates itself and the caller decides when to stop.
    """

    def __init__(self, strings: HuffmanStringCodec, characters: HuffmanCharacterCodec):
        self.characters = characters
        self.strings = strings.with_characters(characters)

    def encode(self, storage, producer):
        producer = as_producer(producer)
        while producer.has_next():
            self.strings.encode_value(storage, producer.next())
        return storage

    def decode(self, storage, consumer: SymbolConsumer) -> int:
        storage.seek(0)
        return self.strings.decode(storage, consumer)

    def decode_list(self, storage, count: int) -> List[str]:
        values: List[str] = []
        if count > 0:
            self.decode(storage, collect(values, count))
        return values

    def __repr__(self):
        return f"HuffmanStringListCodec({self.strings!r}, {self.characters!r})"
