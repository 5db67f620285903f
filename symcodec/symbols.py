from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Hashable, Iterable, List, Mapping, Optional, Tuple

Symbol = Hashable


class EmptyAlphabet(ValueError):
    pass


@dataclass(frozen=True)
class SymbolEntry:
    symbol: Any
    frequency: int
    rank: int


class SymbolTable:
    """
    Training symbols ranked by descending frequency.
    Ties keep the insertion order of the frequency map, so identical input
    always ranks identically.
    """

    def __init__(self, entries: List[SymbolEntry], escape: Optional[Symbol], minimum_length: int):
        self._entries = tuple(entries)
        self._by_symbol = {e.symbol: e for e in entries}
        self.escape = escape
        self.minimum_length = minimum_length

    @classmethod
    def build(cls, frequencies: Mapping[Symbol, int], escape: Optional[Symbol] = None,
              minimum_length: int = 1) -> "SymbolTable":
        if not frequencies:
            raise EmptyAlphabet("Cannot build a symbol table from no symbols")
        if minimum_length < 1:
            raise ValueError(f"minimum code length must be >= 1, got {minimum_length}")
        items: List[Tuple[Symbol, int]] = []
        for sym, count in frequencies.items():
            count = int(count)
            if count < 0:
                raise ValueError(f"negative frequency for {sym!r}: {count}")
            items.append((sym, count))
        if escape is not None and escape not in frequencies:
            items.append((escape, 1))
        # sorted() is stable: equal counts stay in insertion order
        ordered = sorted(items, key=lambda kv: -kv[1])
        entries = [SymbolEntry(sym, count, rank) for rank, (sym, count) in enumerate(ordered)]
        return cls(entries, escape, minimum_length)

    @property
    def entries(self) -> Tuple[SymbolEntry, ...]:
        return self._entries

    def symbols(self) -> List[Symbol]:
        return [e.symbol for e in self._entries]

    def frequencies(self) -> Dict[Symbol, int]:
        return {e.symbol: e.frequency for e in self._entries}

    def frequency(self, symbol: Symbol) -> int:
        return self._by_symbol[symbol].frequency

    def rank(self, symbol: Symbol) -> int:
        return self._by_symbol[symbol].rank

    def __len__(self):
        return len(self._entries)

    def __contains__(self, symbol):
        return symbol in self._by_symbol

    def __iter__(self):
        return iter(self._entries)

    def __repr__(self):
        return f"SymbolTable(size={len(self._entries)}, escape={self.escape!r}, minimum_length={self.minimum_length})"


def count_symbols(values: Iterable[Symbol], intern: Optional[Dict[Symbol, Symbol]] = None) -> Dict[Symbol, int]:
    """
    Frequency count in first-seen order.
    intern: optional caller-owned table mapping each symbol to one shared
    instance; it is filled in as new symbols are seen.
    """
    counts: Dict[Symbol, int] = {}
    for v in values:
        if intern is not None:
            v = intern.setdefault(v, v)
        counts[v] = counts.get(v, 0) + 1
    return counts
