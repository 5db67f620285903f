from __future__ import annotations
import heapq
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from symbols import SymbolTable

DEFAULT_MAXIMUM_LENGTH = 16
MAXIMUM_SUPPORTED_LENGTH = 64   # widest code BitStorage can write in one call


class CodeTooLong(ValueError):
    pass


class UnknownCode(ValueError):
    pass


@dataclass
class _Node:
    freq: int
    order: int
    rank: Optional[int] = None
    left: Optional["_Node"] = None
    right: Optional["_Node"] = None

    def __lt__(self, other):  # for heapq
        return (self.freq, self.order) < (other.freq, other.order)


def _build_tree(weights: List[int]) -> _Node:
    n = len(weights)
    # on equal frequency the lower-ranked (later) symbol merges first
    pq = [_Node(freq=w, order=n - 1 - r, rank=r) for r, w in enumerate(weights)]
    heapq.heapify(pq)
    if n == 1:
        # Edge case: only one symbol -> give it length 1
        only = pq[0]
        return _Node(freq=only.freq, order=n, left=only)
    order = n
    while len(pq) > 1:
        a = heapq.heappop(pq)
        b = heapq.heappop(pq)
        heapq.heappush(pq, _Node(freq=a.freq + b.freq, order=order, left=a, right=b))
        order += 1
    return pq[0]


def _collect_lengths(root: _Node, out: List[int]):
    stack = [(root, 0)]
    while stack:
        node, depth = stack.pop()
        if node.rank is not None:
            out[node.rank] = max(1, depth)  # avoid 0-length
            continue
        for child in (node.right, node.left):
            if child is not None:
                stack.append((child, depth + 1))


def build_code_lengths(weights: List[int]) -> List[int]:
    """Unbounded Huffman code lengths, indexed by rank."""
    lengths = [0] * len(weights)
    _collect_lengths(_build_tree(weights), lengths)
    return lengths


def limit_code_lengths(weights: List[int], maximum_length: int) -> List[int]:
    """
    Package-merge: optimal code lengths subject to length <= maximum_length.
    """
    n = len(weights)
    if n == 1:
        return [1]
    if n > (1 << maximum_length):
        raise CodeTooLong(f"{n} symbols cannot be coded in {maximum_length} bits")
    order = sorted(range(n), key=lambda r: (weights[r], -r))
    leaves = [(weights[r], (r,)) for r in order]
    current = leaves
    for _ in range(maximum_length - 1):
        packages = [(current[i][0] + current[i + 1][0], current[i][1] + current[i + 1][1])
                    for i in range(0, len(current) - 1, 2)]
        # merge is stable, so leaves win ties against packages
        current = list(heapq.merge(leaves, packages, key=lambda item: item[0]))
    lengths = [0] * n
    for _, ranks in current[:2 * n - 2]:
        for r in ranks:
            lengths[r] += 1
    return lengths


def canonical_codes_from_lengths(lengths: Dict[Any, int]) -> Dict[Any, Tuple[int, int]]:
    """
    Return mapping: sym -> (code_int, code_len), canonical Huffman.
    Canonical ordering: sort by (code_len, rank), where rank is the
    insertion order of 'lengths'.
    """
    items = sorted(enumerate(lengths.items()), key=lambda t: (t[1][1], t[0]))
    code = 0
    prev_len = 0
    out: Dict[Any, Tuple[int, int]] = {}
    for _, (sym, L) in items:
        code <<= (L - prev_len)
        if code >> L:
            raise ValueError("code lengths over-subscribed (not a valid prefix code)")
        out[sym] = (code, L)
        code += 1
        prev_len = L
    return out


def build_decode_trie(codes: Dict[Any, Tuple[int, int]]):
    """
    Build a binary trie for decoding bits -> symbol.
    """
    root = {}
    for sym, (code, L) in codes.items():
        cur = root
        for i in range(L - 1, -1, -1):
            bit = (code >> i) & 1
            cur = cur.setdefault(bit, {})
        cur["sym"] = sym
    return root


def decode_one_symbol(trie, bitreader):
    cur = trie
    while "sym" not in cur:
        b = bitreader.read_bit()
        if b not in cur:
            raise UnknownCode(f"Invalid Huffman code ending at bit {bitreader.cursor} (corrupt stream or wrong table)")
        cur = cur[b]
    return cur["sym"]


class HuffmanCodeTable:
    """
    Immutable symbol <-> canonical code mapping.
    Built from (symbol, length) pairs in rank order; that list is all that
    needs persisting.
    """

    def __init__(self, lengths: Dict[Any, int], escape=None):
        if not lengths:
            raise ValueError("code table needs at least one symbol")
        for sym, L in lengths.items():
            if not (1 <= L <= MAXIMUM_SUPPORTED_LENGTH):
                raise ValueError(f"code length out of range (1..{MAXIMUM_SUPPORTED_LENGTH}) for {sym!r}: {L}")
        if escape is not None and escape not in lengths:
            raise ValueError(f"escape symbol {escape!r} has no code")
        self._lengths = dict(lengths)
        self._codes = canonical_codes_from_lengths(self._lengths)
        self._trie = build_decode_trie(self._codes)
        self.escape = escape
        self.max_length = max(self._lengths.values())

    @property
    def lengths(self) -> Dict[Any, int]:
        return dict(self._lengths)

    def code(self, symbol) -> Tuple[int, int]:
        return self._codes[symbol]

    def entries(self) -> List[Tuple[Any, int]]:
        return list(self._lengths.items())

    def symbols(self) -> List[Any]:
        return list(self._lengths)

    def __contains__(self, symbol):
        return symbol in self._codes

    def __len__(self):
        return len(self._codes)

    def write_symbol(self, storage, symbol):
        code, L = self._codes[symbol]
        storage.write(code, L)

    def read_symbol(self, storage):
        return decode_one_symbol(self._trie, storage)

    def describe(self) -> str:
        lines = [f"[HuffmanCodeTable size = {len(self._codes)}, bits = {self.max_length}]:"]
        # in trie order: codes left-aligned to the longest length
        ordered = sorted(self._codes.items(), key=lambda kv: kv[1][0] << (self.max_length - kv[1][1]))
        for i, (sym, (code, L)) in enumerate(ordered, 1):
            lines.append(f"    {i}. {code:0{L}b} -> {sym!r}")
        return "\n".join(lines)

    def __eq__(self, other):
        return isinstance(other, HuffmanCodeTable) and self.entries() == other.entries() and self.escape == other.escape

    def __repr__(self):
        return f"HuffmanCodeTable(size={len(self._codes)}, max_length={self.max_length}, escape={self.escape!r})"


def build_code_table(table: SymbolTable, maximum_length: int = DEFAULT_MAXIMUM_LENGTH) -> HuffmanCodeTable:
    if not (1 <= maximum_length <= MAXIMUM_SUPPORTED_LENGTH):
        raise CodeTooLong(f"maximum code length out of range (1..{MAXIMUM_SUPPORTED_LENGTH}): {maximum_length}")
    if table.minimum_length > maximum_length:
        raise CodeTooLong(f"minimum code length {table.minimum_length} exceeds maximum {maximum_length}")
    weights = [e.frequency for e in table.entries]
    lengths = build_code_lengths(weights)
    if max(lengths) > maximum_length:
        lengths = limit_code_lengths(weights, maximum_length)
    lengths = [max(L, table.minimum_length) for L in lengths]
    if max(lengths) > maximum_length:
        raise CodeTooLong(f"could not fit {len(lengths)} symbols in {maximum_length} bits")
    return HuffmanCodeTable({e.symbol: L for e, L in zip(table.entries, lengths)}, escape=table.escape)


def code_table_from_lengths(entries: Iterable[Tuple[Any, int]], escape=None) -> HuffmanCodeTable:
    """Rebuild a table from persisted (symbol, length) pairs, in rank order."""
    lengths: Dict[Any, int] = {}
    for sym, L in entries:
        if sym in lengths:
            raise ValueError(f"duplicate symbol in code table: {sym!r}")
        lengths[sym] = int(L)
    return HuffmanCodeTable(lengths, escape=escape)
