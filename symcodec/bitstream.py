import struct
from typing import List, Tuple

from huff_canonical import HuffmanCodeTable, code_table_from_lengths

TABLE_MAGIC = b"HCT1"
LIST_MAGIC = b"HCL1"
VERSION = 1

KIND_CHARACTER = 1
KIND_STRING = 2

# Code table header (little-endian):
# magic(4) version(1) kind(1) max_length(1) min_length(1) entry_count(u32)
# then escape(str) terminator(str), then entry_count x [symbol(str) codelen(u8)]
# str = len(u16) + utf-8 bytes
TBL_HDR_FMT = "<4sBBBBI"
TBL_HDR_SIZE = struct.calcsize(TBL_HDR_FMT)

# Encoded list header:
# magic(4) version(1) reserved(3) count(u32) payload_bits(u64)
# then string table, character table, payload bytes
LST_HDR_FMT = "<4sB3sIQ"
LST_HDR_SIZE = struct.calcsize(LST_HDR_FMT)


def _write_str(f, s: str):
    data = s.encode("utf-8", "surrogatepass")
    if len(data) > 0xFFFF:
        raise ValueError("symbol too long for table (max 65535 bytes)")
    f.write(struct.pack("<H", len(data)))
    f.write(data)


def _read_exact(f, n: int, what: str) -> bytes:
    data = f.read(n)
    if len(data) != n:
        raise ValueError(f"Malformed stream: {what} truncated")
    return data


def _read_str(f) -> str:
    (n,) = struct.unpack("<H", _read_exact(f, 2, "string length"))
    return _read_exact(f, n, "string").decode("utf-8", "surrogatepass")


def write_table(f, table: HuffmanCodeTable, *, kind: int, terminator: str = "", min_length: int = 1):
    entries = table.entries()
    if table.escape is None:
        raise ValueError("only tables with an escape entry can be stored")
    f.write(struct.pack(TBL_HDR_FMT, TABLE_MAGIC, VERSION, kind, table.max_length, min_length, len(entries)))
    _write_str(f, table.escape)
    _write_str(f, terminator)
    for sym, L in entries:
        if not isinstance(sym, str):
            raise ValueError(f"only string symbols can be stored: {sym!r}")
        if not (1 <= L <= 64):
            raise ValueError("code length out of range (1..64)")
        _write_str(f, sym)
        f.write(struct.pack("<B", L))


def read_table(f) -> Tuple[int, HuffmanCodeTable, str]:
    """Returns (kind, code_table, terminator)."""
    data = _read_exact(f, TBL_HDR_SIZE, "table header")
    magic, ver, kind, max_length, min_length, count = struct.unpack(TBL_HDR_FMT, data)
    if magic != TABLE_MAGIC:
        raise ValueError("Bad magic number (not a code table)")
    if ver != VERSION:
        raise ValueError(f"Unsupported version: {ver}")
    if kind not in (KIND_CHARACTER, KIND_STRING):
        raise ValueError(f"Unknown table kind: {kind}")
    escape = _read_str(f)
    terminator = _read_str(f)
    entries: List[Tuple[str, int]] = []
    for _ in range(count):
        sym = _read_str(f)
        (L,) = struct.unpack("<B", _read_exact(f, 1, "table entry"))
        if not (min_length <= L <= max_length):
            raise ValueError(f"Malformed stream: code length {L} outside {min_length}..{max_length}")
        entries.append((sym, L))
    return kind, code_table_from_lengths(entries, escape=escape), terminator


def save_table(path: str, table: HuffmanCodeTable, *, kind: int, terminator: str = "", min_length: int = 1):
    with open(path, "wb") as f:
        write_table(f, table, kind=kind, terminator=terminator, min_length=min_length)


def load_table(path: str) -> Tuple[int, HuffmanCodeTable, str]:
    with open(path, "rb") as f:
        return read_table(f)


def write_list_header(f, *, count: int, payload_bits: int):
    f.write(struct.pack(LST_HDR_FMT, LIST_MAGIC, VERSION, b"\x00\x00\x00", count, payload_bits))


def read_list_header(f):
    data = _read_exact(f, LST_HDR_SIZE, "header")
    magic, ver, _, count, payload_bits = struct.unpack(LST_HDR_FMT, data)
    if magic != LIST_MAGIC:
        raise ValueError("Bad magic number (not an encoded list)")
    if ver != VERSION:
        raise ValueError(f"Unsupported version: {ver}")
    return dict(count=count, payload_bits=payload_bits)


def read_payload(f, payload_bits: int) -> bytes:
    return _read_exact(f, (payload_bits + 7) // 8, "payload")
