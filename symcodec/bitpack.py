from typing import BinaryIO, Callable, Optional

import numpy as np

INITIAL_CAPACITY = 16   # bytes
MAX_BITS = 64           # widest single read / write


class OutOfBits(EOFError):
    pass


class UnflushedBits(ValueError):
    pass


def _check_width(bit_count: int):
    if not (1 <= bit_count <= MAX_BITS):
        raise ValueError(f"bit count out of range (1..{MAX_BITS}): {bit_count}")


class BitStorage:
    """
    Growable, cursor-addressed bit array backed by a uint8 numpy buffer.
    Bits are stored MSB-first within each byte.

    trace: optional callable (event, value) told about buffer growth.
    """

    def __init__(self, trace: Optional[Callable[[str, int], None]] = None):
        self._buf = np.zeros(INITIAL_CAPACITY, dtype=np.uint8)
        self._size = 0
        self._cursor = 0
        self._trace = trace

    @classmethod
    def from_bytes(cls, data: bytes, size_in_bits: Optional[int] = None,
                   trace: Optional[Callable[[str, int], None]] = None) -> "BitStorage":
        storage = cls(trace=trace)
        nbits = len(data) * 8
        if size_in_bits is None:
            size_in_bits = nbits
        if not (0 <= size_in_bits <= nbits):
            raise ValueError(f"size_in_bits {size_in_bits} does not fit in {len(data)} bytes")
        buf = np.frombuffer(bytes(data), dtype=np.uint8).copy()
        if buf.size < INITIAL_CAPACITY:
            buf = np.concatenate([buf, np.zeros(INITIAL_CAPACITY - buf.size, dtype=np.uint8)])
        storage._buf = buf
        storage._size = size_in_bits
        # clear anything past the logical end so to_bytes() stays zero-padded
        if size_in_bits % 8:
            last = size_in_bits // 8
            storage._buf[last] &= (0xFF << (8 - size_in_bits % 8)) & 0xFF
        storage._buf[(size_in_bits + 7) // 8:] = 0
        return storage

    @property
    def size_in_bits(self) -> int:
        return self._size

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def remaining(self) -> int:
        return self._size - self._cursor

    @property
    def capacity_in_bits(self) -> int:
        return self._buf.size * 8

    def has_remaining(self) -> bool:
        return self._cursor < self._size

    def seek(self, position: int):
        if not (0 <= position <= self._size):
            raise ValueError(f"seek position {position} outside 0..{self._size}")
        self._cursor = position

    def reset(self):
        self._cursor = 0

    def _ensure_capacity(self, nbits: int):
        needed = (nbits + 7) // 8
        if needed <= self._buf.size:
            return
        new_size = max(self._buf.size * 2, needed)
        self._buf = np.concatenate([self._buf, np.zeros(new_size - self._buf.size, dtype=np.uint8)])
        if self._trace is not None:
            self._trace("grow", new_size)

    def write(self, value: int, bit_count: int):
        """Write the low 'bit_count' bits of value (MSB-first) at the cursor."""
        _check_width(bit_count)
        value &= (1 << bit_count) - 1
        pos = self._cursor
        self._ensure_capacity(pos + bit_count)
        left = bit_count
        while left > 0:
            index = pos >> 3
            room = 8 - (pos & 7)
            take = min(room, left)
            chunk = (value >> (left - take)) & ((1 << take) - 1)
            shift = room - take
            mask = ((1 << take) - 1) << shift
            self._buf[index] = (int(self._buf[index]) & ~mask & 0xFF) | (chunk << shift)
            pos += take
            left -= take
        self._cursor = pos
        if pos > self._size:
            self._size = pos

    def write_bit(self, bit: int):
        self.write(1 if bit else 0, 1)

    def read(self, bit_count: int) -> int:
        """Read 'bit_count' bits (MSB-first) as an unsigned integer."""
        _check_width(bit_count)
        if bit_count > self._size - self._cursor:
            raise OutOfBits(f"need {bit_count} bits at {self._cursor}, only {self._size - self._cursor} left")
        pos = self._cursor
        left = bit_count
        value = 0
        while left > 0:
            index = pos >> 3
            room = 8 - (pos & 7)
            take = min(room, left)
            shift = room - take
            value = (value << take) | ((int(self._buf[index]) >> shift) & ((1 << take) - 1))
            pos += take
            left -= take
        self._cursor = pos
        return value

    def read_signed(self, bit_count: int) -> int:
        value = self.read(bit_count)
        if value >> (bit_count - 1):
            value -= 1 << bit_count
        return value

    def read_bit(self) -> int:
        if self._cursor >= self._size:
            raise OutOfBits("Unexpected end of bitstream")
        pos = self._cursor
        self._cursor = pos + 1
        return (int(self._buf[pos >> 3]) >> (7 - (pos & 7))) & 1

    def to_bytes(self) -> bytes:
        """Stored bits, zero-padded to a whole number of bytes."""
        return self._buf[:(self._size + 7) // 8].tobytes()

    def to_bit_string(self) -> str:
        bits = np.unpackbits(self._buf[:(self._size + 7) // 8])[:self._size]
        return (bits + ord("0")).astype(np.uint8).tobytes().decode("ascii")

    def __len__(self):
        return self._size

    def __repr__(self):
        return f"BitStorage(size_in_bits={self._size}, cursor={self._cursor})"


class BitWriter:
    """
    Writes bits to a byte sink, holding back one partially filled byte.
    A stream cannot be patched afterwards, so closing with pending bits fails.
    The underlying stream is flushed on close but stays open.
    """

    def __init__(self, out: BinaryIO):
        self._out = out
        self._cur = 0
        self._nbits = 0  # bits currently in _cur (0..7)
        self._cursor = 0

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def pending_bits(self) -> int:
        return self._nbits

    def write(self, value: int, bit_count: int):
        """Write 'bit_count' bits of value (MSB-first)."""
        _check_width(bit_count)
        for i in range(bit_count - 1, -1, -1):
            bit = (value >> i) & 1
            self._cur = (self._cur << 1) | bit
            self._nbits += 1
            if self._nbits == 8:
                self._out.write(bytes((self._cur,)))
                self._cur = 0
                self._nbits = 0
        self._cursor += bit_count

    def write_bit(self, bit: int):
        self.write(1 if bit else 0, 1)

    def seek(self, position: int):
        if position != self._cursor:
            raise ValueError("Cannot seek a stream writer")

    def close(self):
        if self._nbits > 0:
            raise UnflushedBits(f"{self._nbits} bits pending at close (stream must end on a byte boundary)")
        if hasattr(self._out, "flush"):
            self._out.flush()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.close()


class BitReader:
    """
    Reads bits from a byte source one byte at a time, with one byte of
    look-ahead so that exhaustion can be detected before a read.
    """

    def __init__(self, inp: BinaryIO):
        self._in = inp
        self._next = self._fetch()
        self._cur = 0
        self._left = 0  # unread bits in _cur
        self._cursor = 0

    def _fetch(self) -> int:
        data = self._in.read(1)
        return data[0] if data else -1

    @property
    def cursor(self) -> int:
        return self._cursor

    def has_remaining(self) -> bool:
        return self._left > 0 or self._next >= 0

    def seek(self, position: int):
        if position != self._cursor:
            raise ValueError("Cannot seek a stream reader")

    def reset(self):
        self.seek(0)

    def read_bit(self) -> int:
        if self._left == 0:
            if self._next < 0:
                raise OutOfBits("Unexpected end of bitstream")
            self._cur = self._next
            self._next = self._fetch()
            self._left = 8
        self._left -= 1
        self._cursor += 1
        return (self._cur >> self._left) & 1

    def read(self, bit_count: int) -> int:
        _check_width(bit_count)
        value = 0
        for _ in range(bit_count):
            value = (value << 1) | self.read_bit()
        return value

    def close(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
