from typing import Dict, Iterable

import numpy as np

from huff_canonical import HuffmanCodeTable


def entropy_bits(frequencies: Dict) -> float:
    """Shannon entropy (bits/symbol) of a frequency table."""
    f = np.array([c for c in frequencies.values() if c > 0], dtype=np.float64)
    if f.size == 0:
        return 0.0
    p = f / f.sum()
    return float(-(p * np.log2(p)).sum())


def average_code_length(frequencies: Dict, table: HuffmanCodeTable) -> float:
    """Frequency-weighted code length (bits/symbol) for symbols the table knows."""
    known = [(c, table.code(s)[1]) for s, c in frequencies.items() if s in table and c > 0]
    if not known:
        return 0.0
    arr = np.array(known, dtype=np.float64)
    return float((arr[:, 0] * arr[:, 1]).sum() / arr[:, 0].sum())


def compression_ratio(values: Iterable[str], size_in_bits: int) -> float:
    """UTF-8 input size over encoded size."""
    raw_bits = 8 * sum(len(v.encode("utf-8", "surrogatepass")) for v in values)
    if size_in_bits == 0:
        return float("inf") if raw_bits else 1.0
    return raw_bits / float(size_in_bits)
