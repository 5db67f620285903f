import re
from typing import Dict, Iterable

_UNICODE_ESCAPE = re.compile(r"\\u([0-9a-fA-F]{4})")


def _unescape(key: str) -> str:
    return _UNICODE_ESCAPE.sub(lambda m: chr(int(m.group(1), 16)), key.replace("\\=", "="))


def read_counts(lines: Iterable[str]) -> Dict[str, int]:
    """
    Parse 'symbol = count' lines into an ordered dict.
    Counts may use thousands separators ("8,524"); '#' and '!' start
    comments; keys may carry \\uXXXX escapes (e.g. \\u0000 for the escape
    sentinel).
    """
    counts: Dict[str, int] = {}
    for lineno, raw in enumerate(lines, 1):
        line = raw.strip()
        if not line or line[0] in "#!":
            continue
        # split on the last unescaped '='
        split = None
        for i in range(len(line) - 1, -1, -1):
            if line[i] == "=" and (i == 0 or line[i - 1] != "\\"):
                split = i
                break
        if split is None:
            raise ValueError(f"line {lineno}: expected 'symbol = count'")
        key = _unescape(line[:split].strip())
        value = line[split + 1:].strip().replace(",", "").replace("_", "")
        if not value.isdigit():
            raise ValueError(f"line {lineno}: bad count {value!r}")
        if key in counts:
            raise ValueError(f"line {lineno}: duplicate symbol {key!r}")
        counts[key] = int(value)
    return counts


def load_counts(path: str) -> Dict[str, int]:
    with open(path, "r", encoding="utf-8") as f:
        return read_counts(f)


def write_counts(f, counts: Dict[str, int]):
    for key, count in counts.items():
        last = len(key) - 1
        escaped = "".join(
            f"\\u{ord(ch):04x}" if ord(ch) < 0x20 or ch in "=\\#!" or (ch == " " and i in (0, last)) else ch
            for i, ch in enumerate(key)
        )
        f.write(f"{escaped} = {count}\n")
