import argparse
import os
from collections import Counter

from bitstream import KIND_CHARACTER, KIND_STRING, save_table
from char_codec import END_OF_STRING, ESCAPE as CHAR_ESCAPE, HuffmanCharacterCodec
from huff_canonical import DEFAULT_MAXIMUM_LENGTH
from metrics import average_code_length, entropy_bits
from properties import load_counts
from string_codec import HuffmanStringCodec
from symbols import count_symbols


def character_counts(string_counts):
    """Character frequencies weighted by how often each string occurs."""
    chars = Counter()
    for value, count in string_counts.items():
        for ch in value:
            if ch not in (CHAR_ESCAPE, END_OF_STRING):
                chars[ch] += count
    out = dict(chars.most_common())
    out[END_OF_STRING] = max(1, len(string_counts))
    return out


def main():
    ap = argparse.ArgumentParser(description="Train string and character code tables")
    src = ap.add_mutually_exclusive_group(required=True)
    src.add_argument("--input", help="corpus file, one value per line")
    src.add_argument("--counts", help="counts file ('symbol = count' per line)")
    ap.add_argument("--strings", required=True, help="output string table (.hct)")
    ap.add_argument("--characters", required=True, help="output character table (.hct)")
    ap.add_argument("--max-length", type=int, default=DEFAULT_MAXIMUM_LENGTH, help="maximum code length in bits")
    ap.add_argument("--min-length", type=int, default=1, help="minimum code length in bits")
    ap.add_argument("--min-count", type=int, default=2,
                    help="strings seen fewer times are left out of the vocabulary (they escape)")
    args = ap.parse_args()

    if args.input:
        with open(args.input, "r", encoding="utf-8") as f:
            string_counts = count_symbols(line.rstrip("\n") for line in f)
    else:
        string_counts = load_counts(args.counts)

    vocabulary = {s: c for s, c in string_counts.items() if c >= args.min_count}
    if not vocabulary:
        ap.error(f"no value occurs at least {args.min_count} times")
    chars = character_counts(string_counts)

    characters = HuffmanCharacterCodec.from_frequencies(chars, args.max_length, args.min_length)
    strings = HuffmanStringCodec.from_frequencies(vocabulary, args.max_length, characters, args.min_length)

    for path in (args.strings, args.characters):
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    save_table(args.strings, strings.code_table, kind=KIND_STRING, min_length=args.min_length)
    save_table(args.characters, characters.code_table, kind=KIND_CHARACTER,
               terminator=END_OF_STRING, min_length=args.min_length)

    print(f"[train] wrote {args.strings} ({len(strings.code_table)} strings, "
          f"max {strings.code_table.max_length} bits)")
    print(f"[train] wrote {args.characters} ({len(characters.code_table)} characters, "
          f"max {characters.code_table.max_length} bits)")
    print(f"[train] strings: entropy={entropy_bits(vocabulary):.3f} "
          f"avg={average_code_length(vocabulary, strings.code_table):.3f} bits/symbol")
    print(f"[train] characters: entropy={entropy_bits(chars):.3f} "
          f"avg={average_code_length(chars, characters.code_table):.3f} bits/symbol")


if __name__ == "__main__":
    main()
