import argparse
import os

from bitpack import BitStorage
from bitstream import KIND_CHARACTER, KIND_STRING, load_table, write_list_header, write_table
from char_codec import END_OF_STRING, HuffmanCharacterCodec
from list_codec import HuffmanStringListCodec
from metrics import compression_ratio
from string_codec import HuffmanStringCodec


def load_codec(strings_path: str, characters_path: str) -> HuffmanStringListCodec:
    kind, string_table, _ = load_table(strings_path)
    if kind != KIND_STRING:
        raise ValueError(f"{strings_path} is not a string table")
    kind, char_table, _ = load_table(characters_path)
    if kind != KIND_CHARACTER:
        raise ValueError(f"{characters_path} is not a character table")
    characters = HuffmanCharacterCodec.from_code_table(char_table)
    return HuffmanStringListCodec(HuffmanStringCodec.from_code_table(string_table), characters)


def main():
    ap = argparse.ArgumentParser(description="Encode a list of strings (one per line)")
    ap.add_argument("--input", required=True, help="text file, one value per line")
    ap.add_argument("--strings", required=True, help="string table (.hct)")
    ap.add_argument("--characters", required=True, help="character table (.hct)")
    ap.add_argument("--output", required=True, help="path to .hcl")
    args = ap.parse_args()

    with open(args.input, "r", encoding="utf-8") as f:
        values = [line.rstrip("\n") for line in f]

    codec = load_codec(args.strings, args.characters)
    storage = codec.encode(BitStorage(), values)

    os.makedirs(os.path.dirname(args.output) or ".", exist_ok=True)
    with open(args.output, "wb") as f:
        write_list_header(f, count=len(values), payload_bits=storage.size_in_bits)
        write_table(f, codec.strings.code_table, kind=KIND_STRING)
        write_table(f, codec.characters.code_table, kind=KIND_CHARACTER, terminator=END_OF_STRING)
        f.write(storage.to_bytes())

    print(f"[encode] wrote {args.output}")
    print(f"[encode] values={len(values)} payload={storage.size_in_bits} bits "
          f"ratio={compression_ratio(values, storage.size_in_bits):.2f}")


if __name__ == "__main__":
    main()
