import argparse
import os

from bitpack import BitStorage
from bitstream import KIND_CHARACTER, KIND_STRING, read_list_header, read_payload, read_table
from char_codec import HuffmanCharacterCodec
from list_codec import HuffmanStringListCodec
from string_codec import HuffmanStringCodec


def read_list(f, count=None):
    h = read_list_header(f)
    kind, string_table, _ = read_table(f)
    if kind != KIND_STRING:
        raise ValueError("Malformed stream: expected a string table")
    kind, char_table, _ = read_table(f)
    if kind != KIND_CHARACTER:
        raise ValueError("Malformed stream: expected a character table")
    payload = read_payload(f, h["payload_bits"])

    characters = HuffmanCharacterCodec.from_code_table(char_table)
    codec = HuffmanStringListCodec(HuffmanStringCodec.from_code_table(string_table), characters)
    storage = BitStorage.from_bytes(payload, h["payload_bits"])
    n = h["count"] if count is None else max(0, min(count, h["count"]))
    return codec.decode_list(storage, n), h


def main():
    ap = argparse.ArgumentParser(description="Decode a .hcl file back into lines")
    ap.add_argument("--input", required=True, help="path to .hcl")
    ap.add_argument("--output", required=True, help="path to output text file")
    ap.add_argument("--count", type=int, default=None, help="decode only the first N values")
    args = ap.parse_args()

    with open(args.input, "rb") as f:
        values, h = read_list(f, args.count)

    os.makedirs(os.path.dirname(args.output) or ".", exist_ok=True)
    with open(args.output, "w", encoding="utf-8") as f:
        for v in values:
            f.write(v + "\n")
    print(f"[decode] wrote {args.output} values={len(values)}/{h['count']}")


if __name__ == "__main__":
    main()
