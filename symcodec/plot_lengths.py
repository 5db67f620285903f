import argparse

import numpy as np
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

from bitstream import KIND_STRING, load_table


def main():
    ap = argparse.ArgumentParser(description="Histogram of code lengths in a stored table")
    ap.add_argument("--table", required=True, help="code table (.hct)")
    ap.add_argument("--output", required=True, help="output image (.png)")
    args = ap.parse_args()

    kind, table, _ = load_table(args.table)
    lengths = np.array([L for _, L in table.entries()], dtype=np.int32)
    bins = np.arange(1, table.max_length + 2)

    plt.figure(figsize=(5, 3))
    plt.hist(lengths, bins=bins, align="left", rwidth=0.8)
    plt.xticks(bins[:-1])
    plt.xlabel("code length (bits)")
    plt.ylabel("symbols")
    plt.title(("String" if kind == KIND_STRING else "Character") + f" table ({len(table)} symbols)", fontsize=9)
    plt.tight_layout()
    plt.savefig(args.output, dpi=150)
    print(f"[plot] wrote {args.output}")


if __name__ == "__main__":
    main()
