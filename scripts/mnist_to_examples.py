"""Convert an MNIST ``.npz`` archive into ninjanet example files."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path


def main() -> None:
    root = Path(__file__).resolve().parents[1]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))

    from ninjanet.data.mnist import convert_npz

    ap = argparse.ArgumentParser(description=__doc__)
    ap.add_argument("npz", type=Path, help="Path to mnist.npz")
    ap.add_argument("--out", type=Path, default=Path("data"), help="Output directory")
    ap.add_argument("--max-items", type=int, help="Keep only the first N examples per split")
    ap.add_argument("--prefix", default="mnist", help="Output file prefix")
    args = ap.parse_args()

    written = convert_npz(args.npz, args.out, max_items=args.max_items, prefix=args.prefix)
    for split, path in written.items():
        print(f"{split}: {path}")


if __name__ == "__main__":
    main()
