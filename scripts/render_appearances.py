#!/usr/bin/env python3
"""Write sample organism costumes (SVG) for every attraction sign combination."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
src_root = ROOT / "src"
if str(src_root) not in sys.path:
    sys.path.insert(0, str(src_root))

from ecosim.sim.core.rng import DeterministicRng  # noqa: E402
from ecosim.sim.systems.appearance import AppearanceGenerator  # noqa: E402

SAMPLES = {
    "attracted_both": (3.0, 2.0),
    "repelled_both": (-3.0, -2.0),
    "food_only": (3.0, -2.0),
    "poison_only": (-3.0, 2.0),
    "neutral": (0.0, 0.0),
}


def write_asset(path: Path, data: bytes, overwrite: bool) -> None:
    if path.exists() and not overwrite:
        raise FileExistsError(f"{path} already exists. Use --overwrite to replace.")
    path.write_bytes(data)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Render sample organism costumes as SVG files.")
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("build/appearances"),
        help="Directory to write SVG files into.",
    )
    parser.add_argument("--seed", type=int, default=7)
    parser.add_argument("--size", type=int, default=130)
    parser.add_argument("--overwrite", action="store_true", help="Overwrite existing files.")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    output_dir: Path = args.output_dir
    output_dir.mkdir(parents=True, exist_ok=True)

    rng = DeterministicRng(args.seed)
    for name, (food, poison) in SAMPLES.items():
        svg = AppearanceGenerator(args.size, args.size, rng=rng).generate(food, poison, 5.0)
        write_asset(output_dir / f"{name}.svg", svg.encode("utf-8"), args.overwrite)

    print(f"Rendered {len(SAMPLES)} appearances in {output_dir}")


if __name__ == "__main__":
    main()
