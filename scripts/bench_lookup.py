"""Rough per-query timings for the exact, fuzzy and default finders."""

from __future__ import annotations

import argparse
from pathlib import Path
from time import perf_counter
from typing import Callable, Optional

from tzlocate.finder import DefaultFinder
from tzlocate.snapshot import load_region_snapshot, load_tile_snapshot

BEIJING = (116.3883, 39.9289)


def bench(label: str, fn: Callable[[float, float], object], iterations: int) -> None:
    lng, lat = BEIJING
    result = fn(lng, lat)
    started = perf_counter()
    for _ in range(iterations):
        fn(lng, lat)
    elapsed = perf_counter() - started
    print(f"{label:<8} {elapsed / iterations * 1e6:9.2f} us/query  -> {result!r}")


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("regions", type=Path)
    parser.add_argument("tiles", type=Path)
    parser.add_argument("-n", "--iterations", type=int, default=10_000)
    args = parser.parse_args(argv)

    finder = DefaultFinder.from_snapshots(load_region_snapshot(args.regions), load_tile_snapshot(args.tiles))

    bench("exact", finder.exact.lookup_first, args.iterations)
    bench("fuzzy", finder.fuzzy.lookup_first, args.iterations)
    bench("default", finder.resolve_one, args.iterations)


if __name__ == "__main__":
    main()
