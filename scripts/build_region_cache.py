#!/usr/bin/env python3
"""
Build a small offline region store for trying the terrain tools.

Creates {regions_root}/{x}/{y}.r32 (+ {y}.json) for an NxM block of regions:
- a smooth synthetic landscape (gaussian hills + blurred noise) spanning the block
- a per-region height offset so every shared edge has a visible seam to stitch

Optionally writes the unseamed landscape as one combined file (any registered
extension) so load/load-part have something to read.

Examples:
  python scripts/build_region_cache.py --num-x 2 --num-y 2
  python scripts/build_region_cache.py --num-x 3 --num-y 2 --start-x 1000 --start-y 1000 --seam 4.0
  python scripts/build_region_cache.py --num-x 2 --num-y 2 --combined data/island.tif
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Tuple

import cv2
import numpy as np

sys.path.append(str(Path(__file__).resolve().parents[1]))

from common.config import TerrainSettings, load_params  # noqa: E402
from common.types import Region  # noqa: E402
from loaders import default_registry  # noqa: E402
from terrain.store import RegionStore  # noqa: E402


def synthesize_landscape(shape: Tuple[int, int], seed: int = 1234, peak: float = 60.0) -> np.ndarray:
    """Gaussian hills plus low-amplitude blurred noise, rows from the south."""
    h, w = shape
    rng = np.random.default_rng(seed)
    ys, xs = np.mgrid[0:h, 0:w].astype(np.float32)
    land = np.zeros((h, w), dtype=np.float32)
    for _ in range(max(3, (h * w) // (128 * 128))):
        cx, cy = rng.uniform(0, w), rng.uniform(0, h)
        sigma = rng.uniform(0.08, 0.25) * min(w, h)
        amp = rng.uniform(0.3, 1.0) * peak
        land += amp * np.exp(-((xs - cx) ** 2 + (ys - cy) ** 2) / (2.0 * sigma**2))

    noise = rng.normal(0.0, 1.0, size=(h, w)).astype(np.float32)
    noise = cv2.GaussianBlur(noise, (0, 0), sigmaX=3.0)
    land += 2.0 * noise
    return land.astype(np.float32)


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--config", default="config/params.yaml", help="YAML parameter file")
    ap.add_argument("--root", default="", help="Override terrain.regions_root")
    ap.add_argument("--num-x", type=int, default=2, help="Regions along X")
    ap.add_argument("--num-y", type=int, default=2, help="Regions along Y")
    ap.add_argument("--start-x", type=int, default=1000, help="Grid X of the south-west region")
    ap.add_argument("--start-y", type=int, default=1000, help="Grid Y of the south-west region")
    ap.add_argument("--seam", type=float, default=3.0, help="Max per-region height offset (m)")
    ap.add_argument("--seed", type=int, default=1234, help="Seed for the synthetic landscape")
    ap.add_argument("--combined", default="", help="Optional path for the unseamed combined file")
    args = ap.parse_args()

    if args.num_x <= 0 or args.num_y <= 0:
        raise SystemExit("--num-x and --num-y must be > 0")

    settings = TerrainSettings.from_params(load_params(args.config))
    registry = default_registry(settings)
    store = RegionStore(settings, registry, root=args.root or None)
    rs = settings.region_size

    land = synthesize_landscape((args.num_y * rs, args.num_x * rs), seed=args.seed)
    rng = np.random.default_rng(args.seed + 1)

    for i in range(args.num_x):
        for j in range(args.num_y):
            x, y = args.start_x + i, args.start_y + j
            block = land[j * rs:(j + 1) * rs, i * rs:(i + 1) * rs].copy()
            block += np.float32(rng.uniform(-args.seam, args.seam))
            path = store.save_region(Region(x=x, y=y, name=f"Demo {x},{y}", heightmap=block))
            print(f"[ok] wrote {path}")

    if args.combined:
        registry.for_file(args.combined).save(args.combined, land)
        print(f"[ok] wrote combined heightmap {args.combined}")

    print("Region store initialized. Try:")
    print("  python -m console.service stitch 16")
    print("  uvicorn console.server:app --port 8000")


if __name__ == "__main__":
    main()
