from __future__ import annotations

import math
from pathlib import Path
from typing import TYPE_CHECKING, Tuple

from common.errors import NotSquare, NotTileable
from common.logging_setup import get_logger
from common.utils import PathLike, as_whole

if TYPE_CHECKING:
    from loaders.registry import TerrainLoader

log = get_logger("terrain.sizing")

LLRAW_BYTES_PER_SAMPLE = 13
FLOAT_BYTES_PER_SAMPLE = 4


def infer_square_tiling(length: int, bytes_per_sample: int, region_size: int) -> Tuple[int, int]:
    """
    Work out how many regions a headerless file holds and fit them to a square.

    Returns (width, height) in regions. Raises NotTileable when the length is not a
    whole number of regions and NotSquare when that number has no integer root;
    non-square tilings are not guessed at.
    """
    if bytes_per_sample <= 0:
        raise ValueError("bytes_per_sample must be > 0")
    per_region = region_size * region_size * bytes_per_sample
    num_regions = as_whole(length / float(per_region))
    if num_regions is None or num_regions == 0:
        raise NotTileable(
            f"{length} bytes is not a multiple of one {region_size}x{region_size} region "
            f"({per_region} bytes)"
        )
    side = math.isqrt(num_regions)
    if side * side != num_regions:
        raise NotSquare(f"{num_regions} regions do not form a square, which is currently unhandled")
    return side, side


def tiling_from_shape(shape: Tuple[int, int], region_size: int) -> Tuple[int, int]:
    """(width, height) in regions of a self-describing heightmap with shape (rows, cols)."""
    rows, cols = int(shape[0]), int(shape[1])
    if rows == 0 or cols == 0 or rows % region_size or cols % region_size:
        raise NotTileable(f"a {cols}x{rows} heightmap does not tile a whole number of regions")
    return cols // region_size, rows // region_size


def size_for_file(path: PathLike, loader: "TerrainLoader", region_size: int) -> Tuple[int, int]:
    """Region dimensions of a terrain file, using whichever rule its loader supports."""
    p = Path(path)
    if loader.self_describing:
        width, height = tiling_from_shape(loader.load(p).shape, region_size)
    else:
        width, height = infer_square_tiling(p.stat().st_size, loader.bytes_per_sample, region_size)
    log.debug("Sized terrain file", extra={"extra": {"file": p.name, "width": width, "height": height}})
    return width, height
