from __future__ import annotations

from typing import Callable, List

import numpy as np

from common.errors import ResolvedRegionMissing
from common.types import HEIGHT_DTYPE, Region, TileWindow
from terrain.grid import RegionGrid

# predicate(xs, ys) -> bool array; xs/ys are global sample coordinates of the
# combined heightmap, broadcast to the shape of the block being written.
SamplePredicate = Callable[[np.ndarray, np.ndarray], np.ndarray]


def within_window(num_x: int, num_y: int, region_size: int) -> SamplePredicate:
    """Select the samples that belong to the first num_x by num_y regions of a combined map."""
    def predicate(xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        return (xs // region_size < num_x) & (ys // region_size < num_y)
    return predicate


def always(xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
    return np.ones(np.broadcast(xs, ys).shape, dtype=bool)


def build_combined(grid: RegionGrid, window: TileWindow) -> np.ndarray:
    """
    Assemble one heightmap spanning the window, indexed [y, x] in global samples.

    Every cell must be present; an absent cell means validation was skipped or the
    grid changed underneath us, so it is reported rather than zero-filled.
    """
    rs = grid.region_size
    matrix = grid.slice(window)
    combined = np.empty(window.sample_shape(rs), dtype=HEIGHT_DTYPE)
    for i, j in window.cells():
        region = matrix[i][j]
        if region is None:
            raise ResolvedRegionMissing(
                f"no region at ({window.start_x + i}, {window.start_y + j}) while building a combined heightmap"
            )
        combined[j * rs:(j + 1) * rs, i * rs:(i + 1) * rs] = region.heightmap
    return combined


def scatter(
    grid: RegionGrid,
    combined: np.ndarray,
    window: TileWindow,
    predicate: SamplePredicate,
) -> List[Region]:
    """
    Copy samples of `combined` into the heightmaps of the window's regions, in place.

    Only samples for which predicate(x, y) holds are written. Parts of a combined
    map that reach beyond the window are ignored. Returns the regions written to.
    No rollback: an exception part way through leaves earlier regions updated.
    """
    rs = grid.region_size
    matrix = grid.slice(window)
    cols = min(window.num_x, combined.shape[1] // rs)
    rows = min(window.num_y, combined.shape[0] // rs)
    local = np.arange(rs)
    touched: List[Region] = []
    for i in range(cols):
        for j in range(rows):
            xs = (i * rs + local)[np.newaxis, :]
            ys = (j * rs + local)[:, np.newaxis]
            mask = np.broadcast_to(predicate(xs, ys), (rs, rs))
            if not mask.any():
                continue
            region = matrix[i][j]
            if region is None:
                raise ResolvedRegionMissing(
                    f"no region at ({window.start_x + i}, {window.start_y + j}) while scattering a combined heightmap"
                )
            block = combined[j * rs:(j + 1) * rs, i * rs:(i + 1) * rs]
            region.heightmap[mask] = block[mask]
            touched.append(region)
    return touched
