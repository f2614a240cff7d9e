from __future__ import annotations

import math
from typing import List, Tuple

import numpy as np

from common.errors import DegenerateRescale
from common.logging_setup import get_logger
from common.types import Region, TileWindow
from terrain.combine import build_combined, scatter, within_window
from terrain.grid import RegionGrid

log = get_logger("terrain.rescale")


def height_range(heightmap: np.ndarray) -> Tuple[float, float]:
    """(min, max) elevation of a heightmap; both bounds are checked on every sample."""
    return float(np.min(heightmap)), float(np.max(heightmap))


def rescaled(heightmap: np.ndarray, desired_min: float, desired_max: float) -> np.ndarray:
    """
    Linearly map the heightmap's current range onto [desired_min, desired_max].

    An empty desired range flattens to that value. A flat heightmap asked to span
    a non-empty range has no defined scale and raises DegenerateRescale.
    """
    if not (math.isfinite(desired_min) and math.isfinite(desired_max)):
        raise ValueError(f"elevation bounds must be finite, got [{desired_min}, {desired_max}]")
    desired_range = float(desired_max) - float(desired_min)
    if desired_range == 0.0:
        return np.full(heightmap.shape, desired_max, dtype=np.float64)

    curr_min, curr_max = height_range(heightmap)
    curr_range = curr_max - curr_min
    if curr_range == 0.0:
        raise DegenerateRescale(
            f"terrain is flat at {curr_min}; cannot stretch it to [{desired_min}, {desired_max}]"
        )
    scale = desired_range / curr_range
    log.info(
        "Rescaling terrain",
        extra={"extra": {"current": [curr_min, curr_max], "desired": [desired_min, desired_max], "scale": scale}},
    )
    return desired_min + (heightmap.astype(np.float64) - curr_min) * scale


def rescale_window(grid: RegionGrid, window: TileWindow, desired_min: float, desired_max: float) -> List[Region]:
    """Rescale the combined heightmap of a complete window and write it back in place."""
    combined = build_combined(grid, window)
    result = rescaled(combined, desired_min, desired_max)
    predicate = within_window(window.num_x, window.num_y, grid.region_size)
    return scatter(grid, result, window, predicate)
