"""
Seam stitching between neighbouring regions.

Regions edited on their own end up with a step in elevation where they meet.
For each neighbouring pair a temporary region-sized map is built from the two
halves that touch the seam; a band `width` samples either side of the seam is
blurred with a flood smoothing pass and the halves are written back.

    west region          east region
    +--------+--------+  +--------+--------+
    |        | right  |  |  left  |        |
    |        | half ->|  |<- half |        |
    +--------+--------+  +--------+--------+
                    temp map: [right | left]
                                 ^ seam at column RegionSize/2
"""
from __future__ import annotations

from typing import List, Set

import numpy as np

from common.logging_setup import get_logger
from common.types import Region, TileWindow
from terrain.grid import RegionGrid

log = get_logger("terrain.stitch")

SMOOTH_STRENGTH = 1.0


def _bilinear(src: np.ndarray, x: np.ndarray, y: np.ndarray) -> np.ndarray:
    """Sample src[y, x] at fractional coordinates, clamped so the 2x2 patch stays inside."""
    h, w = src.shape
    x = np.clip(x, 0.0, w - 2)
    y = np.clip(y, 0.0, h - 2)
    x0 = x.astype(np.intp)
    y0 = y.astype(np.intp)
    px = x - x0
    py = y - y0
    h00 = src[y0, x0]
    h10 = src[y0, x0 + 1]
    h01 = src[y0 + 1, x0]
    h11 = src[y0 + 1, x0 + 1]
    return h00 + (h10 - h00) * px + (h01 - h00) * py + (h11 - h10 - h01 + h00) * px * py


def flood_smooth(heightmap: np.ndarray, mask: np.ndarray, strength: float = SMOOTH_STRENGTH) -> None:
    """
    Replace every masked sample by the mean of a grid of bilinear taps around it.

    Taps are spaced strength/4 apart over [-strength, strength) on both axes and
    always read the unsmoothed input. Unmasked samples are never written.
    """
    ys, xs = np.nonzero(mask)
    if xs.size == 0:
        return
    src = heightmap.astype(np.float64)
    offsets = np.arange(-strength, strength, strength / 4.0)
    fx = xs.astype(np.float64)
    fy = ys.astype(np.float64)
    total = np.zeros(xs.size, dtype=np.float64)
    for n in offsets:
        for l in offsets:
            total += _bilinear(src, fx + n, fy + l)
    heightmap[ys, xs] = total / float(offsets.size * offsets.size)


def _band(size: int, width: int) -> np.ndarray:
    """Positions strictly between centre - width and centre + width."""
    centre = size // 2
    pos = np.arange(size)
    return (pos > centre - width) & (pos < centre + width)


def stitch_east_west(west: np.ndarray, east: np.ndarray, width: int) -> None:
    """Smooth the seam between west's eastern edge and east's western edge, in place."""
    half = west.shape[1] // 2
    temp = np.concatenate([west[:, half:], east[:, :half]], axis=1)
    mask = np.broadcast_to(_band(temp.shape[1], width)[np.newaxis, :], temp.shape)
    flood_smooth(temp, mask)
    west[:, half:] = temp[:, :half]
    east[:, :half] = temp[:, half:]


def stitch_north_south(south: np.ndarray, north: np.ndarray, width: int) -> None:
    """Smooth the seam between south's northern edge and north's southern edge, in place."""
    half = south.shape[0] // 2
    temp = np.concatenate([south[half:, :], north[:half, :]], axis=0)
    mask = np.broadcast_to(_band(temp.shape[0], width)[:, np.newaxis], temp.shape)
    flood_smooth(temp, mask)
    south[half:, :] = temp[:half, :]
    north[:half, :] = temp[half:, :]


def stitch_window(grid: RegionGrid, window: TileWindow, width: int) -> List[Region]:
    """
    Stitch every neighbouring pair inside the window, east-west seams first.

    Pairs with a missing side are skipped; the window need not be contiguous.
    Returns the regions that were modified.
    """
    matrix = grid.slice(window)
    touched: List[Region] = []
    seen: Set[tuple] = set()

    def _mark(*regions: Region) -> None:
        for r in regions:
            if r.coord not in seen:
                seen.add(r.coord)
                touched.append(r)

    for j in range(window.num_y):
        for i in range(1, window.num_x):
            west, east = matrix[i - 1][j], matrix[i][j]
            if west is not None and east is not None:
                log.debug("Stitching regions", extra={"extra": {"west": west.name, "east": east.name}})
                stitch_east_west(west.heightmap, east.heightmap, width)
                _mark(west, east)

    for i in range(window.num_x):
        for j in range(1, window.num_y):
            south, north = matrix[i][j - 1], matrix[i][j]
            if south is not None and north is not None:
                log.debug("Stitching regions", extra={"extra": {"south": south.name, "north": north.name}})
                stitch_north_south(south.heightmap, north.heightmap, width)
                _mark(south, north)

    return touched
