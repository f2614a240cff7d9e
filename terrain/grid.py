from __future__ import annotations

import threading
from typing import Dict, Iterable, List, Optional, Tuple

from common.errors import DuplicateRegion, EmptyGrid, InvalidHeightmap
from common.types import Region, TileWindow

RegionMatrix = List[List[Optional[Region]]]


class RegionGrid:
    """
    Sparse set of regions keyed by (x, y) grid coordinate.

    Membership changes are serialised by a lock. Readers take a snapshot of
    the membership (`regions()`, `slice()`), so an operation that is already
    running never sees a region appear or vanish half way through.
    """

    def __init__(self, region_size: int, regions: Iterable[Region] = ()):
        self.region_size = int(region_size)
        self._regions: Dict[Tuple[int, int], Region] = {}
        self._lock = threading.Lock()
        for r in regions:
            self.add_region(r)

    # -------- membership --------

    def add_region(self, region: Region) -> None:
        """Register a region. A second region at the same coordinate is rejected."""
        if region.size != self.region_size:
            raise InvalidHeightmap(
                f"region {region.name} is {region.size} samples wide, grid expects {self.region_size}"
            )
        with self._lock:
            if region.coord in self._regions:
                other = self._regions[region.coord]
                raise DuplicateRegion(
                    f"cannot add {region.name}: {other.name} already occupies {region.coord}"
                )
            self._regions[region.coord] = region

    def regions(self) -> List[Region]:
        """Snapshot of every registered region, ordered by (x, y)."""
        with self._lock:
            return sorted(self._regions.values(), key=lambda r: r.coord)

    def region_at(self, x: int, y: int) -> Optional[Region]:
        with self._lock:
            return self._regions.get((int(x), int(y)))

    def __len__(self) -> int:
        with self._lock:
            return len(self._regions)

    # -------- geometry --------

    def bounds(self) -> TileWindow:
        """Smallest window covering every registered coordinate."""
        with self._lock:
            coords = list(self._regions)
        if not coords:
            raise EmptyGrid("no regions are registered")
        xs = [c[0] for c in coords]
        ys = [c[1] for c in coords]
        return TileWindow(
            start_x=min(xs),
            start_y=min(ys),
            num_x=max(xs) - min(xs) + 1,
            num_y=max(ys) - min(ys) + 1,
        )

    def slice(self, window: TileWindow) -> RegionMatrix:
        """
        Dense view of the window: matrix[i][j] is the region at
        (start_x + i, start_y + j), or None when that cell is empty.
        """
        with self._lock:
            snapshot = dict(self._regions)
        matrix: RegionMatrix = [[None] * window.num_y for _ in range(window.num_x)]
        for (x, y), region in snapshot.items():
            if window.contains(x, y):
                matrix[x - window.start_x][y - window.start_y] = region
        return matrix

    def window_is_complete(self, window: TileWindow) -> bool:
        """True if every cell of the window holds a region."""
        matrix = self.slice(window)
        return all(region is not None for column in matrix for region in column)

    def is_rectangular_complete(self) -> bool:
        return self.window_is_complete(self.bounds())

    def dimensions_match(self, num_x: int, num_y: int) -> bool:
        b = self.bounds()
        return b.num_x == int(num_x) and b.num_y == int(num_y)
