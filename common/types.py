from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Tuple
import numpy as np

from common.errors import InvalidHeightmap


HEIGHT_DTYPE = np.float32


def new_heightmap(region_size: int, fill: float = 0.0) -> np.ndarray:
    """Blank RegionSize x RegionSize heightmap, indexed [y, x]."""
    return np.full((region_size, region_size), fill, dtype=HEIGHT_DTYPE)


@dataclass(slots=True)
class Region:
    """
    One simulator region and the heightmap it owns.

    Attributes:
        x, y: integer grid coordinate (unique within a grid).
        name: display name used in logs and command output.
        heightmap: np.ndarray of shape (RegionSize, RegionSize), float32, [y, x].
    """
    x: int
    y: int
    name: str
    heightmap: np.ndarray = field(repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.heightmap, np.ndarray):
            raise TypeError("heightmap must be a numpy ndarray")
        if self.heightmap.ndim != 2 or self.heightmap.shape[0] != self.heightmap.shape[1]:
            raise InvalidHeightmap(f"heightmap for {self.name} must be square, got {self.heightmap.shape}")
        if self.heightmap.dtype != HEIGHT_DTYPE:
            self.heightmap = self.heightmap.astype(HEIGHT_DTYPE)
        self.x = int(self.x)
        self.y = int(self.y)

    @property
    def coord(self) -> Tuple[int, int]:
        return (self.x, self.y)

    @property
    def size(self) -> int:
        return int(self.heightmap.shape[0])

    def to_meta(self) -> Dict[str, Any]:
        """Metadata without heightmap samples (safe to log/serialize)."""
        return {
            "x": self.x,
            "y": self.y,
            "name": self.name,
            "size": self.size,
            "min": float(self.heightmap.min()),
            "max": float(self.heightmap.max()),
        }


@dataclass(frozen=True, slots=True)
class TileWindow:
    """Rectangle of grid coordinates: (start_x, start_y) plus an extent in regions."""
    start_x: int
    start_y: int
    num_x: int
    num_y: int

    def __post_init__(self) -> None:
        if self.num_x < 0 or self.num_y < 0:
            raise ValueError("window extent must be >= 0")

    @property
    def end_x(self) -> int:
        return self.start_x + self.num_x

    @property
    def end_y(self) -> int:
        return self.start_y + self.num_y

    def contains(self, x: int, y: int) -> bool:
        return self.start_x <= x < self.end_x and self.start_y <= y < self.end_y

    def cells(self) -> Iterator[Tuple[int, int]]:
        """Window-relative (i, j) offsets, column by column."""
        for i in range(self.num_x):
            for j in range(self.num_y):
                yield i, j

    def sample_shape(self, region_size: int) -> Tuple[int, int]:
        """(rows, cols) of a combined heightmap covering this window."""
        return (self.num_y * region_size, self.num_x * region_size)
