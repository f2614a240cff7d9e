from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Tuple

import numpy as np

from common.config import TerrainSettings
from common.errors import EmptyGrid, InvalidDimensions, NonRectangularRegionSet
from common.logging_setup import get_logger
from common.types import Region, TileWindow
from common.utils import PathLike
from loaders.registry import LoaderRegistry, TerrainLoader
from terrain.combine import build_combined, scatter, within_window
from terrain.grid import RegionGrid
from terrain.notify import ChangeSink, LoggingChangeSink, notify_best_effort
from terrain.rescale import rescale_window
from terrain.sizing import size_for_file, tiling_from_shape
from terrain.stitch import stitch_window

log = get_logger("terrain.tools")


class TerrainTools:
    """
    Terrain operations over every region of one grid.

    Each public operation validates first and mutates second, then reports the
    modified regions to the change sink in a single batch. Validation failures
    raise the errors in common.errors and leave every heightmap untouched.
    """

    def __init__(
        self,
        grid: RegionGrid,
        registry: LoaderRegistry,
        settings: TerrainSettings,
        sink: Optional[ChangeSink] = None,
    ):
        if grid.region_size != settings.region_size:
            raise ValueError("grid and settings disagree on region_size")
        self.grid = grid
        self.registry = registry
        self.settings = settings
        self.sink: ChangeSink = sink or LoggingChangeSink()

    # -------- queries --------

    def is_loader_registered(self, path: PathLike) -> bool:
        return self.registry.is_registered(path)

    def loader_for(self, path: PathLike) -> TerrainLoader:
        return self.registry.for_file(path)

    def check_dimensions_are_valid(self, window: TileWindow) -> bool:
        """True if the window is non-empty and every cell in it is a known region."""
        if window.num_x <= 0 or window.num_y <= 0:
            return False
        try:
            b = self.grid.bounds()
        except EmptyGrid:
            return False
        if window.start_x < b.start_x or window.start_y < b.start_y or window.end_x > b.end_x or window.end_y > b.end_y:
            return False
        # every cell needs a region, so the window can never hold more cells than the grid has regions
        if window.num_x * window.num_y > len(self.grid):
            return False
        return self.grid.window_is_complete(window)

    def determine_file_size(self, path: PathLike) -> Tuple[int, int]:
        return size_for_file(path, self.loader_for(path), self.settings.region_size)

    def is_whole_number_of_regions(self, path: PathLike) -> bool:
        loader = self.loader_for(path)
        rs = self.settings.region_size
        if loader.self_describing:
            rows, cols = loader.load(path).shape
            return rows > 0 and cols > 0 and rows % rs == 0 and cols % rs == 0
        length = Path(path).stat().st_size
        per_region = rs * rs * loader.bytes_per_sample
        return length > 0 and length % per_region == 0

    def region_summaries(self) -> List[dict]:
        return [r.to_meta() for r in self.grid.regions()]

    # -------- split --------

    def split_all(self, path: PathLike) -> List[Path]:
        return self.split_part(self.grid.bounds(), path)

    def split_part(self, window: TileWindow, path: PathLike) -> List[Path]:
        """
        Save every region of the window to its own file named <stem>-<x>-<y><ext>.
        The window need not be contiguous; empty cells are skipped.
        """
        p = Path(path)
        loader = self.loader_for(p)
        stem = p.with_suffix("")
        written: List[Path] = []
        for column in self.grid.slice(window):
            for region in column:
                if region is None:
                    continue
                out = stem.parent / f"{stem.name}-{region.x}-{region.y}{p.suffix}"
                loader.save(out, region.heightmap)
                written.append(out)
        log.info("Split regions to files", extra={"extra": {"stem": str(stem), "files": len(written)}})
        return written

    # -------- save --------

    def save_all(self, path: PathLike) -> TileWindow:
        window = self._require_rectangular()
        self.save_part(window, path)
        return window

    def save_part(self, window: TileWindow, path: PathLike) -> None:
        self._require_window(window)
        loader = self.loader_for(path)
        combined = build_combined(self.grid, window)
        loader.save(path, combined)
        log.info("Saved combined heightmap", extra={"extra": {"file": str(path), "window": _window_meta(window)}})

    # -------- load --------

    def load_all(self, path: PathLike) -> TileWindow:
        """Tile the whole grid from one file whose size must match the grid exactly."""
        window = self._require_rectangular()
        width, height = self.determine_file_size(path)
        if not self.grid.dimensions_match(width, height):
            raise InvalidDimensions(
                f"file tiles {width}x{height} regions but the grid is {window.num_x}x{window.num_y}"
            )
        self.load_part(window, path)
        return window

    def load_part(self, window: TileWindow, path: PathLike) -> List[Region]:
        """
        Load a combined heightmap and write its first num_x by num_y regions into
        the window. The file is read completely before any region is modified.
        """
        self._require_window(window)
        combined = self._read_for_window(path, window)
        predicate = within_window(window.num_x, window.num_y, self.settings.region_size)
        touched = scatter(self.grid, combined, window, predicate)
        log.info("Loaded combined heightmap", extra={"extra": {"file": str(path), "window": _window_meta(window)}})
        notify_best_effort(self.sink, touched)
        return touched

    # -------- stitch --------

    def stitch_all(self, width: int) -> List[Region]:
        return self.stitch_part(width, self.grid.bounds())

    def stitch_part(self, width: int, window: TileWindow) -> List[Region]:
        if width < 0:
            raise ValueError("stitch depth must be >= 0")
        touched = stitch_window(self.grid, window, int(width))
        log.info("Stitched seams", extra={"extra": {"width": width, "regions": len(touched), "window": _window_meta(window)}})
        notify_best_effort(self.sink, touched)
        return touched

    # -------- rescale --------

    def rescale_all(self, desired_min: float, desired_max: float) -> List[Region]:
        return self.rescale_part(desired_min, desired_max, self._require_rectangular())

    def rescale_part(self, desired_min: float, desired_max: float, window: TileWindow) -> List[Region]:
        if desired_max < desired_min:
            raise ValueError("max elevation is less than min elevation")
        self._require_window(window)
        touched = rescale_window(self.grid, window, desired_min, desired_max)
        notify_best_effort(self.sink, touched)
        return touched

    # -------- convert --------

    def convert(self, src: PathLike, dst: PathLike) -> Tuple[int, int]:
        """Re-encode a terrain file in the format of dst's extension; the grid is not touched."""
        from_loader = self.loader_for(src)
        to_loader = self.loader_for(dst)
        width, height = self.determine_file_size(src)
        heightmap = from_loader.load_sized(src, width, height)
        to_loader.save(dst, heightmap)
        log.info("Converted terrain file", extra={"extra": {"from": str(src), "to": str(dst), "width": width, "height": height}})
        return width, height

    # -------- internals --------

    def _require_rectangular(self) -> TileWindow:
        window = self.grid.bounds()
        if not self.grid.window_is_complete(window):
            raise NonRectangularRegionSet("regions do not form a contiguous, rectangular shape")
        return window

    def _require_window(self, window: TileWindow) -> None:
        if not self.check_dimensions_are_valid(window):
            raise InvalidDimensions(f"window {_window_meta(window)} exceeds the bounds of the known regions")

    def _read_for_window(self, path: PathLike, window: TileWindow) -> np.ndarray:
        loader = self.loader_for(path)
        if not loader.self_describing:
            return loader.load_sized(path, window.num_x, window.num_y)
        combined = loader.load(path)
        width, height = tiling_from_shape(combined.shape, self.settings.region_size)
        if width < window.num_x or height < window.num_y:
            raise InvalidDimensions(
                f"file tiles {width}x{height} regions, too small for a {window.num_x}x{window.num_y} window"
            )
        return combined


def _window_meta(window: TileWindow) -> dict:
    return {"x": window.start_x, "y": window.start_y, "num_x": window.num_x, "num_y": window.num_y}
