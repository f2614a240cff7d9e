from __future__ import annotations

from pathlib import Path

import numpy as np
import rasterio
from rasterio.transform import from_bounds

from common.logging_setup import get_logger
from common.utils import PathLike
from loaders.registry import TerrainLoader

log = get_logger("loaders.geotiff")


class GeoTiffLoader(TerrainLoader):
    """
    Float elevation rasters (.tif/.tiff) through rasterio.
    - Band 1 holds elevation in metres, unscaled.
    - Written files carry a unit-pixel transform with the origin at the south-west
      corner and no CRS; the grid is not georeferenced.
    """
    extensions = (".tif", ".tiff")

    def load(self, path: PathLike) -> np.ndarray:
        with rasterio.open(path) as ds:
            band = ds.read(1).astype(np.float32)
        log.debug("Loaded GeoTIFF heightmap", extra={"extra": {"file": Path(path).name, "shape": list(band.shape)}})
        return np.flipud(band).copy()

    def save(self, path: PathLike, heightmap: np.ndarray) -> None:
        rows, cols = heightmap.shape
        profile = {
            "driver": "GTiff",
            "height": rows,
            "width": cols,
            "count": 1,
            "dtype": "float32",
            "transform": from_bounds(0, 0, cols, rows, cols, rows),
        }
        with rasterio.open(path, "w", **profile) as ds:
            ds.write(np.flipud(np.asarray(heightmap, dtype=np.float32)), 1)
