from __future__ import annotations

from pathlib import Path

import numpy as np

from common.logging_setup import get_logger
from common.utils import PathLike
from loaders.registry import HeaderlessLoader
from terrain.sizing import FLOAT_BYTES_PER_SAMPLE

log = get_logger("loaders.raw32")

_DTYPE = np.dtype("<f4")


class Raw32Loader(HeaderlessLoader):
    """Headerless little-endian float32 rasters (.r32/.f32), row-major from the south."""
    extensions = (".r32", ".f32")
    bytes_per_sample = FLOAT_BYTES_PER_SAMPLE

    def load_sized(self, path: PathLike, width_regions: int, height_regions: int) -> np.ndarray:
        rs = self.settings.region_size
        data = self._read_exact(path, width_regions, height_regions)
        log.debug(
            "Loaded float raster",
            extra={"extra": {"file": Path(path).name, "width": width_regions, "height": height_regions}},
        )
        arr = np.frombuffer(data, dtype=_DTYPE).reshape(height_regions * rs, width_regions * rs)
        return arr.astype(np.float32)

    def save(self, path: PathLike, heightmap: np.ndarray) -> None:
        with open(path, "wb") as f:
            f.write(np.ascontiguousarray(heightmap, dtype=_DTYPE).tobytes())
