from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List, Optional

import numpy as np

from common.config import TerrainSettings
from common.errors import TruncatedFile, UnknownFormat
from common.utils import PathLike
from terrain.sizing import infer_square_tiling


class TerrainLoader:
    """
    Reads and writes whole heightmaps, indexed [y, x] with row 0 the southern edge.

    Self-describing formats (images) know their own dimensions. Headerless formats
    are sized from the byte length (`bytes_per_sample`) or by the caller through
    `load_sized`.
    """
    extensions: tuple = ()
    self_describing: bool = True
    bytes_per_sample: int = 0

    def __init__(self, settings: TerrainSettings):
        self.settings = settings

    @property
    def name(self) -> str:
        return type(self).__name__

    def load(self, path: PathLike) -> np.ndarray:
        raise NotImplementedError

    def save(self, path: PathLike, heightmap: np.ndarray) -> None:
        raise NotImplementedError

    def load_sized(self, path: PathLike, width_regions: int, height_regions: int) -> np.ndarray:
        """Load with an explicit size in regions; self-describing formats ignore it."""
        return self.load(path)


class HeaderlessLoader(TerrainLoader):
    """Base for raw sample streams; the caller or the file length decides the size."""
    self_describing = False

    def load(self, path: PathLike) -> np.ndarray:
        size = Path(path).stat().st_size
        width, height = infer_square_tiling(size, self.bytes_per_sample, self.settings.region_size)
        return self.load_sized(path, width, height)

    def _read_exact(self, path: PathLike, width_regions: int, height_regions: int) -> bytes:
        """Read every sample record of a width x height region file, or raise TruncatedFile."""
        rs = self.settings.region_size
        expected = width_regions * rs * height_regions * rs * self.bytes_per_sample
        with open(path, "rb") as f:
            data = f.read(expected)
        if len(data) < expected:
            raise TruncatedFile(
                f"{Path(path).name}: expected {expected} bytes for {width_regions}x{height_regions} regions, got {len(data)}"
            )
        return data


class LoaderRegistry:
    """
    Extension -> loader table. One instance per grid; nothing here is global, so
    tests and multiple grids in one process each carry their own set.
    """

    def __init__(self, loaders: Iterable[TerrainLoader] = ()):
        self._loaders: Dict[str, TerrainLoader] = {}
        for loader in loaders:
            self.register(loader)

    def register(self, loader: TerrainLoader, extensions: Optional[Iterable[str]] = None) -> None:
        for ext in extensions or loader.extensions:
            self._loaders[_normalise(ext)] = loader

    def is_registered(self, path: PathLike) -> bool:
        return _normalise(Path(path).suffix) in self._loaders

    def for_file(self, path: PathLike) -> TerrainLoader:
        ext = _normalise(Path(path).suffix)
        try:
            return self._loaders[ext]
        except KeyError:
            raise UnknownFormat(f"no loader is registered for files of type '{ext or Path(path).name}'") from None

    def extensions(self) -> List[str]:
        return sorted(self._loaders)


def _normalise(ext: str) -> str:
    ext = ext.lower()
    return ext if not ext or ext.startswith(".") else "." + ext

