"""
Grayscale image heightmaps.

Brightness maps linearly to elevation: a full-scale pixel is
`settings.image_height_scale`, black is 0. Images are stored north-up, so rows
are flipped to keep row 0 the southern edge in memory.
"""
from __future__ import annotations

from pathlib import Path

import cv2
import numpy as np
from PIL import Image

from common.errors import InvalidHeightmap
from common.logging_setup import get_logger
from common.utils import PathLike
from loaders.registry import TerrainLoader

log = get_logger("loaders.image")


def pixels_to_heights(pixels: np.ndarray, scale: float) -> np.ndarray:
    full = float(np.iinfo(pixels.dtype).max) if np.issubdtype(pixels.dtype, np.integer) else 1.0
    return np.flipud(pixels.astype(np.float64) / full * scale).astype(np.float32)


def heights_to_pixels(heightmap: np.ndarray, scale: float) -> np.ndarray:
    px = np.rint(np.asarray(heightmap, dtype=np.float64) / scale * 255.0)
    return np.ascontiguousarray(np.flipud(np.clip(px, 0, 255).astype(np.uint8)))


class OpenCVImageLoader(TerrainLoader):
    """PNG and BMP through OpenCV; colour images are reduced to luminance."""
    extensions = (".png", ".bmp")

    def load(self, path: PathLike) -> np.ndarray:
        img = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
        if img is None:
            raise InvalidHeightmap(f"cannot decode image {Path(path).name}")
        if img.ndim == 3:
            code = cv2.COLOR_BGRA2GRAY if img.shape[2] == 4 else cv2.COLOR_BGR2GRAY
            img = cv2.cvtColor(img, code)
        log.debug("Loaded image heightmap", extra={"extra": {"file": Path(path).name, "shape": list(img.shape)}})
        return pixels_to_heights(img, self.settings.image_height_scale)

    def save(self, path: PathLike, heightmap: np.ndarray) -> None:
        if not cv2.imwrite(str(path), heights_to_pixels(heightmap, self.settings.image_height_scale)):
            raise OSError(f"OpenCV could not write {path}")


class GifLoader(TerrainLoader):
    """GIF through Pillow, which OpenCV cannot write."""
    extensions = (".gif",)

    def load(self, path: PathLike) -> np.ndarray:
        with Image.open(path) as img:
            pixels = np.asarray(img.convert("L"))
        return pixels_to_heights(pixels, self.settings.image_height_scale)

    def save(self, path: PathLike, heightmap: np.ndarray) -> None:
        Image.fromarray(heights_to_pixels(heightmap, self.settings.image_height_scale)).save(path, format="GIF")
