"""
Terrain file loaders

- registry: TerrainLoader contract and LoaderRegistry (extension -> loader)
- raw32: headerless float32 rasters (.r32/.f32)
- llraw: legacy 13-byte-per-sample LLRAW (.raw)
- image: 8-bit grayscale PNG/BMP (OpenCV) and GIF (Pillow)
- geotiff: float GeoTIFF (rasterio)

Usage:
    from loaders import default_registry
    registry = default_registry(settings)
    heightmap = registry.for_file("island.r32").load("island.r32")
"""
from common.config import TerrainSettings

from .registry import HeaderlessLoader, LoaderRegistry, TerrainLoader
from .geotiff import GeoTiffLoader
from .image import GifLoader, OpenCVImageLoader
from .llraw import LLRawLoader
from .raw32 import Raw32Loader


def default_registry(settings: TerrainSettings) -> LoaderRegistry:
    """The standard loader set: float raster, LLRAW, 8-bit images and GeoTIFF."""
    return LoaderRegistry(
        [
            Raw32Loader(settings),
            LLRawLoader(settings),
            OpenCVImageLoader(settings),
            GifLoader(settings),
            GeoTiffLoader(settings),
        ]
    )


__all__ = [
    "HeaderlessLoader",
    "LoaderRegistry",
    "TerrainLoader",
    "default_registry",
    "GeoTiffLoader",
    "GifLoader",
    "OpenCVImageLoader",
    "LLRawLoader",
    "Raw32Loader",
]
