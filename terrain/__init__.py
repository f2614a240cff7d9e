"""
Terrain core: region grid geometry and heightmap operations

This package provides:
- RegionGrid: sparse (x, y) -> Region map with bounds and dense window views
- File size inference for headerless terrain files (square tilings only)
- Combined heightmap build/scatter across a window of regions
- Seam stitching between neighbouring regions (flood smoothing in a band)
- Linear elevation rescaling

TerrainTools (terrain.tools) ties these to a loader registry and a change sink;
RegionStore (terrain.store) loads a grid from disk and persists changes.
"""
from .grid import RegionGrid
from .sizing import infer_square_tiling
from .combine import build_combined, scatter, within_window
from .stitch import stitch_window
from .rescale import rescale_window

__all__ = [
    "RegionGrid",
    "infer_square_tiling",
    "build_combined",
    "scatter",
    "within_window",
    "stitch_window",
    "rescale_window",
]
