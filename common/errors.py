from __future__ import annotations


class TerrainToolsError(Exception):
    """Base class for every failure the terrain tools report to a caller."""


class InvalidDimensions(TerrainToolsError):
    """Requested window exceeds the regions known to the grid."""


class UnknownFormat(TerrainToolsError):
    """No loader is registered for a file extension."""


class NotTileable(TerrainToolsError):
    """File does not hold a whole number of regions."""


class NotSquare(TerrainToolsError):
    """Headerless file holds a region count with no integer square root."""


class TruncatedFile(TerrainToolsError):
    """Stream ended before every expected sample was read."""


class NonRectangularRegionSet(TerrainToolsError):
    """Whole-grid operation needs every cell of the bounding box."""


class ResolvedRegionMissing(TerrainToolsError):
    """A cell that validation said was present turned out to be absent."""


class DegenerateRescale(TerrainToolsError):
    """Current elevation range is zero but a non-zero range was requested."""


class EmptyGrid(TerrainToolsError):
    """Operation needs at least one registered region."""


class DuplicateRegion(TerrainToolsError):
    """A region is already registered at this coordinate."""


class InvalidHeightmap(TerrainToolsError):
    """Heightmap array has the wrong shape for the grid."""
