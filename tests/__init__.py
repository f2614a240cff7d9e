"""
Terrain Tools Test Suite

Structure:
- unit/: grid geometry, size inference, combine/scatter, stitching, rescaling,
  loaders, change notification and the command controller
- integration/: region store on disk, CLI and HTTP hosts

Tests use a 16-sample region size so heightmaps stay small.
"""
