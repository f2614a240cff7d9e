import os
import sys

import pytest

project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.append(project_root)

from common.config import TerrainSettings
from loaders import default_registry
from terrain.grid import RegionGrid
from tests.factories import RS, ramp_region


@pytest.fixture
def settings(tmp_path):
    return TerrainSettings(region_size=RS, regions_root=str(tmp_path / "regions"))


@pytest.fixture
def registry(settings):
    return default_registry(settings)


@pytest.fixture
def grid_2x2():
    """2x2 block at (1000..1001, 1000..1001) with distinct values per region."""
    regions = [ramp_region(1000 + i, 1000 + j, offset=10000.0 * (2 * i + j)) for i in range(2) for j in range(2)]
    return RegionGrid(RS, regions)
