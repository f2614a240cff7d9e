"""
Unit tests for combined heightmap build/scatter
"""

import os
import sys

import numpy as np
import pytest

project_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.append(project_root)

from common.errors import ResolvedRegionMissing
from common.types import TileWindow
from terrain.combine import always, build_combined, scatter, within_window
from terrain.grid import RegionGrid
from tests.factories import RS, make_region

WINDOW = TileWindow(1000, 1000, 2, 2)


class TestBuildCombined:
    """Region blocks land at [j*RS, i*RS]"""

    def test_shape_and_placement(self, grid_2x2):
        combined = build_combined(grid_2x2, WINDOW)
        assert combined.shape == (2 * RS, 2 * RS)
        assert combined.dtype == np.float32
        # region (1000, 1001): offset 10000, row 3 col 5
        assert combined[RS + 3, 5] == pytest.approx(10305.0)
        # region (1001, 1000): offset 20000, row 2 col 1
        assert combined[2, RS + 1] == pytest.approx(20201.0)

    def test_missing_region_raises(self):
        grid = RegionGrid(RS, [make_region(0, 0)])
        with pytest.raises(ResolvedRegionMissing):
            build_combined(grid, TileWindow(0, 0, 2, 1))


class TestScatter:
    """Writing combined samples back into regions"""

    def test_build_then_scatter_reproduces_regions(self, grid_2x2):
        originals = {r.coord: r.heightmap.copy() for r in grid_2x2.regions()}
        combined = build_combined(grid_2x2, WINDOW)
        for r in grid_2x2.regions():
            r.heightmap[:] = -1.0

        touched = scatter(grid_2x2, combined, WINDOW, always)

        assert len(touched) == 4
        for r in grid_2x2.regions():
            np.testing.assert_array_equal(r.heightmap, originals[r.coord])

    def test_predicate_limits_written_regions(self, grid_2x2):
        combined = np.full((2 * RS, 2 * RS), 7.0, dtype=np.float32)
        touched = scatter(grid_2x2, combined, WINDOW, within_window(1, 1, RS))

        assert [r.coord for r in touched] == [(1000, 1000)]
        assert np.all(grid_2x2.region_at(1000, 1000).heightmap == 7.0)
        assert not np.any(grid_2x2.region_at(1001, 1001).heightmap == 7.0)

    def test_sample_level_predicate(self, grid_2x2):
        combined = np.zeros((2 * RS, 2 * RS), dtype=np.float32)
        west_half = lambda xs, ys: xs < RS // 2  # noqa: E731
        scatter(grid_2x2, combined, WINDOW, west_half)

        hm = grid_2x2.region_at(1000, 1000).heightmap
        assert np.all(hm[:, : RS // 2] == 0.0)
        assert np.all(hm[:, RS // 2:] != 0.0)

    def test_oversized_combined_is_clipped_to_window(self, grid_2x2):
        combined = np.full((3 * RS, 3 * RS), 1.0, dtype=np.float32)
        touched = scatter(grid_2x2, combined, WINDOW, always)
        assert len(touched) == 4

    def test_absent_selected_cell_raises(self):
        grid = RegionGrid(RS, [make_region(0, 0)])
        combined = np.zeros((RS, 2 * RS), dtype=np.float32)
        with pytest.raises(ResolvedRegionMissing):
            scatter(grid, combined, TileWindow(0, 0, 2, 1), always)

    def test_absent_unselected_cell_is_fine(self):
        grid = RegionGrid(RS, [make_region(0, 0)])
        combined = np.ones((RS, 2 * RS), dtype=np.float32)
        touched = scatter(grid, combined, TileWindow(0, 0, 2, 1), within_window(1, 1, RS))
        assert [r.coord for r in touched] == [(0, 0)]
