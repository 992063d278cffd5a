"""Tests for the elevation flood-fill."""

import numpy as np
import pytest

from py_gridmesh.core.elevation import (
    ElevationFloodFill, compute_elevation, search_priority
)
from py_gridmesh.core.grid import OctileGrid


BLOCK_ROWS = [
    ".....",
    ".@@@.",
    ".@@@.",
    ".@@@.",
    ".....",
]

RING_ROWS = [
    ".......",
    ".@@@@@.",
    ".@...@.",
    ".@.@.@.",
    ".@...@.",
    ".@@@@@.",
    ".......",
]


class TestSearchPriority:
    """Test the frontier ordering."""

    def test_lower_elevation_first(self):
        """Test that elevation dominates every other criterion."""
        assert search_priority(0, None, 10) < search_priority(1, 5, 0)

    def test_assigned_before_unassigned(self):
        """Test entries with a region id beat unassigned ones at equal elevation."""
        assert search_priority(2, 0, 10) < search_priority(2, None, 0)

    def test_higher_id_first(self):
        """Test that among assigned entries the newest region is flooded first."""
        assert search_priority(1, 3, 10) < search_priority(1, 2, 0)

    def test_push_order_breaks_ties(self):
        """Test that equal entries pop in push order."""
        assert search_priority(1, None, 1) < search_priority(1, None, 2)


class TestElevationFloodFill:
    """Test region ids and elevations."""

    def test_block_with_outside(self):
        """Test a solid block inside free space is one elevation-1 region."""
        grid = OctileGrid.from_rows(BLOCK_ROWS)
        emap = compute_elevation(grid, has_outside=True)

        assert len(emap.regions) == 2
        free, block = emap.regions
        assert (free.elevation, free.traversable) == (0, True)
        assert (block.elevation, block.traversable) == (1, False)
        assert block.first_cell == (1, 1)
        assert np.all(emap.region_ids[1:4, 1:4] == block.id)
        assert emap.region_at(0, 0) == free

    def test_all_free_without_outside(self):
        """Test an open map is a single elevation-1 region."""
        grid = OctileGrid.from_rows(["...", "...", "..."])
        emap = compute_elevation(grid)

        assert len(emap.regions) == 1
        region = emap.regions[0]
        assert region.elevation == 1
        assert region.first_cell == (0, 0)
        assert region.traversable
        assert np.all(emap.region_ids == 0)

    def test_nested_regions(self):
        """Test elevation grows by one for each enclosure."""
        grid = OctileGrid.from_rows(RING_ROWS)
        emap = compute_elevation(grid, has_outside=True)
        elevations = emap.elevations()

        assert elevations[0, 0] == 0
        assert elevations[1, 1] == 1
        assert elevations[2, 2] == 2
        assert elevations[3, 3] == 3
        assert len(emap.regions) == 4

    def test_neighbouring_elevations_differ_by_at_most_one(self):
        """Test orthogonally adjacent cells never jump more than one level."""
        grid = OctileGrid.from_rows(RING_ROWS)
        elevations = compute_elevation(grid, has_outside=True).elevations()

        assert np.abs(np.diff(elevations, axis=0)).max() <= 1
        assert np.abs(np.diff(elevations, axis=1)).max() <= 1

    def test_diagonal_obstacles_are_separate(self):
        """Test obstacles touching only at a corner form two regions."""
        grid = OctileGrid.from_rows(["....", ".@..", "..@.", "...."])
        emap = compute_elevation(grid, has_outside=True)

        first = emap.region_at(1, 1)
        second = emap.region_at(2, 2)
        assert first.id != second.id
        assert first.elevation == second.elevation == 1
        assert first.first_cell == (1, 1)

    def test_free_cells_connect_diagonally(self):
        """Test free cells touching at a corner share a region."""
        grid = OctileGrid.from_rows([".@", "@."])
        emap = compute_elevation(grid)

        assert [r.elevation for r in emap.regions] == [0, 0, 1]
        assert emap.region_at(0, 0).id == emap.region_at(1, 1).id == 2
        assert emap.regions[2].first_cell == (0, 0)
        assert emap.region_at(1, 0).id != emap.region_at(0, 1).id

    def test_every_cell_assigned(self):
        """Test that every cell carries a valid region id."""
        rng = np.random.default_rng(7)
        cells = rng.random((12, 15)) < 0.7
        grid = OctileGrid(15, 12, cells)
        emap = ElevationFloodFill(grid, has_outside=True).run()

        assert emap.region_ids.min() >= 0
        assert emap.region_ids.max() == len(emap.regions) - 1
        for region in emap.regions:
            x, y = region.first_cell
            assert emap.region_ids[y, x] == region.id
            assert grid.is_traversable(x, y) == region.traversable

    @pytest.mark.parametrize("has_outside", [False, True])
    def test_deterministic(self, has_outside):
        """Test two runs give identical results."""
        grid = OctileGrid.from_rows(RING_ROWS)
        first = compute_elevation(grid, has_outside)
        second = compute_elevation(grid, has_outside)

        assert np.array_equal(first.region_ids, second.region_ids)
        assert first.regions == second.regions
