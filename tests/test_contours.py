"""Tests for contour tracing."""

import pytest

from py_gridmesh.core.boundary import build_boundary_graph
from py_gridmesh.core.contours import ContourTracer, trace_contours
from py_gridmesh.core.elevation import Region, compute_elevation
from py_gridmesh.core.grid import OctileGrid
from py_gridmesh.errors import DegenerateGeometryError


def trace(rows, has_outside=False):
    emap = compute_elevation(OctileGrid.from_rows(rows), has_outside)
    return ContourTracer(emap, build_boundary_graph(emap))


class TestContourTracer:
    """Test polygons traced from simple grids."""

    def test_single_block(self):
        """Test a 3x3 block inside a 5x5 map gives one four-corner polygon."""
        tracer = trace([
            ".....",
            ".@@@.",
            ".@@@.",
            ".@@@.",
            ".....",
        ], has_outside=True)

        polygons = tracer.trace_all()
        assert polygons == [[(4, 1), (4, 4), (1, 4), (1, 1)]]
        assert tracer.split_count == 0

    def test_open_map_without_outside(self):
        """Test an open map is traced along its rim."""
        polygons = trace(["...", "...", "..."]).trace_all()

        assert polygons == [[(3, 0), (3, 3), (0, 3), (0, 0)]]

    def test_only_corners_are_emitted(self):
        """Test straight runs of boundary produce no intermediate points."""
        polygons = trace(["....", "...."]).trace_all()

        assert polygons == [[(4, 0), (4, 2), (0, 2), (0, 0)]]

    def test_diagonal_obstacles(self):
        """Test diagonally touching obstacles are two closed polygons."""
        tracer = trace([
            "....",
            ".@..",
            "..@.",
            "....",
        ], has_outside=True)

        polygons = tracer.trace_all()
        assert polygons == [
            [(2, 1), (2, 2), (1, 2), (1, 1)],
            [(3, 2), (3, 3), (2, 3), (2, 2)],
        ]
        assert tracer.split_count == 0

    def test_pinch_split(self):
        """Test a region touching itself at a corner is split in two."""
        tracer = trace([".@", "@."])

        polygons = tracer.trace_all()
        assert polygons == [
            [(1, 0), (1, 1), (0, 1), (0, 0)],
            [(2, 1), (2, 2), (1, 2), (1, 1)],
        ]
        assert tracer.split_count == 1

    def test_nested_regions_in_id_order(self):
        """Test enclosed regions are traced in region id order."""
        polygons = trace([
            ".......",
            ".@@@@@.",
            ".@...@.",
            ".@.@.@.",
            ".@...@.",
            ".@@@@@.",
            ".......",
        ], has_outside=True).trace_all()

        assert polygons == [
            [(6, 1), (6, 6), (1, 6), (1, 1)],
            [(5, 2), (5, 5), (2, 5), (2, 2)],
            [(4, 3), (4, 4), (3, 4), (3, 3)],
        ]

    def test_background_produces_nothing(self):
        """Test a map of only elevation-0 space traces no polygons."""
        assert trace(["...", "..."], has_outside=True).trace_all() == []

    def test_chained_pinches(self):
        """Test splits come out in the order they close, after the main polygon."""
        tracer = trace([".@@", "@.@", "@@."])

        polygons = tracer.trace_all()
        assert polygons == [
            [(1, 0), (1, 1), (0, 1), (0, 0)],
            [(3, 2), (3, 3), (2, 3), (2, 2)],
            [(2, 1), (2, 2), (1, 2), (1, 1)],
        ]
        assert tracer.split_count == 2
        for polygon in polygons:
            assert len(set(polygon)) == len(polygon)

    def test_region_without_boundary(self):
        """Test a region with no boundary corner is rejected."""
        tracer = trace(["...", "..."], has_outside=True)
        ghost = Region(id=99, elevation=1, first_cell=(0, 0), traversable=False)

        assert tracer.find_start_corner(ghost) is None
        with pytest.raises(DegenerateGeometryError):
            tracer.trace_region(ghost)


class TestTraceContours:
    """Test the convenience wrapper."""

    def test_matches_tracer(self):
        """Test trace_contours gives the same polygons as ContourTracer."""
        rows = [".@", "@."]
        emap = compute_elevation(OctileGrid.from_rows(rows))
        boundary = build_boundary_graph(emap)

        assert trace_contours(emap, boundary) == trace(rows).trace_all()
