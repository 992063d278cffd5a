"""Tests for the grid -> polygon -> mesh pipeline."""

from pathlib import Path

import pytest

from py_gridmesh.config import Settings
from py_gridmesh.core.grid import OctileGrid
from py_gridmesh.formats.mesh_file import read_mesh_file
from py_gridmesh.pipeline import (
    GridMeshPipeline, border_polygon, convert_grid_to_poly, convert_poly_to_mesh,
    output_stem, run_cdt, run_poly
)


BLOCK_MAP = """type octile
height 5
width 5
map
.....
.@@@.
.@@@.
.@@@.
.....
"""


@pytest.fixture
def block_map(tmp_path):
    path = tmp_path / "block.map"
    path.write_text(BLOCK_MAP)
    return path


class TestGridMeshPipeline:
    """Test a pipeline instance."""

    def test_polygons_without_outside(self):
        """Test the map rim and the block are both traced."""
        grid = OctileGrid.from_rows([".....", ".@@@.", ".@@@.", ".@@@.", "....."])
        pipeline = GridMeshPipeline(grid, Settings(has_outside=False))

        assert pipeline.grid_to_polygons() == [
            [(5, 0), (5, 5), (0, 5), (0, 0)],
            [(4, 1), (4, 4), (1, 4), (1, 1)],
        ]
        assert pipeline.border is None
        assert pipeline.split_count == 0

    def test_file_polygons_with_outside(self):
        """Test the border rectangle leads the polygons when the outside is free."""
        grid = OctileGrid.from_rows([".....", ".@@@.", ".@@@.", ".@@@.", "....."])
        pipeline = GridMeshPipeline(grid, Settings(has_outside=True))

        assert pipeline.file_polygons() == [
            border_polygon(5, 5),
            [(4, 1), (4, 4), (1, 4), (1, 1)],
        ]
        mesh = pipeline.polygons_to_mesh()
        assert (mesh.vertex_count, mesh.triangle_count) == (8, 8)

    def test_pipelines_are_independent(self):
        """Test two pipelines in one process do not share state."""
        first = GridMeshPipeline(OctileGrid.from_rows([".@", "@."]), Settings())
        second = GridMeshPipeline(OctileGrid.from_rows(["...", "..."]), Settings())

        first.grid_to_polygons()
        second.grid_to_polygons()
        assert first.split_count == 1
        assert second.split_count == 0
        assert len(first.polygons) == 2
        assert len(second.polygons) == 1


class TestRunCdt:
    """Test the file-to-file conversion."""

    def test_writes_both_files(self, block_map):
        """Test .poly and .cdt files are written next to the map."""
        poly_path, mesh_path = run_cdt(block_map, Settings(has_outside=True))

        assert poly_path == block_map.with_suffix(".poly")
        assert mesh_path == block_map.with_suffix(".cdt")
        assert poly_path.read_text() == (
            "poly\n1\n2\n4 0 0 5 0 5 5 0 5\n4 4 1 4 4 1 4 1 1\n"
        )
        mesh = read_mesh_file(mesh_path)
        assert (mesh.vertex_count, mesh.triangle_count) == (8, 8)

    def test_idempotent(self, block_map):
        """Test two runs produce byte-identical outputs."""
        poly_path, mesh_path = run_cdt(block_map)
        first = (poly_path.read_bytes(), mesh_path.read_bytes())
        run_cdt(block_map)

        assert (poly_path.read_bytes(), mesh_path.read_bytes()) == first

    def test_poly_only(self, block_map):
        """Test run_poly does not write a mesh."""
        poly_path = run_poly(block_map)

        assert poly_path.exists()
        assert not block_map.with_suffix(".cdt").exists()

    def test_mesh_from_poly_file_matches(self, block_map, tmp_path):
        """Test meshing a written polygon file gives the same mesh file."""
        poly_path, mesh_path = run_cdt(block_map)
        other = tmp_path / "again.cdt"
        convert_poly_to_mesh(poly_path, other, width=5)

        assert other.read_bytes() == mesh_path.read_bytes()

    def test_convert_grid_to_poly(self, tmp_path):
        """Test the returned polygons match what was written."""
        grid = OctileGrid.from_rows([".@", "@."])
        polygons = convert_grid_to_poly(grid, tmp_path / "pinch.poly")

        assert polygons == [
            [(1, 0), (1, 1), (0, 1), (0, 0)],
            [(2, 1), (2, 2), (1, 2), (1, 1)],
        ]
        assert (tmp_path / "pinch.poly").read_text().splitlines()[2] == "2"


class TestOutputStem:
    """Test output naming."""

    @pytest.mark.parametrize("given, expected", [
        ("maps/arena.map", "maps/arena"),
        ("maps/a.b.map", "maps/a.b"),
        ("noext", "noext"),
    ])
    def test_last_extension_removed(self, given, expected):
        """Test only the last extension is stripped."""
        assert output_stem(given) == Path(expected)
