"""
Grid -> polygon -> mesh pipeline.

A GridMeshPipeline owns everything derived from one map, so several maps can
be converted in the same process (or in parallel processes) without sharing
state.
"""

from pathlib import Path
from typing import List, Optional, Tuple, Union

import structlog

from .config import Settings, settings as default_settings
from .core.boundary import BoundaryGraph, build_boundary_graph
from .core.contours import ContourTracer, Polygon
from .core.elevation import ElevationFloodFill, ElevationMap
from .core.grid import OctileGrid, load_octile_map
from .core.mesh_builder import MeshBuilder, NavMesh
from .formats.mesh_file import write_mesh_file
from .formats.polygon_file import read_polygon_file, write_polygon_file

logger = structlog.get_logger()


def border_polygon(width: int, height: int) -> Polygon:
    """The map rectangle, written first when the outside is traversable."""
    return [(0, 0), (width, 0), (width, height), (0, height)]


def output_stem(map_path: Union[str, Path]) -> Path:
    """Map path with its last extension removed."""
    path = Path(map_path)
    return path.with_suffix("") if path.suffix else path


class GridMeshPipeline:
    """Converts one grid into polygons and a navigation mesh."""

    def __init__(self, grid: OctileGrid, settings: Optional[Settings] = None):
        self.grid = grid
        self.settings = settings or default_settings

        self.elevation_map: Optional[ElevationMap] = None
        self.boundary: Optional[BoundaryGraph] = None
        self.polygons: Optional[List[Polygon]] = None
        self.split_count = 0
        self.mesh: Optional[NavMesh] = None

    @property
    def border(self) -> Optional[Polygon]:
        if self.settings.has_outside:
            return border_polygon(self.grid.width, self.grid.height)
        return None

    def grid_to_polygons(self) -> List[Polygon]:
        """Flood-fill, build the boundary graph and trace contours."""
        self.elevation_map = ElevationFloodFill(
            self.grid, has_outside=self.settings.has_outside
        ).run()
        self.boundary = build_boundary_graph(self.elevation_map)

        tracer = ContourTracer(self.elevation_map, self.boundary)
        self.polygons = tracer.trace_all()
        self.split_count = tracer.split_count
        return self.polygons

    def file_polygons(self) -> List[Polygon]:
        """Polygons as written to the polygon file (border first, if any)."""
        if self.polygons is None:
            self.grid_to_polygons()
        border = self.border
        return ([border] if border is not None else []) + list(self.polygons)

    def polygons_to_mesh(self, polygons: Optional[List[Polygon]] = None) -> NavMesh:
        """Triangulate polygons (by default, those of this grid)."""
        if polygons is None:
            polygons = self.file_polygons()
        self.mesh = MeshBuilder(polygons, self.grid.width).build()
        return self.mesh

    def write_polygons(self, path: Union[str, Path]) -> Path:
        if self.polygons is None:
            self.grid_to_polygons()
        return write_polygon_file(path, self.polygons, border=self.border)


def convert_grid_to_poly(
    grid: OctileGrid, path: Union[str, Path], has_outside: bool = False
) -> List[Polygon]:
    """Trace a grid and write its polygon file. Returns the written polygons."""
    pipeline = GridMeshPipeline(grid, Settings(has_outside=has_outside))
    pipeline.write_polygons(path)
    return pipeline.file_polygons()


def convert_poly_to_mesh(
    poly_path: Union[str, Path], mesh_path: Union[str, Path], width: Optional[int] = None
) -> NavMesh:
    """Read a polygon file, triangulate it and write the mesh file."""
    polygons = read_polygon_file(poly_path)
    mesh = MeshBuilder(polygons, width).build()
    write_mesh_file(mesh_path, mesh)
    return mesh


def run_cdt(
    map_path: Union[str, Path], settings: Optional[Settings] = None
) -> Tuple[Path, Path]:
    """
    Convert an octile map file into `<stem>.poly` and `<stem>.cdt`.

    The mesh is built from the polygon file just written, exactly as a
    separate invocation on that file would.
    """
    settings = settings or default_settings
    grid = load_octile_map(map_path)
    stem = output_stem(map_path)
    poly_path = stem.with_name(stem.name + settings.poly_suffix)
    mesh_path = stem.with_name(stem.name + settings.mesh_suffix)

    pipeline = GridMeshPipeline(grid, settings)
    pipeline.write_polygons(poly_path)
    convert_poly_to_mesh(poly_path, mesh_path, grid.width)

    logger.info(
        "Conversion complete",
        map=str(map_path),
        polygons=str(poly_path),
        mesh=str(mesh_path),
    )
    return poly_path, mesh_path


def run_poly(
    map_path: Union[str, Path], settings: Optional[Settings] = None
) -> Path:
    """Convert an octile map file into `<stem>.poly` only."""
    settings = settings or default_settings
    grid = load_octile_map(map_path)
    stem = output_stem(map_path)
    poly_path = stem.with_name(stem.name + settings.poly_suffix)
    GridMeshPipeline(grid, settings).write_polygons(poly_path)
    return poly_path
