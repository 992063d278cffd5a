"""
Core grid-to-mesh functionality.
"""

from .grid import OctileGrid, parse_octile_map, load_octile_map
from .elevation import ElevationMap, ElevationFloodFill, Region, compute_elevation
from .boundary import BoundaryGraph, build_boundary_graph
from .contours import ContourTracer, Polygon, trace_contours
from .triangulation import TriangleRecord, Triangulation, triangulate
from .mesh_builder import NavMesh, MeshBuilder, build_mesh, build_vertex_fans

__all__ = ['OctileGrid', 'parse_octile_map', 'load_octile_map',
           'ElevationMap', 'ElevationFloodFill', 'Region', 'compute_elevation',
           'BoundaryGraph', 'build_boundary_graph',
           'ContourTracer', 'Polygon', 'trace_contours',
           'TriangleRecord', 'Triangulation', 'triangulate',
           'NavMesh', 'MeshBuilder', 'build_mesh', 'build_vertex_fans']
