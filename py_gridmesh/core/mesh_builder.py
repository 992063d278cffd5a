"""
Navigation mesh construction from polygons.

Steps:
1. Deduplicate polygon vertices (first occurrence wins an index)
2. Build the closed edge cycle of every polygon as triangulation constraints
3. Triangulate and erase everything outside the polygons or inside holes
4. Build, for every vertex, the counter-clockwise fan of incident triangles,
   with -1 wherever the fan is interrupted by the mesh boundary
"""

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import structlog

from ..errors import DegenerateGeometryError, InvariantError
from .triangulation import Edge, TriangleRecord, triangulate

logger = structlog.get_logger()

# Fan entry marking a boundary discontinuity
FAN_GAP = -1

Number = float
Point = Tuple[Number, Number]


@dataclass
class NavMesh:
    """Triangulated navigation mesh with per-vertex triangle fans."""

    vertices: np.ndarray  # (V, 2)
    triangles: List[TriangleRecord]
    fans: List[List[int]] = field(default_factory=list)

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def triangle_count(self) -> int:
        return len(self.triangles)


def polar_angle(point: Sequence[float], center: Sequence[float]) -> float:
    return math.atan2(point[1] - center[1], point[0] - center[0])


def build_vertex_fans(vertices: np.ndarray, triangles: Sequence[TriangleRecord]) -> List[List[int]]:
    """
    Order the triangles around each vertex.

    Each triangle touching vertex `v` is placed by the polar angle (around
    `v`) of its vertex two positions after `v`. Consecutive triangles are
    continuous when the vertex after `v` in the later one equals the vertex
    two after `v` in the earlier one; otherwise FAN_GAP is inserted. A
    discontinuity between the last and first triangle appends a trailing
    FAN_GAP.

    A vertex left without triangles after hole erasure (an obstacle corner
    on the map border) gets an empty fan.

    Raises:
        InvariantError: when a vertex index is out of range
    """
    n_vertices = len(vertices)
    incident: List[List[int]] = [[] for _ in range(n_vertices)]
    for t, triangle in enumerate(triangles):
        for v in triangle.vertices:
            if v < 0 or v >= n_vertices:
                raise InvariantError(f"Error: vertices index out of range ({v})")
            incident[v].append(t)

    fans: List[List[int]] = []
    for v, tri_ids in enumerate(incident):
        if not tri_ids:
            logger.warning("Vertex touches no triangle", vertex=v, point=tuple(vertices[v]))
            fans.append([])
            continue

        center = vertices[v]
        # (triangle id, position of v in it)
        ordered = []
        for t in tri_ids:
            ordered.append((t, triangles[t].index_of(v)))
        ordered.sort(
            key=lambda item: polar_angle(
                vertices[triangles[item[0]].vertices[(item[1] + 2) % 3]], center
            )
        )

        if len(ordered) == 1:
            fans.append([ordered[0][0], FAN_GAP])
            continue

        def after(item) -> int:
            t, pos = item
            return triangles[t].vertices[(pos + 1) % 3]

        def before(item) -> int:
            t, pos = item
            return triangles[t].vertices[(pos + 2) % 3]

        fan = [ordered[0][0]]
        previous = ordered[0]
        for item in ordered[1:]:
            if after(item) != before(previous):
                fan.append(FAN_GAP)
            fan.append(item[0])
            previous = item
        if after(ordered[0]) != before(previous):
            fan.append(FAN_GAP)
        fans.append(fan)

    return fans


class MeshBuilder:
    """Builds a NavMesh from polygons on a lattice of the given width."""

    def __init__(self, polygons: Sequence[Sequence[Point]], width: Optional[int] = None):
        """
        Args:
            polygons: Closed polygons (first point not repeated)
            width: Width of the source grid. Lattice coordinates are hashed as
                `y * (width + 1) + x`. Derived from the polygons if omitted.
        """
        for polygon in polygons:
            if len(polygon) < 3:
                raise DegenerateGeometryError(
                    f"polygon with {len(polygon)} points cannot be meshed"
                )
        self.polygons = [list(p) for p in polygons]
        if width is None:
            width = int(math.ceil(max((x for p in self.polygons for x, _ in p), default=0)))
        self.width = width

        self.vertices: List[Point] = []
        # per polygon, the deduplicated index of each of its points
        self.polygon_indices: List[List[int]] = []

    def deduplicate(self) -> List[Point]:
        """Assign each distinct coordinate a stable 0-based index."""
        stride = self.width + 1
        index_of: Dict[float, int] = {}
        self.vertices = []
        self.polygon_indices = []

        for polygon in self.polygons:
            ids = []
            for x, y in polygon:
                key = y * stride + x
                if key not in index_of:
                    index_of[key] = len(self.vertices)
                    self.vertices.append((x, y))
                ids.append(index_of[key])
            self.polygon_indices.append(ids)

        return self.vertices

    def build_edges(self) -> List[Edge]:
        """Consecutive vertex pairs of every polygon, closing each cycle."""
        if not self.polygon_indices:
            self.deduplicate()

        edges: List[Edge] = []
        for ids in self.polygon_indices:
            for i in range(1, len(ids)):
                edges.append((ids[i - 1], ids[i]))
            edges.append((ids[-1], ids[0]))

        for a, b in edges:
            if not (0 <= a < len(self.vertices) and 0 <= b < len(self.vertices)):
                raise InvariantError(f"edge_id can not match ({a}, {b})")
        return edges

    def build(self) -> NavMesh:
        """Run all steps and return the mesh."""
        self.deduplicate()
        edges = self.build_edges()

        triangulation = triangulate(np.array(self.vertices, dtype=float), edges)
        fans = build_vertex_fans(triangulation.vertices, triangulation.triangles)

        mesh = NavMesh(
            vertices=triangulation.vertices,
            triangles=triangulation.triangles,
            fans=fans,
        )
        logger.info(
            "Mesh built",
            polygons=len(self.polygons),
            vertices=mesh.vertex_count,
            triangles=mesh.triangle_count,
        )
        return mesh


def build_mesh(polygons: Sequence[Sequence[Point]], width: Optional[int] = None) -> NavMesh:
    """Convenience wrapper around MeshBuilder.build."""
    return MeshBuilder(polygons, width).build()
