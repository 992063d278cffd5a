"""
Constrained Delaunay triangulation adapter.

The heavy lifting is done by the `triangle` package (bindings for Shewchuk's
Triangle). This module feeds it the polygon vertices and edges as a planar
straight line graph, then erases the triangles lying outside the polygons or
inside holes using even/odd layering:

- the space outside every polygon has depth 0
- crossing a constraint edge adds one per polygon edge lying on it
- triangles at odd depth are inside, everything else is erased

Triangle neighbours are returned so that `neighbors[i]` lies across the edge
`vertices[i] -> vertices[(i + 1) % 3]`.
"""

import heapq
from bisect import bisect_left, bisect_right
from collections import Counter, defaultdict
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import structlog
import triangle as tr

from ..errors import InvariantError, TriangulationError

logger = structlog.get_logger()

Edge = Tuple[int, int]

# p: planar straight line graph, n: output neighbours
TRIANGLE_SWITCHES = "pn"


@dataclass
class TriangleRecord:
    """A triangle: three counter-clockwise vertex indices and its neighbours."""

    vertices: Tuple[int, int, int]
    neighbors: Tuple[Optional[int], Optional[int], Optional[int]]

    def index_of(self, vertex: int) -> int:
        """Position of `vertex` within this triangle."""
        try:
            return self.vertices.index(vertex)
        except ValueError:
            raise InvariantError(f"vertex {vertex} not in triangle {self.vertices}") from None


@dataclass
class Triangulation:
    """Engine output: index-preserving vertex array plus surviving triangles."""

    vertices: np.ndarray  # shape (V, 2)
    triangles: List[TriangleRecord]


def _key(a: int, b: int) -> Edge:
    return (a, b) if a < b else (b, a)


def split_constraints(vertices: np.ndarray, edges: Sequence[Edge]) -> Counter:
    """
    Split constraint edges at every vertex lying on them.

    Polygons may share collinear edges (for example an obstacle touching the
    map border). Splitting lets the layering count how many polygon edges lie
    on each piece.

    Returns:
        Counter mapping undirected piece (low, high) -> number of edges on it
    """
    rows: Dict[float, List[Tuple[float, int]]] = defaultdict(list)
    cols: Dict[float, List[Tuple[float, int]]] = defaultdict(list)
    for index, (x, y) in enumerate(vertices):
        rows[y].append((x, index))
        cols[x].append((y, index))
    for line in list(rows.values()) + list(cols.values()):
        line.sort()

    pieces: Counter = Counter()
    for a, b in edges:
        if a == b:
            raise InvariantError(f"degenerate constraint edge ({a}, {b})")
        ax, ay = vertices[a]
        bx, by = vertices[b]

        if ay == by or ax == bx:
            # Axis-aligned: walk the sorted vertices on the same line
            line = rows[ay] if ay == by else cols[ax]
            lo, hi = (ax, bx) if ay == by else (ay, by)
            if lo > hi:
                lo, hi = hi, lo
            start = bisect_left(line, (lo, -1))
            stop = bisect_right(line, (hi, len(vertices)))
            chain = [index for _, index in line[start:stop]]
        else:
            chain = [a, b]
            for index, (x, y) in enumerate(vertices):
                if index in (a, b):
                    continue
                cross = (bx - ax) * (y - ay) - (by - ay) * (x - ax)
                if cross == 0 and min(ax, bx) < x < max(ax, bx):
                    chain.append(index)
            chain.sort(key=lambda i: (vertices[i][0], vertices[i][1]))

        for u, v in zip(chain, chain[1:]):
            pieces[_key(u, v)] += 1

    return pieces


def _layer_depths(triangles: np.ndarray, neighbors: np.ndarray, pieces: Counter) -> List[Optional[int]]:
    """Shortest crossing count from outside to every triangle."""
    n = len(triangles)
    depth: List[Optional[int]] = [None] * n
    open_list: list = []

    def weight(t: int, i: int) -> int:
        u = int(triangles[t][(i + 1) % 3])
        v = int(triangles[t][(i + 2) % 3])
        return pieces.get(_key(u, v), 0)

    for t in range(n):
        for i in range(3):
            if neighbors[t][i] == -1:
                heapq.heappush(open_list, (weight(t, i), t))

    while open_list:
        d, t = heapq.heappop(open_list)
        if depth[t] is not None:
            continue
        depth[t] = d
        for i in range(3):
            nb = int(neighbors[t][i])
            if nb == -1 or depth[nb] is not None:
                continue
            heapq.heappush(open_list, (d + weight(t, i), nb))

    return depth


def triangulate(vertices: np.ndarray, edges: Sequence[Edge]) -> Triangulation:
    """
    Constrained Delaunay triangulation of polygon vertices and edges, with
    outer triangles and holes erased.

    Args:
        vertices: (V, 2) array of unique coordinates
        edges: Constraint edges as vertex index pairs

    Returns:
        Triangulation

    Raises:
        TriangulationError: when the engine fails, inserts new vertices, or
            nothing survives erasure
    """
    vertices = np.asarray(vertices, dtype=float)
    if len(vertices) < 3:
        raise TriangulationError(f"need at least 3 vertices, got {len(vertices)}")

    for a, b in edges:
        if not (0 <= a < len(vertices) and 0 <= b < len(vertices)):
            raise InvariantError(f"constraint edge ({a}, {b}) out of range")

    pieces = split_constraints(vertices, edges)
    segments = np.array(sorted(pieces), dtype=np.int32).reshape(-1, 2)

    try:
        result = tr.triangulate(
            {"vertices": vertices, "segments": segments}, TRIANGLE_SWITCHES
        )
    except Exception as e:
        raise TriangulationError(f"triangulation engine failed: {e}") from e

    if "triangles" not in result or len(result["triangles"]) == 0:
        raise TriangulationError("Error: generating CDT failed (no triangles)")
    if len(result["vertices"]) != len(vertices):
        raise TriangulationError(
            f"engine inserted {len(result['vertices']) - len(vertices)} extra vertices"
        )

    raw_triangles = np.asarray(result["triangles"], dtype=np.int64)
    raw_neighbors = np.asarray(result["neighbors"], dtype=np.int64)

    depth = _layer_depths(raw_triangles, raw_neighbors, pieces)
    kept = [t for t in range(len(raw_triangles)) if depth[t] is not None and depth[t] % 2 == 1]
    if not kept:
        raise TriangulationError("Error: generating CDT failed (all triangles erased)")
    renumber = {old: new for new, old in enumerate(kept)}

    triangles: List[TriangleRecord] = []
    for old in kept:
        tri = tuple(int(v) for v in raw_triangles[old])
        # engine neighbour i is opposite vertex i; edge i -> i+1 is opposite i+2
        across = []
        for i in range(3):
            nb = int(raw_neighbors[old][(i + 2) % 3])
            across.append(renumber.get(nb) if nb != -1 else None)
        triangles.append(TriangleRecord(vertices=tri, neighbors=tuple(across)))

    logger.info(
        "Triangulated",
        vertices=len(vertices),
        constraints=len(segments),
        raw_triangles=len(raw_triangles),
        triangles=len(triangles),
    )
    return Triangulation(vertices=vertices, triangles=triangles)
