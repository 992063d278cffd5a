"""
Boundary graph between regions of different elevation.

Lattice points are cell corners, `(x, y)` with `0 <= x <= width` and
`0 <= y <= height`. Whenever the elevation changes across a lattice edge,
that edge belongs to the region on the higher side, and each endpoint
records the other as a neighbour under that region's id. Cells outside the
map count as elevation 0, so no edge is ever shared by two regions except
along the map rim.
"""

from collections import defaultdict
from typing import Dict, Iterator, List, Optional, Tuple

import structlog

from ..errors import InvariantError
from .elevation import ElevationMap

logger = structlog.get_logger()

Point = Tuple[int, int]


class BoundaryGraph:
    """Mapping lattice point -> region id -> neighbouring lattice points."""

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self._adjacency: Dict[Point, Dict[int, List[Point]]] = defaultdict(dict)
        self.edge_count = 0

    def add_edge(self, a: Point, b: Point, region_id: int):
        self._adjacency[a].setdefault(region_id, []).append(b)
        self._adjacency[b].setdefault(region_id, []).append(a)
        self.edge_count += 1

    def neighbours(self, point: Point, region_id: int) -> List[Point]:
        """Neighbour list of `point` for `region_id` (empty if none)."""
        return self._adjacency.get(point, {}).get(region_id, [])

    def has_region(self, point: Point, region_id: int) -> bool:
        return region_id in self._adjacency.get(point, {})

    def regions_at(self, point: Point) -> List[int]:
        return sorted(self._adjacency.get(point, {}))

    def points(self) -> Iterator[Point]:
        return iter(sorted(self._adjacency))

    def __len__(self) -> int:
        return len(self._adjacency)


def _edge_owner(
    id_a: Optional[int], ele_a: int, id_b: Optional[int], ele_b: int
) -> Optional[int]:
    """Region owning the edge between two cells, or None if no edge."""
    if ele_a == ele_b:
        return None
    owner = id_a if ele_a > ele_b else id_b
    if owner is None:
        raise InvariantError("boundary edge attributed to an off-map cell")
    return owner


def build_boundary_graph(elevation_map: ElevationMap) -> BoundaryGraph:
    """
    Build the boundary graph for an elevation map.

    Args:
        elevation_map: Result of the elevation flood-fill

    Returns:
        BoundaryGraph with every elevation-changing lattice edge
    """
    grid = elevation_map.grid
    width, height = grid.width, grid.height
    region_ids = elevation_map.region_ids
    regions = elevation_map.regions

    graph = BoundaryGraph(width, height)

    def cell(x: int, y: int) -> Tuple[Optional[int], int]:
        if x < 0 or x >= width or y < 0 or y >= height:
            return None, 0
        region_id = int(region_ids[y, x])
        return region_id, regions[region_id].elevation

    # Horizontal edges: between the cells above and below lattice row `edge`
    for edge in range(height + 1):
        for x in range(width):
            owner = _edge_owner(*cell(x, edge - 1), *cell(x, edge))
            if owner is not None:
                graph.add_edge((x, edge), (x + 1, edge), owner)

    # Vertical edges: between the cells left and right of lattice column `edge`
    for edge in range(width + 1):
        for y in range(height):
            owner = _edge_owner(*cell(edge - 1, y), *cell(edge, y))
            if owner is not None:
                graph.add_edge((edge, y), (edge, y + 1), owner)

    logger.info(
        "Boundary graph built", lattice_points=len(graph), edges=graph.edge_count
    )
    return graph
