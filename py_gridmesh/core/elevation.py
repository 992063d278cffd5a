"""
Elevation flood-fill.

Every cell gets a region id and every region an "elevation": the minimum
number of traversability changes needed to reach it from outside the map.
With a traversable outside:

- free space connected to the outside has elevation 0
- obstacles touching elevation-0 free space have elevation 1
- free space enclosed by those obstacles has elevation 2

and so on. With a non-traversable outside (the default) the roles of free
space and obstacles are swapped.

This is a Dijkstra over the cell graph where an edge weighs 0 when both cells
have the same traversability and 1 otherwise. Diagonal neighbours are only
connected through free cells, matching octile movement rules.
"""

import heapq
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np
import structlog

from .grid import OctileGrid

logger = structlog.get_logger()

Cell = Tuple[int, int]

# Orthogonal neighbours: left, right, up, down
DX = (-1, 1, 0, 0)
DY = (0, 0, -1, 1)

# Diagonal neighbours, only followed from traversable cells
DIAG_X = (-1, -1, 1, 1)
DIAG_Y = (1, -1, 1, -1)


@dataclass(frozen=True)
class Region:
    """A connected set of cells sharing traversability and elevation."""

    id: int
    elevation: int
    first_cell: Cell
    traversable: bool


@dataclass
class ElevationMap:
    """Result of the flood-fill: a region id per cell and the region table."""

    grid: OctileGrid
    region_ids: np.ndarray  # region_ids[y, x]
    regions: List[Region]

    def region_at(self, x: int, y: int) -> Region:
        return self.regions[int(self.region_ids[y, x])]

    def elevation_at(self, x: int, y: int) -> int:
        return self.region_at(x, y).elevation

    def elevations(self) -> np.ndarray:
        """Per-cell elevation array, shape (height, width)."""
        table = np.array([r.elevation for r in self.regions], dtype=np.int32)
        return table[self.region_ids]


def search_priority(elevation: int, region_id: Optional[int], order: int) -> tuple:
    """
    Heap key for a frontier entry.

    Lower elevation first. Among equal elevations, entries that already carry
    a region id come before unassigned ones (higher ids first), so a region
    is fully flooded before a new id is minted at the same elevation.
    `order` keeps the search deterministic.
    """
    if region_id is None:
        return (elevation, 1, 0, order)
    return (elevation, 0, -region_id, order)


class ElevationFloodFill:
    """Assigns region ids and elevations to every cell of a grid."""

    def __init__(self, grid: OctileGrid, has_outside: bool = False):
        """
        Args:
            grid: Input grid
            has_outside: Whether the area beyond the map edge counts as
                traversable
        """
        self.grid = grid
        self.has_outside = has_outside

        self._open: list = []
        self._pushed = 0

    def _push(self, elevation: int, region_id: Optional[int], cell: Cell):
        key = search_priority(elevation, region_id, self._pushed)
        heapq.heappush(self._open, (key, elevation, region_id, cell))
        self._pushed += 1

    def _seed_rim(self):
        """Push every rim cell; elevation 0 if it matches the outside."""
        width, height = self.grid.width, self.grid.height
        traversable = self.grid.traversable

        def seed(x: int, y: int):
            self._push(int(self.has_outside != traversable[y, x]), None, (x, y))

        bottom_row = height - 1
        for x in range(width):
            seed(x, 0)
            seed(x, bottom_row)

        right_col = width - 1
        for y in range(1, bottom_row):
            seed(0, y)
            seed(right_col, y)

    def run(self) -> ElevationMap:
        """Run the flood-fill and return the ElevationMap."""
        width, height = self.grid.width, self.grid.height
        traversable = self.grid.traversable

        region_ids = np.zeros((height, width), dtype=np.int32)
        finalized = np.zeros((height, width), dtype=bool)
        regions: List[Region] = []

        self._open = []
        self._pushed = 0
        self._seed_rim()

        while self._open:
            _, elevation, region_id, (x, y) = heapq.heappop(self._open)
            if finalized[y, x]:
                continue

            if region_id is None:
                region_id = len(regions)
                regions.append(
                    Region(
                        id=region_id,
                        elevation=elevation,
                        first_cell=(x, y),
                        traversable=bool(traversable[y, x]),
                    )
                )
            region_ids[y, x] = region_id
            finalized[y, x] = True

            here = traversable[y, x]
            steps = list(zip(DX, DY))
            if here:
                steps = list(zip(DIAG_X, DIAG_Y)) + steps

            for dx, dy in steps:
                nx, ny = x + dx, y + dy
                if nx < 0 or nx >= width or ny < 0 or ny >= height:
                    continue
                if finalized[ny, nx]:
                    continue

                if traversable[ny, nx] == here:
                    self._push(elevation, region_id, (nx, ny))
                else:
                    self._push(elevation + 1, None, (nx, ny))

        logger.info(
            "Elevation flood-fill complete",
            regions=len(regions),
            max_elevation=max((r.elevation for r in regions), default=0),
        )
        return ElevationMap(grid=self.grid, region_ids=region_ids, regions=regions)


def compute_elevation(grid: OctileGrid, has_outside: bool = False) -> ElevationMap:
    """Convenience wrapper around ElevationFloodFill."""
    return ElevationFloodFill(grid, has_outside).run()
