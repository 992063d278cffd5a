"""
Contour tracing over the boundary graph.

For each region with elevation > 0 we walk its boundary edges starting from
a corner of the region's first cell and emit the corners of the walk as a
polygon. Elevation-0 regions are the implicit background and produce
nothing.

A lattice point with four neighbours for the same region is a "pinch": the
region touches itself diagonally there. The walk turns at a pinch according
to a fixed rule and, when it comes back to the same pinch, the loop closed
since the first visit is split off as a polygon of its own.
"""

from typing import List, Optional, Tuple

import structlog

from ..errors import DegenerateGeometryError, InvariantError
from .boundary import BoundaryGraph, Point
from .elevation import ElevationMap, Region

logger = structlog.get_logger()

Polygon = List[Point]


def _is_corner(a: Point, b: Point) -> bool:
    """True when the path a -> cur -> b turns (neighbours not colinear)."""
    return a[0] != b[0] and a[1] != b[1]


class ContourTracer:
    """Traces every nonzero-elevation region of an elevation map."""

    def __init__(self, elevation_map: ElevationMap, boundary: BoundaryGraph):
        self.elevation_map = elevation_map
        self.boundary = boundary
        self.split_count = 0

    def find_start_corner(self, region: Region) -> Optional[Point]:
        """First corner of the region's first cell lying on its boundary."""
        cell_x, cell_y = region.first_cell
        for dx in range(2):
            for dy in range(2):
                corner = (cell_x + dx, cell_y + dy)
                if self.boundary.has_region(corner, region.id):
                    return corner
        return None

    def _pinch_turn(self, region: Region, last: Point, cur: Point) -> Point:
        """
        Next point after a pinch.

        Whether the cell to the lower right of `cur` belongs to the region,
        compared with the parity of the region's elevation, tells which of
        the two diagonal configurations we are in:

            .@          @.
            @.   or     .@

        In the first case coming from the left we go down, from the right we
        go up (and symmetrically for vertical arrivals). The second case is
        mirrored.
        """
        cx, cy = cur
        inside = int(self.elevation_map.region_ids[cy, cx]) == region.id
        odd = region.elevation % 2 == 1
        sign = 1 if inside == odd else -1

        if cx != last[0]:
            return (cx, cy + sign * (cx - last[0]))
        return (cx + sign * (cy - last[1]), cy)

    def trace_region(self, region: Region) -> Tuple[Polygon, List[Polygon]]:
        """
        Walk the boundary of one region.

        Returns:
            (polygon, splits): the polygon containing the first emitted
            corner, and every polygon split off at a revisited pinch, in
            the order they were closed
        """
        start = self.find_start_corner(region)
        if start is None:
            raise DegenerateGeometryError(
                f"region {region.id} has no boundary corner at {region.first_cell}"
            )

        last = start
        neighbours = self.boundary.neighbours(last, region.id)
        if len(neighbours) not in (2, 4):
            raise InvariantError(
                f"lattice point {last} has {len(neighbours)} neighbours "
                f"for region {region.id}"
            )
        cur = neighbours[0]

        current: Polygon = []
        splits: List[Polygon] = []
        first_last: Optional[Point] = None
        # index just past the first visit of each pinch in `current`
        pinch_index = {}

        while not current or cur != current[0] or last != first_last:
            if abs(cur[0] - last[0]) + abs(cur[1] - last[1]) != 1:
                raise InvariantError(f"walk jumped from {last} to {cur}")

            neighbours = self.boundary.neighbours(cur, region.id)

            if len(neighbours) == 4:
                if not current:
                    first_last = last
                current.append(cur)
                if cur in pinch_index:
                    cut = pinch_index[cur]
                    splits.append(current[cut:])
                    current = current[:cut]
                    self.split_count += 1
                else:
                    pinch_index[cur] = len(current)
                nxt = self._pinch_turn(region, last, cur)

            elif len(neighbours) == 2:
                a, b = neighbours
                if _is_corner(a, b):
                    if not current:
                        first_last = last
                    current.append(cur)
                nxt = b if a == last else a

            else:
                raise InvariantError(
                    f"lattice point {cur} has {len(neighbours)} neighbours "
                    f"for region {region.id}"
                )

            last, cur = cur, nxt

        return current, splits

    def trace_all(self) -> List[Polygon]:
        """
        Trace every region with elevation > 0.

        Returns:
            One polygon per traced region in region-id order, followed by all
            split-off polygons in the order they were split
        """
        polygons: List[Polygon] = []
        split_polygons: List[Polygon] = []

        for region in self.elevation_map.regions:
            if region.elevation == 0:
                continue
            polygon, splits = self.trace_region(region)
            polygons.append(polygon)
            split_polygons.extend(splits)

        for polygon in polygons + split_polygons:
            if len(polygon) < 3:
                raise DegenerateGeometryError(
                    f"traced polygon has {len(polygon)} points: {polygon}"
                )

        logger.info(
            "Traced contours",
            polygons=len(polygons) + len(split_polygons),
            splits=len(split_polygons),
        )
        return polygons + split_polygons


def trace_contours(elevation_map: ElevationMap, boundary: BoundaryGraph) -> List[Polygon]:
    """Convenience wrapper around ContourTracer.trace_all."""
    return ContourTracer(elevation_map, boundary).trace_all()
