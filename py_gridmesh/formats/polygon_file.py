"""
Polygon map files (version 1).

    poly
    1
    <N>
    <M x1 y1 ... xM yM>     one line per polygon

Coordinates are lattice coordinates of the source grid.
"""

from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Tuple, Union

import structlog

from ..errors import PolygonFormatError

logger = structlog.get_logger()

FORMAT_VERSION = 1

Number = Union[int, float]
Point = Tuple[Number, Number]


def _format_number(value: Number) -> str:
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def format_polygon_file(
    polygons: Sequence[Sequence[Point]],
    border: Optional[Sequence[Point]] = None,
) -> str:
    """
    Render polygons in poly v1 format.

    Args:
        polygons: Closed polygons, first point not repeated at the end
        border: Optional outer polygon written before all others

    Returns:
        File contents
    """
    all_polygons = ([border] if border is not None else []) + list(polygons)

    lines = ["poly", str(FORMAT_VERSION), str(len(all_polygons))]
    for polygon in all_polygons:
        coords = " ".join(
            f"{_format_number(x)} {_format_number(y)}" for x, y in polygon
        )
        lines.append(f"{len(polygon)} {coords}")
    return "\n".join(lines) + "\n"


def write_polygon_file(
    path: Union[str, Path],
    polygons: Sequence[Sequence[Point]],
    border: Optional[Sequence[Point]] = None,
) -> Path:
    """Write polygons to `path` in poly v1 format."""
    path = Path(path)
    path.write_text(format_polygon_file(polygons, border))
    logger.info(
        "Wrote polygon file",
        path=str(path),
        polygons=len(polygons) + (border is not None),
    )
    return path


def _parse_int(token: str, what: str) -> int:
    try:
        return int(token)
    except ValueError:
        raise PolygonFormatError(f"Error getting {what} (got {token!r})") from None


def _parse_coordinate(token: str) -> Number:
    try:
        value = float(token)
    except ValueError:
        raise PolygonFormatError(
            f"Error parsing map (can't get point, got {token!r})"
        ) from None
    return int(value) if value.is_integer() else value


def parse_polygon_file(text: str) -> List[List[Point]]:
    """
    Parse poly v1 contents.

    Raises:
        PolygonFormatError: on a bad header, version, polygon count, point
            count, point, or trailing data
    """
    tokens: Iterator[str] = iter(text.split())

    header = next(tokens, None)
    if header is None:
        raise PolygonFormatError("Error reading header")
    if header != "poly":
        raise PolygonFormatError(f"Invalid header (expecting 'poly', got {header!r})")

    version = next(tokens, None)
    if version is None:
        raise PolygonFormatError("Error getting version number")
    if _parse_int(version, "version number") != FORMAT_VERSION:
        raise PolygonFormatError(
            f"Invalid version (expecting {FORMAT_VERSION}, got {version})"
        )

    count = next(tokens, None)
    if count is None:
        raise PolygonFormatError("Error getting number of polys")
    n_polys = _parse_int(count, "number of polys")
    if n_polys < 1:
        raise PolygonFormatError(f"Invalid number of polys ({n_polys})")

    polygons: List[List[Point]] = []
    for _ in range(n_polys):
        size = next(tokens, None)
        if size is None:
            raise PolygonFormatError(
                "Error parsing map (can't get number of points of poly)"
            )
        n_points = _parse_int(size, "number of points of poly")
        if n_points < 3:
            raise PolygonFormatError(f"Invalid number of points in poly ({n_points})")

        polygon: List[Point] = []
        for _ in range(n_points):
            x = next(tokens, None)
            y = next(tokens, None)
            if x is None or y is None:
                raise PolygonFormatError("Error parsing map (can't get point)")
            polygon.append((_parse_coordinate(x), _parse_coordinate(y)))
        polygons.append(polygon)

    if next(tokens, None) is not None:
        raise PolygonFormatError("Error parsing map (read too much)")

    return polygons


def read_polygon_file(path: Union[str, Path]) -> List[List[Point]]:
    """Read a poly v1 file from disk."""
    path = Path(path)
    try:
        text = path.read_text()
    except OSError as e:
        raise PolygonFormatError(f"Cannot read polygon file {path}: {e}") from e
    polygons = parse_polygon_file(text)
    logger.info("Read polygon file", path=str(path), polygons=len(polygons))
    return polygons
