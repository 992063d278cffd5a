"""
Octile grid maps.

An octile map is the text grid format used by grid pathfinding benchmarks:

    type octile
    height H
    width W
    map
    <H rows of W characters>

Characters S, W, T, @ and O are obstacles, everything else is traversable.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Sequence, Union

import numpy as np
import structlog

from ..errors import MapFormatError

logger = structlog.get_logger()

OBSTACLE_CHARS = frozenset("SWT@O")


@dataclass(frozen=True)
class OctileGrid:
    """Read-only traversability grid.

    `traversable[y, x]` is True for free cells.
    """

    width: int
    height: int
    traversable: np.ndarray

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise MapFormatError(
                f"map has bad dimensions ({self.width}x{self.height})"
            )
        if self.traversable.shape != (self.height, self.width):
            raise MapFormatError(
                f"traversable shape {self.traversable.shape} does not match "
                f"{self.height}x{self.width}"
            )
        frozen = np.array(self.traversable, dtype=bool)
        frozen.setflags(write=False)
        object.__setattr__(self, "traversable", frozen)

    def is_traversable(self, x: int, y: int) -> bool:
        return bool(self.traversable[y, x])

    @classmethod
    def from_rows(cls, rows: Sequence[str]) -> "OctileGrid":
        """Build a grid from equal-length rows of octile characters."""
        height = len(rows)
        width = len(rows[0]) if rows else 0
        if any(len(row) != width for row in rows):
            raise MapFormatError("rows have different lengths")
        cells = [[c not in OBSTACLE_CHARS for c in row] for row in rows]
        return cls(width, height, np.array(cells, dtype=bool).reshape(height, width))

    @classmethod
    def from_bits(cls, bits: Iterable[bool], width: int, height: int) -> "OctileGrid":
        """Build a grid from a flat row-major sequence of traversability flags."""
        flat = np.fromiter((bool(b) for b in bits), dtype=bool)
        if flat.size != width * height:
            raise MapFormatError(
                f"expected {width * height} cells, got {flat.size}"
            )
        return cls(width, height, flat.reshape(height, width))


def _parse_dimension(header: dict, key: str) -> int:
    try:
        value = int(header[key])
    except (KeyError, ValueError):
        raise MapFormatError(f"err; map has bad header ({key})") from None
    if value <= 0:
        raise MapFormatError("err; map has bad dimensions")
    return value


def parse_octile_map(text: str) -> OctileGrid:
    """
    Parse the contents of an octile map file.

    Args:
        text: Full file contents

    Returns:
        OctileGrid

    Raises:
        MapFormatError: on a bad header, bad dimensions, a missing `map`
            keyword or a wrong number of cells
    """
    tokens = text.split(None, 7)

    # Three "field value" pairs, then "map"
    if len(tokens) < 7:
        raise MapFormatError("err; map has bad header")
    header = {tokens[i]: tokens[i + 1] for i in range(0, 6, 2)}

    if header.get("type") != "octile":
        raise MapFormatError("err; map type is not octile")

    width = _parse_dimension(header, "width")
    height = _parse_dimension(header, "height")

    if tokens[6] != "map":
        raise MapFormatError("err; map does not have 'map' keyword")

    body = tokens[7] if len(tokens) > 7 else ""
    cells: List[str] = [c for c in body if not c.isspace()]
    if len(cells) > width * height:
        raise MapFormatError("err; map has too many characters")
    if len(cells) < width * height:
        raise MapFormatError("err; map has too few characters")

    traversable = np.array([c not in OBSTACLE_CHARS for c in cells], dtype=bool)
    grid = OctileGrid(width, height, traversable.reshape(height, width))

    logger.debug(
        "Parsed octile map",
        width=width,
        height=height,
        traversable=int(traversable.sum()),
    )
    return grid


def load_octile_map(path: Union[str, Path]) -> OctileGrid:
    """Load an octile map file from disk."""
    path = Path(path)
    try:
        text = path.read_text()
    except OSError as e:
        raise MapFormatError(f"err; cannot read map {path}: {e}") from e
    grid = parse_octile_map(text)
    logger.info("Loaded map", path=str(path), width=grid.width, height=grid.height)
    return grid
