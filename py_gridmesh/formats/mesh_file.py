"""
Mesh files (version 2).

    mesh
    2
    <V> <T>
    <x y K idx_1 ... idx_K>     one line per vertex, idx may be -1
    <3 v1 v2 v3 n1 n2 n3>       one line per triangle, n may be -1

Triangle neighbours are written rotated by one from the in-memory order:
neighbour 2, then 0, then 1.
"""

from pathlib import Path
from typing import List, Union

import numpy as np
import structlog

from ..core.mesh_builder import NavMesh
from ..core.triangulation import TriangleRecord
from ..errors import MeshFormatError

logger = structlog.get_logger()

FORMAT_VERSION = 2
NO_NEIGHBOUR = -1

# in-memory neighbour positions, in file order
NEIGHBOUR_ORDER = (2, 0, 1)


def format_coordinate(value: float) -> str:
    """Integers print as integers, anything else with 10 decimals."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.10f}"


def format_mesh_file(mesh: NavMesh) -> str:
    """Render a NavMesh in mesh v2 format."""
    lines = ["mesh", str(FORMAT_VERSION), f"{mesh.vertex_count} {mesh.triangle_count}"]

    for (x, y), fan in zip(mesh.vertices, mesh.fans):
        parts = [format_coordinate(x), format_coordinate(y), str(len(fan))]
        parts.extend(str(index) for index in fan)
        lines.append(" ".join(parts))

    for triangle in mesh.triangles:
        parts = ["3"] + [str(v) for v in triangle.vertices]
        for i in NEIGHBOUR_ORDER:
            nb = triangle.neighbors[i]
            parts.append(str(NO_NEIGHBOUR if nb is None else nb))
        lines.append(" ".join(parts))

    return "\n".join(lines) + "\n"


def write_mesh_file(path: Union[str, Path], mesh: NavMesh) -> Path:
    path = Path(path)
    path.write_text(format_mesh_file(mesh))
    logger.info(
        "Wrote mesh file",
        path=str(path),
        vertices=mesh.vertex_count,
        triangles=mesh.triangle_count,
    )
    return path


def _ints(tokens: List[str], line_no: int) -> List[int]:
    try:
        return [int(t) for t in tokens]
    except ValueError:
        raise MeshFormatError(f"line {line_no}: expected integers, got {tokens}") from None


def parse_mesh_file(text: str) -> NavMesh:
    """
    Parse mesh v2 contents back into a NavMesh.

    Raises:
        MeshFormatError: on a bad header, version, counts or record
    """
    lines = [line.split() for line in text.splitlines() if line.strip()]
    if len(lines) < 3:
        raise MeshFormatError("Error reading header")
    if lines[0] != ["mesh"]:
        raise MeshFormatError(f"Invalid header (expecting 'mesh', got {lines[0]})")
    if lines[1] != [str(FORMAT_VERSION)]:
        raise MeshFormatError(f"Invalid version (expecting {FORMAT_VERSION}, got {lines[1]})")

    counts = _ints(lines[2], 3)
    if len(counts) != 2 or min(counts) < 0:
        raise MeshFormatError(f"Invalid vertex / triangle counts {lines[2]}")
    n_vertices, n_triangles = counts
    if len(lines) != 3 + n_vertices + n_triangles:
        raise MeshFormatError(
            f"expected {n_vertices + n_triangles} records, got {len(lines) - 3}"
        )

    coords = []
    fans = []
    for offset, tokens in enumerate(lines[3:3 + n_vertices]):
        line_no = 4 + offset
        if len(tokens) < 3:
            raise MeshFormatError(f"line {line_no}: truncated vertex record")
        try:
            coords.append((float(tokens[0]), float(tokens[1])))
        except ValueError:
            raise MeshFormatError(f"line {line_no}: bad coordinate") from None
        fan_size, *fan = _ints(tokens[2:], line_no)
        if fan_size != len(fan):
            raise MeshFormatError(f"line {line_no}: fan size {fan_size} != {len(fan)}")
        fans.append(fan)

    triangles = []
    for offset, tokens in enumerate(lines[3 + n_vertices:]):
        line_no = 4 + n_vertices + offset
        values = _ints(tokens, line_no)
        if len(values) != 7 or values[0] != 3:
            raise MeshFormatError(f"line {line_no}: bad triangle record")
        neighbours = [None, None, None]
        for i, value in zip(NEIGHBOUR_ORDER, values[4:]):
            neighbours[i] = None if value == NO_NEIGHBOUR else value
        triangles.append(
            TriangleRecord(vertices=tuple(values[1:4]), neighbors=tuple(neighbours))
        )

    return NavMesh(
        vertices=np.array(coords, dtype=float).reshape(-1, 2),
        triangles=triangles,
        fans=fans,
    )


def read_mesh_file(path: Union[str, Path]) -> NavMesh:
    path = Path(path)
    try:
        text = path.read_text()
    except OSError as e:
        raise MeshFormatError(f"Cannot read mesh file {path}: {e}") from e
    return parse_mesh_file(text)
