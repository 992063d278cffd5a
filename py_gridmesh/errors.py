"""Exception hierarchy for grid-to-mesh conversion."""


class GridMeshError(Exception):
    """Base class for every error raised by py_gridmesh."""


class InputFormatError(GridMeshError):
    """An input file could not be parsed."""


class MapFormatError(InputFormatError):
    """Malformed octile map file."""


class PolygonFormatError(InputFormatError):
    """Malformed polygon (poly v1) file."""


class MeshFormatError(InputFormatError):
    """Malformed mesh (mesh v2) file."""


class InvariantError(GridMeshError):
    """An internal invariant was violated. Indicates a defect, not bad input."""


class DegenerateGeometryError(GridMeshError):
    """Geometry that a stage cannot work with (e.g. polygon with < 3 points)."""


class TriangulationError(GridMeshError):
    """The triangulation engine failed or produced no triangles."""
