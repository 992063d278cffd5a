"""
Readers and writers for polygon (v1) and mesh (v2) files.
"""

from .polygon_file import (
    format_polygon_file, write_polygon_file, parse_polygon_file, read_polygon_file
)
from .mesh_file import format_mesh_file, write_mesh_file, parse_mesh_file, read_mesh_file

__all__ = ['format_polygon_file', 'write_polygon_file', 'parse_polygon_file', 'read_polygon_file',
           'format_mesh_file', 'write_mesh_file', 'parse_mesh_file', 'read_mesh_file']
