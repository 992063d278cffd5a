"""
Octile grid maps to polygons and constrained Delaunay navigation meshes.
"""

__version__ = "0.1.0"
