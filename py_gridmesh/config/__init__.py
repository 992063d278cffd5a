"""
Configuration for grid-to-mesh conversion.
"""

from .config import Settings, settings

__all__ = ["Settings", "settings"]
