"""Raster cube processing."""

from .apply import GridResult, apply_grid

__all__ = [
    "GridResult",
    "apply_grid",
]
