"""Pixel grid allocation, bounds checks and resizing.

A grid is a ``numpy.ndarray`` of packed colors with dtype ``uint32`` and
shape ``(height, width)``; cells are addressed as ``grid[y, x]``.
Grids are treated as immutable values: every operation that changes
content returns a new array.
"""
from __future__ import annotations

import logging
from typing import NamedTuple, Optional

import numpy as np

from .color import TRANSPARENT

logger = logging.getLogger("pixel_canvas")

GRID_DTYPE = np.uint32


class GridSize(NamedTuple):
    """Shared grid dimensions for a layer stack."""

    width: int
    height: int


def new_grid(width: int, height: int) -> np.ndarray:
    """Allocate a fully transparent grid."""
    return np.full((height, width), TRANSPARENT, dtype=GRID_DTYPE)


def grid_size(grid: np.ndarray) -> GridSize:
    """Return the dimensions of a grid."""
    height, width = grid.shape
    return GridSize(width, height)


def in_bounds(grid: np.ndarray, x: int, y: int) -> bool:
    """Check whether ``(x, y)`` addresses a cell of the grid."""
    height, width = grid.shape
    return 0 <= x < width and 0 <= y < height


def get_cell(grid: np.ndarray, x: int, y: int) -> Optional[int]:
    """Read a cell, or None when the coordinate is out of bounds."""
    if not in_bounds(grid, x, y):
        return None
    return int(grid[y, x])


def grid_changed(before: np.ndarray, after: np.ndarray) -> bool:
    """Edit functions return their input unchanged when nothing was written."""
    return after is not before


def resize_grid(grid: np.ndarray, width: int, height: int) -> np.ndarray:
    """Resize a grid, keeping the overlapping top-left region.

    Newly exposed cells are transparent; cells beyond the new bounds are
    discarded.

    Args:
        grid: Source grid.
        width: New width in cells.
        height: New height in cells.

    Returns:
        A new grid of shape ``(height, width)``.
    """
    old_height, old_width = grid.shape
    resized = new_grid(width, height)
    copy_w = min(old_width, width)
    copy_h = min(old_height, height)
    resized[:copy_h, :copy_w] = grid[:copy_h, :copy_w]
    logger.debug(
        f"Resized grid {old_width}x{old_height} -> {width}x{height} "
        f"(kept {copy_w}x{copy_h})"
    )
    return resized
