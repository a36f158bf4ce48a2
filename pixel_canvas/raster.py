"""Raster editing: point plotting, line rasterization and flood fill.

All functions take a grid and return a grid. When no cell changes the input
array itself is returned; otherwise the edit is applied to a copy, so the
input is never mutated and readers never observe a half-written grid.
"""
from __future__ import annotations

import logging
from typing import Iterator, List, Tuple

import numpy as np

from .grid import in_bounds

logger = logging.getLogger("pixel_canvas")


def set_pixel(grid: np.ndarray, x: int, y: int, color: int) -> np.ndarray:
    """Set a single cell.

    Out-of-bounds coordinates and writes of the color the cell already holds
    are no-ops and return ``grid`` itself.
    """
    if not in_bounds(grid, x, y) or grid[y, x] == color:
        return grid
    result = grid.copy()
    result[y, x] = color
    return result


def line_cells(x0: int, y0: int, x1: int, y1: int) -> Iterator[Tuple[int, int]]:
    """Yield the cells of a Bresenham line, both endpoints included.

    Steps one unit along the dominant axis per cell, so a line yields exactly
    ``max(|dx|, |dy|) + 1`` cells and consecutive cells are 8-adjacent.
    """
    dx = abs(x1 - x0)
    dy = -abs(y1 - y0)
    sx = 1 if x0 < x1 else -1
    sy = 1 if y0 < y1 else -1
    err = dx + dy

    x, y = x0, y0
    while True:
        yield x, y
        if x == x1 and y == y1:
            return
        e2 = 2 * err
        if e2 >= dy:
            err += dy
            x += sx
        if e2 <= dx:
            err += dx
            y += sy


def draw_line(
    grid: np.ndarray, x0: int, y0: int, x1: int, y1: int, color: int
) -> np.ndarray:
    """Draw a straight segment between two cells.

    Cells along the path that fall outside the grid are skipped.

    Args:
        grid: Source grid.
        x0: Start column.
        y0: Start row.
        x1: End column.
        y1: End row.
        color: Packed color to write.

    Returns:
        ``grid`` itself if no cell changed, otherwise an edited copy.
    """
    result = grid
    for x, y in line_cells(x0, y0, x1, y1):
        if not in_bounds(grid, x, y) or result[y, x] == color:
            continue
        if result is grid:
            result = grid.copy()
        result[y, x] = color
    return result


def flood_fill(grid: np.ndarray, x: int, y: int, color: int) -> np.ndarray:
    """Fill the 4-connected region containing ``(x, y)``.

    Every cell reachable from the seed through cells equal to the seed's
    color is set to ``color``. Uses an explicit stack; a cell is recolored
    when first popped, so later pops of the same cell are skipped.

    Args:
        grid: Source grid.
        x: Seed column.
        y: Seed row.
        color: Packed color to fill with.

    Returns:
        ``grid`` itself if the seed is out of bounds or already ``color``,
        otherwise a filled copy.
    """
    if not in_bounds(grid, x, y):
        return grid
    target = grid[y, x]
    if target == color:
        return grid

    height, width = grid.shape
    result = grid.copy()
    stack: List[Tuple[int, int]] = [(x, y)]
    filled = 0

    while stack:
        cx, cy = stack.pop()
        if result[cy, cx] != target:
            continue
        result[cy, cx] = color
        filled += 1
        if cx + 1 < width and result[cy, cx + 1] == target:
            stack.append((cx + 1, cy))
        if cx > 0 and result[cy, cx - 1] == target:
            stack.append((cx - 1, cy))
        if cy + 1 < height and result[cy + 1, cx] == target:
            stack.append((cx, cy + 1))
        if cy > 0 and result[cy - 1, cx] == target:
            stack.append((cx, cy - 1))

    logger.debug(f"Flood fill at ({x}, {y}) recolored {filled} cells")
    return result
