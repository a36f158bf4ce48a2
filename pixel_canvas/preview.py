"""Scaled preview rendering with transparency checkerboard and grid lines."""
from __future__ import annotations

from typing import Tuple

import numpy as np
from PIL import Image, ImageDraw

from .color import TRANSPARENT, to_rgba_array
from .config import PIXEL_SCALE, PixelCanvasError
from .grid import GridSize
from .layers import LayerStack

CHECKER_TILE = 8
CHECKER_LIGHT = (255, 255, 255, 255)
CHECKER_DARK = (238, 238, 238, 255)
GRID_LINE_COLOR = (0, 0, 0, 26)
MIN_GRID_LINE_SCALE = 4


def pixel_scale_for(
    available_width: float, available_height: float, size: GridSize
) -> int:
    """Largest integer cell scale that fits in 90% of the available area."""
    fit = min(available_width * 0.9 / size.width, available_height * 0.9 / size.height)
    return max(1, int(fit))


def checkerboard(width: int, height: int, tile: int = CHECKER_TILE) -> Image.Image:
    """Build a checkerboard image of ``width`` x ``height`` pixels."""
    ys, xs = np.indices((height, width))
    dark = ((xs // tile) + (ys // tile)) % 2 == 0
    arr = np.empty((height, width, 4), dtype=np.uint8)
    arr[:] = CHECKER_LIGHT
    arr[dark] = CHECKER_DARK
    return Image.fromarray(arr, "RGBA")


def render_preview(
    stack: LayerStack,
    pixel_scale: int = PIXEL_SCALE,
    show_grid_lines: bool = True,
) -> Image.Image:
    """Render the visible layers at ``pixel_scale`` screen pixels per cell.

    Args:
        stack: Layer stack to render. Not modified.
        pixel_scale: Screen pixels per grid cell.
        show_grid_lines: Draw cell boundaries (only when the scale exceeds 4).

    Returns:
        RGBA image of size ``(width * pixel_scale, height * pixel_scale)``.

    Raises:
        PixelCanvasError: If ``pixel_scale`` is not positive.
    """
    if pixel_scale <= 0:
        raise PixelCanvasError("pixel_scale must be a positive integer")

    out_w = stack.width * pixel_scale
    out_h = stack.height * pixel_scale
    canvas = checkerboard(out_w, out_h)

    for layer in stack:
        if not layer.is_visible:
            continue
        cells = to_rgba_array(layer.grid)
        mask = (layer.grid != TRANSPARENT).astype(np.uint8) * 255
        scale = (out_w, out_h)
        tile = Image.fromarray(cells, "RGBA").resize(scale, resample=Image.NEAREST)
        tile_mask = Image.fromarray(mask, "L").resize(scale, resample=Image.NEAREST)
        canvas.paste(tile, (0, 0), tile_mask)

    if show_grid_lines and pixel_scale > MIN_GRID_LINE_SCALE:
        canvas = draw_grid_lines(canvas, stack.width, stack.height, pixel_scale)
    return canvas


def draw_grid_lines(
    img: Image.Image,
    grid_w: int,
    grid_h: int,
    scale: int,
    color: Tuple[int, int, int, int] = GRID_LINE_COLOR,
) -> Image.Image:
    """Draw cell boundary lines over a scaled image.

    Args:
        img: Image to draw on.
        grid_w: Number of grid columns.
        grid_h: Number of grid rows.
        scale: Screen pixels per cell.
        color: RGBA color for grid lines.

    Returns:
        Image with grid overlay.
    """
    overlay = Image.new("RGBA", img.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay, "RGBA")
    width, height = img.size

    for i in range(grid_w + 1):
        x = min(i * scale, width - 1)
        draw.line([(x, 0), (x, height - 1)], fill=color, width=1)

    for i in range(grid_h + 1):
        y = min(i * scale, height - 1)
        draw.line([(0, y), (width - 1, y)], fill=color, width=1)

    return Image.alpha_composite(img, overlay)
