"""Pixel Canvas - layered pixel-art editing engine.

This package provides the raster core of a pixel-art editor: layered
fixed-size grids, pencil/eraser/fill editing, compositing, and a round
trip through an image-edit service for an "enhanced" variant.

Example:
    from pixel_canvas import EditorSession

    session = EditorSession()
    session.select_color("#ef4444")
    session.pointer_down(2, 2)
    session.pointer_move(10, 6)
    session.pointer_up()

    png_bytes = session.export_png()

For debug logging, enable with:

    import logging
    logging.getLogger("pixel_canvas").setLevel(logging.DEBUG)
    logging.basicConfig(level=logging.DEBUG)
"""
import logging

# Package logger - disabled by default, enable with logging.getLogger("pixel_canvas").setLevel(logging.DEBUG)
logger = logging.getLogger("pixel_canvas")
logger.addHandler(logging.NullHandler())
from .color import (
    DEFAULT_COLOR,
    PALETTE_COLORS,
    TRANSPARENT,
    WHITE,
    format_color,
    to_color,
)
from .composite import encode_png, flatten, to_image
from .config import (
    MAX_GRID_SIZE,
    MIN_GRID_SIZE,
    EditorConfig,
    PixelCanvasError,
    validate_grid_size,
)
from .enhance import enhance_image
from .grid import GridSize, get_cell, new_grid, resize_grid
from .layers import Layer, LayerStack
from .preview import render_preview
from .raster import draw_line, flood_fill, line_cells, set_pixel
from .session import EditorSession, EnhancementJob
from .stroke import StrokeController, Tool

__all__ = [
    "EditorConfig",
    "PixelCanvasError",
    "MIN_GRID_SIZE",
    "MAX_GRID_SIZE",
    "validate_grid_size",
    # Colors
    "TRANSPARENT",
    "WHITE",
    "DEFAULT_COLOR",
    "PALETTE_COLORS",
    "to_color",
    "format_color",
    # Grid and editing
    "GridSize",
    "new_grid",
    "get_cell",
    "resize_grid",
    "set_pixel",
    "line_cells",
    "draw_line",
    "flood_fill",
    # Layers and strokes
    "Layer",
    "LayerStack",
    "Tool",
    "StrokeController",
    # Output
    "flatten",
    "to_image",
    "encode_png",
    "render_preview",
    "enhance_image",
    "EditorSession",
    "EnhancementJob",
]

__version__ = "1.0.0"
