"""Flatten a layer stack into one opaque raster."""
from __future__ import annotations

import io

import numpy as np
from PIL import Image

from .color import TRANSPARENT, WHITE, to_rgba_array
from .grid import GRID_DTYPE
from .layers import LayerStack


def flatten(stack: LayerStack, background: int = WHITE) -> np.ndarray:
    """Composite visible layers back to front over an opaque background.

    Transparent cells leave whatever is already below them.

    Args:
        stack: Layer stack to flatten. Not modified.
        background: Packed opaque background color.

    Returns:
        A new ``(height, width)`` grid with no transparent cells.
    """
    raster = np.full((stack.height, stack.width), background, dtype=GRID_DTYPE)
    for layer in stack:
        if not layer.is_visible:
            continue
        painted = layer.grid != TRANSPARENT
        raster[painted] = layer.grid[painted]
    return raster


def to_image(raster: np.ndarray) -> Image.Image:
    """Convert a flattened raster into an RGB image, one pixel per cell."""
    rgba = to_rgba_array(raster)
    return Image.fromarray(rgba[:, :, :3], "RGB")


def encode_png(raster: np.ndarray) -> bytes:
    """Encode a flattened raster as PNG bytes."""
    buf = io.BytesIO()
    to_image(raster).save(buf, format="PNG")
    return buf.getvalue()
