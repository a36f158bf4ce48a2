"""Pytest fixtures for pixel_canvas tests."""
from __future__ import annotations

import io

import numpy as np
import pytest
from PIL import Image

from pixel_canvas import EditorConfig, LayerStack
from pixel_canvas.color import pack_rgb
from pixel_canvas.grid import new_grid

RED = pack_rgb(255, 0, 0)
GREEN = pack_rgb(0, 255, 0)
BLUE = pack_rgb(0, 0, 255)


@pytest.fixture
def default_config() -> EditorConfig:
    """Return a default EditorConfig instance."""
    return EditorConfig()


@pytest.fixture
def small_config() -> EditorConfig:
    """Return a config for a small 8x8 canvas."""
    return EditorConfig(grid_width=8, grid_height=8, enhance_api_key="test-key")


@pytest.fixture
def stack() -> LayerStack:
    """Create a 16x12 stack with a single transparent layer."""
    return LayerStack(16, 12)


@pytest.fixture
def empty_grid() -> np.ndarray:
    """Create a 10x10 transparent grid."""
    return new_grid(10, 10)


@pytest.fixture
def walled_grid() -> np.ndarray:
    """Create a 10x10 grid split by a red vertical wall at x=4.

    The left region (x < 4) and right region (x > 4) are transparent and
    only connected diagonally through nothing, so fills stay on one side.
    """
    grid = new_grid(10, 10)
    grid[:, 4] = RED
    return grid


@pytest.fixture
def sample_png_bytes() -> bytes:
    """Return a 4x4 opaque PNG."""
    img = Image.new("RGBA", (4, 4), (10, 20, 30, 255))
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def create_filled_grid(width: int, height: int, color: int) -> np.ndarray:
    """Helper to create a grid filled with one color."""
    grid = new_grid(width, height)
    grid[:, :] = color
    return grid
