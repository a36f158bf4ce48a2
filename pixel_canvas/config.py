"""Configuration and validation for pixel canvas."""
from __future__ import annotations

import numbers
from dataclasses import dataclass
from typing import Optional

MIN_GRID_SIZE = 8
MAX_GRID_SIZE = 128
DEFAULT_GRID_WIDTH = 128
DEFAULT_GRID_HEIGHT = 128
PIXEL_SCALE = 20


class PixelCanvasError(Exception):
    """Base exception for pixel canvas errors."""

    pass


@dataclass
class EditorConfig:
    """Configuration for an editing session."""

    grid_width: int = DEFAULT_GRID_WIDTH
    grid_height: int = DEFAULT_GRID_HEIGHT
    default_color: str = "#000000"
    default_tool: str = "pencil"
    pixel_scale: int = PIXEL_SCALE
    show_grid_lines: bool = True

    # Enhancement service options
    enhance_endpoint: Optional[str] = None
    enhance_model: Optional[str] = None
    enhance_prompt: Optional[str] = None
    enhance_api_key: Optional[str] = None
    enhance_timeout: int = 120


def validate_grid_size(width: int, height: int) -> None:
    """Validate grid dimensions are within the supported range.

    Args:
        width: Grid width in cells.
        height: Grid height in cells.

    Raises:
        PixelCanvasError: If either dimension is out of range.
    """
    for label, value in (("width", width), ("height", height)):
        if isinstance(value, bool) or not isinstance(value, numbers.Integral):
            raise PixelCanvasError(f"Grid {label} must be an integer, got {value!r}")
        if value < MIN_GRID_SIZE or value > MAX_GRID_SIZE:
            raise PixelCanvasError(
                f"Grid {label} {value} out of range "
                f"({MIN_GRID_SIZE}-{MAX_GRID_SIZE})"
            )
