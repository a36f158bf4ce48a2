"""Color packing and parsing utilities.

Cells store colors as packed 32-bit RGBA integers (``r<<24 | g<<16 | b<<8 | a``).
Concrete colors are always fully opaque; ``TRANSPARENT`` (0) is the
"no color" sentinel.
"""
from __future__ import annotations

import numbers
import re
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from .config import PixelCanvasError

ColorLike = Union[str, int, Sequence[int], None]

_HEX_RE = re.compile(r"#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})")

TRANSPARENT = 0
OPAQUE_ALPHA = 0xFF

PALETTE_COLORS: List[str] = [
    "#000000", "#FFFFFF", "#6b7280", "#ef4444", "#f97316", "#f59e0b",
    "#eab308", "#84cc16", "#22c55e", "#10b981", "#14b8a6", "#06b6d4",
    "#0ea5e9", "#3b82f6", "#6366f1", "#8b5cf6", "#a855f7", "#d946ef",
    "#ec4899", "#f43f5e",
]


def pack_rgb(r: int, g: int, b: int) -> int:
    """Pack an RGB triple into an opaque RGBA integer."""
    for channel in (r, g, b):
        if not 0 <= channel <= 255:
            raise PixelCanvasError(f"Color channel out of range: {channel}")
    return (int(r) << 24) | (int(g) << 16) | (int(b) << 8) | OPAQUE_ALPHA


def unpack_rgb(color: int) -> Tuple[int, int, int]:
    """Unpack a packed color into its RGB channels."""
    color = int(color)
    return (color >> 24) & 0xFF, (color >> 16) & 0xFF, (color >> 8) & 0xFF


def parse_hex(value: str) -> int:
    """Parse ``#RRGGBB`` or ``#RGB`` (case-insensitive, ``#`` optional).

    Raises:
        PixelCanvasError: If the string is not a hex color.
    """
    match = _HEX_RE.fullmatch(value.strip())
    if match is None:
        raise PixelCanvasError(f"Invalid hex color: {value!r}")
    text = match.group(1)
    if len(text) == 3:
        text = "".join(ch * 2 for ch in text)
    return pack_rgb(int(text[0:2], 16), int(text[2:4], 16), int(text[4:6], 16))


def to_color(value: ColorLike) -> int:
    """Normalize a user-facing color value into a packed cell value.

    Accepts a hex string, an ``(r, g, b)`` sequence, an already packed
    integer, or ``None`` for transparent.
    """
    if value is None:
        return TRANSPARENT
    if isinstance(value, str):
        return parse_hex(value)
    if isinstance(value, numbers.Integral) and not isinstance(value, bool):
        packed = int(value)
        if packed == TRANSPARENT:
            return TRANSPARENT
        if not 0 <= packed <= 0xFFFFFFFF or packed & 0xFF != OPAQUE_ALPHA:
            raise PixelCanvasError(
                f"Packed color must be opaque RGBA or transparent: {value:#x}"
            )
        return packed
    if isinstance(value, (tuple, list)) and len(value) == 3:
        r, g, b = value
        return pack_rgb(r, g, b)
    raise PixelCanvasError(f"Unsupported color value: {value!r}")


def format_color(color: int) -> Optional[str]:
    """Render a packed color as ``#rrggbb``, or None for transparent."""
    if int(color) == TRANSPARENT:
        return None
    r, g, b = unpack_rgb(color)
    return f"#{r:02x}{g:02x}{b:02x}"


def to_rgba_array(grid: np.ndarray) -> np.ndarray:
    """Expand a packed grid into an ``(h, w, 4)`` uint8 array."""
    packed = grid.astype(np.uint32)
    return np.stack(
        [
            (packed >> 24) & 0xFF,
            (packed >> 16) & 0xFF,
            (packed >> 8) & 0xFF,
            packed & 0xFF,
        ],
        axis=-1,
    ).astype(np.uint8)


WHITE = pack_rgb(255, 255, 255)
DEFAULT_COLOR = parse_hex("#000000")
