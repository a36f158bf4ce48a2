"""Stroke controller: pointer drag lifecycle to raster edits."""
from __future__ import annotations

import enum
from typing import Optional, Tuple, Union

from .color import TRANSPARENT, ColorLike, to_color
from .config import PixelCanvasError
from .grid import in_bounds
from .layers import LayerStack
from .raster import draw_line, flood_fill, set_pixel


class Tool(enum.Enum):
    PENCIL = "pencil"
    ERASER = "eraser"
    FILL = "fill"


def resolve_tool(tool: Union[Tool, str]) -> Tool:
    """Accept a Tool or its string name."""
    if isinstance(tool, Tool):
        return tool
    try:
        return Tool(str(tool).lower())
    except ValueError as exc:
        raise PixelCanvasError(f"Unknown tool: {tool!r}") from exc


def resolve_color(tool: Tool, color: ColorLike) -> int:
    """Eraser always paints transparent; other tools use the selected color."""
    if tool is Tool.ERASER:
        return TRANSPARENT
    return to_color(color)


class StrokeController:
    """Turns drag-start / drag-continue / drag-end into grid edits.

    Tool and color are passed with every event; the controller only keeps
    whether a stroke is in progress and the last cell it painted, which
    lets fast pointer movement be bridged with line segments.

    Every event returns whether the active grid changed.
    """

    def __init__(self, stack: LayerStack) -> None:
        self.stack = stack
        self.is_drawing = False
        self.last_cell: Optional[Tuple[int, int]] = None

    def _in_bounds(self, x: int, y: int) -> bool:
        return in_bounds(self.stack.active_layer.grid, x, y)

    def begin(self, x: int, y: int, tool: Union[Tool, str], color: ColorLike) -> bool:
        tool = resolve_tool(tool)
        if not self._in_bounds(x, y):
            return False
        value = resolve_color(tool, color)
        self.is_drawing = True
        if tool is Tool.FILL:
            # One fill per stroke; drag-continue is ignored until drag-end.
            self.last_cell = None
            return self.stack.mutate_active_grid(
                lambda grid: flood_fill(grid, x, y, value)
            )
        self.last_cell = (x, y)
        return self.stack.mutate_active_grid(
            lambda grid: set_pixel(grid, x, y, value)
        )

    def move(self, x: int, y: int, tool: Union[Tool, str], color: ColorLike) -> bool:
        tool = resolve_tool(tool)
        if not self.is_drawing or tool is Tool.FILL:
            return False
        if not self._in_bounds(x, y):
            # Leaving the grid keeps the stroke but breaks the line.
            self.last_cell = None
            return False
        value = resolve_color(tool, color)
        last = self.last_cell
        self.last_cell = (x, y)
        if last is None:
            return self.stack.mutate_active_grid(
                lambda grid: set_pixel(grid, x, y, value)
            )
        return self.stack.mutate_active_grid(
            lambda grid: draw_line(grid, last[0], last[1], x, y, value)
        )

    def end(self) -> None:
        self.is_drawing = False
        self.last_cell = None
