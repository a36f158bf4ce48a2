"""Layer stack: ordered layers sharing one grid size, with an active layer."""
from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Optional, Tuple

import numpy as np

from .config import (
    DEFAULT_GRID_HEIGHT,
    DEFAULT_GRID_WIDTH,
    PixelCanvasError,
    validate_grid_size,
)
from .grid import GridSize, grid_changed, grid_size, new_grid, resize_grid

logger = logging.getLogger("pixel_canvas")

DIRECTIONS = ("up", "down")


@dataclass(eq=False)
class Layer:
    """One independently visible raster in a stack."""

    id: str
    name: str
    grid: np.ndarray = field(repr=False)
    is_visible: bool = True


class LayerStack:
    """Ordered layers, back (index 0) to front, plus the active layer id.

    The stack is never empty, the active id always names a layer in the
    stack, and every layer's grid has the stack's size. Unknown layer ids
    are ignored by every operation.
    """

    def __init__(
        self,
        width: int = DEFAULT_GRID_WIDTH,
        height: int = DEFAULT_GRID_HEIGHT,
        name: str = "Layer 1",
    ) -> None:
        validate_grid_size(width, height)
        self._size = GridSize(int(width), int(height))
        self._ids = itertools.count(1)
        first = self._create_layer(name)
        self._layers: List[Layer] = [first]
        self._active_id = first.id

    def _create_layer(self, name: str) -> Layer:
        return Layer(
            id=f"layer_{next(self._ids)}",
            name=name,
            grid=new_grid(self._size.width, self._size.height),
        )

    def __len__(self) -> int:
        return len(self._layers)

    def __iter__(self) -> Iterator[Layer]:
        return iter(tuple(self._layers))

    @property
    def layers(self) -> Tuple[Layer, ...]:
        return tuple(self._layers)

    @property
    def size(self) -> GridSize:
        return self._size

    @property
    def width(self) -> int:
        return self._size.width

    @property
    def height(self) -> int:
        return self._size.height

    @property
    def active_id(self) -> str:
        return self._active_id

    @property
    def active_layer(self) -> Layer:
        layer = self.get_layer(self._active_id)
        if layer is None:
            raise PixelCanvasError(f"Active layer {self._active_id!r} is not in the stack")
        return layer

    def index_of(self, layer_id: str) -> Optional[int]:
        for index, layer in enumerate(self._layers):
            if layer.id == layer_id:
                return index
        return None

    def get_layer(self, layer_id: str) -> Optional[Layer]:
        index = self.index_of(layer_id)
        return None if index is None else self._layers[index]

    def resize(self, width: int, height: int) -> None:
        """Resize every layer to ``width`` x ``height``.

        The top-left overlap of each grid is kept, new cells are transparent.

        Raises:
            PixelCanvasError: If the size is outside the supported range.
                No layer is modified in that case.
        """
        validate_grid_size(width, height)
        new_size = GridSize(int(width), int(height))
        if new_size == self._size:
            return
        for layer in self._layers:
            layer.grid = resize_grid(layer.grid, new_size.width, new_size.height)
        logger.debug(
            f"Resized {len(self._layers)} layers from "
            f"{self._size.width}x{self._size.height} to {new_size.width}x{new_size.height}"
        )
        self._size = new_size

    def add_layer(self, name: Optional[str] = None) -> Layer:
        """Append a transparent layer and make it active."""
        layer = self._create_layer(name or f"Layer {len(self._layers) + 1}")
        self._layers.append(layer)
        self._active_id = layer.id
        logger.debug(f"Added {layer.id} ({layer.name!r})")
        return layer

    def remove_layer(self, layer_id: str) -> bool:
        """Remove a layer unless it is unknown or the last one left.

        Removing the active layer activates the layer before it, or the
        first layer when it was at the bottom.
        """
        if len(self._layers) <= 1:
            return False
        index = self.index_of(layer_id)
        if index is None:
            return False
        del self._layers[index]
        if self._active_id == layer_id:
            self._active_id = self._layers[max(0, index - 1)].id
        logger.debug(f"Removed {layer_id}, active is {self._active_id}")
        return True

    def toggle_visibility(self, layer_id: str) -> bool:
        layer = self.get_layer(layer_id)
        if layer is None:
            return False
        layer.is_visible = not layer.is_visible
        return True

    def reorder(self, layer_id: str, direction: str) -> bool:
        """Swap a layer with its neighbour.

        "up" moves toward the front (end of the stack), "down" toward the
        back. A layer already at that end stays put.
        """
        index = self.index_of(layer_id)
        if index is None or direction not in DIRECTIONS:
            return False
        target = index + 1 if direction == "up" else index - 1
        if target < 0 or target >= len(self._layers):
            return False
        self._layers[index], self._layers[target] = (
            self._layers[target],
            self._layers[index],
        )
        return True

    def select_layer(self, layer_id: str) -> bool:
        if self.index_of(layer_id) is None:
            return False
        self._active_id = layer_id
        return True

    def mutate_active_grid(self, fn: Callable[[np.ndarray], np.ndarray]) -> bool:
        """Replace the active layer's grid with ``fn(grid)``.

        Returns:
            True if ``fn`` returned a different grid object.

        Raises:
            PixelCanvasError: If ``fn`` returns a grid of another size.
        """
        layer = self.active_layer
        updated = fn(layer.grid)
        if not grid_changed(layer.grid, updated):
            return False
        if updated.ndim != 2 or grid_size(updated) != self._size:
            raise PixelCanvasError(
                f"Edited grid has shape {updated.shape}, expected "
                f"{(self._size.height, self._size.width)}"
            )
        layer.grid = updated
        return True

    def new_canvas(self) -> Layer:
        """Discard all layers and start over with one transparent layer."""
        layer = self._create_layer("Layer 1")
        self._layers = [layer]
        self._active_id = layer.id
        logger.debug(f"New canvas {self._size.width}x{self._size.height}")
        return layer
