"""Editing session: layer stack, tool state, strokes and enhancement job."""
from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Callable, Optional, Union

import numpy as np
from PIL import Image

from .color import ColorLike, to_color
from .composite import encode_png, flatten
from .config import EditorConfig
from .enhance import enhance_image
from .layers import LayerStack
from .preview import render_preview
from .stroke import StrokeController, Tool, resolve_tool

logger = logging.getLogger("pixel_canvas")

ENHANCE_ERROR_MESSAGE = "Failed to generate AI art. Please try again."

EnhanceFn = Callable[[bytes], bytes]


class EnhancementJob:
    """Background enhancement request with idle/generating/done/error states.

    The request runs on a worker thread against PNG bytes captured before
    submission, so the layer stack is never read or written by the worker.
    Failures are reported once through ``error`` and never retried.
    """

    IDLE = "idle"
    GENERATING = "generating"
    DONE = "done"
    ERROR = "error"

    def __init__(self) -> None:
        self._executor: Optional[ThreadPoolExecutor] = None
        self._future: Optional[Future] = None
        self.state = self.IDLE
        self.result: Optional[bytes] = None
        self.error: Optional[str] = None

    @property
    def is_generating(self) -> bool:
        return self.state == self.GENERATING

    def start(self, png_bytes: bytes, enhance_fn: EnhanceFn) -> bool:
        """Submit a request. Returns False if one is already in flight."""
        if self.is_generating:
            return False
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=1, thread_name_prefix="pixel_canvas-enhance"
            )
        self.result = None
        self.error = None
        self.state = self.GENERATING
        self._future = self._executor.submit(enhance_fn, png_bytes)
        logger.debug("Enhancement request submitted")
        return True

    def poll(self) -> str:
        """Collect a finished request, if any, and return the current state."""
        future = self._future
        if not self.is_generating or future is None or not future.done():
            return self.state
        self._future = None
        exc = future.exception()
        if exc is not None:
            logger.warning(f"Enhancement failed: {exc}")
            self.error = ENHANCE_ERROR_MESSAGE
            self.state = self.ERROR
        else:
            self.result = future.result()
            self.state = self.DONE
            logger.debug("Enhancement finished")
        return self.state

    def wait(self, timeout: Optional[float] = None) -> str:
        """Block until the pending request finishes, then poll."""
        future = self._future
        if future is not None:
            try:
                future.exception(timeout=timeout)
            except FutureTimeoutError:
                return self.state
        return self.poll()

    def close(self) -> None:
        """Dismiss the result view; a pending result is discarded.

        A request that is already running cannot be interrupted, so its
        worker is abandoned and the next request gets a fresh one.
        """
        future = self._future
        self._future = None
        if future is not None and not future.cancel() and not future.done():
            if self._executor is not None:
                self._executor.shutdown(wait=False)
                self._executor = None
            logger.debug("Abandoned running enhancement request")
        self.state = self.IDLE
        self.result = None
        self.error = None

    def shutdown(self) -> None:
        self.close()
        if self._executor is not None:
            self._executor.shutdown(wait=False)
            self._executor = None


class EditorSession:
    """The state of one editor: layers, selected tool/color and helpers.

    Tool and color are session settings passed explicitly to the stroke
    controller on each pointer event.
    """

    def __init__(
        self,
        config: Optional[EditorConfig] = None,
        enhance_fn: Optional[EnhanceFn] = None,
    ) -> None:
        self.config = config or EditorConfig()
        self.stack = LayerStack(self.config.grid_width, self.config.grid_height)
        self.tool = resolve_tool(self.config.default_tool)
        self.color = to_color(self.config.default_color)
        self.show_grid_lines = self.config.show_grid_lines
        self.stroke = StrokeController(self.stack)
        self.enhancement = EnhancementJob()
        self._enhance_fn = enhance_fn or (lambda data: enhance_image(data, self.config))

    def select_tool(self, tool: Union[Tool, str]) -> None:
        self.tool = resolve_tool(tool)

    def select_color(self, color: ColorLike) -> None:
        self.color = to_color(color)

    def pointer_down(self, x: int, y: int) -> bool:
        return self.stroke.begin(x, y, self.tool, self.color)

    def pointer_move(self, x: int, y: int) -> bool:
        return self.stroke.move(x, y, self.tool, self.color)

    def pointer_up(self) -> None:
        self.stroke.end()

    pointer_leave = pointer_up

    def resize(self, width: int, height: int) -> None:
        self.stroke.end()
        self.stack.resize(width, height)

    def new_canvas(self) -> None:
        self.stroke.end()
        self.stack.new_canvas()

    def flatten(self) -> np.ndarray:
        return flatten(self.stack)

    def export_png(self) -> bytes:
        return encode_png(self.flatten())

    def preview(self, pixel_scale: Optional[int] = None) -> Image.Image:
        return render_preview(
            self.stack,
            pixel_scale=pixel_scale or self.config.pixel_scale,
            show_grid_lines=self.show_grid_lines,
        )

    def request_enhancement(self) -> bool:
        """Flatten the current art and hand it to the enhancement service."""
        return self.enhancement.start(self.export_png(), self._enhance_fn)

    def poll_enhancement(self) -> str:
        return self.enhancement.poll()

    def close_enhancement(self) -> None:
        self.enhancement.close()

    def close(self) -> None:
        """Release the enhancement worker."""
        self.stroke.end()
        self.enhancement.shutdown()
