"""Integration tests for editing sessions and the enhancement job."""
from __future__ import annotations

import io
import threading

import numpy as np
import pytest
from PIL import Image

from pixel_canvas import EditorConfig, EditorSession, PixelCanvasError
from pixel_canvas.color import TRANSPARENT, WHITE, parse_hex
from pixel_canvas.grid import GridSize
from pixel_canvas.session import ENHANCE_ERROR_MESSAGE, EnhancementJob
from pixel_canvas.stroke import Tool


class TestEditorSession:
    """End-to-end editing through the session facade."""

    def test_defaults(self, small_config: EditorConfig) -> None:
        session = EditorSession(small_config)
        assert session.stack.size == GridSize(8, 8)
        assert session.tool is Tool.PENCIL
        assert session.color == parse_hex("#000000")

    def test_draw_and_flatten(self, small_config: EditorConfig) -> None:
        session = EditorSession(small_config)
        session.select_color("#ef4444")
        session.pointer_down(0, 0)
        session.pointer_move(7, 0)
        session.pointer_up()

        raster = session.flatten()
        assert np.all(raster[0, :] == parse_hex("#ef4444"))
        assert np.all(raster[1:, :] == WHITE)

    def test_tool_switching(self, small_config: EditorConfig) -> None:
        session = EditorSession(small_config)
        session.select_tool("fill")
        session.select_color((0, 0, 255))
        session.pointer_down(3, 3)
        session.pointer_up()
        session.select_tool(Tool.ERASER)
        session.pointer_down(0, 0)
        session.pointer_leave()

        grid = session.stack.active_layer.grid
        assert grid[0, 0] == TRANSPARENT
        assert grid[7, 7] == parse_hex("#0000ff")

    def test_resize_ends_stroke(self, small_config: EditorConfig) -> None:
        session = EditorSession(small_config)
        session.pointer_down(1, 1)
        session.resize(16, 8)
        assert session.stroke.is_drawing is False
        assert session.stack.size == GridSize(16, 8)

    def test_invalid_resize(self, small_config: EditorConfig) -> None:
        session = EditorSession(small_config)
        with pytest.raises(PixelCanvasError):
            session.resize(8, 4)

    def test_new_canvas(self, small_config: EditorConfig) -> None:
        session = EditorSession(small_config)
        session.pointer_down(1, 1)
        session.stack.add_layer()
        session.new_canvas()
        assert len(session.stack) == 1
        assert np.all(session.flatten() == WHITE)

    def test_export_png(self, small_config: EditorConfig) -> None:
        session = EditorSession(small_config)
        img = Image.open(io.BytesIO(session.export_png()))
        assert img.size == (8, 8)

    def test_preview(self, small_config: EditorConfig) -> None:
        session = EditorSession(small_config)
        assert session.preview().size == (160, 160)
        assert session.preview(pixel_scale=2).size == (16, 16)


class TestEnhancementJob:
    """Tests for the background enhancement lifecycle."""

    def test_success(self, sample_png_bytes: bytes) -> None:
        job = EnhancementJob()
        assert job.state == EnhancementJob.IDLE
        assert job.start(sample_png_bytes, lambda data: data[::-1]) is True
        assert job.wait(timeout=5) == EnhancementJob.DONE
        assert job.result == sample_png_bytes[::-1]
        assert job.error is None
        job.shutdown()

    def test_failure_reports_error(self, sample_png_bytes: bytes) -> None:
        def failing(data: bytes) -> bytes:
            raise PixelCanvasError("service down")

        job = EnhancementJob()
        job.start(sample_png_bytes, failing)
        assert job.wait(timeout=5) == EnhancementJob.ERROR
        assert job.error == ENHANCE_ERROR_MESSAGE
        assert job.result is None
        job.shutdown()

    def test_single_request_in_flight(self, sample_png_bytes: bytes) -> None:
        release = threading.Event()

        def slow(data: bytes) -> bytes:
            release.wait(5)
            return data

        job = EnhancementJob()
        job.start(sample_png_bytes, slow)
        assert job.poll() == EnhancementJob.GENERATING
        assert job.start(sample_png_bytes, slow) is False
        release.set()
        assert job.wait(timeout=5) == EnhancementJob.DONE
        job.shutdown()

    def test_close_discards_pending(self, sample_png_bytes: bytes) -> None:
        release = threading.Event()

        def slow(data: bytes) -> bytes:
            release.wait(5)
            return data

        job = EnhancementJob()
        job.start(sample_png_bytes, slow)
        job.close()
        release.set()
        assert job.wait(timeout=5) == EnhancementJob.IDLE
        assert job.result is None
        job.shutdown()

    def test_request_after_close_not_queued(self, sample_png_bytes: bytes) -> None:
        """A running request abandoned by close() does not delay the next one."""
        release = threading.Event()
        started = threading.Event()

        def slow(data: bytes) -> bytes:
            started.set()
            release.wait(5)
            return data

        job = EnhancementJob()
        job.start(sample_png_bytes, slow)
        assert started.wait(5)
        job.close()
        try:
            assert job.start(sample_png_bytes, lambda data: b"fresh") is True
            assert job.wait(timeout=1.0) == EnhancementJob.DONE
            assert job.result == b"fresh"
        finally:
            release.set()
            job.shutdown()


class TestSessionEnhancement:
    """Tests for enhancement requests made through a session."""

    def test_sends_flattened_png(self, small_config: EditorConfig) -> None:
        received = {}

        def fake_enhance(data: bytes) -> bytes:
            received["png"] = data
            return data

        session = EditorSession(small_config, enhance_fn=fake_enhance)
        session.select_color("#00ff00")
        session.pointer_down(0, 0)
        session.pointer_up()

        assert session.request_enhancement() is True
        assert session.enhancement.wait(timeout=5) == EnhancementJob.DONE

        img = Image.open(io.BytesIO(received["png"])).convert("RGB")
        assert img.getpixel((0, 0)) == (0, 255, 0)
        assert img.getpixel((1, 1)) == (255, 255, 255)
        session.enhancement.shutdown()

    def test_failure_leaves_layers_intact(self, small_config: EditorConfig) -> None:
        def failing(data: bytes) -> bytes:
            raise PixelCanvasError("boom")

        session = EditorSession(small_config, enhance_fn=failing)
        session.pointer_down(2, 2)
        session.pointer_up()
        before = session.stack.active_layer.grid

        session.request_enhancement()
        assert session.enhancement.wait(timeout=5) == EnhancementJob.ERROR
        assert session.stack.active_layer.grid is before
        assert session.poll_enhancement() == EnhancementJob.ERROR

        session.close_enhancement()
        assert session.poll_enhancement() == EnhancementJob.IDLE
        session.enhancement.shutdown()

    def test_close_releases_worker(self, small_config: EditorConfig) -> None:
        session = EditorSession(small_config, enhance_fn=lambda data: data)
        session.request_enhancement()
        assert session.enhancement.wait(timeout=5) == EnhancementJob.DONE
        session.close()
        assert session.enhancement._executor is None
        assert session.poll_enhancement() == EnhancementJob.IDLE
