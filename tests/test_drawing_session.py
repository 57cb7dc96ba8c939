"""
Tests for the drawing session state machine.

Tests cover:
- Load tickets and stale results
- Brush strokes and fills driven by pointer events
- Move coalescing
- Clear all, export and save
"""

import unittest
from io import BytesIO

import numpy as np
import pytest
from PIL import Image

from CC_Libs.CanvasLib.canvas_models import DisplayPoint, DisplayRect, FillOutcome, Tool
from CC_Libs.SessionLib.coloring_config import ColoringConfig
from CC_Libs.SessionLib.drawing_session import DrawingSession, SessionState
from CC_Libs.SessionLib.image_loader import LoadResult
from CC_Libs.StoreLib.drawing_store import DrawingStore
from CC_Libs.StoreLib.image_catalog import ImageCatalog
from CC_Libs.errors import ImageLoadError, PersistenceError, SessionStateError

WHITE = (255, 255, 255, 255)
BLACK = (0, 0, 0, 255)
RED = (255, 0, 0, 255)
BLUE = (0, 0, 255, 255)


def _line_art(width=20, height=20):
    """White page with a black top row."""
    image = Image.new("RGBA", (width, height), WHITE)
    for x in range(width):
        image.putpixel((x, 0), BLACK)
    return image


def _ready_session(config=None, width=20, height=20):
    session = DrawingSession(config)
    ticket = session.open_image("page")
    session.complete_load(ticket, _line_art(width, height))
    return session


def _full_rect(session):
    return DisplayRect(0, 0, session.buffer.width, session.buffer.height)


class TestLoadTickets(unittest.TestCase):
    """Test load lifecycle and stale-result handling."""

    def test_initial_state(self):
        """A new session is idle with no buffer."""
        session = DrawingSession()
        self.assertIs(session.state, SessionState.IDLE)
        self.assertFalse(session.has_buffer)

    def test_open_then_complete(self):
        """Completing the current load makes the session ready."""
        session = DrawingSession()
        ticket = session.open_image("page")
        self.assertIs(session.state, SessionState.LOADING)

        self.assertTrue(session.complete_load(ticket, _line_art(8, 6)))

        self.assertIs(session.state, SessionState.READY)
        self.assertEqual(session.buffer.size, (8, 6))

    def test_stale_result_ignored(self):
        """A slow decode for an earlier request never replaces the current page."""
        session = DrawingSession()
        first = session.open_image("first")
        second = session.open_image("second")

        self.assertFalse(session.complete_load(first, _line_art(5, 5)))
        self.assertIs(session.state, SessionState.LOADING)

        self.assertTrue(session.complete_load(second, _line_art(7, 7)))
        self.assertEqual(session.image_id, "second")
        self.assertEqual(session.buffer.size, (7, 7))

    def test_close_makes_pending_load_stale(self):
        """Navigating away drops whatever is still decoding."""
        session = DrawingSession()
        ticket = session.open_image("page")
        session.close()

        self.assertFalse(session.complete_load(ticket, _line_art()))
        self.assertIs(session.state, SessionState.IDLE)
        self.assertIsNone(session.buffer)

    def test_failed_load(self):
        """A decode failure moves the session to FAILED with a message."""
        session = DrawingSession()
        ticket = session.open_image("page")

        result = LoadResult(ticket, "page", None, ImageLoadError("page", "decode failed"))
        self.assertTrue(session.apply_load_result(result))

        self.assertIs(session.state, SessionState.FAILED)
        self.assertIn("decode failed", session.error_message)
        self.assertFalse(session.has_buffer)

    def test_stale_failure_ignored(self):
        session = DrawingSession()
        first = session.open_image("first")
        session.open_image("second")

        self.assertFalse(session.fail_load(first, "boom"))
        self.assertIs(session.state, SessionState.LOADING)

    def test_duplicate_completion_ignored(self):
        """Only one result is accepted per ticket."""
        session = DrawingSession()
        ticket = session.open_image("page")
        session.complete_load(ticket, _line_art(4, 4))

        self.assertFalse(session.complete_load(ticket, _line_art(9, 9)))
        self.assertEqual(session.buffer.size, (4, 4))

    def test_apply_successful_result(self):
        session = DrawingSession()
        ticket = session.open_image("page")

        self.assertTrue(session.apply_load_result(LoadResult(ticket, "page", _line_art(3, 3), None)))
        self.assertTrue(session.is_current(ticket))
        self.assertIs(session.state, SessionState.READY)


class TestSynchronousLoad:
    """Tests for DrawingSession.load against a catalog directory."""

    def test_load_from_catalog(self, images_dir):
        session = DrawingSession()

        assert session.load(ImageCatalog(images_dir), "castle") is True

        assert session.state is SessionState.READY
        assert session.buffer.size == (30, 20)
        assert session.buffer.get_pixel(3, 0) == BLACK

    def test_load_unknown_image(self, images_dir):
        session = DrawingSession()

        assert session.load(ImageCatalog(images_dir), "dragon") is False

        assert session.state is SessionState.FAILED
        assert "dragon" in session.error_message

    def test_png_gets_strict_tolerance_when_enabled(self, images_dir):
        session = DrawingSession(ColoringConfig(strict_png_tolerance=True))
        catalog = ImageCatalog(images_dir)

        session.load(catalog, "castle")
        assert session.config.fill_tolerance == 10

        session.load(catalog, "tree")
        assert session.config.fill_tolerance == 128

    def test_open_image_with_source_path(self, images_dir):
        session = DrawingSession(ColoringConfig(strict_png_tolerance=True))

        session.open_image("castle", images_dir / "castle.png")

        assert session.config.fill_tolerance == 10
        assert session.base_config.fill_tolerance == 128


class TestPointerEvents:
    """Tests for brush and fill input."""

    def test_brush_stroke_lifecycle(self):
        """Without coalescing every move is drawn immediately."""
        session = _ready_session(ColoringConfig(coalesce_moves=False))
        rect = _full_rect(session)

        assert session.pointer_down(DisplayPoint(5, 10), rect, Tool.BRUSH, RED) is None
        assert session.state is SessionState.DRAWING
        assert session.is_drawing
        assert session.buffer.get_pixel(5, 10) == RED

        assert session.pointer_move(DisplayPoint(15, 10), rect, RED) is True
        assert all(session.buffer.get_pixel(x, 10) == RED for x in range(5, 16))

        session.pointer_up()
        assert session.state is SessionState.READY
        assert session.pointer_move(DisplayPoint(18, 18), rect, RED) is False
        assert session.buffer.get_pixel(18, 18) == WHITE

    def test_pointer_mapped_through_rendered_rect(self):
        """Display coordinates are converted before painting."""
        session = _ready_session()
        rect = DisplayRect(100, 50, 40, 40)

        session.pointer_down(DisplayPoint(120, 70), rect, Tool.BRUSH, BLUE)

        assert session.buffer.get_pixel(10, 10) == BLUE
        assert session.buffer.get_pixel(18, 18) == WHITE

    def test_fill_returns_outcome(self):
        session = _ready_session()

        outcome = session.pointer_down(DisplayPoint(10.7, 10.2), _full_rect(session), Tool.FILL, RED)

        assert outcome == FillOutcome(filled=True, pixels_changed=20 * 19)
        assert session.state is SessionState.READY
        assert session.buffer.get_pixel(0, 0) == BLACK

    def test_fill_outside_page_is_noop(self):
        session = _ready_session()

        outcome = session.pointer_down(DisplayPoint(-3, 4), _full_rect(session), Tool.FILL, RED)

        assert outcome.filled is False
        assert session.state is SessionState.READY

    def test_fill_uses_configured_tolerance(self):
        """A strict tolerance stops at slightly different shades."""
        session = _ready_session(ColoringConfig(fill_tolerance=10))
        for y in range(10, 20):
            for x in range(20):
                session.buffer.set_pixel(x, y, (230, 230, 230, 255))

        outcome = session.pointer_down(DisplayPoint(5, 5), _full_rect(session), Tool.FILL, RED)

        assert outcome.pixels_changed == 20 * 9

    def test_pointer_events_ignored_while_loading(self):
        session = DrawingSession()
        session.open_image("page")
        rect = DisplayRect(0, 0, 10, 10)

        assert session.pointer_down(DisplayPoint(1, 1), rect, Tool.BRUSH, RED) is None
        assert session.state is SessionState.LOADING
        assert session.pointer_move(DisplayPoint(2, 2), rect, RED) is False
        session.pointer_up()
        assert session.state is SessionState.LOADING

    def test_second_pointer_down_while_drawing_ignored(self):
        session = _ready_session()
        rect = _full_rect(session)
        session.pointer_down(DisplayPoint(2, 2), rect, Tool.BRUSH, RED)

        assert session.pointer_down(DisplayPoint(15, 15), rect, Tool.FILL, BLUE) is None
        assert session.buffer.get_pixel(15, 15) == WHITE


class TestMoveCoalescing:
    """Tests for the coalesce_moves option."""

    def test_coalescing_is_default(self):
        session = _ready_session()
        rect = _full_rect(session)
        session.pointer_down(DisplayPoint(2, 10), rect, Tool.BRUSH, RED)

        session.pointer_move(DisplayPoint(15, 10), rect, RED)

        assert session.buffer.get_pixel(15, 10) == WHITE
        assert session.flush_pending() is True
        assert session.buffer.get_pixel(15, 10) == RED

    def test_export_during_stroke_includes_pending_move(self):
        """The exported image should contain the move still waiting for a frame."""
        session = _ready_session(ColoringConfig(coalesce_moves=True), width=40, height=10)
        rect = _full_rect(session)
        session.pointer_down(DisplayPoint(5, 5), rect, Tool.BRUSH, RED)
        session.pointer_move(DisplayPoint(30, 5), rect, RED)

        decoded = Image.open(BytesIO(session.export_png())).convert("RGBA")

        assert decoded.getpixel((30, 5)) == RED
        assert decoded.getpixel((18, 5)) == RED
        assert session.state is SessionState.DRAWING

    def test_moves_wait_for_flush(self):
        session = _ready_session(ColoringConfig(coalesce_moves=True))
        rect = _full_rect(session)
        session.pointer_down(DisplayPoint(2, 10), rect, Tool.BRUSH, RED)

        assert session.pointer_move(DisplayPoint(10, 10), rect, RED) is True
        assert session.pointer_move(DisplayPoint(17, 10), rect, RED) is True
        assert session.buffer.get_pixel(10, 10) == WHITE

        assert session.flush_pending() is True
        # One segment from the stroke start straight to the latest position.
        assert all(session.buffer.get_pixel(x, 10) == RED for x in range(2, 18))
        assert session.flush_pending() is False

    def test_pointer_up_flushes(self):
        session = _ready_session(ColoringConfig(coalesce_moves=True))
        rect = _full_rect(session)
        session.pointer_down(DisplayPoint(2, 5), rect, Tool.BRUSH, RED)
        session.pointer_move(DisplayPoint(12, 5), rect, RED)

        session.pointer_up()

        assert session.buffer.get_pixel(12, 5) == RED
        assert session.state is SessionState.READY


class TestPageActions:
    """Tests for clear all, export and save."""

    def test_clear_all_restores_original(self):
        session = _ready_session()
        original = session.buffer.samples.copy()
        rect = _full_rect(session)
        session.pointer_down(DisplayPoint(5, 5), rect, Tool.FILL, RED)
        session.pointer_down(DisplayPoint(3, 3), rect, Tool.BRUSH, BLUE)

        assert session.clear_all() is True

        assert np.array_equal(session.buffer.samples, original)
        assert session.state is SessionState.READY

    def test_clear_all_without_page(self):
        assert DrawingSession().clear_all() is False

    def test_export_png_matches_buffer(self):
        session = _ready_session()
        session.pointer_down(DisplayPoint(5, 5), _full_rect(session), Tool.FILL, RED)

        decoded = Image.open(BytesIO(session.export_png()))

        assert np.array_equal(np.array(decoded.convert("RGBA")), session.buffer.samples)

    def test_export_without_page_raises(self):
        with pytest.raises(SessionStateError):
            DrawingSession().export_png()

    def test_save_to_store(self, tmp_path):
        session = _ready_session()
        store = DrawingStore(tmp_path)

        saved = session.save(store)

        assert saved is not None
        assert saved.source_image_id == "page"
        assert session.last_save_error is None
        assert [d.id for d in store.list_saved()] == [saved.id]

    def test_save_failure_keeps_drawing(self):
        class FailingStore:
            def save(self, source_image_id, encoded_bytes):
                raise PersistenceError("disk full")

        session = _ready_session()
        session.pointer_down(DisplayPoint(5, 5), _full_rect(session), Tool.FILL, RED)
        painted = session.buffer.samples.copy()

        assert session.save(FailingStore()) is None

        assert session.last_save_error == "disk full"
        assert session.state is SessionState.READY
        assert np.array_equal(session.buffer.samples, painted)
