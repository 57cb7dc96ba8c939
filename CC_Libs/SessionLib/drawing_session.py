"""
Drawing session state machine.

A DrawingSession owns the pixel buffer for one coloring page. It turns
pointer-down / move / up sequences into brush strokes or flood fills, restores
the original line art on "clear all", and exports the buffer for saving.

States:

    IDLE --open_image--> LOADING --complete_load--> READY <--> DRAWING
                            |                          |
                            +--fail_load--> FAILED     +--close--> IDLE

Loading is asynchronous. ``open_image`` hands out a ticket; a decode result is
only accepted if it carries the ticket of the most recent request, so a slow
decode for an image the user already left can never overwrite the current
page.

Tool and color are passed in with every pointer event; the session keeps no
UI state of its own.

Classes:
    SessionState: Lifecycle states of a session
    DrawingSession: Buffer owner and pointer-event orchestrator
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Tuple

from CC_Libs.CanvasLib.canvas_models import (
    BufferPoint,
    DisplayPoint,
    DisplayRect,
    FillOutcome,
    RgbaColor,
    Tool,
)
from CC_Libs.CanvasLib.coordinate_mapper import to_buffer_space, to_pixel
from CC_Libs.CanvasLib.flood_fill import flood_fill
from CC_Libs.CanvasLib.pixel_buffer import PixelBuffer
from CC_Libs.CanvasLib.stroke_rasterizer import draw_dot, draw_line
from CC_Libs.SessionLib.coloring_config import ColoringConfig
from CC_Libs.SessionLib.image_loader import LoadResult
from CC_Libs.errors import ImageLoadError, PersistenceError, SessionStateError

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """Lifecycle states of a drawing session."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    DRAWING = "drawing"
    FAILED = "failed"


class DrawingSession:
    """
    Orchestrates one coloring page.

    Example:
        >>> session = DrawingSession()
        >>> session.load(catalog, "castle")
        True
        >>> rect = DisplayRect(0, 0, session.buffer.width, session.buffer.height)
        >>> session.pointer_down(DisplayPoint(40, 40), rect, Tool.FILL, (255, 0, 0, 255))
        FillOutcome(filled=True, pixels_changed=...)
        >>> saved = session.save(store)
    """

    def __init__(self, config: Optional[ColoringConfig] = None) -> None:
        self.base_config = config or ColoringConfig()
        self.config = self.base_config
        self.state = SessionState.IDLE
        self.image_id: Optional[str] = None
        self.error_message: Optional[str] = None
        self.last_save_error: Optional[str] = None

        self._generation = 0
        self._buffer: Optional[PixelBuffer] = None
        self._original: Optional[PixelBuffer] = None
        self._last_point: Optional[BufferPoint] = None
        self._pending_move: Optional[Tuple[BufferPoint, RgbaColor]] = None

    # ------------------------------
    # Properties
    # ------------------------------
    @property
    def buffer(self) -> Optional[PixelBuffer]:
        """The live pixel buffer; only present while READY or DRAWING."""
        return self._buffer

    @property
    def has_buffer(self) -> bool:
        return self._buffer is not None

    @property
    def is_drawing(self) -> bool:
        return self.state is SessionState.DRAWING

    def is_current(self, ticket: int) -> bool:
        return ticket == self._generation

    # ------------------------------
    # Loading
    # ------------------------------
    def open_image(self, image_id: str, source_path: Optional[Path] = None) -> int:
        """
        Start loading a new image and return its load ticket.

        Any current buffer is discarded and any load still in flight becomes
        stale.

        Args:
            image_id: Catalog id of the requested image
            source_path: Image file, used to pick a per-source fill tolerance

        Returns:
            Ticket to pass back with the decode result
        """
        self._generation += 1
        self._drop_page()
        self.image_id = str(image_id)
        self.error_message = None
        self.config = self.base_config.for_source(source_path) if source_path else self.base_config
        self.state = SessionState.LOADING
        logger.info("Loading image %s (ticket %d)", image_id, self._generation)
        return self._generation

    def complete_load(self, ticket: int, image: Any) -> bool:
        """
        Accept a decoded image for the load identified by ``ticket``.

        Returns:
            False if the result is stale and was ignored
        """
        if not self.is_current(ticket) or self.state is not SessionState.LOADING:
            logger.debug("Ignoring stale decode result (ticket %d, current %d)", ticket, self._generation)
            return False

        self._buffer = PixelBuffer.from_image(image)
        self._original = self._buffer.copy()
        self.state = SessionState.READY
        logger.info(
            "Image %s ready (%dx%d)", self.image_id, self._buffer.width, self._buffer.height
        )
        return True

    def fail_load(self, ticket: int, error: Any) -> bool:
        """
        Record a failed load for ``ticket``; the session moves to FAILED.

        Returns:
            False if the failure is stale and was ignored
        """
        if not self.is_current(ticket) or self.state is not SessionState.LOADING:
            logger.debug("Ignoring stale load failure (ticket %d, current %d)", ticket, self._generation)
            return False

        self._drop_page()
        self.error_message = str(error)
        self.state = SessionState.FAILED
        logger.warning("Failed to load image %s: %s", self.image_id, error)
        return True

    def apply_load_result(self, result: LoadResult) -> bool:
        if result.ok:
            return self.complete_load(result.ticket, result.image)
        return self.fail_load(result.ticket, result.error)

    def load(self, catalog: Any, image_id: str) -> bool:
        """
        Load an image synchronously from a catalog.

        Args:
            catalog: Object with ``get_image(id)`` and ``decode_image(source)``
            image_id: Catalog id of the image

        Returns:
            True if the session is READY afterwards
        """
        ticket = self.open_image(image_id)
        try:
            source = catalog.get_image(image_id)
            self.config = self.base_config.for_source(source.path)
            image = catalog.decode_image(source)
        except ImageLoadError as exc:
            self.fail_load(ticket, exc)
            return False
        return self.complete_load(ticket, image)

    def close(self) -> None:
        """End the session (navigated away). Pending loads become stale."""
        self._generation += 1
        self._drop_page()
        self.image_id = None
        self.error_message = None
        self.state = SessionState.IDLE

    def _drop_page(self) -> None:
        self._buffer = None
        self._original = None
        self._last_point = None
        self._pending_move = None

    # ------------------------------
    # Pointer events
    # ------------------------------
    def _map(self, display_point: DisplayPoint, rendered_rect: DisplayRect) -> BufferPoint:
        return to_buffer_space(display_point, rendered_rect, self._buffer.width, self._buffer.height)

    def pointer_down(
        self,
        display_point: DisplayPoint,
        rendered_rect: DisplayRect,
        tool: Tool,
        color: RgbaColor,
    ) -> Optional[FillOutcome]:
        """
        Handle pointer-down.

        With the fill tool a single flood fill runs immediately and the session
        stays READY. With the brush a dot is drawn and a stroke begins.

        Returns:
            The FillOutcome for fills, None for brush strokes or ignored events
        """
        if self.state is not SessionState.READY:
            logger.debug("Ignoring pointer-down in state %s", self.state.value)
            return None

        point = self._map(display_point, rendered_rect)

        if tool is Tool.FILL:
            seed_x, seed_y = to_pixel(point)
            return flood_fill(
                self._buffer,
                seed_x,
                seed_y,
                color,
                tolerance=self.config.fill_tolerance,
                edge_threshold=self.config.edge_threshold,
                traversal=self.config.traversal,
            )

        draw_dot(self._buffer, point.x, point.y, self.config.brush_radius, color)
        self._last_point = point
        self._pending_move = None
        self.state = SessionState.DRAWING
        return None

    def pointer_move(self, display_point: DisplayPoint, rendered_rect: DisplayRect, color: RgbaColor) -> bool:
        """
        Extend the active stroke to a new pointer position.

        When move coalescing is enabled only the latest position is remembered
        and ``flush_pending`` draws it once per frame.

        Returns:
            True if the event was used
        """
        if self.state is not SessionState.DRAWING:
            return False

        point = self._map(display_point, rendered_rect)
        if self.config.coalesce_moves:
            self._pending_move = (point, color)
            return True

        self._stroke_to(point, color)
        return True

    def flush_pending(self) -> bool:
        """Draw the latest coalesced move, if any. Called once per frame."""
        if self._pending_move is None or self.state is not SessionState.DRAWING:
            return False

        point, color = self._pending_move
        self._pending_move = None
        self._stroke_to(point, color)
        return True

    def pointer_up(self) -> None:
        """End the active stroke (also used for pointer-leave)."""
        if self.state is not SessionState.DRAWING:
            return

        self.flush_pending()
        self._last_point = None
        self.state = SessionState.READY

    def _stroke_to(self, point: BufferPoint, color: RgbaColor) -> None:
        last = self._last_point or point
        draw_line(self._buffer, last.x, last.y, point.x, point.y, self.config.line_width, color)
        self._last_point = point

    # ------------------------------
    # Page actions
    # ------------------------------
    def clear_all(self) -> bool:
        """Restore the original line art. Returns False when there is no page."""
        if self._buffer is None or self._original is None:
            return False

        self._buffer.restore_from(self._original)
        self._last_point = None
        self._pending_move = None
        self.state = SessionState.READY
        logger.info("Cleared drawing on %s", self.image_id)
        return True

    def export_png(self) -> bytes:
        """
        Encode the current buffer as PNG.

        A coalesced move still waiting for the next frame is drawn first, so
        the export matches what the user has drawn.

        Raises:
            SessionStateError: If no image is loaded
        """
        if self._buffer is None:
            raise SessionStateError(f"No image loaded (state: {self.state.value})")
        self.flush_pending()
        return self._buffer.to_png_bytes()

    def save(self, store: Any) -> Optional[Any]:
        """
        Export the buffer and hand it to the persistence store.

        A store failure is recorded in ``last_save_error`` and the drawing is
        kept so the user can retry.

        Args:
            store: Object with ``save(source_image_id, encoded_bytes)``

        Returns:
            The saved drawing record, or None if saving failed
        """
        png_bytes = self.export_png()
        try:
            saved = store.save(self.image_id, png_bytes)
        except PersistenceError as exc:
            self.last_save_error = str(exc)
            logger.warning("Saving drawing for %s failed: %s", self.image_id, exc)
            return None

        self.last_save_error = None
        return saved
