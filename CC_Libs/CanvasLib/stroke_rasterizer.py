"""
Freehand stroke rasterization.

Brush strokes are built from two shapes: a filled disk for the first touch and
a capsule (segment with round caps) for every pointer movement after it. Both
are rasterized by testing pixel centres against the shape over the clipped
bounding box, so a fast pointer that jumps many pixels between samples still
produces a continuous line.

Functions:
    draw_dot: Fill a disk of a given radius
    draw_line: Fill a capsule of a given width between two points
"""

import logging
import math
from typing import Optional, Tuple

import numpy as np

from CC_Libs.CanvasLib.canvas_models import RgbaColor, opaque
from CC_Libs.CanvasLib.pixel_buffer import PixelBuffer
from CC_Libs.constants import DEFAULT_BRUSH_RADIUS, DEFAULT_LINE_WIDTH

logger = logging.getLogger(__name__)

# Absorbs float error for pixels lying exactly on the shape boundary.
_EDGE_EPSILON = 1e-9


def _clipped_box(
    buffer: PixelBuffer,
    min_x: float,
    min_y: float,
    max_x: float,
    max_y: float,
) -> Optional[Tuple[int, int, int, int]]:
    """Return (x0, y0, x1, y1) half-open pixel bounds clipped to the buffer, or None."""
    x0 = max(0, int(math.floor(min_x)))
    y0 = max(0, int(math.floor(min_y)))
    x1 = min(buffer.width, int(math.ceil(max_x)) + 1)
    y1 = min(buffer.height, int(math.ceil(max_y)) + 1)
    if x0 >= x1 or y0 >= y1:
        return None
    return x0, y0, x1, y1


def _paint_mask(buffer: PixelBuffer, box: Tuple[int, int, int, int], mask: np.ndarray, color: RgbaColor) -> int:
    x0, y0, x1, y1 = box
    region = buffer.samples[y0:y1, x0:x1]
    region[mask] = opaque(color)
    return int(np.count_nonzero(mask))


def draw_dot(
    buffer: Optional[PixelBuffer],
    x: float,
    y: float,
    radius: float = DEFAULT_BRUSH_RADIUS,
    color: RgbaColor = (0, 0, 0, 255),
) -> int:
    """
    Fill a disk centred at (x, y), clipped to the buffer.

    Args:
        buffer: Target buffer (a missing buffer is ignored)
        x: Centre x in buffer space
        y: Centre y in buffer space
        radius: Disk radius in buffer pixels
        color: Paint color; alpha is forced to opaque

    Returns:
        Number of pixels painted
    """
    if buffer is None:
        logger.debug("draw_dot called without a buffer; ignoring")
        return 0

    radius = max(0.0, float(radius))
    box = _clipped_box(buffer, x - radius, y - radius, x + radius, y + radius)
    if box is None:
        return 0

    x0, y0, x1, y1 = box
    ys, xs = np.mgrid[y0:y1, x0:x1]
    dist_sq = (xs - x) ** 2 + (ys - y) ** 2
    mask = dist_sq <= radius * radius + _EDGE_EPSILON
    return _paint_mask(buffer, box, mask, color)


def draw_line(
    buffer: Optional[PixelBuffer],
    x1: float,
    y1: float,
    x2: float,
    y2: float,
    width: float = DEFAULT_LINE_WIDTH,
    color: RgbaColor = (0, 0, 0, 255),
) -> int:
    """
    Fill a round-capped segment of the given width between two points.

    Every pixel whose centre is within width / 2 of the segment is painted.
    A zero-length segment draws a dot of radius width / 2.

    Returns:
        Number of pixels painted
    """
    if buffer is None:
        logger.debug("draw_line called without a buffer; ignoring")
        return 0

    radius = max(0.0, float(width) / 2.0)
    dx = x2 - x1
    dy = y2 - y1
    length_sq = dx * dx + dy * dy
    if length_sq == 0:
        return draw_dot(buffer, x1, y1, radius, color)

    box = _clipped_box(
        buffer,
        min(x1, x2) - radius,
        min(y1, y2) - radius,
        max(x1, x2) + radius,
        max(y1, y2) + radius,
    )
    if box is None:
        return 0

    bx0, by0, bx1, by1 = box
    ys, xs = np.mgrid[by0:by1, bx0:bx1]
    # Project each pixel onto the segment, clamped to the endpoints.
    t = np.clip(((xs - x1) * dx + (ys - y1) * dy) / length_sq, 0.0, 1.0)
    nearest_x = x1 + t * dx
    nearest_y = y1 + t * dy
    dist_sq = (xs - nearest_x) ** 2 + (ys - nearest_y) ** 2
    mask = dist_sq <= radius * radius + _EDGE_EPSILON
    return _paint_mask(buffer, box, mask, color)
