"""
Display-space to buffer-space coordinate conversion.

This is the only place where pointer positions reported by the input system
become pixel-buffer coordinates. Results are never clamped: out-of-range
points are handed on as-is and the rasterizer or flood fill decides what to
do with them.

Functions:
    axis_scales: Per-axis display/buffer scale of a rendered rect
    fit_scale: Uniform fit-to-container scale that never upscales
    fitted_rect: Rect a fitted buffer occupies when centred in a container
    to_buffer_space: Map a display point using per-axis scales
    to_buffer_space_uniform: Map a display point using one uniform scale
    to_pixel: Floor a buffer point to integer pixel indices
"""

import math
from typing import Tuple

from CC_Libs.CanvasLib.canvas_models import BufferPoint, DisplayPoint, DisplayRect


def _safe_ratio(numerator: float, denominator: float) -> float:
    if denominator <= 0 or numerator <= 0:
        return 1.0
    return numerator / denominator


def axis_scales(rendered_rect: DisplayRect, buffer_width: int, buffer_height: int) -> Tuple[float, float]:
    """Return (scale_x, scale_y) = rendered size / buffer size, 1.0 for degenerate sizes."""
    return (
        _safe_ratio(rendered_rect.width, buffer_width),
        _safe_ratio(rendered_rect.height, buffer_height),
    )


def fit_scale(container_width: float, container_height: float, buffer_width: int, buffer_height: int) -> float:
    """
    Compute the uniform scale that fits a buffer inside a container.

    The scale is min(container_width / buffer_width,
    container_height / buffer_height, 1), so a small image is shown at its
    natural size rather than being enlarged.

    Args:
        container_width: Available display width
        container_height: Available display height
        buffer_width: Native buffer width
        buffer_height: Native buffer height

    Returns:
        Scale factor in (0, 1]
    """
    if buffer_width <= 0 or buffer_height <= 0:
        return 1.0
    if container_width <= 0 or container_height <= 0:
        return 1.0
    return min(container_width / buffer_width, container_height / buffer_height, 1.0)


def fitted_rect(container: DisplayRect, buffer_width: int, buffer_height: int) -> DisplayRect:
    """Return where a fitted buffer is drawn when centred inside ``container``."""
    scale = fit_scale(container.width, container.height, buffer_width, buffer_height)
    width = buffer_width * scale
    height = buffer_height * scale
    left = container.left + (container.width - width) / 2.0
    top = container.top + (container.height - height) / 2.0
    return DisplayRect(left, top, width, height)


def to_buffer_space(
    display_point: DisplayPoint,
    rendered_rect: DisplayRect,
    buffer_width: int,
    buffer_height: int,
) -> BufferPoint:
    """
    Map a pointer position onto the buffer drawn inside ``rendered_rect``.

    With the rect the same size as the buffer the result is exactly
    ``(x - rect.left, y - rect.top)``.
    """
    scale_x, scale_y = axis_scales(rendered_rect, buffer_width, buffer_height)
    return BufferPoint(
        (display_point.x - rendered_rect.left) / scale_x,
        (display_point.y - rendered_rect.top) / scale_y,
    )


def to_buffer_space_uniform(
    display_point: DisplayPoint,
    origin_left: float,
    origin_top: float,
    scale: float,
) -> BufferPoint:
    if scale <= 0:
        scale = 1.0
    return BufferPoint(
        (display_point.x - origin_left) / scale,
        (display_point.y - origin_top) / scale,
    )


def to_pixel(point: BufferPoint) -> Tuple[int, int]:
    """Floor a buffer point to the pixel that contains it (used for fill seeds)."""
    return int(math.floor(point.x)), int(math.floor(point.y))
