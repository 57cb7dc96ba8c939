"""
Tolerance-based, outline-preserving flood fill.

The fill replaces the 4-connected region of colors similar to the seed pixel.
Similarity is always measured against the ORIGINAL seed color, never against
freshly painted pixels, so a loose tolerance cannot creep across a gradient.
Near-black pixels are treated as line-art outlines: a fill never starts on one
and never spreads into one.

Functions:
    colors_equal: Per-channel tolerance comparison of two RGBA colors
    is_near_black: Outline test used to protect line art
    similar_color_mask: Vectorised colors_equal over a whole buffer
    flood_fill: Fill the region around a seed pixel
"""

import logging

import numpy as np

from CC_Libs.CanvasLib.canvas_models import NO_FILL, FillOutcome, RgbaColor, opaque
from CC_Libs.CanvasLib.pixel_buffer import PixelBuffer
from CC_Libs.constants import (
    DEFAULT_EDGE_THRESHOLD,
    DEFAULT_FILL_TOLERANCE,
    SUPPORTED_TRAVERSALS,
    TRAVERSAL_BFS,
)

logger = logging.getLogger(__name__)


def colors_equal(a: RgbaColor, b: RgbaColor, tolerance: float) -> bool:
    """
    Check whether two colors match within a tolerance.

    Each of R, G, B and A must differ by strictly less than ``tolerance``.
    This is a per-channel maximum test, not a Euclidean distance, and it is
    symmetric in ``a`` and ``b``.

    Args:
        a: First RGBA color
        b: Second RGBA color
        tolerance: Exclusive per-channel limit

    Returns:
        True if every channel difference is below the tolerance
    """
    return all(abs(int(ca) - int(cb)) < tolerance for ca, cb in zip(a, b))


def is_near_black(color: RgbaColor, edge_threshold: int = DEFAULT_EDGE_THRESHOLD) -> bool:
    r, g, b = color[0], color[1], color[2]
    return r <= edge_threshold and g <= edge_threshold and b <= edge_threshold


def similar_color_mask(samples: np.ndarray, color: RgbaColor, tolerance: float) -> np.ndarray:
    """Return a flat boolean mask of pixels for which colors_equal(pixel, color) holds."""
    flat = samples.reshape(-1, 4).astype(np.int16)
    diff = np.abs(flat - np.asarray(color, dtype=np.int16))
    return np.all(diff < tolerance, axis=1)


def near_black_mask(samples: np.ndarray, edge_threshold: int) -> np.ndarray:
    flat = samples.reshape(-1, 4)
    return np.all(flat[:, :3] <= edge_threshold, axis=1)


def flood_fill(
    buffer: PixelBuffer,
    seed_x: int,
    seed_y: int,
    fill_color: RgbaColor,
    tolerance: float = DEFAULT_FILL_TOLERANCE,
    edge_threshold: int = DEFAULT_EDGE_THRESHOLD,
    traversal: str = TRAVERSAL_BFS,
) -> FillOutcome:
    """
    Fill the contiguous region around (seed_x, seed_y) with ``fill_color``.

    The request is refused (``filled=False``, buffer untouched) when the seed
    is outside the buffer, when the seed already matches ``fill_color`` within
    the tolerance, when the seed is a near-black outline pixel, or when the
    tolerance is not positive.

    Visited and work-list storage are allocated once at width*height, so the
    fill runs in O(width*height) time and memory whatever the region shape.

    Args:
        buffer: Buffer to modify in place
        seed_x: Seed column in buffer space
        seed_y: Seed row in buffer space
        fill_color: Replacement color; painted fully opaque
        tolerance: Exclusive per-channel similarity limit
        edge_threshold: R, G, B at or below this mark an outline pixel
        traversal: "bfs" (queue) or "dfs" (stack); both fill the same region

    Returns:
        FillOutcome with the number of pixels repainted

    Raises:
        ValueError: If traversal is not a supported order
    """
    if traversal not in SUPPORTED_TRAVERSALS:
        raise ValueError(f"Unsupported traversal order: {traversal}")

    seed_index = buffer.index_of(seed_x, seed_y)
    if seed_index is None:
        logger.debug("Fill seed (%s, %s) outside %s; ignoring", seed_x, seed_y, buffer)
        return NO_FILL

    if tolerance <= 0:
        logger.debug("Fill requested with non-positive tolerance %s; ignoring", tolerance)
        return NO_FILL

    start_color = buffer.get_pixel(seed_x, seed_y)
    if colors_equal(start_color, fill_color, tolerance):
        return NO_FILL
    if is_near_black(start_color, edge_threshold):
        logger.debug("Fill seed (%s, %s) is on an outline pixel; ignoring", seed_x, seed_y)
        return NO_FILL

    width = buffer.width
    total = width * buffer.height

    # Decided up front from the untouched pixels, so painting never changes eligibility.
    eligible = similar_color_mask(buffer.samples, start_color, tolerance)
    eligible &= ~near_black_mask(buffer.samples, edge_threshold)

    visited = np.zeros(total, dtype=np.bool_)
    work = np.empty(total, dtype=np.int64)
    use_queue = traversal == TRAVERSAL_BFS

    head = 0
    tail = 0
    work[tail] = seed_index
    tail += 1
    visited[seed_index] = True

    flat = buffer.flat_view()
    paint = np.asarray(opaque(fill_color), dtype=np.uint8)
    changed = 0

    while tail > head:
        if use_queue:
            index = int(work[head])
            head += 1
        else:
            tail -= 1
            index = int(work[tail])

        flat[index] = paint
        changed += 1

        x = index % width
        neighbors = []
        if x > 0:
            neighbors.append(index - 1)
        if x < width - 1:
            neighbors.append(index + 1)
        if index >= width:
            neighbors.append(index - width)
        if index + width < total:
            neighbors.append(index + width)

        for neighbor in neighbors:
            if visited[neighbor] or not eligible[neighbor]:
                continue
            visited[neighbor] = True
            work[tail] = neighbor
            tail += 1

    logger.debug("Filled %d pixels from seed (%s, %s)", changed, seed_x, seed_y)
    return FillOutcome(filled=True, pixels_changed=changed)
