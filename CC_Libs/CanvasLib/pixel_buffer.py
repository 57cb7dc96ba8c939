"""
Mutable RGBA pixel buffer for the coloring engine.

The buffer is the only surface the engine mutates. Samples are stored as a
row-major numpy array of shape (height, width, 4) and every single-pixel access
goes through bounds-checked accessors.

Classes:
    PixelBuffer: Owned width x height RGBA surface
"""

from io import BytesIO
from typing import Any, Optional, Tuple

import numpy as np

from CC_Libs.CanvasLib.canvas_models import RgbaColor
from CC_Libs.constants import EXPORT_FORMAT, EXPORT_MODE, OPAQUE_ALPHA
from CC_Libs.pillow_compat import Image


class PixelBuffer:
    """
    A width x height array of RGBA samples.

    Example:
        >>> buffer = PixelBuffer(4, 3, fill=(255, 255, 255, 255))
        >>> buffer.set_pixel(1, 2, (255, 0, 0, 255))
        True
        >>> buffer.get_pixel(1, 2)
        (255, 0, 0, 255)
    """

    def __init__(self, width: int, height: int, fill: RgbaColor = (0, 0, 0, 0)) -> None:
        width = int(width)
        height = int(height)
        if width < 0 or height < 0:
            raise ValueError(f"Buffer size must be non-negative, got {width}x{height}")

        self.width = width
        self.height = height
        self.samples = np.empty((height, width, 4), dtype=np.uint8)
        self.samples[:, :] = fill

    @classmethod
    def from_array(cls, samples: np.ndarray) -> "PixelBuffer":
        """Wrap a copy of an existing (height, width, 4) uint8 array."""
        array = np.asarray(samples)
        if array.ndim != 3 or array.shape[2] != 4:
            raise ValueError(f"Expected an array of shape (height, width, 4), got {array.shape}")

        buffer = cls(array.shape[1], array.shape[0])
        buffer.samples[...] = array.astype(np.uint8, copy=False)
        return buffer

    @classmethod
    def from_image(cls, image: Any) -> "PixelBuffer":
        """
        Create a buffer holding the pixels of a PIL image.

        Args:
            image: A PIL Image in any mode; it is converted to RGBA

        Returns:
            New buffer sized to the image's natural dimensions
        """
        if image.mode != EXPORT_MODE:
            image = image.convert(EXPORT_MODE)
        return cls.from_array(np.array(image, dtype=np.uint8))

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def index_of(self, x: int, y: int) -> Optional[int]:
        """Return the flat pixel index for (x, y), or None when out of bounds."""
        if not self.in_bounds(x, y):
            return None
        return y * self.width + x

    def get_pixel(self, x: int, y: int) -> Optional[RgbaColor]:
        if not self.in_bounds(x, y):
            return None
        r, g, b, a = self.samples[y, x]
        return (int(r), int(g), int(b), int(a))

    def set_pixel(self, x: int, y: int, color: RgbaColor) -> bool:
        """Write one pixel. Returns False (and writes nothing) when out of bounds."""
        if not self.in_bounds(x, y):
            return False
        self.samples[y, x] = color
        return True

    def flat_view(self) -> np.ndarray:
        """Return a (width*height, 4) view indexed by ``index_of``."""
        return self.samples.reshape(-1, 4)

    def fill_all(self, color: RgbaColor) -> None:
        self.samples[:, :] = color

    def copy(self) -> "PixelBuffer":
        return PixelBuffer.from_array(self.samples)

    def restore_from(self, other: "PixelBuffer") -> None:
        """Overwrite this buffer in place with the pixels of a same-sized buffer."""
        if other.size != self.size:
            raise ValueError(f"Cannot restore {self.size} buffer from {other.size} buffer")
        np.copyto(self.samples, other.samples)

    def to_image(self) -> Any:
        return Image.fromarray(self.samples.copy())

    def to_png_bytes(self) -> bytes:
        """Encode the current pixels losslessly as PNG."""
        stream = BytesIO()
        self.to_image().save(stream, format=EXPORT_FORMAT)
        return stream.getvalue()

    def is_opaque(self) -> bool:
        return bool(np.all(self.samples[:, :, 3] == OPAQUE_ALPHA))

    def __repr__(self) -> str:
        return f"PixelBuffer(width={self.width}, height={self.height})"
