"""
Error types for Color Canvas.

There is no error for out-of-bounds pointer input: the
engine treats it as a no-op rather than an error.
"""


class ColorCanvasError(Exception):
    """Base class for all Color Canvas errors."""


class ImageLoadError(ColorCanvasError):
    """A source image was not found or could not be decoded."""

    def __init__(self, image_id: str, reason: str) -> None:
        super().__init__(f"Could not load image '{image_id}': {reason}")
        self.image_id = image_id
        self.reason = reason


class PersistenceError(ColorCanvasError):
    """A saved drawing could not be written or read."""


class SessionStateError(ColorCanvasError):
    """A session operation was requested in a state that cannot serve it."""
