"""
Canvas data models for Color Canvas.

This module defines the small value types shared by the coloring engine.

Classes:
    DisplayPoint: Pointer position in device pixels
    BufferPoint: Position in pixel-buffer space (may be fractional)
    DisplayRect: On-screen bounds of the rendered buffer
    FillOutcome: Result of a flood fill request
    Tool: Painting tool selected by the user

Functions:
    parse_hex_color: Convert a "#RRGGBB" palette string to an RGBA tuple
    opaque: Return a color with its alpha forced to 255

Type Aliases:
    RgbaColor: A tuple of 4 integers representing RGBA color values (0-255)
"""

from enum import Enum
from typing import NamedTuple, Tuple

from CC_Libs.constants import OPAQUE_ALPHA

RgbaColor = Tuple[int, int, int, int]


class DisplayPoint(NamedTuple):
    x: float
    y: float


class BufferPoint(NamedTuple):
    x: float
    y: float


class DisplayRect(NamedTuple):
    left: float
    top: float
    width: float
    height: float


class FillOutcome(NamedTuple):
    filled: bool
    pixels_changed: int


NO_FILL = FillOutcome(filled=False, pixels_changed=0)


class Tool(Enum):
    """Painting tools."""

    BRUSH = "brush"
    FILL = "fill"


def opaque(color: RgbaColor) -> RgbaColor:
    r, g, b, _ = color
    return (int(r), int(g), int(b), OPAQUE_ALPHA)


def parse_hex_color(value: str) -> RgbaColor:
    """
    Convert a hex color string into an RGBA tuple.

    Accepts "#RGB", "#RRGGBB" and "#RRGGBBAA", with or without the leading '#'.
    Colors without an alpha component are fully opaque.

    Args:
        value: Hex color string such as "#FF0000"

    Returns:
        RGBA tuple with channel values in 0-255

    Raises:
        ValueError: If the string is not a valid hex color
    """
    text = str(value).strip().lstrip("#")
    if len(text) == 3:
        text = "".join(ch * 2 for ch in text)
    if len(text) not in (6, 8):
        raise ValueError(f"Invalid hex color: {value!r}")

    try:
        channels = [int(text[i:i + 2], 16) for i in range(0, len(text), 2)]
    except ValueError as exc:
        raise ValueError(f"Invalid hex color: {value!r}") from exc

    if len(channels) == 3:
        channels.append(OPAQUE_ALPHA)
    r, g, b, a = channels
    return (r, g, b, a)
