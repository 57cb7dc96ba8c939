"""
Pytest configuration and shared fixtures for Color Canvas tests.

This module provides shared test fixtures and configuration
used across multiple test modules.
"""

import pytest
from pathlib import Path

from PIL import Image

from CC_Libs.CanvasLib.pixel_buffer import PixelBuffer

WHITE = (255, 255, 255, 255)
BLACK = (0, 0, 0, 255)
RED = (255, 0, 0, 255)
BLUE = (0, 0, 255, 255)


@pytest.fixture
def white_buffer():
    """
    Provide a blank 10x10 white buffer.

    Returns:
        PixelBuffer filled with opaque white
    """
    return PixelBuffer(10, 10, fill=WHITE)


@pytest.fixture
def ring_buffer():
    """
    Provide a 20x20 white buffer with a closed one-pixel black ring.

    The ring is the border of the square from (5, 5) to (14, 14), so the
    pixels strictly inside are x, y in 6..13.

    Returns:
        PixelBuffer with the ring drawn
    """
    buffer = PixelBuffer(20, 20, fill=WHITE)
    for i in range(5, 15):
        buffer.set_pixel(i, 5, BLACK)
        buffer.set_pixel(i, 14, BLACK)
        buffer.set_pixel(5, i, BLACK)
        buffer.set_pixel(14, i, BLACK)
    return buffer


@pytest.fixture
def images_dir(tmp_path):
    """
    Provide a directory of small line-art images for catalog tests.

    Contains two PNGs, one JPEG and one non-image file.

    Returns:
        Path to the directory
    """
    directory = tmp_path / "Images"
    directory.mkdir()

    castle = Image.new("RGBA", (30, 20), WHITE)
    for x in range(30):
        castle.putpixel((x, 0), BLACK)
    castle.save(directory / "castle.png")

    Image.new("RGB", (16, 16), (255, 255, 255)).save(directory / "happy_butterfly.png")
    Image.new("RGB", (12, 8), (250, 250, 250)).save(directory / "tree.jpg")
    (directory / "notes.txt").write_text("not an image", encoding="utf-8")
    return directory


@pytest.fixture
def sample_rgba_colors():
    """
    Provide a list of sample RGBA color tuples for testing.

    Returns:
        List of (R, G, B, A) tuples with common test colors
    """
    return [
        (255, 0, 0, 255),    # Red
        (0, 255, 0, 255),    # Green
        (0, 0, 255, 255),    # Blue
        (255, 255, 255, 255),  # White
        (0, 0, 0, 255),      # Black
        (128, 128, 128, 255),  # Gray
        (10, 10, 10, 0),     # Transparent near-black
    ]
