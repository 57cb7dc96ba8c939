"""
ColoringUI - PyQt5 gallery and coloring window for Color Canvas.
"""

from CC_Libs.ColoringUI.coloring_window import CanvasWidget, ColoringWindow, buffer_to_qimage, thumbnail_icon

__all__ = [
    "CanvasWidget",
    "ColoringWindow",
    "buffer_to_qimage",
    "thumbnail_icon",
]
