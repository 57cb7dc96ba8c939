"""
CanvasLib - Raster coloring engine

This module provides the pixel buffer, display-to-buffer coordinate mapping,
brush stroke rasterization and flood fill used by the Color Canvas project.
"""

from CC_Libs.CanvasLib.canvas_models import (
    BufferPoint,
    DisplayPoint,
    DisplayRect,
    FillOutcome,
    RgbaColor,
    Tool,
    parse_hex_color,
)
from CC_Libs.CanvasLib.pixel_buffer import PixelBuffer
from CC_Libs.CanvasLib.coordinate_mapper import (
    fit_scale,
    fitted_rect,
    to_buffer_space,
    to_buffer_space_uniform,
    to_pixel,
)
from CC_Libs.CanvasLib.stroke_rasterizer import draw_dot, draw_line
from CC_Libs.CanvasLib.flood_fill import colors_equal, flood_fill, is_near_black

__all__ = [
    "BufferPoint",
    "DisplayPoint",
    "DisplayRect",
    "FillOutcome",
    "RgbaColor",
    "Tool",
    "parse_hex_color",
    "PixelBuffer",
    "fit_scale",
    "fitted_rect",
    "to_buffer_space",
    "to_buffer_space_uniform",
    "to_pixel",
    "draw_dot",
    "draw_line",
    "colors_equal",
    "flood_fill",
    "is_near_black",
]
