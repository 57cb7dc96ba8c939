"""
SessionLib - Drawing session orchestration

This module provides the drawing session state machine, the engine
configuration and the background image decoder.
"""

from CC_Libs.SessionLib.coloring_config import (
    ColoringConfig,
    load_coloring_config,
    save_coloring_config,
)
from CC_Libs.SessionLib.image_loader import AsyncImageLoader, LoadResult
from CC_Libs.SessionLib.drawing_session import DrawingSession, SessionState

__all__ = [
    "ColoringConfig",
    "load_coloring_config",
    "save_coloring_config",
    "AsyncImageLoader",
    "LoadResult",
    "DrawingSession",
    "SessionState",
]
