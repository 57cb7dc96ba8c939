"""
CC_Libs - Color Canvas Library Modules

This package contains core functionality for the Color Canvas project,
organized into specialized sub-packages:

- CanvasLib: Pixel buffer, coordinate mapping, stroke rasterizing and flood fill
- SessionLib: Drawing session state machine, engine configuration, async decode
- StoreLib: Image catalog and saved drawing persistence
- ColoringUI: PyQt5 gallery and coloring window
"""

__version__ = "0.1.0"
