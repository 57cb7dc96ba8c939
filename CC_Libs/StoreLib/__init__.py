"""
StoreLib - Image catalog and saved drawing storage

This module handles the collaborators a coloring session talks to at its
start and end: the line-art catalog and the saved drawing store.
"""

from CC_Libs.StoreLib.image_catalog import CatalogImage, ImageCatalog, ImageSource
from CC_Libs.StoreLib.drawing_store import DrawingStore, SavedDrawing, get_saved_drawings_dir

__all__ = [
    "CatalogImage",
    "ImageCatalog",
    "ImageSource",
    "DrawingStore",
    "SavedDrawing",
    "get_saved_drawings_dir",
]
