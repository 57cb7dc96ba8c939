"""
Constants and configuration values for Color Canvas.

This module centralizes all constant values, magic numbers, and
configuration settings used throughout the application.
"""

# Stroke defaults (buffer-space units)
DEFAULT_BRUSH_RADIUS = 2.0
DEFAULT_LINE_WIDTH = 4.0

# Flood fill defaults
DEFAULT_FILL_TOLERANCE = 128  # loose, for JPEG / anti-aliased line art
STRICT_FILL_TOLERANCE = 10  # clean PNG line art
DEFAULT_EDGE_THRESHOLD = 10
TRAVERSAL_BFS = "bfs"
TRAVERSAL_DFS = "dfs"
SUPPORTED_TRAVERSALS = (TRAVERSAL_BFS, TRAVERSAL_DFS)

# Channel limits
CHANNEL_MIN = 0
CHANNEL_MAX = 255
OPAQUE_ALPHA = 255

# Export
EXPORT_FORMAT = "PNG"
EXPORT_MODE = "RGBA"

# Image catalog
SUPPORTED_STANDARD_IMAGES = {".png", ".jpg", ".jpeg", ".bmp", ".gif", ".tiff", ".webp"}
STRICT_TOLERANCE_EXTENSIONS = {".png"}
DEFAULT_IMAGES_DIR_NAME = "Images"

# Saved drawing store
SAVED_DRAWINGS_DIR_NAME = "SavedDrawings"
SAVED_INDEX_FILE_NAME = "index.json"
SAVED_DRAWING_EXTENSION = ".png"
STORE_SCHEMA_VERSION = 1

# Saved drawing index field names
FIELD_SCHEMA_VERSION = "schema_version"
FIELD_DRAWINGS = "drawings"
FIELD_DRAWING_ID = "id"
FIELD_SOURCE_IMAGE_ID = "source_image_id"
FIELD_FILE_NAME = "file_name"
FIELD_CREATED_AT = "created_at"

# Configuration file
CONFIG_FILE_NAME = "coloring_config.json"

# UI constants
DEFAULT_WINDOW_WIDTH = 1200
DEFAULT_WINDOW_HEIGHT = 800
CANVAS_MIN_SIZE = 400
FRAME_INTERVAL_MS = 16
LOAD_POLL_INTERVAL_MS = 30
SWATCH_SIZE = 24
THUMBNAIL_SIZE = 96

# Palette shown next to the canvas
DEFAULT_PALETTE = [
    "#FF0000",  # Red
    "#FF7F00",  # Orange
    "#FFFF00",  # Yellow
    "#00FF00",  # Green
    "#0000FF",  # Blue
    "#4B0082",  # Indigo
    "#9400D3",  # Violet
    "#FF1493",  # Deep Pink
    "#00BFFF",  # Deep Sky Blue
    "#32CD32",  # Lime Green
    "#FFD700",  # Gold
    "#FF4500",  # Orange Red
    "#8A2BE2",  # Blue Violet
    "#00FFFF",  # Cyan
    "#FF69B4",  # Hot Pink
    "#CD853F",  # Peru
    "#8B4513",  # Saddle Brown
    "#2E8B57",  # Sea Green
    "#A52A2A",  # Brown
    "#000000",  # Black
    "#FFFFFF",  # White
    "#808080",  # Gray
]
DEFAULT_COLOR = "#FF0000"
