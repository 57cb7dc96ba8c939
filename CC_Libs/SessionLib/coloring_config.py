"""
Coloring engine configuration for Color Canvas.

Tolerance, outline threshold, traversal order and stroke sizes are tunable per
image source rather than hard-coded: JPEG line art needs a loose tolerance to
swallow compression noise, clean PNG line art works better with a strict one.

Classes:
    ColoringConfig: Engine settings used by a drawing session

Functions:
    load_coloring_config: Read settings from a JSON file, falling back to defaults
    save_coloring_config: Write settings to a JSON file
"""

import json
import logging
from dataclasses import asdict, dataclass, replace
from pathlib import Path
from typing import Any, Dict

from CC_Libs.constants import (
    CHANNEL_MAX,
    CHANNEL_MIN,
    DEFAULT_BRUSH_RADIUS,
    DEFAULT_EDGE_THRESHOLD,
    DEFAULT_FILL_TOLERANCE,
    DEFAULT_LINE_WIDTH,
    STRICT_FILL_TOLERANCE,
    STRICT_TOLERANCE_EXTENSIONS,
    SUPPORTED_TRAVERSALS,
    TRAVERSAL_BFS,
)
from CC_Libs.errors import PersistenceError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ColoringConfig:
    """Settings for brush strokes and flood fill.

    Attributes:
        brush_radius: Radius of the dot drawn on pointer-down (buffer pixels)
        line_width: Width of the segment drawn on pointer-move (buffer pixels)
        fill_tolerance: Exclusive per-channel similarity limit for flood fill
        edge_threshold: R, G, B at or below this mark an outline pixel
        traversal: Flood fill order, "bfs" or "dfs"
        coalesce_moves: Keep only the latest pointer-move until the next frame flush
        strict_png_tolerance: Use the strict fill tolerance for PNG sources
    """
    brush_radius: float = DEFAULT_BRUSH_RADIUS
    line_width: float = DEFAULT_LINE_WIDTH
    fill_tolerance: int = DEFAULT_FILL_TOLERANCE
    edge_threshold: int = DEFAULT_EDGE_THRESHOLD
    traversal: str = TRAVERSAL_BFS
    coalesce_moves: bool = True
    strict_png_tolerance: bool = False

    def __post_init__(self):
        """Validate settings."""
        if self.brush_radius < 0:
            raise ValueError(f"brush_radius must be >= 0, got {self.brush_radius}")

        if self.line_width < 0:
            raise ValueError(f"line_width must be >= 0, got {self.line_width}")

        if not (CHANNEL_MIN <= self.fill_tolerance <= CHANNEL_MAX + 1):
            raise ValueError(f"fill_tolerance must be 0-256, got {self.fill_tolerance}")

        if not (CHANNEL_MIN <= self.edge_threshold <= CHANNEL_MAX):
            raise ValueError(f"edge_threshold must be 0-255, got {self.edge_threshold}")

        if self.traversal not in SUPPORTED_TRAVERSALS:
            raise ValueError(
                f"traversal must be one of {', '.join(SUPPORTED_TRAVERSALS)}, got {self.traversal!r}"
            )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ColoringConfig":
        """Create from dictionary, ignoring unknown keys."""
        filtered = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**filtered)

    def for_source(self, source_path: Path) -> "ColoringConfig":
        """
        Return a copy tuned for an image file.

        With strict_png_tolerance enabled, PNG sources get the strict
        tolerance preset; otherwise the settings are returned unchanged.
        """
        if not self.strict_png_tolerance:
            return self
        if Path(source_path).suffix.lower() in STRICT_TOLERANCE_EXTENSIONS:
            return replace(self, fill_tolerance=STRICT_FILL_TOLERANCE)
        return self


def load_coloring_config(config_path: Path) -> ColoringConfig:
    """
    Load settings from a JSON file.

    A missing, unreadable or invalid file yields the defaults.

    Args:
        config_path: Path to the JSON settings file

    Returns:
        ColoringConfig with loaded or default values
    """
    if not config_path.exists():
        return ColoringConfig()

    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError("settings file does not contain an object")
        config = ColoringConfig.from_dict(data)
    except (OSError, ValueError, TypeError) as exc:
        logger.warning("Could not load coloring config from %s: %s", config_path, exc)
        return ColoringConfig()

    logger.info("Loaded coloring config from %s", config_path)
    return config


def save_coloring_config(config_path: Path, config: ColoringConfig) -> None:
    """
    Save settings to a JSON file.

    Raises:
        PersistenceError: If the file cannot be written
    """
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(json.dumps(config.to_dict(), indent=2), encoding="utf-8")
    except OSError as exc:
        raise PersistenceError(f"Could not save coloring config to {config_path}: {exc}") from exc
