"""
Configuration settings for the ASCII editor.
"""

import logging
import os

import toml
from pydantic import BaseModel, ConfigDict, field_validator

logger = logging.getLogger(__name__)

MIN_CANVAS_WIDTH, MAX_CANVAS_WIDTH = 4, 200
MIN_CANVAS_HEIGHT, MAX_CANVAS_HEIGHT = 4, 100


class EditorConfig(BaseModel):
    """Configuration settings for an editing session."""

    # Canvas
    canvas_width: int = 80
    canvas_height: int = 24
    cell_aspect_ratio: float = 0.5  # cell width / cell height

    # History
    max_history: int = 50

    # Frames
    default_frame_duration: int = 100  # ms
    sync_debounce_ms: int = 150

    # Lasso smoothing
    lasso_preview_tolerance: float = 0.2
    lasso_finalize_tolerance: float = 0.5

    # Default colours
    default_char: str = "@"
    default_color: str = "#FFFFFF"
    default_bg_color: str = "transparent"

    model_config = ConfigDict(extra="allow")

    @field_validator("canvas_width")
    @classmethod
    def _clamp_width(cls, v: int) -> int:
        return max(MIN_CANVAS_WIDTH, min(MAX_CANVAS_WIDTH, v))

    @field_validator("canvas_height")
    @classmethod
    def _clamp_height(cls, v: int) -> int:
        return max(MIN_CANVAS_HEIGHT, min(MAX_CANVAS_HEIGHT, v))

    @field_validator("max_history")
    @classmethod
    def _positive_history(cls, v: int) -> int:
        return max(1, v)

    @field_validator("cell_aspect_ratio")
    @classmethod
    def _positive_aspect(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("cell_aspect_ratio must be positive")
        return v

    @classmethod
    def load_from_toml(cls, path: str = "editor.toml") -> "EditorConfig":
        """Load configuration from the [editor] table of a TOML file."""
        if not os.path.exists(path):
            logger.warning("Config file %s not found. Using defaults.", path)
            return cls()

        try:
            with open(path, "r") as f:
                data = toml.load(f)
            return cls(**data.get("editor", {}))
        except (toml.TomlDecodeError, ValueError, OSError) as e:
            logger.error("Error loading config %s: %s", path, e)
            return cls()
