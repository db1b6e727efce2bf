"""Centralized configuration for wavescope.

This module contains the configuration constants and magic numbers used
throughout the package. User-editable settings live in settings_manager.
"""

from dataclasses import dataclass
from typing import FrozenSet


@dataclass(frozen=True)
class NavigationConfig:
    """Limits and step sizes for view navigation."""
    MIN_TIME_RANGE: int = 10        # Minimum zoom, in timescale units
    DEFAULT_TIME_RANGE: int = 50    # Window size before any file is loaded
    PAN_DIVISOR: int = 4            # Pan moves the window by time_range / PAN_DIVISOR

    # Movement in pixels after which a press-and-move is treated as a drag.
    # This does not mean that the drag will zoom.
    DRAG_DETECTED_THRESHOLD_PIXELS: int = 3
    # Movement in pixels after which releasing a drag commits the zoom.
    # Must be >= DRAG_DETECTED_THRESHOLD_PIXELS.
    DRAG_STARTED_THRESHOLD_PIXELS: int = 5


@dataclass(frozen=True)
class UIDefaults:
    """Default values for the user-editable ui section."""
    SIGNAL_LIST_WIDTH: int = 20
    MARKER_COLOR_PRIMARY: str = "yellow"
    MARKER_COLOR_SECONDARY: str = "cyan"
    DRAG_COLOR: str = "#6496FF"
    SAVED_MARKER_COLOR: str = "green"


# Color names accepted for markers, besides "#RRGGBB"
ANSI_COLORS: FrozenSet[str] = frozenset({
    "black", "red", "green", "yellow", "blue", "magenta", "cyan", "gray",
    "darkgray", "lightred", "lightgreen", "lightyellow", "lightblue",
    "lightmagenta", "lightcyan", "white", "reset",
})

CONFIG_DIR_NAME = "wavescope"
CONFIG_FILE_NAME = "config.yaml"


# Global instances for easy access
NAVIGATION = NavigationConfig()
UI_DEFAULTS = UIDefaults()
