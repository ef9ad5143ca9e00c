"""
ANSI color selection for log levels.
"""

import logging

from .constants import LogConstants


class ColorManager:
    """Centralized ANSI color code management."""

    RED = "\x1b[31"
    YELLOW = "\x1b[33"
    MAGENTA = "\x1b[35"
    CYAN = "\x1b[36"
    DEFAULT = "\x1b[38"

    RESET = LogConstants.RESET

    COLORS: dict[int, str] = {
        LogConstants.CUSTOM_LEVELS["TRACE"]: "\x1b[38;5;244",
        logging.DEBUG: "\x1b[38;5;32",
        logging.INFO: CYAN,
        logging.WARNING: YELLOW,
        logging.ERROR: RED,
        logging.CRITICAL: MAGENTA,
    }

    @staticmethod
    def get_color_for_level(level: int) -> str:
        """Get the color escape prefix for a level (without the trailing 'm')."""
        return ColorManager.COLORS.get(level, ColorManager.DEFAULT)

    @staticmethod
    def create_bold_color(color: str) -> str:
        """Bold variant of a color prefix, terminated."""
        return color + ";1m"

    @staticmethod
    def gray(level: int) -> str:
        """Gray from the 256-color ramp (0-23), terminated."""
        level = max(0, min(level, 23))
        return f"\x1b[38;5;{232 + level}m"
