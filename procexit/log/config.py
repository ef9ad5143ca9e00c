"""
Configuration class for the logging system.

LogConfig is immutable so a formatter and the loggers sharing it always see
a consistent set of display settings.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class LogConfig:
    """
    Immutable logger configuration.

    Attributes:
        level: Numeric level, or False to disable logging entirely
        location: Number of caller frames rendered as [file:line] (0 = off)
        micros: Append microseconds to timestamps
        colors: Emit ANSI colors
    """

    level: int | bool = logging.INFO
    location: int = 0
    micros: bool = False
    colors: bool = False

    @staticmethod
    def _resolve_level(level: str | int | bool) -> int | bool:
        """Resolve level parameter to int or False."""
        from .constants import LogConstants
        from .exceptions import InvalidLogLevelError

        if isinstance(level, bool):
            return False if not level else logging.INFO
        elif isinstance(level, str):
            if level.isnumeric():
                return int(level)
            elif level.lower() in LogConstants.LEVEL_NAMES:
                return LogConstants.LEVEL_NAMES[level.lower()]
            else:
                raise InvalidLogLevelError(level)
        return level

    @classmethod
    def from_params(
        cls,
        level: str | int | bool,
        location: bool | int = 0,
        micros: bool = False,
        colors: bool = False,
    ) -> LogConfig:
        """
        Create LogConfig from individual parameters.

        Args:
            level: Log level (string name, numeric value, or False to disable logging)
            location: Location display level (bool or int)
            micros: Whether to show microsecond precision
            colors: Whether to enable colored output

        Returns:
            LogConfig instance
        """
        resolved_location = (
            1 if location is True else (0 if location is False else int(location))
        )
        return cls(
            level=cls._resolve_level(level),
            location=resolved_location,
            micros=micros,
            colors=colors,
        )

    @classmethod
    def from_config(cls, config_dict: dict[str, Any], section: str = "logging") -> LogConfig:
        """
        Create LogConfig from a configuration dictionary.

        Args:
            config_dict: Configuration dictionary (e.g., Config.dict())
            section: Dotted path of the logging section (default: "logging")

        Example:
            config = Config("etc/procexit.yaml")
            log_config = LogConfig.from_config(config.dict())
        """
        current: Any = config_dict
        for part in section.split("."):
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                current = {}
                break

        level = current.get("level", "info")
        if level is None:
            level = False

        return cls.from_params(
            level=level,
            location=current.get("location", 0),
            micros=current.get("microseconds", current.get("micros", False)),
            colors=current.get("colors", False),
        )
