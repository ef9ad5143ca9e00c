"""
Logging for procexit.

Extends Python's standard logging with:
- A TRACE level below DEBUG
- Slash-path logger names ("/", "/lifecycle", "/lifecycle/drain")
- Structured extra fields rendered as [key:value]
- Derived "view" loggers sharing the root logger's handlers

Loggers are handed to components explicitly; nothing in procexit looks a
logger up from ambient state.

Example:
    from procexit.log import LogConfig, LoggerFactory

    lg = LoggerFactory.create_root(LogConfig.from_params("debug"))
    drain_lg = LoggerFactory.derive(lg, ["lifecycle", "drain"])
    drain_lg.debug("released", extra={"in_flight": 0})
"""

import logging

from .config import LogConfig
from .constants import LogConstants
from .exceptions import InvalidLogLevelError, LogError
from .factory import LoggerFactory
from .formatters import LogFormatter
from .logger import Logger

logging.TRACE = LogConstants.CUSTOM_LEVELS["TRACE"]  # type: ignore[attr-defined]
logging.addLevelName(logging.TRACE, "TRACE")  # type: ignore[attr-defined]
LogConstants.LEVEL_NAMES["trace"] = logging.TRACE  # type: ignore[attr-defined]

__all__ = [
    "LogConfig",
    "LogConstants",
    "LogFormatter",
    "Logger",
    "LoggerFactory",
    "LogError",
    "InvalidLogLevelError",
]
