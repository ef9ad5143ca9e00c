"""
Log formatter for console output.

Renders records as:

    [12:34:56,789] [I] message          [key:value] [1234] [/lifecycle]

Extra fields are appended in brackets, "after" (elapsed seconds) first, and
an "exception" field is rendered by class name.
"""

import collections
import logging
import os
from typing import Any

from .colors import ColorManager
from .config import LogConfig
from .constants import LogConstants


def _after_str(secs: float) -> str:
    """Format elapsed seconds compactly."""
    if secs < 1.0:
        return f"{secs * 1000:.1f}ms"
    return f"{secs:.3f}s"


def _field_value(key: str, value: Any) -> str:
    """Render a single extra value."""
    if key == "exception" and isinstance(value, BaseException):
        return value.__class__.__name__
    if key == "after" and isinstance(value, float):
        return _after_str(value)
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value)
    return str(value)


def _ordered_fields(extra: dict[str, Any]) -> list[tuple[str, str]]:
    """Extra fields in display order, with % escaped for the logging format."""
    keys = list(extra.keys())
    if not isinstance(extra, collections.OrderedDict):
        keys = sorted(keys)
    if "after" in keys:
        keys.remove("after")
        keys.insert(0, "after")
    return [(k, _field_value(k, extra[k]).replace("%", "%%")) for k in keys]


class PreFormatter(logging.Formatter):
    """Standard formatter with optional microsecond timestamps."""

    def __init__(self, fmt: str, micros: bool) -> None:
        self._micros = micros
        super().__init__(fmt)

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        s = super().formatTime(record, "%H:%M:%S")
        s += f",{int(record.msecs):03d}"
        if self._micros:
            micros = int((record.created % 1) * 1000000) % 1000
            s += f".{micros:03d}"
        return s


class LogFormatter(logging.Formatter):
    """
    Console formatter with structured fields and optional colors.

    Builds a per-record format string (message padded to a rule width, then
    extra fields, process id, logger name and optional caller location) and
    hands it to a PreFormatter.
    """

    def __init__(self, config: LogConfig):
        """
        Initialize the log formatter.

        Args:
            config: Logger configuration
        """
        super().__init__()
        self._config = config
        self._pre_formatter = PreFormatter(LogConstants.DEFAULT_FORMAT, config.micros)

    @property
    def config(self) -> LogConfig:
        return self._config

    def format(self, record: logging.LogRecord) -> str:
        """
        Format a log record.

        Args:
            record: Log record to format

        Returns:
            Formatted log message
        """
        fmt = self._build_format(record)
        self._pre_formatter._fmt = fmt
        self._pre_formatter._style._fmt = fmt
        return self._pre_formatter.format(record)

    def _padding(self, record: logging.LogRecord) -> str:
        """Spaces that align extra fields to the rule width."""
        timestamp_len = 16 if self._config.micros else 12
        width = 1 + timestamp_len + 4 + 1 + 2 + len(record.getMessage())
        rule = (
            LogConstants.MICRO_RULE_WIDTH
            if self._config.micros
            else LogConstants.DEFAULT_RULE_WIDTH
        )
        return " " * max(1, rule - width)

    def _build_format(self, record: logging.LogRecord) -> str:
        fields = _ordered_fields(getattr(record, "__procexit__extra", None) or {})
        if not self._config.colors:
            fmt = LogConstants.DEFAULT_FORMAT + self._padding(record)
            fmt += "".join(f" [{k}:{v}]" if k != "after" else f" [{v}]" for k, v in fields)
            fmt += " [%(process)d] [%(name)s]"
            return fmt + self._render_location(record)

        col = ColorManager.get_color_for_level(record.levelno)
        bold = ColorManager.create_bold_color(col)
        col += "m"
        reset = ColorManager.RESET
        fmt = f"{col}[%(asctime)s] [{bold}%(levelname).1s{reset}{col}] {bold}%(message)s{reset}"
        fmt += self._padding(record)
        for k, v in fields:
            label = "" if k == "after" else k
            fmt += f" {col}{label}[{bold}{v}{reset}{col}]"
        gray = ColorManager.gray(9)
        fmt += f" {gray}[%(process)d] [%(name)s]"
        fmt += self._render_location(record)
        return fmt + reset

    def _render_location(self, record: logging.LogRecord) -> str:
        """Render [./file:line] entries for the traced callers."""
        if not self._config.location:
            return ""
        pathnames = getattr(record, "__procexit__pathnames", None) or [record.pathname]
        linenos = getattr(record, "__procexit__linenos", None) or [record.lineno]
        out = ""
        for pathname, lineno in zip(pathnames, linenos):
            rel = os.path.relpath(pathname, os.getcwd()).replace("%", "%%")
            out += f" [./{rel}:{lineno}]"
        return out
