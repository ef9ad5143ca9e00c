"""
Logger class for the logging system.

Extends the standard logger with a TRACE level, pre-populated extra fields
and "view" loggers that share the root logger's handlers.
"""

import collections
import logging
import sys
import threading
from types import FrameType
from typing import Any

from .config import LogConfig
from .constants import LogConstants


class Logger(logging.Logger):
    """
    Enhanced logger with structured extra fields.

    Extends the standard Python logger with:
    - A custom trace() level below DEBUG
    - Pre-populated extra fields merged into every record
    - Derived "view" loggers delegating to the root logger's handlers
    - Multi-frame caller location tracking
    """

    def __init__(
        self,
        name: str,
        config: LogConfig | None = None,
        extra: dict[str, Any] | collections.OrderedDict | None = None,
    ):
        """
        Initialize the enhanced logger.

        Args:
            name: Logger name
            config: Logger configuration (defaults to info level)
            extra: Pre-populated extra fields to include in all log records
        """
        if config is None:
            config = LogConfig.from_params("info")

        if config.level is False:
            super().__init__(name, logging.CRITICAL + 1)
            self._logging_disabled = True
        else:
            super().__init__(name, config.level)
            self._logging_disabled = False

        self._config = config
        self._extra = extra or {}
        self._root_logger: Logger | None = None  # Set for derived "view" loggers
        # Caller traces, keyed by thread ID
        self._pending_traces: dict[int, tuple[list[str], list[int]]] = {}

        self._original_makeRecord = self.makeRecord
        self.makeRecord = self._makeRecord  # type: ignore[assignment,method-assign]

    @property
    def config(self) -> LogConfig:
        return self._config

    @property
    def location(self) -> int:
        if self._root_logger is not None:
            return self._root_logger.location
        return self._config.location

    @property
    def disabled(self) -> bool:
        """Check if logging is disabled."""
        return self._logging_disabled

    @disabled.setter
    def disabled(self, value: bool) -> None:
        self._logging_disabled = value

    def isEnabledFor(self, level: int) -> bool:
        """Check if enabled, respecting ancestor loggers' levels."""
        if self._logging_disabled or not super().isEnabledFor(level):
            return False
        if self.parent and hasattr(self.parent, "_root_logger"):
            return self.parent.isEnabledFor(level)
        return True

    def setLevel(self, level: int | str) -> None:
        """Set level and clear this logger's cache."""
        super().setLevel(level)
        self._cache.clear()  # type: ignore[attr-defined]

    def _merge_extra(
        self, extra: dict[str, Any] | collections.OrderedDict | None
    ) -> dict[str, Any] | collections.OrderedDict:
        """Merge pre-populated extra fields with per-call extra fields."""
        merged: dict[str, Any] | collections.OrderedDict
        if isinstance(self._extra, collections.OrderedDict) or isinstance(
            extra, collections.OrderedDict
        ):
            merged = collections.OrderedDict(self._extra)
        else:
            merged = self._extra.copy()
        if extra:
            merged.update(extra)
        return merged

    def _makeRecord(
        self,
        name: str,
        level: int,
        fn: str,
        lno: int,
        msg: str,
        args: tuple,
        exc_info: Any | None,
        func: str | None = None,
        extra: dict[str, Any] | collections.OrderedDict | None = None,
        sinfo: str | None = None,
    ) -> logging.LogRecord:
        """Create log record, stashing merged extras for the formatter."""
        merged_extra = self._merge_extra(extra)
        record = self._original_makeRecord(
            name, level, fn, lno, msg, args, exc_info, func=func, sinfo=sinfo
        )
        setattr(record, "__procexit__extra", merged_extra)
        pending_trace = self._pending_traces.pop(threading.get_ident(), None)
        if pending_trace is not None:
            pathnames, linenos = pending_trace
            setattr(record, "__procexit__pathnames", pathnames)
            setattr(record, "__procexit__linenos", linenos)
        return record

    def trace(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """
        Log a TRACE level message.

        Args:
            msg: Log message
            *args: Message format arguments
            **kwargs: Additional keyword arguments including 'extra' for structured data
        """
        trace_level = LogConstants.CUSTOM_LEVELS["TRACE"]
        if self.isEnabledFor(trace_level):
            self._log(trace_level, msg, args, **kwargs)

    def _log(self, level: int, msg: str, args: tuple, **kwargs: Any) -> None:  # type: ignore[override]
        if self._logging_disabled:
            return
        try:
            super()._log(level, msg, args, **kwargs)
        except (TypeError, ValueError) as e:
            # Report format bugs on stderr rather than losing the record
            msg_preview = msg[:80] + "..." if len(msg) > 80 else msg
            sys.stderr.write(
                f"LOG_FORMAT_ERROR [{self.name}]: {e.__class__.__name__}: {e} "
                f"| msg={msg_preview!r} args={args!r}\n"
            )

    def callHandlers(self, record: logging.LogRecord) -> None:
        """Pass a record to the root logger's handlers for derived loggers."""
        if self._root_logger is not None:
            for handler in self._root_logger.handlers:
                if record.levelno >= handler.level:
                    handler.handle(record)
        else:
            super().callHandlers(record)

    def findCaller(
        self, stack_info: bool = False, stacklevel: int = 1
    ) -> tuple[str, int, str, str | None]:
        """
        Locate the caller, recording up to `location` frames for the formatter.
        """
        f: FrameType | None = logging.currentframe()
        while f is not None and f.f_code is not None:
            fname = f.f_code.co_filename
            if fname == logging.__file__ or fname == __file__:
                f = f.f_back
            else:
                break

        if f is None:
            return "(unknown file)", 0, "(unknown function)", None

        files, linenos = self._trace_callers(f)
        self._pending_traces[threading.get_ident()] = (files, linenos)
        return files[0], linenos[0], f.f_code.co_name, None

    def _trace_callers(self, f: FrameType) -> tuple[list[str], list[int]]:
        linenos = [f.f_lineno]
        files = [f.f_code.co_filename]

        cur: FrameType | None = f
        while len(files) < self.location:
            cur = cur.f_back if cur is not None else None
            if cur is None or cur.f_code is None:
                break
            name = cur.f_code.co_filename
            if "site-packages" in name or "/usr/lib" in name:
                continue
            linenos.append(cur.f_lineno)
            files.append(name)

        return files, linenos
