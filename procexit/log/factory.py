"""
Factory for creating and deriving loggers.

Root loggers own a console handler; derived loggers are lightweight "views"
with their own name and level that write through the root's handlers.
"""

import collections
import logging
import sys
from typing import Any, TextIO, cast

from .config import LogConfig
from .formatters import LogFormatter
from .logger import Logger


class LoggerFactory:
    """Factory for creating and configuring loggers."""

    @staticmethod
    def create_root(
        config: LogConfig, stream: TextIO | None = None, logger_class: type[Logger] = Logger
    ) -> Logger:
        """
        Create a root logger with the specified configuration.

        Example:
            >>> config = LogConfig.from_params(level="info")
            >>> lg = LoggerFactory.create_root(config)
            >>> lg.info("service started")
            [12:34:56,789] [I] service started                     [1234] [/]
        """
        return LoggerFactory.create("/", config, stream=stream, logger_class=logger_class)

    @staticmethod
    def create(
        name: str,
        config: LogConfig,
        stream: TextIO | None = None,
        logger_class: type[Logger] = Logger,
        extra: dict[str, Any] | collections.OrderedDict | None = None,
    ) -> Logger:
        """
        Create a logger with its own console handler.

        Args:
            name: Logger name (slash path)
            config: Logger configuration
            stream: Output stream (defaults to sys.stdout)
            logger_class: Logger class to use
            extra: Pre-populated extra fields to include in all log records

        Returns:
            Configured logger instance. A fresh instance replaces any logger
            previously registered under the same name.
        """
        lg = logger_class(name, config, extra)
        if config.level is not False:
            lg.setLevel(config.level)

        handler = logging.StreamHandler(stream if stream is not None else sys.stdout)
        if config.level is not False:
            handler.setLevel(config.level)
        handler.setFormatter(LogFormatter(config))
        lg.addHandler(handler)
        lg.propagate = False
        lg.parent = logging.root

        logging.root.manager.loggerDict[name] = lg
        lg.trace(
            "created logger",
            extra={"level": logging.getLevelName(lg.level), "location": config.location},
        )
        return lg

    @staticmethod
    def _check_existing_logger(name: str) -> Logger | None:
        existing = logging.root.manager.loggerDict.get(name)
        if isinstance(existing, Logger):
            return cast(Logger, existing)
        return None

    @staticmethod
    def derive(parent: Logger, tags: str | list[str]) -> Logger:
        """
        Derive a "view" logger that delegates to root's handlers.

        Examples:
            >>> LoggerFactory.derive(root, "lifecycle").name
            '/lifecycle'
            >>> LoggerFactory.derive(root, ["lifecycle", "drain"]).name
            '/lifecycle/drain'

        Args:
            parent: Parent logger instance
            tags: Single tag string OR list of tag strings to form hierarchy

        Returns:
            Derived logger sharing the root's handlers and inheriting its level
        """
        if isinstance(tags, str):
            tags = [tags]

        prefix = parent.name if parent.name == "/" else parent.name + "/"
        name = prefix + "/".join(tags)

        existing = LoggerFactory._check_existing_logger(name)
        if existing is not None and existing.parent is parent:
            return existing

        root = parent._root_logger if parent._root_logger else parent
        lg = parent.__class__(name, parent.config)
        lg.setLevel(logging.NOTSET)
        lg.disabled = parent.disabled
        lg._root_logger = root
        lg.parent = parent
        lg.propagate = False

        logging.root.manager.loggerDict[name] = lg
        lg.trace("derived logger", extra={"root": root.name})
        return lg
