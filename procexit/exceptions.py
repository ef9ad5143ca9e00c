"""
Exception hierarchy for procexit.

All errors raised by the coordinator and its configuration layer derive from
ProcExitError, so callers can catch every framework error with one clause.
"""

from typing import Any


class ProcExitError(Exception):
    """
    Base exception for all procexit errors.

    Example:
        try:
            coordinator = Coordinator.from_config(lg, config)
        except ProcExitError as e:
            lg.error("cannot build coordinator", extra={"exception": e})
    """

    def __init__(self, message: str, **context: Any) -> None:
        """
        Initialize the exception with a message and optional context.

        Args:
            message: Human-readable error message
            **context: Additional context information (stored in self.context)
        """
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        """String representation with context if available."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


class ConfigError(ProcExitError):
    """
    Configuration-related errors.

    Examples:
        - Config file not found or too large
        - Invalid YAML syntax
        - Unknown signal name in lifecycle.signals
    """

    pass


class CoordinatorError(ProcExitError):
    """
    Misuse of the shutdown coordinator.

    Examples:
        - start() called twice
        - start() called outside the main thread
    """

    pass


class DrainUnderflowError(CoordinatorError):
    """
    Raised when release() is called without a matching register().

    This is a contract violation in supervised code, not a runtime condition,
    and is not meant to be caught.
    """

    def __init__(self) -> None:
        super().__init__("drain barrier released more times than registered")


class ApplicationExiting(ProcExitError):
    """
    Returned by the coordinator's request_* operations.

    Callers raise it to unwind their call chain uniformly with other errors.
    It carries no diagnostic; the outcome is already recorded centrally.
    """

    def __init__(self) -> None:
        super().__init__("the application is exiting")
