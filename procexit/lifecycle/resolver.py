"""
Mapping of the recorded outcome to a process exit status.
"""

import sys
from collections.abc import Callable
from typing import Any, TextIO

from ..log import Logger
from .outcome import ExplicitCode, ExternalSignal, ReportedFailure, TriggerOutcome

# Exit statuses are part of the observable contract
EXIT_FAILURE = 2
EXIT_SIGNAL = 130


def resolve_status(outcome: TriggerOutcome | None) -> int | None:
    """
    Exit status for an outcome.

    Returns:
        The explicit code, 2 for a reported failure, 130 for an external
        signal, or None when nothing was recorded
    """
    if outcome is None:
        return None
    if isinstance(outcome, ExplicitCode):
        return outcome.code
    if isinstance(outcome, ReportedFailure):
        return EXIT_FAILURE
    if isinstance(outcome, ExternalSignal):
        return EXIT_SIGNAL
    raise TypeError(f"unknown trigger outcome: {outcome!r}")


class ExitResolver:
    """
    Terminates the process according to the recorded outcome.

    Args:
        lg: Logger for lifecycle messages
        exit_func: Called with the final status (default sys.exit)
        stream: Where failure diagnostics are written (default sys.stderr)
    """

    def __init__(
        self,
        lg: Logger,
        exit_func: Callable[[int], Any] = sys.exit,
        stream: TextIO | None = None,
    ) -> None:
        self._lg = lg
        self._exit_func = exit_func
        self._stream = stream

    def resolve(self, outcome: TriggerOutcome | None) -> None:
        """
        Terminate with the outcome's status.

        Returns without terminating when outcome is None: the caller's routine
        then completes and the process exits on its own.
        """
        status = resolve_status(outcome)
        if status is None:
            self._lg.debug("no exit outcome recorded, returning to caller")
            return

        if isinstance(outcome, ReportedFailure):
            stream = self._stream if self._stream is not None else sys.stderr
            stream.write(outcome.diagnostic())
            stream.flush()

        self._lg.debug(
            "exiting", extra={"outcome": type(outcome).__name__, "status": status}
        )
        self._exit_func(status)
