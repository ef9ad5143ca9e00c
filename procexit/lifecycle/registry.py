"""
Exactly-once gate for shutdown requests.

Every request path (explicit exit, reported failure, environment signal)
funnels into a single commit. The first commit wins: its outcome is stored
and the cancellation signal is tripped. Later commits are silent no-ops and
their callers cannot tell they lost.
"""

import signal
import threading

from ..log import Logger
from .cancel import CancellationSignal
from .outcome import ExplicitCode, ExternalSignal, ReportedFailure, TriggerOutcome


class TriggerRegistry:
    """
    Write-once slot for the process's TriggerOutcome.

    The outcome is stored under the lock before the signal is tripped, so a
    waiter woken by the signal always reads the committed outcome.
    """

    def __init__(self, lg: Logger, cancel: CancellationSignal) -> None:
        self._lg = lg
        self._cancel = cancel
        self._lock = threading.Lock()
        self._outcome: TriggerOutcome | None = None

    def _commit(self, outcome: TriggerOutcome) -> None:
        with self._lock:
            if self._outcome is not None:
                won = False
            else:
                self._outcome = outcome
                won = True

        if not won:
            self._lg.trace("exit request ignored", extra={"outcome": type(outcome).__name__})
            return

        self._lg.debug("exit requested", extra={"outcome": type(outcome).__name__})
        self._cancel.trip()

    def request_exit(self, code: int) -> None:
        """Record an explicit exit status."""
        self._commit(ExplicitCode(code))

    def request_failure(self, message: str, trace: str) -> None:
        """Record an unrecoverable failure with its diagnostic trace."""
        self._commit(ReportedFailure(message, trace))

    def request_external(self, kind: int) -> None:
        """Record a termination request from the operating environment."""
        self._commit(ExternalSignal(signal.Signals(kind)))

    def recorded_outcome(self) -> TriggerOutcome | None:
        """The committed outcome, or None if nothing was requested."""
        with self._lock:
            return self._outcome
