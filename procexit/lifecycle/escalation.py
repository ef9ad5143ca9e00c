"""
Escalation of repeated termination requests.

The watcher installs handlers for the configured signals. Handlers only
enqueue the signal number; a daemon thread consumes the queue:

    IDLE --1st request--> ARMED   (graceful shutdown requested via registry)
    ARMED --2nd request--> FORCED (process terminated immediately, status 130)

The forced path does not wait for in-flight work.
"""

import enum
import os
import queue
import signal
import threading
from collections.abc import Callable, Iterable
from typing import Any

from ..exceptions import CoordinatorError
from ..log import Logger
from .registry import TriggerRegistry
from .resolver import EXIT_SIGNAL

DEFAULT_SIGNALS: tuple[signal.Signals, ...] = (signal.SIGINT, signal.SIGTERM)


class EscalationState(enum.Enum):
    IDLE = "idle"
    ARMED = "armed"
    FORCED = "forced"


class EscalationWatcher:
    """
    Listens for environment termination requests.

    Args:
        lg: Logger for escalation messages
        registry: Receives the first request as an external outcome
        signals: Signals to listen for (any mix counts towards escalation)
        force_exit: Called with 130 on the second request (default os._exit)
    """

    def __init__(
        self,
        lg: Logger,
        registry: TriggerRegistry,
        signals: Iterable[signal.Signals] = DEFAULT_SIGNALS,
        force_exit: Callable[[int], Any] = os._exit,
    ) -> None:
        self._lg = lg
        self._registry = registry
        self._signals = tuple(signals)
        self._force_exit = force_exit
        # SimpleQueue.put is reentrant, so it is safe from a signal handler
        self._queue: queue.SimpleQueue[int | None] = queue.SimpleQueue()
        self._thread: threading.Thread | None = None
        self._original_handlers: dict[signal.Signals, Any] = {}
        self._state = EscalationState.IDLE
        self._requests = 0

    @property
    def state(self) -> EscalationState:
        return self._state

    @property
    def request_count(self) -> int:
        return self._requests

    @property
    def signals(self) -> tuple[signal.Signals, ...]:
        return self._signals

    def start(self) -> None:
        """
        Install signal handlers and start the listening thread.

        Raises:
            CoordinatorError: If already started or not on the main thread
        """
        if self._thread is not None:
            raise CoordinatorError("escalation watcher already started")
        if threading.current_thread() is not threading.main_thread():
            raise CoordinatorError(
                "signal handlers can only be installed from the main thread",
                thread=threading.current_thread().name,
            )

        for sig in self._signals:
            self._original_handlers[sig] = signal.signal(sig, self._handle_signal)

        self._thread = threading.Thread(
            target=self._run, name="procexit-escalation", daemon=True
        )
        self._thread.start()
        self._lg.debug(
            "listening for termination requests",
            extra={"signals": [s.name for s in self._signals]},
        )

    def stop(self, timeout: float | None = 1.0) -> None:
        """Restore the previous signal handlers and stop the listening thread."""
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler if handler is not None else signal.SIG_DFL)
        self._original_handlers.clear()

        if self._thread is not None:
            self._queue.put(None)
            self._thread.join(timeout)
            self._thread = None

    def _handle_signal(self, signum: int, frame: Any) -> None:
        self._queue.put(signum)

    def notify(self, signum: int) -> None:
        """Queue a termination request as if the signal had been received."""
        self._queue.put(int(signum))

    def _run(self) -> None:
        while True:
            signum = self._queue.get()
            if signum is None:
                return
            self.handle_request(signum)

    def handle_request(self, signum: int) -> None:
        """Apply one termination request to the state machine."""
        self._requests += 1
        sig = signal.Signals(signum)

        if self._requests == 1:
            self._state = EscalationState.ARMED
            self._lg.info("termination requested, shutting down", extra={"signal": sig.name})
            self._registry.request_external(sig)
            return

        self._state = EscalationState.FORCED
        self._lg.debug(
            "repeated termination request, forcing exit",
            extra={"signal": sig.name, "requests": self._requests},
        )
        self._force_exit(EXIT_SIGNAL)
