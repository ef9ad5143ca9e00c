"""
Process-wide shutdown coordinator.

A Coordinator is created once at process start and handed to whatever needs
it: the top-level routine, supervised workers, servers waiting on the done
handle. It ties together the cancellation signal, the trigger registry, the
drain barrier, the escalation watcher and the exit resolver.

Example:
    def main() -> None:
        lg = LoggerFactory.create_root(LogConfig.from_params("info"))
        coordinator = Coordinator(lg).start()

        with coordinator.supervise():
            coordinator.spawn(serve, coordinator)
            if not ready():
                raise coordinator.request_exit(1)
            coordinator.done_handle().wait()

Shutdown is requested by the first of: request_exit(), request_failure(),
report_exception(), or a SIGINT/SIGTERM. A second signal terminates
immediately with status 130.
"""

import contextlib
import os
import signal
import sys
import threading
import time
import traceback
from collections.abc import Callable, Iterable, Iterator
from typing import Any, TextIO

from ..exceptions import ApplicationExiting
from ..log import Logger, LoggerFactory
from .cancel import CancellationSignal, DoneHandle
from .config import LifecycleConfig
from .drain import DrainBarrier
from .escalation import DEFAULT_SIGNALS, EscalationWatcher
from .outcome import TriggerOutcome
from .registry import TriggerRegistry
from .resolver import ExitResolver, resolve_status


def _system_exit_status(code: Any) -> int:
    """Exit status the interpreter would use for SystemExit(code)."""
    if code is None:
        return 0
    if isinstance(code, int):
        return code
    print(code, file=sys.stderr)
    return 1


class Coordinator:
    """
    Coordinates graceful shutdown for a single process.

    Args:
        lg: Parent logger; the coordinator logs under <lg>/lifecycle
        signals: Signals treated as termination requests
        exit_func: Terminates the process in finalize() (default sys.exit)
        force_exit: Terminates on escalation (default os._exit)
        stream: Destination for failure diagnostics (default sys.stderr)
    """

    def __init__(
        self,
        lg: Logger,
        signals: Iterable[signal.Signals] = DEFAULT_SIGNALS,
        exit_func: Callable[[int], Any] = sys.exit,
        force_exit: Callable[[int], Any] = os._exit,
        stream: TextIO | None = None,
    ) -> None:
        self._lg = LoggerFactory.derive(lg, "lifecycle")
        self._start_time = time.monotonic()

        self._cancel = CancellationSignal(LoggerFactory.derive(self._lg, "cancel"))
        self._registry = TriggerRegistry(
            LoggerFactory.derive(self._lg, "registry"), self._cancel
        )
        self._drain = DrainBarrier(LoggerFactory.derive(self._lg, "drain"))
        self._watcher = EscalationWatcher(
            LoggerFactory.derive(self._lg, "escalation"),
            self._registry,
            signals=signals,
            force_exit=force_exit,
        )
        self._resolver = ExitResolver(self._lg, exit_func=exit_func, stream=stream)

    @classmethod
    def from_config(cls, lg: Logger, config: Any, **kwargs: Any) -> "Coordinator":
        """Build a coordinator from the lifecycle section of a Config."""
        lifecycle = LifecycleConfig.from_config(config)
        return cls(lg, signals=lifecycle.signals, **kwargs)

    @property
    def lg(self) -> Logger:
        return self._lg

    @property
    def watcher(self) -> EscalationWatcher:
        return self._watcher

    def start(self) -> "Coordinator":
        """Start listening for termination signals. Must run on the main thread."""
        self._watcher.start()
        return self

    def stop(self) -> None:
        """Stop listening and restore the previous signal handlers."""
        self._watcher.stop()

    # Cancellation

    @property
    def cancelled(self) -> bool:
        """True once shutdown has been requested or finalize() has begun."""
        return self._cancel.tripped

    def done_handle(self) -> DoneHandle:
        """Handle that becomes set when shutdown is requested."""
        return self._cancel.done_handle()

    # Requests

    def request_exit(self, code: int) -> ApplicationExiting:
        """
        Request shutdown with an explicit exit status.

        Returns:
            An ApplicationExiting error for the caller to raise
        """
        self._registry.request_exit(code)
        return ApplicationExiting()

    def request_failure(self, message: str, trace: str | None = None) -> ApplicationExiting:
        """
        Report an unrecoverable error; the process will exit with status 2.

        Args:
            message: Human-readable description
            trace: Diagnostic trace (defaults to the caller's stack)

        Returns:
            An ApplicationExiting error for the caller to raise
        """
        if trace is None:
            trace = "".join(traceback.format_stack()[:-1])
        self._registry.request_failure(message, trace)
        return ApplicationExiting()

    def report_exception(self, exc: BaseException) -> ApplicationExiting:
        """Report an exception as an unrecoverable failure, with its traceback."""
        message = str(exc) or exc.__class__.__name__
        trace = "".join(traceback.format_exception(exc))
        self._registry.request_failure(message, trace)
        return ApplicationExiting()

    def request_external(self, kind: int) -> ApplicationExiting:
        """Record an environment termination request (as the first signal would)."""
        self._registry.request_external(kind)
        return ApplicationExiting()

    def recorded_outcome(self) -> TriggerOutcome | None:
        return self._registry.recorded_outcome()

    # Drain

    @property
    def in_flight(self) -> int:
        return self._drain.in_flight

    def register(self, n: int = 1) -> None:
        """Mark n units of work in flight; pair each with release()."""
        self._drain.register(n)

    def release(self) -> None:
        """Mark one unit of work complete. Raises DrainUnderflowError if unpaired."""
        self._drain.release()

    def work(self) -> contextlib.AbstractContextManager[None]:
        """Context manager keeping the enclosed block in flight."""
        return self._drain.unit()

    def spawn(
        self, target: Callable[..., Any], *args: Any, name: str | None = None, **kwargs: Any
    ) -> threading.Thread:
        """
        Start a supervised thread that finalize() waits for.

        An uncaught exception in target is reported as a failure.
        """
        self._drain.register()

        def _run() -> None:
            try:
                target(*args, **kwargs)
            except ApplicationExiting:
                pass
            except Exception as e:
                self._lg.error(
                    "supervised thread failed",
                    extra={"thread": threading.current_thread().name, "exception": e},
                )
                self.report_exception(e)
            finally:
                self._drain.release()

        thread = threading.Thread(target=_run, name=name, daemon=True)
        try:
            thread.start()
        except BaseException:
            self._drain.release()
            raise
        return thread

    # Finalization

    def finalize(self) -> None:
        """
        Wait for in-flight work, then exit with the recorded outcome's status.

        Must be called exactly once, from the thread that owns the process
        (normally via supervise()). Returns normally only when no outcome was
        recorded, leaving the process to end on its own.
        """
        self._lg.debug("finalizing...", extra={"in_flight": self._drain.in_flight})
        self._cancel.trip()
        self._drain.join()

        outcome = self._registry.recorded_outcome()
        self._lg.debug(
            "done",
            extra={
                "after": time.monotonic() - self._start_time,
                "status": resolve_status(outcome),
            },
        )
        self._resolver.resolve(outcome)

    @contextlib.contextmanager
    def supervise(self) -> Iterator["Coordinator"]:
        """
        Run the enclosed block as the process's top-level routine.

        Whatever way the block ends, the outcome is recorded and finalize()
        runs: ApplicationExiting is absorbed, SystemExit becomes an explicit
        exit, KeyboardInterrupt an external SIGINT, and any other exception a
        reported failure.
        """
        try:
            yield self
        except ApplicationExiting:
            pass
        except SystemExit as e:
            self.request_exit(_system_exit_status(e.code))
        except KeyboardInterrupt:
            self.request_external(signal.SIGINT)
        except Exception as e:
            self._lg.error("unhandled error", extra={"exception": e})
            self.report_exception(e)
        self.finalize()
