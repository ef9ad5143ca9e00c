"""
One-way, broadcastable cancellation signal.

A CancellationSignal starts armed and is tripped at most once. Any number of
readers hold a DoneHandle and can block on it, poll it, attach a callback or
await it from asyncio, without being able to trip it themselves.
"""

import asyncio
import threading
from collections.abc import Callable

from ..log import Logger


class DoneHandle:
    """
    Read-only view of a CancellationSignal.

    Example:
        done = coordinator.done_handle()
        while not done.is_set():
            process_next_item()

        # or block until shutdown is requested
        done.wait()
    """

    def __init__(self, signal: "CancellationSignal") -> None:
        self._signal = signal

    def is_set(self) -> bool:
        """True once shutdown has been requested."""
        return self._signal.tripped

    def wait(self, timeout: float | None = None) -> bool:
        """
        Block until the signal trips.

        Args:
            timeout: Seconds to wait, or None to wait indefinitely

        Returns:
            True if tripped, False if the timeout elapsed first
        """
        return self._signal._event.wait(timeout)

    def add_callback(self, fn: Callable[[], None]) -> None:
        """Run fn once when the signal trips (immediately if already tripped)."""
        self._signal.add_callback(fn)

    async def wait_async(self) -> None:
        """Suspend the current task until the signal trips."""
        loop = asyncio.get_running_loop()
        future: asyncio.Future[None] = loop.create_future()

        def _wake() -> None:
            if not future.done():
                future.set_result(None)

        def _notify() -> None:
            loop.call_soon_threadsafe(_wake)

        self.add_callback(_notify)
        try:
            await future
        finally:
            # A cancelled waiter must not leave a callback bound to its loop
            self._signal.remove_callback(_notify)


class CancellationSignal:
    """
    Monotonic ARMED -> TRIPPED flag.

    trip() is safe to call concurrently from any thread; exactly one call
    performs the transition and runs the registered callbacks.
    """

    def __init__(self, lg: Logger) -> None:
        self._lg = lg
        self._lock = threading.Lock()
        self._event = threading.Event()
        self._callbacks: list[Callable[[], None]] = []

    @property
    def tripped(self) -> bool:
        return self._event.is_set()

    def trip(self) -> bool:
        """
        Transition to TRIPPED and wake all waiters.

        Returns:
            True for the call that performed the transition, False otherwise
        """
        with self._lock:
            if self._event.is_set():
                return False
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []

        self._lg.debug("cancellation signal tripped", extra={"callbacks": len(callbacks)})
        for fn in callbacks:
            self._run_callback(fn)
        return True

    def add_callback(self, fn: Callable[[], None]) -> None:
        """Register fn to run once on trip; runs it now if already tripped."""
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(fn)
                return
        self._run_callback(fn)

    def remove_callback(self, fn: Callable[[], None]) -> None:
        """Unregister fn if it has not run yet."""
        with self._lock:
            if fn in self._callbacks:
                self._callbacks.remove(fn)

    def _run_callback(self, fn: Callable[[], None]) -> None:
        try:
            fn()
        except Exception as e:
            self._lg.error("cancellation callback failed", extra={"exception": e})

    def done_handle(self) -> DoneHandle:
        """Return a wait handle; may be called any number of times."""
        return DoneHandle(self)
