"""
Join barrier for in-flight work.

Supervised code brackets each unit of work that must finish before the
process may exit with register()/release() (or the unit() context manager).
The finalizer calls join() to wait for the in-flight count to reach zero.

Releasing more than was registered raises DrainUnderflowError; the count is
never clamped.
"""

import contextlib
import threading
from collections.abc import Iterator

from ..exceptions import DrainUnderflowError
from ..log import Logger


class DrainBarrier:
    """
    Counter with a blocking join.

    join() returns once the count has been zero at some point after the call
    began: immediately if it is already zero, otherwise when a release()
    brings it to zero, even if new work registers before the joiner wakes.
    """

    def __init__(self, lg: Logger) -> None:
        self._lg = lg
        self._cond = threading.Condition()
        self._count = 0
        self._drained = 0  # bumped each time the count drops to zero

    @property
    def in_flight(self) -> int:
        with self._cond:
            return self._count

    def register(self, n: int = 1) -> None:
        """Add n units of in-flight work."""
        if n < 1:
            raise ValueError(f"register() needs a positive count, got {n}")
        with self._cond:
            self._count += n
            count = self._count
        self._lg.trace("registered", extra={"in_flight": count})

    def release(self) -> None:
        """
        Mark one unit of work as complete.

        Raises:
            DrainUnderflowError: If nothing is registered
        """
        with self._cond:
            if self._count == 0:
                raise DrainUnderflowError()
            self._count -= 1
            count = self._count
            if count == 0:
                self._drained += 1
                self._cond.notify_all()
        self._lg.trace("released", extra={"in_flight": count})

    @contextlib.contextmanager
    def unit(self) -> Iterator[None]:
        """Register for the duration of the block."""
        self.register()
        try:
            yield
        finally:
            self.release()

    def join(self, timeout: float | None = None) -> bool:
        """
        Block until the in-flight count reaches zero.

        Args:
            timeout: Seconds to wait, or None to wait indefinitely

        Returns:
            True once drained, False if the timeout elapsed first
        """
        with self._cond:
            if self._count == 0:
                return True
            generation = self._drained
            self._lg.debug("waiting for in-flight work", extra={"in_flight": self._count})
            return self._cond.wait_for(lambda: self._drained != generation, timeout)
