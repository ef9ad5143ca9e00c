"""
Tests for lifecycle/cancel.py.

Tests cancellation signal functionality including:
- Single ARMED -> TRIPPED transition under concurrency
- Done handle waiting (blocking, timeout, asyncio)
- Trip callbacks
"""

import asyncio
import threading

import pytest

from procexit.lifecycle import CancellationSignal


@pytest.fixture
def cancel(lg):
    return CancellationSignal(lg)


@pytest.mark.unit
class TestTrip:
    """Test the one-way transition."""

    def test_starts_armed(self, cancel):
        assert cancel.tripped is False
        assert cancel.done_handle().is_set() is False

    def test_first_trip_transitions(self, cancel):
        assert cancel.trip() is True
        assert cancel.tripped is True

    def test_repeated_trip_is_noop(self, cancel):
        cancel.trip()

        assert cancel.trip() is False
        assert cancel.trip() is False
        assert cancel.tripped is True

    def test_concurrent_trip_has_single_winner(self, cancel):
        """Exactly one of many racing trip() calls performs the transition."""
        barrier = threading.Barrier(16)
        results = []
        lock = threading.Lock()

        def racer():
            barrier.wait()
            won = cancel.trip()
            with lock:
                results.append(won)

        threads = [threading.Thread(target=racer) for _ in range(16)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=5)

        assert results.count(True) == 1
        assert len(results) == 16


@pytest.mark.unit
class TestDoneHandle:
    """Test waiting on the done handle."""

    def test_wait_times_out_while_armed(self, cancel):
        assert cancel.done_handle().wait(timeout=0.01) is False

    def test_wait_returns_immediately_after_trip(self, cancel):
        cancel.trip()

        for _ in range(3):
            assert cancel.done_handle().wait() is True

    def test_all_waiters_wake(self, cancel):
        handle = cancel.done_handle()
        woke = []
        lock = threading.Lock()

        def waiter():
            if handle.wait(timeout=5):
                with lock:
                    woke.append(1)

        threads = [threading.Thread(target=waiter) for _ in range(8)]
        for t in threads:
            t.start()
        cancel.trip()
        for t in threads:
            t.join(timeout=5)

        assert len(woke) == 8

    def test_wait_async(self, cancel):
        """An asyncio task wakes when another thread trips the signal."""

        async def main():
            timer = threading.Timer(0.05, cancel.trip)
            timer.start()
            await asyncio.wait_for(cancel.done_handle().wait_async(), timeout=5)

        asyncio.run(main())
        assert cancel.tripped is True

    def test_wait_async_after_trip(self, cancel):
        cancel.trip()

        async def main():
            await asyncio.wait_for(cancel.done_handle().wait_async(), timeout=1)

        asyncio.run(main())


@pytest.mark.unit
class TestCallbacks:
    """Test trip callbacks."""

    def test_callback_runs_once_on_trip(self, cancel):
        calls = []
        cancel.done_handle().add_callback(lambda: calls.append("a"))

        cancel.trip()
        cancel.trip()

        assert calls == ["a"]

    def test_callback_added_after_trip_runs_immediately(self, cancel):
        cancel.trip()
        calls = []

        cancel.add_callback(lambda: calls.append("late"))

        assert calls == ["late"]

    def test_failing_callback_does_not_block_others(self, cancel, log_stream):
        calls = []

        def bad():
            raise RuntimeError("callback bug")

        cancel.add_callback(bad)
        cancel.add_callback(lambda: calls.append("ok"))
        cancel.trip()

        assert calls == ["ok"]
        assert "cancellation callback failed" in log_stream.getvalue()
        assert "RuntimeError" in log_stream.getvalue()

    def test_cancelled_async_waiter_unregisters(self, cancel, log_stream):
        """Timed-out asyncio waiters leave no callbacks behind."""

        async def main():
            for _ in range(20):
                with pytest.raises(asyncio.TimeoutError):
                    await asyncio.wait_for(cancel.done_handle().wait_async(), timeout=0.001)

        asyncio.run(main())

        assert cancel._callbacks == []
        cancel.trip()
        assert "cancellation callback failed" not in log_stream.getvalue()

    def test_remove_callback(self, cancel):
        calls = []

        def fn():
            calls.append(1)

        cancel.add_callback(fn)
        cancel.remove_callback(fn)
        cancel.remove_callback(fn)
        cancel.trip()

        assert calls == []
