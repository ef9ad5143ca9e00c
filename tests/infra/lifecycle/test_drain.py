"""
Tests for lifecycle/drain.py.

Tests the drain barrier including:
- Register/release counting and underflow detection
- join() on an empty barrier and after all work is released
- join() waking on a transient zero
"""

import threading
import time

import pytest

from procexit.exceptions import CoordinatorError, DrainUnderflowError
from procexit.lifecycle import DrainBarrier


@pytest.fixture
def barrier(lg):
    return DrainBarrier(lg)


@pytest.mark.unit
class TestCounting:
    """Test register/release bookkeeping."""

    def test_register_and_release(self, barrier):
        barrier.register()
        barrier.register(2)
        assert barrier.in_flight == 3

        barrier.release()
        assert barrier.in_flight == 2

    def test_register_rejects_non_positive(self, barrier):
        with pytest.raises(ValueError):
            barrier.register(0)

    def test_release_without_register_raises(self, barrier):
        with pytest.raises(DrainUnderflowError):
            barrier.release()

        assert barrier.in_flight == 0

    def test_underflow_is_a_coordinator_error(self, barrier):
        barrier.register()
        barrier.release()

        with pytest.raises(CoordinatorError):
            barrier.release()

    def test_unit_releases_on_exception(self, barrier):
        with pytest.raises(RuntimeError):
            with barrier.unit():
                assert barrier.in_flight == 1
                raise RuntimeError("work failed")

        assert barrier.in_flight == 0


@pytest.mark.unit
class TestJoin:
    """Test join() semantics."""

    def test_join_without_work_returns_immediately(self, barrier):
        assert barrier.join(timeout=0) is True

    def test_join_times_out_with_work_in_flight(self, barrier):
        barrier.register()

        assert barrier.join(timeout=0.01) is False

    def test_join_after_balanced_calls(self, barrier):
        for _ in range(5):
            barrier.register()
        for _ in range(5):
            barrier.release()

        assert barrier.join(timeout=1) is True

    def test_join_waits_for_other_threads(self, barrier):
        finished = []

        def work(n):
            with barrier.unit():
                time.sleep(0.02 * n)
                finished.append(n)

        for n in range(3):
            barrier.register()
            threading.Thread(target=lambda n=n: (work(n), barrier.release())).start()

        assert barrier.join(timeout=5) is True
        assert sorted(finished) == [0, 1, 2]

    def test_join_wakes_on_transient_zero(self, barrier):
        """New work registered right after the drop to zero does not block join."""
        barrier.register()
        result = []

        joiner = threading.Thread(target=lambda: result.append(barrier.join(timeout=5)))
        joiner.start()
        time.sleep(0.1)

        barrier.release()
        barrier.register()
        joiner.join(timeout=5)

        assert result == [True]
        assert barrier.in_flight == 1
