"""Property-based tests for the lifecycle primitives."""

import signal
import threading

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from procexit.exceptions import DrainUnderflowError
from procexit.lifecycle import (
    CancellationSignal,
    DrainBarrier,
    ExplicitCode,
    ExternalSignal,
    ReportedFailure,
    TriggerRegistry,
    resolve_status,
)
from procexit.log import LogConfig, LoggerFactory


def _quiet_logger():
    return LoggerFactory.create_root(LogConfig.from_params(False))


exit_request = st.one_of(
    st.builds(lambda c: ("exit", c), st.integers(min_value=0, max_value=255)),
    st.builds(lambda m: ("failure", m), st.text(min_size=1, max_size=20)),
    st.sampled_from([("external", 2), ("external", 15)]),
)


def _submit(registry: TriggerRegistry, request: tuple) -> None:
    kind, value = request
    if kind == "exit":
        registry.request_exit(value)
    elif kind == "failure":
        registry.request_failure(value, "trace\n")
    else:
        registry.request_external(value)


def _expected(request: tuple):
    kind, value = request
    if kind == "exit":
        return ExplicitCode(value)
    if kind == "failure":
        return ReportedFailure(value, "trace\n")
    return ExternalSignal(signal.Signals(value))


@pytest.mark.property
@pytest.mark.unit
class TestRegistryProperties:
    @given(requests=st.lists(exit_request, min_size=1, max_size=20))
    def test_first_request_wins_sequentially(self, requests):
        """Whatever follows, the first request is the recorded outcome."""
        lg = _quiet_logger()
        cancel = CancellationSignal(lg)
        registry = TriggerRegistry(lg, cancel)

        for request in requests:
            _submit(registry, request)

        assert registry.recorded_outcome() == _expected(requests[0])
        assert cancel.tripped is True

    @settings(max_examples=25, deadline=None)
    @given(requests=st.lists(exit_request, min_size=2, max_size=8))
    def test_exactly_one_concurrent_request_wins(self, requests):
        """Concurrent requests record exactly one of the submitted outcomes."""
        lg = _quiet_logger()
        cancel = CancellationSignal(lg)
        registry = TriggerRegistry(lg, cancel)
        trips = []
        cancel.add_callback(lambda: trips.append(1))
        barrier = threading.Barrier(len(requests))

        def submit(request):
            barrier.wait()
            _submit(registry, request)

        threads = [threading.Thread(target=submit, args=(r,)) for r in requests]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert registry.recorded_outcome() in [_expected(r) for r in requests]
        assert trips == [1]

    @given(request=exit_request)
    def test_status_depends_only_on_outcome_kind(self, request):
        kind, value = request
        status = resolve_status(_expected(request))

        if kind == "exit":
            assert status == value
        elif kind == "failure":
            assert status == 2
        else:
            assert status == 130


@pytest.mark.property
@pytest.mark.unit
class TestDrainProperties:
    @given(batches=st.lists(st.integers(min_value=1, max_value=5), max_size=10))
    def test_balanced_register_release_drains(self, batches):
        """Any balanced register/release sequence leaves the barrier joinable."""
        drain = DrainBarrier(_quiet_logger())

        for n in batches:
            drain.register(n)
        total = sum(batches)
        assert drain.in_flight == total

        for _ in range(total):
            drain.release()

        assert drain.in_flight == 0
        assert drain.join(timeout=0) is True

    @given(extra=st.integers(min_value=1, max_value=5))
    def test_unbalanced_release_never_goes_negative(self, extra):
        drain = DrainBarrier(_quiet_logger())
        drain.register(extra)
        for _ in range(extra):
            drain.release()

        with pytest.raises(DrainUnderflowError):
            drain.release()
        assert drain.in_flight == 0
