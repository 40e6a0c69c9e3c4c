"""
Tests for the long-running operation waiter.
"""

import threading

import pytest
from conftest import FakeClock, FakePoller, http_error

from arm_provider.exceptions import (
    OperationCancelledError,
    OperationFailedError,
    OperationTimeoutError,
)
from arm_provider.polling import OperationWaiter, PollState, is_poller


def make_waiter(clock: FakeClock, timeout: float = 60, interval: float = 10, **kwargs):
    return OperationWaiter(
        timeout=timeout,
        interval=interval,
        clock=clock,
        resource_id="/subscriptions/x/resourceGroups/rg1",
        operation="create",
        **kwargs,
    )


class TestOperationWaiter:
    def test_succeeds_and_returns_result(self, clock):
        waiter = make_waiter(clock)
        result = waiter.wait(FakePoller(result="done", polls_until_done=3))
        assert result == "done"
        assert waiter.state is PollState.SUCCEEDED
        assert waiter.polls == 3
        assert clock.sleeps == [10, 10]

    def test_synchronous_result_passes_through(self, clock):
        waiter = make_waiter(clock)
        value = {"id": "x"}
        assert waiter.wait(value) is value
        assert waiter.state is PollState.SUCCEEDED
        assert clock.sleeps == []

    def test_failed_status(self, clock):
        waiter = make_waiter(clock)
        with pytest.raises(OperationFailedError) as excinfo:
            waiter.wait(FakePoller(status="Failed"))
        assert waiter.state is PollState.FAILED
        assert excinfo.value.operation == "create"
        assert excinfo.value.resource_id == "/subscriptions/x/resourceGroups/rg1"
        assert excinfo.value.status == "Failed"

    def test_error_from_result_keeps_cause(self, clock):
        error = http_error(409, "Conflict")
        waiter = make_waiter(clock)
        with pytest.raises(OperationFailedError) as excinfo:
            waiter.wait(FakePoller(error=error))
        assert excinfo.value.cause is error
        assert waiter.state is PollState.FAILED

    def test_timeout_bounds_waiting(self, clock):
        waiter = make_waiter(clock, timeout=25, interval=10)
        with pytest.raises(OperationTimeoutError):
            waiter.wait(FakePoller(polls_until_done=1000))
        assert waiter.state is PollState.TIMED_OUT
        assert clock.now == 25
        assert clock.sleeps == [10, 10, 5]

    def test_cancellation(self, clock):
        cancel = threading.Event()
        cancel.set()
        waiter = make_waiter(clock, cancel_event=cancel)
        poller = FakePoller(polls_until_done=1000)
        with pytest.raises(OperationCancelledError):
            waiter.wait(poller)
        assert waiter.state is PollState.CANCELLED
        assert poller.done_calls == 0

    def test_cancellation_is_a_timeout_not_a_success(self, clock):
        cancel = threading.Event()
        cancel.set()
        with pytest.raises(OperationTimeoutError):
            make_waiter(clock, cancel_event=cancel).wait(FakePoller())

    def test_cancellation_observed_between_polls(self, clock):
        cancel = threading.Event()

        class CancellingClock(FakeClock):
            def sleep(self, seconds):
                super().sleep(seconds)
                cancel.set()

        waiter = make_waiter(CancellingClock(), cancel_event=cancel)
        with pytest.raises(OperationCancelledError):
            waiter.wait(FakePoller(polls_until_done=1000))
        assert waiter.polls == 1

    def test_waiter_is_single_use(self, clock):
        waiter = make_waiter(clock)
        waiter.wait(FakePoller())
        with pytest.raises(RuntimeError):
            waiter.wait(FakePoller())

    @pytest.mark.parametrize("kwargs", [{"timeout": 0}, {"interval": 0}])
    def test_rejects_non_positive_settings(self, clock, kwargs):
        params = {"timeout": 60, "interval": 10}
        params.update(kwargs)
        with pytest.raises(ValueError):
            OperationWaiter(clock=clock, **params)


def test_is_poller():
    assert is_poller(FakePoller())
    assert not is_poller(None)
    assert not is_poller({"done": True})
