"""
Long-running operation polling.

Mutating Resource Manager calls return an ``LROPoller``. ``OperationWaiter``
drives one to a terminal state as an explicit state machine:

    PENDING -> SUCCEEDED | FAILED | TIMED_OUT | CANCELLED

Time comes from an injected ``Clock`` and cancellation from a
``threading.Event``, so the timeout and cancel paths can be exercised without
real delays. A waiter that gives up never reports success: the remote
operation may still be running.
"""

import threading
import time
from enum import Enum
from typing import Any, Optional, Protocol

import structlog  # type: ignore[import-untyped]
from azure.core.exceptions import HttpResponseError

from .exceptions import (
    OperationCancelledError,
    OperationFailedError,
    OperationTimeoutError,
)
from .timeout_config import Timeouts

logger = structlog.get_logger(__name__)

FAILED_STATUSES = frozenset({"failed", "canceled", "cancelled"})


class PollState(Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"

    @property
    def terminal(self) -> bool:
        return self is not PollState.PENDING


class Clock(Protocol):
    def monotonic(self) -> float: ...

    def sleep(self, seconds: float) -> None: ...


class SystemClock:
    """Wall-clock implementation of ``Clock``."""

    def monotonic(self) -> float:
        return time.monotonic()

    def sleep(self, seconds: float) -> None:
        time.sleep(seconds)


def is_poller(value: Any) -> bool:
    """True for objects shaped like an ``LROPoller``."""
    return callable(getattr(value, "done", None)) and callable(
        getattr(value, "result", None)
    )


class OperationWaiter:
    """
    Waits for one long-running operation.

    Example:
        >>> waiter = OperationWaiter(timeout=1800, resource_id=id_, operation="create")
        >>> result = waiter.wait(client.sql_resources.begin_create_update_sql_database(...))

    Cancellation is checked once per poll interval.
    """

    def __init__(
        self,
        timeout: float,
        interval: Optional[float] = None,
        clock: Optional[Clock] = None,
        cancel_event: Optional[threading.Event] = None,
        resource_id: Optional[str] = None,
        operation: Optional[str] = None,
    ):
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        self.timeout = timeout
        self.interval = float(interval if interval is not None else Timeouts.POLL_INTERVAL)
        if self.interval <= 0:
            raise ValueError("interval must be positive")
        self.clock: Clock = clock or SystemClock()
        self.cancel_event = cancel_event
        self.resource_id = resource_id
        self.operation = operation
        self.state = PollState.PENDING
        self.polls = 0
        self._logger = logger.bind(resource_id=resource_id, operation=operation)

    def _fail(self, message: str, status: Optional[str], cause: Optional[Exception]):
        self.state = PollState.FAILED
        self._logger.warning("Operation failed", status=status, error=str(cause))
        return OperationFailedError(
            message,
            resource_id=self.resource_id,
            operation=self.operation,
            status=status,
            cause=cause,
        )

    def _status(self, poller: Any) -> Optional[str]:
        status = getattr(poller, "status", None)
        return str(status()) if callable(status) else None

    def wait(self, poller: Any) -> Any:
        """Block until ``poller`` reaches a terminal state and return its result.

        Values that are not pollers are synchronous results and are returned
        unchanged.

        Raises:
            OperationFailedError: The operation finished unsuccessfully.
            OperationTimeoutError: ``timeout`` elapsed first.
            OperationCancelledError: ``cancel_event`` was set first.
        """
        if self.state.terminal:
            raise RuntimeError(f"waiter already finished in state {self.state.value}")

        if not is_poller(poller):
            self.state = PollState.SUCCEEDED
            return poller

        deadline = self.clock.monotonic() + self.timeout
        self._logger.debug("Waiting for operation", timeout=self.timeout)

        while True:
            if self.cancel_event is not None and self.cancel_event.is_set():
                self.state = PollState.CANCELLED
                self._logger.warning("Stopped waiting: cancelled", polls=self.polls)
                raise OperationCancelledError(
                    f"Cancelled while waiting for {self.operation} of {self.resource_id}",
                    resource_id=self.resource_id,
                    operation=self.operation,
                    timeout_value=self.timeout,
                )

            self.polls += 1
            if poller.done():
                status = self._status(poller)
                if status is not None and status.lower() in FAILED_STATUSES:
                    raise self._fail(
                        f"{self.operation} of {self.resource_id} finished with status {status}",
                        status,
                        None,
                    )
                try:
                    result = poller.result()
                except HttpResponseError as e:
                    raise self._fail(
                        f"{self.operation} of {self.resource_id} failed: {e.message}",
                        status,
                        e,
                    ) from e
                self.state = PollState.SUCCEEDED
                self._logger.debug("Operation succeeded", polls=self.polls)
                return result

            remaining = deadline - self.clock.monotonic()
            if remaining <= 0:
                self.state = PollState.TIMED_OUT
                self._logger.warning("Stopped waiting: timed out", polls=self.polls)
                raise OperationTimeoutError(
                    f"Timed out after {self.timeout:g}s waiting for {self.operation} "
                    f"of {self.resource_id}",
                    resource_id=self.resource_id,
                    operation=self.operation,
                    timeout_value=self.timeout,
                )
            self.clock.sleep(min(self.interval, remaining))
