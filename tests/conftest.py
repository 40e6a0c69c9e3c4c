from types import SimpleNamespace
from typing import Any, List, Optional
from unittest.mock import Mock

import pytest
from azure.core.exceptions import HttpResponseError, ResourceNotFoundError

from arm_provider.clients import ProviderClients
from arm_provider.provider import Provider

SUBSCRIPTION_ID = "00000000-0000-0000-0000-000000000000"

ACCOUNT_ID = (
    f"/subscriptions/{SUBSCRIPTION_ID}/resourceGroups/rg1"
    "/providers/Microsoft.DocumentDB/databaseAccounts/acct1"
)
DATABASE_ID = f"{ACCOUNT_ID}/sqlDatabases/db1"
CONTAINER_ID = f"{DATABASE_ID}/containers/c1"
SERVER_ID = (
    f"/subscriptions/{SUBSCRIPTION_ID}/resourceGroups/rg1"
    "/providers/Microsoft.Sql/servers/sql1"
)
CLUSTER_ID = (
    f"/subscriptions/{SUBSCRIPTION_ID}/resourceGroups/rg1"
    "/providers/Microsoft.HDInsight/clusters/hadoop1"
)


def not_found(message: str = "Not Found") -> ResourceNotFoundError:
    error = ResourceNotFoundError(message=message)
    error.status_code = 404
    return error


def http_error(status_code: int, message: str = "Request failed") -> HttpResponseError:
    error = HttpResponseError(message=message)
    error.status_code = status_code
    return error


class FakePoller:
    """Stands in for ``LROPoller``: done after ``polls_until_done`` checks."""

    def __init__(
        self,
        result: Any = None,
        status: str = "Succeeded",
        polls_until_done: int = 1,
        error: Optional[Exception] = None,
    ):
        self._result = result
        self._status = status
        self._polls_until_done = polls_until_done
        self._error = error
        self.done_calls = 0

    def done(self) -> bool:
        self.done_calls += 1
        return self.done_calls >= self._polls_until_done

    def status(self) -> str:
        return self._status

    def result(self) -> Any:
        if self._error is not None:
            raise self._error
        return self._result


class FakeClock:
    """Deterministic clock; ``sleep`` advances time instantly."""

    def __init__(self, start: float = 0.0):
        self.now = start
        self.sleeps: List[float] = []

    def monotonic(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def clients() -> ProviderClients:
    """Provider clients backed by mocks; no credential, no network."""
    return ProviderClients(
        SUBSCRIPTION_ID,
        cosmos=Mock(name="cosmos"),
        sql=Mock(name="sql"),
        hdinsight=Mock(name="hdinsight"),
    )


@pytest.fixture
def provider(clients: ProviderClients, clock: FakeClock) -> Provider:
    return Provider(clients, poll_interval=1, clock=clock)


def provisioned_account() -> SimpleNamespace:
    return SimpleNamespace(capabilities=[SimpleNamespace(name="EnableMongo")])


def serverless_account() -> SimpleNamespace:
    return SimpleNamespace(capabilities=[SimpleNamespace(name="EnableServerless")])
