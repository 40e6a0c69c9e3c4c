"""
Tests for azurerm_cosmosdb_sql_role_assignment.
"""

import threading
import time
import uuid
from types import SimpleNamespace
from unittest.mock import patch

import pytest
from conftest import ACCOUNT_ID, FakePoller, not_found

from arm_provider import locks
from arm_provider.exceptions import OperationTimeoutError, ResourceAlreadyExistsError
from arm_provider.handlers.cosmos.sql_role_assignment import SqlRoleAssignmentHandler
from arm_provider.resource_data import ResourceData
from arm_provider.timeout_config import ResourceTimeouts

TYPE = "azurerm_cosmosdb_sql_role_assignment"
NAME = "9c3f2a51-1c1b-4d3e-8a35-0a9e5c1d2b7f"
PRINCIPAL = "11111111-2222-3333-4444-555555555555"
ROLE_DEFINITION_ID = f"{ACCOUNT_ID}/sqlRoleDefinitions/00000000-0000-0000-0000-000000000002"
ASSIGNMENT_ID = f"{ACCOUNT_ID}/sqlRoleAssignments/{NAME}"


def assignment():
    return SimpleNamespace(
        principal_id=PRINCIPAL, role_definition_id=ROLE_DEFINITION_ID, scope=ACCOUNT_ID
    )


def config(**overrides):
    values = {
        "resource_group_name": "rg1",
        "account_name": "acct1",
        "principal_id": PRINCIPAL,
        "scope": ACCOUNT_ID,
        "role_definition_id": ROLE_DEFINITION_ID,
    }
    values.update(overrides)
    return values


@pytest.fixture
def handler(clients, clock):
    return SqlRoleAssignmentHandler(clients, poll_interval=1, clock=clock)


class TestSqlRoleAssignment:
    def test_create_with_name(self, handler, clients):
        sql = clients.cosmos.sql_resources
        sql.get_sql_role_assignment.side_effect = [not_found(), assignment()]
        sql.begin_create_update_sql_role_assignment.return_value = FakePoller()

        d = ResourceData(TYPE, config=config(name=NAME))
        handler.create(d)

        assert d.id == ASSIGNMENT_ID
        args = sql.begin_create_update_sql_role_assignment.call_args[0]
        assert args[:3] == (NAME, "rg1", "acct1")
        assert args[3].principal_id == PRINCIPAL
        assert args[3].role_definition_id == ROLE_DEFINITION_ID
        assert d.get("name") == NAME

    def test_create_generates_name(self, handler, clients):
        sql = clients.cosmos.sql_resources
        sql.get_sql_role_assignment.side_effect = [not_found(), assignment()]
        sql.begin_create_update_sql_role_assignment.return_value = FakePoller()

        d = ResourceData(TYPE, config=config())
        handler.create(d)

        generated = d.get("name")
        assert str(uuid.UUID(generated)) == generated
        assert d.id.endswith(f"/sqlRoleAssignments/{generated}")

    def test_create_twice_requires_import(self, handler, clients):
        clients.cosmos.sql_resources.get_sql_role_assignment.return_value = assignment()

        with pytest.raises(ResourceAlreadyExistsError):
            handler.create(ResourceData(TYPE, config=config(name=NAME)))

    def test_mutations_hold_the_account_lock(self, handler, clients):
        sql = clients.cosmos.sql_resources
        sql.get_sql_role_assignment.side_effect = [not_found(), assignment()]
        sql.begin_create_update_sql_role_assignment.return_value = FakePoller()
        sql.begin_delete_sql_role_assignment.return_value = FakePoller()

        with patch.object(locks, "locked", wraps=locks.locked) as locked:
            d = ResourceData(TYPE, config=config(name=NAME))
            handler.create(d)
            handler.delete(ResourceData(TYPE, state=d.state()))

        assert [c.args for c in locked.call_args_list] == [
            ("acct1", "azurerm_cosmosdb_account"),
            ("acct1", "azurerm_cosmosdb_account"),
        ]

    def test_concurrent_creates_on_one_account_are_serialized(self, handler, clients):
        created = set()
        events = []

        def get(name, resource_group, account):
            if name not in created:
                raise not_found()
            return assignment()

        def begin_create(name, resource_group, account, parameters):
            events.append("start")
            time.sleep(0.05)
            created.add(name)
            events.append("end")
            return FakePoller()

        sql = clients.cosmos.sql_resources
        sql.get_sql_role_assignment.side_effect = get
        sql.begin_create_update_sql_role_assignment.side_effect = begin_create

        names = [str(uuid.uuid4()) for _ in range(2)]
        threads = [
            threading.Thread(
                target=handler.create, args=(ResourceData(TYPE, config=config(name=n)),)
            )
            for n in names
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=5)

        assert events == ["start", "end", "start", "end"]
        assert created == set(names)

    def test_create_timeout_releases_the_account_lock(self, handler, clients, clock):
        sql = clients.cosmos.sql_resources
        sql.get_sql_role_assignment.side_effect = not_found()
        sql.begin_create_update_sql_role_assignment.return_value = FakePoller(
            polls_until_done=10**6
        )

        d = ResourceData(
            TYPE, config=config(name=NAME), timeouts=ResourceTimeouts(create=30)
        )
        with pytest.raises(OperationTimeoutError) as exc_info:
            handler.create(d)

        assert exc_info.value.operation == "create"
        assert NAME in exc_info.value.resource_id
        assert exc_info.value.timeout_value == 30
        assert clock.now == 30
        assert d.id == ""

        acquired = threading.Event()

        def acquire():
            with locks.locked("acct1", "azurerm_cosmosdb_account"):
                acquired.set()

        thread = threading.Thread(target=acquire)
        thread.start()
        thread.join(timeout=5)
        assert acquired.is_set()

    def test_read_not_found(self, handler, clients):
        clients.cosmos.sql_resources.get_sql_role_assignment.side_effect = not_found()

        d = ResourceData(TYPE, state={"id": ASSIGNMENT_ID})
        handler.read(d)

        assert d.id == ""

    def test_read(self, handler, clients):
        clients.cosmos.sql_resources.get_sql_role_assignment.return_value = assignment()

        d = ResourceData(TYPE, state={"id": ASSIGNMENT_ID})
        handler.read(d)

        assert d.state() == {"id": ASSIGNMENT_ID, "name": NAME, **config()}

    def test_delete_twice(self, handler, clients):
        clients.cosmos.sql_resources.begin_delete_sql_role_assignment.side_effect = [
            FakePoller(),
            not_found(),
        ]

        for _ in range(2):
            d = ResourceData(TYPE, state={"id": ASSIGNMENT_ID})
            handler.delete(d)
            assert d.id == ""
