"""
Tests for the azurerm_cosmosdb_sql_database resource and data source.
"""

from types import SimpleNamespace

import pytest
from azure.mgmt.cosmosdb.models import AutoscaleSettingsResource
from conftest import (
    DATABASE_ID,
    FakePoller,
    http_error,
    not_found,
    provisioned_account,
    serverless_account,
)

from arm_provider.exceptions import (
    RemoteOperationError,
    RemoteResourceNotFoundError,
    ResourceAlreadyExistsError,
)
from arm_provider.handlers.cosmos.sql_database import (
    SqlDatabaseDataSource,
    SqlDatabaseHandler,
)
from arm_provider.resource_data import ResourceData

TYPE = "azurerm_cosmosdb_sql_database"


def database():
    return SimpleNamespace(resource=SimpleNamespace(id="db1"))


def throughput(value=None, max_throughput=None):
    autoscale = (
        AutoscaleSettingsResource(max_throughput=max_throughput)
        if max_throughput
        else None
    )
    return SimpleNamespace(
        resource=SimpleNamespace(throughput=value, autoscale_settings=autoscale)
    )


@pytest.fixture
def sql_resources(clients):
    clients.cosmos.database_accounts.get.return_value = provisioned_account()
    return clients.cosmos.sql_resources


@pytest.fixture
def handler(clients, clock):
    return SqlDatabaseHandler(clients, poll_interval=1, clock=clock)


def config(**overrides):
    values = {"name": "db1", "resource_group_name": "rg1", "account_name": "acct1"}
    values.update(overrides)
    return values


class TestCreate:
    def test_create_with_throughput(self, handler, sql_resources):
        sql_resources.get_sql_database.side_effect = [not_found(), database()]
        sql_resources.begin_create_update_sql_database.return_value = FakePoller()
        sql_resources.get_sql_database_throughput.return_value = throughput(400)

        d = ResourceData(TYPE, config=config(throughput=400))
        handler.create(d)

        assert d.id == DATABASE_ID
        args = sql_resources.begin_create_update_sql_database.call_args[0]
        assert args[:3] == ("rg1", "acct1", "db1")
        assert args[3].resource.id == "db1"
        assert args[3].options.throughput == 400
        assert d.get("throughput") == 400
        assert d.get("autoscale_settings") == []

    def test_create_with_autoscale(self, handler, sql_resources):
        sql_resources.get_sql_database.side_effect = [not_found(), database()]
        sql_resources.begin_create_update_sql_database.return_value = FakePoller()
        sql_resources.get_sql_database_throughput.return_value = throughput(
            None, max_throughput=4000
        )

        d = ResourceData(TYPE, config=config(autoscale_settings=[{"max_throughput": 4000}]))
        handler.create(d)

        options = sql_resources.begin_create_update_sql_database.call_args[0][3].options
        assert options.autoscale_settings.max_throughput == 4000
        assert d.get("autoscale_settings") == [{"max_throughput": 4000}]

    def test_create_twice_requires_import(self, handler, sql_resources):
        sql_resources.get_sql_database.return_value = database()

        with pytest.raises(ResourceAlreadyExistsError) as excinfo:
            handler.create(ResourceData(TYPE, config=config()))

        assert excinfo.value.resource_id == DATABASE_ID
        sql_resources.begin_create_update_sql_database.assert_not_called()

    def test_existence_check_failure_is_fatal(self, handler, sql_resources):
        sql_resources.get_sql_database.side_effect = http_error(503, "Service Unavailable")

        with pytest.raises(RemoteOperationError) as excinfo:
            handler.create(ResourceData(TYPE, config=config()))

        assert excinfo.value.status_code == 503
        assert excinfo.value.operation == "create"
        sql_resources.begin_create_update_sql_database.assert_not_called()

    def test_missing_after_create_is_an_error(self, handler, sql_resources):
        sql_resources.get_sql_database.side_effect = [not_found(), not_found()]
        sql_resources.begin_create_update_sql_database.return_value = FakePoller()

        with pytest.raises(RemoteResourceNotFoundError, match="after create"):
            handler.create(ResourceData(TYPE, config=config()))


class TestRead:
    def test_serverless_skips_throughput(self, handler, clients, sql_resources):
        clients.cosmos.database_accounts.get.return_value = serverless_account()
        sql_resources.get_sql_database.return_value = database()

        d = ResourceData(TYPE, state={"id": DATABASE_ID})
        handler.read(d)

        sql_resources.get_sql_database_throughput.assert_not_called()
        assert d.get("name") == "db1"
        assert d.get("account_name") == "acct1"

    def test_throughput_not_found_clears_fields(self, handler, sql_resources):
        sql_resources.get_sql_database.return_value = database()
        sql_resources.get_sql_database_throughput.side_effect = not_found()

        d = ResourceData(TYPE, state={"id": DATABASE_ID, "throughput": 400})
        handler.read(d)

        assert d.id == DATABASE_ID
        assert d.get("throughput") is None
        assert d.get("autoscale_settings") == []

    def test_throughput_error_propagates(self, handler, sql_resources):
        sql_resources.get_sql_database.return_value = database()
        sql_resources.get_sql_database_throughput.side_effect = http_error(500)

        with pytest.raises(RemoteOperationError):
            handler.read(ResourceData(TYPE, state={"id": DATABASE_ID}))

    def test_not_found_removes_from_state(self, handler, sql_resources):
        sql_resources.get_sql_database.side_effect = not_found()

        d = ResourceData(TYPE, state={"id": DATABASE_ID, "name": "db1"})
        handler.read(d)

        assert d.id == ""
        assert d.state() == {}


class TestUpdate:
    def test_throughput_change(self, handler, sql_resources):
        sql_resources.begin_create_update_sql_database.return_value = FakePoller()
        sql_resources.begin_update_sql_database_throughput.return_value = FakePoller()
        sql_resources.get_sql_database.return_value = database()
        sql_resources.get_sql_database_throughput.return_value = throughput(800)

        d = ResourceData(
            TYPE,
            config=config(throughput=800),
            state={"id": DATABASE_ID, **config(throughput=400), "autoscale_settings": []},
        )
        handler.update(d)

        body = sql_resources.begin_update_sql_database_throughput.call_args[0][3]
        assert body.resource.throughput == 800
        options = sql_resources.begin_create_update_sql_database.call_args[0][3].options
        assert options.throughput is None
        assert d.get("throughput") == 800

    def test_no_throughput_change_skips_throughput_call(self, handler, sql_resources):
        sql_resources.begin_create_update_sql_database.return_value = FakePoller()
        sql_resources.get_sql_database.return_value = database()
        sql_resources.get_sql_database_throughput.return_value = throughput(400)

        d = ResourceData(
            TYPE,
            config=config(throughput=400),
            state={"id": DATABASE_ID, **config(throughput=400)},
        )
        handler.update(d)

        sql_resources.begin_update_sql_database_throughput.assert_not_called()

    def test_throughput_not_configurable_later(self, handler, sql_resources):
        sql_resources.begin_create_update_sql_database.return_value = FakePoller()
        sql_resources.begin_update_sql_database_throughput.side_effect = not_found()

        d = ResourceData(
            TYPE,
            config=config(throughput=400),
            state={"id": DATABASE_ID, **config()},
        )
        with pytest.raises(RemoteOperationError, match="cannot configure it later"):
            handler.update(d)


class TestDelete:
    def test_delete(self, handler, sql_resources):
        sql_resources.begin_delete_sql_database.return_value = FakePoller()

        d = ResourceData(TYPE, state={"id": DATABASE_ID})
        handler.delete(d)

        sql_resources.begin_delete_sql_database.assert_called_once_with("rg1", "acct1", "db1")
        assert d.id == ""

    def test_delete_twice_is_not_an_error(self, handler, sql_resources):
        sql_resources.begin_delete_sql_database.side_effect = not_found()

        d = ResourceData(TYPE, state={"id": DATABASE_ID})
        handler.delete(d)

        assert d.id == ""

    def test_not_found_while_polling(self, handler, sql_resources):
        sql_resources.begin_delete_sql_database.return_value = FakePoller(error=not_found())

        d = ResourceData(TYPE, state={"id": DATABASE_ID})
        handler.delete(d)

        assert d.id == ""

    def test_other_errors_propagate(self, handler, sql_resources):
        sql_resources.begin_delete_sql_database.side_effect = http_error(409, "Conflict")

        with pytest.raises(RemoteOperationError) as excinfo:
            handler.delete(ResourceData(TYPE, state={"id": DATABASE_ID}))

        assert excinfo.value.operation == "delete"
        assert excinfo.value.resource_id is not None


class TestDataSource:
    def test_read(self, clients, clock, sql_resources):
        sql_resources.get_sql_database.return_value = database()
        sql_resources.get_sql_database_throughput.return_value = throughput(400)

        d = ResourceData(TYPE, config=config())
        SqlDatabaseDataSource(clients, clock=clock).read(d)

        assert d.id == DATABASE_ID
        assert d.get("throughput") == 400

    def test_missing_is_an_error(self, clients, clock, sql_resources):
        sql_resources.get_sql_database.side_effect = not_found()

        with pytest.raises(RemoteResourceNotFoundError):
            SqlDatabaseDataSource(clients, clock=clock).read(ResourceData(TYPE, config=config()))
