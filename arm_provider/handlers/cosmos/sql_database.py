"""Handler for azurerm_cosmosdb_sql_database (resource and data source)."""

import logging
from typing import Annotated, Any, List, Optional

from azure.core.exceptions import HttpResponseError
from azure.mgmt.cosmosdb.models import (
    CreateUpdateOptions,
    SqlDatabaseCreateUpdateParameters,
    SqlDatabaseResource,
)
from pydantic import Field, model_validator

from ...exceptions import RemoteOperationError, RemoteResourceNotFoundError
from ...ids import SqlDatabaseId
from ...resource_data import ResourceData
from ...schema import (
    Block,
    Computed,
    CosmosAccountName,
    CosmosEntityName,
    CosmosMaxThroughput,
    CosmosThroughput,
    ForceNew,
    ResourceConfig,
    ResourceGroupName,
)
from .. import data_source, resource
from ..base_handler import DataSourceHandler, HandlerBase, ResourceHandler, is_not_found
from .common import (
    check_for_change_from_autoscale_and_manual_throughput,
    clear_throughput,
    expand_create_update_options,
    expand_throughput_update_parameters,
    has_throughput_change,
    is_serverless_capacity_mode,
    set_throughput_from_response,
)

logger = logging.getLogger(__name__)


class AutoscaleSettingsBlock(Block):
    max_throughput: Annotated[Optional[CosmosMaxThroughput], Computed] = None


class SqlDatabaseConfig(ResourceConfig):
    name: Annotated[CosmosEntityName, ForceNew]
    resource_group_name: Annotated[ResourceGroupName, ForceNew]
    account_name: Annotated[CosmosAccountName, ForceNew]
    throughput: Annotated[Optional[CosmosThroughput], Computed] = None
    autoscale_settings: Annotated[
        Optional[Annotated[List[AutoscaleSettingsBlock], Field(max_length=1)]],
        Computed,
    ] = None

    @model_validator(mode="after")
    def throughput_conflicts_with_autoscale(self) -> "SqlDatabaseConfig":
        if self.throughput is not None and self.autoscale_settings:
            raise ValueError(
                "only one of throughput and autoscale_settings can be specified"
            )
        return self


class SqlDatabaseDataSourceConfig(ResourceConfig):
    name: CosmosEntityName
    resource_group_name: ResourceGroupName
    account_name: CosmosAccountName
    throughput: Annotated[Optional[int], Computed] = None
    autoscale_settings: Annotated[Optional[List[AutoscaleSettingsBlock]], Computed] = None


def read_sql_database_into(
    handler: HandlerBase, id: SqlDatabaseId, database: Any, d: ResourceData
) -> None:
    """Project a database and its throughput settings into ``d``.

    Throughput is only read for provisioned accounts, and a database created
    without dedicated throughput reports not-found, which clears both fields.
    """
    cosmos = handler.clients.cosmos
    d.set("resource_group_name", id.resource_group_name)
    d.set("account_name", id.database_account_name)
    database_resource = getattr(database, "resource", None)
    d.set("name", getattr(database_resource, "id", None) or id.sql_database_name)

    with handler.calling(id.account_id(), "read"):
        account = cosmos.database_accounts.get(
            id.resource_group_name, id.database_account_name
        )

    if is_serverless_capacity_mode(account):
        return

    try:
        throughput = cosmos.sql_resources.get_sql_database_throughput(
            id.resource_group_name, id.database_account_name, id.sql_database_name
        )
    except HttpResponseError as e:
        if not is_not_found(e):
            raise handler.remote_error(e, id, "read") from e
        clear_throughput(d)
        return
    set_throughput_from_response(throughput, d)


@resource
class SqlDatabaseHandler(ResourceHandler):
    TYPE_NAME = "azurerm_cosmosdb_sql_database"
    SCHEMA = SqlDatabaseConfig
    ID_TYPE = SqlDatabaseId

    def get_remote(self, resource_id: SqlDatabaseId) -> Any:
        return self.clients.cosmos.sql_resources.get_sql_database(
            resource_id.resource_group_name,
            resource_id.database_account_name,
            resource_id.sql_database_name,
        )

    def _begin_create_update(
        self, id: SqlDatabaseId, options: CreateUpdateOptions
    ) -> Any:
        parameters = SqlDatabaseCreateUpdateParameters(
            resource=SqlDatabaseResource(id=id.sql_database_name),
            options=options,
        )
        return self.clients.cosmos.sql_resources.begin_create_update_sql_database(
            id.resource_group_name,
            id.database_account_name,
            id.sql_database_name,
            parameters,
        )

    def create(self, d: ResourceData) -> None:
        id = SqlDatabaseId(
            self.subscription_id,
            d.get("resource_group_name"),
            d.get("account_name"),
            d.get("name"),
        )
        self.ensure_absent(id)

        with self.calling(id, "create"):
            poller = self._begin_create_update(id, expand_create_update_options(d))
        self.wait_for(poller, d, "create", id)

        d.set_id(id.id())
        self.refresh(d, "create")

    def update(self, d: ResourceData) -> None:
        id = SqlDatabaseId.parse(d.id)
        check_for_change_from_autoscale_and_manual_throughput(d)

        with self.calling(id, "update"):
            poller = self._begin_create_update(id, CreateUpdateOptions())
        self.wait_for(poller, d, "update", id)

        if has_throughput_change(d):
            parameters = expand_throughput_update_parameters(d)
            try:
                poller = self.clients.cosmos.sql_resources.begin_update_sql_database_throughput(
                    id.resource_group_name,
                    id.database_account_name,
                    id.sql_database_name,
                    parameters,
                )
            except HttpResponseError as e:
                if is_not_found(e):
                    raise RemoteOperationError(
                        f"setting throughput for {id}: If the collection has not been "
                        f"created with an initial throughput, you cannot configure it later",
                        resource_id=id.id(),
                        operation="update",
                        status_code=404,
                        cause=e,
                    ) from e
                raise self.remote_error(e, id, "update") from e
            self.wait_for(poller, d, "update", id)

        self.refresh(d, "update")

    def read(self, d: ResourceData) -> None:
        id = SqlDatabaseId.parse(d.id)
        try:
            database = self.get_remote(id)
        except HttpResponseError as e:
            if is_not_found(e):
                self.mark_gone(d, id)
                return
            raise self.remote_error(e, id, "read") from e
        read_sql_database_into(self, id, database, d)

    def delete(self, d: ResourceData) -> None:
        id = SqlDatabaseId.parse(d.id)
        self.delete_tolerating_not_found(
            lambda: self.clients.cosmos.sql_resources.begin_delete_sql_database(
                id.resource_group_name, id.database_account_name, id.sql_database_name
            ),
            d,
            id,
        )


@data_source
class SqlDatabaseDataSource(DataSourceHandler):
    TYPE_NAME = "azurerm_cosmosdb_sql_database"
    SCHEMA = SqlDatabaseDataSourceConfig

    def read(self, d: ResourceData) -> None:
        id = SqlDatabaseId(
            self.subscription_id,
            d.get("resource_group_name"),
            d.get("account_name"),
            d.get("name"),
        )
        try:
            database = self.clients.cosmos.sql_resources.get_sql_database(
                id.resource_group_name, id.database_account_name, id.sql_database_name
            )
        except HttpResponseError as e:
            if is_not_found(e):
                raise RemoteResourceNotFoundError(
                    f"{id} was not found", resource_id=id.id(), operation="read", cause=e
                ) from e
            raise self.remote_error(e, id, "read") from e

        d.set_id(id.id())
        read_sql_database_into(self, id, database, d)
