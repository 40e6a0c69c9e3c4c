"""Handler for azurerm_cosmosdb_sql_function (SQL user-defined functions)."""

from typing import Annotated, Any

from azure.core.exceptions import HttpResponseError
from azure.mgmt.cosmosdb.models import (
    CreateUpdateOptions,
    SqlUserDefinedFunctionCreateUpdateParameters,
    SqlUserDefinedFunctionResource,
)

from ...ids import SqlContainerId, SqlUserDefinedFunctionId
from ...resource_data import ResourceData
from ...schema import ForceNew, NonEmptyString, ResourceConfig, SqlContainerIdString
from .. import resource
from ..base_handler import ResourceHandler, is_not_found


class SqlFunctionConfig(ResourceConfig):
    name: Annotated[NonEmptyString, ForceNew]
    container_id: Annotated[SqlContainerIdString, ForceNew]
    body: NonEmptyString


@resource
class SqlFunctionHandler(ResourceHandler):
    TYPE_NAME = "azurerm_cosmosdb_sql_function"
    SCHEMA = SqlFunctionConfig
    ID_TYPE = SqlUserDefinedFunctionId

    def get_remote(self, resource_id: SqlUserDefinedFunctionId) -> Any:
        return self.clients.cosmos.sql_resources.get_sql_user_defined_function(
            resource_id.resource_group_name,
            resource_id.database_account_name,
            resource_id.sql_database_name,
            resource_id.container_name,
            resource_id.user_defined_function_name,
        )

    def _create_update(self, d: ResourceData, operation: str) -> None:
        container = SqlContainerId.parse(d.get("container_id"))
        id = SqlUserDefinedFunctionId(
            self.subscription_id,
            container.resource_group_name,
            container.database_account_name,
            container.sql_database_name,
            container.container_name,
            d.get("name"),
        )
        if d.is_new_resource():
            self.ensure_absent(id)

        parameters = SqlUserDefinedFunctionCreateUpdateParameters(
            resource=SqlUserDefinedFunctionResource(
                id=id.user_defined_function_name, body=d.get("body")
            ),
            options=CreateUpdateOptions(),
        )
        with self.calling(id, operation):
            poller = self.clients.cosmos.sql_resources.begin_create_update_sql_user_defined_function(
                id.resource_group_name,
                id.database_account_name,
                id.sql_database_name,
                id.container_name,
                id.user_defined_function_name,
                parameters,
            )
        self.wait_for(poller, d, operation, id)

        d.set_id(id.id())
        self.refresh(d, operation)

    def create(self, d: ResourceData) -> None:
        self._create_update(d, "create")

    def update(self, d: ResourceData) -> None:
        self._create_update(d, "update")

    def read(self, d: ResourceData) -> None:
        id = SqlUserDefinedFunctionId.parse(d.id)
        try:
            function = self.get_remote(id)
        except HttpResponseError as e:
            if is_not_found(e):
                self.mark_gone(d, id)
                return
            raise self.remote_error(e, id, "read") from e

        d.set("name", id.user_defined_function_name)
        d.set("container_id", id.container_id().id())
        props = getattr(function, "resource", None)
        if props is not None:
            d.set("body", props.body)

    def delete(self, d: ResourceData) -> None:
        id = SqlUserDefinedFunctionId.parse(d.id)
        self.delete_tolerating_not_found(
            lambda: self.clients.cosmos.sql_resources.begin_delete_sql_user_defined_function(
                id.resource_group_name,
                id.database_account_name,
                id.sql_database_name,
                id.container_name,
                id.user_defined_function_name,
            ),
            d,
            id,
        )
