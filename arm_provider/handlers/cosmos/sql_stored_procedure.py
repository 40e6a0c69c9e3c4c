"""Handler for azurerm_cosmosdb_sql_stored_procedure."""

from typing import Annotated, Any

from azure.core.exceptions import HttpResponseError
from azure.mgmt.cosmosdb.models import (
    CreateUpdateOptions,
    SqlStoredProcedureCreateUpdateParameters,
    SqlStoredProcedureResource,
)

from ...ids import SqlStoredProcedureId
from ...resource_data import ResourceData
from ...schema import (
    CosmosAccountName,
    CosmosEntityName,
    ForceNew,
    NonEmptyString,
    ResourceConfig,
    ResourceGroupName,
)
from .. import resource
from ..base_handler import ResourceHandler, is_not_found


class SqlStoredProcedureConfig(ResourceConfig):
    name: Annotated[NonEmptyString, ForceNew]
    resource_group_name: Annotated[ResourceGroupName, ForceNew]
    account_name: Annotated[CosmosAccountName, ForceNew]
    body: NonEmptyString
    database_name: Annotated[CosmosEntityName, ForceNew]
    container_name: Annotated[CosmosEntityName, ForceNew]


@resource
class SqlStoredProcedureHandler(ResourceHandler):
    TYPE_NAME = "azurerm_cosmosdb_sql_stored_procedure"
    SCHEMA = SqlStoredProcedureConfig
    ID_TYPE = SqlStoredProcedureId

    def get_remote(self, resource_id: SqlStoredProcedureId) -> Any:
        return self.clients.cosmos.sql_resources.get_sql_stored_procedure(
            resource_id.resource_group_name,
            resource_id.database_account_name,
            resource_id.sql_database_name,
            resource_id.container_name,
            resource_id.stored_procedure_name,
        )

    def _write(self, id: SqlStoredProcedureId, d: ResourceData, operation: str) -> None:
        parameters = SqlStoredProcedureCreateUpdateParameters(
            resource=SqlStoredProcedureResource(
                id=id.stored_procedure_name, body=d.get("body")
            ),
            options=CreateUpdateOptions(),
        )
        with self.calling(id, operation):
            poller = self.clients.cosmos.sql_resources.begin_create_update_sql_stored_procedure(
                id.resource_group_name,
                id.database_account_name,
                id.sql_database_name,
                id.container_name,
                id.stored_procedure_name,
                parameters,
            )
        self.wait_for(poller, d, operation, id)

    def create(self, d: ResourceData) -> None:
        id = SqlStoredProcedureId(
            self.subscription_id,
            d.get("resource_group_name"),
            d.get("account_name"),
            d.get("database_name"),
            d.get("container_name"),
            d.get("name"),
        )
        self.ensure_absent(id)
        self._write(id, d, "create")
        d.set_id(id.id())
        self.refresh(d, "create")

    def update(self, d: ResourceData) -> None:
        id = SqlStoredProcedureId.parse(d.id)
        self._write(id, d, "update")
        self.refresh(d, "update")

    def read(self, d: ResourceData) -> None:
        id = SqlStoredProcedureId.parse(d.id)
        try:
            procedure = self.get_remote(id)
        except HttpResponseError as e:
            if is_not_found(e):
                self.mark_gone(d, id)
                return
            raise self.remote_error(e, id, "read") from e

        d.set("resource_group_name", id.resource_group_name)
        d.set("account_name", id.database_account_name)
        d.set("database_name", id.sql_database_name)
        d.set("container_name", id.container_name)
        d.set("name", id.stored_procedure_name)
        props = getattr(procedure, "resource", None)
        if props is not None:
            d.set("body", props.body)

    def delete(self, d: ResourceData) -> None:
        id = SqlStoredProcedureId.parse(d.id)
        self.delete_tolerating_not_found(
            lambda: self.clients.cosmos.sql_resources.begin_delete_sql_stored_procedure(
                id.resource_group_name,
                id.database_account_name,
                id.sql_database_name,
                id.container_name,
                id.stored_procedure_name,
            ),
            d,
            id,
        )
