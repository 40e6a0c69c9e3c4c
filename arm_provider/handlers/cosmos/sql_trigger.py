"""Handler for azurerm_cosmosdb_sql_trigger."""

import logging
from typing import Annotated, Any, Literal

from azure.core.exceptions import HttpResponseError
from azure.mgmt.cosmosdb.models import (
    CreateUpdateOptions,
    SqlTriggerCreateUpdateParameters,
    SqlTriggerResource,
)

from ...ids import SqlContainerId, SqlTriggerId
from ...resource_data import ResourceData
from ...schema import (
    CosmosEntityName,
    ForceNew,
    NonEmptyString,
    ResourceConfig,
    SqlContainerIdString,
)
from .. import resource
from ..base_handler import ResourceHandler, enum_value, is_not_found

logger = logging.getLogger(__name__)

TriggerOperation = Literal["All", "Create", "Update", "Delete", "Replace"]
TriggerType = Literal["Pre", "Post"]


class SqlTriggerConfig(ResourceConfig):
    name: Annotated[CosmosEntityName, ForceNew]
    container_id: Annotated[SqlContainerIdString, ForceNew]
    body: NonEmptyString
    operation: TriggerOperation
    type: TriggerType


@resource
class SqlTriggerHandler(ResourceHandler):
    TYPE_NAME = "azurerm_cosmosdb_sql_trigger"
    SCHEMA = SqlTriggerConfig
    ID_TYPE = SqlTriggerId

    def get_remote(self, resource_id: SqlTriggerId) -> Any:
        return self.clients.cosmos.sql_resources.get_sql_trigger(
            resource_id.resource_group_name,
            resource_id.database_account_name,
            resource_id.sql_database_name,
            resource_id.container_name,
            resource_id.trigger_name,
        )

    def _id_from_config(self, d: ResourceData) -> SqlTriggerId:
        container = SqlContainerId.parse(d.get("container_id"))
        return SqlTriggerId(
            self.subscription_id,
            container.resource_group_name,
            container.database_account_name,
            container.sql_database_name,
            container.container_name,
            d.get("name"),
        )

    def _create_update(self, d: ResourceData, operation: str) -> None:
        id = self._id_from_config(d)
        if d.is_new_resource():
            self.ensure_absent(id)

        parameters = SqlTriggerCreateUpdateParameters(
            resource=SqlTriggerResource(
                id=id.trigger_name,
                body=d.get("body"),
                trigger_type=d.get("type"),
                trigger_operation=d.get("operation"),
            ),
            options=CreateUpdateOptions(),
        )
        with self.calling(id, operation):
            poller = self.clients.cosmos.sql_resources.begin_create_update_sql_trigger(
                id.resource_group_name,
                id.database_account_name,
                id.sql_database_name,
                id.container_name,
                id.trigger_name,
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
        id = SqlTriggerId.parse(d.id)
        try:
            trigger = self.get_remote(id)
        except HttpResponseError as e:
            if is_not_found(e):
                self.mark_gone(d, id)
                return
            raise self.remote_error(e, id, "read") from e

        d.set("name", id.trigger_name)
        d.set("container_id", id.container_id().id())
        props = getattr(trigger, "resource", None)
        if props is not None:
            d.set("body", props.body)
            d.set("operation", enum_value(props.trigger_operation))
            d.set("type", enum_value(props.trigger_type))

    def delete(self, d: ResourceData) -> None:
        id = SqlTriggerId.parse(d.id)
        self.delete_tolerating_not_found(
            lambda: self.clients.cosmos.sql_resources.begin_delete_sql_trigger(
                id.resource_group_name,
                id.database_account_name,
                id.sql_database_name,
                id.container_name,
                id.trigger_name,
            ),
            d,
            id,
        )
