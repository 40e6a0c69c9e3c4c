"""Handler for azurerm_cosmosdb_sql_role_assignment.

Role assignments on one account are serialized through the account lock; the
API rejects concurrent RBAC writes against the same account.
"""

import uuid
from typing import Annotated, Any, Optional

from azure.core.exceptions import HttpResponseError
from azure.mgmt.cosmosdb.models import SqlRoleAssignmentCreateUpdateParameters

from ... import locks
from ...ids import SqlRoleAssignmentId
from ...resource_data import ResourceData
from ...schema import (
    Computed,
    CosmosAccountName,
    ForceNew,
    NonEmptyString,
    ResourceConfig,
    ResourceGroupName,
    SqlRoleDefinitionIdString,
    UUIDString,
)
from .. import resource
from ..base_handler import ResourceHandler, is_not_found
from .common import COSMOS_ACCOUNT_RESOURCE_NAME


class SqlRoleAssignmentConfig(ResourceConfig):
    name: Annotated[Optional[UUIDString], Computed, ForceNew] = None
    resource_group_name: Annotated[ResourceGroupName, ForceNew]
    account_name: Annotated[CosmosAccountName, ForceNew]
    principal_id: Annotated[UUIDString, ForceNew]
    scope: Annotated[NonEmptyString, ForceNew]
    role_definition_id: SqlRoleDefinitionIdString


@resource
class SqlRoleAssignmentHandler(ResourceHandler):
    TYPE_NAME = "azurerm_cosmosdb_sql_role_assignment"
    SCHEMA = SqlRoleAssignmentConfig
    ID_TYPE = SqlRoleAssignmentId

    def get_remote(self, resource_id: SqlRoleAssignmentId) -> Any:
        return self.clients.cosmos.sql_resources.get_sql_role_assignment(
            resource_id.role_assignment_id,
            resource_id.resource_group_name,
            resource_id.database_account_name,
        )

    def _write(self, id: SqlRoleAssignmentId, d: ResourceData, operation: str) -> None:
        parameters = SqlRoleAssignmentCreateUpdateParameters(
            role_definition_id=d.get("role_definition_id"),
            scope=d.get("scope"),
            principal_id=d.get("principal_id"),
        )
        with self.calling(id, operation):
            poller = self.clients.cosmos.sql_resources.begin_create_update_sql_role_assignment(
                id.role_assignment_id,
                id.resource_group_name,
                id.database_account_name,
                parameters,
            )
        self.wait_for(poller, d, operation, id)

    def create(self, d: ResourceData) -> None:
        name = d.get("name") or str(uuid.uuid4())
        id = SqlRoleAssignmentId(
            self.subscription_id,
            d.get("resource_group_name"),
            d.get("account_name"),
            name,
        )

        with locks.locked(id.database_account_name, COSMOS_ACCOUNT_RESOURCE_NAME):
            self.ensure_absent(id)
            self._write(id, d, "create")
            d.set_id(id.id())
            self.refresh(d, "create")

    def update(self, d: ResourceData) -> None:
        id = SqlRoleAssignmentId.parse(d.id)
        with locks.locked(id.database_account_name, COSMOS_ACCOUNT_RESOURCE_NAME):
            self._write(id, d, "update")
            self.refresh(d, "update")

    def read(self, d: ResourceData) -> None:
        id = SqlRoleAssignmentId.parse(d.id)
        try:
            assignment = self.get_remote(id)
        except HttpResponseError as e:
            if is_not_found(e):
                self.mark_gone(d, id)
                return
            raise self.remote_error(e, id, "read") from e

        d.set("name", id.role_assignment_id)
        d.set("resource_group_name", id.resource_group_name)
        d.set("account_name", id.database_account_name)
        d.set("principal_id", assignment.principal_id)
        d.set("role_definition_id", assignment.role_definition_id)
        d.set("scope", assignment.scope)

    def delete(self, d: ResourceData) -> None:
        id = SqlRoleAssignmentId.parse(d.id)
        with locks.locked(id.database_account_name, COSMOS_ACCOUNT_RESOURCE_NAME):
            self.delete_tolerating_not_found(
                lambda: self.clients.cosmos.sql_resources.begin_delete_sql_role_assignment(
                    id.role_assignment_id,
                    id.resource_group_name,
                    id.database_account_name,
                ),
                d,
                id,
            )
