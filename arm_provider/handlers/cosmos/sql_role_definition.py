"""Handler for azurerm_cosmosdb_sql_role_definition (resource and data source)."""

import uuid
from typing import Annotated, Any, Dict, Iterable, List, Literal, Optional, Set

from azure.core.exceptions import HttpResponseError
from azure.mgmt.cosmosdb.models import Permission, SqlRoleDefinitionCreateUpdateParameters
from pydantic import field_validator

from ... import locks
from ...exceptions import RemoteResourceNotFoundError
from ...ids import SqlRoleDefinitionId
from ...resource_data import ResourceData
from ...schema import (
    Block,
    Computed,
    CosmosAccountName,
    ForceNew,
    NonEmptyString,
    ResourceConfig,
    ResourceGroupName,
    UUIDString,
)
from .. import data_source, resource
from ..base_handler import (
    DataSourceHandler,
    HandlerBase,
    ResourceHandler,
    enum_value,
    is_not_found,
)
from .common import COSMOS_ACCOUNT_RESOURCE_NAME

RoleDefinitionType = Literal["BuiltInRole", "CustomRole"]


class PermissionBlock(Block):
    data_actions: Set[NonEmptyString]


def _permission_key(block: Any) -> List[str]:
    actions = block["data_actions"] if isinstance(block, dict) else block.data_actions
    return sorted(actions)


def normalize_permissions(blocks: Iterable[Any]) -> List[Any]:
    """Order-independent, de-duplicated permission blocks."""
    unique: Dict[tuple, Any] = {}
    for block in blocks:
        unique.setdefault(tuple(_permission_key(block)), block)
    return [unique[key] for key in sorted(unique)]


class SqlRoleDefinitionConfig(ResourceConfig):
    role_definition_id: Annotated[Optional[UUIDString], Computed, ForceNew] = None
    resource_group_name: Annotated[ResourceGroupName, ForceNew]
    account_name: Annotated[CosmosAccountName, ForceNew]
    type: Annotated[RoleDefinitionType, ForceNew] = "CustomRole"
    assignable_scopes: Set[NonEmptyString]
    name: NonEmptyString
    permissions: List[PermissionBlock]

    @field_validator("permissions")
    @classmethod
    def permissions_as_set(cls, v: List[PermissionBlock]) -> List[PermissionBlock]:
        return normalize_permissions(v)


class SqlRoleDefinitionDataSourceConfig(ResourceConfig):
    resource_group_name: ResourceGroupName
    account_name: CosmosAccountName
    role_definition_id: UUIDString
    name: Annotated[Optional[str], Computed] = None
    type: Annotated[Optional[str], Computed] = None
    assignable_scopes: Annotated[Optional[Set[str]], Computed] = None
    permissions: Annotated[Optional[List[PermissionBlock]], Computed] = None


def expand_permissions(blocks: Optional[Iterable[Dict[str, Any]]]) -> List[Permission]:
    return [
        Permission(data_actions=sorted(block.get("data_actions") or []))
        for block in normalize_permissions(blocks or [])
    ]


def flatten_permissions(permissions: Optional[Iterable[Any]]) -> List[Dict[str, Any]]:
    """Permission DTOs -> ``permissions`` blocks; never None."""
    results = [
        {"data_actions": set(getattr(item, "data_actions", None) or [])}
        for item in permissions or []
    ]
    return normalize_permissions(results)


def read_role_definition_into(
    id: SqlRoleDefinitionId, definition: Any, d: ResourceData
) -> None:
    d.set("role_definition_id", id.role_definition_id)
    d.set("resource_group_name", id.resource_group_name)
    d.set("account_name", id.database_account_name)
    d.set("assignable_scopes", set(definition.assignable_scopes or []))
    d.set("name", definition.role_name)
    d.set("type", enum_value(getattr(definition, "type_properties_type", None)))
    d.set("permissions", flatten_permissions(definition.permissions))


def _get_role_definition(handler: HandlerBase, id: SqlRoleDefinitionId) -> Any:
    return handler.clients.cosmos.sql_resources.get_sql_role_definition(
        id.role_definition_id, id.resource_group_name, id.database_account_name
    )


@resource
class SqlRoleDefinitionHandler(ResourceHandler):
    TYPE_NAME = "azurerm_cosmosdb_sql_role_definition"
    SCHEMA = SqlRoleDefinitionConfig
    ID_TYPE = SqlRoleDefinitionId

    def get_remote(self, resource_id: SqlRoleDefinitionId) -> Any:
        return _get_role_definition(self, resource_id)

    def _write(self, id: SqlRoleDefinitionId, d: ResourceData, operation: str) -> None:
        parameters = SqlRoleDefinitionCreateUpdateParameters(
            role_name=d.get("name"),
            type=d.get("type"),
            assignable_scopes=sorted(d.get("assignable_scopes") or []),
            permissions=expand_permissions(d.get("permissions")),
        )
        with self.calling(id, operation):
            poller = self.clients.cosmos.sql_resources.begin_create_update_sql_role_definition(
                id.role_definition_id,
                id.resource_group_name,
                id.database_account_name,
                parameters,
            )
        self.wait_for(poller, d, operation, id)

    def create(self, d: ResourceData) -> None:
        role_definition_id = d.get("role_definition_id") or str(uuid.uuid4())
        id = SqlRoleDefinitionId(
            self.subscription_id,
            d.get("resource_group_name"),
            d.get("account_name"),
            role_definition_id,
        )

        with locks.locked(id.database_account_name, COSMOS_ACCOUNT_RESOURCE_NAME):
            self.ensure_absent(id)
            self._write(id, d, "create")
            d.set_id(id.id())
            self.refresh(d, "create")

    def update(self, d: ResourceData) -> None:
        id = SqlRoleDefinitionId.parse(d.id)
        with locks.locked(id.database_account_name, COSMOS_ACCOUNT_RESOURCE_NAME):
            self._write(id, d, "update")
            self.refresh(d, "update")

    def read(self, d: ResourceData) -> None:
        id = SqlRoleDefinitionId.parse(d.id)
        try:
            definition = self.get_remote(id)
        except HttpResponseError as e:
            if is_not_found(e):
                self.mark_gone(d, id)
                return
            raise self.remote_error(e, id, "read") from e
        read_role_definition_into(id, definition, d)

    def delete(self, d: ResourceData) -> None:
        id = SqlRoleDefinitionId.parse(d.id)
        with locks.locked(id.database_account_name, COSMOS_ACCOUNT_RESOURCE_NAME):
            self.delete_tolerating_not_found(
                lambda: self.clients.cosmos.sql_resources.begin_delete_sql_role_definition(
                    id.role_definition_id,
                    id.resource_group_name,
                    id.database_account_name,
                ),
                d,
                id,
            )


@data_source
class SqlRoleDefinitionDataSource(DataSourceHandler):
    TYPE_NAME = "azurerm_cosmosdb_sql_role_definition"
    SCHEMA = SqlRoleDefinitionDataSourceConfig

    def read(self, d: ResourceData) -> None:
        id = SqlRoleDefinitionId(
            self.subscription_id,
            d.get("resource_group_name"),
            d.get("account_name"),
            d.get("role_definition_id"),
        )
        try:
            definition = _get_role_definition(self, id)
        except HttpResponseError as e:
            if is_not_found(e):
                raise RemoteResourceNotFoundError(
                    f"{id} was not found", resource_id=id.id(), operation="read", cause=e
                ) from e
            raise self.remote_error(e, id, "read") from e

        d.set_id(id.id())
        read_role_definition_into(id, definition, d)
