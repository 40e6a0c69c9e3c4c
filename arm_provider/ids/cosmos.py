"""Resource identifiers for Microsoft.DocumentDB (Cosmos DB)."""

from dataclasses import dataclass

from .base import (
    RESOURCE_GROUP_SEGMENTS,
    SUBSCRIPTION_SEGMENTS,
    ResourceId,
    provider,
    static,
    user,
)

COSMOS_PROVIDER = "Microsoft.DocumentDB"

_ACCOUNT_SEGMENTS = RESOURCE_GROUP_SEGMENTS + (
    static("providers"),
    provider(COSMOS_PROVIDER),
    static("databaseAccounts"),
    user("database_account_name", "Database Account Name"),
)
_SQL_DATABASE_SEGMENTS = _ACCOUNT_SEGMENTS + (
    static("sqlDatabases"),
    user("sql_database_name", "Sql Database Name"),
)
_CONTAINER_SEGMENTS = _SQL_DATABASE_SEGMENTS + (
    static("containers"),
    user("container_name", "Container Name"),
)


@dataclass(frozen=True)
class DatabaseAccountId(ResourceId):
    subscription_id: str
    resource_group_name: str
    database_account_name: str

    DISPLAY_NAME = "Database Account"
    SEGMENTS = _ACCOUNT_SEGMENTS


@dataclass(frozen=True)
class SqlDatabaseId(ResourceId):
    subscription_id: str
    resource_group_name: str
    database_account_name: str
    sql_database_name: str

    DISPLAY_NAME = "Sql Database"
    SEGMENTS = _SQL_DATABASE_SEGMENTS

    def account_id(self) -> DatabaseAccountId:
        return DatabaseAccountId(
            self.subscription_id, self.resource_group_name, self.database_account_name
        )


@dataclass(frozen=True)
class SqlContainerId(ResourceId):
    subscription_id: str
    resource_group_name: str
    database_account_name: str
    sql_database_name: str
    container_name: str

    DISPLAY_NAME = "Sql Container"
    SEGMENTS = _CONTAINER_SEGMENTS

    def database_id(self) -> SqlDatabaseId:
        return SqlDatabaseId(
            self.subscription_id,
            self.resource_group_name,
            self.database_account_name,
            self.sql_database_name,
        )


@dataclass(frozen=True)
class _ContainerChildId(ResourceId):
    subscription_id: str
    resource_group_name: str
    database_account_name: str
    sql_database_name: str
    container_name: str

    def container_id(self) -> SqlContainerId:
        return SqlContainerId(
            self.subscription_id,
            self.resource_group_name,
            self.database_account_name,
            self.sql_database_name,
            self.container_name,
        )


@dataclass(frozen=True)
class SqlTriggerId(_ContainerChildId):
    trigger_name: str

    DISPLAY_NAME = "Sql Trigger"
    SEGMENTS = _CONTAINER_SEGMENTS + (
        static("triggers"),
        user("trigger_name", "Trigger Name"),
    )


@dataclass(frozen=True)
class SqlUserDefinedFunctionId(_ContainerChildId):
    user_defined_function_name: str

    DISPLAY_NAME = "Sql User Defined Function"
    SEGMENTS = _CONTAINER_SEGMENTS + (
        static("userDefinedFunctions"),
        user("user_defined_function_name", "User Defined Function Name"),
    )


@dataclass(frozen=True)
class SqlStoredProcedureId(_ContainerChildId):
    stored_procedure_name: str

    DISPLAY_NAME = "Sql Stored Procedure"
    SEGMENTS = _CONTAINER_SEGMENTS + (
        static("storedProcedures"),
        user("stored_procedure_name", "Stored Procedure Name"),
    )


@dataclass(frozen=True)
class SqlRoleAssignmentId(ResourceId):
    subscription_id: str
    resource_group_name: str
    database_account_name: str
    role_assignment_id: str

    DISPLAY_NAME = "Sql Role Assignment"
    SEGMENTS = _ACCOUNT_SEGMENTS + (
        static("sqlRoleAssignments"),
        user("role_assignment_id", "Role Assignment"),
    )

    def account_id(self) -> DatabaseAccountId:
        return DatabaseAccountId(
            self.subscription_id, self.resource_group_name, self.database_account_name
        )


@dataclass(frozen=True)
class SqlRoleDefinitionId(ResourceId):
    subscription_id: str
    resource_group_name: str
    database_account_name: str
    role_definition_id: str

    DISPLAY_NAME = "Sql Role Definition"
    SEGMENTS = _ACCOUNT_SEGMENTS + (
        static("sqlRoleDefinitions"),
        user("role_definition_id", "Role Definition"),
    )

    def account_id(self) -> DatabaseAccountId:
        return DatabaseAccountId(
            self.subscription_id, self.resource_group_name, self.database_account_name
        )


_LOCATION_SEGMENTS = SUBSCRIPTION_SEGMENTS + (
    static("providers"),
    provider(COSMOS_PROVIDER),
    static("locations"),
    user("location_name", "Location Name"),
)


@dataclass(frozen=True)
class CosmosLocationId(ResourceId):
    subscription_id: str
    location_name: str

    DISPLAY_NAME = "Location"
    SEGMENTS = _LOCATION_SEGMENTS


@dataclass(frozen=True)
class RestorableDatabaseAccountId(ResourceId):
    subscription_id: str
    location_name: str
    instance_id: str

    DISPLAY_NAME = "Restorable Database Account"
    SEGMENTS = _LOCATION_SEGMENTS + (
        static("restorableDatabaseAccounts"),
        user("instance_id", "Instance"),
    )
