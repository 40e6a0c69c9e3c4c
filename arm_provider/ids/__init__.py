from .base import ResourceGroupId, ResourceId, Segment, SegmentType
from .cosmos import (
    CosmosLocationId,
    DatabaseAccountId,
    RestorableDatabaseAccountId,
    SqlContainerId,
    SqlDatabaseId,
    SqlRoleAssignmentId,
    SqlRoleDefinitionId,
    SqlStoredProcedureId,
    SqlTriggerId,
    SqlUserDefinedFunctionId,
)
from .data_plane import NestedItemId, StorageContainerId
from .hdinsight import HDInsightClusterId
from .mssql import EncryptionProtectorId, SqlServerId

__all__ = [
    "CosmosLocationId",
    "DatabaseAccountId",
    "EncryptionProtectorId",
    "HDInsightClusterId",
    "NestedItemId",
    "ResourceGroupId",
    "ResourceId",
    "RestorableDatabaseAccountId",
    "Segment",
    "SegmentType",
    "SqlContainerId",
    "SqlDatabaseId",
    "SqlRoleAssignmentId",
    "SqlRoleDefinitionId",
    "SqlServerId",
    "SqlStoredProcedureId",
    "SqlTriggerId",
    "SqlUserDefinedFunctionId",
    "StorageContainerId",
]
