from .base import (
    Block,
    ResourceConfig,
    computed_fields,
    describe_schema,
    force_new_fields,
    parse_config,
    redact,
    requires_replacement,
)
from .markers import Computed, ForceNew, Sensitive
from .validators import (
    CosmosAccountName,
    CosmosEntityName,
    CosmosMaxThroughput,
    CosmosThroughput,
    HDInsightClusterName,
    HDInsightClusterVersion,
    KeyVaultKeyIdString,
    Location,
    ManagedHsmKeyIdString,
    NonEmptyString,
    ResourceGroupName,
    SqlContainerIdString,
    SqlRoleDefinitionIdString,
    SqlServerIdString,
    StorageContainerIdString,
    UUIDString,
)

__all__ = [
    "Block",
    "Computed",
    "CosmosAccountName",
    "CosmosEntityName",
    "CosmosMaxThroughput",
    "CosmosThroughput",
    "ForceNew",
    "HDInsightClusterName",
    "HDInsightClusterVersion",
    "KeyVaultKeyIdString",
    "Location",
    "ManagedHsmKeyIdString",
    "NonEmptyString",
    "ResourceConfig",
    "ResourceGroupName",
    "Sensitive",
    "SqlContainerIdString",
    "SqlRoleDefinitionIdString",
    "SqlServerIdString",
    "StorageContainerIdString",
    "UUIDString",
    "computed_fields",
    "describe_schema",
    "force_new_fields",
    "parse_config",
    "redact",
    "requires_replacement",
]
