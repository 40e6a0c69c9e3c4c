"""Field validators and the ``Annotated`` aliases that attach them.

Each validator takes the already type-coerced value and either returns it or
raises ``ValueError``; pydantic collects those into one message per field.
"""

import re
import uuid
from typing import Annotated

from pydantic import AfterValidator

from ..exceptions import ResourceIdParseError
from ..ids import (
    NestedItemId,
    SqlContainerId,
    SqlRoleDefinitionId,
    SqlServerId,
    StorageContainerId,
)
from ..ids.data_plane import KEY_VAULT_SUFFIX, MANAGED_HSM_SUFFIX

_COSMOS_ACCOUNT_NAME = re.compile(r"^[-a-z0-9]{3,50}$")
_COSMOS_ENTITY_FORBIDDEN = set("/\\#?%")
_RESOURCE_GROUP_NAME = re.compile(r"^[-\w._()]+$")
_UUID = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)
_HDINSIGHT_CLUSTER_NAME = re.compile(r"^[a-zA-Z][a-zA-Z0-9-]{1,57}[a-zA-Z0-9]$")
_HDINSIGHT_CLUSTER_VERSION = re.compile(r"^\d+\.\d+(\.\d+(\.\d+)*)?$")


def validate_cosmos_account_name(value: str) -> str:
    if not _COSMOS_ACCOUNT_NAME.match(value):
        raise ValueError(
            "Cosmos DB account name must be 3 - 50 characters long and contain "
            "only lowercase letters, numbers and hyphens"
        )
    return value


def validate_cosmos_entity_name(value: str) -> str:
    if not 1 <= len(value) <= 255:
        raise ValueError("name must be between 1 and 255 characters")
    if value.endswith(" "):
        raise ValueError("name cannot end with a space")
    if _COSMOS_ENTITY_FORBIDDEN.intersection(value):
        raise ValueError("name cannot contain the characters: / \\ # ? %")
    return value


def validate_cosmos_throughput(value: int) -> int:
    if value < 400:
        raise ValueError(f"throughput must be at least 400, got {value}")
    if value % 100 != 0:
        raise ValueError(f"throughput must be set in increments of 100, got {value}")
    return value


def validate_cosmos_max_throughput(value: int) -> int:
    if value < 1000:
        raise ValueError(f"max_throughput must be at least 1000, got {value}")
    if value % 1000 != 0:
        raise ValueError(
            f"max_throughput must be set in increments of 1000, got {value}"
        )
    return value


def validate_resource_group_name(value: str) -> str:
    if len(value) > 90:
        raise ValueError("resource group name may not exceed 90 characters")
    if not value:
        raise ValueError("resource group name cannot be blank")
    if not _RESOURCE_GROUP_NAME.match(value):
        raise ValueError(
            "resource group name may only contain alphanumerics, underscores, "
            "parentheses, hyphens and periods"
        )
    if value.endswith("."):
        raise ValueError("resource group name may not end with a period")
    return value


def validate_uuid(value: str) -> str:
    if not _UUID.match(value):
        raise ValueError(f"{value!r} is not a valid UUID")
    uuid.UUID(value)
    return value


def validate_non_empty(value: str) -> str:
    if not value.strip():
        raise ValueError("value must not be empty")
    return value


def _parse_or_value_error(parser, value):
    try:
        return parser(value)
    except ResourceIdParseError as e:
        raise ValueError(e.message) from e


def validate_sql_container_id(value: str) -> str:
    return _parse_or_value_error(SqlContainerId.validate, value)


def validate_sql_role_definition_id(value: str) -> str:
    return _parse_or_value_error(SqlRoleDefinitionId.validate, value)


def validate_sql_server_id(value: str) -> str:
    return _parse_or_value_error(SqlServerId.validate, value)


def validate_key_vault_key_id(value: str) -> str:
    key = _parse_or_value_error(NestedItemId.parse, value)
    if key.nested_item_type != "keys":
        raise ValueError(f"{value!r} is not a key URL")
    if not key.vault_base_url.rstrip("/").endswith(KEY_VAULT_SUFFIX):
        raise ValueError(f"{value!r} is not a Key Vault key URL")
    return value


def validate_managed_hsm_key_id(value: str) -> str:
    key = _parse_or_value_error(NestedItemId.parse, value)
    if key.nested_item_type != "keys":
        raise ValueError(f"{value!r} is not a key URL")
    if not key.vault_base_url.rstrip("/").endswith(MANAGED_HSM_SUFFIX):
        raise ValueError(f"{value!r} is not a Managed HSM key URL")
    return value


def validate_storage_container_id(value: str) -> str:
    _parse_or_value_error(StorageContainerId.parse, value)
    return value


def validate_hdinsight_cluster_name(value: str) -> str:
    if not _HDINSIGHT_CLUSTER_NAME.match(value):
        raise ValueError(
            "cluster name must be 3 - 59 characters, start with a letter, end with "
            "a letter or number and contain only letters, numbers and hyphens"
        )
    return value


def validate_hdinsight_cluster_version(value: str) -> str:
    if not _HDINSIGHT_CLUSTER_VERSION.match(value):
        raise ValueError(f"{value!r} is not a valid cluster version (e.g. 4.0)")
    return value


CosmosAccountName = Annotated[str, AfterValidator(validate_cosmos_account_name)]
CosmosEntityName = Annotated[str, AfterValidator(validate_cosmos_entity_name)]
CosmosThroughput = Annotated[int, AfterValidator(validate_cosmos_throughput)]
CosmosMaxThroughput = Annotated[int, AfterValidator(validate_cosmos_max_throughput)]
ResourceGroupName = Annotated[str, AfterValidator(validate_resource_group_name)]
UUIDString = Annotated[str, AfterValidator(validate_uuid)]
NonEmptyString = Annotated[str, AfterValidator(validate_non_empty)]
SqlContainerIdString = Annotated[str, AfterValidator(validate_sql_container_id)]
SqlRoleDefinitionIdString = Annotated[
    str, AfterValidator(validate_sql_role_definition_id)
]
SqlServerIdString = Annotated[str, AfterValidator(validate_sql_server_id)]
KeyVaultKeyIdString = Annotated[str, AfterValidator(validate_key_vault_key_id)]
ManagedHsmKeyIdString = Annotated[str, AfterValidator(validate_managed_hsm_key_id)]
StorageContainerIdString = Annotated[
    str, AfterValidator(validate_storage_container_id)
]
HDInsightClusterName = Annotated[str, AfterValidator(validate_hdinsight_cluster_name)]
HDInsightClusterVersion = Annotated[
    str, AfterValidator(validate_hdinsight_cluster_version)
]


def normalize_location(value: str) -> str:
    """``West Europe`` -> ``westeurope``."""
    normalized = value.replace(" ", "").lower()
    if not normalized:
        raise ValueError("location must not be empty")
    return normalized


Location = Annotated[str, AfterValidator(normalize_location)]
