"""Shared Cosmos DB helpers: capability detection and throughput expand/flatten."""

from typing import Any, Dict, List, Optional

from azure.mgmt.cosmosdb.models import (
    AutoscaleSettings,
    AutoscaleSettingsResource,
    CreateUpdateOptions,
    ThroughputSettingsResource,
    ThroughputSettingsUpdateParameters,
)

from ...exceptions import ConfigurationValidationError
from ...resource_data import ResourceData

SERVERLESS_CAPABILITY = "EnableServerless"

# Lock kind shared by every handler that serializes on a database account.
COSMOS_ACCOUNT_RESOURCE_NAME = "azurerm_cosmosdb_account"


def is_serverless_capacity_mode(account: Any) -> bool:
    """True when the account's capability list contains ``EnableServerless``.

    Throughput cannot be read or set on serverless accounts; calling the
    throughput API there always fails.
    """
    for capability in getattr(account, "capabilities", None) or []:
        if getattr(capability, "name", None) == SERVERLESS_CAPABILITY:
            return True
    return False


def _max_throughput(blocks: Optional[List[Dict[str, Any]]]) -> Optional[int]:
    if not blocks:
        return None
    block = blocks[0] or {}
    return block.get("max_throughput") or None


def expand_autoscale_settings(
    blocks: Optional[List[Dict[str, Any]]],
) -> Optional[AutoscaleSettings]:
    """``autoscale_settings`` block -> create options DTO; absent block -> None."""
    max_throughput = _max_throughput(blocks)
    if max_throughput is None:
        return None
    return AutoscaleSettings(max_throughput=max_throughput)


def expand_autoscale_settings_resource(
    blocks: Optional[List[Dict[str, Any]]],
) -> Optional[AutoscaleSettingsResource]:
    """``autoscale_settings`` block -> throughput update DTO; absent block -> None."""
    max_throughput = _max_throughput(blocks)
    if max_throughput is None:
        return None
    return AutoscaleSettingsResource(max_throughput=max_throughput)


def flatten_autoscale_settings(settings: Any) -> List[Dict[str, Any]]:
    """Autoscale DTO -> ``autoscale_settings`` block list; never None."""
    if settings is None or getattr(settings, "max_throughput", None) is None:
        return []
    return [{"max_throughput": settings.max_throughput}]


def expand_create_update_options(d: ResourceData) -> CreateUpdateOptions:
    options = CreateUpdateOptions()
    throughput, has_throughput = d.get_ok("throughput")
    if has_throughput:
        options.throughput = int(throughput)
    autoscale, has_autoscale = d.get_ok("autoscale_settings")
    if has_autoscale:
        options.autoscale_settings = expand_autoscale_settings(autoscale)
    return options


def check_for_change_from_autoscale_and_manual_throughput(d: ResourceData) -> None:
    if d.has_change("autoscale_settings") and d.has_change("throughput"):
        raise ConfigurationValidationError(
            "switching between autoscale and manually provisioned throughput is "
            "not supported at this time",
            resource_type=d.resource_type,
            validation_errors=["throughput", "autoscale_settings"],
        )


def has_throughput_change(d: ResourceData) -> bool:
    return d.has_changes("throughput", "autoscale_settings")


def expand_throughput_update_parameters(
    d: ResourceData,
) -> ThroughputSettingsUpdateParameters:
    """Build the throughput update body; autoscale wins over a manual value."""
    resource = ThroughputSettingsResource()
    throughput, has_throughput = d.get_ok("throughput")
    if has_throughput:
        resource.throughput = int(throughput)
    autoscale, has_autoscale = d.get_ok("autoscale_settings")
    if has_autoscale:
        resource.throughput = None
        resource.autoscale_settings = expand_autoscale_settings_resource(autoscale)
    return ThroughputSettingsUpdateParameters(resource=resource)


def set_throughput_from_response(response: Any, d: ResourceData) -> None:
    resource = getattr(response, "resource", None)
    d.set("throughput", getattr(resource, "throughput", None))
    d.set(
        "autoscale_settings",
        flatten_autoscale_settings(getattr(resource, "autoscale_settings", None)),
    )


def clear_throughput(d: ResourceData) -> None:
    d.set("throughput", None)
    d.set("autoscale_settings", [])
