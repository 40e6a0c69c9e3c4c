"""Data source azurerm_cosmosdb_restorable_database_accounts."""

from datetime import datetime
from typing import Annotated, Any, Dict, Iterable, List, Optional

from azure.core.exceptions import HttpResponseError

from ...exceptions import RemoteResourceNotFoundError
from ...ids import CosmosLocationId, RestorableDatabaseAccountId
from ...resource_data import ResourceData
from ...schema import Block, Computed, CosmosAccountName, Location, ResourceConfig
from .. import data_source
from ..base_handler import DataSourceHandler, enum_value, is_not_found


class RestorableLocationBlock(Block):
    creation_time: str = ""
    deletion_time: str = ""
    location: str = ""
    regional_database_account_instance_id: str = ""


class RestorableAccountBlock(Block):
    id: str = ""
    api_type: str = ""
    creation_time: str = ""
    deletion_time: str = ""
    restorable_locations: List[RestorableLocationBlock] = []


class RestorableDatabaseAccountsConfig(ResourceConfig):
    name: CosmosAccountName
    location: Location
    accounts: Annotated[Optional[List[RestorableAccountBlock]], Computed] = None


def _format_time(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def flatten_restorable_locations(locations: Optional[Iterable[Any]]) -> List[Dict[str, str]]:
    return [
        {
            "creation_time": _format_time(item.creation_time),
            "deletion_time": _format_time(item.deletion_time),
            "location": item.location_name or "",
            "regional_database_account_instance_id": item.regional_database_account_instance_id
            or "",
        }
        for item in locations or []
    ]


def flatten_restorable_accounts(
    accounts: Optional[Iterable[Any]], account_name: str
) -> List[Dict[str, Any]]:
    """Keep only the restorable instances of ``account_name``; never None."""
    result = []
    for item in accounts or []:
        if getattr(item, "account_name", None) != account_name:
            continue
        result.append(
            {
                "id": item.id or "",
                "api_type": enum_value(item.api_type) or "",
                "creation_time": _format_time(item.creation_time),
                "deletion_time": _format_time(item.deletion_time),
                "restorable_locations": flatten_restorable_locations(
                    item.restorable_locations
                ),
            }
        )
    return result


@data_source
class RestorableDatabaseAccountsDataSource(DataSourceHandler):
    TYPE_NAME = "azurerm_cosmosdb_restorable_database_accounts"
    SCHEMA = RestorableDatabaseAccountsConfig

    def read(self, d: ResourceData) -> None:
        location = d.get("location")
        name = d.get("name")
        id = RestorableDatabaseAccountId(self.subscription_id, location, "read")
        location_id = CosmosLocationId(self.subscription_id, location)

        try:
            accounts = list(
                self.clients.cosmos.restorable_database_accounts.list_by_location(location)
            )
        except HttpResponseError as e:
            if is_not_found(e):
                raise RemoteResourceNotFoundError(
                    f"{location_id} was not found",
                    resource_id=location_id.id(),
                    operation="read",
                    cause=e,
                ) from e
            raise self.remote_error(e, id, "read") from e

        d.set("location", location)
        d.set("accounts", flatten_restorable_accounts(accounts, name))
        d.set_id(id.id())
