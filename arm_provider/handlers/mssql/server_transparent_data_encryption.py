"""Handler for azurerm_mssql_server_transparent_data_encryption.

The encryption protector is a singleton child of the server: it always
exists and defaults to a service-managed key. "Creating" this resource means
switching the protector to a customer-managed key (or pinning it to
service-managed), and deleting it switches it back to service-managed.
"""

import logging
from typing import Annotated, Any, Optional

from azure.core.exceptions import HttpResponseError
from azure.mgmt.sql.models import EncryptionProtector, ServerKey
from pydantic import model_validator

from ... import locks
from ...exceptions import ResourceAlreadyExistsError
from ...ids import EncryptionProtectorId, NestedItemId, SqlServerId
from ...ids.mssql import CURRENT_ENCRYPTION_PROTECTOR
from ...resource_data import ResourceData
from ...schema import (
    ForceNew,
    KeyVaultKeyIdString,
    ManagedHsmKeyIdString,
    ResourceConfig,
    SqlServerIdString,
)
from .. import resource
from ..base_handler import ResourceHandler, enum_value, is_not_found

logger = logging.getLogger(__name__)

SQL_SERVER_RESOURCE_NAME = "azurerm_mssql_server"

SERVICE_MANAGED = "ServiceManaged"
AZURE_KEY_VAULT = "AzureKeyVault"


class ServerTransparentDataEncryptionConfig(ResourceConfig):
    server_id: Annotated[SqlServerIdString, ForceNew]
    key_vault_key_id: Optional[KeyVaultKeyIdString] = None
    managed_hsm_key_id: Optional[ManagedHsmKeyIdString] = None
    auto_rotation_enabled: bool = False

    @model_validator(mode="after")
    def one_key_source(self) -> "ServerTransparentDataEncryptionConfig":
        if self.key_vault_key_id and self.managed_hsm_key_id:
            raise ValueError(
                "only one of key_vault_key_id and managed_hsm_key_id can be specified"
            )
        return self


def is_customer_managed(protector: Any) -> bool:
    return enum_value(getattr(protector, "server_key_type", None)) == AZURE_KEY_VAULT


@resource
class ServerTransparentDataEncryptionHandler(ResourceHandler):
    """Every server always has a protector, so only a customer-managed one blocks create.

    Creating a service-managed configuration twice therefore succeeds both times.
    """

    TYPE_NAME = "azurerm_mssql_server_transparent_data_encryption"
    SCHEMA = ServerTransparentDataEncryptionConfig
    ID_TYPE = EncryptionProtectorId

    def get_remote(self, resource_id: EncryptionProtectorId) -> Any:
        return self.clients.sql.encryption_protectors.get(
            resource_id.resource_group_name,
            resource_id.server_name,
            resource_id.encryption_protector_name,
        )

    def ensure_absent(self, resource_id: EncryptionProtectorId) -> None:
        """A service-managed protector is the server default and counts as absent."""
        try:
            protector = self.get_remote(resource_id)
        except HttpResponseError as e:
            if is_not_found(e):
                return
            raise self.remote_error(e, resource_id, "create") from e
        if is_customer_managed(protector):
            raise ResourceAlreadyExistsError(
                f"{resource_id} already uses customer-managed key "
                f"{protector.server_key_name!r} - to be managed via this provider it "
                f"needs to be imported into state",
                resource_type=self.TYPE_NAME,
                resource_id=resource_id.id(),
            )

    def _register_server_key(
        self, server: SqlServerId, key: NestedItemId, d: ResourceData, operation: str
    ) -> str:
        """Add the key to the server's key list and return its server key name."""
        key_name = key.server_key_name()
        with self.calling(server, operation):
            poller = self.clients.sql.server_keys.begin_create_or_update(
                server.resource_group_name,
                server.server_name,
                key_name,
                ServerKey(server_key_type=AZURE_KEY_VAULT, uri=key.id()),
            )
        self.wait_for(poller, d, operation, server)
        return key_name

    def _set_protector(self, d: ResourceData, operation: str) -> EncryptionProtectorId:
        server = SqlServerId.parse(d.get("server_id"))
        id = EncryptionProtectorId(
            server.subscription_id, server.resource_group_name, server.server_name
        )

        protector = EncryptionProtector(
            server_key_type=SERVICE_MANAGED,
            server_key_name=SERVICE_MANAGED,
            auto_rotation_enabled=bool(d.get("auto_rotation_enabled", False)),
        )
        key_id = d.get("key_vault_key_id") or d.get("managed_hsm_key_id")
        if key_id:
            key = NestedItemId.parse(key_id)
            protector.server_key_type = AZURE_KEY_VAULT
            protector.server_key_name = self._register_server_key(server, key, d, operation)

        with self.calling(id, operation):
            poller = self.clients.sql.encryption_protectors.begin_create_or_update(
                id.resource_group_name,
                id.server_name,
                CURRENT_ENCRYPTION_PROTECTOR,
                protector,
            )
        self.wait_for(poller, d, operation, id)
        return id

    def create(self, d: ResourceData) -> None:
        server = SqlServerId.parse(d.get("server_id"))
        with locks.locked(server.server_name, SQL_SERVER_RESOURCE_NAME):
            self.ensure_absent(
                EncryptionProtectorId(
                    server.subscription_id, server.resource_group_name, server.server_name
                )
            )
            id = self._set_protector(d, "create")
            d.set_id(id.id())
            self.refresh(d, "create")

    def update(self, d: ResourceData) -> None:
        server = SqlServerId.parse(d.get("server_id"))
        with locks.locked(server.server_name, SQL_SERVER_RESOURCE_NAME):
            self._set_protector(d, "update")
            self.refresh(d, "update")

    def read(self, d: ResourceData) -> None:
        id = EncryptionProtectorId.parse(d.id)
        try:
            protector = self.get_remote(id)
        except HttpResponseError as e:
            if is_not_found(e):
                self.mark_gone(d, id)
                return
            raise self.remote_error(e, id, "read") from e

        d.set("server_id", id.server_id().id())
        key_vault_key_id = ""
        managed_hsm_key_id = ""
        if is_customer_managed(protector) and protector.uri:
            key = NestedItemId.parse(protector.uri, require_version=False)
            if key.is_managed_hsm:
                managed_hsm_key_id = key.id()
            else:
                key_vault_key_id = key.id()
        d.set("key_vault_key_id", key_vault_key_id or None)
        d.set("managed_hsm_key_id", managed_hsm_key_id or None)
        d.set("auto_rotation_enabled", bool(protector.auto_rotation_enabled))

    def delete(self, d: ResourceData) -> None:
        """Revert the protector to the service-managed key."""
        id = EncryptionProtectorId.parse(d.id)
        protector = EncryptionProtector(
            server_key_type=SERVICE_MANAGED,
            server_key_name=SERVICE_MANAGED,
            auto_rotation_enabled=False,
        )
        with locks.locked(id.server_name, SQL_SERVER_RESOURCE_NAME):
            self.delete_tolerating_not_found(
                lambda: self.clients.sql.encryption_protectors.begin_create_or_update(
                    id.resource_group_name,
                    id.server_name,
                    CURRENT_ENCRYPTION_PROTECTOR,
                    protector,
                ),
                d,
                id,
            )
