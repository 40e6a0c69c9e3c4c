"""Resource identifiers for Microsoft.Sql."""

from dataclasses import dataclass

from .base import RESOURCE_GROUP_SEGMENTS, ResourceId, provider, static, user

_SERVER_SEGMENTS = RESOURCE_GROUP_SEGMENTS + (
    static("providers"),
    provider("Microsoft.Sql"),
    static("servers"),
    user("server_name", "Server Name"),
)

# The encryption protector is a singleton child of the server.
CURRENT_ENCRYPTION_PROTECTOR = "current"


@dataclass(frozen=True)
class SqlServerId(ResourceId):
    subscription_id: str
    resource_group_name: str
    server_name: str

    DISPLAY_NAME = "Sql Server"
    SEGMENTS = _SERVER_SEGMENTS


@dataclass(frozen=True)
class EncryptionProtectorId(ResourceId):
    subscription_id: str
    resource_group_name: str
    server_name: str
    encryption_protector_name: str = CURRENT_ENCRYPTION_PROTECTOR

    DISPLAY_NAME = "Encryption Protector"
    SEGMENTS = _SERVER_SEGMENTS + (
        static("encryptionProtector"),
        user("encryption_protector_name", "Encryption Protector Name"),
    )

    def server_id(self) -> SqlServerId:
        return SqlServerId(self.subscription_id, self.resource_group_name, self.server_name)
