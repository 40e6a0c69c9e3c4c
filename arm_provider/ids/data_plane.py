"""Data-plane identifiers: Key Vault / Managed HSM keys and storage containers.

These are URLs rather than Resource Manager paths, so they do not use the
segment table in ``base``.
"""

from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

from ..exceptions import ResourceIdParseError

KEY_VAULT_SUFFIX = ".vault.azure.net"
MANAGED_HSM_SUFFIX = ".managedhsm.azure.net"


@dataclass(frozen=True)
class NestedItemId:
    """A versioned Key Vault or Managed HSM object, ``https://{host}/keys/{name}/{version}``."""

    vault_base_url: str
    nested_item_type: str
    name: str
    version: Optional[str] = None

    @classmethod
    def parse(cls, value: str, require_version: bool = True) -> "NestedItemId":
        expected = "https://{vault}/keys/{name}/{version}"
        if not isinstance(value, str) or not value:
            raise ResourceIdParseError(
                "nested item ID must be a non-empty string",
                value=value if isinstance(value, str) else repr(value),
                expected=expected,
            )

        parsed = urlparse(value)
        if parsed.scheme != "https" or not parsed.netloc:
            raise ResourceIdParseError(
                f"parsing {value!r}: expected an https URL", value=value, expected=expected
            )

        path = parsed.path.strip("/").split("/")
        if len(path) not in (2, 3) or not all(path):
            raise ResourceIdParseError(
                f"parsing {value!r}: expected 2 or 3 path segments but got {len(path)}",
                value=value,
                expected=expected,
            )
        version = path[2] if len(path) == 3 else None
        if require_version and version is None:
            raise ResourceIdParseError(
                f"parsing {value!r}: a versioned key is required",
                value=value,
                expected=expected,
            )

        return cls(
            vault_base_url=f"https://{parsed.netloc}/",
            nested_item_type=path[0],
            name=path[1],
            version=version,
        )

    @property
    def vault_name(self) -> str:
        return urlparse(self.vault_base_url).netloc.split(".", 1)[0]

    @property
    def is_managed_hsm(self) -> bool:
        return urlparse(self.vault_base_url).netloc.endswith(MANAGED_HSM_SUFFIX)

    def id(self) -> str:
        parts = [self.vault_base_url.rstrip("/"), self.nested_item_type, self.name]
        if self.version:
            parts.append(self.version)
        return "/".join(parts)

    def server_key_name(self) -> str:
        """Name the key is registered under on a SQL server: ``{vault}_{key}_{version}``."""
        return f"{self.vault_name}_{self.name}_{self.version}"

    def __str__(self) -> str:
        return self.id()


@dataclass(frozen=True)
class StorageContainerId:
    """``https://{account}.blob.core.windows.net/{container}``."""

    account_name: str
    domain_suffix: str
    container_name: str

    @classmethod
    def parse(cls, value: str) -> "StorageContainerId":
        expected = "https://{account}.blob.{suffix}/{container}"
        parsed = urlparse(value) if isinstance(value, str) else None
        if parsed is None or parsed.scheme != "https" or not parsed.netloc:
            raise ResourceIdParseError(
                f"parsing {value!r}: expected an https URL",
                value=value if isinstance(value, str) else repr(value),
                expected=expected,
            )
        host_parts = parsed.netloc.split(".", 2)
        path = parsed.path.strip("/")
        if len(host_parts) != 3 or host_parts[1] != "blob" or not path or "/" in path:
            raise ResourceIdParseError(
                f"parsing {value!r} as a storage container URL",
                value=value,
                expected=expected,
            )
        return cls(host_parts[0], host_parts[2], path)

    @property
    def blob_endpoint(self) -> str:
        return f"{self.account_name}.blob.{self.domain_suffix}"

    def id(self) -> str:
        return f"https://{self.blob_endpoint}/{self.container_name}"

    def __str__(self) -> str:
        return self.id()
