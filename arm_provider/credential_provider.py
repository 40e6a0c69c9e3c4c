"""
Credential resolution for Resource Manager clients.

Priority chain:
1. Explicit service principal (ARM_TENANT_ID / ARM_CLIENT_ID / ARM_CLIENT_SECRET)
2. DefaultAzureCredential (environment, managed identity, Azure CLI, ...)

The resolved credential is cached for the life of the provider process.
"""

import logging
import threading
from typing import Optional

from azure.core.credentials import TokenCredential
from azure.identity import ClientSecretCredential, DefaultAzureCredential

from .config_manager import AzureConfig

logger = logging.getLogger(__name__)


class CredentialProvider:
    """
    Resolves and caches the credential used by every management client.

    Example:
        >>> provider = CredentialProvider(AzureConfig(subscription_id="..."))
        >>> credential = provider.get_credential()
    """

    def __init__(self, config: AzureConfig):
        self.config = config
        self._credential_cache: Optional[TokenCredential] = None
        self._credential_source: Optional[str] = None
        self._lock = threading.Lock()

    def get_credential(self) -> TokenCredential:
        """Get the Azure credential, resolving it on first use.

        Thread-safe; subsequent calls return the cached credential.
        """
        with self._lock:
            if self._credential_cache is not None:
                return self._credential_cache

            if self.config.uses_service_principal():
                logger.info(
                    f"Using service principal {self.config.client_id} "
                    f"in tenant {self.config.tenant_id}"
                )
                credential: TokenCredential = ClientSecretCredential(
                    tenant_id=self.config.tenant_id,  # type: ignore[arg-type]
                    client_id=self.config.client_id,  # type: ignore[arg-type]
                    client_secret=self.config.client_secret,  # type: ignore[arg-type]
                )
                source = "service_principal"
            else:
                logger.info("Using DefaultAzureCredential")
                credential = DefaultAzureCredential()
                source = "default"

            self._credential_cache = credential
            self._credential_source = source
            return credential

    def get_credential_source(self) -> Optional[str]:
        """Return "service_principal", "default", or None when unresolved."""
        return self._credential_source

    def clear_cache(self) -> None:
        """Clear cached credential. Next get_credential() call will re-resolve."""
        with self._lock:
            self._credential_cache = None
            self._credential_source = None
            logger.debug("Credential cache cleared")
