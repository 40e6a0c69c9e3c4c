"""
Resource Manager client factory.

The provider talks to the management plane exclusively through the vendor's
generated clients; this module owns their construction so handlers only see
``clients.cosmos``, ``clients.sql`` and ``clients.hdinsight``.
"""

import logging
from typing import Any, Optional

from azure.core.credentials import TokenCredential
from azure.mgmt.cosmosdb import CosmosDBManagementClient
from azure.mgmt.hdinsight import HDInsightManagementClient
from azure.mgmt.sql import SqlManagementClient

from .config_manager import ProviderConfig
from .credential_provider import CredentialProvider

logger = logging.getLogger(__name__)


class ProviderClients:
    """Lazily constructed management clients for one subscription.

    Tests pass pre-built fakes through the keyword arguments; any client not
    supplied is created on first access.
    """

    def __init__(
        self,
        subscription_id: str,
        credential: Optional[TokenCredential] = None,
        cosmos: Optional[Any] = None,
        sql: Optional[Any] = None,
        hdinsight: Optional[Any] = None,
    ):
        self.subscription_id = subscription_id
        self._credential = credential
        self._cosmos = cosmos
        self._sql = sql
        self._hdinsight = hdinsight

    @classmethod
    def from_config(cls, config: ProviderConfig) -> "ProviderClients":
        credential = CredentialProvider(config.azure).get_credential()
        return cls(config.azure.subscription_id, credential=credential)

    def _require_credential(self) -> TokenCredential:
        if self._credential is None:
            raise RuntimeError(
                "No credential configured; build clients with ProviderClients.from_config()"
            )
        return self._credential

    @property
    def cosmos(self) -> CosmosDBManagementClient:
        """Get or create CosmosDBManagementClient."""
        if self._cosmos is None:
            logger.debug(f"Creating CosmosDBManagementClient for {self.subscription_id}")
            self._cosmos = CosmosDBManagementClient(
                credential=self._require_credential(),
                subscription_id=self.subscription_id,
            )
        return self._cosmos

    @property
    def sql(self) -> SqlManagementClient:
        """Get or create SqlManagementClient."""
        if self._sql is None:
            logger.debug(f"Creating SqlManagementClient for {self.subscription_id}")
            self._sql = SqlManagementClient(
                credential=self._require_credential(),
                subscription_id=self.subscription_id,
            )
        return self._sql

    @property
    def hdinsight(self) -> HDInsightManagementClient:
        """Get or create HDInsightManagementClient."""
        if self._hdinsight is None:
            logger.debug(f"Creating HDInsightManagementClient for {self.subscription_id}")
            self._hdinsight = HDInsightManagementClient(
                credential=self._require_credential(),
                subscription_id=self.subscription_id,
            )
        return self._hdinsight
