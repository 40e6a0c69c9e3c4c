"""
Tests for Credential Provider Module

Tests credential selection and caching.
"""

from unittest.mock import Mock, patch

import pytest

from arm_provider.config_manager import AzureConfig
from arm_provider.credential_provider import CredentialProvider


@pytest.fixture
def sp_config():
    return AzureConfig(
        subscription_id="sub-1",
        tenant_id="tenant-1",
        client_id="client-1",
        client_secret="secret-1",
    )


@pytest.fixture
def default_config():
    return AzureConfig(
        subscription_id="sub-1", tenant_id=None, client_id=None, client_secret=None
    )


class TestCredentialProvider:
    """Tests for CredentialProvider class."""

    @patch("arm_provider.credential_provider.ClientSecretCredential")
    def test_service_principal(self, mock_cred_class, sp_config):
        """Test explicit service principal settings are used first."""
        mock_cred_class.return_value = Mock()
        provider = CredentialProvider(sp_config)

        credential = provider.get_credential()

        assert credential is mock_cred_class.return_value
        mock_cred_class.assert_called_once_with(
            tenant_id="tenant-1", client_id="client-1", client_secret="secret-1"
        )
        assert provider.get_credential_source() == "service_principal"

    @patch("arm_provider.credential_provider.DefaultAzureCredential")
    def test_default_chain(self, mock_default, default_config):
        """Test DefaultAzureCredential is the fallback."""
        provider = CredentialProvider(default_config)

        assert provider.get_credential() is mock_default.return_value
        assert provider.get_credential_source() == "default"

    @patch("arm_provider.credential_provider.ClientSecretCredential")
    def test_caching(self, mock_cred_class, sp_config):
        """Test the credential is resolved once and reused."""
        provider = CredentialProvider(sp_config)

        assert provider.get_credential() is provider.get_credential()
        assert mock_cred_class.call_count == 1

    @patch("arm_provider.credential_provider.ClientSecretCredential")
    def test_clear_cache(self, mock_cred_class, sp_config):
        mock_cred_class.side_effect = [Mock(), Mock()]
        provider = CredentialProvider(sp_config)

        first = provider.get_credential()
        provider.clear_cache()
        assert provider.get_credential_source() is None
        assert provider.get_credential() is not first
