"""
Tests for azurerm_mssql_server_transparent_data_encryption.
"""

from types import SimpleNamespace

import pytest
from conftest import SERVER_ID, FakePoller, http_error, not_found

from arm_provider.exceptions import (
    ConfigurationValidationError,
    RemoteOperationError,
    ResourceAlreadyExistsError,
)
from arm_provider.handlers.mssql.server_transparent_data_encryption import (
    ServerTransparentDataEncryptionConfig,
    ServerTransparentDataEncryptionHandler,
)
from arm_provider.resource_data import ResourceData
from arm_provider.schema import parse_config

TYPE = "azurerm_mssql_server_transparent_data_encryption"
PROTECTOR_ID = f"{SERVER_ID}/encryptionProtector/current"
KV_KEY = "https://vault1.vault.azure.net/keys/key1/v1"
HSM_KEY = "https://hsm1.managedhsm.azure.net/keys/key1/v1"


def service_managed():
    return SimpleNamespace(
        server_key_type=SimpleNamespace(value="ServiceManaged"),
        server_key_name="ServiceManaged",
        uri=None,
        auto_rotation_enabled=False,
    )


def customer_managed(uri=KV_KEY, auto_rotation_enabled=False):
    return SimpleNamespace(
        server_key_type="AzureKeyVault",
        server_key_name="vault1_key1_v1",
        uri=uri,
        auto_rotation_enabled=auto_rotation_enabled,
    )


@pytest.fixture
def handler(clients, clock):
    return ServerTransparentDataEncryptionHandler(clients, poll_interval=1, clock=clock)


@pytest.fixture
def sql(clients):
    clients.sql.server_keys.begin_create_or_update.return_value = FakePoller()
    clients.sql.encryption_protectors.begin_create_or_update.return_value = FakePoller()
    return clients.sql


class TestConfig:
    def test_key_sources_are_exclusive(self):
        with pytest.raises(ConfigurationValidationError, match="only one of"):
            parse_config(
                ServerTransparentDataEncryptionConfig,
                {"server_id": SERVER_ID, "key_vault_key_id": KV_KEY, "managed_hsm_key_id": HSM_KEY},
            )

    def test_key_vault_field_rejects_hsm_key(self):
        with pytest.raises(ConfigurationValidationError):
            parse_config(
                ServerTransparentDataEncryptionConfig,
                {"server_id": SERVER_ID, "key_vault_key_id": HSM_KEY},
            )


class TestCreate:
    def test_customer_managed_key(self, handler, sql):
        sql.encryption_protectors.get.side_effect = [service_managed(), customer_managed()]

        d = ResourceData(TYPE, config={"server_id": SERVER_ID, "key_vault_key_id": KV_KEY})
        handler.create(d)

        assert d.id == PROTECTOR_ID
        key_args = sql.server_keys.begin_create_or_update.call_args[0]
        assert key_args[:3] == ("rg1", "sql1", "vault1_key1_v1")
        assert key_args[3].server_key_type == "AzureKeyVault"
        assert key_args[3].uri == KV_KEY

        protector_args = sql.encryption_protectors.begin_create_or_update.call_args[0]
        assert protector_args[:3] == ("rg1", "sql1", "current")
        assert protector_args[3].server_key_type == "AzureKeyVault"
        assert protector_args[3].server_key_name == "vault1_key1_v1"
        assert d.get("key_vault_key_id") == KV_KEY
        assert d.get("managed_hsm_key_id") is None

    def test_service_managed(self, handler, sql):
        sql.encryption_protectors.get.return_value = service_managed()

        d = ResourceData(TYPE, config={"server_id": SERVER_ID})
        handler.create(d)

        sql.server_keys.begin_create_or_update.assert_not_called()
        protector = sql.encryption_protectors.begin_create_or_update.call_args[0][3]
        assert protector.server_key_type == "ServiceManaged"
        assert d.get("key_vault_key_id") is None

    def test_service_managed_create_twice_succeeds(self, handler, sql):
        sql.encryption_protectors.get.return_value = service_managed()

        for _ in range(2):
            d = ResourceData(TYPE, config={"server_id": SERVER_ID})
            handler.create(d)
            assert d.id == PROTECTOR_ID

        assert sql.encryption_protectors.begin_create_or_update.call_count == 2

    def test_managed_hsm_key(self, handler, sql):
        sql.encryption_protectors.get.side_effect = [
            service_managed(),
            customer_managed(uri=HSM_KEY),
        ]

        d = ResourceData(TYPE, config={"server_id": SERVER_ID, "managed_hsm_key_id": HSM_KEY})
        handler.create(d)

        assert sql.server_keys.begin_create_or_update.call_args[0][2] == "hsm1_key1_v1"
        assert d.get("managed_hsm_key_id") == HSM_KEY
        assert d.get("key_vault_key_id") is None

    def test_existing_customer_managed_requires_import(self, handler, sql):
        sql.encryption_protectors.get.return_value = customer_managed()

        with pytest.raises(ResourceAlreadyExistsError):
            handler.create(
                ResourceData(TYPE, config={"server_id": SERVER_ID, "key_vault_key_id": KV_KEY})
            )
        sql.encryption_protectors.begin_create_or_update.assert_not_called()

    def test_existence_check_failure_is_fatal(self, handler, sql):
        sql.encryption_protectors.get.side_effect = http_error(500)

        with pytest.raises(RemoteOperationError):
            handler.create(ResourceData(TYPE, config={"server_id": SERVER_ID}))


class TestReadUpdateDelete:
    def test_read_versionless_uri(self, handler, sql):
        sql.encryption_protectors.get.return_value = customer_managed(
            uri="https://vault1.vault.azure.net/keys/key1", auto_rotation_enabled=True
        )

        d = ResourceData(TYPE, state={"id": PROTECTOR_ID})
        handler.read(d)

        assert d.get("server_id") == SERVER_ID
        assert d.get("key_vault_key_id") == "https://vault1.vault.azure.net/keys/key1"
        assert d.get("auto_rotation_enabled") is True

    def test_read_not_found(self, handler, sql):
        sql.encryption_protectors.get.side_effect = not_found()

        d = ResourceData(TYPE, state={"id": PROTECTOR_ID})
        handler.read(d)

        assert d.id == ""

    def test_update_enables_auto_rotation(self, handler, sql):
        sql.encryption_protectors.get.return_value = customer_managed(auto_rotation_enabled=True)

        d = ResourceData(
            TYPE,
            config={"server_id": SERVER_ID, "key_vault_key_id": KV_KEY, "auto_rotation_enabled": True},
            state={"id": PROTECTOR_ID, "server_id": SERVER_ID, "key_vault_key_id": KV_KEY},
        )
        handler.update(d)

        assert sql.encryption_protectors.begin_create_or_update.call_args[0][3].auto_rotation_enabled
        assert d.get("auto_rotation_enabled") is True

    def test_delete_reverts_to_service_managed(self, handler, sql):
        d = ResourceData(TYPE, state={"id": PROTECTOR_ID})
        handler.delete(d)

        protector = sql.encryption_protectors.begin_create_or_update.call_args[0][3]
        assert protector.server_key_type == "ServiceManaged"
        assert d.id == ""

    def test_delete_server_gone(self, handler, sql):
        sql.encryption_protectors.begin_create_or_update.side_effect = not_found()

        d = ResourceData(TYPE, state={"id": PROTECTOR_ID})
        handler.delete(d)

        assert d.id == ""
