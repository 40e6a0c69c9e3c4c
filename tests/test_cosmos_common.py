"""
Tests for shared Cosmos DB helpers: capability detection and throughput adapters.
"""

from types import SimpleNamespace

import pytest
from azure.mgmt.cosmosdb.models import AutoscaleSettings, AutoscaleSettingsResource
from conftest import provisioned_account, serverless_account

from arm_provider.exceptions import ConfigurationValidationError
from arm_provider.handlers.cosmos.common import (
    check_for_change_from_autoscale_and_manual_throughput,
    clear_throughput,
    expand_autoscale_settings,
    expand_autoscale_settings_resource,
    expand_create_update_options,
    expand_throughput_update_parameters,
    flatten_autoscale_settings,
    has_throughput_change,
    is_serverless_capacity_mode,
    set_throughput_from_response,
)
from arm_provider.resource_data import ResourceData


class TestServerlessDetection:
    def test_serverless(self):
        assert is_serverless_capacity_mode(serverless_account())

    def test_provisioned(self):
        assert not is_serverless_capacity_mode(provisioned_account())

    @pytest.mark.parametrize(
        "account", [SimpleNamespace(capabilities=None), SimpleNamespace(capabilities=[])]
    )
    def test_no_capabilities(self, account):
        assert not is_serverless_capacity_mode(account)


class TestAutoscaleAdapters:
    def test_flatten_none_is_empty(self):
        assert flatten_autoscale_settings(None) == []

    def test_flatten_without_max_throughput_is_empty(self):
        assert flatten_autoscale_settings(AutoscaleSettings()) == []

    def test_flatten(self):
        assert flatten_autoscale_settings(AutoscaleSettings(max_throughput=4000)) == [
            {"max_throughput": 4000}
        ]

    @pytest.mark.parametrize("blocks", [None, [], [{}], [{"max_throughput": None}]])
    def test_expand_absent(self, blocks):
        assert expand_autoscale_settings(blocks) is None
        assert expand_autoscale_settings_resource(blocks) is None

    def test_expand_then_flatten(self):
        blocks = [{"max_throughput": 5000}]
        settings = expand_autoscale_settings(blocks)
        assert isinstance(settings, AutoscaleSettings)
        assert flatten_autoscale_settings(settings) == blocks
        resource = expand_autoscale_settings_resource(blocks)
        assert isinstance(resource, AutoscaleSettingsResource)
        assert resource.max_throughput == 5000


class TestThroughputHelpers:
    def test_create_options_manual(self):
        d = ResourceData("azurerm_cosmosdb_sql_database", config={"throughput": 400})
        options = expand_create_update_options(d)
        assert options.throughput == 400
        assert options.autoscale_settings is None

    def test_create_options_autoscale(self):
        d = ResourceData(
            "azurerm_cosmosdb_sql_database",
            config={"autoscale_settings": [{"max_throughput": 4000}]},
        )
        options = expand_create_update_options(d)
        assert options.throughput is None
        assert options.autoscale_settings.max_throughput == 4000

    def test_create_options_empty(self):
        options = expand_create_update_options(ResourceData("azurerm_cosmosdb_sql_database"))
        assert options.throughput is None
        assert options.autoscale_settings is None

    def test_switching_modes_rejected(self):
        d = ResourceData(
            "azurerm_cosmosdb_sql_database",
            config={"throughput": None, "autoscale_settings": [{"max_throughput": 4000}]},
            state={"id": "/x", "throughput": 400, "autoscale_settings": []},
        )
        with pytest.raises(ConfigurationValidationError, match="switching"):
            check_for_change_from_autoscale_and_manual_throughput(d)

    def test_single_change_allowed(self):
        d = ResourceData(
            "azurerm_cosmosdb_sql_database",
            config={"throughput": 500},
            state={"id": "/x", "throughput": 400, "autoscale_settings": []},
        )
        check_for_change_from_autoscale_and_manual_throughput(d)
        assert has_throughput_change(d)

    def test_update_parameters_autoscale_clears_manual(self):
        d = ResourceData(
            "azurerm_cosmosdb_sql_database",
            config={"autoscale_settings": [{"max_throughput": 6000}]},
            state={"id": "/x", "throughput": 400},
        )
        parameters = expand_throughput_update_parameters(d)
        assert parameters.resource.throughput is None
        assert parameters.resource.autoscale_settings.max_throughput == 6000

    def test_update_parameters_manual(self):
        d = ResourceData("azurerm_cosmosdb_sql_database", config={"throughput": 800})
        parameters = expand_throughput_update_parameters(d)
        assert parameters.resource.throughput == 800
        assert parameters.resource.autoscale_settings is None

    def test_set_from_response_and_clear(self):
        d = ResourceData("azurerm_cosmosdb_sql_database")
        response = SimpleNamespace(
            resource=SimpleNamespace(
                throughput=400, autoscale_settings=AutoscaleSettingsResource(max_throughput=4000)
            )
        )
        set_throughput_from_response(response, d)
        assert d.get("throughput") == 400
        assert d.get("autoscale_settings") == [{"max_throughput": 4000}]

        clear_throughput(d)
        assert d.get("throughput") is None
        assert d.get("autoscale_settings") == []
