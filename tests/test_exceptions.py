"""
Tests for the provider exception hierarchy.
"""

from arm_provider.exceptions import (
    ArmProviderError,
    ConfigurationValidationError,
    MissingConfigurationError,
    OperationCancelledError,
    OperationTimeoutError,
    RemoteOperationError,
    ResourceAlreadyExistsError,
    UnknownResourceTypeError,
)


def test_str_includes_code_and_context():
    error = ArmProviderError(
        "boom", error_code="E1", context={"resource_id": "/x"}, recovery_suggestion="retry"
    )
    text = str(error)
    assert text.startswith("[E1] boom")
    assert "resource_id=/x" in text
    assert "(suggestion: retry)" in text


def test_to_dict():
    cause = ValueError("bad")
    data = RemoteOperationError(
        "create failed", resource_id="/x", operation="create", status_code=409, cause=cause
    ).to_dict()

    assert data["error_type"] == "RemoteOperationError"
    assert data["error_code"] == "REMOTE_OPERATION_FAILED"
    assert data["context"]["operation"] == "create"
    assert data["cause"] == "bad"


def test_already_exists_suggests_import():
    error = ResourceAlreadyExistsError(
        "exists", resource_type="azurerm_cosmosdb_sql_trigger", resource_id="/x"
    )
    assert error.context == {
        "resource_id": "/x",
        "operation": "create",
        "resource_type": "azurerm_cosmosdb_sql_trigger",
    }
    assert "Import the existing resource" in error.recovery_suggestion


def test_timeout_context():
    error = OperationTimeoutError("slow", resource_id="/x", operation="delete", timeout_value=90)
    assert error.context["timeout"] == "90s"
    assert error.recovery_suggestion

    cancelled = OperationCancelledError("stop", resource_id="/x", operation="delete")
    assert isinstance(cancelled, OperationTimeoutError)
    assert cancelled.error_code == "OPERATION_CANCELLED"


def test_configuration_errors():
    missing = MissingConfigurationError("missing", missing_keys=["ARM_SUBSCRIPTION_ID"])
    assert missing.recovery_suggestion == "Set required configuration: ARM_SUBSCRIPTION_ID"

    unknown = UnknownResourceTypeError("azurerm_nope")
    assert unknown.message == "No handler registered for 'azurerm_nope'"

    invalid = ConfigurationValidationError(
        "invalid", resource_type="azurerm_nope", validation_errors=["name: required"]
    )
    assert invalid.validation_errors == ["name: required"]
    assert invalid.error_code == "INVALID_RESOURCE_CONFIG"
