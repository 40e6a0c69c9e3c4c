"""
Exception hierarchy for the Azure Resource Manager provider.

Every error raised out of a handler carries the resource identifier and the
operation that was attempted (create, read, update, delete) in its context,
so the orchestration layer can report it without re-deriving either.
"""

from typing import Any, Dict, List, Optional


class ArmProviderError(Exception):
    """
    Base exception class for all provider errors.

    Provides structured error information including context, error codes,
    and optional recovery suggestions.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        recovery_suggestion: Optional[str] = None,
    ) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error message
            error_code: Optional error code for programmatic handling
            context: Optional dictionary with error context
            cause: Optional underlying exception that caused this error
            recovery_suggestion: Optional suggestion for error recovery
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}
        self.cause = cause
        self.recovery_suggestion = recovery_suggestion

    def __str__(self) -> str:
        """Return a formatted error message with context."""
        result = self.message
        if self.error_code:
            result = f"[{self.error_code}] {result}"
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            result += f" (context: {context_str})"
        if self.cause:
            result += f" (caused by: {self.cause})"
        if self.recovery_suggestion:
            result += f" (suggestion: {self.recovery_suggestion})"
        return result

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "context": self.context,
            "cause": str(self.cause) if self.cause else None,
            "recovery_suggestion": self.recovery_suggestion,
        }


def _resource_context(
    kwargs: Dict[str, Any],
    resource_id: Optional[str] = None,
    operation: Optional[str] = None,
) -> Dict[str, Any]:
    context = kwargs.get("context") or {}
    if resource_id:
        context["resource_id"] = resource_id
    if operation:
        context["operation"] = operation
    return context


# Local validation errors (raised before any network call)
class ValidationError(ArmProviderError):
    """Base class for validation errors."""

    pass


class ConfigurationValidationError(ValidationError):
    """Raised when a resource configuration fails schema validation."""

    def __init__(
        self,
        message: str,
        resource_type: Optional[str] = None,
        validation_errors: Optional[List[str]] = None,
        **kwargs: Any,
    ) -> None:
        context = kwargs.get("context") or {}
        if resource_type:
            context["resource_type"] = resource_type
        if validation_errors:
            context["validation_errors"] = validation_errors
        kwargs["context"] = context
        kwargs.setdefault("error_code", "INVALID_RESOURCE_CONFIG")
        super().__init__(message, **kwargs)
        self.validation_errors = validation_errors or []


class ResourceIdParseError(ValidationError):
    """Raised when a string cannot be parsed as the expected resource ID."""

    def __init__(
        self,
        message: str,
        value: Optional[str] = None,
        expected: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        context = kwargs.get("context") or {}
        if value is not None:
            context["value"] = value
        if expected:
            context["expected"] = expected
        kwargs["context"] = context
        kwargs.setdefault("error_code", "INVALID_RESOURCE_ID")
        super().__init__(message, **kwargs)


# Remote errors
class RemoteError(ArmProviderError):
    """Base class for errors reported by the Resource Manager API."""

    pass


class ResourceAlreadyExistsError(RemoteError):
    """Raised by create when the target already exists remotely."""

    def __init__(
        self,
        message: str,
        resource_type: Optional[str] = None,
        resource_id: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        context = _resource_context(kwargs, resource_id, "create")
        if resource_type:
            context["resource_type"] = resource_type
        kwargs["context"] = context
        kwargs.setdefault("error_code", "RESOURCE_ALREADY_EXISTS")
        kwargs.setdefault(
            "recovery_suggestion",
            f"Import the existing resource into state instead of creating it"
            f" ({resource_type} {resource_id})"
            if resource_type and resource_id
            else "Import the existing resource into state instead of creating it",
        )
        super().__init__(message, **kwargs)
        self.resource_type = resource_type
        self.resource_id = resource_id


class RemoteResourceNotFoundError(RemoteError):
    """Raised when a resource that must exist could not be found."""

    def __init__(
        self,
        message: str,
        resource_id: Optional[str] = None,
        operation: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        kwargs["context"] = _resource_context(kwargs, resource_id, operation)
        kwargs.setdefault("error_code", "RESOURCE_NOT_FOUND")
        super().__init__(message, **kwargs)
        self.resource_id = resource_id
        self.operation = operation


class RemoteOperationError(RemoteError):
    """Raised when a Resource Manager call fails."""

    def __init__(
        self,
        message: str,
        resource_id: Optional[str] = None,
        operation: Optional[str] = None,
        status_code: Optional[int] = None,
        **kwargs: Any,
    ) -> None:
        context = _resource_context(kwargs, resource_id, operation)
        if status_code is not None:
            context["status_code"] = status_code
        kwargs["context"] = context
        kwargs.setdefault("error_code", "REMOTE_OPERATION_FAILED")
        super().__init__(message, **kwargs)
        self.resource_id = resource_id
        self.operation = operation
        self.status_code = status_code


# Long-running operation errors
class OperationFailedError(RemoteError):
    """Raised when a long-running operation reaches a failed terminal state."""

    def __init__(
        self,
        message: str,
        resource_id: Optional[str] = None,
        operation: Optional[str] = None,
        status: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        context = _resource_context(kwargs, resource_id, operation)
        if status:
            context["status"] = status
        kwargs["context"] = context
        kwargs.setdefault("error_code", "OPERATION_FAILED")
        super().__init__(message, **kwargs)
        self.resource_id = resource_id
        self.operation = operation
        self.status = status


class OperationTimeoutError(ArmProviderError):
    """Raised when waiting for a long-running operation exceeds its timeout."""

    def __init__(
        self,
        message: str,
        resource_id: Optional[str] = None,
        operation: Optional[str] = None,
        timeout_value: Optional[float] = None,
        **kwargs: Any,
    ) -> None:
        context = _resource_context(kwargs, resource_id, operation)
        if timeout_value is not None:
            context["timeout"] = f"{timeout_value:g}s"
        kwargs["context"] = context
        kwargs.setdefault("error_code", "OPERATION_TIMEOUT")
        kwargs.setdefault(
            "recovery_suggestion",
            "The remote operation may still complete; re-read the resource before retrying",
        )
        super().__init__(message, **kwargs)
        self.resource_id = resource_id
        self.operation = operation
        self.timeout_value = timeout_value


class OperationCancelledError(OperationTimeoutError):
    """Raised when waiting is abandoned because the caller cancelled."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        kwargs.setdefault("error_code", "OPERATION_CANCELLED")
        super().__init__(message, **kwargs)


# Configuration-related exceptions
class ConfigurationError(ArmProviderError):
    """Base class for provider configuration errors."""

    pass


class MissingConfigurationError(ConfigurationError):
    """Raised when required provider configuration is missing."""

    def __init__(
        self, message: str, missing_keys: Optional[List[str]] = None, **kwargs: Any
    ) -> None:
        context = kwargs.get("context") or {}
        if missing_keys:
            context["missing_keys"] = missing_keys
        kwargs["context"] = context
        kwargs.setdefault("error_code", "MISSING_CONFIG")
        kwargs.setdefault(
            "recovery_suggestion",
            f"Set required configuration: {', '.join(missing_keys)}"
            if missing_keys
            else "Set required configuration",
        )
        super().__init__(message, **kwargs)


class UnknownResourceTypeError(ConfigurationError):
    """Raised when no handler is registered for a resource type."""

    def __init__(self, resource_type: str, **kwargs: Any) -> None:
        context = kwargs.get("context") or {}
        context["resource_type"] = resource_type
        kwargs["context"] = context
        kwargs.setdefault("error_code", "UNKNOWN_RESOURCE_TYPE")
        super().__init__(f"No handler registered for {resource_type!r}", **kwargs)
