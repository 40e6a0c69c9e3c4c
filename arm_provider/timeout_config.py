"""
Centralized timeout configuration for resource operations.

Each resource type declares default timeouts for create, read, update and
delete. The defaults below match the provider-wide defaults and can be
overridden via environment variables; a resource instance can override them
again through its own ``timeouts`` block.

Environment Variables:
    - ARM_PROVIDER_TIMEOUT_CREATE: Create operations (default: 1800s)
    - ARM_PROVIDER_TIMEOUT_READ: Read operations (default: 300s)
    - ARM_PROVIDER_TIMEOUT_UPDATE: Update operations (default: 1800s)
    - ARM_PROVIDER_TIMEOUT_DELETE: Delete operations (default: 1800s)
    - ARM_PROVIDER_POLL_INTERVAL: Seconds between status polls (default: 10s)
"""

import logging
import os
from dataclasses import dataclass, replace
from typing import Any, Dict, Final, Optional

logger = logging.getLogger(__name__)


def _get_timeout(env_var: str, default: int) -> int:
    """Get timeout value from environment variable or use default.

    Args:
        env_var: Environment variable name
        default: Default timeout in seconds

    Returns:
        Timeout value in seconds
    """
    value = os.environ.get(env_var)
    if value is not None:
        try:
            timeout = int(value)
            if timeout <= 0:
                logger.warning(
                    f"Invalid timeout value for {env_var}: {value}. "
                    f"Must be positive. Using default: {default}s"
                )
                return default
            return timeout
        except ValueError:
            logger.warning(
                f"Invalid timeout value for {env_var}: {value}. "
                f"Must be integer. Using default: {default}s"
            )
            return default
    return default


class Timeouts:
    """Provider-wide default timeouts, in seconds."""

    CREATE: Final[int] = _get_timeout("ARM_PROVIDER_TIMEOUT_CREATE", 30 * 60)
    READ: Final[int] = _get_timeout("ARM_PROVIDER_TIMEOUT_READ", 5 * 60)
    UPDATE: Final[int] = _get_timeout("ARM_PROVIDER_TIMEOUT_UPDATE", 30 * 60)
    DELETE: Final[int] = _get_timeout("ARM_PROVIDER_TIMEOUT_DELETE", 30 * 60)

    POLL_INTERVAL: Final[int] = _get_timeout("ARM_PROVIDER_POLL_INTERVAL", 10)


@dataclass(frozen=True)
class ResourceTimeouts:
    """Per-operation timeouts for one resource type."""

    create: float = Timeouts.CREATE
    read: float = Timeouts.READ
    update: float = Timeouts.UPDATE
    delete: float = Timeouts.DELETE

    def for_operation(self, operation: str) -> float:
        return float(getattr(self, operation, self.read))

    def merged(self, overrides: Optional[Dict[str, Any]]) -> "ResourceTimeouts":
        """Apply a ``timeouts`` block from resource configuration.

        Values may be seconds or duration strings such as ``"45m"``.
        """
        if not overrides:
            return self
        changes = {}
        for operation in ("create", "read", "update", "delete"):
            value = overrides.get(operation)
            if value is not None:
                changes[operation] = parse_duration(value)
        return replace(self, **changes)


_DURATION_UNITS = {"s": 1, "m": 60, "h": 3600}


def parse_duration(value: Any) -> float:
    """Parse ``90``, ``"90s"``, ``"30m"`` or ``"1h30m"`` into seconds."""
    if isinstance(value, (int, float)):
        if value <= 0:
            raise ValueError(f"Duration must be positive: {value}")
        return float(value)

    text = str(value).strip().lower()
    if not text:
        raise ValueError("Duration must not be empty")

    total = 0.0
    number = ""
    for char in text:
        if char.isdigit() or char == ".":
            number += char
        elif char in _DURATION_UNITS and number:
            total += float(number) * _DURATION_UNITS[char]
            number = ""
        else:
            raise ValueError(f"Invalid duration: {value!r}")
    if number:
        total += float(number)
    if total <= 0:
        raise ValueError(f"Duration must be positive: {value!r}")
    return total
