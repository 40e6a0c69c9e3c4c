"""
Handler view of a single resource instance.

``ResourceData`` carries the planned configuration, the prior state recorded
by the orchestration layer, the instance ID and its timeouts. Handlers read
with ``get``/``get_ok``, write remote values back with ``set`` and mark the
instance gone with ``set_id("")``.
"""

import copy
from typing import Any, Dict, Mapping, Optional, Tuple

from .timeout_config import ResourceTimeouts


def _is_zero(value: Any) -> bool:
    return value is None or value == "" or value == 0 or value is False or (
        hasattr(value, "__len__") and len(value) == 0
    )


class ResourceData:
    def __init__(
        self,
        resource_type: str,
        config: Optional[Mapping[str, Any]] = None,
        state: Optional[Mapping[str, Any]] = None,
        id: str = "",
        timeouts: Optional[ResourceTimeouts] = None,
    ):
        self.resource_type = resource_type
        self._config: Dict[str, Any] = copy.deepcopy(dict(config or {}))
        self._prior: Dict[str, Any] = copy.deepcopy(dict(state or {}))
        self._prior.pop("id", None)
        self._values: Dict[str, Any] = {**copy.deepcopy(self._prior), **self._config}
        self._prior_id = id or (state or {}).get("id", "") or ""
        self._id = self._prior_id
        self.timeouts = timeouts or ResourceTimeouts()

    @property
    def id(self) -> str:
        return self._id

    def set_id(self, value: str) -> None:
        """Record the instance ID; an empty string means the object is gone."""
        self._id = value or ""

    def is_new_resource(self) -> bool:
        return not self._prior_id

    def get(self, key: str, default: Any = None) -> Any:
        value = self._values.get(key)
        return default if value is None else value

    def get_ok(self, key: str) -> Tuple[Any, bool]:
        """Return ``(value, ok)``; ``ok`` is False for unset or zero values."""
        value = self._values.get(key)
        return value, not _is_zero(value)

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value

    def has_change(self, key: str) -> bool:
        """True when the planned value for ``key`` differs from prior state."""
        if key not in self._config:
            return False
        return self._config.get(key) != self._prior.get(key)

    def has_changes(self, *keys: str) -> bool:
        return any(self.has_change(key) for key in keys)

    @property
    def prior(self) -> Dict[str, Any]:
        return copy.deepcopy(self._prior)

    def state(self) -> Dict[str, Any]:
        """Current values plus ``id``; empty once the instance is gone."""
        if not self._id:
            return {}
        return {"id": self._id, **copy.deepcopy(self._values)}

    def __repr__(self) -> str:
        return f"ResourceData({self.resource_type!r}, id={self._id!r})"
