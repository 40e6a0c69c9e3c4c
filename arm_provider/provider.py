"""
Provider entry point used by the orchestration layer.

``Provider`` resolves a handler for an ``azurerm_*`` type, validates the raw
configuration against the handler's schema, builds the ``ResourceData`` the
handler works on and returns the resulting state as a plain dictionary.
State is never cached here; every call reaches the remote API.
"""

import logging
import threading
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .clients import ProviderClients
from .config_manager import ProviderConfig
from .exceptions import (
    ConfigurationValidationError,
    RemoteResourceNotFoundError,
    UnknownResourceTypeError,
)
from .handlers import HandlerRegistry
from .handlers.base_handler import DataSourceHandler, HandlerBase, ResourceHandler
from .polling import Clock
from .resource_data import ResourceData
from .schema import computed_fields, describe_schema, parse_config
from .timeout_config import ResourceTimeouts, parse_duration

logger = logging.getLogger(__name__)

TIMEOUTS_KEY = "timeouts"
TIMEOUT_OPERATIONS = ("create", "read", "update", "delete")


class Provider:
    """
    CRUD entry points for every registered resource and data source type.

    Example:
        >>> provider = Provider.from_config(create_config_from_env())
        >>> state = provider.create("azurerm_cosmosdb_sql_trigger", {...})
        >>> provider.delete("azurerm_cosmosdb_sql_trigger", state)
    """

    def __init__(
        self,
        clients: ProviderClients,
        poll_interval: Optional[float] = None,
        clock: Optional[Clock] = None,
        cancel_event: Optional[threading.Event] = None,
        default_timeouts: Optional[ResourceTimeouts] = None,
    ):
        self.clients = clients
        self.poll_interval = poll_interval
        self.clock = clock
        self.cancel_event = cancel_event
        self.default_timeouts = default_timeouts or ResourceTimeouts()

    @classmethod
    def from_config(cls, config: ProviderConfig) -> "Provider":
        polling = config.polling
        return cls(
            ProviderClients.from_config(config),
            poll_interval=polling.interval,
            default_timeouts=ResourceTimeouts(
                create=polling.create_timeout,
                read=polling.read_timeout,
                update=polling.update_timeout,
                delete=polling.delete_timeout,
            ),
        )

    # Registry

    def resource_types(self) -> List[str]:
        return HandlerRegistry.resource_types()

    def data_source_types(self) -> List[str]:
        return HandlerRegistry.data_source_types()

    def _handler_kwargs(self) -> Dict[str, Any]:
        return {
            "poll_interval": self.poll_interval,
            "clock": self.clock,
            "cancel_event": self.cancel_event,
        }

    def resource_handler(self, resource_type: str) -> ResourceHandler:
        handler_class = HandlerRegistry.get_resource(resource_type)
        if handler_class is None:
            raise UnknownResourceTypeError(resource_type)
        return handler_class(self.clients, **self._handler_kwargs())

    def data_source_handler(self, data_source_type: str) -> DataSourceHandler:
        handler_class = HandlerRegistry.get_data_source(data_source_type)
        if handler_class is None:
            raise UnknownResourceTypeError(data_source_type)
        return handler_class(self.clients, **self._handler_kwargs())

    def schema(self, type_name: str, data_source: bool = False) -> Dict[str, Any]:
        """Published schema for a resource (or data source) type."""
        handler_class = (
            HandlerRegistry.get_data_source(type_name)
            if data_source
            else HandlerRegistry.get_resource(type_name)
        )
        if handler_class is None:
            raise UnknownResourceTypeError(type_name)
        return describe_schema(handler_class.SCHEMA)

    # Configuration

    def _timeouts(
        self, handler: HandlerBase, overrides: Optional[Mapping[str, Any]]
    ) -> ResourceTimeouts:
        base = (
            handler.TIMEOUTS
            if handler.TIMEOUTS is not HandlerBase.TIMEOUTS
            else self.default_timeouts
        )
        if not overrides:
            return base
        if not isinstance(overrides, Mapping):
            errors = [f"{TIMEOUTS_KEY}: expected a mapping of operation to duration"]
        else:
            errors = []
            for operation, value in overrides.items():
                if value is None:
                    continue
                if operation not in TIMEOUT_OPERATIONS:
                    errors.append(f"{TIMEOUTS_KEY}.{operation}: unknown operation")
                    continue
                try:
                    parse_duration(value)
                except ValueError as e:
                    errors.append(f"{TIMEOUTS_KEY}.{operation}: {e}")
        if errors:
            raise ConfigurationValidationError(
                f"Invalid configuration for {handler.TYPE_NAME}: " + "; ".join(errors),
                resource_type=handler.TYPE_NAME,
                validation_errors=errors,
            )
        return base.merged(dict(overrides))

    def plan(
        self, handler: HandlerBase, raw: Mapping[str, Any]
    ) -> Tuple[Dict[str, Any], ResourceTimeouts]:
        """Validate ``raw`` and return the planned values plus the timeouts.

        Computed fields the configuration leaves unset are dropped so they keep
        whatever value the remote object reports.
        """
        raw = dict(raw)
        overrides = raw.pop(TIMEOUTS_KEY, None)
        config = parse_config(handler.SCHEMA, raw, handler.TYPE_NAME)
        planned = config.model_dump()
        for name in computed_fields(handler.SCHEMA):
            if planned.get(name) is None:
                planned.pop(name, None)
        return planned, self._timeouts(handler, overrides)

    # Resource operations

    def create(self, resource_type: str, raw: Mapping[str, Any]) -> Dict[str, Any]:
        handler = self.resource_handler(resource_type)
        planned, timeouts = self.plan(handler, raw)
        d = ResourceData(resource_type, config=planned, timeouts=timeouts)
        logger.info(f"Creating {resource_type}")
        handler.create(d)
        return d.state()

    def read(
        self,
        resource_type: str,
        state: Mapping[str, Any],
        timeouts: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Refresh ``state`` from the remote object; ``{}`` means it is gone."""
        handler = self.resource_handler(resource_type)
        d = ResourceData(
            resource_type, state=state, timeouts=self._timeouts(handler, timeouts)
        )
        handler.read(d)
        return d.state()

    def update(
        self,
        resource_type: str,
        state: Mapping[str, Any],
        raw: Mapping[str, Any],
    ) -> Dict[str, Any]:
        handler = self.resource_handler(resource_type)
        planned, timeouts = self.plan(handler, raw)
        d = ResourceData(resource_type, config=planned, state=state, timeouts=timeouts)
        logger.info(f"Updating {resource_type} {d.id}")
        handler.update(d)
        return d.state()

    def delete(
        self,
        resource_type: str,
        state: Mapping[str, Any],
        timeouts: Optional[Mapping[str, Any]] = None,
    ) -> None:
        handler = self.resource_handler(resource_type)
        d = ResourceData(
            resource_type, state=state, timeouts=self._timeouts(handler, timeouts)
        )
        logger.info(f"Deleting {resource_type} {d.id}")
        handler.delete(d)

    def apply(
        self,
        resource_type: str,
        raw: Mapping[str, Any],
        state: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Converge towards ``raw``.

        With no prior state this is a create. Otherwise a change to any
        force-new field replaces the object (delete, then create) and anything
        else is an in-place update.
        """
        if not state:
            return self.create(resource_type, raw)

        handler = self.resource_handler(resource_type)
        planned, _ = self.plan(handler, raw)
        prior = {k: v for k, v in state.items() if k != "id"}
        replace = handler.replacement_fields(prior, planned)
        if replace:
            logger.info(
                f"{resource_type} {state.get('id')} must be replaced: "
                f"{', '.join(replace)} changed"
            )
            self.delete(resource_type, state, raw.get(TIMEOUTS_KEY))
            return self.create(resource_type, raw)
        return self.update(resource_type, state, raw)

    def import_resource(self, resource_type: str, resource_id: str) -> Dict[str, Any]:
        """Read an existing object by ID into fresh state.

        Raises:
            ResourceIdParseError: ``resource_id`` has the wrong shape.
            RemoteResourceNotFoundError: Nothing exists at ``resource_id``.
        """
        handler = self.resource_handler(resource_type)
        parsed = handler.validate_import_id(resource_id)
        d = ResourceData(
            resource_type, id=parsed.id(), timeouts=self._timeouts(handler, None)
        )
        handler.read(d)
        if not d.id:
            raise RemoteResourceNotFoundError(
                f"Cannot import non-existent remote object {parsed}",
                resource_id=parsed.id(),
                operation="import",
            )
        return d.state()

    # Data sources

    def read_data_source(
        self, data_source_type: str, raw: Mapping[str, Any]
    ) -> Dict[str, Any]:
        handler = self.data_source_handler(data_source_type)
        planned, timeouts = self.plan(handler, raw)
        d = ResourceData(data_source_type, config=planned, timeouts=timeouts)
        handler.read(d)
        return d.state()
