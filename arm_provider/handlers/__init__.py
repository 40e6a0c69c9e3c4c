"""Handler registry for resource and data source type dispatch.

Handlers register themselves with ``@resource`` or ``@data_source`` at import
time; ``ensure_handlers_registered()`` imports every handler module once.

Usage:
    @resource
    class SqlTriggerHandler(ResourceHandler):
        TYPE_NAME = "azurerm_cosmosdb_sql_trigger"
        ...

    handler_class = HandlerRegistry.get_resource("azurerm_cosmosdb_sql_trigger")
"""

import logging
from typing import Dict, List, Optional, Type

from .base_handler import DataSourceHandler, ResourceHandler

logger = logging.getLogger(__name__)


class HandlerRegistry:
    """Registry of handler classes keyed by ``azurerm_*`` type name."""

    _resources: Dict[str, Type[ResourceHandler]] = {}
    _data_sources: Dict[str, Type[DataSourceHandler]] = {}

    @classmethod
    def register_resource(
        cls, handler_class: Type[ResourceHandler]
    ) -> Type[ResourceHandler]:
        if not handler_class.TYPE_NAME:
            raise ValueError(f"{handler_class.__name__} does not declare TYPE_NAME")
        cls._resources[handler_class.TYPE_NAME] = handler_class
        logger.debug(
            f"Registered resource handler {handler_class.__name__} for {handler_class.TYPE_NAME}"
        )
        return handler_class

    @classmethod
    def register_data_source(
        cls, handler_class: Type[DataSourceHandler]
    ) -> Type[DataSourceHandler]:
        if not handler_class.TYPE_NAME:
            raise ValueError(f"{handler_class.__name__} does not declare TYPE_NAME")
        cls._data_sources[handler_class.TYPE_NAME] = handler_class
        logger.debug(
            f"Registered data source handler {handler_class.__name__} for {handler_class.TYPE_NAME}"
        )
        return handler_class

    @classmethod
    def get_resource(cls, type_name: str) -> Optional[Type[ResourceHandler]]:
        ensure_handlers_registered()
        return cls._resources.get(type_name)

    @classmethod
    def get_data_source(cls, type_name: str) -> Optional[Type[DataSourceHandler]]:
        ensure_handlers_registered()
        return cls._data_sources.get(type_name)

    @classmethod
    def resource_types(cls) -> List[str]:
        ensure_handlers_registered()
        return sorted(cls._resources)

    @classmethod
    def data_source_types(cls) -> List[str]:
        ensure_handlers_registered()
        return sorted(cls._data_sources)


def resource(cls: Type[ResourceHandler]) -> Type[ResourceHandler]:
    """Decorator to register a resource handler class."""
    return HandlerRegistry.register_resource(cls)


def data_source(cls: Type[DataSourceHandler]) -> Type[DataSourceHandler]:
    """Decorator to register a data source handler class."""
    return HandlerRegistry.register_data_source(cls)


def _register_all_handlers() -> None:
    """Import all handler modules to trigger registration."""
    # Cosmos DB handlers
    from .cosmos import (  # noqa: F401
        restorable_database_accounts,
        sql_database,
        sql_function,
        sql_role_assignment,
        sql_role_definition,
        sql_stored_procedure,
        sql_trigger,
    )

    # HDInsight handlers
    from .hdinsight import hadoop_cluster  # noqa: F401

    # MSSQL handlers
    from .mssql import server_transparent_data_encryption  # noqa: F401

    logger.debug(
        f"Registered {len(HandlerRegistry._resources)} resources and "
        f"{len(HandlerRegistry._data_sources)} data sources"
    )


_handlers_registered = False


def ensure_handlers_registered() -> None:
    """Ensure all handlers are registered.

    Called lazily on first handler lookup.
    """
    global _handlers_registered
    if not _handlers_registered:
        _register_all_handlers()
        _handlers_registered = True


__all__ = [
    "DataSourceHandler",
    "HandlerRegistry",
    "ResourceHandler",
    "data_source",
    "ensure_handlers_registered",
    "resource",
]
