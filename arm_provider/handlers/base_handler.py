"""Base classes for resource and data source handlers.

A resource handler implements create/read/update/delete for one
``azurerm_*`` type against the Resource Manager API. Every mutating handler
follows the same protocol:

    existence check (create only) -> mutating call -> poll -> re-read state

The helpers here implement each step so the per-resource modules only build
request bodies and project responses back into ``ResourceData``.
"""

import logging
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Callable, ClassVar, Iterator, List, Mapping, Optional, Type

from azure.core.exceptions import HttpResponseError, ResourceNotFoundError

from ..clients import ProviderClients
from ..exceptions import (
    OperationFailedError,
    RemoteOperationError,
    RemoteResourceNotFoundError,
    ResourceAlreadyExistsError,
)
from ..ids import ResourceId
from ..polling import Clock, OperationWaiter
from ..resource_data import ResourceData
from ..schema import ResourceConfig, requires_replacement
from ..timeout_config import ResourceTimeouts

logger = logging.getLogger(__name__)


def is_not_found(error: Exception) -> bool:
    """True for a 404 from the API, whichever exception class carried it."""
    if isinstance(error, ResourceNotFoundError):
        return True
    return isinstance(error, HttpResponseError) and error.status_code == 404


class HandlerBase:
    TYPE_NAME: ClassVar[str] = ""
    SCHEMA: ClassVar[Type[ResourceConfig]] = ResourceConfig
    TIMEOUTS: ClassVar[ResourceTimeouts] = ResourceTimeouts()

    def __init__(
        self,
        clients: ProviderClients,
        poll_interval: Optional[float] = None,
        clock: Optional[Clock] = None,
        cancel_event: Optional[threading.Event] = None,
    ):
        self.clients = clients
        self.poll_interval = poll_interval
        self.clock = clock
        self.cancel_event = cancel_event

    @property
    def subscription_id(self) -> str:
        return self.clients.subscription_id

    @staticmethod
    def remote_error(
        error: HttpResponseError, resource_id: Any, operation: str
    ) -> RemoteOperationError:
        """Wrap an SDK error with the resource identifier and operation."""
        return RemoteOperationError(
            f"{operation} {resource_id}: {error.message}",
            resource_id=str(resource_id),
            operation=operation,
            status_code=error.status_code,
            cause=error,
        )

    @contextmanager
    def calling(self, resource_id: Any, operation: str) -> Iterator[None]:
        """Wrap SDK errors raised in the block.

        A 404 becomes ``RemoteResourceNotFoundError``; callers that may
        tolerate not-found catch it before this wrapper sees it.
        """
        try:
            yield
        except HttpResponseError as e:
            if is_not_found(e):
                raise RemoteResourceNotFoundError(
                    f"{resource_id} was not found during {operation}",
                    resource_id=str(resource_id),
                    operation=operation,
                    cause=e,
                ) from e
            raise self.remote_error(e, resource_id, operation) from e


class ResourceHandler(HandlerBase, ABC):
    """Abstract base class for resource handlers.

    Subclasses declare:
        TYPE_NAME: the ``azurerm_*`` type name
        SCHEMA: the configuration model
        ID_TYPE: the ``ResourceId`` subclass used for import
        TIMEOUTS: per-operation defaults (create 30m, read 5m, update 30m, delete 30m)
    """

    ID_TYPE: ClassVar[Type[ResourceId]] = ResourceId

    @abstractmethod
    def create(self, d: ResourceData) -> None:
        raise NotImplementedError

    @abstractmethod
    def read(self, d: ResourceData) -> None:
        """Refresh ``d`` from the remote object, or ``d.set_id("")`` if it is gone."""
        raise NotImplementedError

    @abstractmethod
    def update(self, d: ResourceData) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, d: ResourceData) -> None:
        raise NotImplementedError

    @abstractmethod
    def get_remote(self, resource_id: Any) -> Any:
        """Fetch the remote object for a parsed ID; SDK errors propagate."""
        raise NotImplementedError

    def replacement_fields(
        self, prior: Mapping[str, Any], planned: Mapping[str, Any]
    ) -> List[str]:
        """Fields whose change from ``prior`` to ``planned`` forces a new resource."""
        return requires_replacement(self.SCHEMA, prior, planned)

    def validate_import_id(self, value: str) -> ResourceId:
        return self.ID_TYPE.parse(value)

    def exists(self, resource_id: str) -> bool:
        """Existence check used by acceptance tests."""
        parsed = self.ID_TYPE.parse(resource_id)
        try:
            self.get_remote(parsed)
        except HttpResponseError as e:
            if is_not_found(e):
                return False
            raise self.remote_error(e, parsed, "read") from e
        return True

    # Protocol steps

    def ensure_absent(self, resource_id: Any) -> None:
        """Existence check run before create.

        Only a genuine not-found lets create proceed; any other failure of the
        check is fatal.
        """
        try:
            self.get_remote(resource_id)
        except HttpResponseError as e:
            if is_not_found(e):
                return
            raise self.remote_error(e, resource_id, "create") from e
        raise ResourceAlreadyExistsError(
            f"A resource with the ID {resource_id.id()!r} already exists - to be "
            f"managed via this provider it needs to be imported into state",
            resource_type=self.TYPE_NAME,
            resource_id=resource_id.id(),
        )

    def wait_for(
        self, poller: Any, d: ResourceData, operation: str, resource_id: Any
    ) -> Any:
        waiter = OperationWaiter(
            timeout=d.timeouts.for_operation(operation),
            interval=self.poll_interval,
            clock=self.clock,
            cancel_event=self.cancel_event,
            resource_id=str(resource_id),
            operation=operation,
        )
        with self.calling(resource_id, operation):
            return waiter.wait(poller)

    def refresh(self, d: ResourceData, operation: str) -> None:
        """Re-read remote state after a write; a missing object is an error."""
        resource_id = d.id
        self.read(d)
        if not d.id:
            raise RemoteResourceNotFoundError(
                f"{self.TYPE_NAME} {resource_id} was not found after {operation}",
                resource_id=resource_id,
                operation=operation,
            )

    def delete_tolerating_not_found(
        self, begin: Callable[[], Any], d: ResourceData, resource_id: Any
    ) -> None:
        """Start a delete and wait for it; not-found at any point counts as done."""
        try:
            poller = begin()
        except HttpResponseError as e:
            if is_not_found(e):
                logger.info(f"{resource_id} was already gone")
                d.set_id("")
                return
            raise self.remote_error(e, resource_id, "delete") from e
        try:
            self.wait_for(poller, d, "delete", resource_id)
        except RemoteResourceNotFoundError:
            logger.info(f"{resource_id} disappeared while deleting")
        except OperationFailedError as e:
            if e.cause is None or not is_not_found(e.cause):
                raise
            logger.info(f"{resource_id} disappeared while deleting")
        d.set_id("")

    def mark_gone(self, d: ResourceData, resource_id: Any) -> None:
        logger.info(f"{resource_id} was not found - removing from state")
        d.set_id("")


class DataSourceHandler(HandlerBase, ABC):
    """Abstract base class for read-only data sources."""

    @abstractmethod
    def read(self, d: ResourceData) -> None:
        raise NotImplementedError


def enum_value(value: Any) -> Any:
    """Plain value of an SDK enum member; strings pass through."""
    return getattr(value, "value", value)
