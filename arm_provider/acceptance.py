"""
Acceptance-test helpers.

These run against whatever clients the ``Provider`` was built with: live
management clients for acceptance runs, fakes in unit tests.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .exceptions import ResourceAlreadyExistsError
from .provider import Provider

logger = logging.getLogger(__name__)


def exists_in_azure(provider: Provider, resource_type: str, resource_id: str) -> bool:
    """True when the remote object behind ``resource_id`` exists."""
    return provider.resource_handler(resource_type).exists(resource_id)


def check_destroyed(
    provider: Provider, resource_type: str, resource_ids: Iterable[str]
) -> None:
    """Assert that none of ``resource_ids`` still exists."""
    remaining = [
        resource_id
        for resource_id in resource_ids
        if exists_in_azure(provider, resource_type, resource_id)
    ]
    if remaining:
        raise AssertionError(
            f"{resource_type} still exists: {', '.join(remaining)}"
        )


def import_step(
    provider: Provider,
    resource_type: str,
    state: Mapping[str, Any],
    ignore: Iterable[str] = (),
) -> Dict[str, Any]:
    """Import ``state['id']`` and assert it reproduces ``state``.

    ``ignore`` names attributes the API never returns (passwords, keys).
    """
    imported = provider.import_resource(resource_type, state["id"])
    skipped = set(ignore)
    mismatched: List[str] = []
    for key in sorted(set(state) | set(imported)):
        if key in skipped:
            continue
        if state.get(key) != imported.get(key):
            mismatched.append(
                f"{key}: expected {state.get(key)!r}, imported {imported.get(key)!r}"
            )
    if mismatched:
        raise AssertionError(
            f"Imported {resource_type} differs from state: " + "; ".join(mismatched)
        )
    return imported


def requires_import_error(
    provider: Provider, resource_type: str, raw: Mapping[str, Any]
) -> ResourceAlreadyExistsError:
    """Create ``raw`` again and assert it fails because the object exists."""
    try:
        state: Optional[Dict[str, Any]] = provider.create(resource_type, raw)
    except ResourceAlreadyExistsError as e:
        logger.debug(f"Second create of {resource_type} was rejected: {e.message}")
        return e
    raise AssertionError(
        f"Expected {resource_type} create to require an import, but it created "
        f"{(state or {}).get('id')}"
    )
