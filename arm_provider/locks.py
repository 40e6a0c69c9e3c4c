"""
Named Resource Locks

Serializes mutations of sibling child resources that share a parent (two role
assignments on the same Cosmos DB account, say) when the Resource Manager API
does not serialize those writes itself.

The table maps ``"{kind}.{name}"`` to a re-entrant lock. Entries are created on
first use and never removed; the key space is bounded by real resource names.
Inserting into the table is guarded by one coarse lock, acquiring an entry is
not.
"""

import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List

import structlog  # type: ignore[import-untyped]

logger = structlog.get_logger(__name__)

_table: Dict[str, Any] = {}
_table_lock = threading.Lock()


def _key(name: str, kind: str) -> str:
    return f"{kind}.{name}"


def _get(key: str) -> Any:
    with _table_lock:
        lock = _table.get(key)
        if lock is None:
            lock = threading.RLock()
            _table[key] = lock
        return lock


def by_name(name: str, kind: str) -> None:
    """Block until the lock for ``(name, kind)`` is held by this thread."""
    key = _key(name, kind)
    logger.debug("Locking", lock=key)
    _get(key).acquire()
    logger.debug("Locked", lock=key)


def unlock_by_name(name: str, kind: str) -> None:
    key = _key(name, kind)
    _get(key).release()
    logger.debug("Unlocked", lock=key)


@contextmanager
def locked(name: str, kind: str) -> Iterator[None]:
    """Hold the named lock for the body of the ``with`` block.

    Released on every exit path, including exceptions.
    """
    by_name(name, kind)
    try:
        yield
    finally:
        unlock_by_name(name, kind)


def known_locks() -> List[str]:
    """Keys currently present in the table."""
    with _table_lock:
        return sorted(_table)
