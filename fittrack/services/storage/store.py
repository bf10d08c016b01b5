"""
Local Store - Async key-value port used for autosaves, history and the sync queue.

The storage engine itself belongs to the host application; InMemoryStore
is the default for tests and headless runs.
"""
import asyncio
import json
import weakref
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from fittrack.core.logging import get_logger

logger = get_logger(__name__)

AUTOSAVE_KEY_PREFIX = "active_session_"
HISTORY_KEY = "workoutHistory"
SYNC_QUEUE_KEY = "workout_sync_queue"


def autosave_key(session_id: str) -> str:
    return f"{AUTOSAVE_KEY_PREFIX}{session_id}"


class KeyValueStore(ABC):
    """Abstract string key-value store."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    async def remove(self, key: str) -> None:
        pass


class InMemoryStore(KeyValueStore):
    """Process-local store backed by a dict."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> List[str]:
        return list(self._data.keys())


_store_locks: "weakref.WeakKeyDictionary[KeyValueStore, asyncio.Lock]" = weakref.WeakKeyDictionary()


def get_store_lock(store: KeyValueStore) -> asyncio.Lock:
    """
    Process-wide lock guarding the global list keys of one store.

    Every read-modify-write of workoutHistory or workout_sync_queue
    must hold it.
    """
    lock = _store_locks.get(store)
    if lock is None:
        lock = asyncio.Lock()
        _store_locks[store] = lock
    return lock


async def read_json(store: KeyValueStore, key: str) -> Optional[Any]:
    raw = await store.get(key)
    if raw is None:
        return None
    return json.loads(raw)


async def read_json_list(store: KeyValueStore, key: str) -> List[Dict[str, Any]]:
    """Read a JSON array, treating a missing or corrupt value as empty."""
    try:
        value = await read_json(store, key)
    except json.JSONDecodeError:
        logger.warning("Discarding corrupt list value", key=key)
        return []
    if not isinstance(value, list):
        return []
    return value


async def write_json(store: KeyValueStore, key: str, value: Any) -> None:
    await store.set(key, json.dumps(value))
