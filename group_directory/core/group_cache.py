"""
Group cache implementations.

The cache maps a gid to its GroupRecord and is only a read-through
accelerator: the store stays authoritative. Entries are added by every
successful read, create and rename, and removed on delete. There is no
eviction policy beyond that.
"""

import logging
import threading
from typing import Dict, Optional, Protocol, runtime_checkable

import redis

from group_directory.config.settings import settings
from group_directory.core.redis import RedisManager
from group_directory.models.records import GroupRecord
from group_directory.services.base import StoreError

logger = logging.getLogger(__name__)


@runtime_checkable
class GroupCache(Protocol):
    """Interface every group cache provides."""

    def get(self, gid: str) -> Optional[GroupRecord]:
        ...

    def put(self, record: GroupRecord) -> None:
        ...

    def evict(self, gid: str) -> None:
        ...

    def has(self, gid: str) -> bool:
        ...

    def clear(self) -> None:
        ...


class InMemoryGroupCache:
    """
    Unbounded per-process cache.

    Guarded by a lock so one directory service may be shared between
    request threads.
    """

    def __init__(self):
        self._entries: Dict[str, GroupRecord] = {}
        self._lock = threading.RLock()

    def get(self, gid: str) -> Optional[GroupRecord]:
        with self._lock:
            return self._entries.get(gid)

    def put(self, record: GroupRecord) -> None:
        with self._lock:
            self._entries[record.gid] = record

    def evict(self, gid: str) -> None:
        with self._lock:
            self._entries.pop(gid, None)

    def has(self, gid: str) -> bool:
        with self._lock:
            return gid in self._entries

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class RedisGroupCache:
    """
    Cache shared by every worker through Redis.

    Reads are eventually consistent between workers. Failed reads and
    writes show up as misses, so the directory falls back to the store.
    Failed evictions raise StoreError.
    """

    def __init__(self, manager: RedisManager, prefix: str = None, ttl: Optional[int] = None):
        self._manager = manager
        self._prefix = prefix or settings.cache_key_prefix
        self._ttl = ttl

    def _key(self, gid: str) -> str:
        return f"{self._prefix}{gid}"

    def get(self, gid: str) -> Optional[GroupRecord]:
        data = self._manager.get(self._key(gid))
        if not isinstance(data, dict):
            return None
        return GroupRecord.from_dict(data)

    def put(self, record: GroupRecord) -> None:
        self._manager.set(self._key(record.gid), record.to_dict(), ttl=self._ttl)

    def evict(self, gid: str) -> None:
        # A surviving entry would report a deleted group as existing
        try:
            self._manager.delete(self._key(gid), raise_errors=True)
        except redis.RedisError as e:
            raise StoreError(f"Could not evict group {gid} from Redis: {e}", "evict") from e

    def has(self, gid: str) -> bool:
        return self._manager.exists(self._key(gid))

    def clear(self) -> None:
        try:
            for key in list(self._manager.keys(self._prefix, raise_errors=True)):
                self._manager.delete(key, raise_errors=True)
        except redis.RedisError as e:
            raise StoreError(f"Could not clear Redis group cache: {e}", "clear") from e


def build_cache(backend: str = None) -> GroupCache:
    """Create the cache selected by settings.cache_backend."""
    backend = (backend or settings.cache_backend).lower()
    if backend == "memory":
        return InMemoryGroupCache()
    if backend == "redis":
        logger.info(f"Using Redis group cache at {settings.redis_url}")
        return RedisGroupCache(RedisManager(settings.redis_url), ttl=settings.cache_ttl)
    raise ValueError(f"Unknown cache backend: {backend}")
