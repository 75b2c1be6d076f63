"""Injected cache for ranking queries.

Round close drops a tournament's entries through `invalidate`.
"""

import fnmatch
import threading
import time
from typing import Any, Callable, Optional, Protocol

from cachetools import TLRUCache

from core.logging import get_logger

logger = get_logger(__name__)


class Cache(Protocol):
    def get(self, key: str) -> Optional[Any]: ...

    def set(self, key: str, value: Any, ttl: float) -> None: ...

    def invalidate(self, pattern: str) -> int: ...


def _expires_at(key: str, item: tuple, now: float) -> float:
    return now + item[1]


class MemoryCache:
    """Per-key TTL cache kept in process memory, on top of `cachetools.TLRUCache`.

    When full, expired entries go first and then the least recently used.
    `invalidate` takes a glob pattern (`rankings:t1*`) and returns how many
    keys were dropped.
    """

    def __init__(self, max_size: int = 256, clock: Callable[[], float] = time.monotonic):
        self._items = TLRUCache(maxsize=max_size, ttu=_expires_at, timer=clock)
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            item = self._items.get(key)
        if item is None:
            logger.debug("cache_miss", key=key)
            return None
        logger.debug("cache_hit", key=key)
        return item[0]

    def set(self, key: str, value: Any, ttl: float) -> None:
        with self._lock:
            self._items[key] = (value, ttl)

    def invalidate(self, pattern: str) -> int:
        with self._lock:
            self._items.expire()
            keys = [k for k in list(self._items) if fnmatch.fnmatchcase(k, pattern)]
            for k in keys:
                self._items.pop(k, None)
        logger.info("cache_invalidated", pattern=pattern, removed=len(keys))
        return len(keys)

    def __len__(self) -> int:
        with self._lock:
            self._items.expire()
            return len(self._items)
