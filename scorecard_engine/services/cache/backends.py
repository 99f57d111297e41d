"""
Key/value backends for the scorecard cache.

Both backends expose the small subset of the Redis API the cache layer
needs (``get``, ``set`` with ``ex``, ``delete``) plus ``delete_prefix``.
Backends do not swallow errors; the cache layer decides which failures
degrade to a miss and which must fail the request.
"""

import re
import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from redis import Redis

from scorecard_engine.core.logging import get_logger

logger = get_logger(__name__)

_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


class CacheBackend(ABC):
    """Minimal key/value contract shared by the in-process and Redis backends."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set(self, key: str, value: str, ex: Optional[int] = None) -> bool:
        ...

    @abstractmethod
    def delete(self, *keys: str) -> int:
        ...

    @abstractmethod
    def delete_prefix(self, prefix: str) -> int:
        """Delete every key starting with ``prefix`` and return how many went."""


class MemoryCacheBackend(CacheBackend):
    """
    Thread-safe in-process backend.

    Expired entries are dropped lazily on read and on prefix scans.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._store: Dict[str, Tuple[str, Optional[float]]] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def _expired(self, expires_at: Optional[float]) -> bool:
        return expires_at is not None and expires_at <= self._clock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if self._expired(expires_at):
                del self._store[key]
                return None
            return value

    def set(self, key: str, value: str, ex: Optional[int] = None) -> bool:
        expires_at = self._clock() + ex if ex else None
        with self._lock:
            self._store[key] = (value, expires_at)
        return True

    def delete(self, *keys: str) -> int:
        with self._lock:
            return sum(1 for key in keys if self._store.pop(key, None) is not None)

    def delete_prefix(self, prefix: str) -> int:
        with self._lock:
            doomed = [key for key in self._store if key.startswith(prefix)]
            for key in doomed:
                del self._store[key]
            return len(doomed)

    def keys(self) -> List[str]:
        """Live keys, mostly useful for inspection in tests."""
        with self._lock:
            return [key for key, (_, exp) in self._store.items() if not self._expired(exp)]

    def clear(self) -> None:
        with self._lock:
            self._store.clear()


class RedisCacheBackend(CacheBackend):
    """Redis backend; prefix deletion walks the keyspace with SCAN."""

    def __init__(self, client: Redis, scan_count: int = 500) -> None:
        self.client = client
        self.scan_count = scan_count

    def get(self, key: str) -> Optional[str]:
        return self.client.get(key)

    def set(self, key: str, value: str, ex: Optional[int] = None) -> bool:
        return bool(self.client.set(key, value, ex=ex))

    def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        return int(self.client.delete(*keys))

    def _scan(self, prefix: str) -> Iterator[str]:
        pattern = _GLOB_SPECIAL.sub(r"\\\1", prefix) + "*"
        return self.client.scan_iter(match=pattern, count=self.scan_count)

    def delete_prefix(self, prefix: str) -> int:
        deleted = 0
        batch: List[str] = []
        for key in self._scan(prefix):
            batch.append(key)
            if len(batch) >= self.scan_count:
                deleted += self.delete(*batch)
                batch = []
        deleted += self.delete(*batch)
        return deleted


def build_cache_backend(settings) -> CacheBackend:
    """Create the backend selected by ``settings.CACHE_BACKEND``."""
    if settings.CACHE_BACKEND == "redis":
        from scorecard_engine.config.redis import get_redis_client

        logger.info("Using Redis scorecard cache backend")
        return RedisCacheBackend(get_redis_client())

    logger.info("Using in-memory scorecard cache backend")
    return MemoryCacheBackend()
