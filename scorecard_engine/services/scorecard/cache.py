"""
Read-through cache for computed scorecard payloads.
"""

import json
from typing import Any, Iterable, Optional

from scorecard_engine.core.exceptions import CacheError
from scorecard_engine.core.logging import get_logger
from scorecard_engine.services.cache.backends import CacheBackend


class ScorecardCache:
    """
    JSON cache of scorecard views with:
    - Namespaced keys grouped under one prefix per agent
    - TTL support
    - Per-agent invalidation

    Reads and stores degrade quietly (a broken cache only costs a
    recomputation). Invalidation failures raise ``CacheError`` because a
    write must not report success while stale entries may survive.
    """

    def __init__(
        self,
        backend: CacheBackend,
        namespace: str = "scorecard",
        default_ttl: int = 120,
    ):
        """
        Initialize scorecard cache.

        Args:
            backend: Key/value backend
            namespace: Key namespace prefix
            default_ttl: Default TTL in seconds
        """
        self.backend = backend
        self.namespace = namespace
        self.default_ttl = default_ttl
        self._logger = get_logger(self.__class__.__name__, cache_namespace=namespace)

    # -------------------------------------------------------------------------
    # Keys
    # -------------------------------------------------------------------------

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    @staticmethod
    def agent_prefix(agent_id: str) -> str:
        return f"agent:{agent_id}:"

    def scorecard_key(
        self,
        agent_id: str,
        year: int,
        month: Optional[int] = None,
        **params: Any,
    ) -> str:
        """
        Build the key of one scorecard view.

        Extra view-affecting parameters are appended in sorted order so the
        same view always maps to the same key.
        """
        key = f"{self.agent_prefix(agent_id)}{year}:{month if month is not None else 'all'}"
        extras = [f"{name}={value}" for name, value in sorted(params.items()) if value is not None]
        if extras:
            key = f"{key}:{'&'.join(extras)}"
        return key

    def summary_key(self, agent_id: str, limit: int) -> str:
        return f"{self.agent_prefix(agent_id)}performance:{limit}"

    # -------------------------------------------------------------------------
    # Core Cache Operations
    # -------------------------------------------------------------------------

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None on a miss or a backend failure."""
        try:
            raw = self.backend.get(self._key(key))
            if raw is None:
                self._logger.debug(f"Cache miss: {key}")
                return None

            self._logger.debug(f"Cache hit: {key}")
            return json.loads(raw)

        except json.JSONDecodeError as e:
            self._logger.warning(f"Failed to decode cached value for {key}: {e}")
            return None
        except Exception as e:
            self._logger.error(f"Cache get error for {key}: {e}")
            return None

    def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> bool:
        """
        Store a JSON-serializable value.

        Returns:
            True if stored, False if serialization or the backend failed
        """
        try:
            payload = json.dumps(value, default=str)
            ttl = ttl_seconds if ttl_seconds is not None else self.default_ttl

            self.backend.set(self._key(key), payload, ex=ttl)

            self._logger.debug(f"Cache set: {key} (TTL: {ttl}s)")
            return True

        except (TypeError, ValueError) as e:
            self._logger.error(f"Failed to serialize value for {key}: {e}")
            return False
        except Exception as e:
            self._logger.error(f"Cache set error for {key}: {e}")
            return False

    # -------------------------------------------------------------------------
    # Invalidation
    # -------------------------------------------------------------------------

    def invalidate(self, keys: Iterable[str]) -> int:
        """Delete explicit keys. Raises CacheError if the backend fails."""
        full_keys = [self._key(key) for key in keys]
        try:
            deleted = self.backend.delete(*full_keys)
        except Exception as e:
            self._logger.error(f"Cache invalidate error: {e}")
            raise CacheError("Failed to invalidate cached scorecards", operation="invalidate") from e
        self._logger.debug(f"Cache invalidate: {deleted} keys")
        return deleted

    def invalidate_agent(self, agent_id: str) -> int:
        """
        Drop every cached view of one agent, whatever its period or parameters.

        Raises:
            CacheError: If the backend fails
        """
        prefix = self._key(self.agent_prefix(agent_id))
        try:
            deleted = self.backend.delete_prefix(prefix)
        except Exception as e:
            self._logger.error(f"Cache invalidate error for agent {agent_id}: {e}")
            raise CacheError(
                "Failed to invalidate cached scorecards",
                operation="invalidate_agent",
                key=prefix,
            ) from e

        self._logger.info(f"Cache invalidated: {deleted} keys for agent {agent_id}")
        return deleted
