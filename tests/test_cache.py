"""Tests for cache backends and the scorecard cache."""

from unittest.mock import MagicMock

import pytest

from scorecard_engine.core.exceptions import CacheError
from scorecard_engine.services.cache.backends import (
    MemoryCacheBackend,
    RedisCacheBackend,
    build_cache_backend,
)
from scorecard_engine.services.scorecard.cache import ScorecardCache
from tests.helpers import FakeClock, SpyCacheBackend


def test_memory_backend_expires_entries():
    clock = FakeClock()
    backend = MemoryCacheBackend(clock=clock)
    backend.set("k", "v", ex=60)

    clock.now += 59
    assert backend.get("k") == "v"

    clock.now += 1
    assert backend.get("k") is None
    assert backend.keys() == []


def test_memory_backend_prefix_delete():
    backend = MemoryCacheBackend()
    for key in ("s:agent:a1:2025:all", "s:agent:a1:2025:3", "s:agent:a10:2025:3"):
        backend.set(key, "{}")

    assert backend.delete_prefix("s:agent:a1:") == 2
    assert backend.keys() == ["s:agent:a10:2025:3"]


def test_scorecard_keys_are_grouped_per_agent():
    cache = ScorecardCache(MemoryCacheBackend(), namespace="sc")

    assert cache.scorecard_key("a1", 2025) == "agent:a1:2025:all"
    assert cache.scorecard_key("a1", 2025, 3) == "agent:a1:2025:3"
    assert cache.scorecard_key("a1", 2025, 3, view="full", lang="en") == "agent:a1:2025:3:lang=en&view=full"
    assert cache.summary_key("a1", 6).startswith(cache.agent_prefix("a1"))


def test_round_trip_and_default_ttl():
    clock = FakeClock()
    cache = ScorecardCache(MemoryCacheBackend(clock=clock), default_ttl=120)
    key = cache.scorecard_key("a1", 2025, 3)

    assert cache.get(key) is None
    assert cache.set(key, {"percentage": 71.25}) is True
    assert cache.get(key) == {"percentage": 71.25}

    clock.now += 121
    assert cache.get(key) is None


def test_invalidate_agent_drops_every_view_of_that_agent_only():
    backend = MemoryCacheBackend()
    cache = ScorecardCache(backend)
    cache.set(cache.scorecard_key("a1", 2025), {"v": 1})
    cache.set(cache.scorecard_key("a1", 2024, 12), {"v": 2})
    cache.set(cache.summary_key("a1", 6), {"v": 3})
    cache.set(cache.scorecard_key("a2", 2025), {"v": 4})

    assert cache.invalidate_agent("a1") == 3
    assert cache.get(cache.scorecard_key("a2", 2025)) == {"v": 4}


def test_invalidate_explicit_keys():
    cache = ScorecardCache(MemoryCacheBackend())
    key = cache.scorecard_key("a1", 2025, 1)
    cache.set(key, {"v": 1})

    assert cache.invalidate([key, "agent:missing"]) == 1
    assert cache.get(key) is None


def test_read_failures_degrade_to_a_miss():
    backend = SpyCacheBackend()
    backend.fail_on.update({"get", "set"})
    cache = ScorecardCache(backend)

    assert cache.get("agent:a1:2025:all") is None
    assert cache.set("agent:a1:2025:all", {"v": 1}) is False


def test_corrupt_payload_is_a_miss():
    backend = MemoryCacheBackend()
    cache = ScorecardCache(backend, namespace="ns")
    backend.set("ns:agent:a1:2025:all", "{not json")

    assert cache.get("agent:a1:2025:all") is None


def test_invalidation_failure_raises_cache_error():
    backend = SpyCacheBackend()
    backend.fail_on.add("delete_prefix")
    cache = ScorecardCache(backend)

    with pytest.raises(CacheError) as exc_info:
        cache.invalidate_agent("a1")

    assert exc_info.value.status_code == 503


def test_redis_backend_scans_and_deletes_in_batches():
    client = MagicMock()
    client.scan_iter.return_value = iter(["sc:agent:a1:2025:1", "sc:agent:a1:2025:2", "sc:agent:a1:2025:3"])
    client.delete.side_effect = lambda *keys: len(keys)
    backend = RedisCacheBackend(client, scan_count=2)

    assert backend.delete_prefix("sc:agent:a1:") == 3
    client.scan_iter.assert_called_once_with(match="sc:agent:a1:*", count=2)
    assert client.delete.call_count == 2


def test_redis_backend_escapes_glob_characters():
    client = MagicMock()
    client.scan_iter.return_value = iter([])
    backend = RedisCacheBackend(client)

    backend.delete_prefix("sc:agent:a[1]*:")

    client.scan_iter.assert_called_once_with(match="sc:agent:a\\[1\\]\\*:*", count=500)
    client.delete.assert_not_called()


def test_redis_backend_set_uses_expiry():
    client = MagicMock()
    client.set.return_value = True
    backend = RedisCacheBackend(client)

    assert backend.set("k", "v", ex=90) is True
    client.set.assert_called_once_with("k", "v", ex=90)


def test_build_cache_backend_defaults_to_memory():
    settings = MagicMock(CACHE_BACKEND="memory")

    assert isinstance(build_cache_backend(settings), MemoryCacheBackend)
