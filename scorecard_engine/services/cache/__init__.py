from scorecard_engine.services.cache.backends import (
    CacheBackend,
    MemoryCacheBackend,
    RedisCacheBackend,
    build_cache_backend,
)

__all__ = [
    "CacheBackend",
    "MemoryCacheBackend",
    "RedisCacheBackend",
    "build_cache_backend",
]
