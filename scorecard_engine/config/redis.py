"""
Redis configuration for the scorecard cache.
Provides Redis client management and connection pooling.
"""

from functools import lru_cache

from redis import Redis
from redis.connection import ConnectionPool

from scorecard_engine.config.settings import settings
from scorecard_engine.core.logging import get_logger

logger = get_logger(__name__)


@lru_cache()
def get_redis_pool() -> ConnectionPool:
    """Create the shared connection pool on first use"""
    logger.info("Creating Redis connection pool")
    return ConnectionPool.from_url(
        settings.REDIS_URL,
        decode_responses=True,  # Auto-decode Redis responses to strings
    )


def get_redis_client() -> Redis:
    """Get Redis client bound to the shared pool"""
    return Redis(connection_pool=get_redis_pool())

