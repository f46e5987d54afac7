"""
Shared Redis connection pool, built once from ``REDIS_URL``.
"""
import logging

import redis
from redis.connection import ConnectionPool

logger = logging.getLogger(__name__)

_pool: ConnectionPool | None = None
_client: redis.Redis | None = None


def get_redis_pool(redis_url: str | None) -> ConnectionPool:
    """Get or create a shared Redis connection pool."""
    global _pool
    if _pool is not None:
        return _pool
    if not redis_url:
        raise RuntimeError("REDIS_URL is not configured")

    _pool = ConnectionPool.from_url(
        redis_url,
        max_connections=5,
        socket_timeout=5,
        socket_connect_timeout=5,
        retry_on_timeout=True,
        health_check_interval=30,
        decode_responses=True,
    )
    logger.info("Redis connection pool created (max_connections=5)")
    return _pool


def get_redis_client(redis_url: str | None) -> redis.Redis:
    """Get or create a Redis client using the shared connection pool."""
    global _client
    if _client is not None:
        return _client
    _client = redis.Redis(connection_pool=get_redis_pool(redis_url))
    return _client


def close_redis_pool() -> None:
    """Close the Redis connection pool. Called on app shutdown."""
    global _pool, _client
    if _client is not None:
        _client.close()
        _client = None
    if _pool is not None:
        _pool.disconnect()
        _pool = None
