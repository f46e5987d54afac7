"""Cache pools used by the bundle.

The bundle only talks to ``CachePool``. The host either supplies one under
the ``cache.app`` service name (usually ``RedisCachePool``) or the bundle
keeps the ``NullCachePool`` default and every lookup misses.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import Any

import redis

logger = logging.getLogger(__name__)


class CachePool(ABC):
    @abstractmethod
    def get(self, key: str) -> Any | None:
        """Return the cached value or None on a miss."""

    @abstractmethod
    def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        ...

    @abstractmethod
    def has(self, key: str) -> bool:
        ...

    @abstractmethod
    def delete(self, key: str) -> bool:
        ...

    @abstractmethod
    def clear(self) -> bool:
        ...


class NullCachePool(CachePool):
    """Cache that never stores anything; every read is a miss."""

    def get(self, key: str) -> Any | None:
        return None

    def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        return True

    def has(self, key: str) -> bool:
        return False

    def delete(self, key: str) -> bool:
        return True

    def clear(self) -> bool:
        return True


class RedisCachePool(CachePool):
    """JSON values in redis, namespaced under a key prefix."""

    def __init__(self, client: redis.Redis, prefix: str = "headless_oauth:"):
        self._client = client
        self._prefix = prefix
        self._metrics = {"hits": 0, "misses": 0}

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def get(self, key: str) -> Any | None:
        raw = self._client.get(self._key(key))
        if raw is None:
            self._metrics["misses"] += 1
            return None
        try:
            value = json.loads(raw)
        except ValueError:
            logger.warning("Discarding undecodable cache entry key=%s", key)
            self._metrics["misses"] += 1
            return None
        self._metrics["hits"] += 1
        return value

    def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        payload = json.dumps(value)
        if ttl:
            return bool(self._client.setex(self._key(key), ttl, payload))
        return bool(self._client.set(self._key(key), payload))

    def has(self, key: str) -> bool:
        return bool(self._client.exists(self._key(key)))

    def delete(self, key: str) -> bool:
        self._client.delete(self._key(key))
        return True

    def clear(self) -> bool:
        keys = list(self._client.scan_iter(match=f"{self._prefix}*"))
        if keys:
            self._client.delete(*keys)
        return True

    def stats(self) -> dict[str, int]:
        """Return basic cache hit/miss counters for instrumentation."""
        return dict(self._metrics)
