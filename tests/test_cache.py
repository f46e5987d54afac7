"""Tests for the cache pools."""
import json

from headless_oauth.core.cache import NullCachePool, RedisCachePool


class FakeRedis:
    """Just enough of redis.Redis for RedisCachePool."""

    def __init__(self):
        self.store = {}
        self.expiry = {}

    def get(self, key):
        return self.store.get(key)

    def set(self, key, value):
        self.store[key] = value
        return True

    def setex(self, key, ttl, value):
        self.store[key] = value
        self.expiry[key] = ttl
        return True

    def exists(self, key):
        return int(key in self.store)

    def delete(self, *keys):
        for key in keys:
            self.store.pop(key, None)
        return len(keys)

    def scan_iter(self, match=None):
        prefix = match.rstrip("*")
        return [k for k in list(self.store) if k.startswith(prefix)]


class TestNullCachePool:
    def test_always_misses(self):
        pool = NullCachePool()
        assert pool.set("k", {"a": 1}, 60) is True
        assert pool.get("k") is None
        assert pool.has("k") is False
        assert pool.delete("k") is True
        assert pool.clear() is True


class TestRedisCachePool:
    def test_round_trip_with_ttl(self):
        client = FakeRedis()
        pool = RedisCachePool(client)
        pool.set("apple_jwks_keys", {"keys": [1]}, 86400)
        assert client.expiry["headless_oauth:apple_jwks_keys"] == 86400
        assert json.loads(client.store["headless_oauth:apple_jwks_keys"]) == {"keys": [1]}
        assert pool.get("apple_jwks_keys") == {"keys": [1]}
        assert pool.has("apple_jwks_keys")

    def test_miss_and_stats(self):
        pool = RedisCachePool(FakeRedis())
        assert pool.get("missing") is None
        pool.set("k", 1)
        pool.get("k")
        assert pool.stats() == {"hits": 1, "misses": 1}

    def test_undecodable_entry_is_a_miss(self):
        client = FakeRedis()
        client.store["headless_oauth:bad"] = "{not json"
        assert RedisCachePool(client).get("bad") is None

    def test_clear_only_touches_prefix(self):
        client = FakeRedis()
        client.store["other:key"] = "1"
        pool = RedisCachePool(client)
        pool.set("a", 1)
        pool.set("b", 2)
        pool.clear()
        assert client.store == {"other:key": "1"}
