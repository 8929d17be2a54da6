"""
Tests for the redis cache helpers against an in-memory client.
"""

import fnmatch
import json
from datetime import timedelta

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from app.core import cache


class InMemoryRedis:
    """The subset of redis.asyncio.Redis the cache helpers call."""

    def __init__(self, fail: bool = False):
        self.store = {}
        self.ttls = {}
        self.fail = fail

    def _check(self):
        if self.fail:
            raise RedisConnectionError("connection refused")

    async def set(self, key, value, ex=None):
        self._check()
        self.store[key] = value.encode()
        self.ttls[key] = ex
        return True

    async def get(self, key):
        self._check()
        return self.store.get(key)

    async def delete(self, *keys):
        self._check()
        return sum(1 for key in keys if self.store.pop(key, None) is not None)

    async def scan_iter(self, match=None):
        self._check()
        for key in list(self.store):
            if match is None or fnmatch.fnmatchcase(key, match):
                yield key

    async def ping(self):
        self._check()
        return True


@pytest.fixture
def fake_redis(monkeypatch):
    client = InMemoryRedis()
    monkeypatch.setattr(cache, "redis_client", client)
    return client


@pytest.mark.asyncio
async def test_disabled_cache_is_always_a_miss():
    assert cache.redis_client is None
    assert await cache.set_cache("analytics:x", {"a": 1}) is False
    assert await cache.get_cache("analytics:x") is None
    assert await cache.invalidate_cache_pattern("analytics:*") == 0
    assert await cache.check_redis_connection() is False


@pytest.mark.asyncio
async def test_set_and_get_use_prefix_and_ttl(fake_redis):
    assert await cache.set_cache("analytics:2024", {"total": 3}, expire=timedelta(minutes=5))

    assert "csr:analytics:2024" in fake_redis.store
    assert fake_redis.ttls["csr:analytics:2024"] == 300
    assert json.loads(fake_redis.store["csr:analytics:2024"]) == {"total": 3}
    assert await cache.get_cache("analytics:2024") == {"total": 3}
    assert await cache.get_cache("analytics:missing") is None


@pytest.mark.asyncio
async def test_invalidate_pattern_only_removes_matching_keys(fake_redis):
    await cache.set_cache("analytics:a", 1)
    await cache.set_cache("analytics:b", 2)
    await cache.set_cache("reports:a", 3)

    assert await cache.invalidate_cache_pattern("analytics:*") == 2
    assert list(fake_redis.store) == ["csr:reports:a"]
    assert await cache.invalidate_cache_pattern("analytics:*") == 0


@pytest.mark.asyncio
async def test_redis_faults_degrade_to_a_miss(monkeypatch):
    monkeypatch.setattr(cache, "redis_client", InMemoryRedis(fail=True))

    assert await cache.set_cache("analytics:a", 1) is False
    assert await cache.get_cache("analytics:a") is None
    assert await cache.invalidate_cache_pattern("analytics:*") == 0
    assert await cache.check_redis_connection() is False


@pytest.mark.asyncio
async def test_corrupt_entry_is_a_miss(fake_redis):
    fake_redis.store["csr:analytics:bad"] = b"{not json"

    assert await cache.get_cache("analytics:bad") is None
