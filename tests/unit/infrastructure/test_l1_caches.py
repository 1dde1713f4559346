# tests/unit/infrastructure/test_l1_caches.py
"""测试 L1 缓存实现：Redis 故障降级，以及进程内 TTL 缓存。"""

from unittest.mock import AsyncMock

import pytest
import redis.asyncio as aioredis

from jsonlingo.infrastructure.cache import MemoryCacheHandler
from jsonlingo.infrastructure.redis import RedisCacheHandler


@pytest.fixture
def redis_client() -> AsyncMock:
    return AsyncMock()


class TestRedisCacheHandler:
    @pytest.mark.asyncio
    async def test_get_deserializes_prefixed_key(self, redis_client):
        redis_client.get.return_value = '"Hallo"'
        handler = RedisCacheHandler(redis_client, key_prefix="jl:test:")

        assert await handler.get("tm:en:de:abc") == "Hallo"
        redis_client.get.assert_awaited_once_with("jl:test:tm:en:de:abc")

    @pytest.mark.asyncio
    async def test_get_miss(self, redis_client):
        redis_client.get.return_value = None
        assert await RedisCacheHandler(redis_client).get("k") is None

    @pytest.mark.asyncio
    async def test_redis_error_degrades_to_miss(self, redis_client):
        redis_client.get.side_effect = aioredis.ConnectionError("down")
        assert await RedisCacheHandler(redis_client).get("k") is None

    @pytest.mark.asyncio
    async def test_corrupt_value_degrades_to_miss(self, redis_client):
        redis_client.get.return_value = "{not json"
        assert await RedisCacheHandler(redis_client).get("k") is None

    @pytest.mark.asyncio
    async def test_set_serializes_with_ttl(self, redis_client):
        handler = RedisCacheHandler(redis_client, key_prefix="p:")
        await handler.set("k", "Grüß Gott", ttl=60)
        redis_client.set.assert_awaited_once_with("p:k", '"Grüß Gott"', ex=60)

    @pytest.mark.asyncio
    async def test_set_swallows_redis_errors(self, redis_client):
        redis_client.set.side_effect = aioredis.TimeoutError("slow")
        await RedisCacheHandler(redis_client).set("k", "v")

    @pytest.mark.asyncio
    async def test_set_skips_unserializable_values(self, redis_client):
        await RedisCacheHandler(redis_client).set("k", object())
        redis_client.set.assert_not_awaited()


class TestMemoryCacheHandler:
    @pytest.mark.asyncio
    async def test_set_get_delete(self):
        cache = MemoryCacheHandler(maxsize=10, ttl=60, key_prefix="t:")
        await cache.set("a", "1")
        assert await cache.get("a") == "1"
        assert len(cache) == 1

        await cache.delete("a")
        assert await cache.get("a") is None
        await cache.delete("a")

    @pytest.mark.asyncio
    async def test_maxsize_evicts(self):
        cache = MemoryCacheHandler(maxsize=2, ttl=60)
        for key in "abc":
            await cache.set(key, key)
        assert len(cache) == 2

    @pytest.mark.asyncio
    async def test_clear(self):
        cache = MemoryCacheHandler()
        await cache.set("a", "1")
        cache.clear()
        assert len(cache) == 0
