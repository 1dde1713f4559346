# src/jsonlingo/infrastructure/redis/cache.py
"""
使用 Redis 实现 `CacheHandler` 接口。

L1 缓存是数据库缓存之前的加速层：Redis 故障只会被记录并降级为未命中，
不会让翻译任务失败。
"""

from __future__ import annotations

import json
from typing import Any

import redis.asyncio as aioredis
import structlog

from jsonlingo_core.interfaces import CacheHandler


class RedisCacheHandler(CacheHandler):
    """基于 Redis 的分布式缓存实现。"""

    def __init__(self, client: aioredis.Redis, key_prefix: str = "jsonlingo:cache:"):
        self._client = client
        self._prefix = key_prefix
        self._logger = structlog.get_logger(__name__)

    async def get(self, key: str) -> Any | None:
        """从 Redis 获取缓存值并反序列化。"""
        try:
            raw_value = await self._client.get(self._prefix + key)
        except aioredis.RedisError as e:
            self._logger.error("Redis 操作失败", operation="get", key=key, error=str(e))
            return None
        if raw_value is None:
            return None
        try:
            return json.loads(raw_value)
        except json.JSONDecodeError as e:
            self._logger.warning(
                "缓存值反序列化失败", key=key, raw_value=raw_value, error=str(e)
            )
            return None

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """序列化值并写入 Redis，支持 TTL。"""
        try:
            serialized_value = json.dumps(value, ensure_ascii=False)
        except TypeError as e:
            self._logger.warning(
                "缓存值序列化失败，跳过写入",
                key=key,
                value_type=type(value).__name__,
                error=str(e),
            )
            return
        try:
            await self._client.set(self._prefix + key, serialized_value, ex=ttl)
        except aioredis.RedisError as e:
            self._logger.error(
                "Redis 写入操作失败", operation="set", key=key, ttl=ttl, error=str(e)
            )

    async def delete(self, key: str) -> None:
        """从 Redis 删除指定键。"""
        await self._client.delete(self._prefix + key)
