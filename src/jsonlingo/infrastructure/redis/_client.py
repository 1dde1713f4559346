# src/jsonlingo/infrastructure/redis/_client.py
"""
Redis 客户端的创建。生命周期由 DI 容器管理，关闭由 bootstrap 负责。
"""

from __future__ import annotations

import redis.asyncio as aioredis

from jsonlingo.config import JsonLingoConfig


def create_redis_client(config: JsonLingoConfig) -> aioredis.Redis | None:
    """
    根据配置创建 Redis 异步客户端；未配置 URL 时返回 None。

    `from_url` 是惰性的，真正的连接发生在第一次命令时。
    """
    url = config.redis.url
    if not url:
        return None
    return aioredis.from_url(url, decode_responses=True)


async def close_redis_client(client: aioredis.Redis | None) -> None:
    """关闭 Redis 客户端连接（如果存在）。"""
    if client is not None:
        await client.aclose()
