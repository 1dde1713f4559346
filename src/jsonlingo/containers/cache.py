# src/jsonlingo/containers/cache.py
"""
L1 缓存容器：配置了 Redis 时使用 Redis，否则使用进程内 TTL 缓存。
"""

from __future__ import annotations

import redis.asyncio as aioredis
from dependency_injector import containers, providers

from jsonlingo.config import JsonLingoConfig
from jsonlingo.infrastructure.cache.memory import MemoryCacheHandler
from jsonlingo.infrastructure.redis import RedisCacheHandler, create_redis_client
from jsonlingo_core.interfaces import CacheHandler


def create_cache_handler(
    config: JsonLingoConfig, client: aioredis.Redis | None
) -> CacheHandler:
    if client is not None:
        return RedisCacheHandler(client, key_prefix=config.redis.key_prefix)
    return MemoryCacheHandler(
        maxsize=config.redis.cache.maxsize,
        ttl=config.redis.cache.ttl,
        key_prefix=config.redis.key_prefix,
    )


class CacheContainer(containers.DeclarativeContainer):
    """缓存层相关服务的容器。"""

    config = providers.Dependency(instance_of=JsonLingoConfig)

    # 未配置 URL 时为 None
    redis_client = providers.Singleton(create_redis_client, config=config)

    cache_handler = providers.Singleton(
        create_cache_handler,
        config=config,
        client=redis_client,
    )
