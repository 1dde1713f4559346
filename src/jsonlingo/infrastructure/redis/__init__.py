# src/jsonlingo/infrastructure/redis/__init__.py
from ._client import close_redis_client, create_redis_client
from .cache import RedisCacheHandler

__all__ = ["create_redis_client", "close_redis_client", "RedisCacheHandler"]
