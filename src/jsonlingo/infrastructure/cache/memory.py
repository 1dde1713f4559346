# src/jsonlingo/infrastructure/cache/memory.py
"""
进程内缓存实现，用于测试环境或未配置 Redis 时的 L1 缓存。
"""

from __future__ import annotations

from typing import Any

from cachetools import TTLCache

from jsonlingo_core.interfaces import CacheHandler


class MemoryCacheHandler(CacheHandler):
    """
    基于 `cachetools.TTLCache` 的进程内缓存。

    所有条目共享构造时给定的 TTL；`set` 的 `ttl` 参数在此实现中被忽略。
    """

    def __init__(
        self, maxsize: int = 10000, ttl: int = 3600, key_prefix: str = "jsonlingo:cache:"
    ):
        self._cache: TTLCache[str, Any] = TTLCache(maxsize=maxsize, ttl=ttl)
        self._prefix = key_prefix

    def _make_key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def get(self, key: str) -> Any | None:
        return self._cache.get(self._make_key(key))

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        self._cache[self._make_key(key)] = value

    async def delete(self, key: str) -> None:
        self._cache.pop(self._make_key(key), None)

    def clear(self) -> None:
        """清空所有缓存。"""
        self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)
