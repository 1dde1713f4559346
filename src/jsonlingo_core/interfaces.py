# src/jsonlingo_core/interfaces.py
"""
定义了 jsonlingo 系统中基础设施和外部能力的抽象接口协议 (Protocols)。
高层模块（如 application 层）应依赖于这些抽象接口，而不是具体的实现类。
"""
from __future__ import annotations

from typing import Any, Protocol


class CacheHandler(Protocol):
    """定义了 L1 缓存处理器的接口（Redis 或进程内缓存）。"""

    async def get(self, key: str) -> Any | None:
        """从缓存中获取一个值。"""
        ...

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """向缓存中设置一个值，并可选地设置过期时间（秒）。"""
        ...

    async def delete(self, key: str) -> None:
        """从缓存中删除一个键。"""
        ...


class TextShortener(Protocol):
    """定义了文本缩写能力（通常由大语言模型提供）的接口。"""

    async def ashorten(self, text: str, max_length: int, language: str) -> str:
        """将 `text` 缩写到 `max_length` 个字符以内。失败时应直接抛出异常。"""
        ...


class HttpPoster(Protocol):
    """回调投递所需的最小 HTTP 能力，`httpx.AsyncClient` 天然满足此协议。"""

    async def post(self, url: str, *, json: Any = None, **kwargs: Any) -> Any:
        ...
