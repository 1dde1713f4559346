# src/jsonlingo/adapters/cli/_utils.py
"""CLI 内部共享的辅助工具。"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TypeVar

from jsonlingo.bootstrap import close_container
from jsonlingo.containers import ApplicationContainer

T = TypeVar("T")


async def run_with_container(
    container: ApplicationContainer,
    logic: Callable[[ApplicationContainer], Awaitable[T]],
) -> T:
    """执行一段异步逻辑，结束后无论成败都释放容器资源。"""
    try:
        return await logic(container)
    finally:
        await close_container(container)
