# src/jsonlingo/infrastructure/db/__init__.py
"""
数据库公共 API。上层只从本包导入，不直接引用内部模块路径。
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine

from .base import Base, metadata
from .engine import create_async_db_engine
from .session import create_async_sessionmaker


async def create_schema(engine: AsyncEngine) -> None:
    """创建所有表（已存在的表会被跳过）。"""
    from . import _schema  # noqa: F401  注册所有 ORM 模型

    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)


async def dispose_engine(engine: AsyncEngine) -> None:
    """释放底层连接池资源。"""
    await engine.dispose()


__all__ = [
    "Base",
    "metadata",
    "create_async_db_engine",
    "create_async_sessionmaker",
    "create_schema",
    "dispose_engine",
]
