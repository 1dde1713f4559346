# src/jsonlingo/infrastructure/uow.py
"""
SQLAlchemy 单元工作 (Unit of Work) 的具体实现。
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from jsonlingo_core.uow import IUnitOfWork

from .persistence.repositories import (
    SqlAlchemyCallbackAttemptRepository,
    SqlAlchemyJobRepository,
    SqlAlchemyQueueRepository,
    SqlAlchemyTranslationCacheRepository,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker


class SqlAlchemyUnitOfWork(IUnitOfWork):
    """SQLAlchemy UoW 实现：正常退出提交，异常退出回滚。"""

    def __init__(self, sessionmaker: "async_sessionmaker[AsyncSession]"):
        self._sessionmaker = sessionmaker
        self.session: "AsyncSession"

    async def __aenter__(self) -> "SqlAlchemyUnitOfWork":
        self.session = self._sessionmaker()
        self.jobs = SqlAlchemyJobRepository(self.session)
        self.callbacks = SqlAlchemyCallbackAttemptRepository(self.session)
        self.cache = SqlAlchemyTranslationCacheRepository(self.session)
        self.queue = SqlAlchemyQueueRepository(self.session)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        try:
            if exc_type is not None:
                await self.rollback()
            else:
                await self.commit()
        finally:
            await self.session.close()

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()


# 类型别名，用于依赖注入
UowFactory = Callable[[], IUnitOfWork]
