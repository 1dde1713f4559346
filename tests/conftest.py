# tests/conftest.py
"""
Pytest 共享夹具。

核心 Fixtures:
- test_config: 指向临时 SQLite 文件的配置对象，使用调试引擎。
- db_engine: 已建好所有表的异步引擎（每个测试一个独立的数据库文件）。
- uow_factory: 基于 db_engine 的 UoW 工厂，用于在测试中与数据库交互。
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine

from jsonlingo.config import (
    DatabaseSettings,
    JsonLingoConfig,
    RetryPolicySettings,
    WorkerSettings,
)
from jsonlingo.infrastructure.db import (
    create_async_db_engine,
    create_async_sessionmaker,
    create_schema,
    dispose_engine,
)
from jsonlingo.infrastructure.uow import SqlAlchemyUnitOfWork, UowFactory


@pytest.fixture
def test_config(tmp_path: Path) -> JsonLingoConfig:
    """每个测试一个临时 SQLite 文件；重试退避取极小值以便立即重新认领。"""
    return JsonLingoConfig(
        database=DatabaseSettings(url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"),
        worker=WorkerSettings(
            poll_interval=0.01, translation_concurrency=1, callback_concurrency=1
        ),
        translation_retry=RetryPolicySettings(
            max_attempts=3, initial_backoff=0.001, max_backoff=0.001
        ),
        callback_retry=RetryPolicySettings(
            max_attempts=2, initial_backoff=0.001, max_backoff=0.001
        ),
        active_engine="debug",
    )


@pytest_asyncio.fixture
async def db_engine(test_config: JsonLingoConfig) -> AsyncGenerator[AsyncEngine, None]:
    engine = create_async_db_engine(test_config)
    await create_schema(engine)
    try:
        yield engine
    finally:
        await dispose_engine(engine)


@pytest.fixture
def uow_factory(db_engine: AsyncEngine) -> UowFactory:
    sessionmaker = create_async_sessionmaker(db_engine)
    return lambda: SqlAlchemyUnitOfWork(sessionmaker)
