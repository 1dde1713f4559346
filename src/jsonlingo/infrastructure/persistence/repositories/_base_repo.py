# src/jsonlingo/infrastructure/persistence/repositories/_base_repo.py
from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


class BaseRepository:
    """所有 SQLAlchemy 仓库的基类。"""

    def __init__(self, session: "AsyncSession"):
        self._session = session

    def _get_insert_stmt(self) -> Any:
        """根据当前会话的方言，返回支持 ON CONFLICT 的 insert 函数。"""
        if self._session.bind.dialect.name == "postgresql":
            return pg_insert
        return sqlite_insert
