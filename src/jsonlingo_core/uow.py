# src/jsonlingo_core/uow.py
"""
定义了单元工作 (Unit of Work) 及其所含仓库 (Repository) 的抽象协议。

所有写操作都必须在一个 UoW 作用域内完成：作用域正常退出即提交，
异常退出即回滚。
"""
from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Any, Protocol

from .types import CacheEntry, CallbackAttempt, QueueMessage, TranslationJob


class IJobRepository(Protocol):
    """翻译任务仓库。任务状态只能经由带守卫的条件更新离开 PENDING。"""

    async def add(
        self,
        *,
        job_id: str,
        input_json: Any,
        target_lang: str,
        callback_url: str,
        source_lang: str | None = None,
        constraints: dict[str, int] | None = None,
        glossary_id: str | None = None,
        metadata: Any = None,
    ) -> None: ...

    async def get(self, job_id: str) -> TranslationJob | None: ...

    async def mark_completed(
        self, job_id: str, *, output_json: Any, total_segments: int, cache_hits: int
    ) -> bool:
        """仅当任务仍为 PENDING 时将其置为 COMPLETED。返回是否发生了状态迁移。"""
        ...

    async def mark_failed(self, job_id: str, *, error: str) -> bool:
        """仅当任务仍为 PENDING 时将其置为 FAILED。返回是否发生了状态迁移。"""
        ...


class ICallbackAttemptRepository(Protocol):
    """回调投递审计仓库，只追加。"""

    async def add(self, attempt: CallbackAttempt) -> None: ...

    async def list_for_job(self, job_id: str) -> list[CallbackAttempt]: ...


class ITranslationCacheRepository(Protocol):
    """句段级翻译缓存仓库。"""

    async def find_many(
        self, source_hashes: Iterable[str], source_lang: str, target_lang: str
    ) -> dict[str, str]:
        """按哈希批量查询，返回 {source_hash: translated_text}。"""
        ...

    async def insert_ignore(self, entries: Iterable[CacheEntry]) -> None:
        """批量写入；主键冲突的条目被静默忽略（先写者胜）。"""
        ...


class IQueueRepository(Protocol):
    """基于数据库的持久化消息队列。"""

    async def enqueue(
        self,
        queue_name: str,
        payload: dict[str, Any],
        *,
        max_attempts: int,
        available_at: datetime | None = None,
    ) -> str: ...

    async def claim(
        self, queue_name: str, *, visibility_timeout: float
    ) -> QueueMessage | None:
        """原子地认领一条到期消息。每次认领都会使 attempt 加一。"""
        ...

    async def renew_lease(self, message_id: str, *, attempt: int) -> bool:
        """刷新租约。返回 False 表示租约已不属于调用方。"""
        ...

    async def ack(self, message_id: str, *, attempt: int) -> bool: ...

    async def retry(
        self, message_id: str, *, attempt: int, available_at: datetime, error: str
    ) -> bool: ...

    async def dead_letter(self, message_id: str, *, attempt: int, error: str) -> bool: ...


class IUnitOfWork(Protocol):
    """单元工作协议。"""

    jobs: IJobRepository
    callbacks: ICallbackAttemptRepository
    cache: ITranslationCacheRepository
    queue: IQueueRepository

    async def __aenter__(self) -> "IUnitOfWork": ...

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...
