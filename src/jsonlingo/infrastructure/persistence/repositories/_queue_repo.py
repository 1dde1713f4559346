# src/jsonlingo/infrastructure/persistence/repositories/_queue_repo.py
"""基于数据库的持久化消息队列仓库。"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import and_, func, or_, select, update

from jsonlingo.infrastructure.db._schema import QueueMessageModel, utcnow
from jsonlingo_core.types import QueueMessage, QueueMessageStatus
from jsonlingo_core.uow import IQueueRepository

from ._base_repo import BaseRepository

M = QueueMessageModel


class SqlAlchemyQueueRepository(BaseRepository, IQueueRepository):
    """
    持久化队列实现。

    认领分两步：先选出一条候选消息（PostgreSQL 上附加 ``FOR UPDATE SKIP LOCKED``），
    再以带条件的 UPDATE 抢占；只有受影响行数为 1 的一方真正拿到消息。
    租约超过 `visibility_timeout` 的 RUNNING 消息会被重新认领，并计作一次新的尝试。
    确认、重排与死信都以 ``(id, RUNNING, attempts)`` 为条件，
    过期租约的持有者无法覆盖新持有者的状态。
    """

    async def enqueue(
        self,
        queue_name: str,
        payload: dict[str, Any],
        *,
        max_attempts: int,
        available_at: datetime | None = None,
    ) -> str:
        message_id = str(uuid.uuid4())
        self._session.add(
            M(
                id=message_id,
                queue_name=queue_name,
                payload=payload,
                max_attempts=max_attempts,
                available_at=available_at or utcnow(),
            )
        )
        await self._session.flush()
        return message_id

    async def claim(
        self, queue_name: str, *, visibility_timeout: float
    ) -> QueueMessage | None:
        now = utcnow()
        lease_expired_before = now - timedelta(seconds=visibility_timeout)
        claimable = or_(
            and_(
                M.status == QueueMessageStatus.PENDING.value,
                M.available_at <= now,
            ),
            and_(
                M.status == QueueMessageStatus.RUNNING.value,
                M.locked_at <= lease_expired_before,
            ),
        )
        candidate_stmt = (
            select(M.id, M.status, M.attempts, M.max_attempts, M.payload)
            .where(M.queue_name == queue_name, claimable)
            .order_by(M.available_at)
            .limit(1)
            .with_for_update(skip_locked=True)
        )
        candidate = (await self._session.execute(candidate_stmt)).first()
        if candidate is None:
            return None

        claim_stmt = (
            update(M)
            .where(
                M.id == candidate.id,
                M.status == candidate.status,
                M.attempts == candidate.attempts,
            )
            .values(
                status=QueueMessageStatus.RUNNING.value,
                attempts=M.attempts + 1,
                locked_at=now,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(claim_stmt)
        if result.rowcount != 1:
            # 被其他消费者抢先
            return None

        return QueueMessage(
            id=candidate.id,
            queue_name=queue_name,
            payload=candidate.payload,
            attempt=candidate.attempts + 1,
            max_attempts=candidate.max_attempts,
        )

    def _owned(self, message_id: str, attempt: int) -> Any:
        # 只有当前租约的持有者（认领时的 attempt）才能改动消息
        return and_(
            M.id == message_id,
            M.status == QueueMessageStatus.RUNNING.value,
            M.attempts == attempt,
        )

    async def renew_lease(self, message_id: str, *, attempt: int) -> bool:
        """刷新租约时间。返回 False 表示租约已被其他消费者接管或消息已结算。"""
        now = utcnow()
        stmt = (
            update(M)
            .where(self._owned(message_id, attempt))
            .values(locked_at=now, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1

    async def _set(self, message_id: str, attempt: int, **values: Any) -> bool:
        stmt = (
            update(M)
            .where(self._owned(message_id, attempt))
            .values(locked_at=None, updated_at=utcnow(), **values)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1

    async def ack(self, message_id: str, *, attempt: int) -> bool:
        return await self._set(message_id, attempt, status=QueueMessageStatus.DONE.value)

    async def retry(
        self, message_id: str, *, attempt: int, available_at: datetime, error: str
    ) -> bool:
        return await self._set(
            message_id,
            attempt,
            status=QueueMessageStatus.PENDING.value,
            available_at=available_at,
            last_error=error,
        )

    async def dead_letter(self, message_id: str, *, attempt: int, error: str) -> bool:
        return await self._set(
            message_id, attempt, status=QueueMessageStatus.DEAD.value, last_error=error
        )

    async def count_by_status(self, queue_name: str) -> dict[str, int]:
        """按状态统计某个队列的消息数量，供运维查询使用。"""
        stmt = (
            select(M.status, func.count())
            .where(M.queue_name == queue_name)
            .group_by(M.status)
        )
        result = await self._session.execute(stmt)
        return {status: count for status, count in result.all()}
