# src/jsonlingo/infrastructure/persistence/repositories/_callback_repo.py
"""回调投递审计仓库的 SQLAlchemy 实现。"""

from __future__ import annotations

from sqlalchemy import select

from jsonlingo.infrastructure.db._schema import CallbackAttemptModel, utcnow
from jsonlingo_core.types import CallbackAttempt
from jsonlingo_core.uow import ICallbackAttemptRepository

from ._base_repo import BaseRepository


class SqlAlchemyCallbackAttemptRepository(BaseRepository, ICallbackAttemptRepository):
    """只追加的回调审计仓库。"""

    async def add(self, attempt: CallbackAttempt) -> None:
        self._session.add(
            CallbackAttemptModel(
                job_id=attempt.job_id,
                http_status=attempt.http_status,
                response_body=attempt.response_body,
                error=attempt.error,
                created_at=attempt.created_at or utcnow(),
            )
        )

    async def list_for_job(self, job_id: str) -> list[CallbackAttempt]:
        stmt = (
            select(CallbackAttemptModel)
            .where(CallbackAttemptModel.job_id == job_id)
            .order_by(CallbackAttemptModel.id)
        )
        result = await self._session.execute(stmt)
        return [
            CallbackAttempt.model_validate(row, from_attributes=True)
            for row in result.scalars().all()
        ]
