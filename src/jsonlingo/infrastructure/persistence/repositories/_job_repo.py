# src/jsonlingo/infrastructure/persistence/repositories/_job_repo.py
"""翻译任务仓库的 SQLAlchemy 实现。"""

from __future__ import annotations

from typing import Any

from sqlalchemy import update

from jsonlingo.infrastructure.db._schema import TranslationJobModel, utcnow
from jsonlingo_core.types import JobStatus, TranslationJob
from jsonlingo_core.uow import IJobRepository

from ._base_repo import BaseRepository


class SqlAlchemyJobRepository(BaseRepository, IJobRepository):
    """
    翻译任务仓库实现。

    终态迁移使用 ``UPDATE ... WHERE status = 'pending'`` 守卫，
    通过受影响行数判断迁移是否真正发生。
    """

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
    ) -> None:
        self._session.add(
            TranslationJobModel(
                id=job_id,
                target_lang=target_lang,
                callback_url=callback_url,
                input_json=input_json,
                source_lang=source_lang,
                constraints=dict(constraints or {}),
                glossary_id=glossary_id,
                job_metadata=metadata,
            )
        )
        await self._session.flush()

    async def get(self, job_id: str) -> TranslationJob | None:
        orm_obj = await self._session.get(TranslationJobModel, job_id)
        return TranslationJob.from_orm_model(orm_obj) if orm_obj else None

    async def _transition(self, job_id: str, **values: Any) -> bool:
        now = utcnow()
        stmt = (
            update(TranslationJobModel)
            .where(
                TranslationJobModel.id == job_id,
                TranslationJobModel.status == JobStatus.PENDING.value,
            )
            .values(finished_at=now, updated_at=now, **values)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1

    async def mark_completed(
        self, job_id: str, *, output_json: Any, total_segments: int, cache_hits: int
    ) -> bool:
        return await self._transition(
            job_id,
            status=JobStatus.COMPLETED.value,
            output_json=output_json,
            total_segments=total_segments,
            cache_hits=cache_hits,
            error=None,
        )

    async def mark_failed(self, job_id: str, *, error: str) -> bool:
        return await self._transition(
            job_id, status=JobStatus.FAILED.value, error=error
        )
