# src/jsonlingo/application/queries.py
"""只读查询服务。"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from jsonlingo_core.types import CallbackAttempt, TranslationJob

if TYPE_CHECKING:
    from jsonlingo.infrastructure.uow import UowFactory


class JobStatusView(BaseModel):
    """任务及其全部回调尝试。"""

    job: TranslationJob
    callback_attempts: list[CallbackAttempt] = Field(default_factory=list)

    @property
    def callback_delivered(self) -> bool:
        return any(a.succeeded for a in self.callback_attempts)


class JobQueryService:
    def __init__(self, uow_factory: "UowFactory"):
        self._uow_factory = uow_factory

    async def get_job(self, job_id: str) -> JobStatusView | None:
        async with self._uow_factory() as uow:
            job = await uow.jobs.get(job_id)
            if job is None:
                return None
            attempts = await uow.callbacks.list_for_job(job_id)
        return JobStatusView(job=job, callback_attempts=attempts)
