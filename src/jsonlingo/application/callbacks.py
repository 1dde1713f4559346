# src/jsonlingo/application/callbacks.py
"""
回调投递：把任务的最终结果 POST 到调用方提供的 URL。

投递有独立的重试次数上限，每一次尝试都会追加一条 `CallbackAttempt` 审计记录。
投递器从不修改任务本身。
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import httpx
import structlog
from structlog.contextvars import bound_contextvars

from jsonlingo_core.types import CallbackAttempt, CallbackPayload, JobStatus, QueueMessage

if TYPE_CHECKING:
    from jsonlingo.domain.retry import BackoffPolicy
    from jsonlingo.infrastructure.uow import UowFactory
    from jsonlingo_core.interfaces import HttpPoster
    from jsonlingo_core.types import TranslationJob

logger = structlog.get_logger(__name__)

NO_RESPONSE_STATUS = 0


def utc_timestamp(now: datetime | None = None) -> str:
    """ISO-8601 UTC 时间戳，形如 ``2024-01-01T00:00:00.000Z``。"""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


def build_callback_payload(
    job: "TranslationJob",
    status: JobStatus,
    *,
    data: Any = None,
    error: str | None = None,
) -> CallbackPayload:
    """根据任务与终态构建回调负载。metadata 原样回传。"""
    if status is JobStatus.PENDING:
        raise ValueError("只能为终态任务构建回调负载")
    return CallbackPayload(
        status=status.value,
        data=data if status is JobStatus.COMPLETED else None,
        error=error if status is JobStatus.FAILED else None,
        source_lang=job.source_lang,
        target_lang=job.target_lang,
        metadata=job.job_metadata,
        timestamp=utc_timestamp(),
    )


def callback_message(job_id: str, url: str, payload: CallbackPayload) -> dict[str, Any]:
    """回调队列消息的负载格式。"""
    return {"job_id": job_id, "url": url, "body": payload.to_wire()}


class CallbackDispatcher:
    def __init__(
        self,
        http_client: "HttpPoster",
        uow_factory: "UowFactory",
        policy: "BackoffPolicy",
        *,
        timeout: float = 10.0,
        response_body_limit: int = 1000,
    ):
        self._http = http_client
        self._uow_factory = uow_factory
        self._policy = policy
        self._timeout = timeout
        self._body_limit = response_body_limit

    async def deliver(
        self, job_id: str, url: str, payload: dict[str, Any]
    ) -> CallbackAttempt:
        """
        执行一次 POST 并记录一次尝试。2xx 视为成功。

        传输层错误不会抛出，而是记录为 http_status=0 的失败尝试。
        """
        try:
            response = await self._http.post(url, json=payload, timeout=self._timeout)
        except httpx.HTTPError as e:
            attempt = CallbackAttempt(
                job_id=job_id,
                http_status=NO_RESPONSE_STATUS,
                error=f"{type(e).__name__}: {e}",
            )
        else:
            status = response.status_code
            attempt = CallbackAttempt(
                job_id=job_id,
                http_status=status,
                response_body=response.text[: self._body_limit],
                error=None if 200 <= status < 300 else f"HTTP {status}",
            )
            if status == 429:
                logger.warning("回调目标返回 429，对方正在限流", url=url)

        async with self._uow_factory() as uow:
            await uow.callbacks.add(attempt)

        if attempt.succeeded:
            logger.info("回调投递成功", url=url, http_status=attempt.http_status)
        else:
            logger.warning(
                "回调投递失败",
                url=url,
                http_status=attempt.http_status,
                error=attempt.error,
            )
        return attempt

    async def process(self, message: QueueMessage) -> None:
        """处理一条回调队列消息：投递，然后确认、重排或转入死信。"""
        job_id = message.payload["job_id"]
        url = message.payload["url"]
        with bound_contextvars(
            job_id=job_id, message_id=message.id, attempt=message.attempt
        ):
            if message.attempt > message.max_attempts:
                await self._exhausted(message, "租约超时且重试次数已用尽")
                return

            attempt = await self.deliver(job_id, url, message.payload["body"])
            if attempt.succeeded:
                async with self._uow_factory() as uow:
                    await uow.queue.ack(message.id, attempt=message.attempt)
                return

            error = attempt.error or "unknown error"
            if message.is_last_attempt:
                await self._exhausted(message, error)
                return

            available_at = self._policy.next_available_at(message.attempt)
            async with self._uow_factory() as uow:
                await uow.queue.retry(
                    message.id,
                    attempt=message.attempt,
                    available_at=available_at,
                    error=error,
                )
            logger.info(
                "回调将稍后重试",
                delay_seconds=self._policy.delay_for(message.attempt),
                max_attempts=message.max_attempts,
            )

    async def _exhausted(self, message: QueueMessage, error: str) -> None:
        async with self._uow_factory() as uow:
            await uow.queue.dead_letter(
                message.id, attempt=message.attempt, error=error
            )
        logger.error(
            "回调重试次数已用尽，放弃投递",
            url=message.payload.get("url"),
            attempts=message.attempt,
            last_error=error,
        )
