# src/jsonlingo/application/scheduler.py
"""
任务调度器：接收请求、持久化任务状态、处理翻译队列消息并决定重试或终态。

任务状态只会经历 ``pending -> completed | failed`` 一次，终态迁移在 SQL 中以
``WHERE status = 'pending'`` 守卫。结算（状态迁移、回调入队、消息确认）在同一个事务中完成。
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Any
from urllib.parse import urlparse

import langcodes
import structlog
from pydantic import ValidationError
from structlog.contextvars import bound_contextvars

from jsonlingo.domain.tree import extract_strings
from jsonlingo_core.exceptions import InvalidRequestError, UnsupportedJsonTypeError
from jsonlingo_core.types import (
    CallbackPayload,
    JobStatus,
    PipelineFailure,
    PipelineResult,
    PipelineSuccess,
    QueueMessage,
    TranslationJob,
    TranslationRequest,
)

from .callbacks import build_callback_payload, callback_message

if TYPE_CHECKING:
    from jsonlingo.config import JsonLingoConfig
    from jsonlingo.infrastructure.uow import UowFactory
    from jsonlingo_core.uow import IUnitOfWork

    from .pipeline import TranslationPipeline

logger = structlog.get_logger(__name__)


def validate_request(request: TranslationRequest | dict[str, Any]) -> TranslationRequest:
    """
    校验翻译请求。任何输入错误都会以 `InvalidRequestError` 拒绝。

    Raises:
        InvalidRequestError: 字段缺失、语言代码非法、回调地址非 http(s)、
            约束值小于 1，或 json 中含有非 JSON 值。
    """
    if not isinstance(request, TranslationRequest):
        try:
            request = TranslationRequest.model_validate(request)
        except ValidationError as e:
            raise InvalidRequestError(f"请求结构非法: {e}") from e

    languages = {"targetLang": request.target_lang, "sourceLang": request.source_lang}
    for field, lang in languages.items():
        if lang is not None and not langcodes.tag_is_valid(lang):
            raise InvalidRequestError(f"非法语言代码 {field}={lang!r}")

    parsed = urlparse(request.callback_url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidRequestError(
            f"callbackUrl 必须是绝对的 http(s) 地址: {request.callback_url!r}"
        )

    bad = {k: v for k, v in request.constraints.items() if v < 1}
    if bad:
        raise InvalidRequestError(f"constraints 中的长度上限必须 >= 1: {bad}")

    try:
        extract_strings(request.json_value)
    except UnsupportedJsonTypeError as e:
        raise InvalidRequestError(f"json 字段不是合法的 JSON 值: {e}") from e
    return request


class JobScheduler:
    def __init__(
        self,
        uow_factory: "UowFactory",
        pipeline: "TranslationPipeline",
        config: "JsonLingoConfig",
    ):
        self._uow_factory = uow_factory
        self._pipeline = pipeline
        self._config = config
        self._policy = config.translation_retry.to_policy()

    async def submit(self, request: TranslationRequest | dict[str, Any]) -> str:
        """校验请求，在同一事务中创建 PENDING 任务并将其放入翻译队列。"""
        request = validate_request(request)
        job_id = str(uuid.uuid4())

        async with self._uow_factory() as uow:
            await uow.jobs.add(
                job_id=job_id,
                input_json=request.json_value,
                target_lang=request.target_lang,
                callback_url=request.callback_url,
                source_lang=request.source_lang,
                constraints=request.constraints,
                glossary_id=request.glossary_id,
                metadata=request.metadata,
            )
            await uow.queue.enqueue(
                self._config.queue.translation_queue,
                {"job_id": job_id},
                max_attempts=self._policy.max_attempts,
            )

        logger.info(
            "翻译任务已创建并入队",
            job_id=job_id,
            source_lang=request.source_lang or "auto",
            target_lang=request.target_lang,
        )
        return job_id

    async def process(self, message: QueueMessage) -> None:
        """处理一条翻译队列消息。"""
        job_id = message.payload["job_id"]
        with bound_contextvars(
            job_id=job_id, message_id=message.id, attempt=message.attempt
        ):
            async with self._uow_factory() as uow:
                job = await uow.jobs.get(job_id)

            if job is None:
                logger.error("队列消息引用的任务不存在，消息转入死信")
                async with self._uow_factory() as uow:
                    await uow.queue.dead_letter(
                        message.id, attempt=message.attempt, error="job not found"
                    )
                return

            if job.status.is_terminal:
                logger.info("任务已处于终态，跳过处理", status=job.status.value)
                async with self._uow_factory() as uow:
                    await uow.queue.ack(message.id, attempt=message.attempt)
                return

            if message.attempt > message.max_attempts:
                # 最后一次尝试的租约超时后被重新认领
                result: PipelineResult = PipelineFailure(
                    error_message="处理超时且重试次数已用尽",
                    is_retryable=False,
                    error_type="LeaseExpired",
                )
            else:
                logger.info("开始处理翻译任务", max_attempts=message.max_attempts)
                result = await self._pipeline.run(job)

            await self._settle(job, message, result)

    async def _settle(
        self, job: TranslationJob, message: QueueMessage, result: PipelineResult
    ) -> None:
        async with self._uow_factory() as uow:
            if isinstance(result, PipelineSuccess):
                await self._complete(uow, job, result)
                settled = await uow.queue.ack(message.id, attempt=message.attempt)
            elif result.is_retryable and not message.is_last_attempt:
                # 中间失败只记录在队列消息上，任务本身不暴露错误
                settled = await uow.queue.retry(
                    message.id,
                    attempt=message.attempt,
                    available_at=self._policy.next_available_at(message.attempt),
                    error=result.error_message,
                )
                if settled:
                    logger.warning(
                        "任务失败，将按指数退避重试",
                        error=result.error_message,
                        delay_seconds=self._policy.delay_for(message.attempt),
                        max_attempts=message.max_attempts,
                    )
            else:
                await self._fail(uow, job, result)
                settled = await uow.queue.dead_letter(
                    message.id, attempt=message.attempt, error=result.error_message
                )
        if not settled:
            logger.warning("消息租约已被其他消费者接管，未改动队列状态")

    async def _complete(
        self, uow: "IUnitOfWork", job: TranslationJob, result: PipelineSuccess
    ) -> None:
        transitioned = await uow.jobs.mark_completed(
            job.id,
            output_json=result.output_json,
            total_segments=result.total_segments,
            cache_hits=result.cache_hits,
        )
        if not transitioned:
            logger.warning("任务已被其他执行者置为终态，丢弃本次结果")
            return
        payload = build_callback_payload(
            job, JobStatus.COMPLETED, data=result.output_json
        )
        await self._enqueue_callback(uow, job, payload)
        logger.info(
            "任务已完成",
            total_segments=result.total_segments,
            cache_hits=result.cache_hits,
        )

    async def _fail(
        self, uow: "IUnitOfWork", job: TranslationJob, result: PipelineFailure
    ) -> None:
        transitioned = await uow.jobs.mark_failed(job.id, error=result.error_message)
        if not transitioned:
            logger.warning("任务已被其他执行者置为终态，丢弃本次失败")
            return
        payload = build_callback_payload(
            job, JobStatus.FAILED, error=result.error_message
        )
        await self._enqueue_callback(uow, job, payload)
        logger.error(
            "任务最终失败",
            error=result.error_message,
            error_type=result.error_type,
            is_retryable=result.is_retryable,
        )

    async def _enqueue_callback(
        self, uow: "IUnitOfWork", job: TranslationJob, payload: CallbackPayload
    ) -> None:
        await uow.queue.enqueue(
            self._config.queue.callback_queue,
            callback_message(job.id, job.callback_url, payload),
            max_attempts=self._config.callback_retry.max_attempts,
        )
