# tests/unit/application/test_callbacks.py
"""测试回调负载的构建与投递器的确认/重试/死信决策。"""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from jsonlingo.application.callbacks import (
    CallbackDispatcher,
    build_callback_payload,
    callback_message,
    utc_timestamp,
)
from jsonlingo.domain.retry import BackoffPolicy
from jsonlingo_core.types import JobStatus, QueueMessage, TranslationJob
from tests.helpers.factories import CALLBACK_URL
from tests.helpers.fakes import FakeUnitOfWork

JOB = TranslationJob(
    id="job-42",
    status=JobStatus.COMPLETED,
    source_lang=None,
    target_lang="ja",
    callback_url=CALLBACK_URL,
    input_json={"a": "Hi"},
    job_metadata={"trace": "abc"},
)
POLICY = BackoffPolicy(max_attempts=3, initial_backoff=10.0, max_backoff=60.0)


def make_dispatcher(handler, uow: FakeUnitOfWork, **kwargs) -> CallbackDispatcher:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return CallbackDispatcher(client, lambda: uow, POLICY, **kwargs)


def make_message(attempt: int = 1, max_attempts: int = 3) -> QueueMessage:
    payload = build_callback_payload(JOB, JobStatus.COMPLETED, data={"a": "やあ"})
    return QueueMessage(
        id="msg-1",
        queue_name="callback",
        payload=callback_message(JOB.id, CALLBACK_URL, payload),
        attempt=attempt,
        max_attempts=max_attempts,
    )


class TestPayload:
    def test_utc_timestamp_format(self):
        ts = utc_timestamp(datetime(2024, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc))
        assert ts == "2024-01-02T03:04:05.678Z"

    def test_utc_timestamp_converts_offsets(self):
        tz = timezone(timedelta(hours=8))
        assert utc_timestamp(datetime(2024, 1, 1, 8, 0, tzinfo=tz)) == (
            "2024-01-01T00:00:00.000Z"
        )

    def test_completed_payload_carries_data_only(self):
        wire = build_callback_payload(JOB, JobStatus.COMPLETED, data={"a": "x"}).to_wire()
        assert wire["status"] == "completed"
        assert wire["data"] == {"a": "x"}
        assert "error" not in wire
        assert wire["sourceLang"] is None
        assert wire["targetLang"] == "ja"
        assert wire["metadata"] == {"trace": "abc"}
        assert wire["timestamp"].endswith("Z")

    def test_failed_payload_carries_error_only(self):
        wire = build_callback_payload(
            JOB, JobStatus.FAILED, data={"ignored": True}, error="boom"
        ).to_wire()
        assert wire["status"] == "failed"
        assert wire["error"] == "boom"
        assert "data" not in wire

    def test_pending_status_is_rejected(self):
        with pytest.raises(ValueError):
            build_callback_payload(JOB, JobStatus.PENDING)


class TestDeliver:
    @pytest.mark.asyncio
    async def test_2xx_is_recorded_as_success(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(204)

        uow = FakeUnitOfWork()
        attempt = await make_dispatcher(handler, uow).deliver(
            JOB.id, CALLBACK_URL, {"status": "completed"}
        )

        assert attempt.succeeded
        assert attempt.http_status == 204
        assert attempt.error is None
        assert json.loads(seen[0].content) == {"status": "completed"}
        assert seen[0].method == "POST"
        uow.callbacks.add.assert_awaited_once_with(attempt)

    @pytest.mark.asyncio
    async def test_non_2xx_response_body_is_truncated(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, text="x" * 50)

        uow = FakeUnitOfWork()
        attempt = await make_dispatcher(handler, uow, response_body_limit=10).deliver(
            JOB.id, CALLBACK_URL, {}
        )

        assert not attempt.succeeded
        assert attempt.error == "HTTP 500"
        assert attempt.response_body == "x" * 10

    @pytest.mark.asyncio
    async def test_transport_error_records_status_zero(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        uow = FakeUnitOfWork()
        attempt = await make_dispatcher(handler, uow).deliver(JOB.id, CALLBACK_URL, {})

        assert attempt.http_status == 0
        assert "ConnectError" in attempt.error
        uow.callbacks.add.assert_awaited_once()


class TestProcess:
    @pytest.mark.asyncio
    async def test_success_acks_message(self):
        uow = FakeUnitOfWork()
        dispatcher = make_dispatcher(lambda r: httpx.Response(200, text="ok"), uow)

        await dispatcher.process(make_message())

        uow.queue.ack.assert_awaited_once_with("msg-1", attempt=1)
        uow.queue.retry.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failure_with_attempts_left_is_rescheduled(self):
        uow = FakeUnitOfWork()
        dispatcher = make_dispatcher(lambda r: httpx.Response(503), uow)
        before = datetime.now(timezone.utc)

        await dispatcher.process(make_message(attempt=2))

        uow.queue.retry.assert_awaited_once()
        kwargs = uow.queue.retry.await_args.kwargs
        assert kwargs["error"] == "HTTP 503"
        # 第 2 次失败后等待 10 * 2 = 20 秒
        assert kwargs["available_at"] >= before + timedelta(seconds=20)
        uow.queue.dead_letter.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rate_limited_response_is_rescheduled_with_warning(self, mocker):
        log = mocker.patch("jsonlingo.application.callbacks.logger")
        uow = FakeUnitOfWork()
        dispatcher = make_dispatcher(
            lambda r: httpx.Response(429, text="slow down"), uow
        )

        await dispatcher.process(make_message(attempt=1))

        attempt = uow.callbacks.add.await_args.args[0]
        assert attempt.http_status == 429
        assert attempt.response_body == "slow down"
        kwargs = uow.queue.retry.await_args.kwargs
        assert kwargs["attempt"] == 1
        assert kwargs["error"] == "HTTP 429"
        uow.queue.ack.assert_not_awaited()
        uow.queue.dead_letter.assert_not_awaited()
        log.warning.assert_any_call("回调目标返回 429，对方正在限流", url=CALLBACK_URL)

    @pytest.mark.asyncio
    async def test_last_failure_dead_letters_message(self):
        uow = FakeUnitOfWork()
        dispatcher = make_dispatcher(lambda r: httpx.Response(404), uow)

        await dispatcher.process(make_message(attempt=3))

        uow.queue.dead_letter.assert_awaited_once_with(
            "msg-1", attempt=3, error="HTTP 404"
        )
        uow.queue.retry.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_expired_lease_past_max_attempts_is_dead_lettered_without_posting(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200)

        uow = FakeUnitOfWork()
        await make_dispatcher(handler, uow).process(make_message(attempt=4))

        assert calls == []
        uow.queue.dead_letter.assert_awaited_once()
        uow.callbacks.add.assert_not_awaited()
