# tests/unit/adapters/test_engines.py
"""测试翻译引擎基类、调试引擎、引擎工厂以及 OpenAI / DeepL 适配器的错误分类。"""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import deepl
import httpx
import pytest
from openai import AuthenticationError, RateLimitError

from jsonlingo.adapters.engines.debug import DebugEngine
from jsonlingo.adapters.engines.deepl import DeepLEngine
from jsonlingo.adapters.engines.factory import create_engine_instance
from jsonlingo.adapters.engines.openai import OpenAIEngine
from jsonlingo.config import (
    DebugEngineSettings,
    DeepLSettings,
    JsonLingoConfig,
    OpenAISettings,
)
from jsonlingo_core.exceptions import ConfigurationError, EngineNotFoundError
from jsonlingo_core.types import EngineError, EngineSuccess
from tests.helpers.fakes import FakeTranslationEngine


def _completion(content: str | None) -> SimpleNamespace:
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))]
    )


def _openai_response(status: int) -> httpx.Response:
    return httpx.Response(
        status, request=httpx.Request("POST", "https://api.openai.com/v1/chat")
    )


class TestBaseEngine:
    @pytest.mark.asyncio
    async def test_exceptions_become_retryable_errors(self, mocker):
        engine = FakeTranslationEngine()
        mocker.patch.object(engine, "_translate", side_effect=RuntimeError("boom"))

        results = await engine.atranslate_batch(["a", "b"], "de")

        assert len(results) == 2
        assert all(isinstance(r, EngineError) and r.is_retryable for r in results)

    @pytest.mark.asyncio
    async def test_empty_batch_skips_the_engine(self):
        engine = FakeTranslationEngine()

        assert await engine.atranslate_batch([], "de") == []
        assert engine.calls == []

    def test_name_is_derived_from_class(self):
        assert DebugEngine.name() == "debug"
        assert DeepLEngine.name() == "deepl"
        assert OpenAIEngine.name() == "openai"


class TestDebugEngine:
    @pytest.mark.asyncio
    async def test_appends_target_language(self):
        engine = DebugEngine(DebugEngineSettings())
        results = await engine.atranslate_batch(["Hello"], "fr")
        assert results == [EngineSuccess(translated_text="Hello (fr)")]

    @pytest.mark.asyncio
    async def test_fail_on_text(self):
        engine = DebugEngine(
            DebugEngineSettings(fail_on_text="bad", fail_is_retryable=False)
        )
        ok, bad = await engine.atranslate_batch(["good", "bad"], "fr")
        assert isinstance(ok, EngineSuccess)
        assert isinstance(bad, EngineError) and bad.is_retryable is False


class TestFactory:
    def test_creates_debug_engine_from_config(self):
        config = JsonLingoConfig(debug_engine=DebugEngineSettings(mode="FAIL"))
        engine = create_engine_instance(config)
        assert isinstance(engine, DebugEngine)
        assert engine.config.mode == "FAIL"

    def test_unknown_engine(self):
        with pytest.raises(EngineNotFoundError):
            create_engine_instance(JsonLingoConfig(), engine_name="nope")

    @pytest.mark.parametrize("engine_name", ["openai", "deepl"])
    def test_missing_credentials(self, engine_name):
        with pytest.raises(ConfigurationError):
            create_engine_instance(JsonLingoConfig(), engine_name=engine_name)


class TestOpenAIEngine:
    @pytest.fixture
    def engine(self) -> OpenAIEngine:
        engine = OpenAIEngine(OpenAISettings(api_key="sk-test"))
        engine.client = MagicMock()
        engine.client.chat.completions.create = AsyncMock()
        return engine

    @pytest.mark.asyncio
    async def test_success_strips_content(self, engine):
        engine.client.chat.completions.create.return_value = _completion("  Hallo \n")
        results = await engine.atranslate_batch(["Hello"], "de", source_lang="en")
        assert results == [EngineSuccess(translated_text="Hallo")]

        messages = engine.client.chat.completions.create.await_args.kwargs["messages"]
        assert "from en" in messages[0]["content"]
        assert messages[1]["content"] == "Hello"

    @pytest.mark.asyncio
    async def test_empty_content_is_retryable(self, engine):
        engine.client.chat.completions.create.return_value = _completion("")
        (result,) = await engine.atranslate_batch(["Hello"], "de")
        assert isinstance(result, EngineError) and result.is_retryable

    @pytest.mark.asyncio
    async def test_rate_limit_is_retryable(self, engine):
        engine.client.chat.completions.create.side_effect = RateLimitError(
            "slow down", response=_openai_response(429), body=None
        )
        (result,) = await engine.atranslate_batch(["Hello"], "de")
        assert isinstance(result, EngineError) and result.is_retryable

    @pytest.mark.asyncio
    async def test_authentication_error_is_not_retryable(self, engine):
        engine.client.chat.completions.create.side_effect = AuthenticationError(
            "bad key", response=_openai_response(401), body={"message": "invalid key"}
        )
        (result,) = await engine.atranslate_batch(["Hello"], "de")
        assert isinstance(result, EngineError)
        assert result.is_retryable is False
        assert "invalid key" in result.error_message


class TestDeepLEngine:
    @pytest.fixture
    def engine(self) -> DeepLEngine:
        engine = DeepLEngine(DeepLSettings(auth_key="test-key:fx"))
        engine.translator = MagicMock()
        return engine

    @pytest.mark.asyncio
    async def test_markup_batches_use_html_tag_handling(self, engine):
        engine.translator.translate_text.return_value = [
            SimpleNamespace(text="Hallo"),
            SimpleNamespace(text="<b>Welt</b>"),
        ]

        results = await engine.atranslate_batch(
            ["Hello", "<b>World</b>"], "DE", glossary_id="gl-1"
        )

        assert [r.translated_text for r in results] == ["Hallo", "<b>Welt</b>"]
        kwargs = engine.translator.translate_text.call_args.kwargs
        assert kwargs["tag_handling"] == "html"
        assert kwargs["glossary"] == "gl-1"
        assert kwargs["source_lang"] is None

    @pytest.mark.asyncio
    async def test_plain_batches_have_no_tag_handling(self, engine):
        engine.translator.translate_text.return_value = [SimpleNamespace(text="Hallo")]
        await engine.atranslate_batch(["Hello"], "DE")
        assert "tag_handling" not in engine.translator.translate_text.call_args.kwargs

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "exc, retryable",
        [
            (deepl.QuotaExceededException("quota"), False),
            (deepl.AuthorizationException("forbidden"), False),
            (deepl.TooManyRequestsException("slow"), True),
            (deepl.ConnectionException("down"), True),
        ],
    )
    async def test_error_classification(self, engine, exc, retryable):
        engine.translator.translate_text.side_effect = exc
        results = await engine.atranslate_batch(["a", "b"], "DE")
        assert len(results) == 2
        assert all(isinstance(r, EngineError) for r in results)
        assert results[0].is_retryable is retryable
