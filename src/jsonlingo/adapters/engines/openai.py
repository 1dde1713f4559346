# src/jsonlingo/adapters/engines/openai.py
"""提供一个使用 OpenAI Chat Completions API 的翻译引擎。"""

from __future__ import annotations

import asyncio

import httpx
import structlog
from openai import (
    APIConnectionError,
    APIStatusError,
    AsyncOpenAI,
    AuthenticationError,
    InternalServerError,
    PermissionDeniedError,
    RateLimitError,
)
from openai.types.chat import (
    ChatCompletionMessageParam,
    ChatCompletionSystemMessageParam,
    ChatCompletionUserMessageParam,
)

from jsonlingo.config import OpenAISettings
from jsonlingo_core.exceptions import ConfigurationError
from jsonlingo_core.types import EngineBatchItemResult, EngineError, EngineSuccess

from .base import BaseTranslationEngine

logger = structlog.get_logger(__name__)

SYSTEM_PROMPT = (
    "You are a professional translator. Translate the user's text into {target_lang}"
    "{source_clause}. Preserve any HTML tags and placeholders exactly as they appear. "
    "Return only the translated text, without explanations or quotes."
)


class OpenAIEngine(BaseTranslationEngine[OpenAISettings]):
    """
    每条文本一次 chat completion 调用，并发数受 `max_concurrency` 限制。

    术语表 (glossary) 对该引擎无效，会被忽略。
    """

    CONFIG_MODEL = OpenAISettings
    VERSION = "1.0.0"

    def __init__(self, config: OpenAISettings):
        super().__init__(config)
        if not config.api_key:
            raise ConfigurationError(
                "OpenAI 引擎配置错误: 缺少 API 密钥 (JSONLINGO_OPENAI__API_KEY)。"
            )
        self.client = AsyncOpenAI(
            api_key=config.api_key,
            base_url=config.base_url,
            timeout=httpx.Timeout(config.timeout, connect=config.connect_timeout),
            max_retries=config.max_retries,
        )
        self._semaphore = asyncio.Semaphore(config.max_concurrency)

    async def close(self) -> None:
        await self.client.close()
        logger.info("OpenAI 引擎的 HTTP 客户端已关闭。")
        await super().close()

    async def _translate(
        self,
        texts: list[str],
        target_lang: str,
        source_lang: str | None,
        glossary_id: str | None,
    ) -> list[EngineBatchItemResult]:
        return list(
            await asyncio.gather(
                *(self._translate_one(t, target_lang, source_lang) for t in texts)
            )
        )

    async def _translate_one(
        self, text: str, target_lang: str, source_lang: str | None
    ) -> EngineBatchItemResult:
        source_clause = f" from {source_lang}" if source_lang else ""
        messages: list[ChatCompletionMessageParam] = [
            ChatCompletionSystemMessageParam(
                role="system",
                content=SYSTEM_PROMPT.format(
                    target_lang=target_lang, source_clause=source_clause
                ),
            ),
            ChatCompletionUserMessageParam(role="user", content=text),
        ]

        try:
            async with self._semaphore:
                response = await self.client.chat.completions.create(
                    model=self.config.model,
                    messages=messages,
                    temperature=self.config.temperature,
                )
        except (RateLimitError, InternalServerError, APIConnectionError) as e:
            return EngineError(error_message=str(e), is_retryable=True)
        except (PermissionDeniedError, AuthenticationError, APIStatusError) as e:
            error_msg = (
                e.body.get("message", str(e)) if isinstance(e.body, dict) else str(e)
            )
            return EngineError(
                error_message=f"API Error: {error_msg}", is_retryable=False
            )

        if not response.choices:
            return EngineError(
                error_message="API 返回了空的 'choices' 列表。", is_retryable=True
            )
        content = (response.choices[0].message.content or "").strip()
        if not content:
            return EngineError(error_message="API 返回了空内容。", is_retryable=True)
        return EngineSuccess(translated_text=content)
