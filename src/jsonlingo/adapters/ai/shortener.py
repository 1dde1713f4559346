# src/jsonlingo/adapters/ai/shortener.py
"""
基于大语言模型的文本缩写能力。

缩写器只负责调用模型；长度兜底（截断、省略号）由 `LengthEnforcer` 负责。
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import httpx
import structlog
from openai import AsyncOpenAI

from jsonlingo.config import OpenAISettings

logger = structlog.get_logger(__name__)

EDITOR_PROMPT = (
    "You are a professional editor. Your task is to shorten the provided text in "
    "{language} to be under {max_length} characters (including spaces). "
    "Maintain the original tone and meaning as much as possible. "
    "Output ONLY the shortened text, no explanations, no quotes."
)


class BaseShortener(ABC):
    """文本缩写器的抽象基类。"""

    @abstractmethod
    async def ashorten(self, text: str, max_length: int, language: str) -> str:
        """返回缩写后的文本。失败时直接抛出异常。"""
        raise NotImplementedError

    async def close(self) -> None:
        """释放底层客户端资源。"""


class OpenAIShortener(BaseShortener):
    """使用 OpenAI Chat Completions API 的缩写器。"""

    def __init__(self, config: OpenAISettings, client: AsyncOpenAI | None = None):
        self.config = config
        self.client = client or AsyncOpenAI(
            api_key=config.api_key,
            base_url=config.base_url,
            timeout=httpx.Timeout(config.timeout, connect=config.connect_timeout),
            max_retries=config.max_retries,
        )

    async def ashorten(self, text: str, max_length: int, language: str) -> str:
        response = await self.client.chat.completions.create(
            model=self.config.model,
            messages=[
                {
                    "role": "system",
                    "content": EDITOR_PROMPT.format(
                        language=language, max_length=max_length
                    ),
                },
                {"role": "user", "content": text},
            ],
            temperature=self.config.shortener_temperature,
        )
        if not response.choices:
            return text
        return (response.choices[0].message.content or "").strip() or text

    async def close(self) -> None:
        await self.client.close()


def create_shortener(config: OpenAISettings) -> BaseShortener | None:
    """未配置 API Key 时返回 None，此时超长文本一律硬截断。"""
    if not config.api_key:
        logger.info("未配置 OpenAI API Key，文本缩写功能已禁用。")
        return None
    return OpenAIShortener(config)
