# src/jsonlingo/adapters/engines/deepl.py
"""提供一个使用官方 `deepl` SDK 的翻译引擎。"""

from __future__ import annotations

import asyncio
from typing import Any

import deepl
import structlog

from jsonlingo.config import DeepLSettings
from jsonlingo.domain.markup import is_markup
from jsonlingo_core.exceptions import ConfigurationError
from jsonlingo_core.types import EngineBatchItemResult, EngineError, EngineSuccess

from .base import BaseTranslationEngine

logger = structlog.get_logger(__name__)


class DeepLEngine(BaseTranslationEngine[DeepLSettings]):
    """
    DeepL 翻译引擎。

    - 源语言为空时交由 DeepL 自动检测；
    - 批次中只要有一条文本含有标签，就以 `tag_handling="html"` 翻译整个批次；
    - 支持通过 `glossary_id` 使用 DeepL 术语表。

    SDK 是同步的，调用在线程池中执行。
    """

    CONFIG_MODEL = DeepLSettings
    VERSION = "1.0.0"

    def __init__(self, config: DeepLSettings):
        super().__init__(config)
        if not config.auth_key:
            raise ConfigurationError(
                "DeepL 引擎配置错误: 缺少认证密钥 (JSONLINGO_DEEPL__AUTH_KEY)。"
            )
        self.translator = deepl.Translator(
            config.auth_key, server_url=config.server_url
        )

    async def _translate(
        self,
        texts: list[str],
        target_lang: str,
        source_lang: str | None,
        glossary_id: str | None,
    ) -> list[EngineBatchItemResult]:
        options: dict[str, Any] = {}
        if glossary_id:
            options["glossary"] = glossary_id
        if any(is_markup(t) for t in texts):
            options["tag_handling"] = "html"

        try:
            results = await asyncio.to_thread(
                self.translator.translate_text,
                texts,
                source_lang=source_lang,
                target_lang=target_lang,
                **options,
            )
        except (deepl.TooManyRequestsException, deepl.ConnectionException) as e:
            return self._fail_all(texts, f"DeepL 暂时不可用: {e}", True)
        except (deepl.AuthorizationException, deepl.QuotaExceededException) as e:
            return self._fail_all(texts, f"DeepL 拒绝了请求: {e}", False)
        except deepl.DeepLException as e:
            retryable = bool(getattr(e, "should_retry", False))
            return self._fail_all(texts, f"DeepL 错误: {e}", retryable)

        if not isinstance(results, list):
            results = [results]
        return [EngineSuccess(translated_text=r.text) for r in results]

    @staticmethod
    def _fail_all(
        texts: list[str], message: str, is_retryable: bool
    ) -> list[EngineBatchItemResult]:
        logger.warning("DeepL 调用失败", error=message, is_retryable=is_retryable)
        return [EngineError(error_message=message, is_retryable=is_retryable)] * len(
            texts
        )
