# src/jsonlingo/application/batch_translator.py
"""按固定批量调用翻译引擎，只翻译缓存未命中的句段。"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from jsonlingo_core.exceptions import TranslationProviderError
from jsonlingo_core.types import EngineError, EngineSuccess

if TYPE_CHECKING:
    from jsonlingo.adapters.engines.base import BaseTranslationEngine

logger = structlog.get_logger(__name__)

DEFAULT_BATCH_SIZE = 50


class BatchTranslator:
    """
    保序的批量翻译器。

    任意一条失败、引擎抛出异常或返回数量不匹配，整个调用都会以
    `TranslationProviderError` 失败。
    """

    def __init__(
        self, engine: "BaseTranslationEngine[Any]", batch_size: int = DEFAULT_BATCH_SIZE
    ):
        if batch_size < 1:
            raise ValueError("batch_size 必须为正整数")
        self._engine = engine
        self._batch_size = batch_size

    async def translate(
        self,
        texts: list[str],
        source_lang: str | None,
        target_lang: str,
        glossary_id: str | None = None,
    ) -> list[str]:
        translated: list[str] = []
        for start in range(0, len(texts), self._batch_size):
            chunk = texts[start : start + self._batch_size]
            translated.extend(
                await self._translate_chunk(chunk, source_lang, target_lang, glossary_id)
            )
        return translated

    async def _translate_chunk(
        self,
        chunk: list[str],
        source_lang: str | None,
        target_lang: str,
        glossary_id: str | None,
    ) -> list[str]:
        try:
            outputs = await self._engine.atranslate_batch(
                chunk,
                target_lang=target_lang,
                source_lang=source_lang,
                glossary_id=glossary_id,
            )
        except Exception as e:
            raise TranslationProviderError(
                f"翻译引擎 '{self._engine.name()}' 调用失败: {e}", is_retryable=True
            ) from e

        if len(outputs) != len(chunk):
            logger.error(
                "引擎返回结果数量与输入条目数量不匹配",
                expected_count=len(chunk),
                actual_count=len(outputs),
                engine_name=self._engine.name(),
            )
            raise TranslationProviderError(
                f"引擎返回结果数量不匹配：期望 {len(chunk)} 个，实际 {len(outputs)} 个",
                is_retryable=True,
            )

        errors = [o for o in outputs if isinstance(o, EngineError)]
        if errors:
            raise TranslationProviderError(
                f"{len(errors)}/{len(chunk)} 条文本翻译失败: {errors[0].error_message}",
                is_retryable=all(e.is_retryable for e in errors),
            )
        return [o.translated_text for o in outputs if isinstance(o, EngineSuccess)]
