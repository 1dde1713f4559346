# src/jsonlingo/adapters/engines/debug.py
"""
提供一个用于开发和测试的确定性调试翻译引擎。
"""

import asyncio

from jsonlingo.config import DebugEngineSettings
from jsonlingo_core.types import EngineBatchItemResult, EngineError, EngineSuccess

from .base import BaseTranslationEngine


class DebugEngine(BaseTranslationEngine[DebugEngineSettings]):
    """把每条文本翻译为 ``"{text} ({target_lang})"``。"""

    CONFIG_MODEL = DebugEngineSettings

    async def _translate(
        self,
        texts: list[str],
        target_lang: str,
        source_lang: str | None,
        glossary_id: str | None,
    ) -> list[EngineBatchItemResult]:
        # 强制一次事件循环切换，使其表现得像真实的 I/O
        await asyncio.sleep(0)

        results: list[EngineBatchItemResult] = []
        for text in texts:
            if self.config.mode == "FAIL" or text == self.config.fail_on_text:
                results.append(
                    EngineError(
                        error_message="Debug engine forced to fail",
                        is_retryable=self.config.fail_is_retryable,
                    )
                )
                continue
            results.append(EngineSuccess(translated_text=f"{text} ({target_lang})"))
        return results
