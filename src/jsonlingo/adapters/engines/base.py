# src/jsonlingo/adapters/engines/base.py
"""
定义了所有翻译引擎的抽象基类。
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from pydantic import BaseModel

from jsonlingo_core.types import EngineBatchItemResult, EngineError

_ConfigType = TypeVar("_ConfigType", bound=BaseModel)


class BaseTranslationEngine(ABC, Generic[_ConfigType]):
    """
    翻译引擎的纯异步抽象基类。

    `atranslate_batch` 永远不会抛出异常：每条文本对应一个 `EngineSuccess` 或 `EngineError`，
    结果顺序与输入顺序一致。
    """

    CONFIG_MODEL: type[_ConfigType]
    VERSION: str = "1.0.0"

    def __init__(self, config: _ConfigType):
        self.config = config
        self.initialized = False

    @classmethod
    def name(cls) -> str:
        """从类名自动推断引擎的名称，例如 `DeepLEngine -> "deepl"`。"""
        return cls.__name__.removesuffix("Engine").lower()

    async def initialize(self) -> None:
        """引擎的异步初始化钩子。"""
        self.initialized = True

    async def close(self) -> None:
        """引擎的异步关闭钩子，用于安全释放资源。"""
        self.initialized = False

    @abstractmethod
    async def _translate(
        self,
        texts: list[str],
        target_lang: str,
        source_lang: str | None,
        glossary_id: str | None,
    ) -> list[EngineBatchItemResult]:
        """[子类实现] 真正执行批量翻译的逻辑。"""
        raise NotImplementedError

    async def atranslate_batch(
        self,
        texts: list[str],
        target_lang: str,
        source_lang: str | None = None,
        glossary_id: str | None = None,
    ) -> list[EngineBatchItemResult]:
        """[公共 API] 异步翻译一批文本。`source_lang` 为 None 表示自动检测。"""
        if not texts:
            return []

        try:
            return await self._translate(texts, target_lang, source_lang, glossary_id)
        except Exception as e:
            return [
                EngineError(
                    error_message=f"引擎执行时发生未知异常: {e}", is_retryable=True
                )
            ] * len(texts)
