# src/jsonlingo/application/length_enforcer.py
"""对带有 maxLength 约束的叶子节点进行缩写或截断。"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from jsonlingo.domain.tree import StringNode, path_key

if TYPE_CHECKING:
    from jsonlingo_core.interfaces import TextShortener

logger = structlog.get_logger(__name__)

ELLIPSIS = "..."


def truncate_with_ellipsis(text: str, max_length: int) -> str:
    """截断到 `max_length - 3` 个字符并追加 "..."。极短的上限直接硬截断。"""
    if len(text) <= max_length:
        return text
    if max_length <= len(ELLIPSIS):
        return text[:max_length]
    return text[: max_length - len(ELLIPSIS)] + ELLIPSIS


class LengthEnforcer:
    """
    保证每个受约束的叶子都不超过其上限。

    - 没有缩写器或缩写器失败：硬截断到 max_length；
    - 缩写结果仍然超长：截断到 max_length - 3 并追加 "..."。
    """

    def __init__(self, shortener: "TextShortener | None" = None):
        self._shortener = shortener

    async def enforce(
        self, nodes: list[StringNode], constraints: dict[str, int], language: str
    ) -> list[StringNode]:
        if not constraints:
            return nodes
        result: list[StringNode] = []
        for node in nodes:
            max_length = constraints.get(path_key(node.path))
            if max_length is None or len(node.value) <= max_length:
                result.append(node)
                continue
            value = await self.fit(node.value, max_length, language, path=path_key(node.path))
            result.append(StringNode(path=node.path, value=value))
        return result

    async def fit(
        self, text: str, max_length: int, language: str, *, path: str = ""
    ) -> str:
        if self._shortener is None:
            return text[:max_length]
        try:
            shortened = await self._shortener.ashorten(text, max_length, language)
        except Exception as e:
            logger.warning(
                "文本缩写失败，回退为硬截断",
                path=path,
                max_length=max_length,
                error=str(e),
                exc_info=True,
            )
            return text[:max_length]
        if len(shortened) > max_length:
            logger.info(
                "缩写结果仍然超长，追加省略号截断",
                path=path,
                max_length=max_length,
                actual_length=len(shortened),
            )
            return truncate_with_ellipsis(shortened, max_length)
        return shortened
