# src/jsonlingo/domain/markup.py
"""
将含 HTML 的文本拆分为模板与纯文本片段，并在翻译后还原。

这是一个尽力而为的块级/行内标签划分，而不是 DOM 解析器：
- 行内标签（见 INLINE_TAGS）留在片段中随文本一起翻译；
- 其余标签、注释与 `<!...>` 声明都视为块级标签，逐字保留在模板中，并作为片段的分隔符。
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Protocol

from jsonlingo_core.exceptions import FragmentCountMismatchError

INLINE_TAGS = frozenset(
    {"b", "i", "u", "strong", "em", "span", "a", "code", "small", "sub", "sup"}
)

RE_TAG = re.compile(
    r"<!--[\s\S]*?-->|<![^>]*>|</?([a-zA-Z][a-zA-Z0-9-]*)(?:\s[^>]*)?/?>"
)
RE_MARKUP = re.compile(r"<[a-z][\s\S]*>", re.IGNORECASE)
# 模板中的字面 `\` 与 `[` 以反斜杠转义，与占位符 `[i]` 在同一遍扫描中区分
RE_TEMPLATE_LITERAL = re.compile(r"[\\\[]")
RE_TEMPLATE_TOKEN = re.compile(r"\\(.)|\[(\d+)\]", re.DOTALL)


class MarkupClassifier(Protocol):
    """从原始文本中找出所有块级标签的区间（按文档顺序，互不重叠）。"""

    def block_spans(self, text: str) -> list[tuple[int, int]]: ...


class RegexMarkupClassifier:
    """默认的基于正则表达式的分类器。"""

    def __init__(self, inline_tags: frozenset[str] = INLINE_TAGS):
        self._inline_tags = inline_tags

    def block_spans(self, text: str) -> list[tuple[int, int]]:
        spans = []
        for match in RE_TAG.finditer(text):
            name = match.group(1)
            # 注释与声明没有标签名，一律按块级处理
            if name is not None and name.lower() in self._inline_tags:
                continue
            spans.append(match.span())
        return spans


DEFAULT_CLASSIFIER = RegexMarkupClassifier()


@dataclass
class HtmlMap:
    """模板（块级标签 + 空白 + 占位符 `[i]`）与按文档顺序编号的纯文本片段。"""

    template: str
    fragments: list[str] = field(default_factory=list)

    def restore_with(self, translated: list[str]) -> str:
        """用译文片段还原。译文数量必须与原片段数量一致。"""
        if len(translated) != len(self.fragments):
            raise FragmentCountMismatchError(
                f"模板需要 {len(self.fragments)} 个片段，实际收到 {len(translated)} 个"
            )
        return restore(self.template, translated)


def is_markup(text: str) -> bool:
    """判断文本是否包含形如 `<tag ...>` 的子串。"""
    return bool(RE_MARKUP.search(text))


def extract(html: str, classifier: MarkupClassifier = DEFAULT_CLASSIFIER) -> HtmlMap:
    """
    将文本拆分为模板与片段。

    块级标签之间为空或只含空白的段落进入模板，不会作为片段送去翻译。
    模板中来自原文的 `\\` 与 `[` 会被转义，因此只有 `extract` 生成的占位符会在还原时被替换。
    不含块级标签的非空白文本整体成为唯一的片段，模板为 "[0]"。
    """
    template_parts: list[str] = []
    fragments: list[str] = []

    def _emit(run: str) -> None:
        if not run.strip():
            template_parts.append(_escape(run))
            return
        template_parts.append(f"[{len(fragments)}]")
        fragments.append(run)

    cursor = 0
    for start, end in classifier.block_spans(html):
        _emit(html[cursor:start])
        template_parts.append(_escape(html[start:end]))
        cursor = end
    _emit(html[cursor:])

    return HtmlMap(template="".join(template_parts), fragments=fragments)
def _escape(literal: str) -> str:
    return RE_TEMPLATE_LITERAL.sub(lambda m: "\\" + m.group(0), literal)


def restore(template: str, fragments: list[str]) -> str:
    """
    单遍替换模板中的 `[i]`，并还原被转义的字面字符。

    越界的下标保留为字面占位符。由于块级标签中的 `[` 已被转义，
    属性或注释里形如 `[0]` 的文本不会被当作占位符。
    """

    def _replace(match: re.Match[str]) -> str:
        literal, index = match.groups()
        if literal is not None:
            return literal
        position = int(index)
        return fragments[position] if position < len(fragments) else match.group(0)

    return RE_TEMPLATE_TOKEN.sub(_replace, template)
