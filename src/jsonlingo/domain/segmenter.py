# src/jsonlingo/domain/segmenter.py
"""
将较长的文本片段切分为句子级别的句段，以提高缓存的复用粒度。

已知限制：像 "Dr. Smith" 这样的缩写可能会被过度切分。
"""

from __future__ import annotations

import re

from .markup import RE_TAG

DEFAULT_MIN_LENGTH = 100

RE_SENTENCE_END = re.compile(r"[.!?]+(?=\s|[A-Z]|$)")


def split_sentences(fragment: str, min_length: int = DEFAULT_MIN_LENGTH) -> list[str]:
    """
    在句末标点（`.` `!` `?` 的连续序列）之后切分片段。

    标点后必须跟随空白、大写字母或字符串结尾；位于行内标签内部的标点不作为切分点。
    句段会去除首尾空白，空句段被丢弃，末尾没有句末标点的剩余文本作为最后一个句段保留。
    短于 `min_length` 的片段，或切分后不超过一个句段的片段，原样返回为 `[fragment]`。
    """
    if len(fragment) < min_length:
        return [fragment]

    tag_spans = [m.span() for m in RE_TAG.finditer(fragment)]

    def _inside_tag(pos: int) -> bool:
        return any(start < pos < end for start, end in tag_spans)

    segments: list[str] = []
    cursor = 0
    for match in RE_SENTENCE_END.finditer(fragment):
        if _inside_tag(match.start()):
            continue
        segment = fragment[cursor:match.end()].strip()
        if segment:
            segments.append(segment)
        cursor = match.end()

    tail = fragment[cursor:].strip()
    if tail:
        segments.append(tail)

    if len(segments) <= 1:
        return [fragment]
    return segments


def join_segments(segments: list[str]) -> str:
    """将译文句段以单个空格拼接回片段。"""
    return " ".join(segments)
