# src/jsonlingo/domain/fingerprint.py
"""句段指纹与缓存键的计算。"""

from __future__ import annotations

import hashlib

AUTO_SOURCE_LANG = "auto"


def segment_hash(text: str) -> str:
    """返回句段原文的 SHA-256 十六进制摘要。不做任何归一化。"""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def normalize_source_lang(source_lang: str | None) -> str:
    """源语言为空时（自动检测）以 "auto" 作为缓存键的一部分。"""
    return source_lang or AUTO_SOURCE_LANG


def cache_key(source_hash: str, source_lang: str | None, target_lang: str) -> str:
    """构建 L1 缓存使用的键。"""
    return f"tm:{normalize_source_lang(source_lang)}:{target_lang}:{source_hash}"
