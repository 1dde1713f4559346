# src/jsonlingo/application/translation_cache.py
"""
句段级翻译缓存：L1（Redis 或进程内）读穿 + 数据库持久化。
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

import structlog

from jsonlingo.domain.fingerprint import cache_key, normalize_source_lang, segment_hash
from jsonlingo_core.types import CacheEntry

if TYPE_CHECKING:
    from jsonlingo.infrastructure.uow import UowFactory
    from jsonlingo_core.interfaces import CacheHandler

logger = structlog.get_logger(__name__)


class TranslationCache:
    """
    内容寻址的翻译缓存，键为 ``(sha256(原文), 源语言, 目标语言)``。

    查询先走 L1，未命中的再批量查询数据库，数据库命中的结果回填 L1。
    写入为 insert-or-ignore，并发写入同一键永远不会报错。
    """

    def __init__(
        self,
        uow_factory: "UowFactory",
        l1_cache: "CacheHandler | None" = None,
        l1_ttl: int | None = None,
    ):
        self._uow_factory = uow_factory
        self._l1 = l1_cache
        self._l1_ttl = l1_ttl

    async def lookup(
        self, segments: Iterable[str], source_lang: str | None, target_lang: str
    ) -> dict[str, str]:
        """返回 {原文: 译文}，只包含命中的句段。输入会先去重。"""
        lang = normalize_source_lang(source_lang)
        by_hash = {segment_hash(text): text for text in dict.fromkeys(segments)}
        if not by_hash:
            return {}

        hits: dict[str, str] = {}
        pending: list[str] = []
        for source_hash, text in by_hash.items():
            cached = None
            if self._l1 is not None:
                cached = await self._l1.get(cache_key(source_hash, lang, target_lang))
            if isinstance(cached, str):
                hits[text] = cached
            else:
                pending.append(source_hash)

        l1_hit_count = len(hits)
        if pending:
            async with self._uow_factory() as uow:
                found = await uow.cache.find_many(pending, lang, target_lang)
            for source_hash, translated in found.items():
                hits[by_hash[source_hash]] = translated
                if self._l1 is not None:
                    await self._l1.set(
                        cache_key(source_hash, lang, target_lang),
                        translated,
                        ttl=self._l1_ttl,
                    )

        logger.debug(
            "缓存查询完成",
            distinct=len(by_hash),
            l1_hits=l1_hit_count,
            db_hits=len(hits) - l1_hit_count,
        )
        return hits

    async def save(self, entries: Iterable[CacheEntry]) -> None:
        """持久化新译文并写入 L1。"""
        entries = list(entries)
        if not entries:
            return
        async with self._uow_factory() as uow:
            await uow.cache.insert_ignore(entries)
        if self._l1 is not None:
            for entry in entries:
                await self._l1.set(
                    cache_key(
                        segment_hash(entry.source_text),
                        entry.source_lang,
                        entry.target_lang,
                    ),
                    entry.translated_text,
                    ttl=self._l1_ttl,
                )
