# src/jsonlingo/infrastructure/persistence/repositories/_cache_repo.py
"""句段级翻译缓存仓库的 SQLAlchemy 实现。"""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select

from jsonlingo.domain.fingerprint import normalize_source_lang, segment_hash
from jsonlingo.infrastructure.db._schema import TranslationCacheModel
from jsonlingo_core.types import CacheEntry
from jsonlingo_core.uow import ITranslationCacheRepository

from ._base_repo import BaseRepository

# SQLite 对单条语句的绑定参数数量有限制
_IN_CHUNK_SIZE = 500


class SqlAlchemyTranslationCacheRepository(BaseRepository, ITranslationCacheRepository):
    """翻译缓存仓库实现。写入为 insert-or-ignore，先写者胜。"""

    async def find_many(
        self, source_hashes: Iterable[str], source_lang: str, target_lang: str
    ) -> dict[str, str]:
        hashes = list(dict.fromkeys(source_hashes))
        found: dict[str, str] = {}
        for start in range(0, len(hashes), _IN_CHUNK_SIZE):
            chunk = hashes[start : start + _IN_CHUNK_SIZE]
            stmt = select(
                TranslationCacheModel.source_hash,
                TranslationCacheModel.translated_text,
            ).where(
                TranslationCacheModel.source_hash.in_(chunk),
                TranslationCacheModel.source_lang == source_lang,
                TranslationCacheModel.target_lang == target_lang,
            )
            result = await self._session.execute(stmt)
            found.update({row.source_hash: row.translated_text for row in result})
        return found

    async def insert_ignore(self, entries: Iterable[CacheEntry]) -> None:
        rows: dict[tuple[str, str, str], dict[str, str]] = {}
        for entry in entries:
            source_lang = normalize_source_lang(entry.source_lang)
            source_hash = segment_hash(entry.source_text)
            key = (source_hash, source_lang, entry.target_lang)
            rows.setdefault(
                key,
                {
                    "source_hash": source_hash,
                    "source_lang": source_lang,
                    "target_lang": entry.target_lang,
                    "source_text": entry.source_text,
                    "translated_text": entry.translated_text,
                },
            )
        if not rows:
            return

        insert = self._get_insert_stmt()
        values = list(rows.values())
        for start in range(0, len(values), _IN_CHUNK_SIZE // 5):
            stmt = (
                insert(TranslationCacheModel)
                .values(values[start : start + _IN_CHUNK_SIZE // 5])
                .on_conflict_do_nothing(
                    index_elements=["source_hash", "source_lang", "target_lang"]
                )
            )
            await self._session.execute(stmt)
