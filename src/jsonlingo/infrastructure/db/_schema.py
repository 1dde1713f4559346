# src/jsonlingo/infrastructure/db/_schema.py
"""
jsonlingo 的 SQLAlchemy ORM 模型。

同一套模型同时支持 SQLite 与 PostgreSQL：JSON 列在 PostgreSQL 上使用 JSONB，
时间戳统一以 UTC 存储。
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import (
    JSON,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    TypeDecorator,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from .base import Base

json_type = JSON().with_variant(JSONB(), "postgresql")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator[datetime]):
    """读出时补齐 UTC 时区（SQLite 不保存时区信息）。"""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect: Any) -> Optional[datetime]:
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
            if dialect.name == "sqlite":
                value = value.replace(tzinfo=None)
        return value

    def process_result_value(self, value: Optional[datetime], dialect: Any) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


class TranslationJobModel(Base):
    """翻译任务。"""

    __tablename__ = "translation_jobs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    target_lang: Mapped[str] = mapped_column(String(35), nullable=False)
    callback_url: Mapped[str] = mapped_column(Text, nullable=False)
    input_json: Mapped[Any] = mapped_column(json_type, nullable=True)
    source_lang: Mapped[Optional[str]] = mapped_column(
        String(35), nullable=True, default=None
    )
    constraints: Mapped[dict[str, int]] = mapped_column(
        json_type, nullable=False, default_factory=dict
    )
    glossary_id: Mapped[Optional[str]] = mapped_column(
        Text, nullable=True, default=None
    )
    # "metadata" 是声明式基类的保留属性名，因此属性名与列名不同
    job_metadata: Mapped[Any] = mapped_column(
        "metadata", json_type, nullable=True, default=None
    )
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, index=True, default="pending", server_default="pending"
    )
    output_json: Mapped[Any] = mapped_column(json_type, nullable=True, default=None)
    error: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default=None)
    total_segments: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    cache_hits: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        server_default=func.now(),
        default_factory=utcnow,
        init=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        server_default=func.now(),
        default_factory=utcnow,
        onupdate=utcnow,
        init=False,
    )
    finished_at: Mapped[Optional[datetime]] = mapped_column(
        UTCDateTime, nullable=True, default=None
    )


class CallbackAttemptModel(Base):
    """回调投递审计记录，只追加。"""

    __tablename__ = "callback_attempts"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True, init=False
    )
    job_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("translation_jobs.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    http_status: Mapped[int] = mapped_column(Integer, nullable=False)
    response_body: Mapped[Optional[str]] = mapped_column(
        Text, nullable=True, default=None
    )
    error: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default=None)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        server_default=func.now(),
        default_factory=utcnow,
    )


class TranslationCacheModel(Base):
    """句段级翻译缓存。写入后不可变。"""

    __tablename__ = "translation_cache"

    source_hash: Mapped[str] = mapped_column(String(64), primary_key=True)
    source_lang: Mapped[str] = mapped_column(String(35), primary_key=True)
    target_lang: Mapped[str] = mapped_column(String(35), primary_key=True)
    source_text: Mapped[str] = mapped_column(Text, nullable=False)
    translated_text: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        server_default=func.now(),
        default_factory=utcnow,
        init=False,
    )


class QueueMessageModel(Base):
    """持久化队列中的一条消息。"""

    __tablename__ = "queue_messages"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    queue_name: Mapped[str] = mapped_column(String(64), nullable=False)
    payload: Mapped[dict[str, Any]] = mapped_column(json_type, nullable=False)
    max_attempts: Mapped[int] = mapped_column(Integer, nullable=False)
    available_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default_factory=utcnow
    )
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default="pending", server_default="pending"
    )
    attempts: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    locked_at: Mapped[Optional[datetime]] = mapped_column(
        UTCDateTime, nullable=True, default=None
    )
    last_error: Mapped[Optional[str]] = mapped_column(
        Text, nullable=True, default=None
    )
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        server_default=func.now(),
        default_factory=utcnow,
        init=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        server_default=func.now(),
        default_factory=utcnow,
        onupdate=utcnow,
        init=False,
    )

    __table_args__ = (
        Index("ix_queue_messages_claim", "queue_name", "status", "available_at"),
    )
