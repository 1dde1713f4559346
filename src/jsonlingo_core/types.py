# src/jsonlingo_core/types.py
"""
本模块定义了 jsonlingo 系统的核心数据类型。
这些类型是系统各层之间数据交换的契约。
"""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class JobStatus(str, Enum):
    """翻译任务在其生命周期中的状态。COMPLETED 与 FAILED 均为终态。"""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not JobStatus.PENDING


class QueueMessageStatus(str, Enum):
    """持久化队列中消息的状态。"""

    PENDING = "pending"
    RUNNING = "running"
    DONE = "done"
    DEAD = "dead"


class EngineSuccess(BaseModel):
    """表示翻译引擎成功返回的结果。"""

    translated_text: str


class EngineError(BaseModel):
    """表示翻译引擎执行失败。"""

    error_message: str
    is_retryable: bool


EngineBatchItemResult = Union[EngineSuccess, EngineError]


class PipelineSuccess(BaseModel):
    """一次任务执行成功后的结果。"""

    output_json: Any
    total_segments: int
    cache_hits: int


class PipelineFailure(BaseModel):
    """
    一次任务执行失败后的结果。

    is_retryable=False 表示致命错误（不变量违规），调度器将直接进入 FAILED 终态。
    """

    error_message: str
    is_retryable: bool
    error_type: str = "Exception"


PipelineResult = Union[PipelineSuccess, PipelineFailure]


class TranslationRequest(BaseModel):
    """
    外部路由层提交的翻译请求。

    同时接受 camelCase（线上格式）与 snake_case 字段名。
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    json_value: Any = Field(alias="json")
    target_lang: str = Field(alias="targetLang", min_length=1)
    callback_url: str = Field(alias="callbackUrl", min_length=1)
    source_lang: Optional[str] = Field(default=None, alias="sourceLang")
    constraints: dict[str, int] = Field(default_factory=dict)
    glossary_id: Optional[str] = Field(default=None, alias="glossaryId")
    metadata: Any = None


class TranslationJob(BaseModel):
    """翻译任务记录的数据传输对象 (DTO)。"""

    model_config = ConfigDict(from_attributes=True)

    id: str
    status: JobStatus
    source_lang: Optional[str] = None
    target_lang: str
    input_json: Any = None
    output_json: Any = None
    constraints: dict[str, int] = Field(default_factory=dict)
    callback_url: str
    glossary_id: Optional[str] = None
    job_metadata: Any = None
    error: Optional[str] = None
    total_segments: int = 0
    cache_hits: int = 0
    created_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    @classmethod
    def from_orm_model(cls, orm_obj: Any) -> "TranslationJob":
        """从 SQLAlchemy ORM 实例安全地创建 DTO。"""
        return cls.model_validate(orm_obj, from_attributes=True)


class CallbackAttempt(BaseModel):
    """一次回调投递尝试的审计记录。http_status 为 0 表示未收到任何响应。"""

    model_config = ConfigDict(from_attributes=True)

    job_id: str
    http_status: int
    response_body: Optional[str] = None
    error: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def succeeded(self) -> bool:
        return 200 <= self.http_status < 300


class CacheEntry(BaseModel):
    """翻译缓存的一条记录。写入后不可变。"""

    source_text: str
    source_lang: str
    target_lang: str
    translated_text: str


class QueueMessage(BaseModel):
    """从持久化队列中认领到的一个工作单元。attempt 从 1 开始计数。"""

    model_config = ConfigDict(from_attributes=True)

    id: str
    queue_name: str
    payload: dict[str, Any]
    attempt: int
    max_attempts: int

    @property
    def is_last_attempt(self) -> bool:
        return self.attempt >= self.max_attempts


class CallbackPayload(BaseModel):
    """投递给调用方 Webhook 的负载。"""

    status: Literal["completed", "failed"]
    data: Any = None
    error: Optional[str] = None
    source_lang: Optional[str] = None
    target_lang: str
    metadata: Any = None
    timestamp: str

    def to_wire(self) -> dict[str, Any]:
        """序列化为线上格式：data 仅在 completed 时出现，error 仅在 failed 时出现。"""
        body: dict[str, Any] = {"status": self.status}
        if self.status == "completed":
            body["data"] = self.data
        else:
            body["error"] = self.error
        body.update(
            sourceLang=self.source_lang,
            targetLang=self.target_lang,
            metadata=self.metadata,
            timestamp=self.timestamp,
        )
        return body
