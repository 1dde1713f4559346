# src/jsonlingo_core/__init__.py
"""
jsonlingo 核心契约包。

本包只包含异常、数据传输对象与抽象协议，不依赖任何基础设施实现。
"""
from .exceptions import (
    ConfigurationError,
    DatabaseError,
    EngineNotFoundError,
    FragmentCountMismatchError,
    InvalidRequestError,
    InvariantViolationError,
    JsonLingoError,
    PathResolutionError,
    TranslationProviderError,
    UnsupportedJsonTypeError,
)
from .interfaces import CacheHandler, HttpPoster, TextShortener
from .types import (
    CacheEntry,
    CallbackAttempt,
    CallbackPayload,
    EngineBatchItemResult,
    EngineError,
    EngineSuccess,
    JobStatus,
    PipelineFailure,
    PipelineResult,
    PipelineSuccess,
    QueueMessage,
    QueueMessageStatus,
    TranslationJob,
    TranslationRequest,
)
from .uow import (
    ICallbackAttemptRepository,
    IJobRepository,
    IQueueRepository,
    ITranslationCacheRepository,
    IUnitOfWork,
)

__all__ = [
    # from exceptions.py
    "JsonLingoError", "ConfigurationError", "EngineNotFoundError",
    "DatabaseError", "InvalidRequestError", "TranslationProviderError",
    "InvariantViolationError", "PathResolutionError",
    "FragmentCountMismatchError", "UnsupportedJsonTypeError",
    # from interfaces.py
    "CacheHandler", "TextShortener", "HttpPoster",
    # from types.py
    "JobStatus", "QueueMessageStatus", "EngineSuccess", "EngineError",
    "EngineBatchItemResult", "PipelineSuccess", "PipelineFailure",
    "PipelineResult", "TranslationRequest", "TranslationJob",
    "CallbackAttempt", "CacheEntry", "QueueMessage", "CallbackPayload",
    # from uow.py
    "IUnitOfWork", "IJobRepository", "ICallbackAttemptRepository",
    "ITranslationCacheRepository", "IQueueRepository",
]
