# src/jsonlingo/infrastructure/persistence/repositories/__init__.py
from ._cache_repo import SqlAlchemyTranslationCacheRepository
from ._callback_repo import SqlAlchemyCallbackAttemptRepository
from ._job_repo import SqlAlchemyJobRepository
from ._queue_repo import SqlAlchemyQueueRepository

__all__ = [
    "SqlAlchemyJobRepository",
    "SqlAlchemyCallbackAttemptRepository",
    "SqlAlchemyTranslationCacheRepository",
    "SqlAlchemyQueueRepository",
]
