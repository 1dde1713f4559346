# src/jsonlingo/application/__init__.py
"""应用层：编排领域逻辑与基础设施。"""

from .batch_translator import BatchTranslator
from .callbacks import CallbackDispatcher, build_callback_payload
from .length_enforcer import LengthEnforcer
from .pipeline import TranslationPipeline
from .queries import JobQueryService, JobStatusView
from .scheduler import JobScheduler, validate_request
from .translation_cache import TranslationCache

__all__ = [
    "BatchTranslator",
    "CallbackDispatcher",
    "build_callback_payload",
    "LengthEnforcer",
    "TranslationPipeline",
    "JobQueryService",
    "JobStatusView",
    "JobScheduler",
    "validate_request",
    "TranslationCache",
]
