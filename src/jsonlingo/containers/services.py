# src/jsonlingo/containers/services.py
"""
应用服务层容器：翻译流水线、调度器、回调投递器与查询服务。
"""

import httpx
from dependency_injector import containers, providers

from jsonlingo.application import (
    BatchTranslator,
    CallbackDispatcher,
    JobQueryService,
    JobScheduler,
    LengthEnforcer,
    TranslationCache,
    TranslationPipeline,
)
from jsonlingo.config import JsonLingoConfig


class ServicesContainer(containers.DeclarativeContainer):
    """应用服务的容器。"""

    config = providers.Dependency(instance_of=JsonLingoConfig)
    uow_factory = providers.Dependency()
    cache_handler = providers.Dependency()
    active_engine = providers.Dependency()
    shortener = providers.Dependency()

    # 回调投递使用的 HTTP 客户端，由 bootstrap.close_container() 关闭
    http_client = providers.Singleton(
        httpx.AsyncClient,
        timeout=config.provided.callback.timeout,
    )

    translation_cache = providers.Singleton(
        TranslationCache,
        uow_factory=uow_factory,
        l1_cache=cache_handler,
        l1_ttl=config.provided.redis.cache.ttl,
    )
    batch_translator = providers.Singleton(
        BatchTranslator,
        engine=active_engine,
        batch_size=config.provided.batch_size,
    )
    length_enforcer = providers.Singleton(
        LengthEnforcer,
        shortener=shortener,
    )
    pipeline = providers.Singleton(
        TranslationPipeline,
        cache=translation_cache,
        translator=batch_translator,
        enforcer=length_enforcer,
        segment_min_length=config.provided.segment_min_length,
    )
    scheduler = providers.Singleton(
        JobScheduler,
        uow_factory=uow_factory,
        pipeline=pipeline,
        config=config,
    )
    callback_dispatcher = providers.Singleton(
        CallbackDispatcher,
        http_client=http_client,
        uow_factory=uow_factory,
        policy=config.provided.callback_retry.to_policy.call(),
        timeout=config.provided.callback.timeout,
        response_body_limit=config.provided.callback.response_body_limit,
    )
    job_query_service = providers.Factory(
        JobQueryService,
        uow_factory=uow_factory,
    )
