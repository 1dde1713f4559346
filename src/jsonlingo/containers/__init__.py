# src/jsonlingo/containers/__init__.py
"""
应用的组合根 (Composition Root)。

`ApplicationContainer` 是所有 DI 容器的聚合点，负责装配各子容器。
资源的释放统一由 `jsonlingo.bootstrap.close_container()` 完成。
"""

from __future__ import annotations

from dependency_injector import containers, providers

from jsonlingo.config import JsonLingoConfig

from .cache import CacheContainer
from .core import CoreContainer
from .engines import EnginesContainer
from .persistence import PersistenceContainer
from .services import ServicesContainer
from .workers import WorkersContainer


class ApplicationContainer(containers.DeclarativeContainer):
    """应用的顶层 DI 容器。"""

    # 整块配置对象，作为唯一事实来源向下传递
    pydantic_config = providers.Dependency(instance_of=JsonLingoConfig)
    # 字段级配置，供日志等细粒度场景使用
    config = providers.Configuration()

    core = providers.Container(
        CoreContainer,
        config=config,
    )
    persistence = providers.Container(
        PersistenceContainer,
        config=pydantic_config,
    )
    cache = providers.Container(
        CacheContainer,
        config=pydantic_config,
    )
    engines = providers.Container(
        EnginesContainer,
        config=pydantic_config,
    )
    services = providers.Container(
        ServicesContainer,
        config=pydantic_config,
        uow_factory=persistence.uow_factory.provider,
        cache_handler=cache.cache_handler,
        active_engine=engines.active_engine,
        shortener=engines.shortener,
    )
    workers = providers.Container(
        WorkersContainer,
        config=pydantic_config,
        uow_factory=persistence.uow_factory.provider,
        scheduler=services.scheduler,
        callback_dispatcher=services.callback_dispatcher,
    )
