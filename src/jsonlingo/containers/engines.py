# src/jsonlingo/containers/engines.py
"""
翻译引擎与文本缩写器容器。每个进程只有一个活动引擎。
"""

from dependency_injector import containers, providers

from jsonlingo.adapters.ai.shortener import create_shortener
from jsonlingo.adapters.engines.factory import create_engine_instance
from jsonlingo.config import JsonLingoConfig


class EnginesContainer(containers.DeclarativeContainer):
    """翻译引擎相关服务的容器。"""

    config = providers.Dependency(instance_of=JsonLingoConfig)

    # 首次被需要时根据配置创建
    active_engine = providers.Singleton(
        create_engine_instance,
        config=config,
        engine_name=config.provided.active_engine,
    )

    shortener = providers.Singleton(
        create_shortener,
        config=config.provided.openai,
    )
