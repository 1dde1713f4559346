# src/jsonlingo/adapters/engines/factory.py
"""
翻译引擎工厂：根据应用配置发现、加载并实例化唯一的活动引擎。
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog
from pydantic import ValidationError

from jsonlingo_core.exceptions import ConfigurationError, EngineNotFoundError

from . import ENGINE_REGISTRY, discover_engines

if TYPE_CHECKING:
    from jsonlingo.config import JsonLingoConfig

    from .base import BaseTranslationEngine

logger = structlog.get_logger(__name__)


def _config_attr_for(engine_name: str) -> str:
    # 'debug' 的配置段名为 'debug_engine'，其余引擎与名称相同
    return f"{engine_name}_engine" if engine_name == "debug" else engine_name


def create_engine_instance(
    config: "JsonLingoConfig", engine_name: str | None = None
) -> "BaseTranslationEngine[Any]":
    """
    根据引擎名称（默认为 `config.active_engine`）创建翻译引擎实例。

    Raises:
        EngineNotFoundError: 如果请求的引擎未注册。
        ConfigurationError: 如果引擎所需的配置缺失或无效。
    """
    engine_name = engine_name or config.active_engine
    discover_engines()

    engine_class = ENGINE_REGISTRY.get(engine_name)
    if not engine_class:
        raise EngineNotFoundError(
            f"引擎 '{engine_name}' 未找到。已注册的引擎: {sorted(ENGINE_REGISTRY)}"
        )

    config_attr_name = _config_attr_for(engine_name)
    engine_config_data = getattr(config, config_attr_name, None)
    if engine_config_data is None:
        raise ConfigurationError(
            f"引擎 '{engine_name}' 的配置部分 (属性: {config_attr_name}) 在主配置中不存在。"
        )

    try:
        engine_config = engine_class.CONFIG_MODEL.model_validate(
            engine_config_data.model_dump()
        )
    except ValidationError as e:
        raise ConfigurationError(
            f"创建引擎 '{engine_name}' 实例时配置验证失败: {e}"
        ) from e

    engine_instance = engine_class(config=engine_config)
    logger.info("翻译引擎已成功创建", engine=engine_name, version=engine_class.VERSION)
    return engine_instance
