# src/jsonlingo/bootstrap.py
"""
应用引导程序和 DI 容器的生命周期管理。

本模块是应用的唯一初始化入口，负责：
1. 加载配置；
2. 创建并装配 DI 容器，初始化日志；
3. 在关闭时释放数据库连接池、Redis 与 HTTP 客户端。
"""

from __future__ import annotations

from typing import Literal

import structlog

from jsonlingo.config import JsonLingoConfig
from jsonlingo.config_loader import load_config_from_env
from jsonlingo.containers import ApplicationContainer
from jsonlingo.infrastructure.db import dispose_engine
from jsonlingo.infrastructure.redis import close_redis_client
from jsonlingo.management.config_utils import mask_db_url

logger = structlog.get_logger("jsonlingo.bootstrap")


def create_app_config(env_mode: Literal["prod", "test"] = "prod") -> JsonLingoConfig:
    """加载、验证并返回应用配置对象。"""
    config = load_config_from_env(mode=env_mode)
    logger.debug(
        "配置已加载",
        env_mode=env_mode,
        db_url=mask_db_url(config.database.url),
        active_engine=config.active_engine,
    )
    return config


def create_container(
    config: JsonLingoConfig, service_name: str = "jsonlingo"
) -> ApplicationContainer:
    """创建并装配 DI 容器，同时初始化日志系统。"""
    container = ApplicationContainer()
    container.pydantic_config.override(config)
    container.config.from_dict(
        {
            "logging": {
                "level": config.logging.level,
                "format": config.logging.format,
            },
            "service_name": service_name,
        }
    )
    container.core.init_resources()
    return container


async def close_container(container: ApplicationContainer) -> None:
    """释放容器持有的外部连接资源。"""
    await container.services.http_client().aclose()
    await close_redis_client(container.cache.redis_client())
    await dispose_engine(container.persistence.db_engine())
    container.core.shutdown_resources()
    logger.info("应用资源已释放。")
