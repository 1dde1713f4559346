# src/jsonlingo/containers/persistence.py
"""
持久化层容器：数据库引擎、会话工厂与 UoW 工厂。
"""

from dependency_injector import containers, providers
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from jsonlingo.config import JsonLingoConfig
from jsonlingo.infrastructure.db import create_async_db_engine, create_async_sessionmaker
from jsonlingo.infrastructure.uow import SqlAlchemyUnitOfWork


class PersistenceContainer(containers.DeclarativeContainer):
    """持久化层相关服务的容器。"""

    config = providers.Dependency(instance_of=JsonLingoConfig)

    # 引擎由 bootstrap.close_container() 负责释放
    db_engine: providers.Singleton[AsyncEngine] = providers.Singleton(
        create_async_db_engine,
        cfg=config,
    )

    session_maker: providers.Singleton[async_sessionmaker[AsyncSession]] = (
        providers.Singleton(
            create_async_sessionmaker,
            engine=db_engine,
        )
    )

    # 每次调用都会创建一个新的 UoW 实例
    uow_factory: providers.Factory[SqlAlchemyUnitOfWork] = providers.Factory(
        SqlAlchemyUnitOfWork,
        sessionmaker=session_maker,
    )
