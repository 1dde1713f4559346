# src/jsonlingo/containers/workers.py
"""
后台 Worker 容器：每个队列一个消费者池。
"""

from dependency_injector import containers, providers

from jsonlingo.config import JsonLingoConfig
from jsonlingo.workers import WorkerPool


class WorkersContainer(containers.DeclarativeContainer):
    """后台 Worker 实例的容器。"""

    config = providers.Dependency(instance_of=JsonLingoConfig)
    uow_factory = providers.Dependency()
    scheduler = providers.Dependency()
    callback_dispatcher = providers.Dependency()

    translation_pool = providers.Factory(
        WorkerPool,
        name="translator",
        queue_name=config.provided.queue.translation_queue,
        handler=scheduler.provided.process,
        uow_factory=uow_factory,
        concurrency=config.provided.worker.translation_concurrency,
        poll_interval=config.provided.worker.poll_interval,
        visibility_timeout=config.provided.worker.visibility_timeout,
    )
    callback_pool = providers.Factory(
        WorkerPool,
        name="callbacks",
        queue_name=config.provided.queue.callback_queue,
        handler=callback_dispatcher.provided.process,
        uow_factory=uow_factory,
        concurrency=config.provided.worker.callback_concurrency,
        poll_interval=config.provided.worker.poll_interval,
        visibility_timeout=config.provided.worker.visibility_timeout,
    )
