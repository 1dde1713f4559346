# src/jsonlingo/workers/_pool.py
"""
持久化队列的消费者池。

每个池对应一个队列，运行 `concurrency` 个消费者协程；同一任务的所有阶段
都在一个消费者内顺序执行，多个任务在消费者之间并发。
"""

from __future__ import annotations

import asyncio
import signal
from collections.abc import Awaitable, Callable
from typing import Any

import structlog

from jsonlingo.infrastructure.uow import UowFactory
from jsonlingo_core.types import QueueMessage

logger = structlog.get_logger(__name__)

MessageHandler = Callable[[QueueMessage], Awaitable[None]]


class WorkerPool:
    def __init__(
        self,
        *,
        name: str,
        queue_name: str,
        handler: MessageHandler,
        uow_factory: UowFactory,
        concurrency: int,
        poll_interval: float,
        visibility_timeout: float,
    ):
        self.name = name
        self._queue_name = queue_name
        self._handler = handler
        self._uow_factory = uow_factory
        self._concurrency = concurrency
        self._poll_interval = poll_interval
        self._visibility_timeout = visibility_timeout

    async def run_once(self) -> bool:
        """
        认领并处理一条消息。返回是否认领到了消息。

        认领在独立事务中提交。处理期间每隔 `visibility_timeout / 3` 续租一次。
        处理器抛出的异常只会被记录，续租随之停止，消息保持 RUNNING，租约到期后会被重新认领。
        """
        try:
            async with self._uow_factory() as uow:
                message = await uow.queue.claim(
                    self._queue_name, visibility_timeout=self._visibility_timeout
                )
        except Exception:
            logger.error("认领队列消息失败", pool=self.name, exc_info=True)
            return False

        if message is None:
            return False

        heartbeat = asyncio.create_task(self._keep_lease(message))
        try:
            await self._handler(message)
        except Exception:
            logger.error(
                "处理队列消息时发生未知错误，等待租约到期后重试",
                pool=self.name,
                message_id=message.id,
                exc_info=True,
            )
        finally:
            if not heartbeat.done():
                heartbeat.cancel()
            try:
                await heartbeat
            except asyncio.CancelledError:
                pass
        return True

    async def _keep_lease(self, message: QueueMessage) -> None:
        """处理期间定期续租，防止长时间运行的消息被其他消费者重新认领。"""
        interval = self._visibility_timeout / 3
        while True:
            await asyncio.sleep(interval)
            try:
                async with self._uow_factory() as uow:
                    renewed = await uow.queue.renew_lease(
                        message.id, attempt=message.attempt
                    )
            except Exception:
                logger.warning(
                    "续租失败，将在下一周期重试",
                    pool=self.name,
                    message_id=message.id,
                    exc_info=True,
                )
                continue
            if not renewed:
                logger.warning(
                    "消息租约已不属于当前消费者，停止续租",
                    pool=self.name,
                    message_id=message.id,
                )
                return

    async def _consume(self, consumer_id: int, shutdown_event: asyncio.Event) -> None:
        while not shutdown_event.is_set():
            if await self.run_once():
                continue
            try:
                await asyncio.wait_for(
                    shutdown_event.wait(), timeout=self._poll_interval
                )
            except asyncio.TimeoutError:
                pass
        logger.debug("消费者已退出", pool=self.name, consumer_id=consumer_id)

    async def run_loop(
        self, shutdown_event: asyncio.Event, *, install_signal_handlers: bool = True
    ) -> None:
        """池的主循环，直到 `shutdown_event` 被设置。"""
        if install_signal_handlers:
            install_shutdown_handlers(shutdown_event)

        logger.info(
            "Worker 池已启动，正在轮询队列...",
            pool=self.name,
            queue=self._queue_name,
            concurrency=self._concurrency,
        )
        try:
            await asyncio.gather(
                *(self._consume(i, shutdown_event) for i in range(self._concurrency))
            )
        except asyncio.CancelledError:
            logger.info("Worker 池循环被取消。", pool=self.name)
            raise
        finally:
            logger.info("Worker 池已安全关闭。", pool=self.name)


def install_shutdown_handlers(shutdown_event: asyncio.Event) -> None:
    """在 SIGINT / SIGTERM 时设置 `shutdown_event`。"""

    def _signal_handler(*args: Any) -> None:
        logger.warning("收到停机信号，正在准备优雅关闭...")
        shutdown_event.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _signal_handler)
