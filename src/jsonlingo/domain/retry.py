# src/jsonlingo/domain/retry.py
"""指数退避重试策略。"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone


@dataclass(frozen=True)
class BackoffPolicy:
    """
    第 n 次尝试失败后的等待时间为 ``initial_backoff * 2 ** (n - 1)``，并以 `max_backoff` 封顶。

    Attributes:
        max_attempts: 总尝试次数（包括第一次）。
        initial_backoff: 首次重试前的等待秒数。
        max_backoff: 等待秒数的上限。
    """

    max_attempts: int
    initial_backoff: float
    max_backoff: float

    def delay_for(self, attempt: int) -> float:
        """返回第 `attempt` 次尝试失败后的等待秒数（attempt 从 1 开始）。"""
        exponent = max(attempt - 1, 0)
        return min(self.initial_backoff * (2**exponent), self.max_backoff)

    def should_retry(self, attempt: int) -> bool:
        return attempt < self.max_attempts

    def next_available_at(self, attempt: int, now: datetime | None = None) -> datetime:
        now = now or datetime.now(timezone.utc)
        return now + timedelta(seconds=self.delay_for(attempt))
