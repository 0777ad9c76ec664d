"""Exponential-backoff retry around a single async operation."""

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

from .config import Settings
from .logger import logger

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


class RetryingRequestExecutor:
    """
    Run an async operation, retrying any failure with base-2 backoff.

    The first retry waits ``initial_delay_ms``, each later one twice as long
    as the previous (1000, 2000, 4000 ms with the defaults). Every exception
    is retried the same way; once the budget is spent the last one is
    re-raised unchanged.

    ``sleep`` receives seconds, like ``asyncio.sleep``, and can be replaced
    in tests to record waits instead of performing them.
    """

    def __init__(
        self,
        max_retries: int = 3,
        initial_delay_ms: int = 1000,
        sleep: Optional[Sleep] = None,
    ):
        self.max_retries = max_retries
        self.initial_delay_ms = initial_delay_ms
        self._sleep = sleep or asyncio.sleep

    @classmethod
    def from_settings(cls, settings: Settings, sleep: Optional[Sleep] = None) -> "RetryingRequestExecutor":
        return cls(
            max_retries=settings.max_retries,
            initial_delay_ms=settings.initial_delay_ms,
            sleep=sleep,
        )

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        max_retries: Optional[int] = None,
        initial_delay_ms: Optional[int] = None,
    ) -> T:
        retries_left = self.max_retries if max_retries is None else max_retries
        delay_ms = self.initial_delay_ms if initial_delay_ms is None else initial_delay_ms
        attempt = 0

        while True:
            attempt += 1
            try:
                return await operation()
            except Exception as e:
                if retries_left <= 0:
                    logger.retry_exhausted(attempt, f"{type(e).__name__}: {e}")
                    raise
                logger.retry(attempt, delay_ms, f"{type(e).__name__}: {e}")
                await self._sleep(delay_ms / 1000)
                retries_left -= 1
                delay_ms *= 2
