"""Bounded retry with a constant delay.

Short-lived CI polling only needs "try, wait, try again": no jitter and no
exponential backoff. The wait is an `asyncio.sleep`, so concurrent probes
keep making progress while one of them is waiting.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, TypeVar

import structlog

from core.domain.models import RetryPolicy

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[object]]

logger = structlog.get_logger(__name__)


async def retry(
    operation: Callable[[], Awaitable[T]],
    delay_ms: int,
    max_attempts: int,
    *,
    sleep: Sleep = asyncio.sleep,
) -> T:
    """Run `operation` until it succeeds or `max_attempts` is spent.

    Returns the operation's result on the first success. When every attempt
    fails, the exception of the final attempt is re-raised unchanged.

    `max_attempts` must be at least 1: there is no sensible error to report
    for a sequence that never ran.
    """

    if max_attempts < 1:
        raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
    if delay_ms < 0:
        raise ValueError(f"delay_ms must be >= 0, got {delay_ms}")

    attempt = 1
    while True:
        try:
            return await operation()
        except Exception as exc:
            remaining = max_attempts - attempt
            if remaining <= 0:
                logger.warning("retry_exhausted", attempts=attempt, error=str(exc))
                raise
            logger.debug(
                "retry_attempt_failed",
                attempt=attempt,
                remaining=remaining,
                delay_ms=delay_ms,
                error=str(exc),
            )
        await sleep(delay_ms / 1000)
        attempt += 1


async def retry_with_policy(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    *,
    sleep: Sleep = asyncio.sleep,
) -> T:
    return await retry(operation, policy.delay_ms, policy.max_attempts, sleep=sleep)
