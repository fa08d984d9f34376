"""
Retry Policy

Bounded-attempt retry with a pluggable backoff, applied to any async
operation. Kept separate from the chat session logic so it can be
tested with a fake operation that fails N times.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, TypeVar

import structlog

logger = structlog.get_logger(__name__)

T = TypeVar("T")


def linear_backoff(step: float = 1.0) -> Callable[[int], float]:
    """Backoff where attempt n waits n * step seconds before the next try."""

    def backoff(attempt: int) -> float:
        return attempt * step

    return backoff


@dataclass
class RetryPolicy:
    """
    Retry an async operation up to max_attempts times.

    After failed attempt n (1-based) the policy sleeps backoff(n) seconds,
    except after the last attempt, where the error is re-raised.
    """

    max_attempts: int = 3
    backoff: Callable[[int], float] = field(default_factory=linear_backoff)
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run operation until it succeeds or attempts are exhausted."""
        attempt = 0
        while True:
            attempt += 1
            try:
                return await operation()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                if attempt >= self.max_attempts:
                    logger.warning(
                        "retry_exhausted",
                        attempts=attempt,
                        error=str(e),
                    )
                    raise
                delay = self.backoff(attempt)
                logger.info(
                    "retry_scheduled",
                    attempt=attempt,
                    delay=delay,
                    error=str(e),
                )
                await self.sleep(delay)
