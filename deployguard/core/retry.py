"""Bounded exponential backoff for network operations.

The delay before retry *n* (zero-based) is ``base_delay_ms * 2**n``.
There is no jitter and no circuit breaker: once ``retries`` extra
attempts are exhausted the last error is re-raised to the caller.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

T = TypeVar("T")

SleepFn = Callable[[float], Awaitable[None]]


class RetryPolicy(BaseModel):
    """Retry count and base delay for one class of operation."""

    model_config = ConfigDict(frozen=True)

    retries: int = Field(default=3, ge=0)
    base_delay_ms: float = Field(default=5000.0, ge=0)

    def delay_ms(self, attempt: int) -> float:
        """Return the wait after failed attempt *attempt* (zero-based)."""
        if attempt < 0:
            raise ValueError("attempt must be >= 0")
        return self.base_delay_ms * (2**attempt)

    def delays(self) -> list[float]:
        """Every wait the policy can produce, in order."""
        return [self.delay_ms(attempt) for attempt in range(self.retries)]

    @property
    def max_attempts(self) -> int:
        return self.retries + 1


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    sleep: SleepFn = asyncio.sleep,
) -> T:
    """Await *operation* until it succeeds or the policy is exhausted.

    *sleep* receives seconds, like ``asyncio.sleep``.
    """
    for attempt in range(policy.retries):
        try:
            return await operation()
        except Exception as exc:  # noqa: BLE001
            delay = policy.delay_ms(attempt)
            logger.info(
                "Retry %d/%d after %.0fms: %s", attempt + 1, policy.retries, delay, exc
            )
            await sleep(delay / 1000.0)

    # Final attempt: its error propagates unchanged.
    return await operation()
