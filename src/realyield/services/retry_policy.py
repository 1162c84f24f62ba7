"""Bounded retry with capped exponential backoff for outbound calls."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryExhaustedError(Exception):
    """Raised when every attempt allowed by a RetryPolicy has failed."""

    def __init__(self, label: str, attempts: int, last_error: BaseException | None):
        self.label = label
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"{label} failed after {attempts} attempts: {last_error}")


@dataclass(frozen=True)
class RetryPolicy:
    """Attempt ceiling plus backoff ``min(base * 2**(attempt-1), cap)``.

    With the defaults an operation runs at most 3 times, waiting 1000ms
    after the first failure and 2000ms after the second. There is no wait
    after the final attempt.
    """

    max_attempts: int = 3
    base_delay_ms: int = 1000
    max_delay_ms: int = 5000
    retry_on: tuple[type[BaseException], ...] = (Exception,)

    def backoff_ms(self, attempt: int) -> int:
        """Wait before the attempt following ``attempt`` (1-based)."""
        return min(self.base_delay_ms * 2 ** (attempt - 1), self.max_delay_ms)

    async def run(self, operation: Callable[[], Awaitable[T]], label: str = "operation") -> T:
        """Await ``operation`` until it succeeds or the ceiling is reached."""
        last_error: BaseException | None = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                return await operation()
            except self.retry_on as exc:
                last_error = exc
                logger.warning(
                    "[%s] Attempt %d/%d failed: %s",
                    label, attempt, self.max_attempts, exc,
                )
                if attempt < self.max_attempts:
                    wait_ms = self.backoff_ms(attempt)
                    logger.info("[%s] Waiting %dms before retry", label, wait_ms)
                    await asyncio.sleep(wait_ms / 1000)

        raise RetryExhaustedError(label, self.max_attempts, last_error)
