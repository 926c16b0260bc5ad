"""Retry policy for completion calls."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from lumen.config.models import RetryConfig
from lumen.infrastructure.llm.exceptions import is_retryable

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryOutcome(Generic[T]):
    """Result of running an operation under a retry policy.

    Exactly one of ``value`` and ``error`` is meaningful: ``error`` is
    None on success.
    """

    value: T | None
    error: Exception | None
    attempts: int

    @property
    def succeeded(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value or raise the final error."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]


@dataclass(frozen=True)
class RetryPolicy:
    """Exponential backoff for transient failures.

    Attempt ``n`` (0-based) that fails with a retryable error waits
    ``base_delay * 2**n`` seconds before the next attempt. At most
    ``max_retries`` retries follow the first attempt.

    Attributes:
        max_retries: Retries after the first attempt.
        base_delay: Delay before the first retry, in seconds.
        retryable: Predicate selecting errors worth retrying.
        sleep: Awaitable sleep, replaceable in tests.
    """

    max_retries: int = 3
    base_delay: float = 1.0
    retryable: Callable[[Exception], bool] = is_retryable
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep

    @classmethod
    def from_config(cls, config: RetryConfig) -> "RetryPolicy":
        return cls(max_retries=config.max_retries, base_delay=config.base_delay_seconds)

    def delay_for(self, attempt: int) -> float:
        return self.base_delay * (2**attempt)

    async def run(self, operation: Callable[[], Awaitable[T]]) -> RetryOutcome[T]:
        """Run ``operation`` until it succeeds, fails terminally, or retries run out.

        Args:
            operation: Zero-argument coroutine factory.

        Returns:
            Outcome holding either the value or the last error.
        """
        attempt = 0
        while True:
            try:
                value = await operation()
                return RetryOutcome(value=value, error=None, attempts=attempt + 1)
            except Exception as e:
                if not self.retryable(e) or attempt >= self.max_retries:
                    return RetryOutcome(value=None, error=e, attempts=attempt + 1)

                delay = self.delay_for(attempt)
                logger.warning(
                    "Completion failed (attempt %d/%d): %s; retrying in %.1fs",
                    attempt + 1,
                    self.max_retries + 1,
                    e,
                    delay,
                )
                await self.sleep(delay)
                attempt += 1
