"""Bounded exponential-backoff retry for async operations."""
import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from pydantic import BaseModel, Field

from src.shared.exceptions import DataAccessError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetrySettings(BaseModel):
    """
    Retry configuration.

    max_attempts: Total number of attempts, including the first one.
    base_delay_seconds: Delay before the second attempt; doubles after every failure.
    """

    max_attempts: int = Field(default=3, ge=1)
    base_delay_seconds: float = Field(default=1.0, ge=0.0)


def default_is_retryable(error: Exception) -> bool:
    """
    Decide whether an error is worth another attempt.

    Normalized backend errors carry their own classification. Anything that was
    not classified is retried.
    """
    if isinstance(error, DataAccessError):
        return error.retryable
    return True


class RetryPolicy:
    """
    Runs an async operation with bounded exponential backoff.

    The delay before attempt ``n + 1`` is ``base_delay * 2 ** (n - 1)``. There is
    no jitter. When the attempts are exhausted, or the error is not retryable,
    the last error is re-raised unchanged.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        is_retryable: Callable[[Exception], bool] = default_is_retryable,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if base_delay < 0:
            raise ValueError("base_delay must be non-negative")

        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.is_retryable = is_retryable
        self._sleep = sleep

    @classmethod
    def from_settings(cls, settings: RetrySettings) -> "RetryPolicy":
        return cls(max_attempts=settings.max_attempts, base_delay=settings.base_delay_seconds)

    def backoff(self, attempt: int) -> float:
        """Delay to wait after the given (1-based) failed attempt."""
        return self.base_delay * 2 ** (attempt - 1)

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        """
        Execute the operation, retrying failures.

        Args:
            operation: Zero-argument callable returning a fresh awaitable per attempt

        Returns:
            The operation's result

        Raises:
            Exception: The last error raised by the operation
        """
        attempt = 1
        while True:
            try:
                return await operation()
            except Exception as e:
                if attempt >= self.max_attempts or not self.is_retryable(e):
                    raise

                delay = self.backoff(attempt)
                logger.warning(
                    "Attempt %d/%d failed (%s), retrying in %.2fs",
                    attempt,
                    self.max_attempts,
                    e,
                    delay,
                )
                await self._sleep(delay)
                attempt += 1
