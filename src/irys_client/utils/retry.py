"""
Retry Utilities for the Irys client.

Provides exponential backoff for transient failures.
"""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass, field
from typing import (
    Awaitable,
    Callable,
    Optional,
    Tuple,
    Type,
    TypeVar,
)

T = TypeVar("T")

RetryHook = Callable[[int, Exception, float], None]
"""Called before sleeping: (attempt number, error, delay in seconds)."""


@dataclass(frozen=True)
class RetryConfig:
    """
    Configuration for retry behavior.

    Example:
        ```python
        config = RetryConfig(
            max_attempts=5,
            base_delay_ms=1000,
            retryable_errors=(httpx.TransportError,),
        )
        ```
    """

    max_attempts: int = 5
    """Maximum number of attempts, including the first one."""

    base_delay_ms: int = 1000
    """Base delay in milliseconds for exponential backoff."""

    max_delay_ms: int = 30000
    """Maximum delay in milliseconds (cap for exponential growth)."""

    jitter: bool = False
    """Whether to add random jitter to delays."""

    exponential_base: float = 2.0
    """Base for exponential backoff calculation."""

    retryable_errors: Tuple[Type[Exception], ...] = field(
        default_factory=lambda: (Exception,)
    )
    """Tuple of exception types that should trigger a retry."""


def calculate_delay(attempt: int, config: RetryConfig) -> float:
    """
    Calculate delay with exponential backoff and optional jitter.

    Args:
        attempt: Zero-based attempt number (0 = first retry)
        config: Retry configuration

    Returns:
        Delay in seconds
    """
    delay_ms = config.base_delay_ms * (config.exponential_base ** attempt)
    delay_ms = min(delay_ms, config.max_delay_ms)

    if config.jitter:
        # Full jitter
        delay_ms = random.uniform(0, delay_ms)

    return delay_ms / 1000


async def retry_async(
    fn: Callable[[], Awaitable[T]],
    config: Optional[RetryConfig] = None,
    on_retry: Optional[RetryHook] = None,
) -> T:
    """
    Execute async function with retry logic.

    Args:
        fn: Async function to execute (no arguments)
        config: Retry configuration (uses defaults if None)
        on_retry: Optional hook invoked before each backoff sleep

    Returns:
        Result of the function

    Raises:
        Last exception if all retries fail

    Example:
        ```python
        price = await retry_async(
            lambda: client.get_price(1024),
            RetryConfig(max_attempts=3, retryable_errors=(NetworkError,)),
        )
        ```
    """
    config = config or RetryConfig()
    last_error: Optional[Exception] = None

    for attempt in range(config.max_attempts):
        try:
            return await fn()
        except config.retryable_errors as e:
            last_error = e

            # No delay after the last attempt
            if attempt < config.max_attempts - 1:
                delay = calculate_delay(attempt, config)
                if on_retry is not None:
                    on_retry(attempt + 1, e, delay)
                await asyncio.sleep(delay)

    if last_error is not None:
        raise last_error

    raise RuntimeError("Retry exhausted without error")


class TransientError(Exception):
    """
    Transient failure that may succeed on retry.

    Examples: HTTP 5xx, rate limits, temporary service unavailability.
    """

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
