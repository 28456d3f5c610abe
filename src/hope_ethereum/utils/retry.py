"""
Retry utilities for hope-ethereum.

Exponential backoff with jitter for idempotent RPC reads. Broadcasts are
never retried here: resending a signed transaction is the caller's call.
"""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional, Tuple, Type, TypeVar

from hope_ethereum.utils.logging import get_logger

T = TypeVar("T")

_logger = get_logger(__name__)


@dataclass
class RetryConfig:
    """
    Configuration for retry behavior.

    Example:
        ```python
        config = RetryConfig(
            max_attempts=5,
            base_delay_ms=250,
            retryable_errors=(ConnectionError, asyncio.TimeoutError),
        )
        ```
    """

    max_attempts: int = 3
    """Total number of attempts, including the first one."""

    base_delay_ms: int = 250
    """Base delay in milliseconds for exponential backoff."""

    max_delay_ms: int = 5000
    """Maximum delay in milliseconds (cap for exponential growth)."""

    jitter: bool = True
    """Whether to add random jitter to delays."""

    exponential_base: float = 2.0
    """Base for exponential backoff calculation."""

    retryable_errors: Tuple[Type[BaseException], ...] = field(
        default_factory=lambda: (ConnectionError, asyncio.TimeoutError)
    )
    """Exception types that trigger another attempt."""

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay_ms < 0 or self.max_delay_ms < 0:
            raise ValueError("delays must be non-negative")


NO_RETRY = RetryConfig(max_attempts=1)


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
    *,
    operation: str = "rpc",
) -> T:
    """
    Execute an async function with retry logic.

    Args:
        fn: Async function to execute (no arguments)
        config: Retry configuration (uses defaults if None)
        operation: Name used in log records

    Returns:
        Result of the function

    Raises:
        The last retryable exception once attempts are exhausted, or any
        non-retryable exception immediately.

    Example:
        ```python
        price = await retry_async(lambda: w3.eth.gas_price, operation="eth_gasPrice")
        ```
    """
    config = config or RetryConfig()

    for attempt in range(config.max_attempts):
        try:
            return await fn()
        except config.retryable_errors as e:
            if attempt >= config.max_attempts - 1:
                raise
            delay = calculate_delay(attempt, config)
            _logger.warning(
                "Retrying after transient error",
                extra={
                    "operation": operation,
                    "attempt": attempt + 1,
                    "delay": round(delay, 3),
                    "error": str(e),
                },
            )
            await asyncio.sleep(delay)

    raise RuntimeError("Retry exhausted without error")
