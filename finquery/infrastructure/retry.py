"""Async retry wrapper with exponential backoff and an overall deadline"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

from finquery.domain.exceptions import FetchTimeoutError
from finquery.infrastructure.observability.metrics import fetch_retry_counter

T = TypeVar("T")

logger = logging.getLogger(__name__)


def backoff_delay(base_delay: float, attempt: int) -> float:
    """Wait after failed attempt `attempt` (1-based): base, 2*base, 4*base, ..."""
    return base_delay * (2 ** (attempt - 1))


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    base_delay: float = 1.0,
    *,
    timeout: Optional[float] = None,
    should_retry: Optional[Callable[[BaseException], bool]] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    Run `operation` until it succeeds or attempts run out.

    Retry strategy:
    - Attempt 1 runs immediately
    - After failed attempt n, wait base_delay * 2^(n-1)
    - A failure rejected by `should_retry` propagates at once
    - After `max_attempts` failures the last error propagates

    Raises:
        FetchTimeoutError: `timeout` seconds elapsed, during an attempt or
            a backoff, before any attempt succeeded
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    last_error: Optional[BaseException] = None
    deadline = asyncio.timeout(timeout)

    try:
        async with deadline:
            for attempt in range(1, max_attempts + 1):
                try:
                    return await operation()
                except Exception as e:
                    last_error = e

                    if attempt >= max_attempts:
                        raise
                    if should_retry is not None and not should_retry(e):
                        raise

                    delay = backoff_delay(base_delay, attempt)
                    fetch_retry_counter.inc()
                    logger.warning(
                        f"Attempt {attempt} failed, retrying in {delay}s: {e}",
                        extra={"attempt": attempt, "delay_seconds": delay},
                    )
                    await sleep(delay)
    except TimeoutError as e:
        if deadline.expired():
            raise FetchTimeoutError(f"Operation timed out after {timeout}s", last_error=last_error) from e
        raise
