"""
Fixed-count, fixed-delay retry for storage writes.

The wait is awaited inline by the request handler: there is no backoff
growth, no jitter and no cancellation path.
"""
import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from app.utils.logging import log_upload_retry

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def retry_upload(
    operation: Callable[[], Awaitable[T]],
    attempts: int = 3,
    delay_seconds: float = 1.0,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
) -> T:
    """
    Run an async operation until it succeeds or the attempt budget runs out.

    Args:
        operation: Zero-argument coroutine function performing one write
        attempts: Total attempts (first try included)
        delay_seconds: Pause between attempts
        sleep: Awaitable sleep, injectable for tests

    Returns:
        Result of the first successful attempt

    Raises:
        ValueError: If attempts is less than 1
        Exception: The last error once all attempts failed
    """
    if attempts < 1:
        raise ValueError("attempts must be at least 1")

    for attempt in range(1, attempts + 1):
        try:
            return await operation()
        except Exception as e:
            retries_left = attempts - attempt
            log_upload_retry(logger, attempt=attempt, retries_left=retries_left, error=str(e))
            if retries_left == 0:
                raise
            await sleep(delay_seconds)

    # Unreachable: the loop either returns or re-raises
    raise RuntimeError("retry loop exited without a result")
