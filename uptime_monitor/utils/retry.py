"""Retry with exponential backoff for start-up against a database that may still be booting."""

import asyncio
import random
from typing import Awaitable, Callable, Optional, Tuple, Type, TypeVar

from uptime_monitor.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar('T')


class RetryError(Exception):
    """Exception raised when all retry attempts have failed."""
    pass


async def retry_with_backoff(
    func: Callable[[], Awaitable[T]],
    max_attempts: int = 5,
    base_delay: float = 1.0,
    multiplier: float = 2.0,
    max_delay: float = 30.0,
    jitter: bool = True,
    exceptions: Tuple[Type[BaseException], ...] = (Exception,),
) -> T:
    """
    Await ``func()`` until it succeeds or ``max_attempts`` is exhausted.

    Args:
        func: Zero-argument coroutine function
        max_attempts: Maximum number of attempts
        base_delay: Delay before the second attempt, in seconds
        multiplier: Backoff multiplier between attempts
        max_delay: Upper bound for a single delay
        jitter: Randomise each delay between 50% and 150%
        exceptions: Exception types that trigger a retry

    Returns:
        Result of the successful call

    Raises:
        RetryError: If all attempts fail
    """
    last_exception: Optional[BaseException] = None

    for attempt in range(1, max_attempts + 1):
        try:
            result = await func()
            if attempt > 1:
                logger.info(
                    "Call succeeded after retry",
                    extra={"function": func.__name__, "attempt": attempt}
                )
            return result
        except exceptions as e:
            last_exception = e
            if attempt == max_attempts:
                break

            delay = min(base_delay * (multiplier ** (attempt - 1)), max_delay)
            if jitter:
                delay = delay * (0.5 + random.random())

            logger.warning(
                "Call failed, retrying",
                extra={
                    "function": func.__name__,
                    "attempt": attempt,
                    "max_attempts": max_attempts,
                    "delay": round(delay, 2),
                    "error": str(e)
                }
            )
            await asyncio.sleep(delay)

    logger.error(
        "Call failed after all retry attempts",
        extra={"function": func.__name__, "attempts": max_attempts, "error": str(last_exception)}
    )
    raise RetryError(
        f"{func.__name__} failed after {max_attempts} attempts. Last error: {last_exception}"
    ) from last_exception
