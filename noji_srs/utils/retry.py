"""
Retry with exponential backoff for async start-up calls.

Used around Telegram bot initialization, where DNS or network hiccups at
boot are common and a few seconds of patience avoids degraded mode.
"""

import asyncio
import functools
import logging
import random
from typing import Any, Callable, Sequence, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_RETRY_EXCEPTIONS: tuple = (ConnectionError, TimeoutError, OSError)


def backoff_delay(
    attempt: int,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    exponential_base: float = 2.0,
    jitter: float = 0.0,
) -> float:
    """Delay before retry number ``attempt`` (0-indexed).

    ``jitter`` adds up to that fraction of the delay at random.
    """
    delay = min(base_delay * (exponential_base**attempt), max_delay)
    if jitter:
        delay += delay * random.uniform(0, jitter)
    return delay


def async_retry(
    max_attempts: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    exponential_base: float = 2.0,
    jitter: float = 0.5,
    exceptions: Sequence[Type[Exception]] = DEFAULT_RETRY_EXCEPTIONS,
) -> Callable:
    """
    Decorator retrying an async function on the given exceptions.

    The last exception is re-raised once ``max_attempts`` are used up;
    anything not listed in ``exceptions`` propagates immediately.

    Usage:
        @async_retry(max_attempts=3, base_delay=2.0, exceptions=(Exception,))
        async def start_bot():
            await initialize_bot()
    """
    retry_on = tuple(exceptions)

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            for attempt in range(max_attempts):
                try:
                    return await func(*args, **kwargs)
                except retry_on as e:
                    if attempt == max_attempts - 1:
                        logger.error(
                            f"All {max_attempts} attempts failed for {func.__name__}: "
                            f"{type(e).__name__}: {e}"
                        )
                        raise
                    delay = backoff_delay(
                        attempt, base_delay, max_delay, exponential_base, jitter
                    )
                    logger.warning(
                        f"Retry {attempt + 1}/{max_attempts} for {func.__name__}: "
                        f"{type(e).__name__}: {e}. Waiting {delay:.2f}s"
                    )
                    await asyncio.sleep(delay)
            raise RuntimeError(f"{func.__name__} called with max_attempts={max_attempts}")

        return wrapper

    return decorator
