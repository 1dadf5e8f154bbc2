"""Retry decorator for async HTTP operations.

This module provides a retry decorator that can be applied to async
functions to automatically retry failed operations after a fixed
delay. Retries can be limited by exception type and by a predicate
over the raised exception.

The last retryable exception is re-raised once attempts run out;
any exception the predicate rejects propagates immediately.
"""

import asyncio
import logging
from functools import wraps
from typing import Callable, Optional, Tuple, Type, TypeVar

import httpx

logger = logging.getLogger(__name__)

T = TypeVar("T")


def async_retry(
    max_attempts: int = 3,
    delay: float = 1.0,
    exceptions: Tuple[Type[Exception], ...] = (httpx.HTTPError,),
    retry_if: Optional[Callable[[Exception], bool]] = None,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Create a retry decorator for async functions.

    :param max_attempts: Maximum number of attempts (including the
                         initial attempt)
    :type max_attempts: int
    :param delay: Delay between attempts in seconds
    :type delay: float
    :param exceptions: Exception types that may trigger a retry
    :type exceptions: Tuple[Type[Exception], ...]
    :param retry_if: Optional predicate; an exception of a listed type
                     is retried only when this returns True
    :type retry_if: Optional[Callable[[Exception], bool]]
    :return: Decorator function that can be applied to async functions
    :rtype: Callable[[Callable[..., T]], Callable[..., T]]
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            for attempt in range(1, max_attempts + 1):
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    if retry_if is not None and not retry_if(e):
                        raise
                    if attempt == max_attempts:
                        logger.warning(
                            "%s failed after %d attempts: %s",
                            func.__qualname__,
                            max_attempts,
                            e,
                        )
                        raise
                    logger.debug(
                        "%s attempt %d/%d failed (%s); retrying in %.2fs",
                        func.__qualname__,
                        attempt,
                        max_attempts,
                        e,
                        delay,
                    )
                    await asyncio.sleep(delay)
            raise ValueError("max_attempts must be at least 1")

        return wrapper

    return decorator
