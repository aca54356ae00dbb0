"""
Async utilities shared by the Wikipedia adapter and the pool builder.
"""

import asyncio
import functools
import logging
from typing import Any, AsyncIterator, Awaitable, Callable, Iterable, TypeVar

T = TypeVar('T')
R = TypeVar('R')

logger = logging.getLogger(__name__)


def with_timeout(timeout: float = 30.0):
    """Decorator to add timeout to async functions.

    Args:
        timeout: Timeout in seconds (default: 30)

    Returns:
        Decorated function with timeout
    """
    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            try:
                return await asyncio.wait_for(func(*args, **kwargs), timeout=timeout)
            except asyncio.TimeoutError:
                raise TimeoutError(f"Operation timed out after {timeout} seconds")
        return wrapper
    return decorator


def retry_async(
    max_retries: int = 3,
    delay: float = 1.0,
    backoff: float = 2.0,
    exceptions: tuple = (Exception,)
) -> Callable:
    """Decorator for retrying async functions on failure.

    Args:
        max_retries: Maximum number of retry attempts
        delay: Initial delay between retries in seconds
        backoff: Multiplier for delay (2.0 = exponential backoff)
        exceptions: Tuple of exception types to catch and retry

    Returns:
        Decorated function with retry logic
    """
    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            last_exception = None
            current_delay = delay

            for attempt in range(max_retries + 1):
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    last_exception = e
                    if attempt == max_retries:
                        break
                    logger.debug("Retrying %s after %s (attempt %d/%d)",
                                 func.__name__, e, attempt + 1, max_retries)
                    await asyncio.sleep(current_delay)
                    current_delay *= backoff

            raise last_exception

        return wrapper
    return decorator


async def gather_with_concurrency(n: int, coros: Iterable[Awaitable[T]]) -> list:
    """Gather awaitables with a concurrency limit, results in input order.

    If one awaitable raises, or the caller is cancelled, the rest are
    cancelled before the error propagates.
    """
    semaphore = asyncio.Semaphore(n)

    async def sem_task(coro):
        async with semaphore:
            return await coro

    tasks = [asyncio.ensure_future(sem_task(c)) for c in coros]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        raise


async def map_in_order(
    func: Callable[[T], Awaitable[R]],
    items: Iterable[T],
    concurrency: int = 1,
) -> AsyncIterator[R]:
    """Yield func(item) for each item in input order, running at most
    `concurrency` calls at once.

    Work is issued in windows of `concurrency` items, so a consumer that
    stops early leaves at most one window of calls unconsumed.
    """
    items = list(items)
    step = max(1, concurrency)
    for start in range(0, len(items), step):
        window = items[start:start + step]
        if step == 1:
            yield await func(window[0])
            continue
        results = await gather_with_concurrency(step, [func(item) for item in window])
        for result in results:
            yield result
