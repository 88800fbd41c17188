"""Cancellation-aware retry using tenacity."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from stopsignal.core.delay import cancelable_delay
from stopsignal.core.scheduler import Scheduler
from stopsignal.core.signal import Signal
from stopsignal.errors import CancellationError, SignalError

T = TypeVar("T")


def is_retryable(exc: BaseException) -> bool:
    """Check if an exception is retryable."""
    if isinstance(exc, CancellationError):
        return False
    if isinstance(exc, SignalError):
        return exc.retryable
    # Network errors are retryable
    if isinstance(exc, (ConnectionError, TimeoutError, asyncio.TimeoutError)):
        return True
    return False


async def retry_cancelable(
    fn: Callable[..., Awaitable[T]],
    *args: Any,
    signal: Signal,
    max_attempts: int = 3,
    min_wait: float = 1.0,
    max_wait: float = 30.0,
    multiplier: float = 2.0,
    retry_on: Callable[[BaseException], bool] | None = None,
    on_retry: Callable[[RetryCallState], None] | None = None,
    chunk_size: float | None = None,
    scheduler: Scheduler | None = None,
    **kwargs: Any,
) -> T:
    """Retry an async function with exponential backoff until *signal* cancels.

    Backoff sleeps are chunked cancelable delays governed by *signal*, so a
    cancellation during backoff surfaces within one chunk. The signal is
    also checked before every attempt. ``CancellationError`` is never
    retried, even when *retry_on* would accept it.

    Args:
        fn: Async function to retry.
        *args: Positional arguments for fn.
        signal: Governing cancellation signal.
        max_attempts: Maximum attempts.
        min_wait: Minimum wait seconds.
        max_wait: Maximum wait seconds.
        multiplier: Exponential backoff multiplier.
        retry_on: Predicate deciding which exceptions are retried.
            Defaults to ``is_retryable``.
        on_retry: Optional callback invoked before each backoff sleep.
        chunk_size: Chunk size for the backoff delays.
        scheduler: Scheduler for the backoff delays.
        **kwargs: Keyword arguments for fn.
    """
    predicate = retry_on or is_retryable

    def _should_retry(exc: BaseException) -> bool:
        return not isinstance(exc, CancellationError) and predicate(exc)

    async def _sleep(seconds: float) -> None:
        await cancelable_delay(seconds, signal, chunk_size=chunk_size, scheduler=scheduler)

    retry_kwargs: dict[str, Any] = {
        "stop": stop_after_attempt(max_attempts),
        "wait": wait_exponential(multiplier=multiplier, min=min_wait, max=max_wait),
        "retry": retry_if_exception(_should_retry),
        "sleep": _sleep,
        "reraise": True,
    }
    if on_retry:
        retry_kwargs["before_sleep"] = on_retry

    async for attempt in AsyncRetrying(**retry_kwargs):
        with attempt:
            signal.check()
            return await fn(*args, **kwargs)
    raise AssertionError("unreachable: tenacity exhausted without raising")
