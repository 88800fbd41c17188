"""Helpers for racing work against a signal and absorbing cancellation."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from types import TracebackType
from typing import Any, TypeVar

from stopsignal.core.race import dispose, race
from stopsignal.core.scheduler import Scheduler
from stopsignal.core.signal import CancelReason, Signal
from stopsignal.errors import CancellationError
from stopsignal.utilities.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


async def run_cancelable(
    work: Awaitable[T],
    signal: Signal,
    *,
    scheduler: Scheduler | None = None,
) -> T:
    """Await *work* unless *signal* is canceled first.

    On cancellation the work task is disposed and ``CancellationError`` is
    raised. A signal that completes normally does not stop the work; its
    result is still awaited.
    """
    if signal.is_canceled:
        if asyncio.iscoroutine(work):
            work.close()
        signal.check()

    spawned: list[asyncio.Future[Any]] = []
    try:
        outcome = await race([work, signal], scheduler=scheduler, spawned=spawned)
        if outcome.index == 0:
            return outcome.result()

        if signal.is_canceled:
            logger.debug("work_cancelled", signal=signal.name, reason=signal.reason)
            outcome.result()
        return await outcome.tasks[0]
    finally:
        # Neither the work nor the signal waiter outlives this call, even
        # when the caller itself is cancelled.
        dispose(spawned)


class CancelBoundary:
    """The one scope that turns ``CancellationError`` into a normal outcome.

    Every frame below the boundary sees the error and runs its cleanup as it
    propagates; the boundary then swallows it and records the reason. Other
    exceptions pass through untouched.
    """

    def __init__(self, name: str = "") -> None:
        self.name = name
        self.error: CancellationError | None = None

    @property
    def canceled(self) -> bool:
        return self.error is not None

    @property
    def reason(self) -> CancelReason | None:
        return self.error.reason if self.error is not None else None

    def __enter__(self) -> CancelBoundary:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> bool:
        if isinstance(exc_val, CancellationError):
            self.error = exc_val
            logger.info("cancellation_absorbed", boundary=self.name, reason=exc_val.reason)
            return True
        return False

    async def __aenter__(self) -> CancelBoundary:
        return self

    async def __aexit__(self, *exc_info: Any) -> bool:
        return self.__exit__(*exc_info)


def cancel_boundary(name: str = "") -> CancelBoundary:
    """Mark the scope that owns the cancellation decision.

    Usage::

        with cancel_boundary("request") as boundary:
            await handle(signal)
        if boundary.canceled:
            ...
    """
    return CancelBoundary(name)
