"""Scheduler boundary.

Everything that touches the event loop's clock or timers goes through a
``Scheduler`` so tests can swap in a virtual clock. The default
implementation is a thin wrapper over the running asyncio loop.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import Any, Protocol, TypeVar

T = TypeVar("T")


class TimerHandle(Protocol):
    """A scheduled one-shot callback that can be disposed."""

    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """What the cancellation primitives need from the event loop."""

    def now(self) -> float:
        """Monotonic time in seconds."""
        ...

    def sleep(self, duration: float) -> Awaitable[None]:
        """Raw, uninterruptible delay."""
        ...

    def call_later(self, delay: float, callback: Callable[[], Any]) -> TimerHandle:
        """Run *callback* once after *delay* seconds."""
        ...

    def spawn(self, awaitable: Awaitable[T]) -> asyncio.Future[T]:
        """Run *awaitable* concurrently, keeping it alive until it settles."""
        ...


class AsyncioScheduler:
    """Scheduler backed by the running asyncio event loop.

    Spawned tasks are held in a strong-reference set until they finish, so a
    race loser nobody references keeps running instead of being collected.
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Future[Any]] = set()

    @property
    def pending_tasks(self) -> int:
        return len(self._tasks)

    def now(self) -> float:
        return time.monotonic()

    def sleep(self, duration: float) -> Awaitable[None]:
        return asyncio.sleep(duration)

    def call_later(self, delay: float, callback: Callable[[], Any]) -> TimerHandle:
        loop = asyncio.get_running_loop()
        return loop.call_later(max(0.0, delay), callback)

    def spawn(self, awaitable: Awaitable[T]) -> asyncio.Future[T]:
        task = asyncio.ensure_future(awaitable)
        if not task.done():
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
        return task


_default_scheduler: Scheduler = AsyncioScheduler()


def get_default_scheduler() -> Scheduler:
    """Return the process-wide scheduler used when none is passed explicitly."""
    return _default_scheduler


def set_default_scheduler(scheduler: Scheduler) -> Scheduler:
    """Install *scheduler* as the default and return the previous one."""
    global _default_scheduler
    previous = _default_scheduler
    _default_scheduler = scheduler
    return previous
