"""Signals derived from other signals.

Causality only runs parent -> child: resolving a derived or linked signal
never touches its parents.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from typing import Any

from stopsignal.core.race import dispose, race
from stopsignal.core.scheduler import Scheduler, get_default_scheduler
from stopsignal.core.signal import CancelReason, Signal, SignalSource
from stopsignal.utilities.logger import get_logger

logger = get_logger(__name__)


def _mirror(source: SignalSource, parent: Signal) -> None:
    if parent.is_done:
        source.resolve_done()
    else:
        assert parent.reason is not None
        source.resolve_canceled(parent.reason)


async def _follow(
    source: SignalSource,
    parents: list[Signal],
    scheduler: Scheduler,
) -> None:
    spawned: list[asyncio.Future[Any]] = []
    try:
        outcome = await race(parents, scheduler=scheduler, spawned=spawned)
    finally:
        # Only our own wait() tasks are disposed; the parents stay live.
        dispose(spawned)
    if source.is_pending:
        logger.debug(
            "derived_signal_following",
            signal=source.signal.name,
            parent=outcome.index,
        )
        _mirror(source, parents[outcome.index])


def derive_any(
    parents: Iterable[Signal],
    *,
    name: str = "derived",
    scheduler: Scheduler | None = None,
) -> Signal:
    """Return a new signal that resolves like whichever parent resolves first.

    A parent that is already resolved resolves the derived signal right away
    (lowest index first). Otherwise a watcher task races the parents on the
    scheduler, so this must be called with a running event loop.

    Raises:
        ValueError: If no parents are given.
        RuntimeError: If every parent is pending and no event loop is running.
    """
    items = list(parents)
    if not items:
        raise ValueError("derive_any() requires at least one parent signal")

    source = SignalSource(name=name)
    for parent in items:
        if not parent.is_pending:
            _mirror(source, parent)
            return source.signal

    # Fail before the watcher coroutine exists, so it is never left unawaited.
    asyncio.get_running_loop()
    sched = scheduler or get_default_scheduler()
    sched.spawn(_follow(source, items, sched))
    return source.signal


class LinkedSource(SignalSource):
    """A locally-owned source that is also canceled when its parent cancels.

    The owner can resolve it on its own at any time. When the parent is
    canceled first, the linked signal is canceled with
    ``CancelReason.PARENT_CANCELED``; when the parent completes, the linked
    signal completes too. Once the linked signal resolves it detaches from
    the parent.
    """

    def __init__(self, parent: Signal, *, name: str = "linked") -> None:
        super().__init__(name=name)
        self._parent = parent
        self.signal.add_listener(self._detach)
        parent.add_listener(self._on_parent)

    @property
    def parent(self) -> Signal:
        return self._parent

    def _on_parent(self, parent: Signal) -> None:
        if not self.is_pending:
            return
        if parent.is_canceled:
            self.resolve_canceled(CancelReason.PARENT_CANCELED)
        else:
            self.resolve_done()

    def _detach(self, _signal: Signal) -> None:
        self._parent.remove_listener(self._on_parent)


def linked_source(parent: Signal, *, name: str = "linked") -> LinkedSource:
    """Create a child source canceled in sympathy with *parent*."""
    return LinkedSource(parent, name=name)
