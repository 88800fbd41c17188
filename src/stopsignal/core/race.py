"""Race combinator.

``race()`` runs several awaitables concurrently and returns as soon as the
first one settles. It never cancels the others: losers keep running until
they finish on their own or the caller disposes of them via
``RaceOutcome.dispose_losers()``.

Tie-break: when several operands are already settled by the time the race
wakes up (same loop iteration), the one with the lowest index wins.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Iterable
from dataclasses import dataclass, field
from typing import Any

from stopsignal.core.scheduler import Scheduler, get_default_scheduler
from stopsignal.core.signal import Signal
from stopsignal.utilities.logger import get_logger

logger = get_logger(__name__)

RaceOperand = Awaitable[Any] | Signal


@dataclass(slots=True)
class RaceOutcome:
    """Result of a race.

    ``index`` and ``operand`` identify the winner. Exactly one of ``value``
    and ``error`` is meaningful: ``error`` is set when the winner raised
    (including ``CancellationError`` from a canceled signal operand).
    """

    index: int
    operand: Any
    value: Any = None
    error: BaseException | None = None
    tasks: list[asyncio.Future[Any]] = field(default_factory=list, repr=False)

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def losers(self) -> list[asyncio.Future[Any]]:
        """Loser tasks that are still running."""
        return [
            task for i, task in enumerate(self.tasks)
            if i != self.index and not task.done()
        ]

    def result(self) -> Any:
        """Return the winner's value, or raise the winner's error."""
        if self.error is not None:
            raise self.error
        return self.value

    def dispose_losers(self) -> int:
        """Cancel every loser that is still running; return how many."""
        return dispose(self.losers)


def dispose(tasks: Iterable[asyncio.Future[Any]]) -> int:
    """Cancel every task in *tasks* that is still running; return how many."""
    pending = [task for task in tasks if not task.done()]
    for task in pending:
        task.cancel()
    if pending:
        logger.debug("race_losers_disposed", count=len(pending))
    return len(pending)


def _as_awaitable(operand: RaceOperand) -> Awaitable[Any]:
    if isinstance(operand, Signal):
        return operand.wait()
    return operand


def _observe(index: int, task: asyncio.Future[Any]) -> None:
    """Retrieve a settled operand's exception so it is never left unobserved."""
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.debug("race_operand_failed", index=index, error=repr(exc))


async def race(
    operands: Iterable[RaceOperand],
    *,
    scheduler: Scheduler | None = None,
    spawned: list[asyncio.Future[Any]] | None = None,
) -> RaceOutcome:
    """Run *operands* concurrently and settle with the first to settle.

    Operands can be coroutines, futures, tasks, any other awaitable, or
    ``Signal`` instances (raced through ``signal.wait()``).

    When *spawned* is given, every operand task is appended to it before the
    race suspends. If the awaiting task is itself cancelled, the operands
    keep running, and a caller that owns them can pass the list to
    ``dispose()`` from a ``finally`` block.

    Raises:
        ValueError: If no operands are given.
    """
    items = list(operands)
    if not items:
        raise ValueError("race() requires at least one operand")

    sched = scheduler or get_default_scheduler()
    tasks: list[asyncio.Future[Any]] = []
    for index, operand in enumerate(items):
        task = sched.spawn(_as_awaitable(operand))
        task.add_done_callback(lambda t, i=index: _observe(i, t))
        tasks.append(task)
        if spawned is not None:
            spawned.append(task)

    await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)

    # Lowest index among everything settled at wake-up time.
    index = next(i for i, task in enumerate(tasks) if task.done())
    winner = tasks[index]

    outcome = RaceOutcome(index=index, operand=items[index], tasks=tasks)
    if winner.cancelled():
        outcome.error = asyncio.CancelledError()
    else:
        outcome.error = winner.exception()
        if outcome.error is None:
            outcome.value = winner.result()

    logger.debug(
        "race_settled",
        winner=index,
        operands=len(tasks),
        failed=outcome.failed,
        pending_losers=len(outcome.losers),
    )
    return outcome
