"""Chunked, cancelable delay.

A long sleep is split into raw delays of at most ``chunk_size`` seconds,
each raced against the governing signal. After cancellation no raw timer
lives longer than one chunk, whatever the requested duration.

Remaining time is always recomputed from a monotonic deadline rather than
decremented by the nominal chunk size, so a stalled loop does not make the
delay over-sleep by the stall.
"""

from __future__ import annotations

import asyncio
from typing import Any

from stopsignal.core.race import dispose, race
from stopsignal.core.scheduler import Scheduler, get_default_scheduler
from stopsignal.core.signal import Signal
from stopsignal.errors import ConfigurationError
from stopsignal.utilities.logger import get_logger

logger = get_logger(__name__)

# Upper bound (seconds) on cancellation latency and on the lifetime of any
# raw timer left behind after cancellation.
CHUNK_SIZE = 0.1


async def cancelable_delay(
    duration: float,
    signal: Signal,
    *,
    chunk_size: float | None = None,
    scheduler: Scheduler | None = None,
) -> None:
    """Sleep for *duration* seconds unless *signal* resolves first.

    Args:
        duration: Requested delay in seconds.
        signal: Governing signal. Cancellation raises ``CancellationError``
            within one chunk; completion ends the delay early and normally.
        chunk_size: Longest single raw delay. Defaults to ``CHUNK_SIZE``.
        scheduler: Clock and timer source. Defaults to the asyncio scheduler.

    Raises:
        CancellationError: If *signal* is or becomes canceled.
        ConfigurationError: If *chunk_size* is not positive.
    """
    chunk = CHUNK_SIZE if chunk_size is None else chunk_size
    if chunk <= 0:
        raise ConfigurationError(f"chunk_size must be > 0, got {chunk}")

    sched = scheduler or get_default_scheduler()
    deadline = sched.now() + duration
    chunks = 0

    while True:
        if not signal.is_pending:
            # Raises at once when canceled; no point issuing another sleep.
            await signal
            logger.debug("delay_ended_by_signal", signal=signal.name, chunks=chunks)
            return

        remaining = deadline - sched.now()
        if remaining <= 0:
            logger.debug("delay_completed", duration=duration, chunks=chunks)
            return

        spawned: list[asyncio.Future[Any]] = []
        try:
            outcome = await race(
                [sched.sleep(min(remaining, chunk)), signal],
                scheduler=sched,
                spawned=spawned,
            )
        finally:
            # Also runs when the caller is cancelled mid-chunk.
            dispose(spawned)
        chunks += 1

        if outcome.index == 1:
            logger.debug(
                "delay_interrupted",
                signal=signal.name,
                state=str(signal.state),
                chunks=chunks,
            )
            outcome.result()
            return

        # Surface a failing raw delay; otherwise re-check and loop.
        outcome.result()
