"""Test schedulers: one that records raw timers, one with a virtual clock."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from stopsignal.core.scheduler import AsyncioScheduler


@dataclass
class RawTimer:
    duration: float
    finished: bool = False
    cancelled: bool = False


class RecordingScheduler(AsyncioScheduler):
    """Real asyncio timing, but every raw delay is recorded."""

    def __init__(self) -> None:
        super().__init__()
        self.timers: list[RawTimer] = []

    @property
    def active_timers(self) -> list[RawTimer]:
        return [t for t in self.timers if not t.finished]

    async def sleep(self, duration: float) -> None:  # type: ignore[override]
        timer = RawTimer(duration)
        self.timers.append(timer)
        try:
            await asyncio.sleep(duration)
        except asyncio.CancelledError:
            timer.cancelled = True
            raise
        finally:
            timer.finished = True


@dataclass(eq=False)
class _VirtualCall:
    when: float
    callback: Callable[[], Any]
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


class VirtualScheduler(AsyncioScheduler):
    """Deterministic clock that only moves when a raw delay completes.

    ``stalls`` maps a raw-delay index to extra seconds added to the clock
    when that delay completes, simulating a loop blocked by other work.
    """

    def __init__(self, stalls: dict[int, float] | None = None) -> None:
        super().__init__()
        self.stalls = dict(stalls or {})
        self.clock = 0.0
        self.sleeps: list[float] = []
        self.calls: list[_VirtualCall] = []

    def now(self) -> float:
        return self.clock

    async def sleep(self, duration: float) -> None:  # type: ignore[override]
        index = len(self.sleeps)
        self.sleeps.append(duration)
        await asyncio.sleep(0)
        self.advance(duration + self.stalls.get(index, 0.0))

    def call_later(self, delay: float, callback: Callable[[], Any]) -> _VirtualCall:  # type: ignore[override]
        call = _VirtualCall(self.clock + max(0.0, delay), callback)
        self.calls.append(call)
        return call

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing due callbacks in time order."""
        self.clock += seconds
        due = sorted(
            (c for c in self.calls if not c.cancelled and c.when <= self.clock),
            key=lambda c: c.when,
        )
        for call in due:
            self.calls.remove(call)
            call.callback()
