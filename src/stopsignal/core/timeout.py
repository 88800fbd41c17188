"""Timeout-driven signals."""

from __future__ import annotations

from stopsignal.core.scheduler import Scheduler, TimerHandle, get_default_scheduler
from stopsignal.core.signal import CancelReason, Signal, SignalSource
from stopsignal.errors import ConfigurationError
from stopsignal.utilities.logger import get_logger

logger = get_logger(__name__)


class TimeoutSignal(Signal):
    """A signal that cancels itself with ``CancelReason.TIMEOUT``.

    ``dispose()`` releases the underlying timer without resolving the
    signal; use it once the guarded work finished first.
    """

    def __init__(self, duration: float, deadline: float, *, name: str = "timeout") -> None:
        super().__init__(name=name)
        self.duration = duration
        self.deadline = deadline
        self._handle: TimerHandle | None = None

    @property
    def armed(self) -> bool:
        """Whether a timer is still scheduled for this signal."""
        return self._handle is not None

    def dispose(self) -> None:
        if self._handle is None:
            return
        self._handle.cancel()
        self._handle = None
        logger.debug("timeout_disposed", signal=self.name, pending=self.is_pending)


class TimeoutSource(SignalSource):
    """Owner side of a ``TimeoutSignal``.

    The timer is the only thing that cancels the signal with ``timeout``.
    The owner may still resolve it first (for example ``resolve_done()``
    when the guarded work completed); the timer then goes stale and its
    eventual firing is a no-op.
    """

    def __init__(
        self,
        duration: float,
        *,
        name: str = "timeout",
        scheduler: Scheduler | None = None,
    ) -> None:
        if duration < 0:
            raise ConfigurationError(f"Timeout duration must be >= 0, got {duration}")
        sched = scheduler or get_default_scheduler()
        signal = TimeoutSignal(duration, sched.now() + duration, name=name)
        super().__init__(signal=signal)
        self._timeout_signal = signal

        if duration == 0:
            self.resolve_canceled(CancelReason.TIMEOUT)
            return
        signal._handle = sched.call_later(duration, self._fire)

    @property
    def signal(self) -> TimeoutSignal:
        return self._timeout_signal

    def _fire(self) -> None:
        self._timeout_signal._handle = None
        if not self.is_pending:
            logger.debug("timeout_stale", signal=self._timeout_signal.name)
            return
        logger.debug(
            "timeout_fired",
            signal=self._timeout_signal.name,
            duration=self._timeout_signal.duration,
        )
        self.resolve_canceled(CancelReason.TIMEOUT)


def with_timeout(
    duration: float,
    *,
    name: str = "timeout",
    scheduler: Scheduler | None = None,
) -> TimeoutSignal:
    """Return a signal that is canceled with ``timeout`` after *duration* seconds.

    Does not suspend. A *duration* of zero returns an already canceled
    signal.

    Raises:
        ConfigurationError: If *duration* is negative.
    """
    return TimeoutSource(duration, name=name, scheduler=scheduler).signal
