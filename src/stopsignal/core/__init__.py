"""Cancellation primitives: signals, race, derived and timeout signals, delays."""

from stopsignal.core.delay import CHUNK_SIZE, cancelable_delay
from stopsignal.core.derived import LinkedSource, derive_any, linked_source
from stopsignal.core.race import RaceOutcome, dispose, race
from stopsignal.core.scheduler import (
    AsyncioScheduler,
    Scheduler,
    TimerHandle,
    get_default_scheduler,
    set_default_scheduler,
)
from stopsignal.core.scope import CancelBoundary, cancel_boundary, run_cancelable
from stopsignal.core.signal import (
    CancelReason,
    Signal,
    SignalSource,
    SignalState,
    create_signal,
)
from stopsignal.core.timeout import TimeoutSignal, TimeoutSource, with_timeout

__all__ = [
    # Signal
    "CancelReason",
    "Signal",
    "SignalSource",
    "SignalState",
    "create_signal",
    # Race
    "RaceOutcome",
    "dispose",
    "race",
    # Derived
    "LinkedSource",
    "derive_any",
    "linked_source",
    # Timeout
    "TimeoutSignal",
    "TimeoutSource",
    "with_timeout",
    # Delay
    "CHUNK_SIZE",
    "cancelable_delay",
    # Scope
    "CancelBoundary",
    "cancel_boundary",
    "run_cancelable",
    # Scheduler
    "AsyncioScheduler",
    "Scheduler",
    "TimerHandle",
    "get_default_scheduler",
    "set_default_scheduler",
]
