"""stopsignal - cooperative cancellation for asyncio."""

from stopsignal.core import (
    CHUNK_SIZE,
    AsyncioScheduler,
    CancelBoundary,
    CancelReason,
    LinkedSource,
    RaceOutcome,
    Scheduler,
    Signal,
    SignalSource,
    SignalState,
    TimeoutSignal,
    TimeoutSource,
    cancel_boundary,
    cancelable_delay,
    create_signal,
    derive_any,
    linked_source,
    race,
    run_cancelable,
    with_timeout,
)
from stopsignal.errors import (
    AlreadyResolvedError,
    CancellationError,
    ConfigurationError,
    SignalError,
)

__version__ = "0.1.0"

__all__ = [
    "CHUNK_SIZE",
    "AlreadyResolvedError",
    "AsyncioScheduler",
    "CancelBoundary",
    "CancelReason",
    "CancellationError",
    "ConfigurationError",
    "LinkedSource",
    "RaceOutcome",
    "Scheduler",
    "Signal",
    "SignalError",
    "SignalSource",
    "SignalState",
    "TimeoutSignal",
    "TimeoutSource",
    "__version__",
    "cancel_boundary",
    "cancelable_delay",
    "create_signal",
    "derive_any",
    "linked_source",
    "race",
    "run_cancelable",
    "with_timeout",
]
