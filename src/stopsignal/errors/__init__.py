"""stopsignal error hierarchy."""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from stopsignal.core.signal import CancelReason, SignalState


class ErrorCategory(StrEnum):
    """Category of error for classification and handling."""

    STATE = "state"
    CANCELLATION = "cancellation"
    CONFIGURATION = "configuration"
    INTERNAL = "internal"


class SignalError(Exception):
    """Base error for all stopsignal exceptions."""

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory = ErrorCategory.INTERNAL,
        retryable: bool = False,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.category = category
        self.retryable = retryable
        self.details: dict[str, Any] = details or {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self)!r}, category={self.category!r})"


class AlreadyResolvedError(SignalError):
    """A signal was resolved a second time.

    This is a logic bug in the owner (double cancel, double complete) and
    must not be swallowed.
    """

    def __init__(self, state: SignalState, *, name: str = "") -> None:
        label = f"Signal {name!r}" if name else "Signal"
        super().__init__(
            f"{label} is already resolved ({state})",
            category=ErrorCategory.STATE,
            retryable=False,
            details={"state": str(state), "name": name},
        )
        self.state = state


class CancellationError(SignalError):
    """An awaited signal was canceled.

    Plain ``Exception`` subclass on purpose: it travels through frames and
    task results like any other failure and never touches asyncio's own
    task-cancellation counters.
    """

    def __init__(self, reason: CancelReason, message: str | None = None) -> None:
        super().__init__(
            message or f"Operation cancelled ({reason})",
            category=ErrorCategory.CANCELLATION,
            retryable=False,
            details={"reason": str(reason)},
        )
        self.reason = reason


class ConfigurationError(SignalError):
    """Invalid or missing configuration."""

    def __init__(self, message: str) -> None:
        super().__init__(message, category=ErrorCategory.CONFIGURATION, retryable=False)


__all__ = [
    "AlreadyResolvedError",
    "CancellationError",
    "ConfigurationError",
    "ErrorCategory",
    "SignalError",
]
