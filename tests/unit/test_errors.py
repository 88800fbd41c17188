"""Tests for the error hierarchy."""

from __future__ import annotations

import asyncio

from stopsignal.core.signal import CancelReason, SignalState
from stopsignal.errors import (
    AlreadyResolvedError,
    CancellationError,
    ConfigurationError,
    ErrorCategory,
    SignalError,
)


def test_cancellation_error_is_ordinary_exception() -> None:
    err = CancellationError(CancelReason.TIMEOUT)
    assert isinstance(err, Exception)
    assert isinstance(err, SignalError)
    assert not isinstance(err, asyncio.CancelledError)
    assert err.reason == CancelReason.TIMEOUT
    assert err.details == {"reason": "timeout"}
    assert "timeout" in str(err)


def test_cancellation_error_custom_message() -> None:
    err = CancellationError(CancelReason.EXPLICIT, "user pressed stop")
    assert str(err) == "user pressed stop"
    assert not err.retryable


def test_already_resolved_error() -> None:
    err = AlreadyResolvedError(SignalState.CANCELED, name="job")
    assert err.state == SignalState.CANCELED
    assert err.category == ErrorCategory.STATE
    assert "job" in str(err) and "canceled" in str(err)


def test_configuration_error_repr() -> None:
    err = ConfigurationError("bad chunk")
    assert err.category == ErrorCategory.CONFIGURATION
    assert repr(err) == "ConfigurationError('bad chunk', category=<ErrorCategory.CONFIGURATION: 'configuration'>)"
