"""Tests for cancellation-aware retry."""

from __future__ import annotations

import asyncio
import time

import pytest

from stopsignal.core.signal import CancelReason, SignalState, create_signal
from stopsignal.errors import (
    AlreadyResolvedError,
    CancellationError,
    ConfigurationError,
    SignalError,
)
from stopsignal.utilities.retry import is_retryable, retry_cancelable


class TestIsRetryable:
    def test_cancellation_never_retryable(self) -> None:
        assert not is_retryable(CancellationError(CancelReason.EXPLICIT))

    def test_signal_errors_use_flag(self) -> None:
        assert not is_retryable(AlreadyResolvedError(SignalState.DONE))
        assert not is_retryable(ConfigurationError("bad"))
        assert is_retryable(SignalError("flaky", retryable=True))

    def test_network_errors_retryable(self) -> None:
        assert is_retryable(ConnectionError())
        assert is_retryable(TimeoutError())

    def test_other_errors_not_retryable(self) -> None:
        assert not is_retryable(ValueError())


class TestRetryCancelable:
    @pytest.mark.asyncio
    async def test_retries_until_success(self) -> None:
        calls: list[int] = []

        async def flaky(value: str) -> str:
            calls.append(1)
            if len(calls) < 3:
                raise ConnectionError("transient")
            return value

        result = await retry_cancelable(
            flaky, "ok", signal=create_signal().signal,
            max_attempts=3, min_wait=0.01, max_wait=0.02, multiplier=0.01,
        )
        assert result == "ok"
        assert len(calls) == 3

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self) -> None:
        calls: list[int] = []

        async def always_fails() -> None:
            calls.append(1)
            raise ConnectionError("down")

        with pytest.raises(ConnectionError):
            await retry_cancelable(
                always_fails, signal=create_signal().signal,
                max_attempts=2, min_wait=0.01, max_wait=0.01,
            )
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_non_retryable_raises_immediately(self) -> None:
        calls: list[int] = []

        async def broken() -> None:
            calls.append(1)
            raise ValueError("bug")

        with pytest.raises(ValueError):
            await retry_cancelable(broken, signal=create_signal().signal, min_wait=0.01)
        assert calls == [1]

    @pytest.mark.asyncio
    async def test_cancel_during_backoff(self) -> None:
        source = create_signal()
        retries: list[int] = []

        async def always_fails() -> None:
            raise ConnectionError("down")

        asyncio.get_running_loop().call_later(0.05, source.cancel)
        start = time.monotonic()
        with pytest.raises(CancellationError):
            await retry_cancelable(
                always_fails, signal=source.signal,
                max_attempts=5, min_wait=30.0, max_wait=30.0,
                chunk_size=0.02, on_retry=lambda state: retries.append(state.attempt_number),
            )
        assert time.monotonic() - start < 1.0
        assert retries == [1]

    @pytest.mark.asyncio
    async def test_canceled_signal_skips_attempt(self) -> None:
        source = create_signal()
        source.cancel(CancelReason.TIMEOUT)
        calls: list[int] = []

        async def work() -> None:
            calls.append(1)

        with pytest.raises(CancellationError):
            await retry_cancelable(work, signal=source.signal, retry_on=lambda exc: True)
        assert calls == []
