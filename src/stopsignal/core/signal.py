"""One-shot cancellation signal.

A signal is split into two handles:

- ``SignalSource`` is held by the owner and is the only way to resolve.
- ``Signal`` is what gets passed down the call chain; it can be observed
  and awaited but never resolved.

A signal resolves at most once, to either ``done`` or ``canceled`` with a
``CancelReason``. Resolving twice raises ``AlreadyResolvedError``; callers
doing best-effort cancellation use ``SignalSource.cancel()``, which checks
``is_pending`` first.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Generator
from contextlib import suppress
from enum import StrEnum
from typing import Any

from stopsignal.errors import AlreadyResolvedError, CancellationError
from stopsignal.utilities.logger import get_logger

logger = get_logger(__name__)


class SignalState(StrEnum):
    """Resolution state of a signal."""

    PENDING = "pending"
    DONE = "done"
    CANCELED = "canceled"


class CancelReason(StrEnum):
    """Why a signal was canceled."""

    EXPLICIT = "explicit"
    TIMEOUT = "timeout"
    PARENT_CANCELED = "parent_canceled"


SignalListener = Callable[["Signal"], Any]


class Signal:
    """Read-only view of a one-shot event.

    ``await signal`` returns once the signal is done and raises
    ``CancellationError`` once it is canceled. Any number of tasks may wait
    on the same signal; all of them observe the same resolution.
    """

    def __init__(self, *, name: str = "") -> None:
        self.name = name
        self._state = SignalState.PENDING
        self._reason: CancelReason | None = None
        self._event = asyncio.Event()
        self._listeners: list[SignalListener] = []

    @property
    def state(self) -> SignalState:
        return self._state

    @property
    def reason(self) -> CancelReason | None:
        """Cancel reason, or None unless canceled."""
        return self._reason

    @property
    def is_pending(self) -> bool:
        return self._state is SignalState.PENDING

    @property
    def is_done(self) -> bool:
        return self._state is SignalState.DONE

    @property
    def is_canceled(self) -> bool:
        return self._state is SignalState.CANCELED

    def check(self) -> None:
        """Raise CancellationError if the signal is already canceled."""
        if self._state is SignalState.CANCELED:
            assert self._reason is not None
            raise CancellationError(self._reason)

    async def wait(self) -> None:
        """Suspend until the signal resolves.

        Returns normally on ``done``; raises ``CancellationError`` on
        ``canceled``.
        """
        if self._state is SignalState.PENDING:
            await self._event.wait()
        self.check()

    def __await__(self) -> Generator[Any, None, None]:
        return self.wait().__await__()

    def add_listener(self, listener: SignalListener) -> None:
        """Call *listener* with this signal once it resolves.

        Fires immediately when the signal is already resolved.
        """
        if self._state is not SignalState.PENDING:
            self._notify(listener)
            return
        self._listeners.append(listener)

    def remove_listener(self, listener: SignalListener) -> None:
        with suppress(ValueError):
            self._listeners.remove(listener)

    def _resolve(self, state: SignalState, reason: CancelReason | None) -> None:
        if self._state is not SignalState.PENDING:
            raise AlreadyResolvedError(self._state, name=self.name)

        self._state = state
        self._reason = reason
        self._event.set()
        logger.debug("signal_resolved", signal=self.name, state=str(state), reason=reason)

        listeners, self._listeners = self._listeners, []
        for listener in listeners:
            self._notify(listener)

    def _notify(self, listener: SignalListener) -> None:
        try:
            listener(self)
        except Exception:
            # Listeners must not break resolution of the signal.
            logger.exception("signal_listener_failed", signal=self.name)

    def __repr__(self) -> str:
        label = f" {self.name!r}" if self.name else ""
        if self._reason is not None:
            return f"<Signal{label} {self._state}({self._reason})>"
        return f"<Signal{label} {self._state}>"


class SignalSource:
    """Owner handle: the exclusive right to resolve one ``Signal``.

    Keep the source to yourself and hand out ``source.signal``.

    Args:
        name: Label used in logs and error messages.
        signal: Adopt an existing pending signal instead of creating one.
            Used by factories that return ``Signal`` subclasses.
    """

    def __init__(self, *, name: str = "", signal: Signal | None = None) -> None:
        if signal is None:
            signal = Signal(name=name)
        elif not signal.is_pending:
            raise AlreadyResolvedError(signal.state, name=signal.name)
        self._signal = signal

    @property
    def signal(self) -> Signal:
        return self._signal

    @property
    def is_pending(self) -> bool:
        return self._signal.is_pending

    def resolve_done(self) -> None:
        """Transition pending -> done. Raises AlreadyResolvedError otherwise."""
        self._signal._resolve(SignalState.DONE, None)

    def resolve_canceled(self, reason: CancelReason = CancelReason.EXPLICIT) -> None:
        """Transition pending -> canceled. Raises AlreadyResolvedError otherwise."""
        self._signal._resolve(SignalState.CANCELED, CancelReason(reason))

    def cancel(self, reason: CancelReason = CancelReason.EXPLICIT) -> bool:
        """Cancel if still pending; return whether this call resolved it."""
        if not self._signal.is_pending:
            return False
        self.resolve_canceled(reason)
        return True

    def __repr__(self) -> str:
        return f"SignalSource({self._signal!r})"


def create_signal(*, name: str = "") -> SignalSource:
    """Create a pending signal; the caller owns the returned source."""
    return SignalSource(name=name)
