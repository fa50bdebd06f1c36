"""Clocks and call contexts for the MWS request engine.

Every blocking step of a request (throttle sleeps, page fetches) receives a
``CallContext`` so a long "fetch until exhausted" run can be aborted from
another thread or bounded by a deadline.
"""

from __future__ import annotations

import threading
import time
from datetime import datetime, timezone
from typing import Protocol

import structlog

from amazon_mws.core.exceptions import OperationCancelledError

logger = structlog.get_logger()


class Clock(Protocol):
    """Source of wall time, monotonic time and sleeping."""

    def now(self) -> datetime: ...

    def monotonic(self) -> float: ...

    def sleep(self, seconds: float, interrupt: threading.Event | None = None) -> None: ...


class SystemClock:
    """Clock backed by the real system time."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def monotonic(self) -> float:
        return time.monotonic()

    def sleep(self, seconds: float, interrupt: threading.Event | None = None) -> None:
        if seconds <= 0:
            return
        if interrupt is not None:
            # Wakes up early when the context is cancelled
            interrupt.wait(seconds)
        else:
            time.sleep(seconds)


class CallContext:
    """Cancellation flag plus optional deadline for one logical operation."""

    def __init__(self, timeout: float | None = None, clock: Clock | None = None) -> None:
        self.clock = clock or SystemClock()
        self._cancelled = threading.Event()
        self._reason = "cancelled"
        self.deadline = self.clock.monotonic() + timeout if timeout is not None else None

    def cancel(self, reason: str = "cancelled") -> None:
        """Request that the operation stop at its next checkpoint."""
        self._reason = reason
        self._cancelled.set()
        logger.info("call_cancelled", reason=reason)

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None when there is none."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - self.clock.monotonic())

    def check(self) -> None:
        """Raise OperationCancelledError if cancelled or past the deadline."""
        if self._cancelled.is_set():
            raise OperationCancelledError(self._reason)
        if self.deadline is not None and self.clock.monotonic() >= self.deadline:
            raise OperationCancelledError("deadline exceeded")

    def sleep(self, seconds: float) -> None:
        """Sleep on the context's clock, never past the deadline."""
        self.check()
        remaining = self.remaining()
        if remaining is not None and remaining < seconds:
            self.clock.sleep(remaining, self._cancelled)
            self.check()
            raise OperationCancelledError("deadline exceeded")
        self.clock.sleep(seconds, self._cancelled)
        self.check()


def background_context(clock: Clock | None = None) -> CallContext:
    """A context that is never cancelled and has no deadline."""
    return CallContext(clock=clock)
