"""Retry-on-overload delivery."""

from __future__ import annotations

from enum import Enum

import structlog

from amazon_mws.config import ThrottleConfig
from amazon_mws.core.context import CallContext, Clock, SystemClock
from amazon_mws.core.exceptions import OverloadError
from amazon_mws.execution.request import PreparedRequest
from amazon_mws.execution.transport import Response, Transport

logger = structlog.get_logger()

THROTTLED_STATUS = 503


class RetryState(Enum):
    """States of one delivery."""

    READY = "ready"
    SENT = "sent"
    THROTTLED = "throttled"
    DONE = "done"


class ThrottleRetrier:
    """Resends a request after a fixed sleep for as long as the service answers 503."""

    def __init__(
        self,
        transport: Transport,
        clock: Clock | None = None,
        max_attempts: int | None = None,
        throttle_safe: bool = False,
    ) -> None:
        """
        Initialize the retrier.

        Args:
            transport: Transport used for every attempt
            clock: Clock used for sleeping
            max_attempts: Total attempts before OverloadError (None = unbounded)
            throttle_safe: Sleep one extra second on every throttle
        """
        self.transport = transport
        self.clock = clock or SystemClock()
        self.max_attempts = max_attempts
        self.throttle_safe = throttle_safe
        self.state = RetryState.READY
        self.attempts = 0

    def delay_for(self, throttle: ThrottleConfig) -> float:
        return throttle.sleep_seconds + (1 if self.throttle_safe else 0)

    def send(
        self,
        request: PreparedRequest,
        throttle: ThrottleConfig,
        context: CallContext | None = None,
    ) -> Response:
        """
        Deliver a request, sleeping and resending on every 503.

        Any other status is returned unchanged.

        Raises:
            OverloadError: if max_attempts is set and every attempt was throttled
            OperationCancelledError: if the context is cancelled while waiting
        """
        context = context or CallContext(clock=self.clock)
        self.state = RetryState.READY
        self.attempts = 0

        while True:
            context.check()
            response = self.transport.send(request)
            self.attempts += 1
            self.state = RetryState.SENT

            if response.status != THROTTLED_STATUS:
                self.state = RetryState.DONE
                return response

            self.state = RetryState.THROTTLED
            if self.max_attempts is not None and self.attempts >= self.max_attempts:
                logger.error(
                    "throttle_retries_exhausted",
                    action=request.action,
                    attempts=self.attempts,
                    group=throttle.group,
                )
                raise OverloadError(request.action, self.attempts)

            delay = self.delay_for(throttle)
            logger.warning(
                "request_throttled",
                action=request.action,
                group=throttle.group,
                attempt=self.attempts,
                sleep_seconds=delay,
            )
            context.sleep(delay)
