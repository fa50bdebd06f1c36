"""Tests for throttle retries."""

import pytest
from structlog.testing import capture_logs

from amazon_mws.config import ClientConfig, ThrottleConfig
from amazon_mws.core.context import CallContext
from amazon_mws.core.exceptions import OperationCancelledError, OverloadError
from amazon_mws.execution.engine import MWSClient
from amazon_mws.execution.request import PreparedRequest
from amazon_mws.execution.throttle import RetryState, ThrottleRetrier
from amazon_mws.execution.transport import ReplayTransport

FAST = ThrottleConfig("fast", 5)


@pytest.fixture
def request_() -> PreparedRequest:
    return PreparedRequest(
        action="ListOrders",
        url="https://mws.amazonservices.com/Orders/2013-09-01",
        parameters={},
        body="",
        headers={},
    )


class TestThrottleRetrier:
    """Tests for ThrottleRetrier."""

    def test_non_throttled_returned_immediately(self, request_: PreparedRequest, fake_clock) -> None:
        """Test non-throttled responses are returned at once."""
        retrier = ThrottleRetrier(ReplayTransport([200]), clock=fake_clock)
        response = retrier.send(request_, FAST)
        assert response.status == 200
        assert retrier.attempts == 1
        assert retrier.state is RetryState.DONE
        assert fake_clock.sleeps == []

    def test_error_status_is_not_retried(self, request_: PreparedRequest, fake_clock) -> None:
        """Test other error statuses are not retried."""
        retrier = ThrottleRetrier(ReplayTransport([400, 200]), clock=fake_clock)
        assert retrier.send(request_, FAST).status == 400
        assert retrier.attempts == 1

    def test_succeeds_on_third_attempt(self, request_: PreparedRequest, fake_clock) -> None:
        """Test retrying twice before success."""
        retrier = ThrottleRetrier(ReplayTransport([503, 503, 200]), clock=fake_clock)
        with capture_logs() as logs:
            response = retrier.send(request_, FAST)
        assert response.status == 200
        assert retrier.attempts == 3
        assert fake_clock.sleeps == [5, 5]
        assert sum(fake_clock.sleeps) == 2 * FAST.sleep_seconds
        throttled = [log for log in logs if log["event"] == "request_throttled"]
        assert len(throttled) == 2
        assert throttled[0]["log_level"] == "warning"

    def test_throttle_safe_adds_a_second(self, request_: PreparedRequest, fake_clock) -> None:
        """Test throttle-safe mode sleeps one extra second."""
        retrier = ThrottleRetrier(ReplayTransport([503, 200]), clock=fake_clock, throttle_safe=True)
        retrier.send(request_, FAST)
        assert fake_clock.sleeps == [6]

    def test_cap_raises_overload(self, request_: PreparedRequest, fake_clock) -> None:
        """Test the attempt cap raises OverloadError."""
        retrier = ThrottleRetrier(ReplayTransport([503]), clock=fake_clock, max_attempts=3)
        with capture_logs() as logs:
            with pytest.raises(OverloadError) as exc_info:
                retrier.send(request_, FAST)
        assert exc_info.value.attempts == 3
        assert exc_info.value.action == "ListOrders"
        assert fake_clock.sleeps == [5, 5]
        assert any(log["event"] == "throttle_retries_exhausted" for log in logs)

    def test_cancelled_context(self, request_: PreparedRequest, fake_clock) -> None:
        """Test a cancelled context stops retrying."""
        context = CallContext(clock=fake_clock)
        context.cancel("shutdown")
        retrier = ThrottleRetrier(ReplayTransport([503, 200]), clock=fake_clock)
        with pytest.raises(OperationCancelledError) as exc_info:
            retrier.send(request_, FAST, context)
        assert exc_info.value.reason == "shutdown"
        assert retrier.attempts == 0

    def test_deadline_cuts_sleep_short(self, request_: PreparedRequest, fake_clock) -> None:
        """Test the deadline cuts the throttle sleep short."""
        context = CallContext(timeout=3, clock=fake_clock)
        retrier = ThrottleRetrier(ReplayTransport([503, 200]), clock=fake_clock)
        with pytest.raises(OperationCancelledError) as exc_info:
            retrier.send(request_, FAST, context)
        assert exc_info.value.reason == "deadline exceeded"
        assert fake_clock.sleeps == [3]


class TestClientThrottling:
    """Throttling as seen through MWSClient.execute."""

    def test_named_group_sleep(self, client_config: ClientConfig, fake_clock) -> None:
        """Test sleeping for a named throttle group."""
        client = MWSClient(client_config, mock_files=[503, 200], clock=fake_clock)
        result = client.execute("GetServiceStatus", throttle="item")
        assert result.success
        assert fake_clock.sleeps == [2]

    def test_overload_returned_as_failure(self, client_config: ClientConfig, fake_clock) -> None:
        """Test the client returns overload as a failed result."""
        config = client_config.model_copy(update={"max_throttle_attempts": 2})
        client = MWSClient(config, mock_files=[503], clock=fake_clock)
        result = client.execute("ListOrders", throttle=FAST)
        assert not result.success
        assert isinstance(result.error, OverloadError)
        assert client.last_error is result.error
