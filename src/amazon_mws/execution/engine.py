"""Main execution engine for MWS actions."""

from __future__ import annotations

import json
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Sequence

import structlog

from amazon_mws.config import (
    ClientConfig,
    ServiceSection,
    ThrottleConfig,
    get_config,
    get_section,
    get_throttle,
)
from amazon_mws.core.context import CallContext, Clock, SystemClock
from amazon_mws.core.exceptions import (
    EchoMismatchError,
    MWSError,
    OverloadError,
    ResponseFormatError,
)
from amazon_mws.core.logging import configure_logging
from amazon_mws.core.session import StoreSession
from amazon_mws.execution.errors import ErrorHandler
from amazon_mws.execution.request import RequestBuilder
from amazon_mws.execution.throttle import ThrottleRetrier
from amazon_mws.execution.transport import (
    FixtureRef,
    LiveTransport,
    ReplayTransport,
    Response,
    Transport,
)
from amazon_mws.parser.responses import find_result, find_text, next_token

if TYPE_CHECKING:
    from amazon_mws.execution.pagination import FilterReset, PageParser, Paginator

logger = structlog.get_logger()

ResultParser = Callable[[ET.Element], Any]


@dataclass(frozen=True)
class EchoCheck:
    """Expected value of an identifier the service echoes back in the result."""

    path: str
    expected: str

    def verify(self, result: ET.Element) -> EchoMismatchError | None:
        received = find_text(result, self.path)
        if received != self.expected:
            return EchoMismatchError(self.path, self.expected, received)
        return None


@dataclass
class ExecutionResult:
    """Result of executing an MWS action (or a paginated series of them)."""

    success: bool
    action: str
    data: Any = None
    error: MWSError | None = None
    status: int | None = None

    # Pagination
    next_token: str | None = None
    count: int | None = None
    pages: int = 0
    truncated: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "status": "success" if self.success else "error",
            "action": self.action,
        }

        if self.success:
            if self.data is not None and not isinstance(self.data, ET.Element):
                result["data"] = self.data
            if self.count is not None:
                result["count"] = self.count
            if self.next_token:
                result["next_token"] = self.next_token
            if self.truncated:
                result["truncated"] = True
        elif self.error is not None:
            result.update(ErrorHandler.format_error_response(self.error))
            result["status"] = "error"
            result["kind"] = self.error.__class__.__name__

        if self.status is not None:
            result["http_status"] = self.status
        return result

    def to_json(self) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=2, default=str)

    def raise_for_error(self) -> None:
        """Raise the stored error, if the call failed."""
        if self.error is not None:
            raise self.error


class MWSClient:
    """Signs, sends and interprets MWS actions for one store and service section.

    Usage:
        client = MWSClient(config, store="myStore", section="orders")
        result = client.execute("GetServiceStatus", throttle="status")
        if not result.success:
            print(result.error.to_dict())

    An instance holds mutable request state and must not be shared between
    concurrent callers.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        store: str | None = None,
        section: str | ServiceSection = "orders",
        transport: Transport | None = None,
        mock_files: FixtureRef | Sequence[FixtureRef] | None = None,
        clock: Clock | None = None,
        session: StoreSession | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            config: Loaded configuration (the global one when omitted)
            store: Store name; optional when exactly one store is configured
            section: Service section name or object
            transport: Explicit transport; overrides mock_files
            mock_files: Fixture files/status codes, selects the replay transport
            clock: Clock for timestamps and throttle sleeps

        Raises:
            ConfigError: if the store cannot be resolved
        """
        self.config = config or get_config()
        self.session = session or StoreSession(self.config, store)
        self.section = get_section(section) if isinstance(section, str) else section
        self.clock = clock or SystemClock()

        if transport is None:
            if mock_files is not None:
                transport = ReplayTransport(mock_files, self.config.mock_dir)
            else:
                transport = LiveTransport(timeout=self.config.request_timeout)
        self.transport = transport

        self.builder = RequestBuilder(
            self.session.get_credentials,
            self.session.service_url,
            self.section,
            clock=self.clock,
        )
        self.retrier = ThrottleRetrier(
            transport,
            clock=self.clock,
            max_attempts=self.config.max_throttle_attempts,
            throttle_safe=self.config.throttle_safe,
        )
        self.raw_responses: list[Response] = []
        self.last_error: MWSError | None = None

    @property
    def mock_mode(self) -> bool:
        return isinstance(self.transport, ReplayTransport)

    @property
    def last_response(self) -> Response | None:
        return self.raw_responses[-1] if self.raw_responses else None

    def execute(
        self,
        action: str,
        parameters: dict[str, Any] | None = None,
        throttle: str | ThrottleConfig = "order",
        parse: ResultParser | None = None,
        context: CallContext | None = None,
        echo: EchoCheck | None = None,
    ) -> ExecutionResult:
        """
        Execute one action.

        Args:
            action: MWS action name, e.g. ListOrders
            parameters: Action-specific parameters
            throttle: Throttle group name or config for retry sleeps
            parse: Callback turning the ``{Action}Result`` element into data
            context: Cancellation/deadline context
            echo: Identifier the result must echo back

        Returns:
            ExecutionResult; service and transport failures are returned, not raised

        Raises:
            MissingCredentialError: if the store has no secret key
            OperationCancelledError: if the context is cancelled
        """
        throttle_config = get_throttle(throttle) if isinstance(throttle, str) else throttle
        context = context or CallContext(clock=self.clock)
        context.check()

        request = self.builder.build(self.builder.new_context(action, parameters))
        logger.info("executing_action", action=action, section=self.section.name)

        try:
            response = self.retrier.send(request, throttle_config, context)
        except OverloadError as e:
            return self._failure(action, e)
        self.raw_responses.append(response)

        error = ErrorHandler.check_response(response, action)
        if error is not None:
            return self._failure(action, error, response.status)

        try:
            result_element = find_result(response.tree, action)
        except ResponseFormatError as e:
            logger.error("unrecognized_response", action=action, error=e.message)
            return self._failure(action, e, response.status)
        if result_element is None:
            e = ResponseFormatError(f"Response has no {action}Result element", action=action)
            logger.error("unrecognized_response", action=action, error=e.message)
            return self._failure(action, e, response.status)

        if echo is not None:
            mismatch = echo.verify(result_element)
            if mismatch is not None:
                logger.warning(
                    "echo_mismatch",
                    action=action,
                    field=mismatch.field,
                    expected=mismatch.expected,
                    received=mismatch.received,
                )
                return self._failure(action, mismatch, response.status)

        data = parse(result_element) if parse is not None else result_element
        self.last_error = None
        return ExecutionResult(
            success=True,
            action=action,
            data=data,
            status=response.status,
            next_token=next_token(result_element),
            count=len(data) if isinstance(data, list) else None,
            pages=1,
        )

    def paginator(
        self,
        action: str,
        parameters: dict[str, Any] | None = None,
        parse_page: PageParser | None = None,
        reset_filters: FilterReset | None = None,
        token_action: str | None = None,
        throttle: str | ThrottleConfig = "order_list",
        auto_continue: bool = False,
        max_pages: int | None = -1,
        echo: EchoCheck | None = None,
        token_throttle: str | ThrottleConfig | None = None,
    ) -> Paginator:
        """Create a Paginator bound to this client (max_pages -1 = config default)."""
        from amazon_mws.execution.pagination import Paginator

        return Paginator(
            self,
            action,
            parameters=parameters,
            parse_page=parse_page,
            reset_filters=reset_filters,
            token_action=token_action,
            throttle=throttle,
            auto_continue=auto_continue,
            max_pages=self.config.pagination_max_pages if max_pages == -1 else max_pages,
            echo=echo,
            token_throttle=token_throttle,
        )

    def close(self) -> None:
        self.transport.close()

    def _failure(self, action: str, error: MWSError, status: int | None = None) -> ExecutionResult:
        self.last_error = error
        return ExecutionResult(success=False, action=action, error=error, status=status)


def create_client(
    config_path: str | Path | None = None,
    store: str | None = None,
    section: str = "orders",
    **kwargs: Any,
) -> MWSClient:
    """Convenience constructor loading the config file once and applying its log settings."""
    config = ClientConfig.from_file(config_path) if config_path else get_config()
    if config.log_path or config.mute_log:
        configure_logging(log_path=config.log_path, mute=config.mute_log)
    return MWSClient(config, store=store, section=section, **kwargs)
