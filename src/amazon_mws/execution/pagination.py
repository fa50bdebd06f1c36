"""Token-based pagination for MWS list actions."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable

import structlog

from amazon_mws.config import ThrottleConfig
from amazon_mws.core.context import CallContext
from amazon_mws.core.exceptions import MWSError

if TYPE_CHECKING:
    from amazon_mws.execution.engine import EchoCheck, ExecutionResult, MWSClient

logger = structlog.get_logger()

PageParser = Callable[[ET.Element], list[Any]]
FilterReset = Callable[[dict[str, str]], None]


class PaginationPhase(Enum):
    """Where the paginator is in the list."""

    FIRST_PAGE = "first_page"
    CONTINUE = "continue"
    DONE = "done"


@dataclass
class PaginationState:
    """Continuation bookkeeping for one list."""

    has_more: bool = False
    auto_continue: bool = False
    current_token: str | None = None
    records: list[Any] = field(default_factory=list)
    pages: int = 0
    truncated: bool = False


def clear_all(parameters: dict[str, str]) -> None:
    """Default filter reset: continuation requests carry nothing but the token."""
    parameters.clear()


def _all_children(result: ET.Element) -> list[Any]:
    return list(result)


class Paginator:
    """Drives fetch/parse cycles over a list action until its token runs out.

    The paginator is configured with callbacks instead of subclassing:

    - ``parse_page`` turns a ``{Action}Result`` element into a list of records
    - ``reset_filters`` strips resource filters from the parameter map before
      a continuation request (by default everything is removed)

    Usage:
        paginator = client.paginator("ListOrders", {"CreatedAfter": "..."},
                                     parse_page=parse_orders, auto_continue=True)
        result = paginator.fetch()
        orders = result.data
    """

    def __init__(
        self,
        client: MWSClient,
        action: str,
        parameters: dict[str, Any] | None = None,
        parse_page: PageParser | None = None,
        reset_filters: FilterReset | None = None,
        token_action: str | None = None,
        throttle: str | ThrottleConfig = "order_list",
        auto_continue: bool = False,
        max_pages: int | None = None,
        echo: EchoCheck | None = None,
        token_throttle: str | ThrottleConfig | None = None,
    ) -> None:
        self.client = client
        self.action = action
        self.token_action = token_action or f"{action}ByNextToken"
        self.parameters = {k: str(v) for k, v in (parameters or {}).items()}
        self.parse_page = parse_page or _all_children
        self.reset_filters = reset_filters or clear_all
        self.throttle = throttle
        self.token_throttle = token_throttle or throttle
        self.max_pages = max_pages
        self.echo = echo
        self.state = PaginationState(auto_continue=auto_continue)
        self.phase = PaginationPhase.FIRST_PAGE

    def set_use_token(self, enabled: bool = True) -> None:
        """Whether to follow continuation tokens automatically."""
        self.state.auto_continue = enabled

    def has_token(self) -> bool:
        """True when the last page reported more results."""
        return self.state.has_more

    @property
    def next_token(self) -> str | None:
        return self.state.current_token

    @property
    def records(self) -> list[Any]:
        return self.state.records

    def fetch(self, context: CallContext | None = None) -> ExecutionResult:
        """
        Fetch the list from its first page.

        Previously accumulated records are discarded. With auto-continue on,
        continuation pages are fetched until the token runs out, ``max_pages``
        is reached or the context is cancelled.
        """
        self.state.records = []
        self.state.pages = 0
        self.state.truncated = False
        self.state.has_more = False
        self.state.current_token = None
        self.phase = PaginationPhase.FIRST_PAGE
        return self._run(context)

    def fetch_next(self, context: CallContext | None = None) -> ExecutionResult:
        """
        Continue the list from the stored token, appending to the records.

        Raises:
            MWSError: if there is no token to continue from
        """
        if not self.state.has_more or not self.state.current_token:
            raise MWSError(
                "No continuation token available",
                {"action": self.action},
            )
        self.state.truncated = False
        self.phase = PaginationPhase.CONTINUE
        return self._run(context)

    def prepare(self) -> tuple[str, dict[str, str]]:
        """Action and parameters for the next request in the current phase."""
        if self.phase is PaginationPhase.CONTINUE:
            params = dict(self.parameters)
            self.reset_filters(params)
            params.pop("NextToken", None)
            params["NextToken"] = self.state.current_token or ""
            return self.token_action, params

        params = dict(self.parameters)
        params.pop("NextToken", None)
        return self.action, params

    def _run(self, context: CallContext | None) -> ExecutionResult:
        context = context or CallContext(clock=self.client.clock)
        pages_this_run = 0

        while True:
            context.check()
            action, params = self.prepare()
            result = self.client.execute(
                action,
                params,
                throttle=self.token_throttle if action == self.token_action else self.throttle,
                parse=self.parse_page,
                context=context,
                echo=self.echo,
            )
            if not result.success:
                logger.warning(
                    "pagination_failed",
                    action=action,
                    pages=self.state.pages,
                    error=result.error.message if result.error else None,
                )
                result.pages = self.state.pages
                return result

            self.state.records.extend(result.data or [])
            self.state.pages += 1
            pages_this_run += 1
            self.state.current_token = result.next_token
            self.state.has_more = result.next_token is not None

            if not self.state.has_more:
                self.phase = PaginationPhase.DONE
                break
            if not self.state.auto_continue:
                break
            if self.max_pages is not None and pages_this_run >= self.max_pages:
                self.state.truncated = True
                logger.info(
                    "pagination_truncated",
                    reason="max_pages",
                    action=self.action,
                    pages=pages_this_run,
                )
                break

            self.phase = PaginationPhase.CONTINUE
            logger.info("fetching_next_page", action=self.token_action, page=self.state.pages + 1)

        logger.debug(
            "pagination_complete",
            action=self.action,
            total_items=len(self.state.records),
            pages=self.state.pages,
            has_more=self.state.has_more,
            truncated=self.state.truncated,
        )
        return self._result()

    def _result(self) -> ExecutionResult:
        from amazon_mws.execution.engine import ExecutionResult

        return ExecutionResult(
            success=True,
            action=self.action,
            data=list(self.state.records),
            next_token=self.state.current_token,
            count=len(self.state.records),
            pages=self.state.pages,
            truncated=self.state.truncated,
        )
