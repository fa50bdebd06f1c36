"""Base plugin interface for MWS list operations."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Any, Callable, ClassVar

import structlog

from amazon_mws.core.context import CallContext
from amazon_mws.core.exceptions import MWSError
from amazon_mws.core.session import StoreSession
from amazon_mws.execution.engine import EchoCheck, ExecutionResult, MWSClient
from amazon_mws.execution.pagination import Paginator
from amazon_mws.parser.responses import records

logger = structlog.get_logger()


@dataclass(frozen=True)
class ListOperationSpec:
    """Declarative description of a paginated MWS list action."""

    name: str
    description: str
    action: str
    list_path: str  # Container under {Action}Result; "" for the result itself
    record_tag: str
    throttle: str
    token_throttle: str | None = None
    token_action: str | None = None
    required_params: tuple[str, ...] = ()
    # Parameters dropped before a continuation request; a trailing "." matches
    # every numbered member, e.g. "OrderStatus.Status." -> OrderStatus.Status.1
    filter_keys: tuple[str, ...] = ()
    echo_param: str | None = None  # Request parameter the result must echo back
    # Filled from the active store's marketplace id when no member is given
    marketplace_param: str | None = None
    parse: Callable[[ET.Element], list[Any]] | None = None


class ListOperation:
    """Turns a ListOperationSpec into paginated requests on a client."""

    def __init__(self, client: MWSClient, spec: ListOperationSpec):
        self.client = client
        self.spec = spec

    def parse_page(self, result: ET.Element) -> list[Any]:
        """Map every record element of a page to a dict."""
        if self.spec.parse is not None:
            return self.spec.parse(result)
        return records(result, self.spec.list_path, self.spec.record_tag)

    def reset_filters(self, parameters: dict[str, str]) -> None:
        """Remove the declared filter parameters in place."""
        for key in list(parameters):
            if self.is_filter(key):
                del parameters[key]

    def is_filter(self, key: str) -> bool:
        for filter_key in self.spec.filter_keys:
            if key == filter_key:
                return True
            if filter_key.endswith(".") and key.startswith(filter_key):
                return True
        return False

    def missing_params(self, parameters: dict[str, Any]) -> list[str]:
        return [p for p in self.spec.required_params if p not in parameters]

    def fill_marketplace(self, parameters: dict[str, Any]) -> None:
        param = self.spec.marketplace_param
        if not param:
            return
        prefix = param.rstrip("0123456789")
        if any(key.startswith(prefix) for key in parameters):
            return
        marketplace_id = self.client.session.store.marketplace_id
        if marketplace_id:
            parameters[param] = marketplace_id

    def paginator(
        self,
        parameters: dict[str, Any] | None = None,
        auto_continue: bool = True,
        max_pages: int | None = -1,
    ) -> Paginator:
        parameters = dict(parameters or {})
        self.fill_marketplace(parameters)
        echo = None
        if self.spec.echo_param and self.spec.echo_param in parameters:
            echo = EchoCheck(self.spec.echo_param, str(parameters[self.spec.echo_param]))

        return self.client.paginator(
            self.spec.action,
            parameters,
            parse_page=self.parse_page,
            reset_filters=self.reset_filters,
            token_action=self.spec.token_action,
            throttle=self.spec.throttle,
            token_throttle=self.spec.token_throttle,
            auto_continue=auto_continue,
            max_pages=max_pages,
            echo=echo,
        )


class ServicePlugin:
    """Base class for MWS section plugins.

    Each plugin declares the list operations of one service section and
    runs them through an ``MWSClient`` bound to that section.

    Example:
        @register_service
        class SellersService(ServicePlugin):
            section = "sellers"
            display_name = "MWS Sellers"
            operations = (
                ListOperationSpec(
                    name="list_marketplace_participations",
                    description="List marketplaces the seller participates in",
                    action="ListMarketplaceParticipations",
                    list_path="ListMarketplaces",
                    record_tag="Marketplace",
                    throttle="sellers",
                ),
            )
    """

    section: ClassVar[str] = ""
    display_name: ClassVar[str] = ""
    operations: ClassVar[tuple[ListOperationSpec, ...]] = ()

    def __init__(self, session: StoreSession, **client_options: Any):
        """Initialize the plugin with a store session and MWSClient options."""
        self._session = session
        self._client_options = client_options
        self._client: MWSClient | None = None

    @property
    def service_name(self) -> str:
        return self.section

    @property
    def client(self) -> MWSClient:
        """Get or create the client for this plugin's section."""
        if self._client is None:
            self._client = MWSClient(
                self._session.config,
                section=self.service_name,
                session=self._session,
                **self._client_options,
            )
        return self._client

    def get_operations(self) -> list[ListOperationSpec]:
        """Return list of supported operations for this service."""
        return list(self.operations)

    def get_operation(self, name: str) -> ListOperationSpec | None:
        """Get a specific operation by name."""
        for op in self.get_operations():
            if op.name == name:
                return op
        return None

    def operation(self, name: str) -> ListOperation:
        """
        Bind an operation to this plugin's client.

        Raises:
            MWSError: if the operation is not supported
        """
        op_spec = self.get_operation(name)
        if op_spec is None:
            raise MWSError(
                f"Operation '{name}' not supported for {self.service_name}",
                {"service": self.service_name, "operation": name},
            )
        return ListOperation(self.client, op_spec)

    def execute(
        self,
        operation: str,
        parameters: dict[str, Any] | None = None,
        auto_continue: bool = True,
        max_pages: int | None = -1,
        context: CallContext | None = None,
    ) -> ExecutionResult:
        """Execute a list operation on this service.

        Args:
            operation: The operation name (e.g., 'list_orders')
            parameters: MWS request parameters
            auto_continue: Follow NextToken until the list is exhausted
            max_pages: Page cap (-1 = configured default, None = unbounded)
            context: Cancellation/deadline context

        Returns:
            ExecutionResult with the accumulated records or the error
        """
        parameters = parameters or {}
        op_spec = self.get_operation(operation)

        if not op_spec:
            return ExecutionResult(
                success=False,
                action=operation,
                error=MWSError(f"Operation '{operation}' not supported for {self.service_name}"),
            )

        list_operation = ListOperation(self.client, op_spec)
        missing = list_operation.missing_params(parameters)
        if missing:
            return ExecutionResult(
                success=False,
                action=op_spec.action,
                error=MWSError(
                    f"Missing required parameters: {', '.join(missing)}",
                    {"missing": missing},
                ),
            )

        result = list_operation.paginator(parameters, auto_continue, max_pages).fetch(context)
        if result.success:
            logger.info(
                "operation_executed",
                service=self.service_name,
                operation=operation,
                count=result.count,
                pages=result.pages,
            )
        else:
            logger.error(
                "operation_failed",
                service=self.service_name,
                operation=operation,
                error=result.error.message if result.error else None,
            )
        return result

    def close(self) -> None:
        if self._client is not None:
            self._client.close()


class ServiceRegistry:
    """Registry for service plugins."""

    _services: dict[str, type[ServicePlugin]] = {}

    @classmethod
    def register(cls, service_class: type[ServicePlugin]) -> type[ServicePlugin]:
        """Register a service plugin under its section name.

        Can be used as a decorator:
            @ServiceRegistry.register
            class OrdersService(ServicePlugin):
                ...
        """
        name = service_class.section
        if not name:
            logger.warning("failed_to_register_service", plugin=service_class.__name__, error="no section")
            return service_class
        cls._services[name] = service_class
        logger.debug("service_registered", service=name)
        return service_class

    @classmethod
    def get_service(
        cls,
        name: str,
        session: StoreSession,
        **client_options: Any,
    ) -> ServicePlugin | None:
        """Get a plugin instance by section name."""
        service_class = cls._services.get(name)
        if service_class is None:
            return None
        return service_class(session, **client_options)

    @classmethod
    def list_services(cls) -> list[str]:
        """List all registered services."""
        return list(cls._services.keys())

    @classmethod
    def find_operation(cls, name: str) -> tuple[str, ListOperationSpec] | None:
        """Find which service declares an operation."""
        for service_name, service_class in cls._services.items():
            for op in service_class.operations:
                if op.name == name:
                    return service_name, op
        return None


def register_service(cls: type[ServicePlugin]) -> type[ServicePlugin]:
    """Decorator to register a service plugin."""
    return ServiceRegistry.register(cls)
