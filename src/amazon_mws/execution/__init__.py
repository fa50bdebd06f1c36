"""Request engine for the MWS client."""

from amazon_mws.execution.engine import EchoCheck, ExecutionResult, MWSClient, create_client
from amazon_mws.execution.errors import ErrorHandler
from amazon_mws.execution.pagination import Paginator, PaginationState
from amazon_mws.execution.request import PreparedRequest, RequestBuilder, mws_timestamp
from amazon_mws.execution.signer import sign
from amazon_mws.execution.throttle import ThrottleRetrier
from amazon_mws.execution.transport import LiveTransport, MockQueue, ReplayTransport, Response

__all__ = [
    "EchoCheck",
    "ExecutionResult",
    "MWSClient",
    "create_client",
    "ErrorHandler",
    "Paginator",
    "PaginationState",
    "PreparedRequest",
    "RequestBuilder",
    "mws_timestamp",
    "sign",
    "ThrottleRetrier",
    "LiveTransport",
    "MockQueue",
    "ReplayTransport",
    "Response",
]
