"""Core modules for the MWS client."""

from amazon_mws.core.context import CallContext, Clock, SystemClock
from amazon_mws.core.exceptions import (
    ConfigError,
    EchoMismatchError,
    HTTPError,
    MissingCredentialError,
    MWSError,
    OperationCancelledError,
    OverloadError,
    ResponseFormatError,
    TransportError,
    UnsupportedAlgorithmError,
)

__all__ = [
    # Context
    "CallContext",
    "Clock",
    "SystemClock",
    # Exceptions
    "ConfigError",
    "EchoMismatchError",
    "HTTPError",
    "MissingCredentialError",
    "MWSError",
    "OperationCancelledError",
    "OverloadError",
    "ResponseFormatError",
    "TransportError",
    "UnsupportedAlgorithmError",
]
