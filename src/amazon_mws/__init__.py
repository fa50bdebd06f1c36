"""Python client for the Amazon Marketplace Web Service (MWS) APIs."""

__version__ = "0.1.0"

from amazon_mws.config import ClientConfig, StoreConfig, get_config, reset_config, set_config
from amazon_mws.core.context import CallContext
from amazon_mws.core.exceptions import MWSError
from amazon_mws.core.logging import configure_logging
from amazon_mws.core.session import Credentials, StoreSession
from amazon_mws.execution.engine import ExecutionResult, MWSClient, create_client

__all__ = [
    "__version__",
    "CallContext",
    "ClientConfig",
    "Credentials",
    "ExecutionResult",
    "MWSClient",
    "MWSError",
    "StoreConfig",
    "StoreSession",
    "configure_logging",
    "create_client",
    "get_config",
    "reset_config",
    "set_config",
]
