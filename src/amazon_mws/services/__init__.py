"""Service plugins for the MWS client."""

from amazon_mws.services.base import (
    ListOperation,
    ListOperationSpec,
    ServicePlugin,
    ServiceRegistry,
    register_service,
)

# Import plugins to trigger registration
from amazon_mws.services.plugins import finances, orders, reports

__all__ = [
    "ListOperation",
    "ListOperationSpec",
    "ServicePlugin",
    "ServiceRegistry",
    "register_service",
]
