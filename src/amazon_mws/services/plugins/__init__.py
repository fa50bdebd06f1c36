"""Service plugin implementations."""

from amazon_mws.services.plugins.finances import FinancesService
from amazon_mws.services.plugins.orders import OrdersService
from amazon_mws.services.plugins.reports import ReportsService

__all__ = [
    "FinancesService",
    "OrdersService",
    "ReportsService",
]
