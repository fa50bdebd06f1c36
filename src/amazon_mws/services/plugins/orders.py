"""Orders service plugin (ListOrders, ListOrderItems)."""

from __future__ import annotations

from amazon_mws.services.base import ListOperationSpec, ServicePlugin, register_service

ORDER_FILTERS = (
    "CreatedAfter",
    "CreatedBefore",
    "LastUpdatedAfter",
    "LastUpdatedBefore",
    "OrderStatus.Status.",
    "MarketplaceId.Id.",
    "FulfillmentChannel.Channel.",
    "PaymentMethod.",
    "BuyerEmail",
    "SellerOrderId",
    "MaxResultsPerPage",
    "TFMShipmentStatus.Status.",
)


@register_service
class OrdersService(ServicePlugin):
    """MWS Orders section plugin."""

    section = "orders"
    display_name = "MWS Orders"
    operations = (
        ListOperationSpec(
            name="list_orders",
            description="List orders created or updated in a time window",
            action="ListOrders",
            list_path="Orders",
            record_tag="Order",
            throttle="order_list",
            filter_keys=ORDER_FILTERS,
            marketplace_param="MarketplaceId.Id.1",
        ),
        ListOperationSpec(
            name="list_order_items",
            description="List the items of one order",
            action="ListOrderItems",
            list_path="OrderItems",
            record_tag="OrderItem",
            throttle="item",
            required_params=("AmazonOrderId",),
            filter_keys=("AmazonOrderId",),
            echo_param="AmazonOrderId",
        ),
    )
