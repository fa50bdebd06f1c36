"""Finances service plugin (ListFinancialEvents, ListFinancialEventGroups)."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Any

from amazon_mws.parser.responses import element_to_dict
from amazon_mws.services.base import ListOperationSpec, ServicePlugin, register_service


def _event_type(list_tag: str) -> str:
    for suffix in ("EventList", "List"):
        if list_tag.endswith(suffix):
            return list_tag[: -len(suffix)]
    return list_tag


def parse_financial_events(result: ET.Element) -> list[dict[str, Any]]:
    """
    Flatten every ``*EventList`` under FinancialEvents into one record list.

    Each record gets an ``EventType`` key named after its list, e.g. a child
    of ``RefundEventList`` has ``EventType == "Refund"``.
    """
    container = result.find("FinancialEvents")
    if container is None:
        return []
    events = []
    for event_list in container:
        event_type = _event_type(event_list.tag)
        for element in event_list:
            value = element_to_dict(element)
            record = value if isinstance(value, dict) else {"#text": value}
            record["EventType"] = event_type
            events.append(record)
    return events


@register_service
class FinancesService(ServicePlugin):
    """MWS Finances section plugin."""

    section = "finances"
    display_name = "MWS Finances"
    operations = (
        ListOperationSpec(
            name="list_financial_events",
            description="List financial events for an order, a group or a time window",
            action="ListFinancialEvents",
            list_path="FinancialEvents",
            record_tag="",
            throttle="finance",
            filter_keys=(
                "MaxResultsPerPage",
                "AmazonOrderId",
                "FinancialEventGroupId",
                "PostedAfter",
                "PostedBefore",
            ),
            parse=parse_financial_events,
        ),
        ListOperationSpec(
            name="list_financial_event_groups",
            description="List financial event groups opened in a time window",
            action="ListFinancialEventGroups",
            list_path="FinancialEventGroupList",
            record_tag="FinancialEventGroup",
            throttle="finance",
            required_params=("FinancialEventGroupStartedAfter",),
            filter_keys=(
                "MaxResultsPerPage",
                "FinancialEventGroupStartedAfter",
                "FinancialEventGroupStartedBefore",
            ),
        ),
    )
