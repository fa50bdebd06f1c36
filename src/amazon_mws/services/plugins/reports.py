"""Reports service plugin (GetReportList, GetReportRequestList)."""

from __future__ import annotations

from amazon_mws.services.base import ListOperationSpec, ServicePlugin, register_service


@register_service
class ReportsService(ServicePlugin):
    """MWS Reports section plugin."""

    section = "reports"
    display_name = "MWS Reports"
    operations = (
        ListOperationSpec(
            name="get_report_list",
            description="List reports generated in the last 90 days",
            action="GetReportList",
            list_path="",
            record_tag="ReportInfo",
            throttle="report_list",
            token_throttle="report_token",
            filter_keys=(
                "ReportRequestIdList.Id.",
                "ReportTypeList.Type.",
                "MaxCount",
                "Acknowledged",
                "AvailableFromDate",
                "AvailableToDate",
            ),
        ),
        ListOperationSpec(
            name="get_report_request_list",
            description="List report requests and their processing status",
            action="GetReportRequestList",
            list_path="",
            record_tag="ReportRequestInfo",
            throttle="report_request_list",
            token_throttle="report_token",
            filter_keys=(
                "ReportRequestIdList.Id.",
                "ReportTypeList.Type.",
                "ReportProcessingStatusList.Status.",
                "MaxCount",
                "RequestedFromDate",
                "RequestedToDate",
            ),
        ),
    )
