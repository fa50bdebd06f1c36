"""Error handling for MWS responses."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import structlog

from amazon_mws.core.exceptions import HTTPError, MWSError, ResponseFormatError
from amazon_mws.execution.transport import Response
from amazon_mws.parser.schemas import ErrorEnvelope

logger = structlog.get_logger()


@dataclass
class ErrorInfo:
    """Information about an error for recovery suggestions."""

    category: str
    suggestion: str
    recoverable: bool
    retry_after: int | None = None


# Common MWS error mappings
MWS_ERROR_MAPPINGS: dict[str, ErrorInfo] = {
    # Authentication / Authorization
    "AccessDenied": ErrorInfo(
        category="auth",
        suggestion="The seller account is not authorized for this operation.",
        recoverable=False,
    ),
    "InvalidAccessKeyId": ErrorInfo(
        category="auth",
        suggestion="The access key id is not recognized. Check the store configuration.",
        recoverable=False,
    ),
    "SignatureDoesNotMatch": ErrorInfo(
        category="auth",
        suggestion="Request signature doesn't match. Check the secret key and clock sync.",
        recoverable=False,
    ),
    "RequestExpired": ErrorInfo(
        category="auth",
        suggestion="The request timestamp is too old. Check the system clock.",
        recoverable=True,
    ),
    "InvalidAddress": ErrorInfo(
        category="auth",
        suggestion="The service URL or section path is wrong for this action.",
        recoverable=False,
    ),
    # Validation errors
    "InvalidParameterValue": ErrorInfo(
        category="validation",
        suggestion="One or more parameters have invalid values.",
        recoverable=False,
    ),
    "InvalidParameter": ErrorInfo(
        category="validation",
        suggestion="One or more parameters have invalid values.",
        recoverable=False,
    ),
    "MissingParameter": ErrorInfo(
        category="validation",
        suggestion="A required parameter is missing.",
        recoverable=False,
    ),
    "MissingParameterValue": ErrorInfo(
        category="validation",
        suggestion="A required parameter has no value.",
        recoverable=False,
    ),
    "InvalidNextToken": ErrorInfo(
        category="validation",
        suggestion="The NextToken is expired or invalid. Restart the list from the first page.",
        recoverable=False,
    ),
    # Resource errors
    "ItemNotFound": ErrorInfo(
        category="resource",
        suggestion="The resource doesn't exist. Verify the identifier is correct.",
        recoverable=False,
    ),
    # Rate limiting
    "RequestThrottled": ErrorInfo(
        category="rate_limit",
        suggestion="Request was throttled. Wait for the throttle group to restore and retry.",
        recoverable=True,
        retry_after=60,
    ),
    "QuotaExceeded": ErrorInfo(
        category="rate_limit",
        suggestion="Hourly request quota exceeded. Wait for the quota to restore.",
        recoverable=True,
        retry_after=3600,
    ),
    # Service availability
    "InternalError": ErrorInfo(
        category="service",
        suggestion="MWS internal error. Retry later.",
        recoverable=True,
        retry_after=30,
    ),
    "ServiceUnavailable": ErrorInfo(
        category="service",
        suggestion="MWS is temporarily unavailable. Retry later.",
        recoverable=True,
        retry_after=30,
    ),
}


class ErrorHandler:
    """Turns failed responses into structured errors and logs them."""

    @classmethod
    def check_response(cls, response: Response, action: str | None = None) -> MWSError | None:
        """
        Return the error a response represents, or None for a 2xx/3xx with a body.

        Transport failures come back as their TransportError; other statuses
        are parsed into an HTTPError from the error envelope.
        """
        if response.error is not None:
            logger.error(
                "request_failed",
                action=action,
                error=response.error.message,
                kind=response.error.__class__.__name__,
            )
            return response.error

        if 200 <= response.status < 400:
            if not response.body:
                error = ResponseFormatError("Empty response body", action=action)
                logger.error("unrecognized_response", action=action, status=response.status)
                return error
            return None

        error = cls.parse_error(response, action)
        logger.error(
            "bad_response",
            action=action,
            status=error.status,
            code=error.code,
            message=error.error_message,
            request_id=error.request_id,
        )
        return error

    @classmethod
    def parse_error(cls, response: Response, action: str | None = None) -> HTTPError:
        """Build an HTTPError from a response's error envelope, fields verbatim."""
        root = None
        if response.body:
            try:
                root = response.tree
            except ResponseFormatError:
                root = None
        envelope = ErrorEnvelope.from_element(response.status, root)
        if envelope.message is None and root is None:
            envelope.message = response.reason or None
        return envelope.to_error(action)

    @classmethod
    def format_error_response(cls, error: MWSError) -> dict[str, Any]:
        """Format an error for JSON response."""
        response: dict[str, Any] = {
            "status": "error",
            "message": error.message,
        }

        if error.details:
            response.update(error.details)

        code = error.details.get("code")
        info = MWS_ERROR_MAPPINGS.get(code) if code else None
        if info:
            response["category"] = info.category
            response["suggestion"] = info.suggestion
            if info.recoverable:
                response["recoverable"] = True
                if info.retry_after:
                    response["retry_after"] = info.retry_after

        return response

    @classmethod
    def should_retry(cls, error_code: str) -> bool:
        """Check if an error should be retried."""
        error_info = MWS_ERROR_MAPPINGS.get(error_code)
        return error_info.recoverable if error_info else False

    @classmethod
    def get_retry_delay(cls, error_code: str) -> int:
        """Get the recommended retry delay for an error."""
        error_info = MWS_ERROR_MAPPINGS.get(error_code)
        return error_info.retry_after if error_info and error_info.retry_after else 5
