"""Custom exceptions for the MWS request engine."""

from __future__ import annotations

from typing import Any


class MWSError(Exception):
    """Base exception for the MWS client."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for JSON serialization."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            **self.details,
        }


class ConfigError(MWSError):
    """Raised when the configuration cannot be loaded or a store is unknown."""

    def __init__(self, message: str, path: str | None = None, store: str | None = None):
        details = {}
        if path:
            details["path"] = path
        if store:
            details["store"] = store
        super().__init__(message, details)


class MissingCredentialError(MWSError):
    """Raised when the secret key for the active store cannot be resolved."""

    def __init__(self, store: str | None = None, field: str = "secretKey"):
        details = {"field": field}
        if store:
            details["store"] = store
        super().__init__(f"{field} is missing for store '{store}'", details)


class UnsupportedAlgorithmError(MWSError):
    """Raised when a signature method other than HmacSHA1/HmacSHA256 is requested."""

    def __init__(self, algorithm: str):
        super().__init__(
            f"Non-supported signing method specified: {algorithm}",
            {"algorithm": algorithm},
        )


class TransportError(MWSError):
    """Raised (or returned) when a request could not be delivered."""

    def __init__(self, message: str, url: str | None = None, fixture: str | None = None):
        details = {}
        if url:
            details["url"] = url
        if fixture:
            details["fixture"] = fixture
        super().__init__(message, details)


class OverloadError(MWSError):
    """Raised when a request is still throttled after the configured attempts."""

    def __init__(self, action: str, attempts: int):
        super().__init__(
            f"Request '{action}' still throttled after {attempts} attempts",
            {"action": action, "attempts": attempts},
        )
        self.action = action
        self.attempts = attempts


class HTTPError(MWSError):
    """A non-success response, carrying the fields of the error envelope verbatim."""

    def __init__(
        self,
        status: int,
        code: str | None = None,
        message: str | None = None,
        error_type: str | None = None,
        request_id: str | None = None,
        action: str | None = None,
    ):
        details: dict[str, Any] = {"status": status}
        if code:
            details["code"] = code
        if error_type:
            details["type"] = error_type
        if request_id:
            details["request_id"] = request_id
        if action:
            details["action"] = action
        super().__init__(message or f"HTTP {status}", details)
        self.status = status
        self.code = code
        self.error_message = message
        self.error_type = error_type
        self.request_id = request_id


class ResponseFormatError(MWSError):
    """Raised when a response body is not the XML envelope that was expected."""

    def __init__(self, message: str, action: str | None = None):
        details = {}
        if action:
            details["action"] = action
        super().__init__(message, details)


class EchoMismatchError(MWSError):
    """The identifier echoed by the service disagrees with the one requested."""

    def __init__(self, field: str, expected: str, received: str | None):
        super().__init__(
            f"{field} mismatch! {expected} =/= {received}",
            {"field": field, "expected": expected, "received": received},
        )
        self.field = field
        self.expected = expected
        self.received = received


class OperationCancelledError(MWSError):
    """Raised when a call context is cancelled or its deadline passes."""

    def __init__(self, reason: str = "cancelled"):
        super().__init__(f"Operation aborted: {reason}", {"reason": reason})
        self.reason = reason
