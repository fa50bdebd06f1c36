"""Request assembly: common parameters, timestamp, signature and form body."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable
from urllib.parse import urljoin, urlsplit

import structlog

from amazon_mws import __version__
from amazon_mws.config import ServiceSection
from amazon_mws.core.context import Clock, SystemClock
from amazon_mws.core.exceptions import MissingCredentialError
from amazon_mws.core.session import Credentials
from amazon_mws.execution.signer import SIGNATURE_VERSION, encode_parameters, sign

logger = structlog.get_logger()

# Timestamps are sent two minutes early to absorb clock skew
CLOCK_SKEW = timedelta(seconds=120)

USER_AGENT = f"amazon-mws/{__version__} (Language=Python)"
CONTENT_TYPE = "application/x-www-form-urlencoded; charset=utf-8"

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def mws_timestamp(
    value: datetime | int | float | str | None = None,
    clock: Clock | None = None,
    skew: timedelta = CLOCK_SKEW,
) -> str:
    """
    Format a point in time the way MWS expects it, shifted back by ``skew``.

    Args:
        value: datetime, epoch seconds or ISO-8601 string (now when omitted)
        clock: Clock used when value is omitted
        skew: Amount subtracted from the time

    Returns:
        UTC timestamp such as ``2024-01-31T10:00:00Z``
    """
    if value is None:
        moment = (clock or SystemClock()).now()
    elif isinstance(value, datetime):
        moment = value
    elif isinstance(value, (int, float)):
        moment = datetime.fromtimestamp(value, tz=timezone.utc)
    else:
        moment = datetime.fromisoformat(value.replace("Z", "+00:00"))

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return (moment.astimezone(timezone.utc) - skew).strftime(TIMESTAMP_FORMAT)


@dataclass
class RequestContext:
    """One logical API call, mutable until it is signed."""

    action: str
    parameters: dict[str, str] = field(default_factory=dict)
    signature_version: str = SIGNATURE_VERSION
    signature_method: str = "HmacSHA256"
    credentials: Credentials | None = field(default=None, repr=False)
    timestamp: str | None = None


@dataclass(frozen=True)
class PreparedRequest:
    """A signed request ready for a transport."""

    action: str
    url: str
    parameters: dict[str, str]
    body: str
    headers: dict[str, str]


class RequestBuilder:
    """Builds signed POST requests for one service section."""

    def __init__(
        self,
        credentials: Callable[[], Credentials],
        service_url: str,
        section: ServiceSection,
        clock: Clock | None = None,
        signature_method: str = "HmacSHA256",
    ) -> None:
        """
        Initialize the builder.

        Args:
            credentials: Callable resolving the active store's credentials
            service_url: Base URL such as https://mws.amazonservices.com/
            section: Service section supplying the URL path and API version
            clock: Clock used for timestamps
            signature_method: HmacSHA256 or HmacSHA1
        """
        self._credentials = credentials
        self.section = section
        self.clock = clock or SystemClock()
        self.signature_method = signature_method
        base = service_url if service_url.endswith("/") else service_url + "/"
        self.url = urljoin(base, section.path)
        parts = urlsplit(self.url)
        self.host = parts.netloc
        self.path = parts.path or "/"

    def new_context(self, action: str, parameters: dict[str, str] | None = None) -> RequestContext:
        """Start a request context with the given resource parameters."""
        return RequestContext(
            action=action,
            parameters={k: str(v) for k, v in (parameters or {}).items()},
            signature_method=self.signature_method,
        )

    def common_parameters(self, credentials: Credentials) -> dict[str, str]:
        params = {
            "SignatureVersion": SIGNATURE_VERSION,
            "SignatureMethod": self.signature_method,
            "Version": self.section.version,
        }
        if credentials.seller_id:
            params["SellerId"] = credentials.seller_id
        if credentials.access_key_id:
            params["AWSAccessKeyId"] = credentials.access_key_id
        if credentials.auth_token:
            params["MWSAuthToken"] = credentials.auth_token
        return params

    def build(self, context: RequestContext) -> PreparedRequest:
        """
        Timestamp and sign a request context.

        Raises:
            MissingCredentialError: if the secret key cannot be resolved
        """
        try:
            credentials = context.credentials or self._credentials()
        except MissingCredentialError:
            logger.error("signing_aborted", action=context.action, reason="secret_key_missing")
            raise
        if not credentials.secret_key:
            logger.error("signing_aborted", action=context.action, reason="secret_key_missing")
            raise MissingCredentialError()
        context.credentials = credentials

        params = self.common_parameters(credentials)
        params.update(context.parameters)
        params["SignatureVersion"] = context.signature_version
        params["SignatureMethod"] = context.signature_method
        params["Action"] = context.action
        params.pop("Signature", None)

        context.timestamp = mws_timestamp(clock=self.clock)
        params["Timestamp"] = context.timestamp
        params["Signature"] = sign(
            params,
            credentials.secret_key,
            self.host,
            self.path,
            method="POST",
            algorithm=context.signature_method,
        )
        context.parameters = params

        return PreparedRequest(
            action=context.action,
            url=self.url,
            parameters=params,
            body=encode_parameters(params),
            headers={"Content-Type": CONTENT_TYPE, "User-Agent": USER_AGENT},
        )
