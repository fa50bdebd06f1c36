"""Transports deliver a prepared request and return the raw response.

Two implementations share the ``Transport`` protocol:

- ``LiveTransport`` posts to the service over HTTP with httpx.
- ``ReplayTransport`` replays fixture files and canned status codes from a
  ``MockQueue`` and never touches the network.

Neither retries; throttling is handled by ``ThrottleRetrier``.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from http import HTTPStatus
from pathlib import Path
from typing import Protocol, Sequence, Union

import httpx
import structlog

from amazon_mws.core.exceptions import MWSError, TransportError
from amazon_mws.execution.request import PreparedRequest
from amazon_mws.parser.responses import parse_xml

logger = structlog.get_logger()

FixtureRef = Union[str, Path, int]

MOCK_NAMESPACE = "https://mws.amazonservices.com/"

# Canned error envelopes for numeric mock entries: status -> (code, message)
CANNED_ERRORS: dict[int, tuple[str, str]] = {
    400: ("InvalidParameterValue", "Invalid parameter value."),
    404: ("ItemNotFound", "Resource not found."),
    503: ("RequestThrottled", "Request is throttled."),
}


@dataclass
class Response:
    """Raw outcome of one HTTP exchange (or its replayed equivalent)."""

    status: int
    body: str = ""
    reason: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    error: MWSError | None = None
    _tree: ET.Element | None = field(default=None, repr=False)

    @property
    def ok(self) -> bool:
        """True for a 2xx/3xx status with a body and no transport error."""
        return self.error is None and 200 <= self.status < 400 and bool(self.body)

    @property
    def tree(self) -> ET.Element:
        """The body parsed as XML with namespaces stripped."""
        if self._tree is None:
            self._tree = parse_xml(self.body)
        return self._tree

    @classmethod
    def failure(cls, error: MWSError) -> "Response":
        return cls(status=0, reason="Transport Failure", error=error)


class Transport(Protocol):
    """Sends a prepared request; never retries."""

    def send(self, request: PreparedRequest) -> Response: ...

    def close(self) -> None: ...


class LiveTransport:
    """HTTP transport backed by an ``httpx.Client``."""

    def __init__(
        self,
        timeout: float = 30.0,
        verify: bool = True,
        client: httpx.Client | None = None,
    ) -> None:
        self._client = client or httpx.Client(timeout=timeout, verify=verify)

    def send(self, request: PreparedRequest) -> Response:
        logger.info("making_request", action=request.action, url=request.url)
        try:
            http_response = self._client.post(
                request.url,
                content=request.body.encode("utf-8"),
                headers=request.headers,
            )
        except httpx.HTTPError as e:
            error = TransportError(f"Request to {request.url} failed: {e}", url=request.url)
            logger.error("request_failed", action=request.action, url=request.url, error=str(e))
            return Response.failure(error)

        response = Response(
            status=http_response.status_code,
            body=http_response.text,
            reason=http_response.reason_phrase,
            headers=dict(http_response.headers),
        )
        logger.debug("response_received", action=request.action, status=response.status)
        return response

    def close(self) -> None:
        self._client.close()


class MockQueue:
    """Ordered fixture references with a cursor that wraps to zero."""

    def __init__(self, entries: FixtureRef | Sequence[FixtureRef] | None = None) -> None:
        self.entries: list[FixtureRef] = []
        self.index = 0
        if entries is not None:
            self.set(entries)

    def set(self, entries: FixtureRef | Sequence[FixtureRef]) -> None:
        """Replace the queue contents and rewind the cursor."""
        if isinstance(entries, (str, Path, int)):
            self.entries = [entries]
            logger.info("mock_file_set", fixture=str(entries))
        else:
            self.entries = list(entries)
            logger.info("mock_files_set", count=len(self.entries))
        self.index = 0

    def reset(self) -> None:
        self.index = 0
        logger.info("mock_queue_reset", index=0)

    def __len__(self) -> int:
        return len(self.entries)

    def next(self) -> FixtureRef | None:
        """Pop the next entry, wrapping to the start after the last one."""
        if not self.entries:
            logger.warning("mock_queue_empty")
            return None
        if self.index >= len(self.entries):
            logger.info("mock_queue_exhausted", size=len(self.entries))
            self.reset()
        entry = self.entries[self.index]
        self.index += 1
        return entry


def canned_response(status: int, action: str = "Mock") -> Response:
    """
    Synthesize a response for a numeric mock entry.

    200 yields a minimal success envelope for ``action``; other codes yield the
    standard ``Sender`` error envelope.
    """
    try:
        reason = HTTPStatus(status).phrase
    except ValueError:
        reason = "Unknown"

    if status == 200:
        body = (
            f'<?xml version="1.0"?><{action}Response xmlns="{MOCK_NAMESPACE}">'
            f'<{action}Result status="Success"></{action}Result>'
            f"<ResponseMetadata><RequestId>mock-request</RequestId></ResponseMetadata>"
            f"</{action}Response>"
        )
    else:
        code, message = CANNED_ERRORS.get(status, (reason.replace(" ", ""), f"{reason}."))
        body = (
            f'<?xml version="1.0"?><ErrorResponse xmlns="{MOCK_NAMESPACE}">'
            f"<Error><Type>Sender</Type><Code>{code}</Code><Message>{message}</Message></Error>"
            f"<RequestID>mock-request</RequestID></ErrorResponse>"
        )
    return Response(status=status, body=body, reason=reason)


class ReplayTransport:
    """Deterministic fixture-replay transport ("mock mode")."""

    def __init__(
        self,
        entries: FixtureRef | Sequence[FixtureRef] | None = None,
        mock_dir: str | Path | None = None,
    ) -> None:
        self.queue = MockQueue(entries)
        self.mock_dir = Path(mock_dir) if mock_dir else None
        logger.info("mock_mode_enabled", mock_dir=str(self.mock_dir) if self.mock_dir else None)

    def resolve(self, ref: str | Path) -> Path | None:
        """Locate a fixture file, relative to the mock directory unless absolute."""
        path = Path(ref)
        candidates = [path] if path.is_absolute() else []
        if not path.is_absolute():
            if self.mock_dir is not None:
                candidates.append(self.mock_dir / path)
            candidates.append(path)
        for candidate in candidates:
            if candidate.is_file():
                return candidate
        return None

    def fetch_fixture(self, load: bool = True) -> ET.Element | str | None:
        """
        Return the next file fixture as a parsed tree, or as text with load=False.

        Numeric entries can only be replayed through ``send``. Returns None
        (after logging) on any failure.
        """
        ref = self.queue.next()
        if ref is None or isinstance(ref, int):
            if isinstance(ref, int):
                logger.warning("mock_entry_not_a_file", entry=ref)
            return None
        text = self._read(ref)
        if text is None or not load:
            return text
        try:
            return parse_xml(text)
        except MWSError as e:
            logger.warning("mock_file_unparseable", fixture=str(ref), error=e.message)
            return None

    def send(self, request: PreparedRequest) -> Response:
        ref = self.queue.next()
        if ref is None:
            return Response.failure(TransportError("No mock fixtures available"))

        if isinstance(ref, int):
            logger.info("mock_response_fetched", action=request.action, status=ref)
            return canned_response(ref, request.action)

        text = self._read(ref)
        if text is None:
            return Response.failure(TransportError(f"Mock file unavailable: {ref}", fixture=str(ref)))
        return Response(status=200, body=text, reason="OK")

    def _read(self, ref: str | Path) -> str | None:
        path = self.resolve(ref)
        if path is None:
            logger.warning("mock_file_not_found", fixture=str(ref))
            return None
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("mock_file_unreadable", fixture=str(path), error=str(e))
            return None
        logger.info("mock_file_fetched", fixture=str(path))
        return text

    def close(self) -> None:
        pass
