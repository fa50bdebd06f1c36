"""Pydantic models for parsed MWS response envelopes."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Optional

from pydantic import BaseModel, Field

from amazon_mws.core.exceptions import HTTPError
from amazon_mws.parser.responses import find_text


class ErrorEnvelope(BaseModel):
    """The ``ErrorResponse`` document returned with any non-200 status."""

    status: int = Field(..., description="HTTP status code of the response")
    error_type: Optional[str] = Field(None, description="Sender or Receiver")
    code: Optional[str] = Field(None, description="MWS error code, e.g. InvalidParameterValue")
    message: Optional[str] = Field(None, description="Human-readable message")
    request_id: Optional[str] = Field(None, description="RequestID echoed by the service")

    @classmethod
    def from_element(cls, status: int, root: ET.Element | None) -> "ErrorEnvelope":
        """Read the envelope fields verbatim; missing fields stay None."""
        error = root.find("Error") if root is not None else None
        if root is not None and root.tag == "Error":
            error = root
        return cls(
            status=status,
            error_type=find_text(error, "Type"),
            code=find_text(error, "Code"),
            message=find_text(error, "Message"),
            request_id=find_text(root, "RequestID") or find_text(root, "RequestId"),
        )

    def to_error(self, action: str | None = None) -> HTTPError:
        return HTTPError(
            status=self.status,
            code=self.code,
            message=self.message,
            error_type=self.error_type,
            request_id=self.request_id,
            action=action,
        )
