"""Response parsing helpers for the MWS client."""

from amazon_mws.parser.responses import (
    element_to_dict,
    find_result,
    find_text,
    next_token,
    parse_xml,
    records,
)
from amazon_mws.parser.schemas import ErrorEnvelope

__all__ = [
    "ErrorEnvelope",
    "element_to_dict",
    "find_result",
    "find_text",
    "next_token",
    "parse_xml",
    "records",
]
