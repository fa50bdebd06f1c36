"""XML helpers shared by the request engine and resource parsers.

MWS responses are namespaced (``xmlns="https://mws.amazonservices.com/..."``).
Namespaces are stripped on parse so callers can use plain tag names.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Any

from amazon_mws.core.exceptions import ResponseFormatError

# Elements whose value "false" means no further pages exist despite a token
_NO_MORE_FLAGS = ("HasNext", "MoreResultsAvailable")


def _strip_ns(tag: str) -> str:
    """Remove namespace URI prefix: ``{http://...}Name`` -> ``Name``."""
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag


def parse_xml(text: str | bytes) -> ET.Element:
    """
    Parse an XML document and strip namespaces from every tag.

    Raises:
        ResponseFormatError: if the text is not well-formed XML
    """
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise ResponseFormatError(f"Response is not well-formed XML: {e}") from None
    for element in root.iter():
        element.tag = _strip_ns(element.tag)
    return root


def find_result(root: ET.Element, action: str) -> ET.Element | None:
    """
    Locate the ``{Action}Result`` element of a success envelope.

    The root itself is returned when it already is the result element.
    """
    tag = f"{action}Result"
    if root.tag == tag:
        return root
    return root.find(tag)


def find_text(element: ET.Element | None, path: str, default: str | None = None) -> str | None:
    """Text of the first element at ``path``, stripped, or ``default``."""
    if element is None:
        return default
    found = element.find(path)
    if found is None or found.text is None:
        return default
    return found.text.strip()


def next_token(result: ET.Element | None) -> str | None:
    """
    Continuation token of a result element, or None when the list is complete.

    A token is ignored when ``HasNext`` or ``MoreResultsAvailable`` says ``false``.
    """
    token = find_text(result, "NextToken")
    if not token:
        return None
    for flag in _NO_MORE_FLAGS:
        if (find_text(result, flag) or "").lower() == "false":
            return None
    return token


def element_to_dict(element: ET.Element) -> dict[str, Any] | str | None:
    """
    Convert an element into plain Python data.

    Text-only leaves become strings, empty leaves None. Repeated child tags
    become lists. Attributes are kept under ``@name`` keys.
    """
    children = list(element)
    if not children and not element.attrib:
        text = (element.text or "").strip()
        return text or None

    result: dict[str, Any] = {f"@{k}": v for k, v in element.attrib.items()}
    for child in children:
        value = element_to_dict(child)
        if child.tag in result:
            existing = result[child.tag]
            if not isinstance(existing, list):
                result[child.tag] = [existing]
            result[child.tag].append(value)
        else:
            result[child.tag] = value

    text = (element.text or "").strip()
    if text:
        result["#text"] = text
    return result


def records(result: ET.Element | None, list_path: str, record_tag: str) -> list[dict[str, Any]]:
    """All ``record_tag`` elements under ``list_path`` of a result, as dicts."""
    if result is None:
        return []
    container = result.find(list_path) if list_path else result
    if container is None:
        return []
    out = []
    for element in container.findall(record_tag):
        value = element_to_dict(element)
        out.append(value if isinstance(value, dict) else {"#text": value})
    return out
