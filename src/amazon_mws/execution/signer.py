"""Signature Version 2 request signing.

The string to sign is::

    METHOD \\n host \\n encoded-path \\n canonical-query

where the canonical query lists every parameter sorted by key and renders each
value with RFC 3986 percent-encoding (``-_.~`` and alphanumerics unescaped,
space as ``%20``).
"""

from __future__ import annotations

import base64
import hashlib
import hmac
from collections.abc import Mapping

from botocore.utils import percent_encode

from amazon_mws.core.exceptions import UnsupportedAlgorithmError

SIGNATURE_VERSION = "2"

ALGORITHMS = {
    "HmacSHA1": hashlib.sha1,
    "HmacSHA256": hashlib.sha256,
}


def encode_path(path: str) -> str:
    """Percent-encode each segment of a URL path, defaulting to ``/``."""
    if not path:
        return "/"
    if not path.startswith("/"):
        path = "/" + path
    return "/".join(percent_encode(segment) for segment in path.split("/"))


def sorted_items(parameters: Mapping[str, str]) -> list[tuple[str, str]]:
    """Parameters in byte-wise key order."""
    return sorted(parameters.items(), key=lambda item: item[0].encode("utf-8"))


def encode_parameters(items: list[tuple[str, str]] | Mapping[str, str]) -> str:
    """Render ``key=value&...`` with percent-encoded values, keeping the given order."""
    if isinstance(items, Mapping):
        items = list(items.items())
    return "&".join(f"{key}={percent_encode(str(value))}" for key, value in items)


def canonical_query_string(parameters: Mapping[str, str]) -> str:
    """The sorted, encoded parameter string used for signing."""
    return encode_parameters(sorted_items(parameters))


def string_to_sign(
    parameters: Mapping[str, str],
    host: str,
    path: str = "/",
    method: str = "POST",
) -> str:
    return "\n".join(
        [
            method.upper(),
            host.lower(),
            encode_path(path),
            canonical_query_string(parameters),
        ]
    )


def sign(
    parameters: Mapping[str, str],
    secret_key: str,
    host: str,
    path: str = "/",
    method: str = "POST",
    algorithm: str = "HmacSHA256",
) -> str:
    """
    Compute the base64 HMAC signature of a parameter map.

    Any ``Signature`` entry already in the map is ignored.

    Raises:
        UnsupportedAlgorithmError: if algorithm is not HmacSHA1 or HmacSHA256
    """
    digestmod = ALGORITHMS.get(algorithm)
    if digestmod is None:
        raise UnsupportedAlgorithmError(algorithm)

    unsigned = {k: v for k, v in parameters.items() if k != "Signature"}
    data = string_to_sign(unsigned, host, path, method)
    digest = hmac.new(secret_key.encode("utf-8"), data.encode("utf-8"), digestmod).digest()
    return base64.b64encode(digest).decode("ascii")
