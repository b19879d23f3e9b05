"""
Header rewriting for the relay.
Both directions go through case-insensitive multi-value mappings
(httpx.Headers outbound, multidict.CIMultiDict inbound) so names like
`HOST` and `host` are treated as the same header.
"""
from typing import Iterable, Tuple

import httpx
from multidict import CIMultiDict

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "*",
}

PREFLIGHT_HEADERS = {
    **CORS_HEADERS,
    "Access-Control-Max-Age": "86400",
}

# Body framing is recomputed by the outbound client when there is no body to send
FRAMING_HEADERS = ("Content-Length", "Transfer-Encoding")

# aiohttp writes its own connection management and framing
RESPONSE_HOP_HEADERS = ("Connection", "Keep-Alive", "Transfer-Encoding")


def build_upstream_headers(inbound: "CIMultiDict[str]", *, with_body: bool = True) -> httpx.Headers:
    """Copy the caller's headers for the upstream request, minus Host."""
    headers = httpx.Headers(list(inbound.items()))
    dropped: Iterable[str] = ("Host",) if with_body else ("Host",) + FRAMING_HEADERS
    for name in dropped:
        if name in headers:
            del headers[name]
    return headers


def build_client_headers(upstream: httpx.Headers) -> "CIMultiDict[str]":
    """Copy the upstream response headers and overlay the CORS headers."""
    items: Iterable[Tuple[str, str]] = upstream.multi_items()
    headers: "CIMultiDict[str]" = CIMultiDict(items)
    for name in RESPONSE_HOP_HEADERS:
        headers.popall(name, None)
    for name, value in CORS_HEADERS.items():
        headers[name] = value
    return headers
