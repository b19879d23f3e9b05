"""
CORS Relay - request handler.
Answers CORS preflights and the landing page locally and streams every
other request through to the configured upstream.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

import httpx
from aiohttp import web

from cors_relay.config import Settings
from cors_relay.headers import (
    CORS_HEADERS,
    PREFLIGHT_HEADERS,
    build_client_headers,
    build_upstream_headers,
)

logger = logging.getLogger(__name__)
# Request lines have their own logger; its level follows log_requests, not log_level
request_logger = logging.getLogger("cors_relay.requests")

LANDING_PATHS = ("/", "/index.html")
BODYLESS_METHODS = ("GET", "HEAD")

LANDING_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <title>CORS Relay</title>
</head>
<body>
  <h1>CORS Relay is Running!</h1>
  <p>This proxy forwards requests to its configured upstream API.</p>
</body>
</html>
"""


def build_target_url(base: str, raw_path: str, raw_query: str) -> str:
    """Join the upstream base with the caller's still-encoded path and query."""
    target = f"{base}{raw_path}"
    if raw_query:
        target = f"{target}?{raw_query}"
    return target


def preflight_response() -> web.Response:
    return web.Response(status=204, headers=PREFLIGHT_HEADERS)


def landing_response() -> web.Response:
    return web.Response(
        status=200,
        body=LANDING_PAGE.encode("utf-8"),
        headers={"Content-Type": "text/html; charset=utf-8"},
    )


def error_response(exc: BaseException) -> web.Response:
    message = str(exc) or "Unknown error"
    return web.Response(
        status=500,
        body=f"Proxy Error: {message}".encode("utf-8"),
        headers={
            "Content-Type": "text/plain",
            "Access-Control-Allow-Origin": CORS_HEADERS["Access-Control-Allow-Origin"],
        },
    )


class ForwardingHandler:
    """Routes one inbound request to a local answer or the upstream."""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self.transport = transport

    async def handle(self, request: web.Request) -> web.StreamResponse:
        if request.method == "OPTIONS":
            return preflight_response()
        if request.path in LANDING_PATHS:
            return landing_response()
        return await self.forward(request)

    async def forward(self, request: web.Request) -> web.StreamResponse:
        target = build_target_url(
            self.settings.upstream_base_url,
            request.rel_url.raw_path,
            request.rel_url.raw_query_string,
        )
        if self.settings.log_requests:
            timestamp = datetime.now(timezone.utc).isoformat()
            request_logger.info(f"[{timestamp}] {request.method} {request.path} -> {target}")

        client = httpx.AsyncClient(
            transport=self.transport,
            timeout=self.settings.upstream_timeout,
            follow_redirects=True,
        )
        # No Accept-Encoding, User-Agent etc. beyond what the caller sent
        client.headers.clear()
        try:
            try:
                outbound = self._build_request(client, request, target)
                upstream = await client.send(outbound, stream=True)
            except Exception as e:
                logger.error(f"[ERROR] Failed to fetch {target}: {e!r}")
                return error_response(e)

            try:
                return await self._relay(request, upstream, target)
            finally:
                await upstream.aclose()
        finally:
            await client.aclose()

    def _build_request(self, client: httpx.AsyncClient, request: web.Request, target: str) -> httpx.Request:
        with_body = request.method not in BODYLESS_METHODS and request.body_exists
        headers = build_upstream_headers(request.headers, with_body=with_body)
        content = request.content.iter_chunked(self.settings.chunk_size) if with_body else None
        return client.build_request(request.method, target, headers=headers, content=content)

    async def _relay(self, request: web.Request, upstream: httpx.Response, target: str) -> web.StreamResponse:
        response = web.StreamResponse(
            status=upstream.status_code,
            reason=upstream.reason_phrase or None,
            headers=build_client_headers(upstream.headers),
        )
        try:
            await response.prepare(request)
            async for chunk in upstream.aiter_raw(self.settings.chunk_size):
                await response.write(chunk)
            await response.write_eof()
        except ConnectionResetError:
            logger.debug(f"Client disconnected while relaying {target}")
        except httpx.HTTPError as e:
            # Status line is already on the wire; let aiohttp drop the connection
            logger.error(f"[ERROR] Upstream {target} failed mid-response: {e!r}")
            raise
        return response
