"""
CORS Relay - server bootstrap and command line entrypoint.
"""
import argparse
import asyncio
import logging
from typing import List, Optional

import httpx
from aiohttp import web

from cors_relay.config import Settings
from cors_relay.handler import ForwardingHandler

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def create_app(settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> web.Application:
    app = web.Application()
    handler = ForwardingHandler(settings, transport=transport)
    app.router.add_route("*", "/{path:.*}", handler.handle)
    return app


def startup_banner(settings: Settings) -> List[str]:
    return [
        f"Starting CORS relay on port {settings.listen_port}...",
        f"Server is running at: http://localhost:{settings.listen_port}",
        f"Forwarding requests to: {settings.upstream_base_url}",
    ]


async def serve(settings: Settings) -> None:
    """Run the relay until the task is cancelled."""
    app = create_app(settings)
    # handler_cancellation: a client disconnect cancels the upstream call too
    runner = web.AppRunner(app, handler_cancellation=True, access_log=None)
    await runner.setup()
    site = web.TCPSite(runner, settings.listen_host, settings.listen_port)
    for line in startup_banner(settings):
        print(line)
    try:
        await site.start()
        await asyncio.Event().wait()
    finally:
        await runner.cleanup()
        logger.info("CORS relay stopped")


def build_settings(argv: Optional[List[str]] = None) -> Settings:
    """Environment settings with command line overrides applied on top."""
    parser = argparse.ArgumentParser(
        prog="cors-relay",
        description="Forward HTTP requests to a fixed upstream and add CORS headers.",
    )
    parser.add_argument("--host", dest="listen_host", help="interface to bind")
    parser.add_argument("--port", dest="listen_port", type=int, help="TCP port to listen on")
    parser.add_argument("--upstream", dest="upstream_base_url", help="base URL requests are forwarded to")
    parser.add_argument("--timeout", dest="upstream_timeout", type=float, help="upstream timeout in seconds")
    parser.add_argument(
        "--no-log-requests", dest="log_requests", action="store_false", default=None,
        help="disable per-request logging",
    )
    parser.add_argument("--log-level", dest="log_level", help="logging level, e.g. DEBUG")
    args = parser.parse_args(argv)
    overrides = {key: value for key, value in vars(args).items() if value is not None}
    return Settings(**overrides)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
    # log_requests alone decides whether request lines are shown
    request_level = logging.INFO if settings.log_requests else logging.WARNING
    logging.getLogger("cors_relay.requests").setLevel(request_level)


def main(argv: Optional[List[str]] = None) -> None:
    settings = build_settings(argv)
    configure_logging(settings)
    try:
        asyncio.run(serve(settings))
    except KeyboardInterrupt:
        pass
