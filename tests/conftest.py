import httpx
import pytest

from cors_relay.config import Settings
from cors_relay.server import create_app

UPSTREAM = "https://api.example.test"


class RecordingUpstream:
    """Mock upstream that records every request it receives."""

    def __init__(self):
        self.requests = []
        self.respond = lambda request: httpx.Response(200, json={"ok": True})

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.respond(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def upstream():
    return RecordingUpstream()


@pytest.fixture
def settings():
    return Settings(upstream_base_url=UPSTREAM, log_requests=True)


@pytest.fixture
async def relay(aiohttp_client, settings, upstream):
    return await aiohttp_client(create_app(settings, transport=upstream.transport))
