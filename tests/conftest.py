from __future__ import annotations

import httpx
import pytest

from woovi_mcp.client import WooviClient
from woovi_mcp.core.config import Config

BASE_URL = "https://api.test.woovi.local"
APP_ID = "test-app-id"


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ScriptedUpstream:
    """
    MockTransport handler that replays queued responses.

    The last queued item is repeated once the queue runs down to it.
    Exceptions in the queue are raised instead of answered.
    """

    def __init__(self, *responses: httpx.Response | Exception) -> None:
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        item = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(item, Exception):
            raise item
        # Fresh copy so a repeated response is never bound to two requests
        return httpx.Response(item.status_code, headers=item.headers, content=item.content)

    @property
    def calls(self) -> int:
        return len(self.requests)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]


class SleepRecorder:
    """Stand-in for asyncio.sleep that records delays without waiting."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sleeper() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def config() -> Config:
    return Config(app_id=APP_ID, base_url=BASE_URL)


@pytest.fixture
def make_client(config, sleeper, clock):
    """Build a WooviClient talking to a ScriptedUpstream."""

    def _make(upstream: ScriptedUpstream, **config_updates) -> WooviClient:
        cfg = config.with_updates(**config_updates) if config_updates else config
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(upstream))
        return WooviClient(config=cfg, http_client=http_client, sleep=sleeper, clock=clock)

    return _make
