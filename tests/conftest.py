"""Shared fixtures: a virtual clock and a scripted gridscale API."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx
import pytest

from gsprovider.client import GridscaleClient
from gsprovider.config import ClientConfig

API_URL = "https://api.test"


class FakeClock:
    """Monotonic clock that only moves when something sleeps."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


type Reply = tuple[int, Any] | Exception | Callable[[httpx.Request], httpx.Response]


class FakeAPI:
    """Answers requests from per-route queues; the last reply of a queue repeats."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], list[Reply]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, *replies: Reply) -> None:
        self.routes.setdefault((method, path), []).extend(replies)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self.routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"status": "not found"})

        reply = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply(request)

        status, body = reply
        if isinstance(body, bytes):
            return httpx.Response(status, content=body)
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=body)


def make_config(**overrides) -> ClientConfig:
    values: dict[str, Any] = {"api_url": API_URL, "user_uuid": "user-1", "api_token": "s3cret"}
    values.update(overrides)
    return ClientConfig(**values)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def api() -> FakeAPI:
    return FakeAPI()


@pytest.fixture
def make_client(api: FakeAPI, clock: FakeClock):
    clients: list[GridscaleClient] = []

    def _make(**overrides) -> GridscaleClient:
        client = GridscaleClient(
            make_config(**overrides),
            transport=httpx.MockTransport(api.handler),
            clock=clock,
            sleep=clock.sleep,
        )
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.close()


@pytest.fixture
def client(make_client) -> GridscaleClient:
    return make_client()
