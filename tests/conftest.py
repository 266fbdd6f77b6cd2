"""Root conftest for all tests.

Shared fixtures: a controllable clock for the cache, a fortnite-api.com
client backed by httpx.MockTransport, and a stub chat model.
"""

from collections.abc import Callable
from typing import Any

import httpx
import pytest
from langchain_core.messages import AIMessage

from fortnite_coach.core.cache import TTLCache
from fortnite_coach.integrations.fortnite.client import FortniteApiClient

BASE_URL = "https://fortnite-api.test/"


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingTransport(httpx.MockTransport):
    """MockTransport that remembers every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.requests: list[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)


class StubChatModel:
    def __init__(self, reply: str = "Great game. Keep rotating early.", error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.calls: list[Any] = []

    def invoke(self, messages: Any) -> AIMessage:
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        return AIMessage(content=self.reply)


def replay(response: httpx.Response) -> httpx.Response:
    """Fresh copy of a canned response so one template can be served many times."""
    return httpx.Response(response.status_code, headers=response.headers, content=response.content)


def stats_body(data: dict[str, Any] | None = None, status: int = 200, error: str | None = None) -> dict[str, Any]:
    body: dict[str, Any] = {"status": status}
    if data is not None:
        body["data"] = data
    if error is not None:
        body["error"] = error
    return body


def player_data(
    name: str = "Foo",
    matches: int = 25,
    account_id: str | None = "acc-123",
) -> dict[str, Any]:
    account: dict[str, Any] = {"name": name}
    if account_id is not None:
        account["id"] = account_id
    return {
        "account": account,
        "stats": {
            "all": {
                "solo": {"wins": 5, "kd": 1.5, "winRate": 0.2, "kills": 50, "matches": matches},
            },
        },
    }


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> TTLCache:
    return TTLCache(clock=clock)


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def make_client(sleeps: list[float]):
    """Build a FortniteApiClient whose HTTP calls go to ``handler``."""

    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> tuple[FortniteApiClient, RecordingTransport]:
        transport = RecordingTransport(handler)
        client = FortniteApiClient(
            api_key="test-key",
            base_url=BASE_URL,
            transport=transport,
            sleep=sleeps.append,
        )
        return client, transport

    return _make
