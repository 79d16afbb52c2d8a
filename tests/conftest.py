"""
Pytest Configuration and Fixtures

This module provides shared fixtures and configuration for all tests.
No test touches the network: every HTTP exchange goes through
httpx.MockTransport driven by a ScriptedTransport.
"""

from typing import AsyncGenerator, Callable, List, Optional

import httpx
import pytest
import pytest_asyncio

from etcd_client.client import EtcdClient
from etcd_client.cluster.dispatcher import Dispatcher
from etcd_client.cluster.view import ClusterView
from etcd_client.config.settings import Settings


MEMBERS = ["http://m1:4001", "http://m2:4001", "http://m3:4001"]

Outcome = Callable[[httpx.Request], httpx.Response]


# ============================================================================
# Scripted outcomes
# ============================================================================

def connect_error() -> Outcome:
    """An attempt that never gets a response."""
    def outcome(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)
    return outcome


def respond(status: int, json=None, headers=None, content: bytes = None) -> Outcome:
    """An attempt answered with the given status and body."""
    def outcome(request: httpx.Request) -> httpx.Response:
        if content is not None:
            return httpx.Response(status, content=content, headers=headers)
        return httpx.Response(status, json=json, headers=headers)
    return outcome


def redirect(location: Optional[str]) -> Outcome:
    """A 307 leader redirect (no Location header when location is None)."""
    headers = {"Location": location} if location is not None else {}
    return respond(307, headers=headers, content=b"")


def ok(action: str = "get", key: str = "/foo", value: str = "bar", index: int = 5) -> Outcome:
    """A 200 success envelope."""
    return respond(200, json={
        "action": action,
        "node": {"key": key, "value": value, "modifiedIndex": index, "createdIndex": index},
    })


class ScriptedTransport:
    """
    Answers requests from a queue of scripted outcomes.

    Every request is recorded. Once the queue is empty the default outcome
    is used for all further requests.
    """

    def __init__(self, default: Outcome = None):
        self.outcomes: List[Outcome] = []
        self.default = default if default is not None else ok()
        self.requests: List[httpx.Request] = []

    def script(self, *outcomes: Outcome) -> "ScriptedTransport":
        self.outcomes.extend(outcomes)
        return self

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        outcome = self.outcomes.pop(0) if self.outcomes else self.default
        return outcome(request)

    @property
    def urls(self) -> List[str]:
        return [str(request.url) for request in self.requests]

    @property
    def hosts(self) -> List[str]:
        return [f"{request.url.scheme}://{request.url.netloc.decode()}" for request in self.requests]


class SleepRecorder:
    """Stands in for asyncio.sleep and records the requested delays."""

    def __init__(self):
        self.calls: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.calls.append(delay)


# ============================================================================
# Cluster Fixtures
# ============================================================================

@pytest.fixture
def members() -> List[str]:
    return list(MEMBERS)


@pytest.fixture
def view(members: List[str]) -> ClusterView:
    """A three member cluster view."""
    return ClusterView(members, api_version="v2")


@pytest.fixture
def test_settings(members: List[str]) -> Settings:
    return Settings(PEERS=members, API_VERSION="v2", RETRY_BACKOFF=0.2, MAX_REDIRECTS=10, TIMEOUT=1.0)


# ============================================================================
# Transport Fixtures
# ============================================================================

@pytest.fixture
def transport() -> ScriptedTransport:
    return ScriptedTransport()


@pytest.fixture
def sleeper() -> SleepRecorder:
    return SleepRecorder()


@pytest_asyncio.fixture
async def http(transport: ScriptedTransport) -> AsyncGenerator[httpx.AsyncClient, None]:
    """An AsyncClient wired to the scripted transport."""
    client = httpx.AsyncClient(transport=httpx.MockTransport(transport.handler))
    yield client
    await client.aclose()


@pytest.fixture
def dispatcher(view: ClusterView, http: httpx.AsyncClient, sleeper: SleepRecorder) -> Dispatcher:
    return Dispatcher(view, http, retry_backoff=0.2, max_redirects=10, sleep=sleeper)


@pytest.fixture
def client(
        test_settings: Settings,
        http: httpx.AsyncClient,
        sleeper: SleepRecorder,
) -> EtcdClient:
    return EtcdClient(settings=test_settings, http_client=http, sleep=sleeper)


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
