"""
Test configuration and fixtures.

Provides an in-memory store with a controllable clock, a fake remote
backend served through ``httpx.MockTransport`` and static collaborators.
"""

import json
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple, Union

import httpx
import pytest

from turnip_sync.cache.store import CacheStore
from turnip_sync.collaborators import StaticConnectivity, StaticIdentityProvider
from turnip_sync.config import Settings
from turnip_sync.context import SyncContext, build_context
from turnip_sync.data_service import DataService
from turnip_sync.domain.entities import Identity

BASE_URL = "http://turnip.test"
PUBLIC_KEY = "PUBKEY123"
PRIVATE_KEY = "private-key"


class FrozenClock:
    """Naive UTC clock that only moves when told to."""

    def __init__(self, now: Optional[datetime] = None) -> None:
        self.now = now or datetime(2026, 3, 10, 12, 0, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


class FakeBackend:
    """Programmable stand-in for the remote functions host."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self._routes: Dict[Tuple[str, str], Union[Dict[str, Any], Exception]] = {}

    def respond(
        self,
        method: str,
        path: str,
        status_code: int = 200,
        json_body: Any = None,
        text: Optional[str] = None,
    ) -> None:
        self._routes[(method, path)] = {
            "status_code": status_code,
            "json_body": json_body,
            "text": text,
        }

    def fail(self, method: str, path: str, error: Exception) -> None:
        self._routes[(method, path)] = error

    def calls(self, method: str, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self._routes.get((request.method, request.url.path))

        if route is None:
            return httpx.Response(404, text="Not Found")
        if isinstance(route, Exception):
            raise route
        if route["text"] is not None:
            return httpx.Response(route["status_code"], text=route["text"])
        if route["json_body"] is not None:
            return httpx.Response(route["status_code"], text=json.dumps(route["json_body"]))
        return httpx.Response(route["status_code"])


@pytest.fixture
def settings() -> Settings:
    """Settings pointing at the fake backend and an in-memory database."""
    return Settings(
        BASE_URL=BASE_URL,
        CACHE_DATABASE_URL="sqlite://",
        CREATE_PROFILE_CODE="create-code",
        UPDATE_PROFILE_CODE="update-code",
        UPDATE_TURNIP_PRICES_CODE="prices-code",
        SUBMIT_FRIEND_REQUEST_CODE="submit-code",
        REJECT_FRIEND_REQUEST_CODE="reject-code",
        APPROVE_FRIEND_REQUEST_CODE="approve-code",
        REMOVE_FRIEND_CODE="remove-code",
        GET_FRIENDS_CODE="friends-code",
        GET_FRIEND_REQUESTS_CODE="requests-code",
    )


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def identity() -> StaticIdentityProvider:
    return StaticIdentityProvider(Identity(public_key=PUBLIC_KEY, private_key=PRIVATE_KEY))


@pytest.fixture
def connectivity() -> StaticConnectivity:
    return StaticConnectivity(online=True)


@pytest.fixture
def context(
    settings: Settings,
    identity: StaticIdentityProvider,
    connectivity: StaticConnectivity,
    backend: FakeBackend,
    clock: FrozenClock,
) -> SyncContext:
    """Context wired to the fake backend."""
    return build_context(
        identity,
        connectivity,
        settings=settings,
        transport=httpx.MockTransport(backend),
        clock=clock,
        configure_logging=False,
    )


@pytest.fixture
def store(context: SyncContext) -> CacheStore:
    """In-memory cache store shared with the context."""
    return context.store


@pytest.fixture
def service(context: SyncContext) -> DataService:
    return DataService(context)


def pytest_configure(config: Any) -> None:
    """
    Configure pytest with custom markers.

    Args:
        config: Pytest configuration object
    """
    config.addinivalue_line(
        "markers",
        "unit: mark test as unit test",
    )
