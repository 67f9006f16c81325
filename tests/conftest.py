"""
Pytest configuration and fixtures for Elestio SDK tests.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import httpx
import pytest

from elestio.api.client import ElestioAPI
from elestio.api.config import AUTH_ENDPOINT
from elestio.config import SDKSettings
from elestio.store import ConfigStore, CredentialStore, SessionStore

BASE_URL = "https://api.test"

Reply = httpx.Response | Callable[[httpx.Request], httpx.Response]


class FakeElestio:
    """In-memory stand-in for the Elestio API, served through httpx.MockTransport."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.routes: dict[str, list[Reply]] = {}
        self.auth_calls = 0
        self.auth_reply: Reply | None = None

    # Routing

    def on(self, path: str, *replies: Reply) -> None:
        """Queue replies for a path; the last one repeats."""
        self.routes[path] = list(replies)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path == AUTH_ENDPOINT:
            self.auth_calls += 1
            if self.auth_reply is not None:
                return _resolve(self.auth_reply, request)
            return httpx.Response(200, json={"status": "OK", "jwt": f"jwt-{self.auth_calls}"})

        replies = self.routes.get(path)
        if not replies:
            return httpx.Response(404, json={"status": "KO", "message": f"no route {path}"})
        reply = replies.pop(0) if len(replies) > 1 else replies[0]
        return _resolve(reply, request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    # Inspection

    def calls_to(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]


def _resolve(reply: Reply, request: httpx.Request) -> httpx.Response:
    return reply(request) if callable(reply) else reply


class FakeClock:
    """Monotonic clock advanced by the fake sleep."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FixedNow:
    """Settable wall clock for session expiry checks."""

    def __init__(self, value: datetime | None = None) -> None:
        self.value = value or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.value

    def advance(self, **kwargs: float) -> None:
        self.value += timedelta(**kwargs)


@pytest.fixture
def fake_api() -> FakeElestio:
    return FakeElestio()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fixed_now() -> FixedNow:
    return FixedNow()


@pytest.fixture
def config_dir(tmp_path):
    return tmp_path / "elestio"


@pytest.fixture
def credential_store(config_dir) -> CredentialStore:
    store = CredentialStore(config_dir)
    store.save("dev@example.com", "api-token-123")
    return store


@pytest.fixture
def config_store(config_dir) -> ConfigStore:
    return ConfigStore(config_dir)


@pytest.fixture
def session_store(config_store) -> SessionStore:
    return SessionStore(config_store)


@pytest.fixture
def settings(config_dir) -> SDKSettings:
    return SDKSettings(api_base_url=BASE_URL, config_dir=config_dir)


@pytest.fixture
def make_api(fake_api, fake_clock, settings, credential_store):
    """Factory for an ElestioAPI wired to the fake server and fake clock."""

    def _make() -> ElestioAPI:
        return ElestioAPI(
            settings=settings,
            transport=fake_api.transport,
            clock=fake_clock,
            sleep=fake_clock.sleep,
        )

    return _make


@pytest.fixture
def reset_sdk_settings():
    """Reset SDK settings before and after test."""
    from elestio.config import reset_settings

    reset_settings()
    yield
    reset_settings()


# ============================================================================
# Test Data Fixtures
# ============================================================================


def size(title: str, provider: str = "netcup", region: str = "nbg", **extra: Any) -> dict[str, Any]:
    """Catalog entry as returned by getServerSizes."""
    return {"title": title, "providerName": provider, "regionID": region, **extra}


@pytest.fixture
def sample_sizes() -> list[dict[str, Any]]:
    return [
        size("SMALL-1C-2G", vCPU=1, ramGB=2, pricePerHour="0.005"),
        size("MEDIUM-2C-4G", vCPU=2, ramGB=4, pricePerHour="0.01"),
        size("LARGE-2C-4G", vCPU=2, ramGB=4),
        size("LARGE-4C-8G", vCPU=4, ramGB=8),
        size("XLARGE-8C-16G", vCPU=8, ramGB=16),
        size("MEDIUM-2C-4G", provider="hetzner", region="fsn1"),
        size("SMALL-1C-1G", provider="hetzner", region="fsn1"),
        size("LARGE-4C-8G", provider="hetzner", region="fsn1"),
    ]


@pytest.fixture
def sample_templates() -> list[dict[str, Any]]:
    return [
        {"id": 11, "title": "PostgreSQL", "category": "Databases", "description": "SQL database", "dockerhub_default_tag": "16"},
        {"id": 12, "title": "Wordpress", "category": "CMS", "description": "Blogging platform"},
        {"id": 13, "title": "CI-CD-Target", "category": "DevOps", "description": "Deploy pipelines"},
        {"id": 14, "title": "Redis", "category": "Databases", "description": "In-memory cache"},
    ]
