"""Shared fixtures: in-memory store on a fake clock and a configured test client."""

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.core.errors import StorageError
from app.core.memory_store import InMemoryMessageStore
from app.main import create_app


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StubStore:
    """Store with scripted answers, for failure injection."""

    def __init__(
        self,
        reserve: bool = True,
        attach: bool = True,
        payload: str | None = None,
        error: Exception | None = None,
        ping_error: Exception | None = None,
    ):
        self.reserve = reserve
        self.attach = attach
        self.payload = payload
        self.error = error
        self.ping_error = ping_error
        self.calls: list[tuple] = []
        self.closed = False
        self.pings = 0

    async def reserve_code(self, code, ttl):
        self.calls.append(("reserve_code", code, ttl))
        if self.error:
            raise self.error
        return self.reserve

    async def attach_cipher(self, code, payload, ttl):
        self.calls.append(("attach_cipher", code, payload, ttl))
        if self.error:
            raise self.error
        return self.attach

    async def get_and_delete(self, code):
        self.calls.append(("get_and_delete", code))
        if self.error:
            raise self.error
        return self.payload

    async def ping(self):
        self.pings += 1
        if self.ping_error:
            raise self.ping_error

    async def close(self):
        self.closed = True


def make_settings(**overrides) -> Settings:
    values = {
        "STORAGE_BACKEND": "memory",
        "PLACEHOLDER_TTL_SECONDS": 60,
        "MESSAGE_TTL_SECONDS": 3600,
        "RATE_LIMIT_RPS": 0,
        "STORAGE_CONNECT_ATTEMPTS": 1,
        "STORAGE_CONNECT_RETRY_SECONDS": 0,
        "ALLOWED_ORIGINS": "*",
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return InMemoryMessageStore(clock=clock)


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def client(settings, store):
    app = create_app(settings, store=store)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def storage_failure():
    return StorageError("connection refused")
