import pytest
from datetime import datetime, timezone, timedelta
from starlette.testclient import TestClient

from mailotp_core.api import create_app
from mailotp_core.config import Settings
from mailotp_core.mail import BaseMailDispatcher, DispatchResult
from mailotp_core.otp import OTPStore
from mailotp_core.rate_limit import InMemoryRateLimiter


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, start=None):
        self.now = start or datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += timedelta(seconds=seconds)


class RecordingDispatcher(BaseMailDispatcher):
    """Dispatcher that remembers what it was asked to send."""

    name = "recording"

    def __init__(self, succeed=True):
        super().__init__()
        self.succeed = succeed
        self.sent = []

    @property
    def enabled(self):
        return self.succeed

    async def send(self, to, code, expires_at):
        self.sent.append((to, code, expires_at))
        if self.succeed:
            return DispatchResult(success=True, dispatcher=self.name)
        return DispatchResult(success=False, dispatcher=self.name, error_message="connection refused")

    def last_code(self):
        return self.sent[-1][1]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return OTPStore(clock=clock)


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def settings():
    return Settings(environment="development", otp_rate_limit=100, otp_rate_window=60)


@pytest.fixture
def make_client(store, dispatcher, settings):
    """Build a TestClient; keyword arguments override the fixtures."""
    clients = []

    def _make(**overrides):
        app = create_app(
            settings=overrides.get("settings", settings),
            store=overrides.get("store", store),
            dispatcher=overrides.get("dispatcher", dispatcher),
            limiter=overrides.get("limiter"),
        )
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client):
    return make_client()


@pytest.fixture
def limiter():
    return InMemoryRateLimiter(rate=2, window=60)


@pytest.fixture
def failing_dispatcher():
    return RecordingDispatcher(succeed=False)
