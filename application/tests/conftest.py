import os
import time

# settings are read at import time by several modules
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["STATE_BACKEND"] = "memory"
os.environ["CLEANUP_ENABLED"] = "false"
os.environ["DEBUG"] = "true"
os.environ["SENTRY_ENABLED"] = "false"
os.environ["LOG_TO_FILE"] = "false"
os.environ["AUDIT_LOGGING_ENABLED"] = "false"
os.environ["SLACK_WEBHOOK_URL"] = ""

from datetime import datetime, timedelta, timezone
from typing import List, Tuple

import limits.storage.memory
import pytest
from fastapi.testclient import TestClient

from supplier_auth.config.settings import AuthConfigs
from supplier_auth.connections.database import create_db_engine, create_session_factory, create_tables
from supplier_auth.core.container import build_components
from supplier_auth.integrations.whatsapp_notifier import DeliveryResult, Notifier

START = datetime(2026, 1, 5, 9, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime = START):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


class FakeNotifier(Notifier):
    def __init__(self, ok: bool = True, raises: bool = False):
        self.ok = ok
        self.raises = raises
        self.sent: List[Tuple[str, str]] = []

    async def send(self, destination: str, message: str) -> DeliveryResult:
        self.sent.append((destination, message))
        if self.raises:
            raise ConnectionError("gateway down")
        return DeliveryResult(ok=self.ok, detail="sent" if self.ok else "rejected")


class FakeRedis:
    def __init__(self):
        self.sets = {}

    def delete(self, *keys):
        return sum(int(self.sets.pop(key, None) is not None) for key in keys)

    def sadd(self, key, member):
        members = self.sets.setdefault(key, set())
        before = len(members)
        members.add(member)
        return len(members) - before

    def sismember(self, key, member):
        return member in self.sets.get(key, set())

    def scard(self, key):
        return len(self.sets.get(key, set()))


class ClockedTime:
    """Stands in for the time module inside limits' memory storage."""

    def __init__(self, clock: FakeClock):
        self.clock = clock

    def time(self) -> float:
        return self.clock().timestamp()

    def __getattr__(self, name):
        return getattr(time, name)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture(autouse=True)
def rate_limit_clock(clock, monkeypatch):
    monkeypatch.setattr(limits.storage.memory, "time", ClockedTime(clock))


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def configs():
    cfg = AuthConfigs()
    cfg.DEBUG = True
    cfg.STATE_BACKEND = "memory"
    cfg.CLEANUP_ENABLED = False
    cfg.JWT_SECRET = "test-secret"
    cfg.TOKEN_REVOCATION_GRACE_SECONDS = 60
    return cfg


@pytest.fixture
def session_factory():
    engine = create_db_engine("sqlite://")
    create_tables(engine)
    yield create_session_factory(engine)
    engine.dispose()


@pytest.fixture
def components(configs, session_factory, clock, notifier):
    return build_components(configs, session_factory=session_factory, clock=clock, notifier=notifier)


@pytest.fixture
def client(components):
    from supplier_auth.main import create_app

    with TestClient(create_app(components)) as test_client:
        yield test_client


def last_code(notifier: FakeNotifier) -> str:
    """Pull the 6-digit code out of the most recent message."""
    message = notifier.sent[-1][1]
    return message.split("verification code is ")[1][:6]
