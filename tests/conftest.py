"""Shared test fixtures for the Onward progress engine test suite."""

from datetime import date, datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from onward_app.core.profile import ProfileRecord
from onward_app.core.progress_service import ProgressService
from onward_app.main import create_app
from onward_app.persistence import ProfileRecordModel, init_db


# ── Time Freezing ───────────────────────────────────────────────────────

class FrozenClock:
    """Callable clock the tests can move forward explicitly."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta) -> datetime:
        self.now += timedelta(**delta)
        return self.now


@pytest.fixture
def frozen_now():
    """Fixed 'now' for deterministic scoring tests: 2026-02-15T12:00 local."""
    return datetime(2026, 2, 15, 12, 0, 0)


@pytest.fixture
def today(frozen_now) -> date:
    return frozen_now.date()


@pytest.fixture
def clock(frozen_now):
    return FrozenClock(frozen_now)


# ── Database ────────────────────────────────────────────────────────────

@pytest.fixture
def db_engine():
    """Fresh in-memory SQLite per test, one shared connection across threads."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(bind=db_engine, autocommit=False, autoflush=False)


@pytest.fixture
def store_profile(session_factory):
    """Writes a hand-built ProfileRecord straight into the store."""

    def _store(profile: ProfileRecord) -> ProfileRecord:
        db = session_factory()
        try:
            db.add(ProfileRecordModel(profile_data=profile.to_dict()))
            db.commit()
        finally:
            db.close()
        return profile

    return _store


# ── Service & API ───────────────────────────────────────────────────────

@pytest.fixture
def service(session_factory, clock):
    return ProgressService(session_factory, clock=clock)


@pytest.fixture
def onboarded(service, clock):
    """Service with a profile whose no-contact anchor is ten days back."""
    service.create_profile(clock.now - timedelta(days=10), name="Sam")
    return service


@pytest.fixture
def chat_replies():
    """Records messages sent to the fake chat upstream."""
    sent = []

    def _reply(message: str) -> str:
        sent.append(message)
        return "You're doing better than you think."

    _reply.sent = sent
    return _reply


@pytest.fixture
def client(service, chat_replies):
    app = create_app(service=service, chat_client=chat_replies)
    with TestClient(app) as c:
        yield c


def make_profile(now: datetime, days_since_anchor: float = 10, **fields) -> ProfileRecord:
    """ProfileRecord installed and anchored `days_since_anchor` days before now."""
    start = now - timedelta(days=days_since_anchor)
    profile = ProfileRecord(start_date=start, no_contact_start_date=start)
    profile.last_active_date = start
    profile.last_chat_session_date = start
    for name, value in fields.items():
        setattr(profile, name, value)
    return profile


def days_back(today: date, *offsets: int) -> set:
    return {today - timedelta(days=n) for n in offsets}
