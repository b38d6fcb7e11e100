"""Shared test fixtures and helpers."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-mindbridge")
os.environ["CACHE_BACKEND"] = "memory"

from datetime import datetime, timezone  # noqa: E402
from typing import Optional  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from jose import jwt as jose_jwt  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from mindbridge import models_google_calendar  # noqa: E402,F401
from mindbridge.cache import MemoryCacheBackend, TTLCache  # noqa: E402
from mindbridge.config import JWT_ALGORITHM, JWT_SECRET  # noqa: E402
from mindbridge.database import Base, get_db  # noqa: E402
from mindbridge.dependencies import get_availability_resolver, get_calendar_factory  # noqa: E402
from mindbridge.domain.scheduling.availability_service import AvailabilityResolver  # noqa: E402
from mindbridge.domain.scheduling.mirror import CalendarMirror  # noqa: E402
from mindbridge.domain.scheduling.schemas import BusyInterval  # noqa: E402
from mindbridge.domain.scheduling.service import BookingCoordinator  # noqa: E402
from mindbridge.errors import ExternalServiceError  # noqa: E402
from mindbridge.main import app  # noqa: E402
from mindbridge.models import Doctor, User  # noqa: E402


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def busy(start: datetime, end: datetime) -> BusyInterval:
    return BusyInterval(start=start, end=end)


def auth_headers(user) -> dict:
    token = jose_jwt.encode({"id": user.id}, JWT_SECRET, algorithm=JWT_ALGORITHM)
    return {"Authorization": f"Bearer {token}"}


class FakeClock:
    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeCalendar:
    """In-memory calendar provider recording every call."""

    def __init__(self, busy_intervals: Optional[list[BusyInterval]] = None):
        self.busy = list(busy_intervals or [])
        self.busy_calls = 0
        self.last_query: Optional[tuple[datetime, datetime]] = None
        self.fail_busy = False
        self.fail_events = False
        self.events: dict[str, dict] = {}
        self.updated: list[str] = []
        self.deleted: list[str] = []

    async def query_busy(self, start: datetime, end: datetime) -> list[BusyInterval]:
        self.busy_calls += 1
        self.last_query = (start, end)
        if self.fail_busy:
            raise ExternalServiceError("Calendar request timed out")
        return list(self.busy)

    async def create_event(self, event: dict) -> str:
        if self.fail_events:
            raise ExternalServiceError("Calendar request failed with status 500")
        event_id = f"evt-{len(self.events) + 1}"
        self.events[event_id] = event
        return event_id

    async def update_event(self, event_id: str, event: dict) -> str:
        if self.fail_events:
            raise ExternalServiceError("Calendar request failed with status 500")
        self.events[event_id] = event
        self.updated.append(event_id)
        return event_id

    async def delete_event(self, event_id: str) -> None:
        if self.fail_events:
            raise ExternalServiceError("Calendar request failed with status 500")
        self.events.pop(event_id, None)
        self.deleted.append(event_id)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()


@pytest.fixture
def patient(db):
    user = User(email="sam@example.com", name="Sam Patient", role="patient")
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def other_patient(db):
    user = User(email="alex@example.com", name="Alex Patient", role="patient")
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def doctor_user(db):
    user = User(email="dr.lee@example.com", name="Jordan Lee", role="doctor", verified=True)
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def admin(db):
    user = User(email="admin@example.com", name="Riley Admin", role="admin", verified=True)
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def doctor(db, doctor_user):
    doctor = Doctor(
        user_id=doctor_user.id,
        name="Jordan Lee",
        email="dr.lee@example.com",
        specialty="Psychiatrist",
        verified=True,
    )
    db.add(doctor)
    db.commit()
    return doctor


@pytest.fixture
def calendar():
    return FakeCalendar()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return TTLCache(MemoryCacheBackend(), ttl=60, clock=clock)


@pytest.fixture
def resolver(calendar, cache):
    return AvailabilityResolver(lambda doctor: calendar, cache=cache, work_start=9, work_end=17, tz_name="UTC")


@pytest.fixture
def coordinator(db, resolver, calendar):
    return BookingCoordinator(db, resolver, CalendarMirror(lambda doctor: calendar))


@pytest.fixture
def client(db, resolver, calendar):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_calendar_factory] = lambda: (lambda doctor: calendar)
    app.dependency_overrides[get_availability_resolver] = lambda: resolver
    yield TestClient(app)
    app.dependency_overrides.clear()
