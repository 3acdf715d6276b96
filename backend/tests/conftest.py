"""Pytest fixtures — SQLite database for fast, isolated tests."""
import uuid
from datetime import datetime

import pytest
import pytz
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from lunchplan.database import Base, get_db
from lunchplan.main import app
from lunchplan.services.week_clock import get_now

# Import all models so they register with Base.metadata
from lunchplan.models.user import User                 # noqa: F401
from lunchplan.models.group import Group, GroupMember  # noqa: F401
from lunchplan.models.day_status import DayStatus      # noqa: F401

SQLITE_URL = "sqlite:///./test.db"


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh SQLite engine for each test."""
    engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})

    # WAL for concurrency, foreign keys so ON DELETE CASCADE applies
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(db_engine):
    """Yield a database session bound to the test engine."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(db_engine):
    """FastAPI TestClient with the database dependency overridden to use SQLite."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def _override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def freeze_now():
    """Pin the API clock: ``freeze_now(2025, 10, 4)`` makes that date 'now'."""
    def _freeze(year: int, month: int, day: int, hour: int = 12) -> datetime:
        moment = pytz.timezone("Europe/Stockholm").localize(datetime(year, month, day, hour))
        app.dependency_overrides[get_now] = lambda: moment
        return moment

    yield _freeze
    app.dependency_overrides.pop(get_now, None)


# ---------------------------------------------------------------------------
# Helpers: create users / groups via the API, return the JSON response dict
# ---------------------------------------------------------------------------
def create_test_user(client: TestClient, name: str = "Test User", email: str | None = None) -> dict:
    """Helper — POST /api/users and return response JSON."""
    resp = client.post("/api/users/", json={
        "name": name,
        "email": email or f"{uuid.uuid4().hex[:10]}@example.com",
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


def create_test_group(client: TestClient, creator_id: str, name: str = "Test Group") -> dict:
    """Helper — POST /api/groups and return response JSON."""
    resp = client.post("/api/groups/", json={
        "name": name,
        "created_by": creator_id,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


def add_test_member(client: TestClient, group_id: str, user_id: str, role: str = "member") -> dict:
    """Helper — POST /api/groups/{id}/members and return response JSON."""
    resp = client.post(f"/api/groups/{group_id}/members", json={
        "user_id": user_id,
        "role": role,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


def post_status(client: TestClient, actor_id: str, **payload):
    """Helper — POST /api/week-status as ``actor_id``; returns the raw response."""
    return client.post(f"/api/week-status/?actor_user_id={actor_id}", json=payload)
