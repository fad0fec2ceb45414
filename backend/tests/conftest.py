"""Pytest fixtures: a per-test SQLite database and an app built around it."""
from datetime import datetime, timezone, timedelta
from typing import Optional

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from eventhub.config import Settings
from eventhub.database import Base
from eventhub.main import create_app
from eventhub.models.event import Event
from eventhub.models.user import User, UserRole
from eventhub.security import create_access_token


@pytest.fixture(scope="function")
def test_settings(tmp_path):
    return Settings(
        DATABASE_URL=f"sqlite:///{tmp_path / 'test.db'}",
        JWT_SECRET="test-secret",
        LOG_LEVEL="DEBUG",
    )


@pytest.fixture(scope="function")
def db_engine(test_settings):
    """Create a fresh SQLite engine for each test."""
    engine = create_engine(test_settings.DATABASE_URL, connect_args={"check_same_thread": False})

    # WAL lets the notifier's session write while a request session is open
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(db_engine):
    """Yield a database session for service-level tests."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def app(test_settings, db_engine):
    return create_app(test_settings, engine=db_engine)


@pytest.fixture(scope="function")
def client(app):
    """FastAPI TestClient bound to the per-test database."""
    with TestClient(app) as c:
        yield c


class RecordingNotifier:
    """Stands in for the notification sink in service-level tests."""

    def __init__(self):
        self.sent = []

    def notify(self, recipient_id, kind, message, event_id=None, sender_id=None):
        self.sent.append({
            "recipient_id": recipient_id,
            "kind": kind,
            "message": message,
            "event_id": event_id,
            "sender_id": sender_id,
        })

    def kinds_for(self, recipient_id):
        return [n["kind"].value for n in self.sent if n["recipient_id"] == recipient_id]


@pytest.fixture(scope="function")
def notifier():
    return RecordingNotifier()


# ---------------------------------------------------------------------------
# Helpers: HTTP level
# ---------------------------------------------------------------------------
def create_test_user(client: TestClient, name: str = "Test User", role: str = "user") -> dict:
    """Helper: POST /api/users and return response JSON.

    Sign-up always creates plain users; an admin role is granted straight in
    the database, the way an operator would.
    """
    resp = client.post("/api/users/", json={"display_name": name})
    assert resp.status_code == 201, resp.text
    data = resp.json()
    if role != UserRole.user.value:
        with client.app.state.session_factory() as session:
            session.query(User).filter(User.user_id == data["user_id"]).update({"role": UserRole(role)})
            session.commit()
        data["role"] = role
    return data


def auth_headers(client: TestClient, user: dict) -> dict:
    """Bearer header for ``user``, signed with the app's secret."""
    token = create_access_token(user["user_id"], client.app.state.settings)
    return {"Authorization": f"Bearer {token}"}


def create_test_event(
    client: TestClient,
    host: dict,
    title: str = "Rooftop Party",
    guests: Optional[list] = None,
) -> dict:
    """Helper: POST /api/events as ``host`` and return response JSON."""
    start = datetime.now(timezone.utc) + timedelta(days=2)
    resp = client.post("/api/events/", headers=auth_headers(client, host), json={
        "title": title,
        "location": "Main Street 1",
        "start_time": start.isoformat(),
        "end_time": (start + timedelta(hours=4)).isoformat(),
        "event_type": "birthday",
        "guests": guests or [],
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


# ---------------------------------------------------------------------------
# Helpers: service level
# ---------------------------------------------------------------------------
def make_user(db, name: str, role: str = "user") -> User:
    user = User(display_name=name, role=UserRole(role))
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_event(db, host: User, title: str = "Garden Dinner") -> Event:
    start = datetime.now(timezone.utc) + timedelta(days=3)
    event = Event(
        title=title,
        location="Backyard",
        start_time=start,
        end_time=start + timedelta(hours=3),
        created_by=host.user_id,
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    return event
