"""Shared test fixtures."""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from app.core.config import settings
from app.core.database import get_session
from app.main import app
from app.models import Event, EventType, Subject
from app.notifications.gateway import get_notifier


class RecordingNotifier:
    """Notification sink that records calls instead of delivering them."""

    def __init__(self):
        self.notifications = []
        self.broadcasts = []

    def notify(self, subject_id, kind, title, body, meta):
        self.notifications.append(
            {"subject_id": subject_id, "kind": kind, "title": title, "body": body, "meta": meta}
        )

    def broadcast(self, room, event, payload):
        self.broadcasts.append({"room": room, "event": event, "payload": payload})


class FailingNotifier:
    """Notification sink whose every delivery blows up."""

    def notify(self, *args):
        raise RuntimeError("notification service down")

    def broadcast(self, *args):
        raise RuntimeError("socket server down")


@pytest.fixture(name="engine")
def engine_fixture():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    """Create a new database session for each test."""
    with Session(engine) as session:
        yield session


@pytest.fixture(name="notifier")
def notifier_fixture() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture(name="failing_notifier")
def failing_notifier_fixture() -> FailingNotifier:
    return FailingNotifier()


@pytest.fixture(name="client")
def client_fixture(session: Session, notifier: RecordingNotifier):
    """Create a test client with the test database session and notifier."""

    def get_session_override():
        return session

    def get_notifier_override():
        return notifier

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_notifier] = get_notifier_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="admin_headers")
def admin_headers_fixture() -> dict:
    return {settings.admin_key_header: settings.admin_api_key}


@pytest.fixture(name="subject_headers")
def subject_headers_fixture(subject: Subject) -> dict:
    return {settings.subject_header: subject.id}


@pytest.fixture(name="subject")
def subject_fixture(session: Session) -> Subject:
    """Create a subject with a synced profile."""
    subject = Subject(
        id="user_alice",
        email="alice@example.com",
        first_name="Alice",
        last_name="Liddell",
    )
    session.add(subject)
    session.commit()
    session.refresh(subject)
    return subject


@pytest.fixture(name="other_subject")
def other_subject_fixture(session: Session) -> Subject:
    subject = Subject(id="user_bob", email="bob@example.com", first_name="Bob", last_name="Stone")
    session.add(subject)
    session.commit()
    session.refresh(subject)
    return subject


@pytest.fixture(name="make_event")
def make_event_fixture(session: Session):
    """Factory for events; keyword arguments override the defaults."""

    def _make(**overrides) -> Event:
        values = {
            "id": uuid4(),
            "title": "Test Workshop",
            "type": EventType.WORKSHOP,
            "price": None,
            "date": datetime.now(UTC) + timedelta(days=7),
            "end_date": datetime.now(UTC) + timedelta(days=7, hours=3),
            "meeting_link": "https://meet.example.com/abc",
        }
        values.update(overrides)
        event = Event(**values)
        session.add(event)
        session.commit()
        session.refresh(event)
        return event

    return _make


@pytest.fixture(name="free_event")
def free_event_fixture(make_event) -> Event:
    """Create a free event (price 0)."""
    return make_event(title="Free Webinar", type=EventType.WEBINAR, price=0)


@pytest.fixture(name="paid_event")
def paid_event_fixture(make_event) -> Event:
    """Create a paid event (price 500)."""
    return make_event(title="Paid Workshop", price=500)
