"""Pytest fixtures — throwaway SQLite database for fast, isolated tests."""
from datetime import datetime, timezone, timedelta

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from gamenight.database import Base, get_db
from gamenight.main import app
from gamenight.services.notification_service import Notifier, NotificationError, get_notifier

# Import all models so they register with Base.metadata
import gamenight.models  # noqa: F401

SQLITE_URL = "sqlite:///./test_gamenight.db"


class RecordingNotifier(Notifier):
    """Keeps every delivered message.

    Addresses in ``fail_for`` raise NotificationError, addresses in ``crash_for``
    raise an unrelated error the way a broken transport would.
    """

    def __init__(self, fail_for=(), crash_for=()):
        self.sent = []
        self.fail_for = set(fail_for)
        self.crash_for = set(crash_for)

    def deliver(self, to_email, subject, body):
        if to_email in self.fail_for:
            raise NotificationError("mailbox unavailable")
        if to_email in self.crash_for:
            raise UnicodeEncodeError("ascii", to_email, 0, 1, "ordinal not in range(128)")
        self.sent.append({"to": to_email, "subject": subject, "body": body})


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh SQLite engine for each test."""
    engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})

    # Enable WAL mode for better concurrency
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
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture(scope="function")
def db(session_factory):
    """Yield a database session for direct service calls and assertions."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def notifier():
    return RecordingNotifier()


@pytest.fixture(scope="function")
def client(session_factory, notifier):
    """FastAPI TestClient with database and notifier dependencies overridden."""

    def _override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helpers: build users, games and events through the API
# ---------------------------------------------------------------------------
def create_test_user(client: TestClient, name: str = "Test User", email: str = None,
                     tz: str = "UTC") -> dict:
    """Helper — POST /api/users and return response JSON."""
    resp = client.post("/api/users/", json={
        "name": name,
        "email": email or f"{name.lower().replace(' ', '.')}@example.com",
        "default_timezone": tz,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


def create_test_game(client: TestClient, catalog_id: int, name: str = "Test Game", min_players: int = 2,
                     max_players: int = 6, rating: float = None) -> dict:
    """Helper — PUT /api/games/{id} and return response JSON."""
    resp = client.put(f"/api/games/{catalog_id}", json={
        "catalog_id": catalog_id,
        "name": name,
        "min_players": min_players,
        "max_players": max_players,
        "playing_time": 60,
        "catalog_rating": rating,
    })
    assert resp.status_code == 200, resp.text
    return resp.json()


def create_test_event(client: TestClient, organizer_id: str, catalog_ids: list = (), num_dates: int = 2,
                      deadline_offset_hours: int = 48, title: str = "Game Night") -> dict:
    """Helper — POST /api/events with ``num_dates`` dates a week apart."""
    deadline = datetime.now(timezone.utc) + timedelta(hours=deadline_offset_hours)
    first = datetime.now(timezone.utc).date() + timedelta(days=7)
    resp = client.post("/api/events/", json={
        "organizer_id": organizer_id,
        "title": title,
        "location": "Ana's place",
        "response_deadline": deadline.isoformat(),
        "dates": [
            {"proposed_date": (first + timedelta(days=7 * i)).isoformat(), "start_time": "19:00:00"}
            for i in range(num_dates)
        ],
        "games": [{"catalog_id": cid} for cid in catalog_ids],
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


def invite(client: TestClient, event_id: str, organizer_id: str, user_ids: list) -> dict:
    """Helper — invite users, return {user_id: participant_id}."""
    resp = client.post(f"/api/events/{event_id}/invitations", json={
        "actor_user_id": organizer_id,
        "user_ids": user_ids,
    })
    assert resp.status_code == 200, resp.text
    return {r["user_id"]: r["participant_id"] for r in resp.json() if r["invited"]}


def rsvp(client: TestClient, participant_id: str, user_id: str, interested: bool = True,
         date_ids: list = (), game_votes: dict = None):
    """Helper — POST an RSVP and return the raw response."""
    return client.post(f"/api/participants/{participant_id}/rsvp", json={
        "actor_user_id": user_id,
        "interested": interested,
        "available_date_ids": list(date_ids),
        "game_votes": game_votes or {},
    })


def setup_pending_event(client: TestClient, num_guests: int = 2, catalog_ids=(101, 102)):
    """Organizer, guests, games and a pending event with everyone invited."""
    organizer = create_test_user(client, name="Organizer")
    guests = [create_test_user(client, name=f"Guest {i}") for i in range(num_guests)]
    for cid in catalog_ids:
        create_test_game(client, cid, name=f"Game {cid}")
    event = create_test_event(client, organizer["user_id"], catalog_ids=list(catalog_ids))
    participants = invite(client, event["event_id"], organizer["user_id"], [g["user_id"] for g in guests])
    return organizer, guests, event, participants
