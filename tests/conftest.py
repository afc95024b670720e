import os
import tempfile
from datetime import datetime, timedelta, timezone
from decimal import Decimal

# Point the engine at a throwaway SQLite file before the app modules import it.
_DB_DIR = tempfile.mkdtemp(prefix="stagepass-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'stagepass.db')}"
os.environ["BOOKING_LOCK_TIMEOUT_SECONDS"] = "30"
os.environ["DB_CONNECT_MAX_RETRIES"] = "1"

import pytest
from fastapi.testclient import TestClient

from stagepass.infrastructure.db.models import Artist, Base, Category, Event, Profile
from stagepass.infrastructure.db.session import SessionLocal, engine


@pytest.fixture(autouse=True)
def reset_schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db_session():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    from stagepass.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_profile(db_session):
    def _make(role: str = "attendee", full_name: str = "Test User") -> str:
        profile = Profile(full_name=full_name, role=role)
        db_session.add(profile)
        db_session.commit()
        return profile.id

    return _make


@pytest.fixture
def make_category(db_session):
    def _make(name: str) -> str:
        category = Category(name=name)
        db_session.add(category)
        db_session.commit()
        return category.id

    return _make


@pytest.fixture
def make_artist(db_session):
    def _make(name: str = "Maya Fernandes", profession: str = "Singer") -> str:
        artist = Artist(name=name, profession=profession, rating=4.5)
        db_session.add(artist)
        db_session.commit()
        return artist.id

    return _make


@pytest.fixture
def make_event(db_session, make_profile):
    def _make(
        available_seats: int = 100,
        total_seats: int | None = None,
        price_start: Decimal = Decimal("25.00"),
        title: str = "Open Air Sessions",
        venue: str = "Riverside Amphitheatre",
        city: str = "Mumbai",
        days_from_now: int = 7,
        category_id: str | None = None,
        artist_id: str | None = None,
    ) -> str:
        event = Event(
            title=title,
            date_time=datetime.now(timezone.utc) + timedelta(days=days_from_now),
            venue=venue,
            city=city,
            price_start=price_start,
            total_seats=total_seats if total_seats is not None else available_seats,
            available_seats=available_seats,
            organizer_id=make_profile(role="organizer", full_name="Organizer"),
            category_id=category_id,
            artist_id=artist_id,
        )
        db_session.add(event)
        db_session.commit()
        return event.id

    return _make
