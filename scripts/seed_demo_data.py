from datetime import datetime, timedelta, timezone
from decimal import Decimal

from sqlalchemy import select

from stagepass.infrastructure.db.models import (
    Artist,
    ArtistCategory,
    Base,
    Category,
    Event,
    Profile,
)
from stagepass.infrastructure.db.session import engine, get_db_session


CATEGORY_NAMES = ["Music", "Dance", "Film", "Comedy", "Art", "Theater", "Literary"]

DEMO_ORGANIZER_ID = "00000000-0000-0000-0000-00000000a001"
DEMO_ATTENDEE_ID = "00000000-0000-0000-0000-00000000b001"


def _dt(days_from_now: int, hour: int, minute: int) -> datetime:
    target = datetime.now(timezone.utc) + timedelta(days=days_from_now)
    return target.replace(hour=hour, minute=minute, second=0, microsecond=0)


def seed_categories(db) -> dict[str, Category]:
    categories = {}
    for name in CATEGORY_NAMES:
        category = db.execute(
            select(Category).where(Category.name == name)
        ).scalar_one_or_none()
        if category is None:
            category = Category(name=name)
            db.add(category)
        categories[name] = category
    db.flush()
    return categories


def seed_profiles(db) -> None:
    for profile_id, full_name, role in (
        (DEMO_ORGANIZER_ID, "Demo Organizer", "organizer"),
        (DEMO_ATTENDEE_ID, "Demo Attendee", "attendee"),
    ):
        if db.get(Profile, profile_id) is None:
            db.add(Profile(id=profile_id, full_name=full_name, role=role))
    db.flush()


def seed_artists(db, categories: dict[str, Category]) -> dict[str, Artist]:
    artist_defs = [
        {"name": "Maya Fernandes", "profession": "Singer", "rating": 4.8, "category": "Music"},
        {"name": "The Lantern Collective", "profession": "Dance Troupe", "rating": 4.6, "category": "Dance"},
    ]
    artists = {}
    for item in artist_defs:
        artist = db.execute(
            select(Artist).where(Artist.name == item["name"])
        ).scalar_one_or_none()
        if artist is None:
            artist = Artist(
                name=item["name"],
                profession=item["profession"],
                rating=item["rating"],
            )
            db.add(artist)
            db.flush()
            db.add(
                ArtistCategory(
                    artist_id=artist.id,
                    category_id=categories[item["category"]].id,
                )
            )
        artists[item["name"]] = artist
    db.flush()
    return artists


def seed_events(db, categories: dict[str, Category], artists: dict[str, Artist]) -> None:
    event_defs = [
        {
            "title": "Maya Fernandes Live",
            "category": "Music",
            "artist": "Maya Fernandes",
            "date_time": _dt(days_from_now=10, hour=19, minute=30),
            "venue": "Riverside Amphitheatre",
            "city": "Mumbai",
            "price_start": Decimal("25.00"),
            "price_end": Decimal("80.00"),
            "total_seats": 400,
        },
        {
            "title": "Lantern Nights",
            "category": "Dance",
            "artist": "The Lantern Collective",
            "date_time": _dt(days_from_now=15, hour=18, minute=0),
            "venue": "Old Mill Studio",
            "city": "Pune",
            "price_start": Decimal("15.00"),
            "price_end": None,
            "total_seats": 120,
        },
    ]

    for item in event_defs:
        event = db.execute(
            select(Event).where(Event.title == item["title"])
        ).scalar_one_or_none()
        if event is None:
            # Capacity is set once; afterwards only the inventory ledger moves seats.
            event = Event(
                title=item["title"],
                organizer_id=DEMO_ORGANIZER_ID,
                total_seats=item["total_seats"],
                available_seats=item["total_seats"],
            )
            db.add(event)

        event.category_id = categories[item["category"]].id
        event.artist_id = artists[item["artist"]].id
        event.date_time = item["date_time"]
        event.venue = item["venue"]
        event.city = item["city"]
        event.price_start = item["price_start"]
        event.price_end = item["price_end"]


def main() -> None:
    Base.metadata.create_all(bind=engine)
    with get_db_session() as db:
        seed_profiles(db)
        categories = seed_categories(db)
        artists = seed_artists(db, categories)
        seed_events(db, categories, artists)
    print("Seed complete: categories, demo organizer/attendee, two events added.")


if __name__ == "__main__":
    main()
