# stagepass/infrastructure/repositories/event_repository.py

from datetime import datetime
from decimal import Decimal

from sqlalchemy.orm import Session, joinedload
from sqlalchemy import func, or_, select

from stagepass.infrastructure.db.models import Artist, Category, Event, Profile


class EventRepository:

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, event_id: str) -> Event | None:
        stmt = (
            select(Event)
            .options(joinedload(Event.category), joinedload(Event.artist))
            .where(Event.id == event_id)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def list_events(
        self,
        search: str | None = None,
        category: str | None = None,
        city: str | None = None,
    ) -> list[Event]:
        stmt = select(Event).options(joinedload(Event.category))

        if search:
            term = f"%{search.lower()}%"
            stmt = stmt.where(
                or_(
                    func.lower(Event.title).like(term),
                    func.lower(Event.venue).like(term),
                    func.lower(Event.city).like(term),
                )
            )

        if category and category != "all":
            stmt = stmt.join(Category, Event.category_id == Category.id).where(
                Category.name == category
            )

        if city:
            stmt = stmt.where(Event.city == city)

        stmt = stmt.order_by(Event.date_time)
        return list(self.db.execute(stmt).scalars().all())

    def create_event(
        self,
        organizer_id: str,
        title: str,
        date_time: datetime,
        venue: str,
        city: str,
        price_start: Decimal,
        total_seats: int,
        price_end: Decimal | None = None,
        description: str | None = None,
        image_url: str | None = None,
        category_id: str | None = None,
        artist_id: str | None = None,
    ) -> Event:
        event = Event(
            organizer_id=organizer_id,
            title=title,
            description=description,
            date_time=date_time,
            venue=venue,
            city=city,
            image_url=image_url,
            price_start=price_start,
            price_end=price_end,
            total_seats=total_seats,
            available_seats=total_seats,
            category_id=category_id,
            artist_id=artist_id,
        )
        self.db.add(event)
        self.db.flush()
        return event

    def list_categories(self) -> list[Category]:
        stmt = select(Category).order_by(Category.name)
        return list(self.db.execute(stmt).scalars().all())

    def get_category(self, category_id: str) -> Category | None:
        return self.db.get(Category, category_id)

    def get_artist(self, artist_id: str) -> Artist | None:
        return self.db.get(Artist, artist_id)

    def get_profile(self, profile_id: str) -> Profile | None:
        return self.db.get(Profile, profile_id)
