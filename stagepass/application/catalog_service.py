import logging
from datetime import datetime
from decimal import Decimal

from sqlalchemy.orm import Session

from stagepass.domain.exceptions import (
    InvalidEventError,
    NotFoundError,
    UnauthenticatedError,
)
from stagepass.infrastructure.db.models import Category, Event
from stagepass.infrastructure.repositories.event_repository import EventRepository


logger = logging.getLogger(__name__)


class CatalogService:
    """Event catalog: organizer-created events and their reference data."""

    def __init__(self, db: Session):
        self.db = db
        self.event_repository = EventRepository(db)

    def list_events(
        self,
        search: str | None = None,
        category: str | None = None,
        city: str | None = None,
    ) -> list[Event]:
        return self.event_repository.list_events(
            search=search,
            category=category,
            city=city,
        )

    def get_event(self, event_id: str) -> Event:
        event = self.event_repository.get_by_id(event_id)
        if event is None:
            raise NotFoundError("Event", event_id)
        return event

    def list_categories(self) -> list[Category]:
        return self.event_repository.list_categories()

    def create_event(
        self,
        organizer_id: str | None,
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
        if not organizer_id:
            raise UnauthenticatedError("A signed-in organizer is required to create events")

        organizer = self.event_repository.get_profile(organizer_id)
        if organizer is None:
            raise NotFoundError("User", organizer_id)
        if organizer.role != "organizer":
            raise InvalidEventError("Only organizers can create events")

        if total_seats < 0:
            raise InvalidEventError("Seat capacity cannot be negative")
        if price_start < 0:
            raise InvalidEventError("Ticket price cannot be negative")
        if price_end is not None and price_end < price_start:
            raise InvalidEventError("Price range end must not be below its start")

        if category_id and self.event_repository.get_category(category_id) is None:
            raise NotFoundError("Category", category_id)
        if artist_id and self.event_repository.get_artist(artist_id) is None:
            raise NotFoundError("Artist", artist_id)

        event = self.event_repository.create_event(
            organizer_id=organizer_id,
            title=title,
            date_time=date_time,
            venue=venue,
            city=city,
            price_start=price_start,
            price_end=price_end,
            total_seats=total_seats,
            description=description,
            image_url=image_url,
            category_id=category_id,
            artist_id=artist_id,
        )
        logger.info(
            "Event created. event_id=%s organizer_id=%s total_seats=%s",
            event.id,
            organizer_id,
            total_seats,
        )
        return event
