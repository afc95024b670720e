from typing import Iterable

from sqlalchemy.orm import Session

from stagepass.domain.exceptions import NotFoundError
from stagepass.infrastructure.repositories.booking_repository import BookingRepository
from stagepass.infrastructure.repositories.event_repository import EventRepository
from stagepass.infrastructure.repositories.inventory_ledger import InventoryLedger


class AvailabilityService:
    """
    Read path for seat availability shown on listings and detail pages.

    Figures are the last committed ledger values and may be stale by the
    time a client books. Only BookingService enforces availability.
    """

    def __init__(self, db: Session):
        self.ledger = InventoryLedger(db)
        self.event_repository = EventRepository(db)
        self.booking_repository = BookingRepository(db)

    def get_availability(self, event_id: str) -> int:
        return self.ledger.get_availability(event_id)

    def list_availability(self, event_ids: Iterable[str]) -> dict[str, int]:
        return self.ledger.list_availability(event_ids)

    def get_inventory_summary(self, event_id: str) -> dict:
        """Ledger figures next to the recorded bookings, for reconciliation."""
        event = self.event_repository.get_by_id(event_id)
        if event is None:
            raise NotFoundError("Event", event_id)

        return {
            "event_id": event.id,
            "total_seats": event.total_seats,
            "available_seats": event.available_seats,
            "booked_seats": self.booking_repository.seats_booked_for_event(event_id),
            "booking_count": self.booking_repository.count_for_event(event_id),
        }
