# stagepass/infrastructure/repositories/inventory_ledger.py

import logging
from typing import Iterable

from sqlalchemy.orm import Session
from sqlalchemy import select, update
from sqlalchemy.exc import OperationalError, TimeoutError as SQLAlchemyTimeoutError

from stagepass.infrastructure.db.models import Event
from stagepass.domain.exceptions import (
    InsufficientInventoryError,
    InternalBookingError,
    NotFoundError,
)


logger = logging.getLogger(__name__)


def is_storage_degraded(exc: Exception) -> bool:
    return isinstance(exc, (OperationalError, SQLAlchemyTimeoutError))


class InventoryLedger:
    """
    Authoritative per-event count of bookable seats.

    Every mutation is a single conditional UPDATE so two concurrent
    reservations can never both observe the same remaining seats.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_availability(self, event_id: str) -> int:
        stmt = select(Event.available_seats).where(Event.id == event_id)
        available = self.db.execute(stmt).scalar_one_or_none()

        if available is None:
            raise NotFoundError("Event", event_id)

        return available

    def list_availability(self, event_ids: Iterable[str]) -> dict[str, int]:
        ids = list(dict.fromkeys(event_ids))
        if not ids:
            return {}

        stmt = select(Event.id, Event.available_seats).where(Event.id.in_(ids))
        return {row.id: row.available_seats for row in self.db.execute(stmt)}

    def reserve(self, event_id: str, seat_count: int) -> int:
        """
        Compare-and-decrement. Returns the new available count.

        The caller owns the transaction and must commit or roll back.
        """
        stmt = (
            update(Event)
            .where(Event.id == event_id)
            .where(Event.available_seats >= seat_count)
            .values(available_seats=Event.available_seats - seat_count)
            .returning(Event.available_seats)
            .execution_options(synchronize_session=False)
        )

        try:
            remaining = self.db.execute(stmt).scalar_one_or_none()
        except Exception as exc:
            if not is_storage_degraded(exc):
                raise
            logger.warning("Ledger reserve timed out. event_id=%s seat_count=%s", event_id, seat_count)
            raise InternalBookingError(
                f"Could not reserve seats for event {event_id}: storage unavailable"
            ) from exc

        if remaining is None:
            # Nothing matched: distinguish a missing event from a short ledger.
            self.get_availability(event_id)
            raise InsufficientInventoryError(event_id, seat_count)

        return remaining

    def release(self, event_id: str, seat_count: int) -> int:
        """
        Compensating increment for a reservation that could not be recorded.
        Never lifts availability above the event's capacity.
        """
        stmt = (
            update(Event)
            .where(Event.id == event_id)
            .where(Event.available_seats + seat_count <= Event.total_seats)
            .values(available_seats=Event.available_seats + seat_count)
            .returning(Event.available_seats)
            .execution_options(synchronize_session=False)
        )

        remaining = self.db.execute(stmt).scalar_one_or_none()

        if remaining is None:
            self.get_availability(event_id)
            raise InternalBookingError(
                f"Releasing {seat_count} seats would exceed capacity of event {event_id}"
            )

        return remaining
