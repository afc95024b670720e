# stagepass/infrastructure/repositories/booking_repository.py

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy.orm import Session, joinedload
from sqlalchemy import func, select

from stagepass.infrastructure.db.models import Booking
from stagepass.domain.state_machine import BookingStatus


class BookingRepository:

    def __init__(self, db: Session):
        self.db = db

    def get_by_idempotency_key(
        self,
        idempotency_key: str,
    ) -> Booking | None:
        stmt = select(Booking).where(
            Booking.idempotency_key == idempotency_key
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def get_by_id(
        self,
        booking_id: str,
    ) -> Booking | None:
        stmt = (
            select(Booking)
            .options(joinedload(Booking.event))
            .where(Booking.id == booking_id)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def list_for_user(self, user_id: str) -> list[Booking]:
        stmt = (
            select(Booking)
            .options(joinedload(Booking.event))
            .where(Booking.user_id == user_id)
            .order_by(Booking.booking_date.desc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def count_for_event(self, event_id: str) -> int:
        stmt = select(func.count()).select_from(Booking).where(Booking.event_id == event_id)
        return self.db.execute(stmt).scalar_one()

    def seats_booked_for_event(self, event_id: str) -> int:
        stmt = (
            select(func.coalesce(func.sum(Booking.seat_count), 0))
            .where(Booking.event_id == event_id)
            .where(Booking.status != BookingStatus.CANCELLED)
        )
        return self.db.execute(stmt).scalar_one()

    def create_booking(
        self,
        user_id: str,
        event_id: str,
        seat_count: int,
        unit_price: Decimal,
        total_amount: Decimal,
        idempotency_key: str | None,
        status: BookingStatus = BookingStatus.CONFIRMED,
    ) -> Booking:
        booking = Booking(
            user_id=user_id,
            event_id=event_id,
            seat_count=seat_count,
            unit_price=unit_price,
            total_amount=total_amount,
            idempotency_key=idempotency_key,
            status=status,
            booking_date=datetime.now(timezone.utc),
        )

        self.db.add(booking)
        self.db.flush()
        return booking
