import logging
from dataclasses import dataclass, field
from decimal import Decimal

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from stagepass.domain.booking_policy import compute_total, validate_seat_count
from stagepass.domain.exceptions import (
    IdempotencyConflictError,
    InternalBookingError,
    NotFoundError,
    RejectionReason,
    StagepassError,
    UnauthenticatedError,
)
from stagepass.domain.state_machine import (
    BookingAttemptState,
    BookingAttemptStateMachine,
    BookingStatus,
)
from stagepass.infrastructure.db.models import Booking
from stagepass.infrastructure.repositories.booking_repository import BookingRepository
from stagepass.infrastructure.repositories.event_repository import EventRepository
from stagepass.infrastructure.repositories.inventory_ledger import InventoryLedger


logger = logging.getLogger(__name__)

# Status written for new bookings. Seats are paid for and held at commit time.
INITIAL_BOOKING_STATUS = BookingStatus.CONFIRMED


@dataclass
class BookingAttempt:
    event_id: str
    user_id: str | None
    seat_count: int
    idempotency_key: str | None = None
    unit_price: Decimal | None = None
    state: BookingAttemptState = BookingAttemptState.REQUESTED
    rejection: RejectionReason | None = None
    history: list[BookingAttemptState] = field(default_factory=list)


class BookingService:
    """
    Application service running the booking transaction:
    validate, reserve on the ledger, record the booking,
    and compensate the ledger if recording fails.
    """

    def __init__(self, db: Session):
        self.db = db
        self.booking_repository = BookingRepository(db)
        self.event_repository = EventRepository(db)
        self.ledger = InventoryLedger(db)
        self.last_attempt: BookingAttempt | None = None

    def submit_booking(
        self,
        event_id: str,
        user_id: str | None,
        seat_count: int,
        idempotency_key: str | None = None,
    ) -> Booking:
        attempt = BookingAttempt(
            event_id=event_id,
            user_id=user_id,
            seat_count=seat_count,
            idempotency_key=idempotency_key,
        )
        self.last_attempt = attempt

        self._transition(attempt, BookingAttemptState.VALIDATING)
        try:
            replay = self._validate(attempt)
        except StagepassError as exc:
            self._reject(attempt, exc)
            raise
        except SQLAlchemyError as exc:
            self.db.rollback()
            error = InternalBookingError("Booking validation failed: storage unavailable")
            self._reject(attempt, error)
            raise error from exc

        if replay is not None:
            self._transition(attempt, BookingAttemptState.COMMITTED)
            logger.info(
                "Idempotent replay returned existing booking. booking_id=%s idempotency_key=%s",
                replay.id,
                idempotency_key,
            )
            return replay

        self._reserve(attempt)
        return self._record(attempt)

    def list_user_bookings(self, user_id: str | None) -> list[Booking]:
        if not user_id:
            raise UnauthenticatedError("A signed-in user is required to list bookings")
        return self.booking_repository.list_for_user(user_id)

    def get_user_booking(self, user_id: str | None, booking_id: str) -> Booking:
        if not user_id:
            raise UnauthenticatedError("A signed-in user is required to view bookings")
        booking = self.booking_repository.get_by_id(booking_id)
        # Other users' bookings are reported as missing.
        if booking is None or booking.user_id != user_id:
            raise NotFoundError("Booking", booking_id)
        return booking

    # -----------------------------
    # Steps
    # -----------------------------
    def _validate(self, attempt: BookingAttempt) -> Booking | None:
        validate_seat_count(attempt.seat_count)

        if not attempt.user_id:
            raise UnauthenticatedError()

        if self.event_repository.get_profile(attempt.user_id) is None:
            raise NotFoundError("User", attempt.user_id)

        if attempt.idempotency_key:
            existing = self.booking_repository.get_by_idempotency_key(attempt.idempotency_key)
            if existing is not None:
                self._ensure_same_request(existing, attempt)
                return existing

        event = self.event_repository.get_by_id(attempt.event_id)
        if event is None:
            raise NotFoundError("Event", attempt.event_id)

        # Price is captured now and never recomputed for this booking.
        attempt.unit_price = event.price_start
        return None

    def _reserve(self, attempt: BookingAttempt) -> int:
        self._transition(attempt, BookingAttemptState.RESERVING)
        try:
            remaining = self.ledger.reserve(attempt.event_id, attempt.seat_count)
            self.db.commit()
        except StagepassError as exc:
            self.db.rollback()
            self._reject(attempt, exc)
            raise
        except SQLAlchemyError as exc:
            self.db.rollback()
            error = InternalBookingError(
                f"Could not reserve seats for event {attempt.event_id}"
            )
            self._reject(attempt, error)
            raise error from exc

        logger.info(
            "Reserved seats. event_id=%s seat_count=%s remaining=%s",
            attempt.event_id,
            attempt.seat_count,
            remaining,
        )
        return remaining

    def _record(self, attempt: BookingAttempt) -> Booking:
        self._transition(attempt, BookingAttemptState.RECORDING)
        try:
            booking = self.booking_repository.create_booking(
                user_id=attempt.user_id,
                event_id=attempt.event_id,
                seat_count=attempt.seat_count,
                unit_price=attempt.unit_price,
                total_amount=compute_total(attempt.seat_count, attempt.unit_price),
                idempotency_key=attempt.idempotency_key,
                status=INITIAL_BOOKING_STATUS,
            )
            self.db.commit()
        except Exception as exc:
            self.db.rollback()
            return self._compensate(attempt, exc)
        except BaseException as exc:
            # Interrupted after the reservation committed; give the seats back and re-raise.
            self.db.rollback()
            self._release_reservation(attempt, exc)
            self._reject(
                attempt,
                InternalBookingError(f"Booking for event {attempt.event_id} was interrupted"),
            )
            raise

        self._transition(attempt, BookingAttemptState.COMMITTED)
        logger.info(
            "Booking committed. booking_id=%s event_id=%s user_id=%s seat_count=%s",
            booking.id,
            attempt.event_id,
            attempt.user_id,
            attempt.seat_count,
        )
        return booking

    def _compensate(self, attempt: BookingAttempt, cause: Exception) -> Booking:
        self._release_reservation(attempt, cause)

        # A concurrent retry with the same key won the unique constraint.
        if isinstance(cause, IntegrityError) and attempt.idempotency_key:
            winner = self.booking_repository.get_by_idempotency_key(attempt.idempotency_key)
            if winner is not None:
                try:
                    self._ensure_same_request(winner, attempt)
                except IdempotencyConflictError as exc:
                    self._reject(attempt, exc)
                    raise
                self._transition(attempt, BookingAttemptState.COMMITTED)
                return winner

        error = InternalBookingError(
            f"Booking for event {attempt.event_id} could not be recorded"
        )
        self._reject(attempt, error)
        raise error from cause

    def _release_reservation(self, attempt: BookingAttempt, cause: BaseException) -> None:
        self._transition(attempt, BookingAttemptState.COMPENSATING)
        logger.warning(
            "Recording failed after reservation, releasing seats. event_id=%s seat_count=%s error=%s",
            attempt.event_id,
            attempt.seat_count,
            cause,
        )

        try:
            self.ledger.release(attempt.event_id, attempt.seat_count)
            self.db.commit()
        except Exception as exc:
            self.db.rollback()
            logger.exception(
                "Compensation failed, seats remain reserved. event_id=%s seat_count=%s",
                attempt.event_id,
                attempt.seat_count,
            )
            error = InternalBookingError(
                f"Booking for event {attempt.event_id} failed and seats could not be released"
            )
            self._reject(attempt, error)
            raise error from exc

    # -----------------------------
    # Helpers
    # -----------------------------
    @staticmethod
    def _ensure_same_request(existing: Booking, attempt: BookingAttempt) -> None:
        if (
            existing.user_id != attempt.user_id
            or existing.event_id != attempt.event_id
            or existing.seat_count != attempt.seat_count
        ):
            raise IdempotencyConflictError(
                f"Idempotency key {attempt.idempotency_key} was already used for a different booking"
            )

    def _reject(self, attempt: BookingAttempt, error: StagepassError) -> None:
        attempt.rejection = error.reason
        self._transition(attempt, BookingAttemptState.REJECTED)
        logger.warning(
            "Booking rejected. reason=%s event_id=%s user_id=%s seat_count=%s",
            error.reason.value,
            attempt.event_id,
            attempt.user_id,
            attempt.seat_count,
        )

    def _transition(self, attempt: BookingAttempt, to_state: BookingAttemptState) -> None:
        BookingAttemptStateMachine.validate_transition(attempt.state, to_state)
        attempt.history.append(attempt.state)
        attempt.state = to_state
