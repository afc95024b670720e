from enum import Enum


class RejectionReason(str, Enum):
    NOT_FOUND = "not_found"
    INVALID_SEAT_COUNT = "invalid_seat_count"
    SOLD_OUT = "sold_out"
    UNAUTHENTICATED = "unauthenticated"
    INTERNAL_ERROR = "internal_error"
    IDEMPOTENCY_CONFLICT = "idempotency_conflict"
    INVALID_EVENT = "invalid_event"
    PORTFOLIO_LIMIT_REACHED = "portfolio_limit_reached"


class StagepassError(Exception):
    """
    Base exception for all domain-level errors
    inside the Stagepass booking engine.

    Every subclass carries a typed ``reason`` so callers can
    handle rejections without parsing messages.
    """

    reason: RejectionReason = RejectionReason.INTERNAL_ERROR


class NotFoundError(StagepassError):
    """Raised when a referenced event, user or booking does not exist."""

    reason = RejectionReason.NOT_FOUND

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: {entity_id}")


class InvalidSeatCountError(StagepassError):
    reason = RejectionReason.INVALID_SEAT_COUNT

    def __init__(self, seat_count, minimum: int, maximum: int):
        self.seat_count = seat_count
        super().__init__(
            f"Seat count must be between {minimum} and {maximum}, got {seat_count!r}"
        )


class InsufficientInventoryError(StagepassError):
    """Raised when the ledger cannot cover the requested seats."""

    reason = RejectionReason.SOLD_OUT

    def __init__(self, event_id: str, requested: int):
        self.event_id = event_id
        self.requested = requested
        super().__init__(
            f"Not enough seats left for event {event_id} (requested {requested})"
        )


class UnauthenticatedError(StagepassError):
    reason = RejectionReason.UNAUTHENTICATED

    def __init__(self, message: str = "A signed-in user is required to book seats"):
        super().__init__(message)


class InternalBookingError(StagepassError):
    """Raised on storage or transport failure. Safe to retry with the same idempotency key."""

    reason = RejectionReason.INTERNAL_ERROR


class IdempotencyConflictError(StagepassError):
    """Raised when an idempotency key is reused for a different request."""

    reason = RejectionReason.IDEMPOTENCY_CONFLICT


class InvalidEventError(StagepassError):
    """Raised when event details fail catalog validation."""

    reason = RejectionReason.INVALID_EVENT


class InvalidStateTransitionError(StagepassError):
    """
    Raised when an illegal booking attempt transition is attempted.
    """

    def __init__(self, from_state: str, to_state: str):
        self.from_state = from_state
        self.to_state = to_state

        message = (
            f"Illegal state transition attempted: "
            f"{from_state} -> {to_state}"
        )
        super().__init__(message)


class PortfolioLimitReachedError(StagepassError):
    """Raised when an artist already holds the maximum media of one type."""

    reason = RejectionReason.PORTFOLIO_LIMIT_REACHED

    def __init__(self, artist_id: str, media_type: str, limit: int):
        self.artist_id = artist_id
        self.media_type = media_type
        self.limit = limit
        super().__init__(
            f"Artist {artist_id} already has {limit} {media_type} items in the portfolio"
        )
