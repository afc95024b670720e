from decimal import Decimal, ROUND_HALF_UP

from stagepass.domain.exceptions import InvalidSeatCountError


MIN_SEATS_PER_BOOKING = 1
MAX_SEATS_PER_BOOKING = 10

_CENTS = Decimal("0.01")


def validate_seat_count(seat_count) -> int:
    # bool is an int subclass; True must not book one seat.
    if isinstance(seat_count, bool) or not isinstance(seat_count, int):
        raise InvalidSeatCountError(
            seat_count, MIN_SEATS_PER_BOOKING, MAX_SEATS_PER_BOOKING
        )
    if not MIN_SEATS_PER_BOOKING <= seat_count <= MAX_SEATS_PER_BOOKING:
        raise InvalidSeatCountError(
            seat_count, MIN_SEATS_PER_BOOKING, MAX_SEATS_PER_BOOKING
        )
    return seat_count


def compute_total(seat_count: int, unit_price: Decimal) -> Decimal:
    """Total charged for a booking, using the unit price captured at submission."""
    return (Decimal(unit_price) * seat_count).quantize(_CENTS, rounding=ROUND_HALF_UP)
