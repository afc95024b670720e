from decimal import Decimal

import pytest

from stagepass.domain.booking_policy import (
    MAX_SEATS_PER_BOOKING,
    compute_total,
    validate_seat_count,
)
from stagepass.domain.exceptions import InvalidSeatCountError, RejectionReason


@pytest.mark.parametrize("seat_count", [1, 5, MAX_SEATS_PER_BOOKING])
def test_accepts_seat_counts_in_range(seat_count):
    assert validate_seat_count(seat_count) == seat_count


@pytest.mark.parametrize("seat_count", [0, -1, 11, 100])
def test_rejects_seat_counts_out_of_range(seat_count):
    with pytest.raises(InvalidSeatCountError) as exc_info:
        validate_seat_count(seat_count)

    assert exc_info.value.reason is RejectionReason.INVALID_SEAT_COUNT


@pytest.mark.parametrize("seat_count", [True, 2.0, "3", None])
def test_rejects_non_integer_seat_counts(seat_count):
    with pytest.raises(InvalidSeatCountError):
        validate_seat_count(seat_count)


def test_total_uses_unit_price_times_seats():
    assert compute_total(1, Decimal("25")) == Decimal("25.00")
    assert compute_total(3, Decimal("19.99")) == Decimal("59.97")
