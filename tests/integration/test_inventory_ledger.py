import pytest
from sqlalchemy.exc import OperationalError

from stagepass.domain.exceptions import (
    InsufficientInventoryError,
    InternalBookingError,
    NotFoundError,
)
from stagepass.infrastructure.repositories.inventory_ledger import InventoryLedger


def test_get_availability_reads_ledger(db_session, make_event):
    event_id = make_event(available_seats=12)

    assert InventoryLedger(db_session).get_availability(event_id) == 12


def test_get_availability_unknown_event(db_session):
    with pytest.raises(NotFoundError):
        InventoryLedger(db_session).get_availability("missing-event")


def test_reserve_decrements_and_returns_remaining(db_session, make_event):
    event_id = make_event(available_seats=5)
    ledger = InventoryLedger(db_session)

    assert ledger.reserve(event_id, 3) == 2
    db_session.commit()

    assert ledger.get_availability(event_id) == 2


def test_reserve_exact_remaining_reaches_zero(db_session, make_event):
    event_id = make_event(available_seats=4)
    ledger = InventoryLedger(db_session)

    assert ledger.reserve(event_id, 4) == 0


def test_reserve_more_than_available_leaves_ledger_untouched(db_session, make_event):
    event_id = make_event(available_seats=2)
    ledger = InventoryLedger(db_session)

    with pytest.raises(InsufficientInventoryError) as exc_info:
        ledger.reserve(event_id, 3)
    db_session.rollback()

    assert exc_info.value.requested == 3
    assert ledger.get_availability(event_id) == 2


def test_reserve_unknown_event(db_session):
    with pytest.raises(NotFoundError):
        InventoryLedger(db_session).reserve("missing-event", 1)


def test_inventory_never_negative_over_a_sequence(db_session, make_event):
    event_id = make_event(available_seats=10)
    ledger = InventoryLedger(db_session)

    for requested in [4, 4, 4, 1, 3, 1, 2]:
        try:
            ledger.reserve(event_id, requested)
            db_session.commit()
        except InsufficientInventoryError:
            db_session.rollback()
        assert ledger.get_availability(event_id) >= 0

    assert ledger.get_availability(event_id) == 0


def test_release_restores_seats(db_session, make_event):
    event_id = make_event(available_seats=10)
    ledger = InventoryLedger(db_session)
    ledger.reserve(event_id, 6)
    db_session.commit()

    assert ledger.release(event_id, 6) == 10


def test_release_never_exceeds_capacity(db_session, make_event):
    event_id = make_event(available_seats=10, total_seats=10)
    ledger = InventoryLedger(db_session)

    with pytest.raises(InternalBookingError):
        ledger.release(event_id, 1)
    db_session.rollback()

    assert ledger.get_availability(event_id) == 10


def test_list_availability_skips_unknown_ids(db_session, make_event):
    first = make_event(available_seats=3, title="First")
    second = make_event(available_seats=0, title="Second")

    availability = InventoryLedger(db_session).list_availability(
        [first, second, "missing-event", first]
    )

    assert availability == {first: 3, second: 0}


def test_list_availability_empty_input(db_session):
    assert InventoryLedger(db_session).list_availability([]) == {}


def test_reserve_surfaces_lock_timeout_as_internal_error(db_session, make_event, monkeypatch):
    event_id = make_event(available_seats=5)

    def locked(*args, **kwargs):
        raise OperationalError("UPDATE events", {}, Exception("database is locked"))

    monkeypatch.setattr(db_session, "execute", locked)

    with pytest.raises(InternalBookingError):
        InventoryLedger(db_session).reserve(event_id, 1)
