import threading
from concurrent.futures import ThreadPoolExecutor

from stagepass.application.booking_service import BookingService
from stagepass.domain.exceptions import InsufficientInventoryError
from stagepass.infrastructure.db.session import SessionLocal
from stagepass.infrastructure.repositories.booking_repository import BookingRepository
from stagepass.infrastructure.repositories.inventory_ledger import InventoryLedger


def _run_concurrently(requests):
    """Fire every (event_id, user_id, seat_count, key) request at once, one session each."""
    barrier = threading.Barrier(len(requests))

    def book(request):
        event_id, user_id, seat_count, idempotency_key = request
        db = SessionLocal()
        try:
            barrier.wait()
            booking = BookingService(db).submit_booking(
                event_id, user_id, seat_count, idempotency_key=idempotency_key
            )
            return "booked", booking.id
        except InsufficientInventoryError:
            return "sold_out", None
        finally:
            db.close()

    with ThreadPoolExecutor(max_workers=len(requests)) as executor:
        return list(executor.map(book, requests))


def _ledger_and_bookings(event_id):
    db = SessionLocal()
    try:
        return (
            InventoryLedger(db).get_availability(event_id),
            BookingRepository(db).seats_booked_for_event(event_id),
            BookingRepository(db).count_for_event(event_id),
        )
    finally:
        db.close()


def test_two_bookers_racing_for_five_seats(make_event, make_profile):
    event_id = make_event(available_seats=5)
    requests = [
        (event_id, make_profile(), 3, None),
        (event_id, make_profile(), 3, None),
    ]

    outcomes = sorted(result for result, _ in _run_concurrently(requests))

    assert outcomes == ["booked", "sold_out"]
    assert _ledger_and_bookings(event_id) == (2, 3, 1)


def test_fifty_requests_for_a_hundred_seats(make_event, make_profile):
    event_id = make_event(available_seats=100)
    user_id = make_profile()
    requests = [(event_id, user_id, 3, None) for _ in range(50)]

    outcomes = [result for result, _ in _run_concurrently(requests)]

    assert outcomes.count("booked") == 33
    assert outcomes.count("sold_out") == 17
    available, seats_booked, booking_count = _ledger_and_bookings(event_id)
    assert available == 1
    assert seats_booked == 99
    assert booking_count == 33


def test_same_idempotency_key_racing_books_once(make_event, make_profile):
    event_id = make_event(available_seats=20)
    user_id = make_profile()
    requests = [(event_id, user_id, 4, "checkout-42") for _ in range(4)]

    results = _run_concurrently(requests)

    assert {result for result, _ in results} == {"booked"}
    assert len({booking_id for _, booking_id in results}) == 1
    assert _ledger_and_bookings(event_id) == (16, 4, 1)
