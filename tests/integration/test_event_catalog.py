from decimal import Decimal

import pytest

from stagepass.application.catalog_service import CatalogService
from stagepass.domain.exceptions import InvalidEventError, NotFoundError


def _event_payload(**overrides):
    payload = {
        "title": "Lantern Nights",
        "date_time": "2026-12-05T18:30:00+00:00",
        "venue": "Old Mill Studio",
        "city": "Pune",
        "price_start": "15.00",
        "price_end": "40.00",
        "total_seats": 120,
    }
    payload.update(overrides)
    return payload


def test_list_events_filters(client, make_event, make_category):
    music = make_category("Music")
    dance = make_category("Dance")
    make_event(title="Jazz at the Pier", city="Goa", category_id=music, days_from_now=3)
    make_event(title="Street Beats", venue="Pier Warehouse", city="Mumbai", category_id=dance, days_from_now=1)
    make_event(title="Poetry Slam", city="Delhi", days_from_now=2)

    everything = client.get("/events").json()
    assert [event["title"] for event in everything] == ["Street Beats", "Poetry Slam", "Jazz at the Pier"]

    searched = client.get("/events", params={"search": "pier"}).json()
    assert {event["title"] for event in searched} == {"Jazz at the Pier", "Street Beats"}

    by_category = client.get("/events", params={"category": "Music"}).json()
    assert [event["title"] for event in by_category] == ["Jazz at the Pier"]
    assert by_category[0]["category_name"] == "Music"

    assert len(client.get("/events", params={"category": "all"}).json()) == 3

    by_city = client.get("/events", params={"city": "Delhi"}).json()
    assert [event["title"] for event in by_city] == ["Poetry Slam"]


def test_get_event_includes_artist_and_seats(client, make_event, make_artist):
    artist_id = make_artist(name="Maya Fernandes")
    event_id = make_event(available_seats=42, artist_id=artist_id)

    response = client.get(f"/events/{event_id}")

    assert response.status_code == 200
    body = response.json()
    assert body["available_seats"] == 42
    assert body["artist"]["name"] == "Maya Fernandes"


def test_get_unknown_event(client):
    response = client.get("/events/missing-event")

    assert response.status_code == 404
    assert response.json()["detail"]["reason"] == "not_found"


def test_organizer_creates_event(client, make_profile, make_category):
    organizer_id = make_profile(role="organizer")
    category_id = make_category("Dance")

    response = client.post(
        "/events",
        json=_event_payload(category_id=category_id),
        headers={"X-User-Id": organizer_id},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["total_seats"] == 120
    assert body["available_seats"] == 120
    assert body["organizer_id"] == organizer_id
    assert body["category_name"] == "Dance"

    availability = client.get(f"/events/{body['id']}/availability").json()
    assert availability["available_seats"] == 120


def test_attendee_cannot_create_event(client, make_profile):
    response = client.post(
        "/events",
        json=_event_payload(),
        headers={"X-User-Id": make_profile(role="attendee")},
    )

    assert response.status_code == 422
    assert response.json()["detail"]["reason"] == "invalid_event"


def test_create_event_requires_user(client):
    response = client.post("/events", json=_event_payload())

    assert response.status_code == 401


def test_create_event_rejects_bad_date(client, make_profile):
    response = client.post(
        "/events",
        json=_event_payload(date_time="next friday"),
        headers={"X-User-Id": make_profile(role="organizer")},
    )

    assert response.status_code == 400


def test_create_event_accepts_utc_z_suffix(client, make_profile):
    response = client.post(
        "/events",
        json=_event_payload(date_time="2026-12-05T18:30:00.000Z"),
        headers={"X-User-Id": make_profile(role="organizer")},
    )

    assert response.status_code == 201
    assert response.json()["date_time"].startswith("2026-12-05T18:30:00")


def test_price_range_must_not_be_inverted(db_session, make_profile):
    organizer_id = make_profile(role="organizer")

    with pytest.raises(InvalidEventError):
        CatalogService(db_session).create_event(
            organizer_id=organizer_id,
            title="Inverted",
            date_time=None,
            venue="Hall",
            city="Pune",
            price_start=Decimal("50"),
            price_end=Decimal("20"),
            total_seats=10,
        )


def test_unknown_category_reference(db_session, make_profile):
    with pytest.raises(NotFoundError) as exc_info:
        CatalogService(db_session).create_event(
            organizer_id=make_profile(role="organizer"),
            title="Orphan",
            date_time=None,
            venue="Hall",
            city="Pune",
            price_start=Decimal("10"),
            total_seats=10,
            category_id="missing-category",
        )

    assert exc_info.value.entity == "Category"


def test_categories_listed_by_name(client, make_category):
    make_category("Theater")
    make_category("Comedy")

    response = client.get("/categories")

    assert [category["name"] for category in response.json()] == ["Comedy", "Theater"]


def test_landing_page_shows_seats(client, make_event):
    make_event(available_seats=7, title="Open Air Sessions")
    make_event(available_seats=0, title="Already Gone")

    response = client.get("/")

    assert response.status_code == 200
    assert "Open Air Sessions" in response.text
    assert "7 seats left" in response.text
    assert "Sold out" in response.text
