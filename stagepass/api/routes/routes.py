from datetime import datetime
from pathlib import Path

from fastapi import APIRouter, Depends, Header, HTTPException, status, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session

from stagepass.infrastructure.db.session import SessionLocal
from stagepass.infrastructure.db.models import Artist, Booking, Event, PortfolioItem
from stagepass.application.artist_service import ArtistService
from stagepass.application.availability_service import AvailabilityService
from stagepass.application.booking_service import BookingService
from stagepass.application.catalog_service import CatalogService
from stagepass.api.schemas.schemas import (
    ArtistDetailResponse,
    ArtistResponse,
    ArtistSave,
    ArtistSummary,
    AvailabilityResponse,
    BookingEventSummary,
    BookingRequest,
    BookingResponse,
    CategoryResponse,
    EventCreate,
    EventResponse,
    InventorySummary,
    MediaCounts,
    PortfolioItemCreate,
    PortfolioItemResponse,
    UserBookingResponse,
)
from stagepass.domain.exceptions import RejectionReason, StagepassError


router = APIRouter()
templates = Jinja2Templates(directory=str(Path(__file__).resolve().parents[2] / "templates"))

_STATUS_BY_REASON = {
    RejectionReason.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    RejectionReason.INVALID_SEAT_COUNT: status.HTTP_422_UNPROCESSABLE_ENTITY,
    RejectionReason.SOLD_OUT: status.HTTP_409_CONFLICT,
    RejectionReason.UNAUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    RejectionReason.INTERNAL_ERROR: status.HTTP_503_SERVICE_UNAVAILABLE,
    RejectionReason.IDEMPOTENCY_CONFLICT: status.HTTP_409_CONFLICT,
    RejectionReason.INVALID_EVENT: status.HTTP_422_UNPROCESSABLE_ENTITY,
    RejectionReason.PORTFOLIO_LIMIT_REACHED: status.HTTP_409_CONFLICT,
}


def get_db():
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_current_user_id(x_user_id: str | None = Header(default=None)) -> str | None:
    # Session handling lives with the auth provider; we only receive its user id.
    if x_user_id is None or not x_user_id.strip():
        return None
    return x_user_id.strip()


def _rejection(exc: StagepassError) -> HTTPException:
    return HTTPException(
        status_code=_STATUS_BY_REASON.get(exc.reason, status.HTTP_500_INTERNAL_SERVER_ERROR),
        detail={"reason": exc.reason.value, "message": str(exc)},
    )


def _event_response(event: Event) -> EventResponse:
    artist = None
    if event.artist is not None:
        artist = ArtistSummary(
            id=event.artist.id,
            name=event.artist.name,
            profession=event.artist.profession,
            bio=event.artist.bio,
            image_url=event.artist.image_url,
            rating=event.artist.rating,
        )

    return EventResponse(
        id=event.id,
        title=event.title,
        description=event.description,
        date_time=event.date_time.isoformat(),
        venue=event.venue,
        city=event.city,
        image_url=event.image_url,
        price_start=event.price_start,
        price_end=event.price_end,
        total_seats=event.total_seats,
        available_seats=event.available_seats,
        organizer_id=event.organizer_id,
        category_id=event.category_id,
        category_name=event.category.name if event.category is not None else None,
        artist=artist,
    )


def _booking_response(booking: Booking) -> BookingResponse:
    return BookingResponse(
        booking_id=booking.id,
        event_id=booking.event_id,
        user_id=booking.user_id,
        seat_count=booking.seat_count,
        unit_price=booking.unit_price,
        total_amount=booking.total_amount,
        status=booking.status.value,
        booking_date=booking.booking_date,
    )


def _user_booking_response(booking: Booking) -> UserBookingResponse:
    return UserBookingResponse(
        **_booking_response(booking).model_dump(),
        event=BookingEventSummary(
            title=booking.event.title,
            date_time=booking.event.date_time,
            venue=booking.event.venue,
            image_url=booking.event.image_url,
        ),
    )


def _artist_response(artist: Artist) -> ArtistResponse:
    return ArtistResponse(
        id=artist.id,
        name=artist.name,
        profession=artist.profession,
        bio=artist.bio,
        image_url=artist.image_url,
        rating=artist.rating,
        category_names=artist.category_names,
    )


def _portfolio_item_response(item: PortfolioItem) -> PortfolioItemResponse:
    return PortfolioItemResponse(
        id=item.id,
        artist_id=item.artist_id,
        title=item.title,
        description=item.description,
        media_url=item.media_url,
        media_type=item.media_type,
        created_at=item.created_at,
    )


def _parse_event_time(value: str) -> datetime:
    # fromisoformat only accepts a trailing "Z" from Python 3.11 on.
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


@router.get("/", response_class=HTMLResponse)
def landing_page(
    request: Request,
    search: str | None = None,
    category: str | None = None,
    city: str | None = None,
    db: Session = Depends(get_db),
):
    catalog = CatalogService(db)
    events = catalog.list_events(search=search, category=category, city=city)

    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "events": events,
            "categories": catalog.list_categories(),
            "search": search or "",
            "selected_category": category or "all",
        },
    )


@router.get("/health")
def health():
    return {"message": "Stagepass booking engine is running"}


@router.get("/categories", response_model=list[CategoryResponse])
def list_categories(db: Session = Depends(get_db)):
    return [
        CategoryResponse(id=category.id, name=category.name)
        for category in CatalogService(db).list_categories()
    ]


@router.get("/events", response_model=list[EventResponse])
def list_events(
    search: str | None = None,
    category: str | None = None,
    city: str | None = None,
    db: Session = Depends(get_db),
):
    events = CatalogService(db).list_events(search=search, category=category, city=city)
    return [_event_response(event) for event in events]


@router.post("/events", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
def create_event(
    request: EventCreate,
    user_id: str | None = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    try:
        event_time = _parse_event_time(request.date_time)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid date_time format. Use ISO format.",
        ) from exc

    try:
        event = CatalogService(db).create_event(
            organizer_id=user_id,
            title=request.title,
            description=request.description,
            date_time=event_time,
            venue=request.venue,
            city=request.city,
            image_url=request.image_url,
            price_start=request.price_start,
            price_end=request.price_end,
            total_seats=request.total_seats,
            category_id=request.category_id,
            artist_id=request.artist_id,
        )
    except StagepassError as exc:
        raise _rejection(exc) from exc

    return _event_response(event)


@router.get("/events/{event_id}", response_model=EventResponse)
def get_event(event_id: str, db: Session = Depends(get_db)):
    try:
        event = CatalogService(db).get_event(event_id)
    except StagepassError as exc:
        raise _rejection(exc) from exc
    return _event_response(event)


@router.get("/events/{event_id}/availability", response_model=AvailabilityResponse)
def get_availability(event_id: str, db: Session = Depends(get_db)):
    try:
        available = AvailabilityService(db).get_availability(event_id)
    except StagepassError as exc:
        raise _rejection(exc) from exc
    return AvailabilityResponse(event_id=event_id, available_seats=available)


@router.get("/availability", response_model=dict[str, int])
def list_availability(event_ids: str = "", db: Session = Depends(get_db)):
    ids = [event_id.strip() for event_id in event_ids.split(",") if event_id.strip()]
    return AvailabilityService(db).list_availability(ids)


@router.post(
    "/events/{event_id}/bookings",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
)
def submit_booking(
    event_id: str,
    request: BookingRequest,
    user_id: str | None = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    service = BookingService(db)

    try:
        booking = service.submit_booking(
            event_id=event_id,
            user_id=user_id,
            seat_count=request.seat_count,
            idempotency_key=request.idempotency_key,
        )
    except StagepassError as exc:
        raise _rejection(exc) from exc

    return _booking_response(booking)


@router.get("/me/bookings", response_model=list[UserBookingResponse])
def list_my_bookings(
    user_id: str | None = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    try:
        bookings = BookingService(db).list_user_bookings(user_id)
    except StagepassError as exc:
        raise _rejection(exc) from exc

    return [_user_booking_response(booking) for booking in bookings]


@router.get("/me/bookings/{booking_id}", response_model=UserBookingResponse)
def get_my_booking(
    booking_id: str,
    user_id: str | None = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    try:
        booking = BookingService(db).get_user_booking(user_id, booking_id)
    except StagepassError as exc:
        raise _rejection(exc) from exc

    return _user_booking_response(booking)


@router.get("/inventory/{event_id}", response_model=InventorySummary)
def get_inventory(event_id: str, db: Session = Depends(get_db)):
    try:
        summary = AvailabilityService(db).get_inventory_summary(event_id)
    except StagepassError as exc:
        raise _rejection(exc) from exc
    return InventorySummary(**summary)


# -----------------------------
# Artists
# -----------------------------
@router.get("/artists", response_model=list[ArtistResponse])
def list_artists(
    search: str | None = None,
    category: str | None = None,
    db: Session = Depends(get_db),
):
    artists = ArtistService(db).list_artists(search=search, category=category)
    return [_artist_response(artist) for artist in artists]


@router.post("/artists", response_model=ArtistResponse, status_code=status.HTTP_201_CREATED)
def create_artist(
    request: ArtistSave,
    user_id: str | None = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    try:
        artist = ArtistService(db).save_artist(
            user_id=user_id,
            name=request.name,
            profession=request.profession,
            bio=request.bio,
            image_url=request.image_url,
            categories=request.categories,
        )
    except StagepassError as exc:
        raise _rejection(exc) from exc
    return _artist_response(artist)


@router.get("/artists/{artist_id}", response_model=ArtistDetailResponse)
def get_artist(artist_id: str, db: Session = Depends(get_db)):
    service = ArtistService(db)
    try:
        artist = service.get_artist(artist_id)
    except StagepassError as exc:
        raise _rejection(exc) from exc

    return ArtistDetailResponse(
        **_artist_response(artist).model_dump(),
        media_counts=MediaCounts(**service.get_media_counts(artist_id)),
    )


@router.put("/artists/{artist_id}", response_model=ArtistResponse)
def update_artist(
    artist_id: str,
    request: ArtistSave,
    user_id: str | None = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    try:
        artist = ArtistService(db).save_artist(
            user_id=user_id,
            artist_id=artist_id,
            name=request.name,
            profession=request.profession,
            bio=request.bio,
            image_url=request.image_url,
            categories=request.categories,
        )
    except StagepassError as exc:
        raise _rejection(exc) from exc
    return _artist_response(artist)


@router.get("/artists/{artist_id}/portfolio", response_model=list[PortfolioItemResponse])
def list_portfolio(artist_id: str, db: Session = Depends(get_db)):
    try:
        items = ArtistService(db).list_portfolio(artist_id)
    except StagepassError as exc:
        raise _rejection(exc) from exc
    return [_portfolio_item_response(item) for item in items]


@router.post(
    "/artists/{artist_id}/portfolio",
    response_model=PortfolioItemResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_portfolio_item(
    artist_id: str,
    request: PortfolioItemCreate,
    user_id: str | None = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    try:
        item = ArtistService(db).add_portfolio_item(
            user_id=user_id,
            artist_id=artist_id,
            title=request.title,
            description=request.description,
            media_url=request.media_url,
            media_type=request.media_type,
        )
    except StagepassError as exc:
        raise _rejection(exc) from exc
    return _portfolio_item_response(item)
