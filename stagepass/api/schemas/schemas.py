from datetime import datetime
from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, Field


class BookingRequest(BaseModel):
    # Passed through unconverted; the booking policy rejects bools, floats and strings.
    seat_count: Any
    idempotency_key: str | None = Field(default=None, max_length=128)


class BookingResponse(BaseModel):
    booking_id: str
    event_id: str
    user_id: str
    seat_count: int
    unit_price: Decimal
    total_amount: Decimal
    status: str
    booking_date: datetime


class BookingEventSummary(BaseModel):
    title: str
    date_time: datetime
    venue: str
    image_url: str | None = None


class UserBookingResponse(BookingResponse):
    event: BookingEventSummary


class AvailabilityResponse(BaseModel):
    event_id: str
    available_seats: int


class CategoryResponse(BaseModel):
    id: str
    name: str


class ArtistSummary(BaseModel):
    id: str
    name: str
    profession: str
    bio: str | None = None
    image_url: str | None = None
    rating: float | None = None


class EventCreate(BaseModel):
    title: str = Field(min_length=1, max_length=128)
    description: str | None = None
    date_time: str
    venue: str = Field(min_length=1, max_length=128)
    city: str = Field(min_length=1, max_length=64)
    image_url: str | None = None
    price_start: Decimal = Field(ge=0)
    price_end: Decimal | None = Field(default=None, ge=0)
    total_seats: int = Field(ge=0)
    category_id: str | None = None
    artist_id: str | None = None


class EventResponse(BaseModel):
    id: str
    title: str
    description: str | None = None
    date_time: str
    venue: str
    city: str
    image_url: str | None = None
    price_start: Decimal
    price_end: Decimal | None = None
    total_seats: int
    available_seats: int
    organizer_id: str | None = None
    category_id: str | None = None
    category_name: str | None = None
    artist: ArtistSummary | None = None


class ArtistSave(BaseModel):
    name: str = Field(min_length=1, max_length=128)
    profession: str = Field(min_length=1, max_length=64)
    bio: str | None = None
    image_url: str | None = None
    categories: list[str] | None = None


class ArtistResponse(BaseModel):
    id: str
    name: str
    profession: str
    bio: str | None = None
    image_url: str | None = None
    rating: float | None = None
    category_names: list[str] = []


class MediaCounts(BaseModel):
    images: int
    videos: int


class ArtistDetailResponse(ArtistResponse):
    media_counts: MediaCounts


class PortfolioItemCreate(BaseModel):
    title: str = Field(min_length=1, max_length=128)
    description: str = ""
    media_url: str = Field(min_length=1, max_length=512)
    media_type: Literal["image", "video", "link"]


class PortfolioItemResponse(BaseModel):
    id: str
    artist_id: str
    title: str
    description: str
    media_url: str
    media_type: str
    created_at: datetime


class InventorySummary(BaseModel):
    event_id: str
    total_seats: int
    available_seats: int
    booked_seats: int
    booking_count: int
