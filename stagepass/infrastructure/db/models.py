# stagepass/infrastructure/db/models.py

from sqlalchemy import (
    String,
    Integer,
    Float,
    Numeric,
    DateTime,
    Enum,
    Text,
    UniqueConstraint,
    CheckConstraint,
    ForeignKey,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime
from decimal import Decimal
from uuid import uuid4

from stagepass.infrastructure.db.session import Base
from stagepass.domain.state_machine import BookingStatus


class Category(Base):
    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    name: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )


class Profile(Base):
    """Organizers and attendees. Identity itself lives with the auth provider."""

    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    full_name: Mapped[str] = mapped_column(String(128), nullable=False)
    role: Mapped[str] = mapped_column(String(16), nullable=False, default="attendee")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        CheckConstraint(
            "role IN ('organizer', 'attendee')",
            name="ck_profile_role",
        ),
    )


class Artist(Base):
    __tablename__ = "artists"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    profession: Mapped[str] = mapped_column(String(64), nullable=False)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    rating: Mapped[float | None] = mapped_column(Float, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    # Written through ArtistCategory rows by ArtistRepository.replace_categories.
    categories: Mapped[list[Category]] = relationship(
        secondary="artist_categories",
        order_by=Category.name,
        viewonly=True,
    )

    @property
    def category_names(self) -> list[str]:
        return [category.name for category in self.categories]


class ArtistCategory(Base):
    __tablename__ = "artist_categories"

    artist_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("artists.id", ondelete="CASCADE"),
        primary_key=True,
    )
    category_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("categories.id", ondelete="CASCADE"),
        primary_key=True,
    )


class PortfolioItem(Base):
    """
    Media entry in an artist's portfolio. Only the reference is stored;
    the media itself lives with the blob store.
    """

    __tablename__ = "portfolio_items"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    artist_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("artists.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(128), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    media_url: Mapped[str] = mapped_column(String(512), nullable=False)
    media_type: Mapped[str] = mapped_column(String(16), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        CheckConstraint(
            "media_type IN ('image', 'video', 'link')",
            name="ck_portfolio_media_type",
        ),
    )


class Event(Base):
    """
    Bookable occasion. ``available_seats`` is the inventory ledger column
    and is only mutated through InventoryLedger.
    """

    __tablename__ = "events"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    title: Mapped[str] = mapped_column(String(128), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    date_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    venue: Mapped[str] = mapped_column(String(128), nullable=False)
    city: Mapped[str] = mapped_column(String(64), nullable=False)
    image_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    price_start: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    price_end: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    total_seats: Mapped[int] = mapped_column(Integer, nullable=False)
    available_seats: Mapped[int] = mapped_column(Integer, nullable=False)
    organizer_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("profiles.id"),
        nullable=True,
    )
    category_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("categories.id"),
        nullable=True,
    )
    artist_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("artists.id"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    category: Mapped[Category | None] = relationship()
    artist: Mapped[Artist | None] = relationship()

    __table_args__ = (
        CheckConstraint("total_seats >= 0", name="ck_event_total_seats_nonnegative"),
        CheckConstraint("available_seats >= 0", name="ck_event_available_seats_nonnegative"),
        CheckConstraint("available_seats <= total_seats", name="ck_event_available_lte_total"),
        CheckConstraint("price_start >= 0", name="ck_event_price_nonnegative"),
    )


class Booking(Base):
    """
    Booking record written only after a successful ledger reservation.
    """

    __tablename__ = "bookings"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    event_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("events.id"),
        nullable=False,
    )
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profiles.id"),
        nullable=False,
    )
    seat_count: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    status: Mapped[BookingStatus] = mapped_column(
        Enum(
            BookingStatus,
            name="booking_status",
            values_callable=lambda statuses: [status.value for status in statuses],
        ),
        nullable=False,
        default=BookingStatus.CONFIRMED,
    )
    idempotency_key: Mapped[str | None] = mapped_column(
        String(128),
        nullable=True,
    )
    booking_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    event: Mapped[Event] = relationship()

    __table_args__ = (
        UniqueConstraint(
            "idempotency_key",
            name="uq_booking_idempotency_key",
        ),
        CheckConstraint(
            "seat_count BETWEEN 1 AND 10",
            name="ck_booking_seat_count_range",
        ),
    )
