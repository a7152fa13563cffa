"""Listing-related database models."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stayfinder.database import Base, utcnow


class Listing(Base):
    """Property listing model."""

    __tablename__ = "listings"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    host_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Basic Info
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    property_type: Mapped[str] = mapped_column(
        String(30), nullable=False, index=True
    )  # apartment, house, villa, condo, cabin, ...
    room_type: Mapped[str] = mapped_column(
        String(20), nullable=False
    )  # entire_place, private_room, shared_room
    amenities: Mapped[list[str]] = mapped_column(JSON, default=list)
    images: Mapped[list[str]] = mapped_column(JSON, default=list)

    # Location
    address: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    state: Mapped[str] = mapped_column(String(100), nullable=False)
    country: Mapped[str] = mapped_column(String(100), nullable=False)
    zip_code: Mapped[str] = mapped_column(String(20), nullable=False)
    latitude: Mapped[Decimal | None] = mapped_column(Numeric(10, 8))
    longitude: Mapped[Decimal | None] = mapped_column(Numeric(11, 8))

    # Capacity
    max_guests: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    bedrooms: Mapped[int] = mapped_column(Integer, default=0)
    beds: Mapped[int] = mapped_column(Integer, default=1)
    bathrooms: Mapped[Decimal] = mapped_column(Numeric(3, 1), default=Decimal("1"))

    # Pricing
    base_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="USD")
    cleaning_fee: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"))
    weekly_discount: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=Decimal("0"))
    monthly_discount: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=Decimal("0"))

    # Availability rules
    min_nights: Mapped[int] = mapped_column(Integer, default=1)
    max_nights: Mapped[int] = mapped_column(Integer, default=365)
    instant_book: Mapped[bool] = mapped_column(Boolean, default=False)
    check_in_time: Mapped[str] = mapped_column(String(5), default="15:00")
    check_out_time: Mapped[str] = mapped_column(String(5), default="11:00")
    cancellation_policy: Mapped[str] = mapped_column(
        String(20), default="moderate"
    )  # flexible, moderate, strict, super_strict

    # Status
    status: Mapped[str] = mapped_column(
        String(20), default="draft", index=True
    )  # draft, active, inactive, suspended

    # Statistics
    view_count: Mapped[int] = mapped_column(Integer, default=0)
    average_rating: Mapped[Decimal] = mapped_column(Numeric(2, 1), default=Decimal("0"))
    review_count: Mapped[int] = mapped_column(Integer, default=0)
    total_bookings: Mapped[int] = mapped_column(Integer, default=0)

    # Bumped on every ORM update; guards booking creation against concurrent writers
    availability_version: Mapped[int] = mapped_column(Integer, nullable=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    # Relationships
    blocked_dates: Mapped[list["BlockedDate"]] = relationship(
        "BlockedDate",
        back_populates="listing",
        cascade="all, delete-orphan",
        order_by="BlockedDate.start_date",
        lazy="selectin",
    )

    __mapper_args__ = {"version_id_col": availability_version}

    @property
    def is_bookable(self) -> bool:
        return self.status == "active"


class BlockedDate(Base):
    """A closed date range during which a listing cannot be booked."""

    __tablename__ = "listing_blocked_dates"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    listing_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("listings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    end_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    reason: Mapped[str] = mapped_column(
        String(20), default="blocked"
    )  # booked, blocked, maintenance
    booking_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("bookings.id", ondelete="SET NULL")
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    # Relationships
    listing: Mapped["Listing"] = relationship("Listing", back_populates="blocked_dates")
