"""Booking-related database models."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from stayfinder.database import Base, utcnow
from stayfinder.domain.cancellation_policy import can_be_cancelled, get_policy_description


class Booking(Base):
    """Booking model."""

    __tablename__ = "bookings"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    booking_number: Mapped[str] = mapped_column(
        String(20), unique=True, nullable=False, index=True
    )  # SF-XXXXXX
    listing_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("listings.id"), nullable=False, index=True
    )
    guest_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False, index=True
    )
    host_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False, index=True
    )

    # Dates
    check_in: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    check_out: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    nights: Mapped[int] = mapped_column(Integer, nullable=False)

    # Guests (pets do not count towards capacity)
    adults: Mapped[int] = mapped_column(Integer, default=1)
    children: Mapped[int] = mapped_column(Integer, default=0)
    infants: Mapped[int] = mapped_column(Integer, default=0)
    pets: Mapped[int] = mapped_column(Integer, default=0)

    # Pricing snapshot
    base_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    subtotal: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    cleaning_fee: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"))
    service_fee: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"))
    taxes: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"))
    weekly_discount: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"))
    monthly_discount: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"))
    coupon_discount: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"))
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="USD")

    # Payment
    payment_method: Mapped[str] = mapped_column(
        String(20), default="credit_card"
    )  # credit_card, debit_card, paypal, stripe
    payment_status: Mapped[str] = mapped_column(
        String(20), default="pending"
    )  # pending, completed, failed, refunded, partially_refunded
    transaction_id: Mapped[str | None] = mapped_column(String(100))
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    refunded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    refund_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"))
    refund_reason: Mapped[str | None] = mapped_column(Text)

    # Status
    status: Mapped[str] = mapped_column(
        String(20), default="pending", index=True
    )  # pending, confirmed, in_progress, completed, no_show, cancelled_by_guest, cancelled_by_host

    # Cancellation
    cancelled_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id"))
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    cancellation_reason: Mapped[str | None] = mapped_column(Text)
    refund_policy: Mapped[str] = mapped_column(
        String(20), default="moderate"
    )  # policy in force when the booking was made
    cancellation_refund_amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), default=Decimal("0")
    )

    special_requests: Mapped[str | None] = mapped_column(String(500))

    # Timestamps
    confirmed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    checked_in_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    @property
    def total_guests(self) -> int:
        return (self.adults or 0) + (self.children or 0) + (self.infants or 0)

    @property
    def can_be_cancelled(self) -> bool:
        return can_be_cancelled(self.status, self.check_in, utcnow())

    @property
    def refund_policy_description(self) -> str:
        return get_policy_description(self.refund_policy)

    def is_party(self, user_id: uuid.UUID) -> bool:
        return user_id in (self.guest_id, self.host_id)


class BookingMessage(Base):
    """Message exchanged between the guest and the host of a booking."""

    __tablename__ = "booking_messages"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    booking_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    sender_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    message: Mapped[str] = mapped_column(String(1000), nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, index=True
    )
