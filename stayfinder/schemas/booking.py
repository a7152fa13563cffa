"""Booking-related Pydantic schemas."""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

PAYMENT_METHOD_PATTERN = "^(credit_card|debit_card|paypal|stripe)$"


class GuestCounts(BaseModel):
    """Guests on a booking. Pets do not count towards capacity."""

    adults: int = Field(default=1, ge=1, le=50)
    children: int = Field(default=0, ge=0, le=50)
    infants: int = Field(default=0, ge=0, le=50)
    pets: int = Field(default=0, ge=0, le=10)

    @property
    def total(self) -> int:
        return self.adults + self.children + self.infants


class BookingDates(BaseModel):
    """Check-in/check-out pair with ordering validation."""

    check_in: date
    check_out: date

    @field_validator("check_out")
    @classmethod
    def validate_checkout(cls, v: date, info) -> date:
        check_in = info.data.get("check_in")
        if check_in and v <= check_in:
            raise ValueError("check_out must be after check_in")
        return v


class BookingCreate(BookingDates):
    """Schema for creating a booking."""

    listing_id: UUID
    guests: GuestCounts = Field(default_factory=GuestCounts)
    payment_method: str = Field(..., pattern=PAYMENT_METHOD_PATTERN)
    special_requests: str | None = Field(None, max_length=500)


class BookingCalculateRequest(BookingDates):
    """Schema for calculating booking price without creating."""

    listing_id: UUID
    guests: GuestCounts = Field(default_factory=GuestCounts)


class BookingPriceBreakdown(BaseModel):
    """Schema for booking price breakdown."""

    base_price: Decimal
    nights: int
    subtotal: Decimal
    cleaning_fee: Decimal
    service_fee: Decimal
    taxes: Decimal
    weekly_discount: Decimal
    monthly_discount: Decimal
    total_amount: Decimal
    currency: str
    available: bool


class BookingStatusUpdate(BaseModel):
    """Schema for confirming or cancelling a booking."""

    status: str = Field(..., pattern="^(confirmed|cancelled_by_guest|cancelled_by_host)$")
    reason: str | None = Field(None, max_length=500)


class BookingResponse(BaseModel):
    """Schema for booking response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    booking_number: str
    listing_id: UUID
    guest_id: UUID
    host_id: UUID

    # Dates
    check_in: date
    check_out: date
    nights: int

    # Guests
    adults: int
    children: int
    infants: int
    pets: int
    total_guests: int

    # Pricing
    base_price: Decimal
    subtotal: Decimal
    cleaning_fee: Decimal
    service_fee: Decimal
    taxes: Decimal
    weekly_discount: Decimal
    monthly_discount: Decimal
    coupon_discount: Decimal
    total_amount: Decimal
    currency: str

    # Payment
    payment_method: str
    payment_status: str
    transaction_id: str | None
    paid_at: datetime | None
    refunded_at: datetime | None
    refund_amount: Decimal
    refund_reason: str | None

    # Status
    status: str
    can_be_cancelled: bool

    # Cancellation
    cancelled_by: UUID | None
    cancelled_at: datetime | None
    cancellation_reason: str | None
    refund_policy: str
    refund_policy_description: str
    cancellation_refund_amount: Decimal

    special_requests: str | None

    # Timestamps
    confirmed_at: datetime | None
    checked_in_at: datetime | None
    completed_at: datetime | None
    created_at: datetime
    updated_at: datetime


class BookingListResponse(BaseModel):
    """Schema for paginated booking list."""

    bookings: list[BookingResponse]
    total: int
    page: int
    page_size: int
    total_pages: int


class MessageCreate(BaseModel):
    """Schema for sending a booking message."""

    message: str = Field(..., min_length=1, max_length=1000)


class MessageResponse(BaseModel):
    """Schema for booking message response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    booking_id: UUID
    sender_id: UUID
    message: str
    is_read: bool
    created_at: datetime
