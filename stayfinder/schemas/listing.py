"""Listing-related Pydantic schemas."""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from stayfinder.config import settings

PROPERTY_TYPE_PATTERN = (
    "^(apartment|house|villa|condo|townhouse|loft|cabin|cottage|castle|boat|camper|treehouse|other)$"
)
ROOM_TYPE_PATTERN = "^(entire_place|private_room|shared_room)$"
POLICY_PATTERN = "^(flexible|moderate|strict|super_strict)$"
TIME_PATTERN = "^([01][0-9]|2[0-3]):[0-5][0-9]$"

AMENITIES = frozenset(
    {
        "wifi",
        "kitchen",
        "washer",
        "dryer",
        "air_conditioning",
        "heating",
        "parking",
        "pool",
        "hot_tub",
        "gym",
        "tv",
        "fireplace",
        "balcony",
        "garden",
        "pets_allowed",
        "smoking_allowed",
        "events_allowed",
        "elevator",
        "wheelchair_accessible",
        "first_aid_kit",
        "fire_extinguisher",
        "smoke_detector",
        "carbon_monoxide_detector",
    }
)


def _validate_amenities(v: list[str] | None) -> list[str] | None:
    if v is None:
        return v
    unknown = sorted(set(v) - AMENITIES)
    if unknown:
        raise ValueError(f"Unknown amenities: {', '.join(unknown)}")
    return list(dict.fromkeys(v))


class ListingBase(BaseModel):
    """Base listing schema."""

    title: str = Field(..., min_length=5, max_length=100)
    description: str = Field(..., min_length=50, max_length=2000)
    property_type: str = Field(..., pattern=PROPERTY_TYPE_PATTERN)
    room_type: str = Field(..., pattern=ROOM_TYPE_PATTERN)
    amenities: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)

    # Location
    address: str = Field(..., max_length=255)
    city: str = Field(..., max_length=100)
    state: str = Field(..., max_length=100)
    country: str = Field(..., max_length=100)
    zip_code: str = Field(..., max_length=20)
    latitude: Decimal | None = Field(None, ge=-90, le=90)
    longitude: Decimal | None = Field(None, ge=-180, le=180)

    # Capacity
    max_guests: int = Field(..., ge=1, le=50)
    bedrooms: int = Field(..., ge=0, le=50)
    beds: int = Field(..., ge=1, le=100)
    bathrooms: Decimal = Field(..., ge=Decimal("0.5"), le=50)

    # Pricing
    base_price: Decimal = Field(..., ge=1, max_digits=10, decimal_places=2)
    currency: str = Field(default=settings.default_currency, pattern="^[A-Z]{3}$")
    cleaning_fee: Decimal = Field(default=Decimal("0"), ge=0, max_digits=10, decimal_places=2)
    weekly_discount: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    monthly_discount: Decimal = Field(default=Decimal("0"), ge=0, le=100)

    # Availability rules
    min_nights: int = Field(default=1, ge=1, le=365)
    max_nights: int = Field(default=365, ge=1, le=365)
    instant_book: bool = False
    check_in_time: str = Field(default="15:00", pattern=TIME_PATTERN)
    check_out_time: str = Field(default="11:00", pattern=TIME_PATTERN)
    cancellation_policy: str = Field(default="moderate", pattern=POLICY_PATTERN)

    @field_validator("amenities")
    @classmethod
    def validate_amenities(cls, v: list[str]) -> list[str]:
        return _validate_amenities(v)

    @field_validator("max_nights")
    @classmethod
    def validate_max_nights(cls, v: int, info) -> int:
        min_nights = info.data.get("min_nights")
        if min_nights and v < min_nights:
            raise ValueError("max_nights must be at least min_nights")
        return v


class ListingCreate(ListingBase):
    """Schema for creating a listing."""

    status: str = Field(default="draft", pattern="^(draft|active)$")


class ListingUpdate(BaseModel):
    """Schema for updating a listing. The host reference is never updatable."""

    title: str | None = Field(None, min_length=5, max_length=100)
    description: str | None = Field(None, min_length=50, max_length=2000)
    property_type: str | None = Field(None, pattern=PROPERTY_TYPE_PATTERN)
    room_type: str | None = Field(None, pattern=ROOM_TYPE_PATTERN)
    amenities: list[str] | None = None
    images: list[str] | None = None

    # Location
    address: str | None = Field(None, max_length=255)
    city: str | None = Field(None, max_length=100)
    state: str | None = Field(None, max_length=100)
    country: str | None = Field(None, max_length=100)
    zip_code: str | None = Field(None, max_length=20)
    latitude: Decimal | None = Field(None, ge=-90, le=90)
    longitude: Decimal | None = Field(None, ge=-180, le=180)

    # Capacity
    max_guests: int | None = Field(None, ge=1, le=50)
    bedrooms: int | None = Field(None, ge=0, le=50)
    beds: int | None = Field(None, ge=1, le=100)
    bathrooms: Decimal | None = Field(None, ge=Decimal("0.5"), le=50)

    # Pricing
    base_price: Decimal | None = Field(None, ge=1, max_digits=10, decimal_places=2)
    cleaning_fee: Decimal | None = Field(None, ge=0, max_digits=10, decimal_places=2)
    weekly_discount: Decimal | None = Field(None, ge=0, le=100)
    monthly_discount: Decimal | None = Field(None, ge=0, le=100)

    # Availability rules
    min_nights: int | None = Field(None, ge=1, le=365)
    max_nights: int | None = Field(None, ge=1, le=365)
    instant_book: bool | None = None
    check_in_time: str | None = Field(None, pattern=TIME_PATTERN)
    check_out_time: str | None = Field(None, pattern=TIME_PATTERN)
    cancellation_policy: str | None = Field(None, pattern=POLICY_PATTERN)

    # Status (suspension is not a host action)
    status: str | None = Field(None, pattern="^(draft|active|inactive)$")

    @field_validator("amenities")
    @classmethod
    def validate_amenities(cls, v: list[str] | None) -> list[str] | None:
        return _validate_amenities(v)


class BlockedDateCreate(BaseModel):
    """Schema for blocking a date range on a listing."""

    start_date: date
    end_date: date
    reason: str = Field(default="blocked", pattern="^(blocked|maintenance)$")

    @field_validator("end_date")
    @classmethod
    def validate_end_date(cls, v: date, info) -> date:
        start = info.data.get("start_date")
        if start and v < start:
            raise ValueError("end_date must not be before start_date")
        return v


class BlockedDateResponse(BaseModel):
    """Schema for blocked date range response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    start_date: date
    end_date: date
    reason: str
    booking_id: UUID | None


class AvailabilityResponse(BaseModel):
    """Schema for a listing availability check."""

    listing_id: UUID
    check_in: date
    check_out: date
    nights: int
    available: bool


class ListingResponse(BaseModel):
    """Schema for listing response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    host_id: UUID
    title: str
    description: str
    property_type: str
    room_type: str
    amenities: list[str]
    images: list[str]

    # Location
    address: str
    city: str
    state: str
    country: str
    zip_code: str
    latitude: Decimal | None
    longitude: Decimal | None

    # Capacity
    max_guests: int
    bedrooms: int
    beds: int
    bathrooms: Decimal

    # Pricing
    base_price: Decimal
    currency: str
    cleaning_fee: Decimal
    weekly_discount: Decimal
    monthly_discount: Decimal

    # Availability rules
    min_nights: int
    max_nights: int
    instant_book: bool
    check_in_time: str
    check_out_time: str
    cancellation_policy: str
    blocked_dates: list[BlockedDateResponse] = []

    # Status
    status: str

    # Statistics
    view_count: int
    average_rating: Decimal
    review_count: int
    total_bookings: int

    # Timestamps
    created_at: datetime
    updated_at: datetime


class ListingSearchResponse(BaseModel):
    """Schema for listing search results."""

    listings: list[ListingResponse]
    total: int
    page: int
    page_size: int
    total_pages: int
