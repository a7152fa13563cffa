"""Review-related Pydantic schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ReviewCreate(BaseModel):
    """Schema for creating a review."""

    booking_id: UUID | None = None
    overall_rating: int = Field(..., ge=1, le=5)
    cleanliness_rating: int | None = Field(None, ge=1, le=5)
    accuracy_rating: int | None = Field(None, ge=1, le=5)
    communication_rating: int | None = Field(None, ge=1, le=5)
    location_rating: int | None = Field(None, ge=1, le=5)
    checkin_rating: int | None = Field(None, ge=1, le=5)
    value_rating: int | None = Field(None, ge=1, le=5)
    comment: str | None = Field(None, max_length=1000)


class ReviewResponse(BaseModel):
    """Schema for review response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    listing_id: UUID
    guest_id: UUID
    booking_id: UUID | None
    overall_rating: int
    cleanliness_rating: int | None
    accuracy_rating: int | None
    communication_rating: int | None
    location_rating: int | None
    checkin_rating: int | None
    value_rating: int | None
    comment: str | None
    host_response: str | None
    created_at: datetime
