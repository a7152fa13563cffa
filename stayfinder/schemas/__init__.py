"""Pydantic schemas for API validation."""

from stayfinder.schemas.booking import (
    BookingCalculateRequest,
    BookingCreate,
    BookingListResponse,
    BookingPriceBreakdown,
    BookingResponse,
    BookingStatusUpdate,
    GuestCounts,
    MessageCreate,
    MessageResponse,
)
from stayfinder.schemas.listing import (
    AvailabilityResponse,
    BlockedDateCreate,
    BlockedDateResponse,
    ListingCreate,
    ListingResponse,
    ListingSearchResponse,
    ListingUpdate,
)
from stayfinder.schemas.review import ReviewCreate, ReviewResponse
from stayfinder.schemas.user import (
    AuthResponse,
    FavoriteToggleResponse,
    RefreshTokenRequest,
    TokenResponse,
    UserCreate,
    UserLogin,
    UserPublicResponse,
    UserResponse,
    UserUpdate,
)

__all__ = [
    # User
    "UserCreate",
    "UserLogin",
    "UserUpdate",
    "UserResponse",
    "UserPublicResponse",
    "TokenResponse",
    "AuthResponse",
    "RefreshTokenRequest",
    "FavoriteToggleResponse",
    # Listing
    "ListingCreate",
    "ListingUpdate",
    "ListingResponse",
    "ListingSearchResponse",
    "BlockedDateCreate",
    "BlockedDateResponse",
    "AvailabilityResponse",
    # Booking
    "GuestCounts",
    "BookingCreate",
    "BookingCalculateRequest",
    "BookingPriceBreakdown",
    "BookingStatusUpdate",
    "BookingResponse",
    "BookingListResponse",
    "MessageCreate",
    "MessageResponse",
    # Review
    "ReviewCreate",
    "ReviewResponse",
]
