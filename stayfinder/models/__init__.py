"""Database models."""

from stayfinder.models.booking import Booking, BookingMessage
from stayfinder.models.listing import BlockedDate, Listing
from stayfinder.models.review import Review
from stayfinder.models.user import HostProfile, User, user_favorites

__all__ = [
    # User
    "User",
    "HostProfile",
    "user_favorites",
    # Listing
    "Listing",
    "BlockedDate",
    # Booking
    "Booking",
    "BookingMessage",
    # Review
    "Review",
]
