"""Core utilities and security modules."""

from stayfinder.core.exceptions import (
    AppException,
    AuthenticationError,
    AuthorizationError,
    CapacityExceeded,
    ConflictError,
    DatesNotAvailable,
    InvalidBookingStatus,
    ListingNotAvailable,
    NotFoundError,
    ServerError,
    ValidationError,
)
from stayfinder.core.security import (
    create_access_token,
    create_refresh_token,
    get_password_hash,
    token_subject,
    verify_password,
    verify_token,
)

__all__ = [
    "AppException",
    "AuthenticationError",
    "AuthorizationError",
    "CapacityExceeded",
    "ConflictError",
    "DatesNotAvailable",
    "InvalidBookingStatus",
    "ListingNotAvailable",
    "NotFoundError",
    "ServerError",
    "ValidationError",
    "create_access_token",
    "create_refresh_token",
    "get_password_hash",
    "token_subject",
    "verify_password",
    "verify_token",
]
