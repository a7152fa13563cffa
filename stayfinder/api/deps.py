"""API dependencies for authentication and common operations."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from stayfinder.core.exceptions import (
    AppException,
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
)
from stayfinder.core.security import token_subject
from stayfinder.database import get_db
from stayfinder.models.booking import Booking
from stayfinder.models.listing import Listing
from stayfinder.models.user import User

# Security scheme
security = HTTPBearer(auto_error=False)


async def _user_from_token(token: str, db: AsyncSession) -> User:
    user_id = token_subject(token)

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if not user:
        raise AuthenticationError("User not found")
    if not user.is_active:
        raise AuthenticationError("User account is deactivated")
    return user


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """Get the current authenticated user from JWT token."""
    if credentials is None:
        raise AuthenticationError("Not authorized, no token")
    return await _user_from_token(credentials.credentials, db)


async def get_current_host(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Get current user and verify they are a host."""
    if current_user.role not in ("host", "admin"):
        raise AuthorizationError(f"User role '{current_user.role}' is not authorized to access this route")
    return current_user


async def get_optional_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User | None:
    """Optionally get the current user if authenticated."""
    if not credentials:
        return None
    try:
        return await _user_from_token(credentials.credentials, db)
    except AppException:
        return None


async def get_listing_or_404(listing_id: UUID, db: AsyncSession) -> Listing:
    result = await db.execute(select(Listing).where(Listing.id == listing_id))
    listing = result.scalar_one_or_none()
    if not listing:
        raise NotFoundError("Listing", str(listing_id))
    return listing


class ListingOwnerChecker:
    """Load a listing and check that the current user owns it (admins always pass)."""

    async def __call__(
        self,
        listing_id: UUID,
        current_user: Annotated[User, Depends(get_current_user)],
        db: Annotated[AsyncSession, Depends(get_db)],
    ) -> Listing:
        listing = await get_listing_or_404(listing_id, db)
        if current_user.role != "admin" and listing.host_id != current_user.id:
            raise AuthorizationError("Not authorized to modify this listing")
        return listing


class BookingPermissionChecker:
    """Load a booking and check the current user may access it.

    Admins may read any booking; status changes are checked separately
    against the booking's own guest and host.
    """

    def __init__(self, allow_guest: bool = True, allow_host: bool = True, allow_admin: bool = True):
        self.allow_guest = allow_guest
        self.allow_host = allow_host
        self.allow_admin = allow_admin

    async def __call__(
        self,
        booking_id: UUID,
        current_user: Annotated[User, Depends(get_current_user)],
        db: Annotated[AsyncSession, Depends(get_db)],
    ) -> Booking:
        result = await db.execute(select(Booking).where(Booking.id == booking_id))
        booking = result.scalar_one_or_none()
        if not booking:
            raise NotFoundError("Booking", str(booking_id))

        if self.allow_guest and booking.guest_id == current_user.id:
            return booking
        if self.allow_host and booking.host_id == current_user.id:
            return booking
        if self.allow_admin and current_user.role == "admin":
            return booking

        raise AuthorizationError("Not authorized to view this booking")


# Convenience instances
require_listing_owner = ListingOwnerChecker()
require_booking_access = BookingPermissionChecker()
require_booking_party = BookingPermissionChecker(allow_admin=False)
