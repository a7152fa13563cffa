"""Errors raised by the API layer and services.

Each maps to an HTTP status; `main.py` renders them as `{"detail": ...}`.
"""

from typing import Any

from fastapi import HTTPException, status


class AppException(HTTPException):
    """Root of every error the API reports on purpose."""

    def __init__(
        self,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: str = "An unexpected error occurred",
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=detail, headers=headers)


class ValidationError(AppException):
    """Malformed or out-of-range input."""

    def __init__(self, detail: str = "Validation failed", errors: list[dict[str, Any]] | None = None) -> None:
        self.errors = errors
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class NotFoundError(AppException):
    """A listing, booking, user or review does not exist."""

    def __init__(self, resource: str = "Resource", identifier: str | None = None) -> None:
        detail = f"{resource} not found"
        if identifier:
            detail = f"{resource} with ID '{identifier}' not found"
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class AuthenticationError(AppException):
    """Missing, expired or malformed credentials."""

    def __init__(self, detail: str = "Authentication failed") -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthorizationError(AppException):
    """Caller is authenticated but not allowed to act."""

    def __init__(self, detail: str = "You don't have permission to access this resource") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class ConflictError(AppException):
    """Request conflicts with the current state of a listing or booking."""

    def __init__(self, detail: str = "The request conflicts with the current state") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class ListingNotAvailable(ConflictError):
    """Listing is not active or is the caller's own."""

    def __init__(self, detail: str = "This listing is not available") -> None:
        super().__init__(detail=detail)


class DatesNotAvailable(ConflictError):
    def __init__(self, detail: str = "Listing is not available for selected dates") -> None:
        super().__init__(detail=detail)


class CapacityExceeded(ConflictError):
    """Requested guests exceed listing capacity."""

    def __init__(self, max_guests: int) -> None:
        super().__init__(detail=f"This listing can accommodate maximum {max_guests} guests")


class InvalidBookingStatus(ConflictError):
    """Status transition or action not allowed from the current status."""

    def __init__(self, detail: str = "This operation is not allowed for the current booking status") -> None:
        super().__init__(detail=detail)


class ServerError(AppException):
    """Unexpected failure, reported to the caller without internals."""

    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)
