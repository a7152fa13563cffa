"""User-related Pydantic schemas."""

import re
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

PHONE_PATTERN = r"^\+?[0-9][0-9 ()-]{6,20}$"


def _validate_phone(v: str | None) -> str | None:
    if v is None:
        return v
    if not re.match(PHONE_PATTERN, v):
        raise ValueError("Please provide a valid phone number")
    return v


class UserCreate(BaseModel):
    """Schema for user registration."""

    name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    role: str = Field(default="guest", pattern="^(guest|host)$")

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Name must be at least 2 characters")
        return v


class UserLogin(BaseModel):
    """Schema for user login."""

    email: EmailStr
    password: str


class UserUpdate(BaseModel):
    """Schema for updating user profile."""

    name: str | None = Field(None, min_length=2, max_length=50)
    phone: str | None = None
    bio: str | None = Field(None, max_length=500)
    avatar_url: str | None = None
    preferred_language: str | None = Field(None, max_length=10)
    preferred_currency: str | None = Field(None, pattern="^[A-Z]{3}$")

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str | None) -> str | None:
        return _validate_phone(v)


class HostProfileResponse(BaseModel):
    """Schema for host profile response."""

    model_config = ConfigDict(from_attributes=True)

    host_since: datetime
    response_rate: int
    response_time: str
    superhost: bool


class UserResponse(BaseModel):
    """Schema for user response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    name: str
    phone: str | None
    avatar_url: str | None
    bio: str | None
    role: str
    is_verified: bool
    is_active: bool
    preferred_language: str
    preferred_currency: str
    host_profile: HostProfileResponse | None = None
    created_at: datetime


class UserPublicResponse(BaseModel):
    """Schema for public user profile (visible to others)."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    avatar_url: str | None
    bio: str | None
    role: str
    is_verified: bool
    host_profile: HostProfileResponse | None = None
    created_at: datetime


class TokenResponse(BaseModel):
    """Schema for authentication token response."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class AuthResponse(TokenResponse):
    """Tokens plus the authenticated user."""

    user: UserResponse


class RefreshTokenRequest(BaseModel):
    """Schema for token refresh request."""

    refresh_token: str


class FavoriteToggleResponse(BaseModel):
    """Result of adding or removing a favorite listing."""

    message: str
    is_favorite: bool
    favorites: list[UUID]
