"""Authentication endpoints."""

from typing import Annotated
from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from stayfinder.api.deps import get_current_user, get_db
from stayfinder.core.exceptions import AuthenticationError, ValidationError
from stayfinder.core.security import (
    create_tokens,
    get_password_hash,
    token_subject,
    verify_password,
)
from stayfinder.database import utcnow
from stayfinder.domain.roles import promote_to_host
from stayfinder.models.user import User
from stayfinder.schemas.user import (
    AuthResponse,
    RefreshTokenRequest,
    TokenResponse,
    UserCreate,
    UserLogin,
    UserResponse,
)

router = APIRouter()


def _auth_response(user: User) -> AuthResponse:
    tokens = create_tokens(str(user.id), user.email, user.role)
    return AuthResponse(**tokens, user=UserResponse.model_validate(user))


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AuthResponse:
    """Register a new user account."""
    email = user_data.email.lower()
    result = await db.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none():
        raise ValidationError("User already exists with this email")

    user = User(
        email=email,
        name=user_data.name,
        password_hash=get_password_hash(user_data.password),
        role="guest",
        host_profile=None,
    )
    db.add(user)
    await db.flush()

    # Hosts get their profile in the same transaction
    if user_data.role == "host":
        promote_to_host(user, utcnow())
        await db.flush()

    return _auth_response(user)


@router.post("/login", response_model=AuthResponse)
async def login(
    credentials: UserLogin,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AuthResponse:
    """Login with email and password."""
    result = await db.execute(select(User).where(User.email == credentials.email.lower()))
    user = result.scalar_one_or_none()

    if not user or not verify_password(credentials.password, user.password_hash):
        raise AuthenticationError("Invalid credentials")

    if not user.is_active:
        raise AuthenticationError("Account is deactivated")

    user.last_login_at = utcnow()
    await db.flush()

    return _auth_response(user)


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(
    request: RefreshTokenRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TokenResponse:
    """Refresh access token using refresh token."""
    user_id = token_subject(request.refresh_token, token_type="refresh")

    # Verify user still exists and is active
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if not user or not user.is_active:
        raise AuthenticationError("User not found or inactive")

    tokens = create_tokens(str(user.id), user.email, user.role)
    return TokenResponse(**tokens)


@router.get("/me", response_model=UserResponse)
async def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Get the currently logged in user."""
    return current_user
