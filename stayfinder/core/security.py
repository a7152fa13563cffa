"""Password hashing and JWT handling."""

from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

from jose import JWTError, jwt
from passlib.context import CryptContext

from stayfinder.config import settings
from stayfinder.core.exceptions import AuthenticationError

# Password hashing context using Argon2
pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def _encode(data: dict[str, Any], token_type: str, lifetime: timedelta) -> str:
    claims = {**data, "exp": datetime.now(UTC) + lifetime, "type": token_type}
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(data: dict[str, Any], expires_delta: timedelta | None = None) -> str:
    """Short-lived token sent as ``Authorization: Bearer``."""
    return _encode(
        data, "access", expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )


def create_refresh_token(data: dict[str, Any], expires_delta: timedelta | None = None) -> str:
    """Long-lived token exchanged at ``/auth/refresh`` for a new pair."""
    return _encode(
        data, "refresh", expires_delta or timedelta(days=settings.refresh_token_expire_days)
    )


def verify_token(token: str, token_type: str = "access") -> dict[str, Any]:
    """Decode a token and check it is of the expected type."""
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        raise AuthenticationError(f"Token validation failed: {e}")
    if payload.get("type") != token_type:
        raise AuthenticationError("Invalid token type")
    return payload


def token_subject(token: str, token_type: str = "access") -> UUID:
    """User id carried in the token's ``sub`` claim."""
    payload = verify_token(token, token_type)
    try:
        return UUID(str(payload.get("sub")))
    except ValueError:
        raise AuthenticationError("Invalid token payload")


def create_tokens(user_id: str, email: str, role: str) -> dict[str, str]:
    """Access and refresh tokens for a signed-in user."""
    claims = {"sub": user_id, "email": email, "role": role}
    return {
        "access_token": create_access_token(claims),
        "refresh_token": create_refresh_token(claims),
        "token_type": "bearer",
    }
