"""User profile and favorites endpoints."""

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy import delete, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from stayfinder.api.deps import get_current_user, get_db, get_listing_or_404
from stayfinder.core.exceptions import NotFoundError
from stayfinder.database import utcnow
from stayfinder.domain.roles import promote_to_host
from stayfinder.models.listing import Listing
from stayfinder.models.user import User, user_favorites
from stayfinder.schemas.listing import ListingResponse
from stayfinder.schemas.user import (
    FavoriteToggleResponse,
    UserPublicResponse,
    UserResponse,
    UserUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter()


async def _favorite_ids(db: AsyncSession, user_id: UUID) -> list[UUID]:
    result = await db.execute(
        select(user_favorites.c.listing_id)
        .where(user_favorites.c.user_id == user_id)
        .order_by(user_favorites.c.created_at)
    )
    return list(result.scalars().all())


@router.get("/me", response_model=UserResponse)
async def get_my_profile(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Get current user's profile."""
    return current_user


@router.patch("/me", response_model=UserResponse)
async def update_my_profile(
    update_data: UserUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """Update current user's profile."""
    update_dict = update_data.model_dump(exclude_unset=True)
    for field, value in update_dict.items():
        setattr(current_user, field, value)

    await db.flush()
    return current_user


@router.post("/me/become-host", response_model=UserResponse)
async def become_host(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """Turn the current guest account into a host account."""
    promote_to_host(current_user, utcnow())
    await db.flush()

    logger.info(f"User {current_user.id} became a host")
    return current_user


@router.get("/me/favorites", response_model=list[ListingResponse])
async def get_my_favorites(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[Listing]:
    """Get current user's favorite listings."""
    result = await db.execute(
        select(Listing)
        .join(user_favorites, user_favorites.c.listing_id == Listing.id)
        .where(user_favorites.c.user_id == current_user.id)
        .order_by(user_favorites.c.created_at.desc())
    )
    return list(result.scalars().all())


@router.post("/me/favorites/{listing_id}", response_model=FavoriteToggleResponse)
async def toggle_favorite(
    listing_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> FavoriteToggleResponse:
    """Add a listing to favorites, or remove it if already there."""
    await get_listing_or_404(listing_id, db)

    favorites = await _favorite_ids(db, current_user.id)
    is_favorite = listing_id in favorites
    if is_favorite:
        await db.execute(
            delete(user_favorites).where(
                user_favorites.c.user_id == current_user.id,
                user_favorites.c.listing_id == listing_id,
            )
        )
    else:
        await db.execute(
            insert(user_favorites).values(
                user_id=current_user.id, listing_id=listing_id, created_at=utcnow()
            )
        )

    return FavoriteToggleResponse(
        message="Removed from favorites" if is_favorite else "Added to favorites",
        is_favorite=not is_favorite,
        favorites=await _favorite_ids(db, current_user.id),
    )


@router.get("/{user_id}", response_model=UserPublicResponse)
async def get_user_profile(
    user_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """Get a user's public profile."""
    result = await db.execute(select(User).where(User.id == user_id, User.is_active.is_(True)))
    user = result.scalar_one_or_none()
    if not user:
        raise NotFoundError("User", str(user_id))
    return user
