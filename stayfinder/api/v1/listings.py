"""Listing endpoints."""

import logging
import math
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import exists, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value

from stayfinder.api.deps import (
    get_current_host,
    get_current_user,
    get_db,
    get_listing_or_404,
    get_optional_user,
    require_listing_owner,
)
from stayfinder.core.exceptions import NotFoundError, ValidationError
from stayfinder.database import utcnow
from stayfinder.domain.availability import blocked_range_overlaps, is_available
from stayfinder.domain.pricing import count_nights
from stayfinder.models.booking import Booking
from stayfinder.models.listing import BlockedDate, Listing
from stayfinder.models.review import Review
from stayfinder.models.user import User
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

logger = logging.getLogger(__name__)

router = APIRouter()

SORT_ORDERS = {
    "price_asc": Listing.base_price.asc(),
    "price_desc": Listing.base_price.desc(),
    "rating": Listing.average_rating.desc(),
    "newest": Listing.created_at.desc(),
}

SIMILAR_PRICE_RANGE = Decimal("0.3")
SIMILAR_LIMIT = 6


async def bump_view_counts(db: AsyncSession, listing_ids: list[UUID]) -> None:
    """Increment view counters without touching the availability version."""
    if not listing_ids:
        return
    listings = Listing.__table__
    await db.execute(
        update(listings)
        .where(listings.c.id.in_(listing_ids))
        .values(view_count=listings.c.view_count + 1, updated_at=listings.c.updated_at)
    )


def _can_manage(user: User | None, listing: Listing) -> bool:
    return user is not None and (user.role == "admin" or user.id == listing.host_id)


def _escape_like(term: str) -> str:
    """Make `%` and `_` in a search term match literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _validate_date_range(check_in: date | None, check_out: date | None) -> None:
    if (check_in is None) != (check_out is None):
        raise ValidationError("check_in and check_out must be given together")
    if check_in is not None and check_out <= check_in:
        raise ValidationError("check_out must be after check_in")


@router.get("/", response_model=ListingSearchResponse)
async def search_listings(
    db: Annotated[AsyncSession, Depends(get_db)],
    location: str | None = Query(None, max_length=100),
    property_type: str | None = None,
    room_type: str | None = None,
    min_price: Decimal | None = Query(None, ge=0),
    max_price: Decimal | None = Query(None, ge=0),
    guests: int | None = Query(None, ge=1),
    bedrooms: int | None = Query(None, ge=0),
    bathrooms: Decimal | None = Query(None, ge=0),
    check_in: date | None = None,
    check_out: date | None = None,
    sort: str = Query("newest", pattern="^(price_asc|price_desc|rating|newest)$"),
    page: int = Query(1, ge=1),
    page_size: int = Query(12, ge=1, le=100),
) -> ListingSearchResponse:
    """Search active listings."""
    _validate_date_range(check_in, check_out)

    query = select(Listing).where(Listing.status == "active")

    if location:
        pattern = f"%{_escape_like(location)}%"
        query = query.where(
            or_(
                Listing.city.ilike(pattern, escape="\\"),
                Listing.state.ilike(pattern, escape="\\"),
                Listing.country.ilike(pattern, escape="\\"),
                Listing.address.ilike(pattern, escape="\\"),
            )
        )
    if property_type:
        query = query.where(Listing.property_type == property_type)
    if room_type:
        query = query.where(Listing.room_type == room_type)
    if min_price is not None:
        query = query.where(Listing.base_price >= min_price)
    if max_price is not None:
        query = query.where(Listing.base_price <= max_price)
    if guests:
        query = query.where(Listing.max_guests >= guests)
    if bedrooms is not None:
        query = query.where(Listing.bedrooms >= bedrooms)
    if bathrooms is not None:
        query = query.where(Listing.bathrooms >= bathrooms)
    if check_in and check_out:
        query = query.where(
            ~exists().where(
                BlockedDate.listing_id == Listing.id,
                blocked_range_overlaps(BlockedDate, check_in, check_out),
            )
        )

    count_result = await db.execute(select(func.count()).select_from(query.subquery()))
    total = count_result.scalar() or 0

    offset = (page - 1) * page_size
    query = query.order_by(SORT_ORDERS[sort], Listing.id).offset(offset).limit(page_size)
    result = await db.execute(query)
    listings = list(result.scalars().all())

    await bump_view_counts(db, [listing.id for listing in listings])

    return ListingSearchResponse(
        listings=[ListingResponse.model_validate(listing) for listing in listings],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=math.ceil(total / page_size) if total else 0,
    )


@router.get("/host/mine", response_model=list[ListingResponse])
async def get_my_listings(
    current_user: Annotated[User, Depends(get_current_host)],
    db: Annotated[AsyncSession, Depends(get_db)],
    status_filter: str | None = Query(None, alias="status"),
) -> list[Listing]:
    """Get all listings for the current host."""
    query = select(Listing).where(Listing.host_id == current_user.id)
    if status_filter:
        query = query.where(Listing.status == status_filter)
    query = query.order_by(Listing.created_at.desc())

    result = await db.execute(query)
    return list(result.scalars().all())


@router.post("/", response_model=ListingResponse, status_code=status.HTTP_201_CREATED)
async def create_listing(
    listing_data: ListingCreate,
    current_user: Annotated[User, Depends(get_current_host)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Listing:
    """Create a new listing."""
    listing = Listing(
        host_id=current_user.id,
        **listing_data.model_dump(),
        blocked_dates=[],
    )
    db.add(listing)
    await db.flush()

    logger.info(f"Listing {listing.id} created by host {current_user.id}")
    return listing


@router.get("/{listing_id}", response_model=ListingResponse)
async def get_listing(
    listing_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User | None, Depends(get_optional_user)] = None,
) -> Listing:
    """Get a listing by ID."""
    listing = await get_listing_or_404(listing_id, db)

    # Only show active listings to non-owners
    if listing.status != "active" and not _can_manage(current_user, listing):
        raise NotFoundError("Listing", str(listing_id))

    await bump_view_counts(db, [listing.id])
    set_committed_value(listing, "view_count", (listing.view_count or 0) + 1)
    return listing


@router.patch("/{listing_id}", response_model=ListingResponse)
async def update_listing(
    updates: ListingUpdate,
    listing: Annotated[Listing, Depends(require_listing_owner)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Listing:
    """Update a listing."""
    update_data = updates.model_dump(exclude_unset=True)

    min_nights = update_data.get("min_nights", listing.min_nights)
    max_nights = update_data.get("max_nights", listing.max_nights)
    if max_nights < min_nights:
        raise ValidationError("max_nights must be at least min_nights")

    for field, value in update_data.items():
        setattr(listing, field, value)

    await db.flush()
    return listing


@router.delete("/{listing_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_listing(
    listing: Annotated[Listing, Depends(require_listing_owner)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> None:
    """Delete a listing. Listings with booking history are deactivated instead."""
    result = await db.execute(select(exists().where(Booking.listing_id == listing.id)))
    if result.scalar():
        listing.status = "inactive"
        await db.flush()
        logger.info(f"Listing {listing.id} deactivated (has bookings)")
        return

    await db.delete(listing)
    await db.flush()
    logger.info(f"Listing {listing.id} deleted")


@router.get("/{listing_id}/similar", response_model=list[ListingResponse])
async def get_similar_listings(
    listing_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[Listing]:
    """Active listings in the same city and property type within 30% of the price."""
    listing = await get_listing_or_404(listing_id, db)

    price_range = listing.base_price * SIMILAR_PRICE_RANGE
    result = await db.execute(
        select(Listing)
        .where(
            Listing.id != listing.id,
            Listing.status == "active",
            Listing.property_type == listing.property_type,
            Listing.city == listing.city,
            Listing.base_price >= listing.base_price - price_range,
            Listing.base_price <= listing.base_price + price_range,
        )
        .order_by(Listing.average_rating.desc())
        .limit(SIMILAR_LIMIT)
    )
    return list(result.scalars().all())


@router.get("/{listing_id}/availability", response_model=AvailabilityResponse)
async def check_listing_availability(
    listing_id: UUID,
    check_in: date,
    check_out: date,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AvailabilityResponse:
    """Check whether a listing is free for the given dates."""
    _validate_date_range(check_in, check_out)
    listing = await get_listing_or_404(listing_id, db)

    return AvailabilityResponse(
        listing_id=listing.id,
        check_in=check_in,
        check_out=check_out,
        nights=count_nights(check_in, check_out),
        available=listing.is_bookable and is_available(listing.blocked_dates, check_in, check_out),
    )


@router.post(
    "/{listing_id}/blocked-dates",
    response_model=BlockedDateResponse,
    status_code=status.HTTP_201_CREATED,
)
async def block_dates(
    block_data: BlockedDateCreate,
    listing: Annotated[Listing, Depends(require_listing_owner)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> BlockedDate:
    """Block a date range on the listing's calendar."""
    block = BlockedDate(
        listing_id=listing.id,
        start_date=block_data.start_date,
        end_date=block_data.end_date,
        reason=block_data.reason,
    )
    listing.blocked_dates.append(block)
    # Touching the row bumps the availability version
    listing.updated_at = utcnow()
    await db.flush()
    return block


@router.delete("/{listing_id}/blocked-dates/{block_id}", status_code=status.HTTP_204_NO_CONTENT)
async def unblock_dates(
    block_id: UUID,
    listing: Annotated[Listing, Depends(require_listing_owner)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> None:
    """Remove a manual block from the listing's calendar."""
    block = next((b for b in listing.blocked_dates if b.id == block_id), None)
    if block is None:
        raise NotFoundError("Blocked date range", str(block_id))
    if block.reason == "booked":
        raise ValidationError("Booked dates are released by cancelling the booking")

    listing.blocked_dates.remove(block)
    listing.updated_at = utcnow()
    await db.flush()


@router.get("/{listing_id}/reviews", response_model=list[ReviewResponse])
async def get_listing_reviews(
    listing_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
) -> list[Review]:
    """Get reviews for a listing, newest first."""
    await get_listing_or_404(listing_id, db)

    result = await db.execute(
        select(Review)
        .where(Review.listing_id == listing_id)
        .order_by(Review.created_at.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    return list(result.scalars().all())


@router.post(
    "/{listing_id}/reviews",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_review(
    listing_id: UUID,
    review_data: ReviewCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Review:
    """Review a listing and refresh its rating statistics."""
    listing = await get_listing_or_404(listing_id, db)

    if listing.host_id == current_user.id:
        raise ValidationError("You cannot review your own listing")

    existing = await db.execute(
        select(Review.id).where(
            Review.listing_id == listing.id, Review.guest_id == current_user.id
        )
    )
    if existing.scalar_one_or_none():
        raise ValidationError("You have already reviewed this listing")

    if review_data.booking_id:
        booking_result = await db.execute(
            select(Booking.id).where(
                Booking.id == review_data.booking_id,
                Booking.guest_id == current_user.id,
                Booking.listing_id == listing.id,
            )
        )
        if booking_result.scalar_one_or_none() is None:
            raise ValidationError("Booking does not belong to you for this listing")

    review = Review(listing_id=listing.id, guest_id=current_user.id, **review_data.model_dump())
    db.add(review)
    await db.flush()

    stats = await db.execute(
        select(func.avg(Review.overall_rating), func.count(Review.id)).where(
            Review.listing_id == listing.id
        )
    )
    average, count = stats.one()
    listing.average_rating = Decimal(str(average or 0)).quantize(
        Decimal("0.1"), rounding=ROUND_HALF_UP
    )
    listing.review_count = count
    await db.flush()

    return review
