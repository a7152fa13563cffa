"""Booking endpoints."""

import math
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from stayfinder.api.deps import (
    get_current_user,
    get_db,
    get_listing_or_404,
    require_booking_access,
    require_booking_party,
)
from stayfinder.core.exceptions import AuthorizationError
from stayfinder.models.booking import Booking, BookingMessage
from stayfinder.models.user import User
from stayfinder.schemas.booking import (
    BookingCalculateRequest,
    BookingCreate,
    BookingListResponse,
    BookingPriceBreakdown,
    BookingResponse,
    BookingStatusUpdate,
    MessageCreate,
    MessageResponse,
)
from stayfinder.services.booking_service import booking_service

router = APIRouter()


@router.post("/calculate", response_model=BookingPriceBreakdown)
async def calculate_booking_price(
    request: BookingCalculateRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> BookingPriceBreakdown:
    """Calculate booking price without creating a booking."""
    listing = await get_listing_or_404(request.listing_id, db)
    quote = booking_service.quote(listing, request.check_in, request.check_out, request.guests)
    pricing = quote.pricing

    return BookingPriceBreakdown(
        base_price=pricing.base_price,
        nights=pricing.nights,
        subtotal=pricing.subtotal,
        cleaning_fee=pricing.cleaning_fee,
        service_fee=pricing.service_fee,
        taxes=pricing.taxes,
        weekly_discount=pricing.weekly_discount,
        monthly_discount=pricing.monthly_discount,
        total_amount=pricing.total_amount,
        currency=listing.currency,
        available=quote.available,
    )


@router.post("/", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking_data: BookingCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Booking:
    """Create a new booking."""
    return await booking_service.create_booking(
        db,
        guest=current_user,
        listing_id=booking_data.listing_id,
        check_in=booking_data.check_in,
        check_out=booking_data.check_out,
        guests=booking_data.guests,
        payment_method=booking_data.payment_method,
        special_requests=booking_data.special_requests,
    )


@router.get("/", response_model=BookingListResponse)
async def get_my_bookings(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    role: str = Query(default="guest", pattern="^(guest|host)$"),
    status_filter: str | None = Query(default=None, alias="status"),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=10, ge=1, le=100),
) -> BookingListResponse:
    """Get bookings for the current user, as guest or as host."""
    if role == "guest":
        query = select(Booking).where(Booking.guest_id == current_user.id)
    else:
        if current_user.role not in ("host", "admin"):
            raise AuthorizationError("You must be a host to view host bookings")
        query = select(Booking).where(Booking.host_id == current_user.id)

    if status_filter:
        query = query.where(Booking.status == status_filter)

    count_result = await db.execute(select(func.count()).select_from(query.subquery()))
    total = count_result.scalar() or 0

    offset = (page - 1) * page_size
    query = query.order_by(Booking.created_at.desc()).offset(offset).limit(page_size)

    result = await db.execute(query)
    bookings = list(result.scalars().all())

    return BookingListResponse(
        bookings=[BookingResponse.model_validate(b) for b in bookings],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=math.ceil(total / page_size) if total else 0,
    )


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking: Annotated[Booking, Depends(require_booking_access)],
) -> Booking:
    """Get a booking by ID (guest, host or admin)."""
    return booking


@router.put("/{booking_id}/status", response_model=BookingResponse)
async def update_booking_status(
    request: BookingStatusUpdate,
    booking: Annotated[Booking, Depends(require_booking_access)],
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Booking:
    """Confirm or cancel a booking."""
    return await booking_service.change_status(
        db, booking, current_user, request.status, request.reason
    )


@router.post("/{booking_id}/check-in", response_model=BookingResponse)
async def check_in_booking(
    booking: Annotated[Booking, Depends(require_booking_access)],
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Booking:
    """Mark guest as checked in (host only)."""
    return await booking_service.change_status(db, booking, current_user, "in_progress")


@router.post("/{booking_id}/complete", response_model=BookingResponse)
async def complete_booking(
    booking: Annotated[Booking, Depends(require_booking_access)],
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Booking:
    """Mark booking as completed (host only)."""
    return await booking_service.change_status(db, booking, current_user, "completed")


@router.post("/{booking_id}/no-show", response_model=BookingResponse)
async def mark_no_show(
    booking: Annotated[Booking, Depends(require_booking_access)],
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Booking:
    """Mark a confirmed booking as a no-show (host only)."""
    return await booking_service.change_status(db, booking, current_user, "no_show")


@router.post("/{booking_id}/pay", response_model=BookingResponse)
async def pay_booking(
    booking: Annotated[Booking, Depends(require_booking_access)],
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Booking:
    """Pay for a booking (mock payment, guest only)."""
    return await booking_service.pay(db, booking, current_user)


@router.get("/{booking_id}/messages", response_model=list[MessageResponse])
async def get_booking_messages(
    booking: Annotated[Booking, Depends(require_booking_party)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[BookingMessage]:
    """Get the message thread of a booking."""
    return await booking_service.list_messages(db, booking)


@router.post(
    "/{booking_id}/messages",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def send_booking_message(
    message_data: MessageCreate,
    booking: Annotated[Booking, Depends(require_booking_party)],
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> BookingMessage:
    """Send a message to the other party of a booking."""
    return await booking_service.send_message(db, booking, current_user, message_data.message)


@router.post("/{booking_id}/messages/read")
async def mark_booking_messages_read(
    booking: Annotated[Booking, Depends(require_booking_party)],
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict[str, int]:
    """Mark the other party's messages as read."""
    count = await booking_service.mark_messages_read(db, booking, current_user)
    return {"marked_read": count}
