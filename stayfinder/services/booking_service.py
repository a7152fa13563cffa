"""Booking lifecycle service.

Creation, status transitions, cancellation refunds, mock payment and the
guest/host message thread. Route handlers load and authorize the booking;
this service applies the state change.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import date

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from stayfinder.config import settings
from stayfinder.core.exceptions import (
    AuthorizationError,
    CapacityExceeded,
    DatesNotAvailable,
    InvalidBookingStatus,
    ListingNotAvailable,
    NotFoundError,
    ValidationError,
)
from stayfinder.database import utcnow
from stayfinder.domain.availability import is_available
from stayfinder.domain.booking_state import (
    assert_booking_transition,
    assert_transition_actor,
    is_cancellation,
)
from stayfinder.domain.cancellation_policy import DEFAULT_POLICY, calculate_refund
from stayfinder.domain.payment_state import assert_payment_transition, refund_status
from stayfinder.domain.pricing import PricingBreakdown, compute_pricing, count_nights
from stayfinder.models.booking import Booking, BookingMessage
from stayfinder.models.listing import BlockedDate, Listing
from stayfinder.models.user import User
from stayfinder.schemas.booking import GuestCounts
from stayfinder.utils.booking_number import generate_booking_number, generate_transaction_id

logger = logging.getLogger(__name__)

# Timestamp column set when a booking enters each status
STATUS_TIMESTAMPS = {
    "confirmed": "confirmed_at",
    "in_progress": "checked_in_at",
    "completed": "completed_at",
}


@dataclass(frozen=True)
class Quote:
    """Validated stay request with its price."""

    nights: int
    pricing: PricingBreakdown
    available: bool


def assert_stay_rules(listing: Listing, nights: int, guests: GuestCounts) -> None:
    """Guard: listing is bookable and the request fits its capacity and stay rules."""
    if not listing.is_bookable:
        raise ListingNotAvailable()
    if guests.total > listing.max_guests:
        raise CapacityExceeded(listing.max_guests)
    if nights < listing.min_nights:
        raise ValidationError(f"Minimum stay is {listing.min_nights} nights")
    if nights > listing.max_nights:
        raise ValidationError(f"Maximum stay is {listing.max_nights} nights")


def price_stay(listing: Listing, nights: int) -> PricingBreakdown:
    return compute_pricing(
        base_price=listing.base_price,
        nights=nights,
        cleaning_fee=listing.cleaning_fee or 0,
        service_fee_rate=settings.service_fee_rate,
        tax_rate=settings.tax_rate,
        weekly_discount_percent=listing.weekly_discount or 0,
        monthly_discount_percent=listing.monthly_discount or 0,
    )


class BookingService:
    """Service for booking lifecycle operations."""

    def quote(
        self, listing: Listing, check_in: date, check_out: date, guests: GuestCounts
    ) -> Quote:
        """Price a stay without creating anything.

        Raises the same errors as ``create_booking`` for stay-rule violations;
        date conflicts are reported through ``Quote.available``.
        """
        nights = count_nights(check_in, check_out)
        assert_stay_rules(listing, nights, guests)
        return Quote(
            nights=nights,
            pricing=price_stay(listing, nights),
            available=is_available(listing.blocked_dates, check_in, check_out),
        )

    async def create_booking(
        self,
        db: AsyncSession,
        guest: User,
        listing_id: uuid.UUID,
        check_in: date,
        check_out: date,
        guests: GuestCounts,
        payment_method: str,
        special_requests: str | None = None,
    ) -> Booking:
        """Create a pending booking and block its dates on the listing.

        The listing row is locked for the check-then-act sequence; the
        listing's version counter rejects a concurrent writer that slipped
        past the lock.

        Args:
            db: Database session
            guest: Booking guest
            listing_id: Listing to book
            check_in: First night
            check_out: Departure date (after check_in)
            guests: Guest counts
            payment_method: Chosen payment method
            special_requests: Optional note for the host

        Returns:
            Booking: The new booking, status pending
        """
        result = await db.execute(
            select(Listing).where(Listing.id == listing_id).with_for_update()
        )
        listing = result.scalar_one_or_none()
        if not listing:
            raise NotFoundError("Listing", str(listing_id))

        if listing.host_id == guest.id:
            raise ValidationError("You cannot book your own listing")

        nights = count_nights(check_in, check_out)
        assert_stay_rules(listing, nights, guests)

        if not is_available(listing.blocked_dates, check_in, check_out):
            raise DatesNotAvailable()

        pricing = price_stay(listing, nights)
        booking = Booking(
            id=uuid.uuid4(),
            booking_number=await generate_booking_number(db),
            listing_id=listing.id,
            guest_id=guest.id,
            host_id=listing.host_id,
            check_in=check_in,
            check_out=check_out,
            nights=nights,
            adults=guests.adults,
            children=guests.children,
            infants=guests.infants,
            pets=guests.pets,
            base_price=pricing.base_price,
            subtotal=pricing.subtotal,
            cleaning_fee=pricing.cleaning_fee,
            service_fee=pricing.service_fee,
            taxes=pricing.taxes,
            weekly_discount=pricing.weekly_discount,
            monthly_discount=pricing.monthly_discount,
            total_amount=pricing.total_amount,
            currency=listing.currency,
            payment_method=payment_method,
            payment_status="pending",
            status="pending",
            refund_policy=listing.cancellation_policy or DEFAULT_POLICY.value,
            special_requests=special_requests,
        )
        db.add(booking)
        await db.flush()

        listing.blocked_dates.append(
            BlockedDate(
                listing_id=listing.id,
                start_date=check_in,
                end_date=check_out,
                reason="booked",
                booking_id=booking.id,
            )
        )
        listing.total_bookings = (listing.total_bookings or 0) + 1

        try:
            await db.flush()
        except StaleDataError:
            logger.warning(f"Concurrent booking on listing {listing.id} for {check_in}..{check_out}")
            raise DatesNotAvailable()

        logger.info(
            f"Booking {booking.booking_number} created: listing={listing.id} "
            f"guest={guest.id} {check_in}..{check_out} total={booking.total_amount}"
        )
        return booking

    async def change_status(
        self,
        db: AsyncSession,
        booking: Booking,
        actor: User,
        target: str,
        reason: str | None = None,
    ) -> Booking:
        """Move a booking to ``target`` on behalf of its guest or host."""
        assert_transition_actor(
            target,
            is_guest=booking.guest_id == actor.id,
            is_host=booking.host_id == actor.id,
        )
        assert_booking_transition(booking.status, target)

        if is_cancellation(target):
            return await self.cancel(db, booking, actor, target, reason)

        previous = booking.status
        booking.status = target
        timestamp_field = STATUS_TIMESTAMPS.get(target)
        if timestamp_field:
            setattr(booking, timestamp_field, utcnow())

        logger.info(f"Booking {booking.booking_number}: {previous} → {target} by {actor.id}")
        await db.flush()
        return booking

    async def cancel(
        self,
        db: AsyncSession,
        booking: Booking,
        actor: User,
        target: str,
        reason: str | None = None,
    ) -> Booking:
        """Cancel a booking, record the refund and release its dates."""
        now = utcnow()
        if not booking.can_be_cancelled:
            raise InvalidBookingStatus("This booking can no longer be cancelled")

        refund = calculate_refund(
            booking.total_amount, booking.check_in, booking.refund_policy or DEFAULT_POLICY, now
        )

        booking.status = target
        booking.cancelled_by = actor.id
        booking.cancelled_at = now
        booking.cancellation_reason = reason
        booking.cancellation_refund_amount = refund

        booking.refund_amount = refund
        booking.refund_reason = reason or f"Booking {target.replace('_', ' ')}"
        if booking.payment_status == "completed":
            new_payment_status = refund_status(booking.total_amount, refund)
            if new_payment_status:
                assert_payment_transition(booking.payment_status, new_payment_status)
                booking.payment_status = new_payment_status
                booking.refunded_at = now

        await db.execute(delete(BlockedDate).where(BlockedDate.booking_id == booking.id))
        await db.flush()

        logger.info(
            f"Booking {booking.booking_number} {target} by {actor.id}: "
            f"refund={refund} policy={booking.refund_policy}"
        )
        return booking

    async def pay(self, db: AsyncSession, booking: Booking, actor: User) -> Booking:
        """Mock payment: mark the booking's payment completed."""
        if booking.guest_id != actor.id:
            raise AuthorizationError("Only the guest can pay for this booking")
        if booking.status not in ("pending", "confirmed"):
            raise InvalidBookingStatus(f"Cannot pay for a booking that is {booking.status}")
        assert_payment_transition(booking.payment_status, "completed")

        booking.payment_status = "completed"
        booking.transaction_id = generate_transaction_id()
        booking.paid_at = utcnow()
        await db.flush()

        logger.info(f"Payment completed for booking {booking.booking_number}: {booking.transaction_id}")
        return booking

    async def send_message(
        self, db: AsyncSession, booking: Booking, sender: User, text: str
    ) -> BookingMessage:
        """Append a message to the booking thread."""
        if not booking.is_party(sender.id):
            raise AuthorizationError("Only the guest or host can message on this booking")

        message = BookingMessage(booking_id=booking.id, sender_id=sender.id, message=text)
        db.add(message)
        await db.flush()
        return message

    async def list_messages(self, db: AsyncSession, booking: Booking) -> list[BookingMessage]:
        result = await db.execute(
            select(BookingMessage)
            .where(BookingMessage.booking_id == booking.id)
            .order_by(BookingMessage.created_at)
        )
        return list(result.scalars().all())

    async def mark_messages_read(self, db: AsyncSession, booking: Booking, reader: User) -> int:
        """Mark the other party's unread messages as read; returns how many."""
        if not booking.is_party(reader.id):
            raise AuthorizationError("Only the guest or host can read this booking's messages")

        result = await db.execute(
            select(BookingMessage).where(
                BookingMessage.booking_id == booking.id,
                BookingMessage.sender_id != reader.id,
                BookingMessage.is_read.is_(False),
            )
        )
        unread = list(result.scalars().all())
        for message in unread:
            message.is_read = True
        await db.flush()
        return len(unread)


# Singleton instance
booking_service = BookingService()
