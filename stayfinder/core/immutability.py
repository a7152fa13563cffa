"""Immutability enforcement for booking records using SQLAlchemy events."""

import logging
from datetime import UTC, datetime

from sqlalchemy import event, inspect

from stayfinder.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

# Captured when the booking is created; never rewritten
BOOKING_SNAPSHOT_FIELDS = (
    "listing_id",
    "guest_id",
    "host_id",
    "check_in",
    "check_out",
    "nights",
    "base_price",
    "subtotal",
    "cleaning_fee",
    "service_fee",
    "taxes",
    "weekly_discount",
    "monthly_discount",
    "coupon_discount",
    "total_amount",
    "currency",
)

# The only column of a message that may change after it is sent
MESSAGE_MUTABLE_FIELDS = frozenset({"is_read"})

_registered = False


class ImmutabilityViolationError(ValidationError):
    """Raised when attempting to modify an immutable booking record."""

    def __init__(self, model_name: str, operation: str, record_id: str, fields: list[str] | None = None):
        self.model_name = model_name
        self.operation = operation
        self.record_id = record_id
        self.fields = fields or []
        detail = f"Immutability violation: Cannot {operation} {model_name} record {record_id}"
        if self.fields:
            detail += f" ({', '.join(self.fields)})"
        super().__init__(detail)


def _log_immutability_violation(model_name: str, operation: str, record_id: str) -> None:
    logger.error(
        f"IMMUTABILITY_VIOLATION: Attempted to {operation} {model_name} "
        f"record_id={record_id} at {datetime.now(UTC).isoformat()}"
    )


def changed_fields(target, fields) -> list[str]:
    """Names among ``fields`` whose value differs from the loaded one."""
    state = inspect(target)
    return [name for name in fields if state.attrs[name].history.has_changes()]


def register_immutability_enforcement() -> None:
    """Register SQLAlchemy event listeners for immutability enforcement.

    Safe to call more than once.
    """
    global _registered
    if _registered:
        return

    from stayfinder.models.booking import Booking, BookingMessage

    # ============ Booking: pricing snapshot is frozen ============

    @event.listens_for(Booking, "before_update")
    def prevent_snapshot_update(mapper, connection, target):
        fields = changed_fields(target, BOOKING_SNAPSHOT_FIELDS)
        if fields:
            _log_immutability_violation("Booking", "UPDATE", str(target.id))
            raise ImmutabilityViolationError("Booking", "UPDATE", str(target.id), fields)

    @event.listens_for(Booking, "before_delete")
    def prevent_booking_delete(mapper, connection, target):
        _log_immutability_violation("Booking", "DELETE", str(target.id))
        raise ImmutabilityViolationError("Booking", "DELETE", str(target.id))

    # ============ BookingMessage: append-only ============

    @event.listens_for(BookingMessage, "before_update")
    def prevent_message_update(mapper, connection, target):
        state = inspect(target)
        fields = [
            attr.key
            for attr in mapper.column_attrs
            if attr.key not in MESSAGE_MUTABLE_FIELDS
            and state.attrs[attr.key].history.has_changes()
        ]
        if fields:
            _log_immutability_violation("BookingMessage", "UPDATE", str(target.id))
            raise ImmutabilityViolationError("BookingMessage", "UPDATE", str(target.id), fields)

    @event.listens_for(BookingMessage, "before_delete")
    def prevent_message_delete(mapper, connection, target):
        _log_immutability_violation("BookingMessage", "DELETE", str(target.id))
        raise ImmutabilityViolationError("BookingMessage", "DELETE", str(target.id))

    _registered = True
    logger.info("Immutability enforcement registered for booking records")
