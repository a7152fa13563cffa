"""Booking state machine and who may drive each transition."""

from stayfinder.core.exceptions import AuthorizationError, InvalidBookingStatus

BOOKING_TRANSITIONS = {
    "pending": {"confirmed", "cancelled_by_guest", "cancelled_by_host"},
    "confirmed": {"in_progress", "no_show", "cancelled_by_guest", "cancelled_by_host"},
    "in_progress": {"completed"},
    "completed": set(),
    "no_show": set(),
    "cancelled_by_guest": set(),
    "cancelled_by_host": set(),
}

TERMINAL_STATUSES = frozenset(s for s, targets in BOOKING_TRANSITIONS.items() if not targets)
CANCELLED_STATUSES = frozenset({"cancelled_by_guest", "cancelled_by_host"})

# Party allowed to move a booking into each target status
TRANSITION_ACTORS = {
    "confirmed": "host",
    "in_progress": "host",
    "completed": "host",
    "no_show": "host",
    "cancelled_by_guest": "guest",
    "cancelled_by_host": "host",
}


def assert_booking_transition(current: str, target: str) -> None:
    allowed = BOOKING_TRANSITIONS.get(current, set())
    if target not in allowed:
        raise InvalidBookingStatus(
            f"Invalid booking transition: {current} → {target}"
        )


def assert_transition_actor(target: str, *, is_guest: bool, is_host: bool) -> None:
    """Only the booking's own guest or host may change its status; admins may not."""
    actor = TRANSITION_ACTORS.get(target)
    if actor == "host" and not is_host:
        if target == "confirmed":
            raise AuthorizationError("Only the host can confirm bookings")
        raise AuthorizationError("Only the host can perform this action")
    if actor == "guest" and not is_guest:
        raise AuthorizationError("Only the guest can cancel their booking")
    if actor is None:
        raise AuthorizationError(f"Status '{target}' cannot be set directly")


def is_cancellation(target: str) -> bool:
    return target in CANCELLED_STATUSES
