"""Cancellation policy domain logic.

Policies (days before check-in → refund):
- flexible: 1+ days 100%, otherwise nothing
- moderate: 5+ days 100%, 1+ days 50%, otherwise nothing
- strict: 7+ days 100%, 1+ days 50%, otherwise nothing
- super_strict: 14+ days 100%, 7+ days 50%, otherwise nothing
"""

import math
from datetime import UTC, date, datetime, time
from decimal import Decimal
from enum import Enum

from stayfinder.domain.pricing import to_money


class CancellationPolicy(str, Enum):
    """Cancellation policy types."""

    FLEXIBLE = "flexible"
    MODERATE = "moderate"
    STRICT = "strict"
    SUPER_STRICT = "super_strict"


DEFAULT_POLICY = CancellationPolicy.MODERATE

# Refund rules: list of (min_days_before_checkin, refund_percentage)
# Evaluated in order - first match wins, no match means no refund
POLICY_RULES: dict[CancellationPolicy, list[tuple[int, Decimal]]] = {
    CancellationPolicy.FLEXIBLE: [
        (1, Decimal("100")),
    ],
    CancellationPolicy.MODERATE: [
        (5, Decimal("100")),
        (1, Decimal("50")),
    ],
    CancellationPolicy.STRICT: [
        (7, Decimal("100")),
        (1, Decimal("50")),
    ],
    CancellationPolicy.SUPER_STRICT: [
        (14, Decimal("100")),
        (7, Decimal("50")),
    ],
}

# Statuses from which a booking can no longer be cancelled
NON_CANCELLABLE_STATUSES = frozenset(
    {"completed", "in_progress", "no_show", "cancelled_by_guest", "cancelled_by_host"}
)


def check_in_moment(check_in_date: date) -> datetime:
    """Start of the check-in day in UTC."""
    return datetime.combine(check_in_date, time.min, tzinfo=UTC)


def days_until_check_in(check_in_date: date, now: datetime) -> int:
    """Whole days until check-in, rounded up; negative once check-in has passed."""
    delta = check_in_moment(check_in_date) - now
    return math.ceil(delta.total_seconds() / 86400)


def calculate_refund_percentage(
    policy: str | CancellationPolicy,
    check_in_date: date,
    now: datetime,
) -> Decimal:
    """Calculate refund percentage based on policy and timing.

    Args:
        policy: The cancellation policy type
        check_in_date: Booking check-in date
        now: Moment of cancellation (timezone-aware)

    Returns:
        Decimal: Refund percentage (0-100); 0 for unknown policies
    """
    try:
        policy = CancellationPolicy(policy)
    except ValueError:
        return Decimal("0")

    days_before = days_until_check_in(check_in_date, now)

    for min_days, refund_pct in POLICY_RULES[policy]:
        if days_before >= min_days:
            return refund_pct

    return Decimal("0")


def calculate_refund(
    total_amount: Decimal | int | float,
    check_in_date: date,
    policy: str | CancellationPolicy,
    now: datetime,
) -> Decimal:
    """Refund owed to the guest, rounded to cents."""
    refund_pct = calculate_refund_percentage(policy, check_in_date, now)
    return to_money(Decimal(str(total_amount)) * refund_pct / Decimal("100"))


def can_be_cancelled(status: str, check_in_date: date, now: datetime) -> bool:
    """Whether a booking in this status may still be cancelled."""
    if status in NON_CANCELLABLE_STATUSES or status.startswith("cancelled"):
        return False
    return check_in_moment(check_in_date) > now


def get_policy_description(policy: str | CancellationPolicy) -> str:
    """Get human-readable policy description."""
    descriptions = {
        CancellationPolicy.FLEXIBLE: (
            "Full refund if cancelled at least 1 day before check-in."
        ),
        CancellationPolicy.MODERATE: (
            "Full refund up to 5 days before check-in. "
            "50% refund if cancelled 1-4 days before."
        ),
        CancellationPolicy.STRICT: (
            "Full refund up to 7 days before check-in. "
            "50% refund if cancelled 1-6 days before."
        ),
        CancellationPolicy.SUPER_STRICT: (
            "Full refund up to 14 days before check-in. "
            "50% refund if cancelled 7-13 days before."
        ),
    }

    try:
        policy = CancellationPolicy(policy)
    except ValueError:
        return "Unknown cancellation policy"

    return descriptions[policy]
