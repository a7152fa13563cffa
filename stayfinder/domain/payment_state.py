"""Payment status of a booking.

A booking starts ``pending``; the mock gateway moves it to ``completed`` or
``failed``. Only a completed payment can be refunded, fully or in part.
"""

from decimal import Decimal

from stayfinder.core.exceptions import ValidationError

PAYMENT_TRANSITIONS = {
    "pending": {"completed", "failed"},
    "completed": {"refunded", "partially_refunded"},
    "failed": set(),
    "refunded": set(),
    "partially_refunded": set(),
}


def assert_payment_transition(current: str, target: str) -> None:
    if target not in PAYMENT_TRANSITIONS.get(current, set()):
        raise ValidationError(f"Payment cannot move from {current} to {target}")


def refund_status(total_amount: Decimal, refund_amount: Decimal) -> str | None:
    """Payment status after refunding ``refund_amount`` of a completed payment."""
    if refund_amount <= 0:
        return None
    return "refunded" if refund_amount >= total_amount else "partially_refunded"
