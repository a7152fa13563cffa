from decimal import Decimal

import pytest

from stayfinder.core.exceptions import AuthorizationError, InvalidBookingStatus, ValidationError
from stayfinder.domain.booking_state import (
    TERMINAL_STATUSES,
    assert_booking_transition,
    assert_transition_actor,
)
from stayfinder.domain.payment_state import assert_payment_transition, refund_status


@pytest.mark.parametrize(
    "current, target",
    [
        ("pending", "confirmed"),
        ("pending", "cancelled_by_guest"),
        ("confirmed", "in_progress"),
        ("confirmed", "no_show"),
        ("confirmed", "cancelled_by_host"),
        ("in_progress", "completed"),
    ],
)
def test_allowed_transitions(current, target):
    assert_booking_transition(current, target)


@pytest.mark.parametrize(
    "current, target",
    [
        ("pending", "completed"),
        ("pending", "in_progress"),
        ("in_progress", "cancelled_by_guest"),
        ("completed", "confirmed"),
        ("cancelled_by_guest", "confirmed"),
    ],
)
def test_rejected_transitions(current, target):
    with pytest.raises(InvalidBookingStatus):
        assert_booking_transition(current, target)


def test_terminal_statuses():
    assert TERMINAL_STATUSES == {"completed", "no_show", "cancelled_by_guest", "cancelled_by_host"}


def test_only_host_confirms():
    assert_transition_actor("confirmed", is_guest=False, is_host=True)
    with pytest.raises(AuthorizationError, match="Only the host can confirm bookings"):
        assert_transition_actor("confirmed", is_guest=True, is_host=False)


def test_only_guest_cancels_as_guest():
    assert_transition_actor("cancelled_by_guest", is_guest=True, is_host=False)
    with pytest.raises(AuthorizationError):
        assert_transition_actor("cancelled_by_guest", is_guest=False, is_host=True)


def test_outsider_cannot_drive_any_transition():
    for target in ("confirmed", "cancelled_by_guest", "cancelled_by_host", "completed"):
        with pytest.raises(AuthorizationError):
            assert_transition_actor(target, is_guest=False, is_host=False)


def test_pending_is_not_a_target():
    with pytest.raises(AuthorizationError):
        assert_transition_actor("pending", is_guest=True, is_host=True)


def test_payment_transitions():
    assert_payment_transition("pending", "completed")
    assert_payment_transition("completed", "partially_refunded")
    with pytest.raises(ValidationError):
        assert_payment_transition("pending", "refunded")
    with pytest.raises(ValidationError):
        assert_payment_transition("refunded", "completed")


def test_refund_status():
    total = Decimal("574.00")
    assert refund_status(total, Decimal("574.00")) == "refunded"
    assert refund_status(total, Decimal("287.00")) == "partially_refunded"
    assert refund_status(total, Decimal("0.00")) is None
