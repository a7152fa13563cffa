"""Booking price calculation.

All amounts are Decimal and quantized to cents at every stage, so a stored
snapshot always adds up: total = subtotal - discounts + cleaning + service fee + taxes.
"""

import math
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")

SERVICE_FEE_RATE = Decimal("0.14")
TAX_RATE = Decimal("0.08")

WEEKLY_DISCOUNT_MIN_NIGHTS = 7
MONTHLY_DISCOUNT_MIN_NIGHTS = 28


def to_money(value: Decimal | int | float | str) -> Decimal:
    """Quantize a value to cents."""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def count_nights(check_in: date, check_out: date) -> int:
    """Number of nights between two dates, rounded up."""
    seconds = (check_out - check_in).total_seconds()
    return math.ceil(seconds / 86400)


@dataclass(frozen=True)
class PricingBreakdown:
    base_price: Decimal
    nights: int
    subtotal: Decimal
    cleaning_fee: Decimal
    service_fee: Decimal
    taxes: Decimal
    weekly_discount: Decimal
    monthly_discount: Decimal
    total_amount: Decimal

    @property
    def discount_total(self) -> Decimal:
        return self.weekly_discount + self.monthly_discount


def compute_pricing(
    base_price: Decimal | int | float,
    nights: int,
    cleaning_fee: Decimal | int | float = 0,
    service_fee_rate: Decimal = SERVICE_FEE_RATE,
    tax_rate: Decimal = TAX_RATE,
    weekly_discount_percent: Decimal | int | float = 0,
    monthly_discount_percent: Decimal | int | float = 0,
) -> PricingBreakdown:
    """Compute the full price of a stay.

    Service fee and taxes are charged on the (discounted) subtotal. A monthly
    discount applies from 28 nights and replaces the weekly one; a weekly
    discount applies from 7 nights. Guest-capacity checks are the caller's job.

    Args:
        base_price: Nightly rate
        nights: Number of nights (> 0)
        cleaning_fee: One-time cleaning fee
        service_fee_rate: Fraction of subtotal charged as service fee
        tax_rate: Fraction of subtotal charged as taxes
        weekly_discount_percent: Listing weekly discount (0-100)
        monthly_discount_percent: Listing monthly discount (0-100)

    Returns:
        PricingBreakdown: Every component of the price
    """
    base = to_money(base_price)
    subtotal = to_money(base * nights)

    weekly_discount = Decimal("0.00")
    monthly_discount = Decimal("0.00")
    monthly_pct = Decimal(str(monthly_discount_percent))
    weekly_pct = Decimal(str(weekly_discount_percent))
    if nights >= MONTHLY_DISCOUNT_MIN_NIGHTS and monthly_pct > 0:
        monthly_discount = to_money(subtotal * monthly_pct / 100)
    elif nights >= WEEKLY_DISCOUNT_MIN_NIGHTS and weekly_pct > 0:
        weekly_discount = to_money(subtotal * weekly_pct / 100)

    discounted = subtotal - weekly_discount - monthly_discount
    cleaning = to_money(cleaning_fee)
    service_fee = to_money(discounted * Decimal(str(service_fee_rate)))
    taxes = to_money(discounted * Decimal(str(tax_rate)))

    return PricingBreakdown(
        base_price=base,
        nights=nights,
        subtotal=subtotal,
        cleaning_fee=cleaning,
        service_fee=service_fee,
        taxes=taxes,
        weekly_discount=weekly_discount,
        monthly_discount=monthly_discount,
        total_amount=discounted + cleaning + service_fee + taxes,
    )
