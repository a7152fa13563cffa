from datetime import date
from decimal import Decimal

from stayfinder.domain.pricing import compute_pricing, count_nights, to_money


def test_three_night_stay_breakdown():
    pricing = compute_pricing(base_price=150, nights=3, cleaning_fee=25)

    assert pricing.subtotal == Decimal("450.00")
    assert pricing.service_fee == Decimal("63.00")
    assert pricing.taxes == Decimal("36.00")
    assert pricing.cleaning_fee == Decimal("25.00")
    assert pricing.total_amount == Decimal("574.00")


def test_count_nights():
    assert count_nights(date(2024, 3, 15), date(2024, 3, 18)) == 3
    assert count_nights(date(2024, 2, 28), date(2024, 3, 1)) == 2


def test_amounts_are_rounded_to_cents():
    pricing = compute_pricing(base_price=Decimal("99.99"), nights=1)

    assert pricing.service_fee == Decimal("14.00")
    assert pricing.taxes == Decimal("8.00")
    assert pricing.total_amount == Decimal("121.99")


def test_weekly_discount_from_seven_nights():
    pricing = compute_pricing(base_price=100, nights=7, weekly_discount_percent=10)

    assert pricing.weekly_discount == Decimal("70.00")
    assert pricing.monthly_discount == Decimal("0.00")
    # Fees are charged on the discounted subtotal
    assert pricing.service_fee == Decimal("88.20")
    assert pricing.total_amount == Decimal("630.00") + Decimal("88.20") + Decimal("50.40")


def test_no_weekly_discount_below_seven_nights():
    pricing = compute_pricing(base_price=100, nights=6, weekly_discount_percent=10)
    assert pricing.discount_total == Decimal("0.00")


def test_monthly_discount_replaces_weekly():
    pricing = compute_pricing(
        base_price=100, nights=28, weekly_discount_percent=10, monthly_discount_percent=20
    )

    assert pricing.monthly_discount == Decimal("560.00")
    assert pricing.weekly_discount == Decimal("0.00")


def test_custom_rates():
    pricing = compute_pricing(
        base_price=200, nights=2, service_fee_rate=Decimal("0"), tax_rate=Decimal("0.10")
    )
    assert pricing.service_fee == Decimal("0.00")
    assert pricing.total_amount == Decimal("440.00")


def test_to_money_rounds_half_up():
    assert to_money("2.345") == Decimal("2.35")
    assert to_money(1) == Decimal("1.00")
