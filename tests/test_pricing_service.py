from datetime import datetime
from decimal import Decimal

import pytest

from pricing_api.model import DiscountSource, DiscountType
from pricing_api.services.pricing_service import (
    PricingInputError,
    get_discount_message,
    get_unlock_message,
    resolve_price,
    select_best_promotion,
    validate_amount,
)


def test_promotion_and_deal_stack_additively(promotion_factory, now):
    res = resolve_price(100, 1, promotion_factory(value="10"), "$5", now)
    applied = res.applied_discount

    assert applied.source == DiscountSource.COMBINED
    assert applied.is_applicable is True
    assert applied.promotion_per_unit == Decimal("10.00")
    assert applied.deal_per_unit == Decimal("5.00")
    assert applied.discount_value_per_unit == Decimal("15.00")
    assert res.final_price_per_unit == Decimal("85.00")
    assert applied.discount_display == "10% + $5.00"


def test_percentage_promotion_only(promotion_factory, now):
    res = resolve_price(45, 1, promotion_factory(value="20"), None, now)
    assert res.final_price_per_unit == Decimal("36.00")
    assert res.applied_discount.source == DiscountSource.DISCOUNT
    assert res.applied_discount.discount_display == "20%"
    assert res.applied_discount.discount_type == DiscountType.PERCENTAGE


def test_deal_only(now):
    res = resolve_price(55, 1, None, "10%", now)
    assert res.final_price_per_unit == Decimal("49.50")
    assert res.applied_discount.source == DiscountSource.DEAL
    assert res.applied_discount.discount_display == "10%"
    assert res.applied_discount.promotion_id is None


def test_minimum_purchase_gates_promotion(promotion_factory, now):
    promo = promotion_factory(minimum="50")

    res = resolve_price(10, 1, promo, None, now)
    assert res.applied_discount.source == DiscountSource.NONE
    assert res.applied_discount.is_applicable is False
    assert res.final_price_per_unit == Decimal("10")

    res = resolve_price(10, 1, promo, "$1", now)
    assert res.applied_discount.source == DiscountSource.DEAL
    assert res.final_price_per_unit == Decimal("9.00")


def test_minimum_is_checked_against_line_subtotal(promotion_factory, now):
    promo = promotion_factory(value="10", minimum="50")
    res = resolve_price(10, 5, promo, None, now)
    assert res.applied_discount.source == DiscountSource.DISCOUNT
    assert res.final_price_per_unit == Decimal("9.00")
    assert res.line_subtotal == Decimal("50.00")
    assert res.line_discount == Decimal("5.00")
    assert res.line_total == Decimal("45.00")


def test_fixed_discount_is_capped_at_unit_price(promotion_factory, now):
    res = resolve_price(4, 2, promotion_factory(discount_type=DiscountType.FIXED, value="10"), None, now)
    assert res.final_price_per_unit == Decimal("0")
    assert res.applied_discount.discount_value_per_unit == Decimal("4")


def test_stacked_discounts_never_go_negative(promotion_factory, now):
    res = resolve_price(20, 1, promotion_factory(value="80"), "$10", now)
    assert res.final_price_per_unit == Decimal("0")
    assert res.applied_discount.discount_value_per_unit == Decimal("20")
    assert res.applied_discount.promotion_per_unit + res.applied_discount.deal_per_unit == Decimal("26.00")


def test_percentages_combine_against_original_price(promotion_factory, now):
    # 10% then 10% of the original, not of 90
    res = resolve_price(100, 1, promotion_factory(value="10"), "10%", now)
    assert res.final_price_per_unit == Decimal("80.00")
    assert res.applied_discount.discount_type == DiscountType.PERCENTAGE
    assert res.applied_discount.discount_display == "20%"


def test_two_fixed_discounts_show_dollar_sum(promotion_factory, now):
    res = resolve_price(30, 1, promotion_factory(discount_type=DiscountType.FIXED, value="3"), "$2.50", now)
    assert res.final_price_per_unit == Decimal("24.50")
    assert res.applied_discount.discount_display == "$5.50"


def test_mixed_display_lists_percentage_first(promotion_factory, now):
    res = resolve_price(100, 1, promotion_factory(discount_type=DiscountType.FIXED, value="5"), "10%", now)
    assert res.applied_discount.discount_display == "10% + $5.00"
    assert res.applied_discount.discount_type == DiscountType.FIXED
    assert res.applied_discount.discount_value == Decimal("15.00")


def test_unparseable_deal_is_inert(promotion_factory, now):
    promo = promotion_factory(value="15")
    for price, qty in ((10, 1), (99.99, 3), (0, 4)):
        assert resolve_price(price, qty, promo, "buy one get one", now) == resolve_price(price, qty, promo, None, now)


def test_expired_promotion_is_ignored(promotion_factory):
    promo = promotion_factory(valid_from=datetime(2026, 1, 1), valid_to=datetime(2026, 1, 31))
    res = resolve_price(100, 1, promo, None, datetime(2026, 2, 1))
    assert res.applied_discount.source == DiscountSource.NONE
    assert res.final_price_per_unit == Decimal("100")


def test_resolution_is_deterministic(promotion_factory, now):
    args = (Decimal("19.99"), 3, promotion_factory(value="12.5"), "$1.25", now)
    first = resolve_price(*args)
    for _ in range(5):
        assert resolve_price(*args) == first


def test_rounding_to_cents(promotion_factory, now):
    res = resolve_price("19.99", 1, promotion_factory(value="12.5"), None, now)
    # 2.49875 -> 2.50
    assert res.applied_discount.discount_value_per_unit == Decimal("2.50")
    assert res.final_price_per_unit == Decimal("17.49")


def test_zero_value_deal_does_not_count(now):
    res = resolve_price(10, 1, None, "0%", now)
    assert res.applied_discount.source == DiscountSource.NONE


def test_zero_price_never_discounted(promotion_factory, now):
    res = resolve_price(0, 1, promotion_factory(), "$5", now)
    assert res.final_price_per_unit == Decimal("0")
    assert res.applied_discount.source == DiscountSource.NONE


@pytest.mark.parametrize("price,qty", [
    (-1, 1), (10, -2), (float("nan"), 1), (10, float("inf")), ("abc", 1), (None, 1),
])
def test_invalid_numeric_input_is_rejected(price, qty, now):
    with pytest.raises(PricingInputError):
        resolve_price(price, qty, None, None, now)


def test_invalid_input_is_a_value_error(now):
    with pytest.raises(ValueError):
        resolve_price(-5, 1, None, None, now)


def test_promotion_id_is_carried(promotion_factory, now):
    res = resolve_price(50, 1, promotion_factory(id="41"), None, now)
    assert res.applied_discount.promotion_id == "41"


def test_as_api_shape(promotion_factory, now):
    data = resolve_price(100, 2, promotion_factory(value="10"), "$5", now).as_api()
    assert data["final_price_per_unit"] == 85.0
    assert data["line_total"] == 170.0
    assert data["applied_discount"]["source"] == "combined"
    assert data["applied_discount"]["discount_value_per_unit"] == 15.0


# ---- messages ---------------------------------------------------------------

def test_discount_messages(promotion_factory, now):
    promo = promotion_factory(value="10")
    assert get_discount_message(resolve_price(100, 1, promo, None, now).applied_discount) == \
        "Discount applied: save $10.00"
    assert get_discount_message(resolve_price(100, 1, None, "$5", now).applied_discount) == \
        "Special deal: save $5.00"
    assert get_discount_message(resolve_price(100, 1, promo, "$5", now).applied_discount) == \
        "Combo offer: save $15.00"
    assert get_discount_message(resolve_price(100, 1, None, None, now).applied_discount) == ""
    assert get_discount_message(None) == ""


def test_unlock_message(promotion_factory, now):
    promo = promotion_factory(value="5", minimum="500")
    assert get_unlock_message(promo, "350", now) == "Spend $150.00 more to unlock 5% off"
    assert get_unlock_message(promo, 600, now) == ""
    assert get_unlock_message(None, 0, now) == ""


# ---- best of several --------------------------------------------------------

def test_select_best_promotion(promotion_factory, now):
    small = promotion_factory(value="5")
    big = promotion_factory(discount_type=DiscountType.FIXED, value="8", minimum="100")
    gated = promotion_factory(value="50", minimum="10000")

    assert select_best_promotion([small, big, gated], 50, 1, now) is small
    assert select_best_promotion([small, big, gated], 50, 2, now) is big
    assert select_best_promotion([], 50, 1, now) is None
    assert select_best_promotion(None, 50, 1, now) is None


def test_select_best_promotion_first_wins_ties(promotion_factory, now):
    a = promotion_factory(value="10", id="a")
    b = promotion_factory(discount_type=DiscountType.FIXED, value="5", id="b")
    assert select_best_promotion([a, b], 50, 1, now) is a


@pytest.mark.parametrize("price,qty", [
    ("1e999999", 1), (10, "1e999999"), ("1e30", 1), (10, Decimal("1000000000.01")),
])
def test_oversized_input_is_rejected(price, qty, now):
    with pytest.raises(PricingInputError):
        resolve_price(price, qty, None, None, now)


def test_validate_amount_accepts_the_ceiling():
    assert validate_amount("base_price", "1000000000") == Decimal("1000000000")


def test_largest_accepted_line_prices_cleanly(promotion_factory, now):
    res = resolve_price("1000000000", "1000000000", promotion_factory(value="33.33"), "$0.01", now)
    assert res.final_price_per_unit == Decimal("666700000.00") - Decimal("0.01")


def test_stacked_percentages_display_at_most_100(promotion_factory, now):
    res = resolve_price(10, 1, promotion_factory(value="80"), "50%", now)
    assert res.final_price_per_unit == Decimal("0")
    assert res.applied_discount.discount_display == "100%"
    assert res.applied_discount.discount_value == Decimal("100")


def test_single_percentage_over_100_displays_100(now):
    res = resolve_price(10, 1, None, "150%", now)
    assert res.final_price_per_unit == Decimal("0")
    assert res.applied_discount.discount_display == "100%"
