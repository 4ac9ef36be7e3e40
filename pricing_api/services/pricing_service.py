# pricing_api/services/pricing_service.py
"""
Price resolution: one base price, one quantity, at most one promotion and at
most one deal in; one final unit price out.

Stacking rules:
  1) promotion and deal are each converted to a per-unit dollar amount
     against the *original* base price (never against a discounted price)
  2) percentage -> P * V / 100, fixed -> min(V, P), each rounded to cents
  3) the two amounts are added and capped at P, so the unit price never
     drops below zero
"""
import logging

from ..model import (
    AppliedDiscount,
    Deal,
    DiscountSource,
    DiscountType,
    PriceResolution,
)
from ..utils.clock import now_utc
from ..utils.money import D, MAX_AMOUNT, Money, format_money, round_money, to_decimal
from .deal_parser import format_deal, parse_deal
from .promotion_service import amount_to_unlock, is_promotion_applicable

log = logging.getLogger(__name__)

ZERO = D(0)


class PricingInputError(ValueError):
    """Raised for caller bugs: negative or non-numeric price/quantity."""


def validate_amount(name: str, value) -> Money:
    d = to_decimal(value) if value is not None else None
    if d is None or not d.is_finite():
        log.warning("rejected %s=%r", name, value)
        raise PricingInputError(f"{name} must be a finite number")
    if d < 0:
        log.warning("rejected %s=%r", name, value)
        raise PricingInputError(f"{name} must be >= 0")
    if d > MAX_AMOUNT:
        log.warning("rejected %s=%r", name, value)
        raise PricingInputError(f"{name} must be <= {MAX_AMOUNT}")
    return d


def discount_per_unit(base_price: Money, discount_type, value) -> Money:
    value = D(value)
    if value <= 0 or base_price <= 0:
        return ZERO
    if discount_type == DiscountType.PERCENTAGE:
        return min(base_price, round_money(base_price * value / D(100)))
    if discount_type == DiscountType.FIXED:
        return min(base_price, round_money(value))
    return ZERO


def _display(discount_type, value) -> str:
    value = D(value)
    if discount_type == DiscountType.PERCENTAGE:
        # nothing takes off more than the whole price
        value = min(value, D(100))
    return format_deal(Deal(type=discount_type, value=value))


def _combined(promotion, deal: Deal, total: Money):
    """discount_type, discount_value, discount_display for a stacked pair."""
    if promotion.discount_type == deal.type == DiscountType.PERCENTAGE:
        pct = min(D(100), D(promotion.discount_value) + deal.value)
        return DiscountType.PERCENTAGE, pct, _display(DiscountType.PERCENTAGE, pct)
    if promotion.discount_type == deal.type == DiscountType.FIXED:
        return DiscountType.FIXED, total, format_money(total)
    # mixed: show both parts, percentage first
    parts = [_display(promotion.discount_type, promotion.discount_value), _display(deal.type, deal.value)]
    if promotion.discount_type == DiscountType.FIXED:
        parts.reverse()
    return DiscountType.FIXED, total, " + ".join(parts)


def _no_discount() -> AppliedDiscount:
    return AppliedDiscount(
        is_applicable=False,
        source=DiscountSource.NONE,
        discount_type=None,
        discount_value=ZERO,
        discount_display="",
        discount_value_per_unit=ZERO,
    )


def resolve_price(base_price, quantity, promotion=None, deal=None, now=None) -> PriceResolution:
    price = validate_amount("base_price", base_price)
    qty = validate_amount("quantity", quantity)
    now = now if now is not None else now_utc()

    promo_off = ZERO
    if is_promotion_applicable(promotion, price * qty, now):
        promo_off = discount_per_unit(price, promotion.discount_type, promotion.discount_value)

    parsed = parse_deal(deal)
    deal_off = discount_per_unit(price, parsed.type, parsed.value) if parsed else ZERO

    total = min(price, promo_off + deal_off)

    if promo_off > 0 and deal_off > 0:
        dtype, dvalue, display = _combined(promotion, parsed, total)
        source = DiscountSource.COMBINED
    elif promo_off > 0:
        dtype, dvalue = promotion.discount_type, D(promotion.discount_value)
        display, source = _display(dtype, dvalue), DiscountSource.DISCOUNT
    elif deal_off > 0:
        dtype, dvalue = parsed.type, parsed.value
        display, source = _display(dtype, dvalue), DiscountSource.DEAL
    else:
        log.debug("no discount for price=%s qty=%s", price, qty)
        return PriceResolution(price, qty, price, _no_discount())

    applied = AppliedDiscount(
        is_applicable=True,
        source=source,
        discount_type=dtype,
        discount_value=dvalue,
        discount_display=display,
        discount_value_per_unit=total,
        promotion_per_unit=promo_off,
        deal_per_unit=deal_off,
        promotion_id=promotion.id if promo_off > 0 else None,
    )
    log.debug("price=%s qty=%s source=%s off=%s", price, qty, source.value, total)
    return PriceResolution(price, qty, max(ZERO, price - total), applied)


def select_best_promotion(promotions, base_price, quantity, now=None):
    """Best-for-customer pick among candidate promotions (first wins ties)."""
    price = validate_amount("base_price", base_price)
    qty = validate_amount("quantity", quantity)
    now = now if now is not None else now_utc()

    best, best_off = None, ZERO
    for promo in promotions or ():
        if not is_promotion_applicable(promo, price * qty, now):
            continue
        off = discount_per_unit(price, promo.discount_type, promo.discount_value)
        if best is None or off > best_off:
            best, best_off = promo, off
    return best


_MESSAGES = {
    DiscountSource.DISCOUNT: "Discount applied: save {}",
    DiscountSource.DEAL: "Special deal: save {}",
    DiscountSource.COMBINED: "Combo offer: save {}",
}


def get_discount_message(applied) -> str:
    if applied is None or not applied.is_applicable:
        return ""
    template = _MESSAGES.get(applied.source)
    if template is None:
        return ""
    return template.format(format_money(applied.discount_value_per_unit))


def get_unlock_message(promotion, subtotal, now=None) -> str:
    needed = amount_to_unlock(promotion, subtotal, now)
    if needed is None:
        return ""
    return (
        f"Spend {format_money(needed)} more to unlock "
        f"{_display(promotion.discount_type, promotion.discount_value)} off"
    )
