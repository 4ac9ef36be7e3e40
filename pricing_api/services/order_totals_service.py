# pricing_api/services/order_totals_service.py
from collections import OrderedDict

from ..model import LineItem, OrderTotals, PricedLine
from ..utils.clock import now_utc
from ..utils.money import D, round_money
from .pricing_service import PricingInputError, resolve_price, select_best_promotion, validate_amount
from .promotion_service import promotion_from_record, promotions_from_volume_discount


def price_line(item: LineItem, now) -> PricedLine:
    promotion = select_best_promotion(item.promotions, item.base_price, item.quantity, now)
    resolution = resolve_price(item.base_price, item.quantity, promotion, item.deal, now)
    return PricedLine(item=item, resolution=resolution)


def price_order(items, tax=0, shipping=0, commission=0, now=None) -> OrderTotals:
    """
    Price every line of a cart/order against one clock reading.

    Order:
      1) per-line resolution (promotion + deal)
      2) subtotal and discount from the line figures
      3) tax, shipping and commission are added as given (already computed upstream)
    """
    now = now if now is not None else now_utc()
    tax = validate_amount("tax", tax)
    shipping = validate_amount("shipping", shipping)
    commission = validate_amount("commission", commission)

    lines = [price_line(it, now) for it in items]

    subtotal = sum((ln.resolution.line_subtotal for ln in lines), D(0))
    discount_total = sum((ln.resolution.line_discount for ln in lines), D(0))
    item_count = sum((ln.resolution.quantity for ln in lines), D(0))
    total = round_money(subtotal - discount_total + tax + shipping + commission)

    return OrderTotals(
        lines=lines,
        subtotal=round_money(subtotal),
        discount_total=round_money(discount_total),
        tax=round_money(tax),
        shipping=round_money(shipping),
        commission=round_money(commission),
        total=total,
        item_count=item_count,
    )


def group_by_business(items):
    groups = OrderedDict()
    for it in items:
        groups.setdefault(it.business_id, []).append(it)
    return groups


def line_item_from_payload(payload) -> LineItem:
    if not isinstance(payload, dict):
        raise PricingInputError("each item must be an object")

    price = payload.get("base_price", payload.get("price"))
    if price is None:
        raise PricingInputError("base_price is required")

    promotions = []
    promo = promotion_from_record(payload.get("promotion"))
    if promo is not None:
        promotions.append(promo)
    promotions.extend(promotions_from_volume_discount(payload.get("volume_discount")))

    deal = payload.get("deal")
    return LineItem(
        base_price=validate_amount("base_price", price),
        quantity=validate_amount("quantity", payload.get("quantity", 1)),
        deal=deal if isinstance(deal, str) else None,
        promotions=tuple(promotions),
        product_id=str(payload["product_id"]) if payload.get("product_id") is not None else None,
        name=payload.get("name"),
        business_id=str(payload["business_id"]) if payload.get("business_id") is not None else None,
    )
