# pricing_api/services/promotion_service.py
"""
Promotion normalisation and applicability.

Promotions arrive from the promotions store as loosely typed records
(numbers as strings, several date formats, "amount" for fixed discounts).
Everything here fails closed: a record we cannot read with confidence is
either dropped (``None``) or kept with missing dates, and a promotion with
missing dates never applies.
"""
import logging
import re
from datetime import date, datetime, time
from decimal import Decimal

from ..model import DiscountType, MinimumOrderType, Promotion, PromotionStatus
from ..utils.clock import as_naive_utc, now_utc
from ..utils.money import D, MAX_AMOUNT, format_money, to_decimal

log = logging.getLogger(__name__)

_DISCOUNT_TYPES = {
    "percentage": DiscountType.PERCENTAGE,
    "percent": DiscountType.PERCENTAGE,
    "fixed": DiscountType.FIXED,
    "amount": DiscountType.FIXED,
}

_MINIMUM_TYPES = {
    "no_minimum": MinimumOrderType.NO_MINIMUM,
    "dollar_amount": MinimumOrderType.DOLLAR_AMOUNT,
    "amount": MinimumOrderType.DOLLAR_AMOUNT,
}

_CODE_RE = re.compile(r"^[A-Z0-9]{3,20}$", re.IGNORECASE)

# volume discounts have no schedule of their own
_ALWAYS_FROM = datetime.min
_ALWAYS_TO = datetime.max


def parse_timestamp(value, end_of_day: bool = False):
    """
    Parse a store timestamp into naive UTC, or None if it can't be read.

    Accepts datetimes, dates, "YYYY-MM-DD HH:MM:SS", ISO-8601 with a
    trailing "Z", and bare dates. A bare date means the start of the day,
    or its last instant when ``end_of_day`` is set.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return as_naive_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.max if end_of_day else time.min)
    if not isinstance(value, str) or not value.strip():
        return None

    s = value.strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    try:
        if len(s) == 10:
            d = date.fromisoformat(s)
            return datetime.combine(d, time.max if end_of_day else time.min)
        return as_naive_utc(datetime.fromisoformat(s))
    except ValueError:
        log.warning("unparseable promotion timestamp %r", value)
        return None


def minimum_purchase(promotion: Promotion) -> Decimal:
    if promotion.minimum_order_type == MinimumOrderType.NO_MINIMUM:
        return D(0)
    return D(promotion.minimum_amount)


def _in_window(promotion: Promotion, now: datetime) -> bool:
    if promotion.valid_from is None or promotion.valid_to is None:
        return False
    return as_naive_utc(promotion.valid_from) <= now <= as_naive_utc(promotion.valid_to)


def promotion_rejection_reason(promotion, subtotal, now=None):
    """Why ``promotion`` does not apply to ``subtotal`` at ``now``, or None if it does."""
    if promotion is None:
        return "Promotion code is invalid or expired."
    if promotion.status == PromotionStatus.EXPIRED:
        return "Promotion code has expired."
    if promotion.status != PromotionStatus.ACTIVE:
        return "Promotion code is no longer active."
    if promotion.valid_from is None or promotion.valid_to is None:
        return "Promotion code is invalid or expired."

    now = as_naive_utc(now) if now is not None else now_utc()
    if now < as_naive_utc(promotion.valid_from):
        return "Promotion has not started yet."
    if now > as_naive_utc(promotion.valid_to):
        return "Promotion code has expired."

    amount = to_decimal(subtotal)
    if amount is None or not amount.is_finite() or amount < 0:
        return "Order subtotal is not a valid amount."
    minimum = minimum_purchase(promotion)
    if not minimum.is_finite():
        return "Promotion minimum order rule is not supported."
    if amount < minimum:
        return f"Spend {format_money(minimum - amount)} more to use this promotion."
    return None


def is_promotion_applicable(promotion, subtotal, now=None) -> bool:
    return promotion_rejection_reason(promotion, subtotal, now) is None


def amount_to_unlock(promotion, subtotal, now=None):
    """How much more must be spent before ``promotion`` kicks in.

    Only meaningful for an active, in-window promotion held back by its
    minimum; returns None in every other case.
    """
    if promotion is None or promotion.status != PromotionStatus.ACTIVE:
        return None
    now = as_naive_utc(now) if now is not None else now_utc()
    if not _in_window(promotion, now):
        return None

    amount = to_decimal(subtotal)
    if amount is None or not amount.is_finite():
        return None
    needed = minimum_purchase(promotion) - amount
    if not needed.is_finite() or needed <= 0:
        return None
    return needed


def is_valid_promotion_code(code) -> bool:
    if not code or not isinstance(code, str):
        return False
    return bool(_CODE_RE.match(code.strip()))


def _deleted(record) -> bool:
    return str(record.get("is_delete") or "0").strip() == "1"


def _non_negative(value):
    d = to_decimal(value)
    if d is None or not d.is_finite() or d < 0 or d > MAX_AMOUNT:
        return None
    return d


def promotion_from_record(record):
    """Build a Promotion from a raw promotions-store record.

    Returns None when the record has no usable discount (unknown type,
    negative, oversized or unreadable value) or when the store has deleted
    it. Callers treat None as "no promotion".
    """
    if not isinstance(record, dict) or not record or _deleted(record):
        return None

    dtype = _DISCOUNT_TYPES.get(str(record.get("discount_type") or "").lower().strip())
    value = _non_negative(record.get("discount_value"))
    if dtype is None or value is None:
        log.debug("dropping promotion %s: type=%r value=%r",
                  record.get("id"), record.get("discount_type"), record.get("discount_value"))
        return None

    try:
        status = PromotionStatus(str(record.get("status") or "").lower().strip())
    except ValueError:
        status = PromotionStatus.INACTIVE

    min_type = _MINIMUM_TYPES.get(
        str(record.get("minimum_order_type") or "no_minimum").lower().strip()
    )
    min_amount = _non_negative(record.get("minimum_amount") or record.get("minimum_purchase"))
    if min_type is None or min_amount is None:
        # unknown gating rule: keep the promotion but make it unreachable
        min_type, min_amount = MinimumOrderType.DOLLAR_AMOUNT, Decimal("Infinity")

    return Promotion(
        discount_type=dtype,
        discount_value=value,
        valid_from=parse_timestamp(record.get("valid_from")),
        valid_to=parse_timestamp(record.get("valid_to"), end_of_day=True),
        status=status,
        minimum_order_type=min_type,
        minimum_amount=min_amount,
        id=str(record["id"]) if record.get("id") is not None else None,
        code=record.get("code"),
        name=record.get("name"),
    )


def promotions_from_volume_discount(record):
    """Expand a tiered volume discount into one always-on Promotion per line."""
    if not isinstance(record, dict) or _deleted(record):
        return []

    status = (
        PromotionStatus.ACTIVE
        if str(record.get("status") or "").lower().strip() == "active"
        else PromotionStatus.INACTIVE
    )

    tiers = []
    for line in record.get("lines") or []:
        if not isinstance(line, dict):
            continue
        dtype = _DISCOUNT_TYPES.get(str(line.get("discount_type") or "").lower().strip())
        value = _non_negative(line.get("discount_value"))
        threshold = _non_negative(line.get("minimum_purchase"))
        if dtype is None or value is None or threshold is None:
            continue
        tiers.append(Promotion(
            discount_type=dtype,
            discount_value=value,
            valid_from=_ALWAYS_FROM,
            valid_to=_ALWAYS_TO,
            status=status,
            minimum_order_type=(
                MinimumOrderType.DOLLAR_AMOUNT if threshold > 0 else MinimumOrderType.NO_MINIMUM
            ),
            minimum_amount=threshold,
            id=str(record["id"]) if record.get("id") is not None else None,
            name=record.get("name"),
        ))
    return tiers
