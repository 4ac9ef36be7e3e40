# --- pricing_api/model/pricing.py ---
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Optional, Sequence

from ..utils.money import round_money
from .promotion import DiscountType, Promotion


class DiscountSource(str, Enum):
    DISCOUNT = "discount"
    DEAL = "deal"
    COMBINED = "combined"
    NONE = "none"


def _money(x) -> float:
    return float(round_money(x))


@dataclass(frozen=True)
class AppliedDiscount:
    is_applicable: bool
    source: DiscountSource
    discount_type: Optional[DiscountType]
    discount_value: Decimal
    discount_display: str
    discount_value_per_unit: Decimal

    # breakdown of discount_value_per_unit
    promotion_per_unit: Decimal = Decimal("0")
    deal_per_unit: Decimal = Decimal("0")
    promotion_id: Optional[str] = None

    def as_api(self):
        return {
            "is_applicable": self.is_applicable,
            "source": self.source.value,
            "discount_type": self.discount_type.value if self.discount_type else None,
            "discount_value": float(self.discount_value),
            "discount_display": self.discount_display,
            "discount_value_per_unit": _money(self.discount_value_per_unit),
            "promotion_per_unit": _money(self.promotion_per_unit),
            "deal_per_unit": _money(self.deal_per_unit),
            "promotion_id": self.promotion_id,
        }


@dataclass(frozen=True)
class PriceResolution:
    base_price: Decimal
    quantity: Decimal
    final_price_per_unit: Decimal
    applied_discount: AppliedDiscount

    @property
    def line_subtotal(self) -> Decimal:
        return round_money(self.base_price * self.quantity)

    @property
    def line_discount(self) -> Decimal:
        return round_money(self.applied_discount.discount_value_per_unit * self.quantity)

    @property
    def line_total(self) -> Decimal:
        return self.line_subtotal - self.line_discount

    def as_api(self):
        return {
            "base_price": _money(self.base_price),
            "quantity": float(self.quantity),
            "final_price_per_unit": _money(self.final_price_per_unit),
            "line_subtotal": _money(self.line_subtotal),
            "line_discount": _money(self.line_discount),
            "line_total": _money(self.line_total),
            "applied_discount": self.applied_discount.as_api(),
        }


@dataclass(frozen=True)
class LineItem:
    base_price: Decimal
    quantity: Decimal
    deal: Optional[str] = None
    # candidates; the best applicable one is used
    promotions: Sequence[Promotion] = field(default_factory=tuple)
    product_id: Optional[str] = None
    name: Optional[str] = None
    business_id: Optional[str] = None


@dataclass(frozen=True)
class PricedLine:
    item: LineItem
    resolution: PriceResolution

    def as_api(self):
        return {
            "product_id": self.item.product_id,
            "name": self.item.name,
            "business_id": self.item.business_id,
            **self.resolution.as_api(),
        }


@dataclass(frozen=True)
class OrderTotals:
    lines: Sequence[PricedLine]
    subtotal: Decimal
    discount_total: Decimal
    tax: Decimal
    shipping: Decimal
    commission: Decimal
    total: Decimal
    item_count: Decimal

    def as_api(self):
        return {
            "lines": [ln.as_api() for ln in self.lines],
            "money": {
                "subtotal": _money(self.subtotal),
                "discount_total": _money(self.discount_total),
                "tax": _money(self.tax),
                "shipping": _money(self.shipping),
                "commission": _money(self.commission),
                "total": _money(self.total),
            },
            "item_count": float(self.item_count),
        }
