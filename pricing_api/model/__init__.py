# ------ pricing_api/model/__init__.py ------

from .promotion import Deal, DiscountType, MinimumOrderType, Promotion, PromotionStatus
from .pricing import (
    AppliedDiscount,
    DiscountSource,
    LineItem,
    OrderTotals,
    PricedLine,
    PriceResolution,
)

__all__ = [
    "Deal",
    "DiscountType",
    "MinimumOrderType",
    "Promotion",
    "PromotionStatus",
    "AppliedDiscount",
    "DiscountSource",
    "LineItem",
    "OrderTotals",
    "PricedLine",
    "PriceResolution",
]
