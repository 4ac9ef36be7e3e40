# --- pricing_api/model/promotion.py ---
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"  # N% off the unit price
    FIXED = "fixed"            # $N off the unit price


class MinimumOrderType(str, Enum):
    NO_MINIMUM = "no_minimum"
    DOLLAR_AMOUNT = "dollar_amount"


class PromotionStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    EXPIRED = "expired"


@dataclass(frozen=True)
class Promotion:
    discount_type: DiscountType
    discount_value: Decimal
    valid_from: Optional[datetime]
    valid_to: Optional[datetime]
    status: PromotionStatus = PromotionStatus.ACTIVE
    minimum_order_type: MinimumOrderType = MinimumOrderType.NO_MINIMUM
    minimum_amount: Decimal = Decimal("0")

    # passthrough identifiers, never used in arithmetic
    id: Optional[str] = None
    code: Optional[str] = None
    name: Optional[str] = None


@dataclass(frozen=True)
class Deal:
    """A per-product deal such as "10%" or "$5", already parsed."""
    type: DiscountType
    value: Decimal
