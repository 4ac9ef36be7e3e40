from datetime import datetime
from decimal import Decimal

import pytest

from pricing_api import create_app
from pricing_api.config import TestingConfig
from pricing_api.model import DiscountType, MinimumOrderType, Promotion, PromotionStatus


NOW = datetime(2026, 3, 15, 12, 0, 0)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def app():
    return create_app(TestingConfig)


@pytest.fixture
def client(app):
    return app.test_client()


def make_promotion(discount_type=DiscountType.PERCENTAGE, value="10", minimum=None,
                   status=PromotionStatus.ACTIVE,
                   valid_from=datetime(2026, 3, 1), valid_to=datetime(2026, 3, 31, 23, 59, 59),
                   id=None):
    return Promotion(
        discount_type=discount_type,
        discount_value=Decimal(value),
        valid_from=valid_from,
        valid_to=valid_to,
        status=status,
        minimum_order_type=(
            MinimumOrderType.DOLLAR_AMOUNT if minimum is not None else MinimumOrderType.NO_MINIMUM
        ),
        minimum_amount=Decimal(minimum or "0"),
        id=id,
    )


@pytest.fixture
def promotion_factory():
    return make_promotion
