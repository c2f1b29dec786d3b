import logging
from decimal import Decimal

import pytest

from order_pricing.engine import LineItem, OrderSnapshot, ShippingMethod


@pytest.fixture
def express_order():
    """Items totaling 300, shipped express to the US."""
    return OrderSnapshot(
        items=(LineItem("SKU-001", 3, Decimal("100")),),
        shipping_method=ShippingMethod.EXPRESS,
        country="US",
    )


@pytest.fixture
def mixed_order():
    """2 x 50 + 1 x 100, standard shipping."""
    return OrderSnapshot(
        items=(
            LineItem("SKU-001", 2, Decimal("50")),
            LineItem("SKU-002", 1, Decimal("100")),
        ),
    )


@pytest.fixture
def empty_order():
    return OrderSnapshot()


@pytest.fixture
def pricing_log(caplog):
    caplog.set_level(logging.DEBUG, logger="order_pricing")
    return caplog
