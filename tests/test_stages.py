"""
Unit tests for the individual pricing stages.
"""
from decimal import Decimal

import pytest

from order_pricing.engine import (
    BaseCalculator,
    ConstructionError,
    CouponAmountStage,
    CouponPercentStage,
    LineItem,
    OrderSnapshot,
    ShippingFeeStage,
    ShippingMethod,
    TaxStage,
    ValidationError,
    clamp,
    flat_rate,
)


# ---------------------------------------------------------------------------
# BaseCalculator
# ---------------------------------------------------------------------------

def test_base_empty_order_is_zero(empty_order):
    assert BaseCalculator().calculate(empty_order) == Decimal("0")


def test_base_sums_line_subtotals(mixed_order):
    assert BaseCalculator().calculate(mixed_order) == Decimal("200")


def test_base_ignores_upstream(mixed_order):
    assert BaseCalculator().apply(mixed_order, Decimal("999")) == Decimal("200")


@pytest.mark.parametrize(
    "item",
    [
        LineItem("SKU-ZERO", 0, Decimal("10")),
        LineItem("SKU-NEG-QTY", -2, Decimal("10")),
        LineItem("SKU-NEG-PRICE", 1, Decimal("-0.01")),
        LineItem("SKU-NAN", 1, Decimal("NaN")),
        LineItem("SKU-FLOAT-QTY", 1.5, Decimal("10")),
        LineItem("SKU-BOOL-QTY", True, Decimal("10")),
        LineItem("SKU-TEXT-PRICE", 1, "ten"),
    ],
    ids=["zero-qty", "negative-qty", "negative-price", "nan-price", "float-qty", "bool-qty", "text-price"],
)
def test_base_rejects_invalid_lines(item):
    order = OrderSnapshot(items=(LineItem("SKU-OK", 1, Decimal("5")), item))
    with pytest.raises(ValidationError, match=item.sku):
        BaseCalculator().calculate(order)


def test_base_allows_free_items():
    order = OrderSnapshot(items=(LineItem("FREEBIE", 4, Decimal("0")),))
    assert BaseCalculator().calculate(order) == 0


def test_base_logs_subtotal(mixed_order, pricing_log):
    BaseCalculator().calculate(mixed_order)
    assert any("subtotal=200" in r.getMessage() for r in pricing_log.records)


# ---------------------------------------------------------------------------
# ShippingFeeStage
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "method,fee",
    [(ShippingMethod.STANDARD, Decimal("5")), (ShippingMethod.EXPRESS, Decimal("15"))],
    ids=["standard", "express"],
)
@pytest.mark.parametrize(
    "items",
    [(), (LineItem("A", 1, Decimal("1")),), (LineItem("A", 7, Decimal("19.99")), LineItem("B", 2, Decimal("3")))],
    ids=["no-items", "one-item", "two-items"],
)
def test_shipping_adds_flat_fee(method, fee, items):
    order = OrderSnapshot(items=items, shipping_method=method)
    subtotal = BaseCalculator().calculate(order)
    assert ShippingFeeStage(BaseCalculator()).calculate(order) - subtotal == fee


def test_shipping_fee_override():
    stage = ShippingFeeStage(BaseCalculator(), fees={"express": "25"})
    assert stage.fee_for(ShippingMethod.EXPRESS) == Decimal("25")
    # Unlisted methods keep their default
    assert stage.fee_for(ShippingMethod.STANDARD) == Decimal("5")


def test_shipping_rejects_negative_fee():
    with pytest.raises(ConstructionError):
        ShippingFeeStage(BaseCalculator(), fees={ShippingMethod.STANDARD: -1})


def test_shipping_rejects_unknown_method():
    with pytest.raises(ConstructionError):
        ShippingFeeStage(BaseCalculator(), fees={"overnight": 30})


# ---------------------------------------------------------------------------
# TaxStage
# ---------------------------------------------------------------------------

def test_tax_zero_rate_is_noop(mixed_order):
    assert TaxStage(BaseCalculator(), flat_rate(0)).calculate(mixed_order) == Decimal("200")


def test_tax_without_provider_is_noop(mixed_order):
    assert TaxStage(BaseCalculator()).calculate(mixed_order) == Decimal("200")


def test_tax_full_rate_doubles(mixed_order):
    assert TaxStage(BaseCalculator(), flat_rate(1)).calculate(mixed_order) == Decimal("400")


@pytest.mark.parametrize(
    "rate,expected",
    [("1.5", Decimal("400")), ("-0.3", Decimal("200")), ("0.08", Decimal("216"))],
    ids=["above-one", "negative", "in-range"],
)
def test_tax_rate_is_clamped(mixed_order, rate, expected):
    assert TaxStage(BaseCalculator(), flat_rate(rate)).calculate(mixed_order) == expected


def test_tax_rate_provider_sees_order(mixed_order):
    seen = []

    def provider(order):
        seen.append(order)
        return Decimal("0.10")

    assert TaxStage(BaseCalculator(), provider).calculate(mixed_order) == Decimal("220")
    assert seen == [mixed_order]


def test_tax_rejects_non_callable_provider():
    with pytest.raises(ConstructionError):
        TaxStage(BaseCalculator(), rate_provider=Decimal("0.08"))


# ---------------------------------------------------------------------------
# Coupons
# ---------------------------------------------------------------------------

def test_coupon_percent_discounts(mixed_order):
    assert CouponPercentStage(BaseCalculator(), "0.25").calculate(mixed_order) == Decimal("150")


def test_coupon_percent_full_on_zero_total(empty_order):
    total = CouponPercentStage(BaseCalculator(), 1).calculate(empty_order)
    assert total == 0
    assert total >= 0


@pytest.mark.parametrize("percent", ["1", "2.5", "-1", "0"])
def test_coupon_percent_never_negative(mixed_order, percent):
    assert CouponPercentStage(BaseCalculator(), percent).calculate(mixed_order) >= 0


def test_coupon_percent_clamped_at_construction():
    assert CouponPercentStage(BaseCalculator(), "3").percent == Decimal("1")
    assert CouponPercentStage(BaseCalculator(), "-0.5").percent == Decimal("0")


def test_coupon_percent_rejects_non_number():
    with pytest.raises(ConstructionError):
        CouponPercentStage(BaseCalculator(), "ten percent")


def test_coupon_amount_floors_at_zero(mixed_order):
    assert CouponAmountStage(BaseCalculator(), 10).calculate(mixed_order) == Decimal("190")
    assert CouponAmountStage(BaseCalculator(), 500).calculate(mixed_order) == Decimal("0")


def test_coupon_amount_rejects_negative_amount():
    with pytest.raises(ConstructionError):
        CouponAmountStage(BaseCalculator(), "-5")


# ---------------------------------------------------------------------------
# Composition
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "make_stage",
    [
        lambda inner: ShippingFeeStage(inner),
        lambda inner: TaxStage(inner),
        lambda inner: CouponPercentStage(inner, "0.1"),
        lambda inner: CouponAmountStage(inner, 1),
    ],
    ids=["shipping", "tax", "coupon-percent", "coupon-amount"],
)
@pytest.mark.parametrize("inner", [None, "not a stage"], ids=["none", "string"])
def test_wrapping_stage_requires_inner_stage(make_stage, inner):
    with pytest.raises(ConstructionError):
        make_stage(inner)


def test_clamp():
    assert clamp(Decimal("-1"), Decimal("0"), Decimal("1")) == 0
    assert clamp(Decimal("0.4"), Decimal("0"), Decimal("1")) == Decimal("0.4")
    assert clamp(Decimal("7"), Decimal("0"), Decimal("1")) == 1


def test_line_item_subtotal():
    assert LineItem("A", 3, Decimal("19.99")).subtotal == Decimal("59.97")
