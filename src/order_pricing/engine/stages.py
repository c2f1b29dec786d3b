"""
Pricing stages - the links of a pricing pipeline.

Every stage exposes one capability, ``apply(order, upstream)``, which turns
the running total produced by the wrapped stage into a new total.
``calculate(order)`` runs the whole chain: the outermost stage calls inward
until the BaseCalculator returns the raw subtotal, then each wrapping stage
applies its transform on the way back out.

Stages hold no per-call state, so a built chain can be reused for any
number of orders.
"""
import logging
from abc import ABC, abstractmethod
from decimal import Decimal, InvalidOperation
from typing import Callable, Optional

from .errors import ConstructionError, ValidationError
from .models import Number, OrderSnapshot, ShippingMethod, as_decimal

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
ONE = Decimal("1")

DEFAULT_SHIPPING_FEES = {
    ShippingMethod.STANDARD: Decimal("5"),
    ShippingMethod.EXPRESS: Decimal("15"),
}

RateProvider = Callable[[OrderSnapshot], Number]


def clamp(value: Decimal, low: Decimal, high: Decimal) -> Decimal:
    """Constrain value into [low, high] without raising."""
    return min(max(value, low), high)


def _static_decimal(value: Number, label: str) -> Decimal:
    """Convert a construction-time parameter, rejecting non-numbers."""
    try:
        result = as_decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ConstructionError(f"{label} must be a number, got {value!r}")
    if not result.is_finite():
        raise ConstructionError(f"{label} must be finite, got {value!r}")
    return result


def _percent_text(fraction: Decimal) -> str:
    return f"{(fraction * 100).normalize():f}"


class PricingStage(ABC):
    """A link in the pricing pipeline."""

    name = "Stage"

    def __init__(self, inner: Optional['PricingStage'] = None):
        self.inner = inner

    def calculate(self, order: OrderSnapshot) -> Decimal:
        """Run this stage and everything it wraps for one order."""
        upstream = self.inner.calculate(order) if self.inner is not None else ZERO
        total = self.apply(order, upstream)
        logger.debug("%s: %s → %s", self.name, upstream, total)
        return total

    @abstractmethod
    def apply(self, order: OrderSnapshot, upstream: Decimal) -> Decimal:
        """Transform the upstream running total into a new total."""

    def describe(self, order: OrderSnapshot) -> str:
        """Short human-readable description used in pricing traces."""
        return self.name


class BaseCalculator(PricingStage):
    """
    Innermost stage: sums line-item subtotals.

    Rejects the order when a line has a non-positive quantity or a negative
    unit price. The upstream value is ignored.
    """

    name = "Subtotal"

    def __init__(self):
        super().__init__(inner=None)

    def apply(self, order: OrderSnapshot, upstream: Decimal) -> Decimal:
        if order is None:
            raise ValidationError("Order is required")

        subtotal = ZERO
        for item in order.items:
            if isinstance(item.quantity, bool) or not isinstance(item.quantity, int):
                raise ValidationError(
                    f"Quantity must be an integer for SKU {item.sku}, got {item.quantity!r}"
                )
            if item.quantity <= 0:
                raise ValidationError(
                    f"Quantity must be positive for SKU {item.sku}, got {item.quantity}"
                )
            try:
                price = as_decimal(item.unit_price)
            except (InvalidOperation, TypeError, ValueError):
                raise ValidationError(
                    f"Unit price must be a number for SKU {item.sku}, got {item.unit_price!r}"
                )
            if not price.is_finite() or price < 0:
                raise ValidationError(
                    f"Unit price must not be negative for SKU {item.sku}, got {item.unit_price}"
                )
            subtotal += item.quantity * price

        logger.info("subtotal=%s items=%d", subtotal, len(order.items))
        return subtotal

    def describe(self, order: OrderSnapshot) -> str:
        return f"Sum of {len(order.items)} line item(s)"


class WrappingStage(PricingStage):
    """Base for stages that wrap exactly one inner stage."""

    def __init__(self, inner: PricingStage):
        if not isinstance(inner, PricingStage):
            raise ConstructionError(
                f"{type(self).__name__} must wrap a pricing stage, got {inner!r}"
            )
        super().__init__(inner=inner)


class ShippingFeeStage(WrappingStage):
    """Adds a flat fee keyed by the order's shipping method."""

    name = "Shipping"

    def __init__(self, inner: PricingStage, fees: Optional[dict] = None):
        super().__init__(inner)
        table = dict(DEFAULT_SHIPPING_FEES)
        for method, fee in (fees or {}).items():
            try:
                method = ShippingMethod(method)
            except ValueError:
                raise ConstructionError(f"Unknown shipping method {method!r}")
            fee = _static_decimal(fee, f"Shipping fee for {method.value}")
            if fee < 0:
                raise ConstructionError(f"Shipping fee for {method.value} must not be negative")
            table[method] = fee
        self.fees = table

    def fee_for(self, method: ShippingMethod) -> Decimal:
        return self.fees[ShippingMethod(method)]

    def apply(self, order: OrderSnapshot, upstream: Decimal) -> Decimal:
        return upstream + self.fee_for(order.shipping_method)

    def describe(self, order: OrderSnapshot) -> str:
        method = ShippingMethod(order.shipping_method)
        return f"{method.value.title()} shipping fee {self.fee_for(method)}"


class TaxStage(WrappingStage):
    """
    Adds tax on the running total.

    The rate comes from a caller-supplied provider evaluated per order and is
    clamped into [0, 1]. Without a provider the stage is a no-op.
    """

    name = "Tax"

    def __init__(self, inner: PricingStage, rate_provider: Optional[RateProvider] = None):
        super().__init__(inner)
        if rate_provider is not None and not callable(rate_provider):
            raise ConstructionError(f"Tax rate provider must be callable, got {rate_provider!r}")
        self.rate_provider = rate_provider or (lambda order: ZERO)

    def rate_for(self, order: OrderSnapshot) -> Decimal:
        return clamp(as_decimal(self.rate_provider(order)), ZERO, ONE)

    def apply(self, order: OrderSnapshot, upstream: Decimal) -> Decimal:
        return upstream * (ONE + self.rate_for(order))

    def describe(self, order: OrderSnapshot) -> str:
        return f"Tax at {_percent_text(self.rate_for(order))}% for {order.country}"


class CouponPercentStage(WrappingStage):
    """Subtracts a percentage of the running total, never going below zero."""

    name = "Coupon"

    def __init__(self, inner: PricingStage, percent: Number):
        super().__init__(inner)
        # 0.10 = 10%
        self.percent = clamp(_static_decimal(percent, "Coupon percent"), ZERO, ONE)

    def apply(self, order: OrderSnapshot, upstream: Decimal) -> Decimal:
        result = upstream - upstream * self.percent
        return max(ZERO, result)

    def describe(self, order: OrderSnapshot) -> str:
        return f"{_percent_text(self.percent)}% off"


class CouponAmountStage(WrappingStage):
    """Subtracts a flat amount from the running total, floored at zero."""

    name = "Coupon"

    def __init__(self, inner: PricingStage, amount: Number):
        super().__init__(inner)
        amount = _static_decimal(amount, "Coupon amount")
        if amount < 0:
            raise ConstructionError(f"Coupon amount must not be negative, got {amount}")
        self.amount = amount

    def apply(self, order: OrderSnapshot, upstream: Decimal) -> Decimal:
        return max(ZERO, upstream - self.amount)

    def describe(self, order: OrderSnapshot) -> str:
        return f"{self.amount} off"


def flat_rate(rate: Number) -> RateProvider:
    """Rate provider that returns the same rate for every order."""
    fixed = _static_decimal(rate, "Tax rate")

    def provider(order: OrderSnapshot) -> Decimal:
        return fixed

    return provider
