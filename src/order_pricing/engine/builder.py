"""
Order Builder - validates and freezes line items into an OrderSnapshot.
"""
from decimal import InvalidOperation
from typing import Union

from .errors import ValidationError
from .models import LineItem, Number, OrderSnapshot, ShippingMethod, as_decimal


class OrderBuilder:
    """
    Fluent builder for order snapshots.

    Every input is checked as it is added so a built snapshot only ever
    contains well-formed lines.
    """

    def __init__(self):
        self._items: list[LineItem] = []
        self._shipping_method = ShippingMethod.STANDARD
        self._country = "US"

    def add_item(self, sku: str, quantity: int, unit_price: Number) -> 'OrderBuilder':
        """Add a line item."""
        if not sku or not str(sku).strip():
            raise ValidationError("SKU is required")
        sku = str(sku).strip()

        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise ValidationError(f"Quantity for SKU {sku} must be an integer, got {quantity!r}")
        if quantity <= 0:
            raise ValidationError(f"Quantity for SKU {sku} must be positive, got {quantity}")

        try:
            price = as_decimal(unit_price)
        except (InvalidOperation, TypeError, ValueError):
            raise ValidationError(f"Unit price for SKU {sku} must be a number, got {unit_price!r}")
        if not price.is_finite() or price < 0:
            raise ValidationError(f"Unit price for SKU {sku} must not be negative, got {unit_price}")

        self._items.append(LineItem(sku=sku, quantity=quantity, unit_price=price))
        return self

    def with_shipping(self, method: Union[ShippingMethod, str]) -> 'OrderBuilder':
        """Set the shipping method."""
        if isinstance(method, ShippingMethod):
            self._shipping_method = method
            return self
        try:
            self._shipping_method = ShippingMethod(str(method).strip().lower())
        except ValueError:
            raise ValidationError(f"Unknown shipping method {method!r}")
        return self

    def with_country(self, country: str) -> 'OrderBuilder':
        """Set the destination country code (e.g. "US")."""
        if not country or not str(country).strip():
            raise ValidationError("Country is required")
        self._country = str(country).strip().upper()
        return self

    def build(self) -> OrderSnapshot:
        """Freeze the collected lines into a snapshot."""
        return OrderSnapshot(
            items=tuple(self._items),
            shipping_method=self._shipping_method,
            country=self._country,
        )
