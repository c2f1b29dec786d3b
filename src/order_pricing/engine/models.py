"""
Data models for the pricing pipeline.

Uses frozen dataclasses for order input so a snapshot can be shared
between pipelines without being mutated.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Optional, Union

Number = Union[Decimal, int, float, str]


def as_decimal(value: Number) -> Decimal:
    """Convert a price-like value to Decimal without float artifacts."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


class ShippingMethod(str, Enum):
    """Shipping method tag carried by an order."""
    STANDARD = "standard"
    EXPRESS = "express"


@dataclass(frozen=True)
class LineItem:
    """A single line of an order."""
    sku: str
    quantity: int
    unit_price: Decimal

    @property
    def subtotal(self) -> Decimal:
        return self.quantity * as_decimal(self.unit_price)


@dataclass(frozen=True)
class OrderSnapshot:
    """Immutable order handed to a pricing pipeline."""
    items: tuple[LineItem, ...] = ()
    shipping_method: ShippingMethod = ShippingMethod.STANDARD
    country: str = "US"

    def __post_init__(self):
        # Freeze list input so the snapshot cannot change under a pipeline
        if not isinstance(self.items, tuple):
            object.__setattr__(self, 'items', tuple(self.items))


@dataclass
class TraceStep:
    """A single step in the pricing trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass
class PricingResult:
    """Total of a pricing run plus the trace of every stage."""
    total: Decimal
    trace: list[TraceStep] = field(default_factory=list)

    def add_trace(self, step: str, description: str, value: str = None):
        """Add a step to the trace."""
        self.trace.append(TraceStep(step=step, description=description, value=value))

    def get_trace_text(self) -> str:
        """Get human-readable trace as formatted text."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"→ {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"→ {t.step}: {t.description}")
        return "\n".join(lines)
