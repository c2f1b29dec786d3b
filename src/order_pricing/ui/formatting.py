"""Display formatting for pricing totals."""
from decimal import ROUND_HALF_UP, Decimal

from ..engine.models import Number, as_decimal

CENT = Decimal("0.01")


def round_money(amount: Number) -> Decimal:
    """Round to whole cents, halves away from zero."""
    return as_decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def format_money(amount: Number, symbol: str = "$") -> str:
    """Format an amount like ``$1,234.50``."""
    value = round_money(amount)
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"
