"""Errors raised by the pricing pipeline."""


class PricingError(ValueError):
    """Base class for all pricing failures."""


class ValidationError(PricingError):
    """A line item or order input is structurally invalid."""


class ConstructionError(PricingError):
    """A stage was built with an invalid static parameter or chain."""
