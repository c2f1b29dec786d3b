"""Engine subpackage - order model, pricing stages and pipeline assembly."""
from .builder import OrderBuilder
from .errors import ConstructionError, PricingError, ValidationError
from .models import LineItem, OrderSnapshot, PricingResult, ShippingMethod
from .pipeline import build_pipeline, calculate, calculate_with_trace, stages_from_config, unwrap
from .stages import (
    BaseCalculator,
    CouponAmountStage,
    CouponPercentStage,
    PricingStage,
    ShippingFeeStage,
    TaxStage,
    clamp,
    flat_rate,
)

__all__ = [
    'OrderBuilder', 'LineItem', 'OrderSnapshot', 'PricingResult', 'ShippingMethod',
    'PricingError', 'ValidationError', 'ConstructionError',
    'PricingStage', 'BaseCalculator', 'ShippingFeeStage', 'TaxStage',
    'CouponPercentStage', 'CouponAmountStage', 'clamp', 'flat_rate',
    'build_pipeline', 'calculate', 'calculate_with_trace', 'stages_from_config', 'unwrap',
]
