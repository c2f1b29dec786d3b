"""
Pricing Pipeline - assembles stage chains and runs orders through them.

Chains are assembled innermost first:

    pipeline = build_pipeline([
        BaseCalculator,
        ShippingFeeStage,
        partial(TaxStage, rate_provider=flat_rate("0.08")),
        partial(CouponPercentStage, percent="0.10"),
    ])
    total = calculate(pipeline, order)

Whichever stage sits outermost is applied last, so reordering the list
changes the result (e.g. shipping before tax is taxed, shipping after tax
is not).
"""
import logging
from decimal import Decimal
from functools import partial
from typing import Any, Callable, Optional, Sequence

from .errors import ConstructionError
from .models import OrderSnapshot, PricingResult
from .stages import (
    BaseCalculator,
    CouponAmountStage,
    CouponPercentStage,
    PricingStage,
    RateProvider,
    ShippingFeeStage,
    TaxStage,
    flat_rate,
)

logger = logging.getLogger(__name__)

StageConstructor = Callable[..., PricingStage]


def build_pipeline(stages: Sequence[StageConstructor]) -> PricingStage:
    """
    Build a stage chain from constructors, innermost first.

    The first constructor is called without arguments and must produce the
    base stage; each following constructor receives the chain built so far
    as its ``inner`` stage.
    """
    if not stages:
        raise ConstructionError("A pipeline needs at least a base stage")

    first, *wrappers = stages
    try:
        pipeline = first()
    except TypeError as e:
        raise ConstructionError(f"The innermost stage must take no inner stage: {e}")
    if not isinstance(pipeline, PricingStage) or pipeline.inner is not None:
        raise ConstructionError(
            f"The innermost stage must be a base stage, got {pipeline!r}"
        )

    for make_stage in wrappers:
        previous = pipeline
        try:
            pipeline = make_stage(previous)
        except TypeError as e:
            raise ConstructionError(f"Stage constructor cannot wrap a stage: {e}")
        if not isinstance(pipeline, PricingStage):
            raise ConstructionError(f"Stage constructor returned {pipeline!r}")
        if pipeline.inner is not previous:
            raise ConstructionError(
                f"{pipeline.name} stage does not wrap the chain built before it"
            )

    logger.debug("Built pipeline: %s", " → ".join(s.name for s in unwrap(pipeline)))
    return pipeline


def unwrap(pipeline: PricingStage) -> list[PricingStage]:
    """Return the stages of a chain, innermost first."""
    chain = []
    stage = pipeline
    while stage is not None:
        chain.append(stage)
        stage = stage.inner
    chain.reverse()
    return chain


def calculate(pipeline: PricingStage, order: OrderSnapshot) -> Decimal:
    """Price one order. Any error aborts the whole call."""
    return pipeline.calculate(order)


def calculate_with_trace(pipeline: PricingStage, order: OrderSnapshot) -> PricingResult:
    """
    Price one order and record the running total after every stage.

    Produces the same total as ``calculate``; stages are applied innermost
    first, exactly as the recursive chain unwinds.
    """
    running = Decimal("0")
    trace = []
    for stage in unwrap(pipeline):
        running = stage.apply(order, running)
        trace.append((stage.name, stage.describe(order), f"{running:.2f}"))

    result = PricingResult(total=running)
    for step, desc, val in trace:
        result.add_trace(step, desc, val)
    return result


def stages_from_config(
    specs: Sequence[dict[str, Any]],
    tax_rates: Optional[RateProvider] = None,
    shipping_fees: Optional[dict] = None,
) -> list[StageConstructor]:
    """
    Turn declarative stage descriptions into constructors for build_pipeline.

    The base stage is implied and always comes first. Supported types:
    ``shipping``, ``tax`` (``rate`` or the ``tax_rates`` provider),
    ``coupon_percent`` (``percent``) and ``coupon_amount`` (``amount``).
    """
    constructors: list[StageConstructor] = [BaseCalculator]

    for spec in specs:
        stage_type = str(spec.get('type', '')).strip().lower()

        if stage_type == 'shipping':
            constructors.append(partial(ShippingFeeStage, fees=spec.get('fees', shipping_fees)))

        elif stage_type == 'tax':
            if spec.get('rate') is not None:
                provider = flat_rate(spec['rate'])
            else:
                provider = tax_rates
            constructors.append(partial(TaxStage, rate_provider=provider))

        elif stage_type == 'coupon_percent':
            if spec.get('percent') is None:
                raise ConstructionError("coupon_percent stage needs a 'percent'")
            constructors.append(partial(CouponPercentStage, percent=spec['percent']))

        elif stage_type == 'coupon_amount':
            if spec.get('amount') is None:
                raise ConstructionError("coupon_amount stage needs an 'amount'")
            constructors.append(partial(CouponAmountStage, amount=spec['amount']))

        else:
            raise ConstructionError(f"Unknown stage type {spec.get('type')!r}")

    return constructors
