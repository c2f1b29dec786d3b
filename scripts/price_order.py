#!/usr/bin/env python
"""
Price a sample order through two stage orderings and print the traces.

Usage:
    python scripts/price_order.py [--country US] [--express] [--coupon 0.10]
"""
import argparse
import logging
import sys
from functools import partial
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from order_pricing.config.settings import get_settings
from order_pricing.engine import (
    BaseCalculator,
    CouponPercentStage,
    OrderBuilder,
    ShippingFeeStage,
    ShippingMethod,
    TaxStage,
    build_pipeline,
    calculate_with_trace,
)
from order_pricing.policy.tax_rates import TaxRateTable
from order_pricing.ui.formatting import format_money


def main():
    parser = argparse.ArgumentParser(description="Price a sample order")
    parser.add_argument("--country", default="US")
    parser.add_argument("--express", action="store_true")
    parser.add_argument("--coupon", default="0.10", help="Coupon percent as a fraction")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    settings = get_settings()
    tax_table = TaxRateTable(settings.tax_rates_csv, default_rate=settings.default_tax_rate)

    order = (
        OrderBuilder()
        .add_item("SKU-001", 2, "50")
        .add_item("SKU-002", 1, "100")
        .with_shipping(ShippingMethod.EXPRESS if args.express else ShippingMethod.STANDARD)
        .with_country(args.country)
        .build()
    )

    orderings = {
        "Shipping → Tax → Coupon": [
            BaseCalculator,
            ShippingFeeStage,
            partial(TaxStage, rate_provider=tax_table),
            partial(CouponPercentStage, percent=args.coupon),
        ],
        "Tax → Shipping → Coupon": [
            BaseCalculator,
            partial(TaxStage, rate_provider=tax_table),
            ShippingFeeStage,
            partial(CouponPercentStage, percent=args.coupon),
        ],
    }

    print("=" * 60)
    print(f"ORDER: {len(order.items)} lines, {order.shipping_method.value} to {order.country}")
    print("=" * 60)

    for label, stages in orderings.items():
        result = calculate_with_trace(build_pipeline(stages), order)
        print()
        print(label)
        print(result.get_trace_text())
        print(f"Total: {format_money(result.total)}")


if __name__ == "__main__":
    main()
