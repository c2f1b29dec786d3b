"""
Order Pricing Package

Computes order totals by running an order snapshot through a composable
chain of pricing stages (base subtotal → shipping → tax → coupons).
"""

__version__ = "1.0.0"
