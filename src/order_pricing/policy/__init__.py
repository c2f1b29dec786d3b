"""Policy subpackage - data-driven rate providers for pricing stages."""
from .tax_rates import TaxRateTable, flat_rate

__all__ = ['TaxRateTable', 'flat_rate']
