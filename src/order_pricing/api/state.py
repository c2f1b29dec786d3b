"""Shared objects for the API process, created once at import."""
from ..config.settings import get_settings
from ..policy.tax_rates import TaxRateTable

settings = get_settings()
tax_table = TaxRateTable(settings.tax_rates_csv, default_rate=settings.default_tax_rate)
