"""
Tax Rate Table - resolves the tax rate for an order's destination country.
"""
import logging
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Optional

import pandas as pd

from ..engine.models import Number, OrderSnapshot, as_decimal
from ..engine.stages import flat_rate

logger = logging.getLogger(__name__)

__all__ = ['TaxRateTable', 'flat_rate']


class TaxRateTable:
    """
    Rate provider backed by a ``country,rate`` CSV.

    Resolution order:
    1. Exact country match (codes are stripped and upper-cased)
    2. Fall back to the default rate
    """

    def __init__(self, rates_path: Optional[Path] = None, default_rate: Number = "0"):
        self.rates_path = rates_path
        self.default_rate = as_decimal(default_rate)
        self.rates_df = pd.DataFrame(columns=['country', 'rate'])
        self.loaded = False

        if rates_path is not None and rates_path.exists():
            self._load(rates_path)
        elif rates_path is not None:
            logger.warning("Tax rate file not found at %s, using default rate %s", rates_path, self.default_rate)

    def _load(self, path: Path):
        df = pd.read_csv(path, dtype=str).fillna('')
        df.columns = [c.strip().lower() for c in df.columns]
        for col in df.columns:
            df[col] = df[col].astype(str).str.strip()

        df['country'] = df['country'].str.upper()
        df = df[df['country'] != '']
        self.rates_df = df.drop_duplicates(subset='country', keep='first')
        self.loaded = True
        logger.info("Loaded %d tax rates from %s", len(self.rates_df), path)

    @classmethod
    def from_mapping(cls, rates: dict, default_rate: Number = "0") -> 'TaxRateTable':
        """Build a table from an in-memory {country: rate} mapping."""
        table = cls(default_rate=default_rate)
        table.rates_df = pd.DataFrame(
            [{'country': str(k).strip().upper(), 'rate': str(v)} for k, v in rates.items()],
            columns=['country', 'rate'],
        )
        table.loaded = True
        return table

    def rate_for_country(self, country: str) -> Decimal:
        """Return the rate for a country code, or the default rate."""
        code = str(country or '').strip().upper()
        match = self.rates_df[self.rates_df['country'] == code]
        if match.empty:
            return self.default_rate

        raw = match.iloc[0]['rate']
        try:
            return as_decimal(raw)
        except (InvalidOperation, ValueError):
            logger.warning("Unparseable tax rate %r for %s, using default rate", raw, code)
            return self.default_rate

    def __call__(self, order: OrderSnapshot) -> Decimal:
        return self.rate_for_country(order.country)

    def __len__(self) -> int:
        return len(self.rates_df)
