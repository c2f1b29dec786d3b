"""
Centralized settings and path configuration for the pricing pipeline.
"""
from pathlib import Path
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional


def get_package_dir() -> Path:
    """Get the installed ``order_pricing`` package directory."""
    return Path(__file__).resolve().parent.parent


def _default_stages() -> list[dict]:
    return [
        {'type': 'shipping'},
        {'type': 'tax'},
    ]


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Input files
    tax_rates_csv: Path

    # Rate used when a country is missing from the tax table
    default_tax_rate: Decimal = Decimal("0")

    # Flat shipping fees by method
    shipping_fees: dict[str, Decimal] = field(default_factory=lambda: {
        'standard': Decimal("5"),
        'express': Decimal("15"),
    })

    # Stage chain used when a caller does not supply one (base stage implied)
    default_stages: list[dict] = field(default_factory=_default_stages)

    @classmethod
    def load(cls, package_dir: Optional[Path] = None) -> 'Settings':
        """Load settings, resolving data files inside the package."""
        package_dir = package_dir or get_package_dir()

        return cls(
            tax_rates_csv=package_dir / 'data' / 'tax_rates.csv',
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings
