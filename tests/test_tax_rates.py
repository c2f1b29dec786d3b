"""
Tax rate table tests.
"""
import logging
from decimal import Decimal

import pytest

from order_pricing.engine import BaseCalculator, LineItem, OrderSnapshot, TaxStage
from order_pricing.policy.tax_rates import TaxRateTable


@pytest.fixture
def rates_csv(tmp_path):
    path = tmp_path / "tax_rates.csv"
    path.write_text(
        "Country , Rate\n"
        " us ,0.08\n"
        "CA,0.13\n"
        "US,0.50\n"
        "XX,not-a-rate\n"
        ",0.99\n",
        encoding="utf-8",
    )
    return path


def test_table_loads_and_normalizes(rates_csv):
    table = TaxRateTable(rates_csv, default_rate="0.05")

    assert table.loaded
    assert table.rate_for_country("US") == Decimal("0.08")  # first row wins
    assert table.rate_for_country(" ca ") == Decimal("0.13")
    assert len(table) == 3


def test_table_falls_back_to_default(rates_csv):
    table = TaxRateTable(rates_csv, default_rate="0.05")
    assert table.rate_for_country("JP") == Decimal("0.05")
    assert table.rate_for_country("") == Decimal("0.05")


def test_table_unparseable_rate_uses_default(rates_csv, caplog):
    caplog.set_level(logging.WARNING)
    table = TaxRateTable(rates_csv, default_rate="0.05")

    assert table.rate_for_country("XX") == Decimal("0.05")
    assert "Unparseable tax rate" in caplog.text


def test_missing_file_warns_and_uses_default(tmp_path, caplog):
    caplog.set_level(logging.WARNING)
    table = TaxRateTable(tmp_path / "missing.csv", default_rate="0.07")

    assert not table.loaded
    assert len(table) == 0
    assert table.rate_for_country("US") == Decimal("0.07")
    assert "not found" in caplog.text


def test_table_as_rate_provider(rates_csv):
    table = TaxRateTable(rates_csv)
    stage = TaxStage(BaseCalculator(), rate_provider=table)
    order = OrderSnapshot(items=(LineItem("A", 2, Decimal("50")),), country="CA")

    assert stage.calculate(order) == Decimal("113")


def test_from_mapping():
    table = TaxRateTable.from_mapping({"gb": "0.20"}, default_rate=0)
    assert table.rate_for_country("GB") == Decimal("0.20")
    assert table.rate_for_country("FR") == Decimal("0")


def test_bundled_rates_file():
    from order_pricing.config.settings import get_settings

    settings = get_settings()
    table = TaxRateTable(settings.tax_rates_csv)
    assert table.loaded
    assert table.rate_for_country("US") == Decimal("0.08")


def test_settings_resolve_data_inside_package(tmp_path):
    from order_pricing.config.settings import Settings, get_package_dir

    settings = Settings.load(package_dir=tmp_path)
    assert settings.tax_rates_csv == tmp_path / "data" / "tax_rates.csv"

    bundled = Settings.load().tax_rates_csv
    assert bundled.parent.parent == get_package_dir()
    assert bundled.exists()
