"""Tests for configuration, schemas and formatting helpers."""

from datetime import date

import pytest

from app.config import MAX_SIMULATION_MONTHS, get_config, reset_config, update_config
from app.schemas import ProjectionInput, ValidationError, WithdrawalStrategy
from app.utils import (
    format_currency,
    format_percentage,
    get_currency_symbol,
    monthly_rate,
    resolve_start_year,
    safe_divide,
    validate_years,
)


class TestConfig:
    def test_simulation_cap(self):
        assert MAX_SIMULATION_MONTHS == 1200
        assert get_config().max_simulation_years == 100

    def test_update_config(self):
        update_config(default_currency="EUR")
        assert get_config().default_currency == "EUR"

    def test_update_unknown_key(self):
        with pytest.raises(ValueError):
            update_config(not_a_setting=1)

    def test_storage_path_default(self):
        assert get_config().storage_path.endswith("calculations.json")

    def test_reset_is_seen_by_existing_services(self, growth_service, fire_service):
        update_config(allocation_tolerance=5.0, guardrail_floor=0.5)
        reset_config()
        assert growth_service.config is get_config()
        assert growth_service.config.allocation_tolerance == 0.01
        assert fire_service.config.guardrail_floor == 0.8


class TestWithdrawalStrategy:
    def test_parse_values_and_names(self):
        assert WithdrawalStrategy.parse("constantDollar") is WithdrawalStrategy.CONSTANT_DOLLAR
        assert WithdrawalStrategy.parse("PERCENTAGE_OF_PORTFOLIO") is WithdrawalStrategy.PERCENTAGE_OF_PORTFOLIO
        assert WithdrawalStrategy.parse(WithdrawalStrategy.CONSTANT_PERCENTAGE) is WithdrawalStrategy.CONSTANT_PERCENTAGE

    def test_parse_unknown(self):
        with pytest.raises(ValidationError):
            WithdrawalStrategy.parse("fixed")


class TestProjectionInput:
    def test_valid(self):
        params = ProjectionInput(1000, 10, 7, 5)
        assert params.inflation_rate_percent == 2.5
        assert params.adjust_for_inflation

    @pytest.mark.parametrize(
        "kwargs",
        [
            dict(principal=-1, monthly_contribution=0, annual_rate_percent=7, years=5),
            dict(principal=0, monthly_contribution=-1, annual_rate_percent=7, years=5),
            dict(principal=0, monthly_contribution=0, annual_rate_percent=7, years=0),
            dict(principal=0, monthly_contribution=0, annual_rate_percent=7, years=float("nan")),
            dict(principal=0, monthly_contribution=0, annual_rate_percent=7, years=float("inf")),
        ],
    )
    def test_invalid(self, kwargs):
        with pytest.raises(ValidationError):
            ProjectionInput(**kwargs)


class TestHelpers:
    def test_monthly_rate_is_simple_division(self):
        assert monthly_rate(12) == pytest.approx(0.01)

    def test_validate_years(self):
        assert validate_years(100) == 100
        assert validate_years(5.0) == 5
        with pytest.raises(ValidationError):
            validate_years(True)
        for years in (float("nan"), float("inf"), 2.5):
            with pytest.raises(ValidationError):
                validate_years(years)

    def test_resolve_start_year(self, default_config):
        assert resolve_start_year(1999) == 1999
        assert resolve_start_year() == date.today().year
        default_config.start_year = 2030
        assert resolve_start_year() == 2030

    def test_safe_divide(self):
        assert safe_divide(1, 4) == 0.25
        assert safe_divide(1, 0) == 0.0
        assert safe_divide(1, 0, default=1.0) == 1.0


class TestFormatting:
    def test_currency_symbols(self):
        assert get_currency_symbol("USD") == "$"
        assert get_currency_symbol("GBP") == "£"
        assert get_currency_symbol("XYZ") == "¥"

    def test_format_currency(self):
        assert format_currency(1234567.4, "USD") == "$1,234,567"
        assert format_currency(-1500, "EUR") == "-€1,500"

    def test_format_currency_compact(self):
        assert format_currency(1500000, "USD", compact=True) == "$1.50M"
        assert format_currency(2500, "USD", compact=True) == "$2.5K"
        assert format_currency(3.2e9, "USD", compact=True) == "$3.20B"
        assert format_currency(999, "USD", compact=True) == "$999"

    def test_format_percentage(self):
        assert format_percentage(7) == "7.0%"
        assert format_percentage(4.256, 2) == "4.26%"
