"""Utility functions and constants for the FIRE & compound growth planner.

This module provides helper functions used throughout the application:
- Input validation
- Percent and period conversions
- Currency and percentage formatting

Key features:
- Validation raising the shared ValidationError
- Currency code to symbol mapping
- Compact K/M/B formatting for metric cards
"""

import math
from datetime import date
from typing import Dict, List, Optional

from .config import MONTHS_PER_YEAR, get_config
from .schemas import ValidationError

# Supported currencies (code, symbol, name)
CURRENCIES: List[Dict[str, str]] = [
    {"code": "CNY", "symbol": "¥", "name": "Chinese Yuan"},
    {"code": "USD", "symbol": "$", "name": "US Dollar"},
    {"code": "EUR", "symbol": "€", "name": "Euro"},
    {"code": "GBP", "symbol": "£", "name": "British Pound"},
    {"code": "JPY", "symbol": "¥", "name": "Japanese Yen"},
]


def percent_to_fraction(percent: float) -> float:
    """Convert a whole-number percentage (7 means 7%) to a fraction."""
    return percent / 100.0


def monthly_rate(annual_rate_percent: float) -> float:
    """Simple (non-geometric) monthly rate from an annual percentage."""
    return percent_to_fraction(annual_rate_percent) / MONTHS_PER_YEAR


def resolve_start_year(start_year: Optional[int] = None) -> int:
    """Year label for index 0; injected value, configured value, then today."""
    if start_year is not None:
        return int(start_year)
    configured = get_config().start_year
    if configured is not None:
        return int(configured)
    return date.today().year


def validate_non_negative(value: float, name: str) -> None:
    """Raise ValidationError for negative amounts."""
    if value < 0:
        raise ValidationError(f"{name} must be non-negative")


def validate_years(years: int, name: str = "Years") -> int:
    """Validate a simulation horizon against the hard cap."""
    if isinstance(years, bool) or not math.isfinite(years) or int(years) != years:
        raise ValidationError(f"{name} must be a whole number, got {years}")
    years = int(years)
    if years < 1:
        raise ValidationError(f"{name} must be at least 1, got {years}")
    max_years = get_config().max_simulation_years
    if years > max_years:
        raise ValidationError(f"{name} must not exceed {max_years}, got {years}")
    return years


def validate_percentage(value: float, name: str, upper: float = 100.0) -> None:
    """Validate a whole-number percentage lies within [0, upper]."""
    if not 0.0 <= value <= upper:
        raise ValidationError(f"{name} must be between 0 and {upper:g}, got {value}")


def get_currency_symbol(currency_code: str) -> str:
    """Get the symbol for a currency code, defaulting to the first currency."""
    for currency in CURRENCIES:
        if currency["code"] == currency_code:
            return currency["symbol"]
    return CURRENCIES[0]["symbol"]


def format_currency(amount: float, currency: str = "USD", compact: bool = False) -> str:
    """Format currency amount for display."""
    symbol = get_currency_symbol(currency)
    abs_amount = abs(amount)
    sign = "-" if amount < 0 else ""

    if not compact:
        return f"{sign}{symbol}{abs_amount:,.0f}"

    if abs_amount >= 1e9:
        return f"{sign}{symbol}{abs_amount/1e9:.2f}B"
    elif abs_amount >= 1e6:
        return f"{sign}{symbol}{abs_amount/1e6:.2f}M"
    elif abs_amount >= 1e3:
        return f"{sign}{symbol}{abs_amount/1e3:.1f}K"
    else:
        return f"{sign}{symbol}{abs_amount:.0f}"


def format_percentage(value: float, decimals: int = 1) -> str:
    """Format a whole-number percentage for display."""
    return f"{value:.{decimals}f}%"


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Safely divide two numbers, returning default if denominator is zero."""
    return numerator / denominator if denominator != 0 else default
