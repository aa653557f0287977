"""Configuration management for the FIRE & compound growth planner."""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Dict, List, Optional

# Hard cap on month-stepped simulations (100 years).
MAX_SIMULATION_MONTHS = 1200
MONTHS_PER_YEAR = 12


@dataclass
class AppConfig:
    """Application configuration."""

    # Engine settings
    max_simulation_years: int = MAX_SIMULATION_MONTHS // MONTHS_PER_YEAR
    allocation_tolerance: float = 0.01  # allowed deviation of leg percentages from 100
    guardrail_floor: float = 0.8  # x inflation-adjusted initial withdrawal
    guardrail_ceiling: float = 1.5
    start_year: Optional[int] = None  # label of year 0; None means the current calendar year

    # Compound interest defaults
    default_principal: float = 100000.0
    default_monthly_contribution: float = 1000.0
    default_annual_rate: float = 7.0
    default_years: int = 20
    default_inflation: float = 2.5
    default_tax_rate: float = 15.0

    # FIRE defaults
    default_withdrawal_years: int = 50
    default_simulation_years: int = 50

    # Presentation / persistence
    default_currency: str = "USD"
    storage_path: Optional[str] = None
    log_level: str = "INFO"

    # Mixed allocation presets: type -> (percentage, expected return %)
    allocation_presets: Dict[str, Dict[str, List[float]]] = None
    default_return_scenarios: List[Dict[str, float]] = None

    def __post_init__(self):
        """Set default values after initialization."""
        if self.storage_path is None:
            self.storage_path = str(Path.home() / ".fire_planner" / "calculations.json")
        if self.allocation_presets is None:
            self.allocation_presets = {
                "Conservative (30/60/10)": {
                    "Stocks": [30.0, 8.0],
                    "Bonds": [60.0, 4.0],
                    "Cash": [10.0, 2.0],
                },
                "Balanced (60/35/5)": {
                    "Stocks": [60.0, 8.0],
                    "Bonds": [35.0, 4.0],
                    "Cash": [5.0, 2.0],
                },
                "Aggressive (90/10)": {
                    "Stocks": [90.0, 8.0],
                    "Bonds": [10.0, 4.0],
                },
            }
        if self.default_return_scenarios is None:
            self.default_return_scenarios = [
                {"name": "Pessimistic", "return_rate_percent": 4.0, "probability": 0.25},
                {"name": "Base", "return_rate_percent": 7.0, "probability": 0.5},
                {"name": "Optimistic", "return_rate_percent": 10.0, "probability": 0.25},
            ]


# Global configuration instance
config = AppConfig()


def get_config() -> AppConfig:
    """Get the application configuration."""
    return config


def update_config(**kwargs) -> None:
    """Update configuration with new values."""
    global config
    for key, value in kwargs.items():
        if hasattr(config, key):
            setattr(config, key, value)
        else:
            raise ValueError(f"Unknown configuration key: {key}")


def reset_config() -> AppConfig:
    """Restore the default configuration in place."""
    defaults = AppConfig()
    for f in fields(AppConfig):
        setattr(config, f.name, getattr(defaults, f.name))
    return config
