"""Data models and type definitions for the FIRE & compound growth planner.

This module defines all data structures used throughout the application:
- Projection inputs and yearly snapshots
- Mixed allocation legs and breakdowns
- FIRE inputs, timelines and withdrawal simulation records
- Saved calculation records
- Custom exception classes

Key features:
- Immutable result records (frozen dataclasses, tuple sequences)
- Validation on construction for input records
- DataFrame conversion for charts and exports
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

import pandas as pd


class ValidationError(Exception):
    """Custom exception for validation errors."""

    pass


class StorageError(Exception):
    """Custom exception for saved-calculation storage errors."""

    pass


class ReportError(Exception):
    """Custom exception for report export errors."""

    pass


class WithdrawalStrategy(Enum):
    """Withdrawal policies available during decumulation."""

    CONSTANT_DOLLAR = "constantDollar"
    CONSTANT_PERCENTAGE = "constantPercentage"
    PERCENTAGE_OF_PORTFOLIO = "percentageOfPortfolio"

    @classmethod
    def parse(cls, value: Union["WithdrawalStrategy", str]) -> "WithdrawalStrategy":
        """Resolve a strategy member from a member or its string value."""
        if isinstance(value, cls):
            return value
        for member in cls:
            if value == member.value or value == member.name:
                return member
        valid = ", ".join(member.value for member in cls)
        raise ValidationError(f"Unknown withdrawal strategy '{value}' (expected one of: {valid})")

    @property
    def label(self) -> str:
        return {
            WithdrawalStrategy.CONSTANT_DOLLAR: "Constant Dollar",
            WithdrawalStrategy.CONSTANT_PERCENTAGE: "Constant Percentage",
            WithdrawalStrategy.PERCENTAGE_OF_PORTFOLIO: "Percentage of Portfolio (guardrails)",
        }[self]


# ----------------------------- Growth projection ----------------------------- #
@dataclass(frozen=True)
class ProjectionInput:
    """Inputs for a single compound growth projection."""

    principal: float
    monthly_contribution: float
    annual_rate_percent: float
    years: int
    inflation_rate_percent: float = 2.5
    adjust_for_inflation: bool = True

    def __post_init__(self):
        """Validate amounts and horizon."""
        if self.principal < 0:
            raise ValidationError("Principal must be non-negative")
        if self.monthly_contribution < 0:
            raise ValidationError("Monthly contribution must be non-negative")
        if isinstance(self.years, bool) or not math.isfinite(self.years) or int(self.years) != self.years:
            raise ValidationError(f"Years must be a whole number, got {self.years}")
        if self.years < 1:
            raise ValidationError(f"Years must be at least 1, got {self.years}")


@dataclass(frozen=True)
class YearlySnapshot:
    """Portfolio state at the end of one simulated year."""

    year: int
    total_investment: float  # cumulative contributions incl. principal
    investment_value: float  # nominal compounded value
    inflation_adjusted_value: float


@dataclass(frozen=True)
class ProjectionResult:
    """Results from a compound growth projection."""

    yearly_projections: Tuple[YearlySnapshot, ...]
    final_investment_value: float
    total_contributions: float
    total_growth: float

    def to_dataframe(self) -> pd.DataFrame:
        """One row per simulated year, indexed by calendar year."""
        rows = [
            {
                "year": snap.year,
                "total_investment": snap.total_investment,
                "investment_value": snap.investment_value,
                "inflation_adjusted_value": snap.inflation_adjusted_value,
            }
            for snap in self.yearly_projections
        ]
        return pd.DataFrame(rows).set_index("year")


@dataclass(frozen=True)
class GrowthScenario:
    """Named parameter set for side-by-side projection comparison."""

    name: str
    principal: float
    monthly_contribution: float
    annual_rate_percent: float
    years: int
    inflation_rate_percent: float = 2.5


# ----------------------------- Mixed allocation ----------------------------- #
@dataclass(frozen=True)
class AllocationLeg:
    """One weighted sub-portfolio of a mixed allocation."""

    type: str
    percentage: float  # 0-100
    expected_return_percent: float

    def __post_init__(self):
        """Validate the leg weight."""
        if not 0.0 <= self.percentage <= 100.0:
            raise ValidationError(
                f"Allocation '{self.type}' percentage must be between 0 and 100, got {self.percentage}"
            )


@dataclass(frozen=True)
class LegValue:
    """Value of one allocation leg in a given year."""

    value: float
    adjusted_value: float


@dataclass(frozen=True)
class MixedYearlySnapshot(YearlySnapshot):
    """Yearly snapshot merged across allocation legs."""

    breakdown: Dict[str, LegValue] = field(default_factory=dict)


@dataclass(frozen=True)
class LegBreakdown:
    """Terminal value of one allocation leg."""

    type: str
    percentage: float
    value: float


@dataclass(frozen=True)
class MixedProjectionResult(ProjectionResult):
    """Results from a mixed allocation projection."""

    breakdown: Tuple[LegBreakdown, ...] = ()

    def breakdown_dataframe(self) -> pd.DataFrame:
        """Per-leg nominal value by year (one column per leg type)."""
        rows = []
        for snap in self.yearly_projections:
            row = {"year": snap.year}
            for leg_type, leg_value in snap.breakdown.items():
                row[leg_type] = leg_value.value
            rows.append(row)
        return pd.DataFrame(rows).set_index("year")


# ----------------------------- After-tax ----------------------------- #
@dataclass(frozen=True)
class TaxedYearlySnapshot(YearlySnapshot):
    """Yearly snapshot with tax applied to the year's growth."""

    growth: float = 0.0
    tax_amount: float = 0.0
    after_tax_value: float = 0.0


@dataclass(frozen=True)
class AfterTaxProjectionResult(ProjectionResult):
    """Projection result with tax fields."""

    tax_rate_percent: float = 0.0
    final_after_tax_value: float = 0.0
    total_tax_paid: float = 0.0

    def to_dataframe(self) -> pd.DataFrame:
        df = super().to_dataframe()
        df["growth"] = [snap.growth for snap in self.yearly_projections]
        df["tax_amount"] = [snap.tax_amount for snap in self.yearly_projections]
        df["after_tax_value"] = [snap.after_tax_value for snap in self.yearly_projections]
        return df


# ----------------------------- FIRE ----------------------------- #
@dataclass(frozen=True)
class FireInputs:
    """Inputs for FIRE planning."""

    current_age: int = 30
    current_savings: float = 100000.0
    annual_income: float = 100000.0
    annual_expenses: float = 60000.0
    annual_savings: float = 40000.0
    expected_return_percent: float = 7.0
    withdrawal_rate_percent: float = 4.0
    safety_margin_percent: float = 10.0
    inflation_rate_percent: float = 2.5

    def __post_init__(self):
        """Validate non-negative amounts."""
        if self.current_age < 0:
            raise ValidationError("Current age must be non-negative")
        if self.current_savings < 0:
            raise ValidationError("Current savings must be non-negative")
        if self.annual_expenses < 0:
            raise ValidationError("Annual expenses must be non-negative")
        if self.annual_savings < 0:
            raise ValidationError("Annual savings must be non-negative")

    @property
    def savings_rate(self) -> Optional[float]:
        """Annual savings as a fraction of income (None without income)."""
        if self.annual_income <= 0:
            return None
        return self.annual_savings / self.annual_income


@dataclass(frozen=True)
class FireTimeline:
    """Capital target and the time needed to reach it."""

    fire_number: float
    years_to_fire: float
    fire_age: float
    converged: bool  # False when the 100-year horizon was exhausted


@dataclass(frozen=True)
class WithdrawalYearRecord:
    """One year of a decumulation simulation."""

    year: int
    portfolio_value: float
    withdrawal: float
    inflation_adjusted_expenses: float
    withdrawal_rate: float  # withdrawal / portfolio_value * 100
    portfolio_growth: float


@dataclass(frozen=True)
class WithdrawalSimulationResult:
    """Results from a withdrawal strategy simulation."""

    strategy: WithdrawalStrategy
    initial_portfolio: float
    initial_withdrawal: float
    withdrawal_rate_percent: float
    yearly_data: Tuple[WithdrawalYearRecord, ...]
    final_portfolio_value: float
    survival_years: int
    is_successful: bool

    def to_dataframe(self) -> pd.DataFrame:
        rows = [
            {
                "year": rec.year,
                "portfolio_value": rec.portfolio_value,
                "withdrawal": rec.withdrawal,
                "inflation_adjusted_expenses": rec.inflation_adjusted_expenses,
                "withdrawal_rate": rec.withdrawal_rate,
                "portfolio_growth": rec.portfolio_growth,
            }
            for rec in self.yearly_data
        ]
        return pd.DataFrame(rows).set_index("year")


@dataclass(frozen=True)
class ReturnScenario:
    """Return-rate scenario with a subjective probability weight."""

    name: str
    return_rate_percent: float
    probability: float  # 0-1

    def __post_init__(self):
        """Validate the probability weight."""
        if not 0.0 <= self.probability <= 1.0:
            raise ValidationError(
                f"Scenario '{self.name}' probability must be between 0 and 1, got {self.probability}"
            )


@dataclass(frozen=True)
class ScenarioOutcome:
    """Withdrawal simulation outcome for one return scenario."""

    scenario: str
    return_rate_percent: float
    probability: float
    result: WithdrawalSimulationResult


@dataclass(frozen=True)
class SustainabilityResult:
    """Probability-weighted sustainability of a withdrawal plan."""

    initial_portfolio: float
    annual_expenses: float
    withdrawal_rate_percent: float
    inflation_rate_percent: float
    simulation_years: int
    scenario_results: Tuple[ScenarioOutcome, ...]
    weighted_success_rate: float
    average_survival_years: float
    best_scenario: ScenarioOutcome
    worst_scenario: ScenarioOutcome
    sustainability_score: float  # 0-100

    def summary_dataframe(self) -> pd.DataFrame:
        """One row per scenario for tables and bar charts."""
        rows = [
            {
                "scenario": outcome.scenario,
                "return_rate_percent": outcome.return_rate_percent,
                "probability": outcome.probability,
                "final_portfolio_value": outcome.result.final_portfolio_value,
                "survival_years": outcome.result.survival_years,
                "is_successful": outcome.result.is_successful,
            }
            for outcome in self.scenario_results
        ]
        return pd.DataFrame(rows)


# ----------------------------- Persistence ----------------------------- #
@dataclass
class SavedCalculation:
    """A named calculation persisted by the storage service."""

    id: str
    name: str
    timestamp: str  # ISO 8601
    input_params: Dict[str, Any]
    results: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "timestamp": self.timestamp,
            "inputParams": self.input_params,
            "results": self.results,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SavedCalculation":
        try:
            return cls(
                id=str(data["id"]),
                name=data.get("name", ""),
                timestamp=data.get("timestamp", ""),
                input_params=data.get("inputParams") or {},
                results=data.get("results") or {},
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise StorageError(f"Invalid saved calculation record: {e}")
