"""Growth projection service.

This module contains the accumulation-side calculations:
- Compound growth: month-stepped compounding with yearly snapshots
- Mixed allocation: weighted sub-portfolios simulated independently and merged by year
- After-tax adjustment: tax applied to each year's growth only
- Scenario comparison: several named projections side by side

Key features:
- Pure functions of their inputs (no shared state, no I/O)
- Optional inflation deflation using a simple monthly inflation rate
- Injectable start year for deterministic year labels
"""

from typing import Dict, List, Optional, Sequence, Tuple

from app.config import MONTHS_PER_YEAR, get_config
from app.schemas import (
    AfterTaxProjectionResult,
    AllocationLeg,
    GrowthScenario,
    LegBreakdown,
    LegValue,
    MixedProjectionResult,
    MixedYearlySnapshot,
    ProjectionInput,
    ProjectionResult,
    TaxedYearlySnapshot,
    ValidationError,
    YearlySnapshot,
)
from app.utils import (
    monthly_rate,
    percent_to_fraction,
    resolve_start_year,
    validate_percentage,
    validate_years,
)


class GrowthService:
    """Service for compound growth projections."""

    def __init__(self):
        self.config = get_config()

    # --------------------- Compound growth --------------------- #
    def simulate_compound_growth(
        self,
        principal: float,
        monthly_contribution: float,
        annual_rate_percent: float,
        years: int,
        inflation_rate_percent: float = 2.5,
        adjust_for_inflation: bool = True,
        start_year: Optional[int] = None,
    ) -> ProjectionResult:
        """Project an investment with monthly contributions.

        Each month the contribution is added first, then the whole balance
        compounds at ``annual_rate_percent / 12``. A snapshot is taken every
        twelfth month; the inflation-adjusted value deflates the nominal
        value by ``(1 + monthly_inflation) ** month``.

        Args:
            principal: Initial investment
            monthly_contribution: Amount added every month
            annual_rate_percent: Expected annual return (7 means 7%)
            years: Number of years to simulate (1-100)
            inflation_rate_percent: Annual inflation (2.5 means 2.5%)
            adjust_for_inflation: Whether to deflate snapshot values
            start_year: Calendar year of index 0 (defaults to the current year)

        Returns:
            ProjectionResult with one snapshot per simulated year

        Raises:
            ValidationError: On negative amounts or a horizon outside 1-100 years
        """
        params = ProjectionInput(
            principal=principal,
            monthly_contribution=monthly_contribution,
            annual_rate_percent=annual_rate_percent,
            years=years,
            inflation_rate_percent=inflation_rate_percent,
            adjust_for_inflation=adjust_for_inflation,
        )
        return self.project(params, start_year=start_year)

    def project(self, params: ProjectionInput, start_year: Optional[int] = None) -> ProjectionResult:
        """Run a compound growth projection for a validated input record."""
        years = validate_years(params.years)
        base_year = resolve_start_year(start_year)
        rate = monthly_rate(params.annual_rate_percent)
        inflation = monthly_rate(params.inflation_rate_percent)
        total_months = years * MONTHS_PER_YEAR

        value = float(params.principal)
        contributions = float(params.principal)
        snapshots = []

        for month in range(1, total_months + 1):
            value = value + params.monthly_contribution
            contributions = contributions + params.monthly_contribution
            value = value * (1 + rate)

            if month % MONTHS_PER_YEAR == 0:
                deflator = (1 + inflation) ** month if params.adjust_for_inflation else 1.0
                snapshots.append(
                    YearlySnapshot(
                        year=base_year + month // MONTHS_PER_YEAR,
                        total_investment=contributions,
                        investment_value=value,
                        inflation_adjusted_value=value / deflator,
                    )
                )

        last = snapshots[-1]
        return ProjectionResult(
            yearly_projections=tuple(snapshots),
            final_investment_value=last.investment_value,
            total_contributions=last.total_investment,
            total_growth=last.investment_value - last.total_investment,
        )

    # --------------------- Mixed allocation --------------------- #
    def validate_allocation(self, legs: Sequence[AllocationLeg]) -> None:
        """Check leg percentages sum to 100 and leg labels are unique."""
        total = sum(leg.percentage for leg in legs)
        if abs(total - 100.0) > self.config.allocation_tolerance:
            raise ValidationError(f"Allocation percentages must sum to 100%, got {total:g}%")
        labels = [leg.type for leg in legs]
        if len(set(labels)) != len(labels):
            raise ValidationError("Allocation types must be unique")

    def simulate_mixed_allocation(
        self,
        principal: float,
        monthly_contribution: float,
        legs: Sequence[AllocationLeg],
        years: int,
        inflation_rate_percent: float = 2.5,
        start_year: Optional[int] = None,
    ) -> MixedProjectionResult:
        """Project a portfolio split across weighted sub-portfolios.

        Principal and contribution are split by leg percentage, each leg is
        projected independently (always inflation-adjusted) and the yearly
        snapshots are summed across legs.
        """
        self.validate_allocation(legs)
        base_year = resolve_start_year(start_year)

        leg_results: List[Tuple[AllocationLeg, ProjectionResult]] = []
        for leg in legs:
            share = percent_to_fraction(leg.percentage)
            result = self.simulate_compound_growth(
                principal * share,
                monthly_contribution * share,
                leg.expected_return_percent,
                years,
                inflation_rate_percent,
                adjust_for_inflation=True,
                start_year=base_year,
            )
            leg_results.append((leg, result))

        merged = []
        for i in range(int(years)):
            total_investment = 0.0
            investment_value = 0.0
            adjusted_value = 0.0
            breakdown: Dict[str, LegValue] = {}
            for leg, result in leg_results:
                snap = result.yearly_projections[i]
                total_investment += snap.total_investment
                investment_value += snap.investment_value
                adjusted_value += snap.inflation_adjusted_value
                breakdown[leg.type] = LegValue(
                    value=snap.investment_value,
                    adjusted_value=snap.inflation_adjusted_value,
                )
            merged.append(
                MixedYearlySnapshot(
                    year=base_year + i + 1,
                    total_investment=total_investment,
                    investment_value=investment_value,
                    inflation_adjusted_value=adjusted_value,
                    breakdown=breakdown,
                )
            )

        last = merged[-1]
        return MixedProjectionResult(
            yearly_projections=tuple(merged),
            final_investment_value=last.investment_value,
            total_contributions=last.total_investment,
            total_growth=last.investment_value - last.total_investment,
            breakdown=tuple(
                LegBreakdown(
                    type=leg.type,
                    percentage=leg.percentage,
                    value=result.final_investment_value,
                )
                for leg, result in leg_results
            ),
        )

    # --------------------- After-tax --------------------- #
    def apply_after_tax_adjustment(
        self, result: ProjectionResult, tax_rate_percent: float
    ) -> AfterTaxProjectionResult:
        """Tax each year's growth (not contributions) at ``tax_rate_percent``.

        Negative growth produces a negative tax amount (a credit).
        """
        validate_percentage(tax_rate_percent, "Tax rate")
        if not result.yearly_projections:
            raise ValidationError("Cannot apply tax to an empty projection")
        tax_rate = percent_to_fraction(tax_rate_percent)

        taxed = []
        previous = None
        for snap in result.yearly_projections:
            if previous is None:
                previous_value = 0.0
                contribution = snap.total_investment
            else:
                previous_value = previous.investment_value
                contribution = snap.total_investment - previous.total_investment
            growth = snap.investment_value - previous_value - contribution
            tax_amount = growth * tax_rate
            taxed.append(
                TaxedYearlySnapshot(
                    year=snap.year,
                    total_investment=snap.total_investment,
                    investment_value=snap.investment_value,
                    inflation_adjusted_value=snap.inflation_adjusted_value,
                    growth=growth,
                    tax_amount=tax_amount,
                    after_tax_value=snap.investment_value - tax_amount,
                )
            )
            previous = snap

        final_after_tax_value = taxed[-1].after_tax_value
        return AfterTaxProjectionResult(
            yearly_projections=tuple(taxed),
            final_investment_value=result.final_investment_value,
            total_contributions=result.total_contributions,
            total_growth=result.total_growth,
            tax_rate_percent=tax_rate_percent,
            final_after_tax_value=final_after_tax_value,
            total_tax_paid=result.final_investment_value - final_after_tax_value,
        )

    # --------------------- Scenario comparison --------------------- #
    def compare_scenarios(
        self, scenarios: Sequence[GrowthScenario], start_year: Optional[int] = None
    ) -> List[Tuple[GrowthScenario, ProjectionResult]]:
        """Project several named parameter sets with the same year labels."""
        if not scenarios:
            raise ValidationError("At least one scenario must be provided")
        base_year = resolve_start_year(start_year)
        return [
            (
                scenario,
                self.simulate_compound_growth(
                    scenario.principal,
                    scenario.monthly_contribution,
                    scenario.annual_rate_percent,
                    scenario.years,
                    scenario.inflation_rate_percent,
                    adjust_for_inflation=True,
                    start_year=base_year,
                ),
            )
            for scenario in scenarios
        ]
