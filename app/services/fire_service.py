"""FIRE (Financial Independence, Retire Early) planning service.

This module contains the decumulation-side calculations:
- FIRE number: capital needed to fund annual expenses at a withdrawal rate
- Years to FIRE: month-stepped savings projection until the target is reached
- Withdrawal strategies: year-stepped decumulation with ruin detection
- Sustainability: withdrawal simulation across weighted return scenarios

Key features:
- Constant dollar, constant percentage and guardrail withdrawal policies
- Hard 1200-month cap so non-converging plans terminate
- Probability-weighted success rate and survival years
"""

import math
from typing import Optional, Sequence, Union

import numpy as np

from app.config import MAX_SIMULATION_MONTHS, MONTHS_PER_YEAR, get_config
from app.schemas import (
    FireInputs,
    FireTimeline,
    ReturnScenario,
    ScenarioOutcome,
    SustainabilityResult,
    ValidationError,
    WithdrawalSimulationResult,
    WithdrawalStrategy,
    WithdrawalYearRecord,
)
from app.utils import (
    monthly_rate,
    percent_to_fraction,
    resolve_start_year,
    safe_divide,
    validate_non_negative,
    validate_years,
)


class FireService:
    """Service for FIRE targets, timelines and withdrawal simulations."""

    def __init__(self):
        self.config = get_config()

    # ------------------------- Targets ------------------------- #
    def fire_number(
        self,
        annual_expenses: float,
        withdrawal_rate_percent: float,
        safety_margin_percent: float = 0.0,
    ) -> float:
        """Capital needed so that ``withdrawal_rate`` covers expenses plus margin."""
        validate_non_negative(annual_expenses, "Annual expenses")
        validate_non_negative(safety_margin_percent, "Safety margin")
        if withdrawal_rate_percent <= 0:
            raise ValidationError("Withdrawal rate must be greater than 0")
        safety_factor = 1 + percent_to_fraction(safety_margin_percent)
        return annual_expenses * safety_factor / percent_to_fraction(withdrawal_rate_percent)

    def years_to_fire(
        self,
        current_savings: float,
        fire_number: float,
        annual_savings: float,
        expected_return_percent: float,
    ) -> float:
        """Fractional years until savings reach ``fire_number``.

        Savings compound monthly and receive ``annual_savings / 12`` each
        month. Returns exactly 100.0 when the target is not reached within
        the 1200-month horizon.
        """
        rate = monthly_rate(expected_return_percent)
        monthly_savings = annual_savings / MONTHS_PER_YEAR

        savings = float(current_savings)
        months = 0
        while savings < fire_number and months < MAX_SIMULATION_MONTHS:
            savings = savings * (1 + rate) + monthly_savings
            months += 1

        return months / MONTHS_PER_YEAR

    def fire_timeline(self, inputs: FireInputs) -> FireTimeline:
        """FIRE number, years to reach it and the age at which it is reached."""
        target = self.fire_number(
            inputs.annual_expenses,
            inputs.withdrawal_rate_percent,
            inputs.safety_margin_percent,
        )
        years = self.years_to_fire(
            inputs.current_savings,
            target,
            inputs.annual_savings,
            inputs.expected_return_percent,
        )
        return FireTimeline(
            fire_number=target,
            years_to_fire=years,
            fire_age=inputs.current_age + years,
            converged=years < MAX_SIMULATION_MONTHS / MONTHS_PER_YEAR,
        )

    def savings_path(self, inputs: FireInputs, timeline: FireTimeline, start_year: Optional[int] = None):
        """Year-end savings from today until the FIRE year (for charting).

        Returns a list of ``(year, age, savings)`` tuples using the same
        monthly stepping as :meth:`years_to_fire`.
        """
        base_year = resolve_start_year(start_year)
        rate = monthly_rate(inputs.expected_return_percent)
        monthly_savings = inputs.annual_savings / MONTHS_PER_YEAR
        n_years = math.ceil(timeline.years_to_fire)

        savings = float(inputs.current_savings)
        path = [(base_year, inputs.current_age, savings)]
        for year in range(1, n_years + 1):
            for _ in range(MONTHS_PER_YEAR):
                savings = savings * (1 + rate) + monthly_savings
            path.append((base_year + year, inputs.current_age + year, savings))
        return path

    # ------------------------- Withdrawals ------------------------- #
    def _withdrawal_for_year(
        self,
        strategy: WithdrawalStrategy,
        year: int,
        portfolio: float,
        annual_expenses: float,
        initial_withdrawal: float,
        withdrawal_rate: float,
        inflation: float,
    ) -> float:
        inflation_factor = (1 + inflation) ** (year - 1)
        if strategy is WithdrawalStrategy.CONSTANT_PERCENTAGE:
            return portfolio * withdrawal_rate
        if strategy is WithdrawalStrategy.PERCENTAGE_OF_PORTFOLIO:
            base_withdrawal = portfolio * withdrawal_rate
            inflation_adjusted_initial = initial_withdrawal * inflation_factor
            lower_limit = inflation_adjusted_initial * self.config.guardrail_floor
            upper_limit = inflation_adjusted_initial * self.config.guardrail_ceiling
            return min(max(base_withdrawal, lower_limit), upper_limit)
        return annual_expenses * inflation_factor

    def simulate_withdrawal(
        self,
        initial_portfolio: float,
        annual_expenses: float,
        withdrawal_rate_percent: float,
        expected_return_percent: float,
        inflation_rate_percent: float,
        strategy: Union[WithdrawalStrategy, str] = WithdrawalStrategy.CONSTANT_DOLLAR,
        years: int = 30,
        start_year: Optional[int] = None,
    ) -> WithdrawalSimulationResult:
        """Simulate yearly withdrawals from a portfolio.

        Each year the strategy's withdrawal is capped at the current
        portfolio, subtracted, and the remainder grows at the expected
        return. The simulation stops early once the portfolio is depleted.

        Args:
            initial_portfolio: Portfolio value at retirement
            annual_expenses: First-year spending (constant dollar basis)
            withdrawal_rate_percent: Withdrawal rate (4 means 4%)
            expected_return_percent: Annual portfolio return
            inflation_rate_percent: Annual inflation
            strategy: WithdrawalStrategy member or its string value
            years: Years to simulate (1-100)
            start_year: Calendar year of index 0 (defaults to the current year)

        Returns:
            WithdrawalSimulationResult; ``survival_years`` counts the records produced

        Raises:
            ValidationError: On an unknown strategy or invalid amounts/horizon
        """
        strategy = WithdrawalStrategy.parse(strategy)
        years = validate_years(years, "Simulation years")
        validate_non_negative(initial_portfolio, "Initial portfolio")
        validate_non_negative(annual_expenses, "Annual expenses")
        validate_non_negative(withdrawal_rate_percent, "Withdrawal rate")
        base_year = resolve_start_year(start_year)

        withdrawal_rate = percent_to_fraction(withdrawal_rate_percent)
        expected_return = percent_to_fraction(expected_return_percent)
        inflation = percent_to_fraction(inflation_rate_percent)

        if strategy is WithdrawalStrategy.PERCENTAGE_OF_PORTFOLIO:
            initial_withdrawal = initial_portfolio * withdrawal_rate
        else:
            initial_withdrawal = annual_expenses

        portfolio = float(initial_portfolio)
        yearly_data = []

        for year in range(1, years + 1):
            withdrawal = self._withdrawal_for_year(
                strategy,
                year,
                portfolio,
                annual_expenses,
                initial_withdrawal,
                withdrawal_rate,
                inflation,
            )
            withdrawal = min(withdrawal, portfolio)
            portfolio = portfolio - withdrawal

            annual_return = portfolio * expected_return
            portfolio = portfolio + annual_return

            yearly_data.append(
                WithdrawalYearRecord(
                    year=base_year + year,
                    portfolio_value=portfolio,
                    withdrawal=withdrawal,
                    inflation_adjusted_expenses=annual_expenses * (1 + inflation) ** year,
                    # a depleted portfolio means everything was withdrawn
                    withdrawal_rate=safe_divide(withdrawal, portfolio, default=1.0) * 100,
                    portfolio_growth=annual_return,
                )
            )

            if portfolio <= 0:
                break

        is_successful = portfolio > 0
        return WithdrawalSimulationResult(
            strategy=strategy,
            initial_portfolio=initial_portfolio,
            initial_withdrawal=initial_withdrawal,
            withdrawal_rate_percent=withdrawal_rate_percent,
            yearly_data=tuple(yearly_data),
            final_portfolio_value=portfolio if is_successful else 0.0,
            survival_years=len(yearly_data),
            is_successful=is_successful,
        )

    def compare_strategies(
        self,
        initial_portfolio: float,
        annual_expenses: float,
        withdrawal_rate_percent: float,
        expected_return_percent: float,
        inflation_rate_percent: float,
        years: int = 30,
        start_year: Optional[int] = None,
    ):
        """Run every withdrawal strategy with the same inputs."""
        return {
            strategy: self.simulate_withdrawal(
                initial_portfolio,
                annual_expenses,
                withdrawal_rate_percent,
                expected_return_percent,
                inflation_rate_percent,
                strategy,
                years,
                start_year,
            )
            for strategy in WithdrawalStrategy
        }

    # ------------------------- Sustainability ------------------------- #
    def analyze_sustainability(
        self,
        initial_portfolio: float,
        annual_expenses: float,
        withdrawal_rate_percent: float,
        scenarios: Sequence[ReturnScenario],
        inflation_rate_percent: float = 2.5,
        simulation_years: int = 50,
        start_year: Optional[int] = None,
    ) -> SustainabilityResult:
        """Probability-weighted outcome of a constant dollar plan.

        Probabilities are used as given; they are not required to sum to 1.
        Best and worst scenarios are chosen by final portfolio value, the
        first scenario winning ties.
        """
        if not scenarios:
            raise ValidationError("At least one return scenario must be provided")

        outcomes = []
        for scenario in scenarios:
            result = self.simulate_withdrawal(
                initial_portfolio,
                annual_expenses,
                withdrawal_rate_percent,
                scenario.return_rate_percent,
                inflation_rate_percent,
                WithdrawalStrategy.CONSTANT_DOLLAR,
                simulation_years,
                start_year,
            )
            outcomes.append(
                ScenarioOutcome(
                    scenario=scenario.name,
                    return_rate_percent=scenario.return_rate_percent,
                    probability=scenario.probability,
                    result=result,
                )
            )

        probabilities = np.array([outcome.probability for outcome in outcomes], dtype=float)
        successes = np.array([outcome.result.is_successful for outcome in outcomes], dtype=float)
        survival = np.array([outcome.result.survival_years for outcome in outcomes], dtype=float)
        final_values = np.array([outcome.result.final_portfolio_value for outcome in outcomes], dtype=float)

        weighted_success_rate = float(probabilities @ successes)
        average_survival_years = float(probabilities @ survival)
        # argmax/argmin return the first index on ties
        best = outcomes[int(np.argmax(final_values))]
        worst = outcomes[int(np.argmin(final_values))]

        return SustainabilityResult(
            initial_portfolio=initial_portfolio,
            annual_expenses=annual_expenses,
            withdrawal_rate_percent=withdrawal_rate_percent,
            inflation_rate_percent=inflation_rate_percent,
            simulation_years=simulation_years,
            scenario_results=tuple(outcomes),
            weighted_success_rate=weighted_success_rate,
            average_survival_years=average_survival_years,
            best_scenario=best,
            worst_scenario=worst,
            sustainability_score=weighted_success_rate * 100,
        )

    def default_scenarios(self):
        """Return scenarios from configuration."""
        return [ReturnScenario(**item) for item in self.config.default_return_scenarios]
