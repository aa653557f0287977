"""Results display component."""

import pandas as pd
import streamlit as st

from app.schemas import (
    AfterTaxProjectionResult,
    FireTimeline,
    ProjectionResult,
    SustainabilityResult,
    WithdrawalSimulationResult,
)
from app.utils import format_currency, format_percentage


class ResultsComponent:
    """Component for displaying calculation results."""

    def __init__(self, currency: str = "USD"):
        self.currency = currency

    def _money(self, amount: float, compact: bool = True) -> str:
        return format_currency(amount, self.currency, compact=compact)

    def display_projection_metrics(self, result: ProjectionResult) -> None:
        """Display key metrics for a growth projection."""
        col1, col2, col3, col4 = st.columns(4)

        with col1:
            st.metric(
                "Final Value",
                self._money(result.final_investment_value),
                help="Nominal portfolio value at the end of the projection",
            )
        with col2:
            st.metric(
                "Total Contributions",
                self._money(result.total_contributions),
                help="Principal plus all monthly contributions",
            )
        with col3:
            st.metric(
                "Total Growth",
                self._money(result.total_growth),
                help="Final value minus contributions",
            )
        with col4:
            last = result.yearly_projections[-1]
            st.metric(
                "Inflation-adjusted",
                self._money(last.inflation_adjusted_value),
                help="Final value in today's money",
            )

        if isinstance(result, AfterTaxProjectionResult):
            col1, col2 = st.columns(2)
            with col1:
                st.metric(
                    "After-tax Value",
                    self._money(result.final_after_tax_value),
                    help=f"Final value after {format_percentage(result.tax_rate_percent, 0)} tax on final-year growth",
                )
            with col2:
                st.metric("Tax Paid", self._money(result.total_tax_paid))

    def display_fire_metrics(self, timeline: FireTimeline) -> None:
        """Display the FIRE target and timeline."""
        col1, col2, col3 = st.columns(3)

        with col1:
            st.metric(
                "FIRE Number",
                self._money(timeline.fire_number),
                help="Capital needed to fund expenses (with safety margin) at the withdrawal rate",
            )
        with col2:
            if timeline.converged:
                st.metric("Years to FIRE", f"{timeline.years_to_fire:.1f}")
            else:
                st.metric(
                    "Years to FIRE",
                    "100+",
                    help="Target not reached within the 100-year simulation horizon",
                )
        with col3:
            st.metric("FIRE Age", f"{timeline.fire_age:.1f}" if timeline.converged else "N/A")

        if not timeline.converged:
            st.warning("Your savings do not reach the FIRE number within 100 years.")

    def display_withdrawal_metrics(self, result: WithdrawalSimulationResult) -> None:
        """Display the outcome of a withdrawal simulation."""
        col1, col2, col3 = st.columns(3)

        with col1:
            st.metric(
                "Outcome",
                "Sustainable" if result.is_successful else "Depleted",
                help="Whether the portfolio still has value at the end of the simulation",
            )
        with col2:
            st.metric("Years Funded", f"{result.survival_years}")
        with col3:
            st.metric("Final Portfolio", self._money(result.final_portfolio_value))

    def display_sustainability(self, result: SustainabilityResult) -> None:
        """Display the scenario-weighted sustainability summary."""
        col1, col2, col3, col4 = st.columns(4)

        with col1:
            st.metric("Sustainability Score", f"{result.sustainability_score:.0f}/100")
        with col2:
            st.metric("Weighted Success", format_percentage(result.weighted_success_rate * 100))
        with col3:
            st.metric("Avg Survival", f"{result.average_survival_years:.1f} yrs")
        with col4:
            st.metric(
                "Best / Worst",
                f"{result.best_scenario.scenario} / {result.worst_scenario.scenario}",
            )

        df = result.summary_dataframe()
        df["final_portfolio_value"] = df["final_portfolio_value"].map(self._money)
        df["probability"] = df["probability"].map(lambda p: format_percentage(p * 100, 0))
        st.dataframe(df, use_container_width=True, hide_index=True)

    def display_table(self, df: pd.DataFrame, money_columns=None) -> None:
        """Display a yearly table with currency formatting."""
        display_df = df.copy()
        for column in money_columns or []:
            if column in display_df.columns:
                display_df[column] = display_df[column].map(lambda v: self._money(v, compact=False))
        st.dataframe(display_df, use_container_width=True)
