"""Calculator views: compound interest, FIRE and scenario analysis.

Each view renders its input form, runs the engine through the services,
and displays metrics, charts, tables and save/export actions. Validation
errors from the engine are shown to the user and stop the view.
"""

import logging
from dataclasses import asdict
from datetime import datetime

import pandas as pd
import streamlit as st

from app.components.charts import ChartComponent
from app.components.results import ResultsComponent
from app.config import get_config
from app.schemas import (
    AllocationLeg,
    FireInputs,
    GrowthScenario,
    ReturnScenario,
    StorageError,
    ValidationError,
    WithdrawalStrategy,
)
from app.services import FireService, GrowthService, ReportService, StorageService

logger = logging.getLogger(__name__)


class CalculatorComponent:
    """Base class wiring services and display helpers for a view."""

    def __init__(self, settings: dict):
        self.settings = settings
        self.config = get_config()
        self.currency = settings["currency"]
        self.charts = ChartComponent(self.currency)
        self.results = ResultsComponent(self.currency)
        self.growth_service = GrowthService()
        self.fire_service = FireService()
        self.storage_service = StorageService()
        self.report_service = ReportService()

    def _save_button(self, key: str, name: str, inputs: dict, results) -> None:
        if st.button("Save Calculation", key=f"{key}_save"):
            try:
                calculation = self.storage_service.save_calculation(name, inputs, results)
            except StorageError as e:
                logger.error(f"Saving '{name}' failed: {e}")
                st.error(f"Save failed: {e}")
            else:
                st.success(f"Saved as {calculation.id}")

    def _pdf_button(self, key: str, build) -> None:
        pdf_bytes = build()
        st.download_button(
            "Export PDF",
            data=pdf_bytes,
            file_name=f"{key}-{datetime.now():%Y%m%d%H%M%S}.pdf",
            mime="application/pdf",
            key=f"{key}_pdf",
        )


class CompoundInterestComponent(CalculatorComponent):
    """Compound interest calculator with optional mixed allocation and tax."""

    def render(self) -> None:
        st.subheader("Compound Interest Calculator")

        col1, col2 = st.columns(2)
        with col1:
            principal = st.number_input(
                "Initial Investment", min_value=0.0, value=self.config.default_principal, step=1000.0
            )
            monthly_contribution = st.number_input(
                "Monthly Contribution",
                min_value=0.0,
                value=self.config.default_monthly_contribution,
                step=100.0,
            )
            years = st.slider(
                "Investment Period (years)",
                min_value=1,
                max_value=self.config.max_simulation_years,
                value=self.config.default_years,
            )
        with col2:
            annual_rate = st.number_input(
                "Expected Annual Return (%)",
                min_value=-50.0,
                max_value=50.0,
                value=self.config.default_annual_rate,
                step=0.5,
            )
            adjust_for_inflation = st.checkbox("Adjust for inflation", value=True)
            tax_rate = st.number_input(
                "Tax Rate on Growth (%)",
                min_value=0.0,
                max_value=100.0,
                value=self.config.default_tax_rate,
                step=1.0,
            )

        use_allocation = st.checkbox("Use mixed allocation", value=False)
        legs = []
        if use_allocation:
            preset_name = st.selectbox("Allocation preset", list(self.config.allocation_presets))
            preset = self.config.allocation_presets[preset_name]
            rows = pd.DataFrame(
                [
                    {"type": leg_type, "percentage": pct, "expected_return_percent": rate}
                    for leg_type, (pct, rate) in preset.items()
                ]
            )
            edited = st.data_editor(rows, num_rows="dynamic", key=f"allocation_{preset_name}")
            st.caption(f"Total allocation: {edited['percentage'].sum():g}%")

        try:
            if use_allocation:
                legs = [
                    AllocationLeg(
                        type=str(row["type"]),
                        percentage=float(row["percentage"]),
                        expected_return_percent=float(row["expected_return_percent"]),
                    )
                    for _, row in edited.dropna().iterrows()
                ]
                result = self.growth_service.simulate_mixed_allocation(
                    principal,
                    monthly_contribution,
                    legs,
                    years,
                    self.settings["inflation"],
                    start_year=self.settings["start_year"],
                )
            else:
                result = self.growth_service.simulate_compound_growth(
                    principal,
                    monthly_contribution,
                    annual_rate,
                    years,
                    self.settings["inflation"],
                    adjust_for_inflation,
                    start_year=self.settings["start_year"],
                )
            taxed = self.growth_service.apply_after_tax_adjustment(result, tax_rate)
        except ValidationError as e:
            st.error(f"Input validation error: {e}")
            return

        self.results.display_projection_metrics(taxed)
        self.charts.render(self.charts.create_growth_chart(taxed), key="growth_chart")
        if use_allocation:
            col1, col2 = st.columns([2, 1])
            with col1:
                self.charts.render(self.charts.create_allocation_chart(result), key="allocation_chart")
            with col2:
                self.charts.render(self.charts.create_allocation_pie(result), key="allocation_pie")

        with st.expander("Yearly breakdown"):
            self.results.display_table(
                taxed.to_dataframe(),
                ["total_investment", "investment_value", "inflation_adjusted_value", "growth", "tax_amount", "after_tax_value"],
            )

        inputs = {
            "principal": principal,
            "monthlyContribution": monthly_contribution,
            "annualRate": annual_rate,
            "years": years,
            "inflationRate": self.settings["inflation"],
            "adjustForInflation": adjust_for_inflation,
            "taxRate": tax_rate,
            "allocation": [asdict(leg) for leg in legs],
        }
        col1, col2 = st.columns(2)
        with col1:
            self._save_button("compound", "Compound Interest", inputs, taxed)
        with col2:
            self._pdf_button(
                "compound-interest",
                lambda: self.report_service.build_projection_report(
                    "Compound Interest Projection", inputs, taxed, self.currency
                ),
            )


class FireComponent(CalculatorComponent):
    """FIRE calculator: target, timeline and withdrawal simulation."""

    def render(self) -> None:
        st.subheader("FIRE Calculator")
        defaults = FireInputs()

        col1, col2, col3 = st.columns(3)
        with col1:
            current_age = st.number_input("Current Age", min_value=0, max_value=100, value=defaults.current_age)
            current_savings = st.number_input(
                "Current Savings", min_value=0.0, value=defaults.current_savings, step=1000.0
            )
            annual_income = st.number_input(
                "Annual Income", min_value=0.0, value=defaults.annual_income, step=1000.0
            )
        with col2:
            annual_expenses = st.number_input(
                "Annual Expenses", min_value=0.0, value=defaults.annual_expenses, step=1000.0
            )
            annual_savings = st.number_input(
                "Annual Savings", min_value=0.0, value=defaults.annual_savings, step=1000.0
            )
            expected_return = st.slider(
                "Expected Return (%)", min_value=0.0, max_value=15.0, value=defaults.expected_return_percent, step=0.5
            )
        with col3:
            withdrawal_rate = st.slider(
                "Withdrawal Rate (%)", min_value=1.0, max_value=10.0, value=defaults.withdrawal_rate_percent, step=0.1
            )
            safety_margin = st.slider(
                "Safety Margin (%)", min_value=0.0, max_value=50.0, value=defaults.safety_margin_percent, step=1.0
            )
            strategy = st.selectbox(
                "Withdrawal Strategy",
                list(WithdrawalStrategy),
                index=2,
                format_func=lambda s: s.label,
            )

        try:
            inputs = FireInputs(
                current_age=int(current_age),
                current_savings=current_savings,
                annual_income=annual_income,
                annual_expenses=annual_expenses,
                annual_savings=annual_savings,
                expected_return_percent=expected_return,
                withdrawal_rate_percent=withdrawal_rate,
                safety_margin_percent=safety_margin,
                inflation_rate_percent=self.settings["inflation"],
            )
            timeline = self.fire_service.fire_timeline(inputs)
            withdrawal = self.fire_service.simulate_withdrawal(
                timeline.fire_number,
                inputs.annual_expenses,
                inputs.withdrawal_rate_percent,
                inputs.expected_return_percent,
                inputs.inflation_rate_percent,
                strategy,
                self.config.default_withdrawal_years,
                start_year=self.settings["start_year"],
            )
        except ValidationError as e:
            st.error(f"Input validation error: {e}")
            return

        if inputs.savings_rate is not None:
            st.caption(f"Savings rate: {inputs.savings_rate * 100:.1f}% of income")
        self.results.display_fire_metrics(timeline)
        path = self.fire_service.savings_path(inputs, timeline, start_year=self.settings["start_year"])
        self.charts.render(self.charts.create_fire_projection_chart(path, timeline), key="fire_chart")

        st.markdown("---")
        st.subheader(f"Withdrawal Simulation: {strategy.label}")
        self.results.display_withdrawal_metrics(withdrawal)
        self.charts.render(self.charts.create_withdrawal_chart(withdrawal), key="withdrawal_chart")

        with st.expander("Compare strategies"):
            comparison = self.fire_service.compare_strategies(
                timeline.fire_number,
                inputs.annual_expenses,
                inputs.withdrawal_rate_percent,
                inputs.expected_return_percent,
                inputs.inflation_rate_percent,
                self.config.default_withdrawal_years,
                start_year=self.settings["start_year"],
            )
            self.charts.render(self.charts.create_strategy_comparison_chart(comparison), key="strategy_chart")

        with st.expander("Yearly withdrawals"):
            self.results.display_table(
                withdrawal.to_dataframe(),
                ["portfolio_value", "withdrawal", "inflation_adjusted_expenses", "portfolio_growth"],
            )

        input_params = asdict(inputs)
        input_params["strategy"] = strategy.value
        col1, col2 = st.columns(2)
        with col1:
            self._save_button(
                "fire",
                "FIRE Plan",
                input_params,
                {"timeline": timeline, "withdrawalResults": withdrawal},
            )
        with col2:
            self._pdf_button(
                "fire-calculation",
                lambda: self.report_service.build_fire_report(
                    "FIRE Plan", input_params, timeline, withdrawal, self.currency
                ),
            )


class ScenarioComponent(CalculatorComponent):
    """Scenario analysis: growth scenarios and withdrawal sustainability."""

    def render(self) -> None:
        st.subheader("Growth Scenarios")
        default_rows = pd.DataFrame(
            [
                {
                    "name": "Base",
                    "principal": self.config.default_principal,
                    "monthly_contribution": self.config.default_monthly_contribution,
                    "annual_rate_percent": 7.0,
                    "years": self.config.default_years,
                },
                {
                    "name": "Optimistic",
                    "principal": self.config.default_principal,
                    "monthly_contribution": self.config.default_monthly_contribution,
                    "annual_rate_percent": 10.0,
                    "years": self.config.default_years,
                },
            ]
        )
        edited = st.data_editor(default_rows, num_rows="dynamic", key="growth_scenarios")

        try:
            scenarios = [
                GrowthScenario(
                    name=str(row["name"]),
                    principal=float(row["principal"]),
                    monthly_contribution=float(row["monthly_contribution"]),
                    annual_rate_percent=float(row["annual_rate_percent"]),
                    years=int(row["years"]),
                    inflation_rate_percent=self.settings["inflation"],
                )
                for _, row in edited.dropna().iterrows()
            ]
            compared = self.growth_service.compare_scenarios(scenarios, start_year=self.settings["start_year"])
        except ValidationError as e:
            st.error(f"Input validation error: {e}")
            compared = None

        if compared:
            inflation_adjusted = st.checkbox("Show inflation-adjusted values", value=False)
            named = [(scenario.name, result) for scenario, result in compared]
            self.charts.render(
                self.charts.create_scenario_comparison_chart(named, inflation_adjusted=inflation_adjusted),
                key="scenario_chart",
            )
            summary = pd.DataFrame(
                [
                    {
                        "scenario": scenario.name,
                        "final_value": result.final_investment_value,
                        "contributions": result.total_contributions,
                        "growth": result.total_growth,
                    }
                    for scenario, result in compared
                ]
            ).set_index("scenario")
            self.results.display_table(summary, ["final_value", "contributions", "growth"])

        st.markdown("---")
        st.subheader("Withdrawal Sustainability")
        col1, col2, col3 = st.columns(3)
        with col1:
            portfolio = st.number_input("Initial Portfolio", min_value=0.0, value=1500000.0, step=10000.0)
        with col2:
            expenses = st.number_input("Annual Expenses ", min_value=0.0, value=60000.0, step=1000.0)
        with col3:
            withdrawal_rate = st.number_input("Withdrawal Rate (%) ", min_value=0.1, value=4.0, step=0.1)

        scenario_rows = st.data_editor(
            pd.DataFrame(self.config.default_return_scenarios),
            num_rows="dynamic",
            key="return_scenarios",
        )

        try:
            return_scenarios = [
                ReturnScenario(
                    name=str(row["name"]),
                    return_rate_percent=float(row["return_rate_percent"]),
                    probability=float(row["probability"]),
                )
                for _, row in scenario_rows.dropna().iterrows()
            ]
            sustainability = self.fire_service.analyze_sustainability(
                portfolio,
                expenses,
                withdrawal_rate,
                return_scenarios,
                self.settings["inflation"],
                self.config.default_simulation_years,
                start_year=self.settings["start_year"],
            )
        except ValidationError as e:
            st.error(f"Input validation error: {e}")
            return

        total_probability = sum(s.probability for s in return_scenarios)
        if abs(total_probability - 1.0) > 1e-6:
            st.info(f"Scenario probabilities sum to {total_probability:g}, not 1.")
        self.results.display_sustainability(sustainability)
        self.charts.render(self.charts.create_sustainability_chart(sustainability), key="sustainability_chart")
