"""Chart components for visualization.

This module handles all charting for the planner:
- Growth projection charts (contributions, nominal and inflation-adjusted value)
- Mixed allocation breakdown (stacked areas per allocation type)
- FIRE projection (savings path against the FIRE number)
- Withdrawal strategy charts (portfolio value and yearly withdrawals)
- Scenario comparison and sustainability charts

Key features:
- Figure builders return plotly figures so they can be exported or tested
- Calendar-year x-axes with adaptive tick spacing
- Currency-aware axis labels
"""

from typing import Dict, List, Sequence, Tuple

import plotly.graph_objs as go
import streamlit as st

from app.schemas import (
    FireTimeline,
    MixedProjectionResult,
    ProjectionResult,
    SustainabilityResult,
    WithdrawalSimulationResult,
    WithdrawalStrategy,
)
from app.utils import get_currency_symbol

PALETTE = ["#08519c", "#1abc9c", "#e67e22", "#8e44ad", "#c0392b", "#7f8c8d"]


def _year_dtick(years: Sequence[int]) -> int:
    """Adaptive tick interval: wider spacing for long horizons."""
    if len(years) == 0:
        return 1
    year_range = max(years) - min(years)
    if year_range > 30:
        return 10
    elif year_range > 15:
        return 5
    elif year_range > 6:
        return 2
    return 1


class ChartComponent:
    """Charts for the planner.

    Each ``create_*`` method builds a plotly figure; ``render`` displays it.
    """

    def __init__(self, currency: str = "USD"):
        self.currency = currency

    @property
    def value_axis_title(self) -> str:
        return f"Value ({get_currency_symbol(self.currency)})"

    def render(self, fig: go.Figure, key: str = None) -> None:
        st.plotly_chart(fig, use_container_width=True, key=key)

    def _finish_layout(self, fig: go.Figure, title: str, years: Sequence[int]) -> go.Figure:
        fig.update_layout(
            title=title,
            xaxis_title="Year",
            yaxis_title=self.value_axis_title,
            hovermode="x unified",
            showlegend=True,
            legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1),
        )
        fig.update_xaxes(tickmode="linear", dtick=_year_dtick(years))
        return fig

    # --------------------- Growth --------------------- #
    def create_growth_chart(
        self, result: ProjectionResult, title: str = "Investment Growth"
    ) -> go.Figure:
        """Contributions, nominal value and inflation-adjusted value by year."""
        df = result.to_dataframe()
        years = list(df.index)

        fig = go.Figure()
        fig.add_trace(
            go.Scatter(
                x=years,
                y=df["total_investment"],
                name="Total Invested",
                line=dict(color="#7f8c8d", width=2, dash="dash"),
            )
        )
        fig.add_trace(
            go.Scatter(
                x=years,
                y=df["investment_value"],
                name="Investment Value",
                line=dict(color="#08519c", width=3),
                fill="tonexty",
                fillcolor="rgba(8, 81, 156, 0.1)",
            )
        )
        fig.add_trace(
            go.Scatter(
                x=years,
                y=df["inflation_adjusted_value"],
                name="Inflation-adjusted Value",
                line=dict(color="#1abc9c", width=2),
            )
        )
        if "after_tax_value" in df.columns:
            fig.add_trace(
                go.Scatter(
                    x=years,
                    y=df["after_tax_value"],
                    name="After-tax Value",
                    line=dict(color="#e67e22", width=2, dash="dot"),
                )
            )
        return self._finish_layout(fig, title, years)

    def create_allocation_chart(
        self, result: MixedProjectionResult, title: str = "Allocation Breakdown"
    ) -> go.Figure:
        """Stacked nominal value of each allocation type by year."""
        df = result.breakdown_dataframe()
        years = list(df.index)

        fig = go.Figure()
        for i, column in enumerate(df.columns):
            fig.add_trace(
                go.Scatter(
                    x=years,
                    y=df[column],
                    name=str(column),
                    stackgroup="allocation",
                    line=dict(color=PALETTE[i % len(PALETTE)], width=1),
                )
            )
        return self._finish_layout(fig, title, years)

    def create_allocation_pie(self, result: MixedProjectionResult) -> go.Figure:
        """Terminal value share per allocation type."""
        labels = [leg.type for leg in result.breakdown]
        values = [leg.value for leg in result.breakdown]
        fig = go.Figure(
            data=[
                go.Pie(
                    labels=labels,
                    values=values,
                    hole=0.5,
                    marker=dict(colors=PALETTE[: len(labels)]),
                    textinfo="label+percent",
                )
            ]
        )
        fig.update_layout(title="Final Value by Allocation", showlegend=False)
        return fig

    def create_scenario_comparison_chart(
        self,
        results: Sequence[Tuple[str, ProjectionResult]],
        title: str = "Scenario Comparison",
        inflation_adjusted: bool = False,
    ) -> go.Figure:
        """One line per named projection."""
        column = "inflation_adjusted_value" if inflation_adjusted else "investment_value"
        fig = go.Figure()
        all_years: List[int] = []
        for i, (name, result) in enumerate(results):
            df = result.to_dataframe()
            all_years.extend(df.index)
            fig.add_trace(
                go.Scatter(
                    x=list(df.index),
                    y=df[column],
                    name=name,
                    line=dict(color=PALETTE[i % len(PALETTE)], width=2.5),
                )
            )
        return self._finish_layout(fig, title, sorted(set(all_years)))

    # --------------------- FIRE --------------------- #
    def create_fire_projection_chart(
        self,
        savings_path: Sequence[Tuple[int, float, float]],
        timeline: FireTimeline,
        title: str = "Path to FIRE",
    ) -> go.Figure:
        """Savings by year against the FIRE number."""
        years = [year for year, _, _ in savings_path]
        ages = [age for _, age, _ in savings_path]
        savings = [value for _, _, value in savings_path]

        fig = go.Figure()
        fig.add_trace(
            go.Scatter(
                x=years,
                y=savings,
                name="Savings",
                customdata=ages,
                hovertemplate="Age %{customdata:.0f}: %{y:,.0f}<extra></extra>",
                line=dict(color="#08519c", width=3),
            )
        )
        fig.add_trace(
            go.Scatter(
                x=years,
                y=[timeline.fire_number] * len(years),
                name="FIRE Number",
                line=dict(color="#c0392b", width=2, dash="dash"),
            )
        )
        return self._finish_layout(fig, title, years)

    def create_withdrawal_chart(
        self, result: WithdrawalSimulationResult, title: str = None
    ) -> go.Figure:
        """Portfolio value (line) and yearly withdrawals (bars)."""
        df = result.to_dataframe()
        years = list(df.index)

        fig = go.Figure()
        fig.add_trace(
            go.Bar(
                x=years,
                y=df["withdrawal"],
                name="Withdrawal",
                marker_color="rgba(230, 126, 34, 0.6)",
                yaxis="y2",
            )
        )
        fig.add_trace(
            go.Scatter(
                x=years,
                y=df["portfolio_value"],
                name="Portfolio Value",
                line=dict(color="#08519c", width=3),
            )
        )
        fig = self._finish_layout(fig, title or f"Withdrawals: {result.strategy.label}", years)
        fig.update_layout(
            yaxis2=dict(
                title=f"Withdrawal ({get_currency_symbol(self.currency)})",
                overlaying="y",
                side="right",
                showgrid=False,
            )
        )
        return fig

    def create_strategy_comparison_chart(
        self, results: Dict[WithdrawalStrategy, WithdrawalSimulationResult]
    ) -> go.Figure:
        """Portfolio value under every withdrawal strategy."""
        fig = go.Figure()
        all_years: List[int] = []
        for i, (strategy, result) in enumerate(results.items()):
            df = result.to_dataframe()
            all_years.extend(df.index)
            fig.add_trace(
                go.Scatter(
                    x=list(df.index),
                    y=df["portfolio_value"],
                    name=strategy.label,
                    line=dict(color=PALETTE[i % len(PALETTE)], width=2.5),
                )
            )
        return self._finish_layout(fig, "Withdrawal Strategy Comparison", sorted(set(all_years)))

    def create_sustainability_chart(self, result: SustainabilityResult) -> go.Figure:
        """Final portfolio value per return scenario, coloured by outcome."""
        df = result.summary_dataframe()
        colors = ["#1abc9c" if ok else "#c0392b" for ok in df["is_successful"]]
        fig = go.Figure(
            data=[
                go.Bar(
                    x=df["scenario"],
                    y=df["final_portfolio_value"],
                    marker_color=colors,
                    text=[f"{years} yrs" for years in df["survival_years"]],
                    textposition="outside",
                )
            ]
        )
        fig.update_layout(
            title=f"Sustainability Score: {result.sustainability_score:.0f}/100",
            xaxis_title="Scenario",
            yaxis_title=f"Final Portfolio ({get_currency_symbol(self.currency)})",
            showlegend=False,
        )
        return fig
