"""Tests for compound growth, mixed allocation and after-tax projections."""

import pytest

from app.schemas import (
    AfterTaxProjectionResult,
    AllocationLeg,
    GrowthScenario,
    MixedProjectionResult,
    ValidationError,
)

from .conftest import START_YEAR


class TestCompoundGrowth:
    def test_baseline_scenario(self, baseline_projection):
        result = baseline_projection
        assert len(result.yearly_projections) == 20
        assert result.total_contributions == 340000
        assert result.final_investment_value > result.total_contributions

    def test_year_labels_follow_start_year(self, baseline_projection):
        years = [snap.year for snap in baseline_projection.yearly_projections]
        assert years == list(range(START_YEAR + 1, START_YEAR + 21))

    def test_totals_derived_from_last_snapshot(self, baseline_projection):
        last = baseline_projection.yearly_projections[-1]
        assert baseline_projection.final_investment_value == last.investment_value
        assert baseline_projection.total_contributions == last.total_investment
        assert baseline_projection.total_growth == (
            baseline_projection.final_investment_value - baseline_projection.total_contributions
        )

    def test_contribution_added_before_monthly_compounding(self, growth_service):
        result = growth_service.simulate_compound_growth(0, 100, 12, 1, 0, start_year=START_YEAR)
        expected = sum(100 * 1.01 ** k for k in range(1, 13))
        assert result.final_investment_value == pytest.approx(expected)

    def test_inflation_deflates_by_elapsed_months(self, growth_service):
        result = growth_service.simulate_compound_growth(1200, 0, 12, 2, 12, True, start_year=START_YEAR)
        for snap in result.yearly_projections:
            assert snap.inflation_adjusted_value == pytest.approx(1200)

    def test_without_inflation_adjustment(self, growth_service):
        result = growth_service.simulate_compound_growth(5000, 100, 5, 3, 3, False, start_year=START_YEAR)
        for snap in result.yearly_projections:
            assert snap.inflation_adjusted_value == snap.investment_value

    def test_zero_rate_has_no_growth(self, growth_service):
        result = growth_service.simulate_compound_growth(100000, 1000, 0, 20, 2.5, start_year=START_YEAR)
        assert result.final_investment_value == 340000
        assert result.total_growth == 0

    def test_value_never_below_contributions_for_non_negative_rates(self, growth_service):
        for rate in (0, 0.5, 4, 12):
            result = growth_service.simulate_compound_growth(2500, 75, rate, 7, 2, start_year=START_YEAR)
            assert result.final_investment_value >= result.total_contributions

    @pytest.mark.parametrize("years", [0, -1, 2.5, 101])
    def test_invalid_years_rejected(self, growth_service, years):
        with pytest.raises(ValidationError):
            growth_service.simulate_compound_growth(1000, 10, 7, years, start_year=START_YEAR)

    def test_negative_amounts_rejected(self, growth_service):
        with pytest.raises(ValidationError):
            growth_service.simulate_compound_growth(-1, 10, 7, 5)
        with pytest.raises(ValidationError):
            growth_service.simulate_compound_growth(1000, -10, 7, 5)

    def test_zero_inputs_give_zero_snapshots(self, growth_service):
        result = growth_service.simulate_compound_growth(0, 0, 7, 3, start_year=START_YEAR)
        assert len(result.yearly_projections) == 3
        assert result.final_investment_value == 0
        assert result.total_growth == 0

    def test_identical_inputs_give_identical_results(self, growth_service):
        first = growth_service.simulate_compound_growth(100000, 1000, 7, 20, 2.5, start_year=START_YEAR)
        second = growth_service.simulate_compound_growth(100000, 1000, 7, 20, 2.5, start_year=START_YEAR)
        assert first == second

    def test_configured_start_year(self, growth_service, default_config):
        default_config.start_year = 2000
        result = growth_service.simulate_compound_growth(1000, 0, 5, 2)
        assert result.yearly_projections[0].year == 2001

    def test_to_dataframe(self, baseline_projection):
        df = baseline_projection.to_dataframe()
        assert list(df.columns) == ["total_investment", "investment_value", "inflation_adjusted_value"]
        assert len(df) == 20
        assert df.index[0] == START_YEAR + 1


class TestMixedAllocation:
    LEGS = [
        AllocationLeg("Stocks", 60, 8),
        AllocationLeg("Bonds", 40, 4),
    ]

    def test_merges_legs_by_year(self, growth_service):
        result = growth_service.simulate_mixed_allocation(100000, 1000, self.LEGS, 10, 2.5, start_year=START_YEAR)
        assert isinstance(result, MixedProjectionResult)
        assert len(result.yearly_projections) == 10

        stocks = growth_service.simulate_compound_growth(60000, 600, 8, 10, 2.5, start_year=START_YEAR)
        bonds = growth_service.simulate_compound_growth(40000, 400, 4, 10, 2.5, start_year=START_YEAR)
        for i, snap in enumerate(result.yearly_projections):
            assert snap.year == START_YEAR + i + 1
            assert snap.investment_value == pytest.approx(
                stocks.yearly_projections[i].investment_value + bonds.yearly_projections[i].investment_value
            )
            assert snap.breakdown["Stocks"].value == pytest.approx(stocks.yearly_projections[i].investment_value)
            assert snap.breakdown["Bonds"].adjusted_value == pytest.approx(bonds.yearly_projections[i].inflation_adjusted_value)

    def test_final_breakdown(self, growth_service):
        result = growth_service.simulate_mixed_allocation(100000, 1000, self.LEGS, 10, start_year=START_YEAR)
        assert [leg.type for leg in result.breakdown] == ["Stocks", "Bonds"]
        assert sum(leg.value for leg in result.breakdown) == pytest.approx(result.final_investment_value)
        assert result.total_contributions == pytest.approx(100000 + 1000 * 120)

    def test_equal_rates_match_single_projection(self, growth_service):
        legs = [AllocationLeg("A", 50, 6), AllocationLeg("B", 50, 6)]
        mixed = growth_service.simulate_mixed_allocation(10000, 100, legs, 5, start_year=START_YEAR)
        single = growth_service.simulate_compound_growth(10000, 100, 6, 5, start_year=START_YEAR)
        assert mixed.final_investment_value == pytest.approx(single.final_investment_value)

    @pytest.mark.parametrize(
        "percentages",
        [(60, 30), (60, 41), (50, 49.98), (), (33.3, 33.3, 33.3)],
    )
    def test_rejects_allocations_not_summing_to_100(self, growth_service, percentages):
        legs = [AllocationLeg(f"leg{i}", pct, 5) for i, pct in enumerate(percentages)]
        with pytest.raises(ValidationError):
            growth_service.simulate_mixed_allocation(1000, 10, legs, 5)

    def test_accepts_sum_within_tolerance(self, growth_service):
        legs = [AllocationLeg("A", 33.333, 5), AllocationLeg("B", 33.333, 5), AllocationLeg("C", 33.333, 5)]
        result = growth_service.simulate_mixed_allocation(1000, 10, legs, 5, start_year=START_YEAR)
        assert len(result.yearly_projections) == 5

    def test_rejects_duplicate_types(self, growth_service):
        legs = [AllocationLeg("A", 50, 5), AllocationLeg("A", 50, 7)]
        with pytest.raises(ValidationError):
            growth_service.simulate_mixed_allocation(1000, 10, legs, 5)

    def test_leg_percentage_range(self):
        with pytest.raises(ValidationError):
            AllocationLeg("A", 120, 5)
        with pytest.raises(ValidationError):
            AllocationLeg("A", -5, 5)

    def test_breakdown_dataframe(self, growth_service):
        result = growth_service.simulate_mixed_allocation(1000, 10, self.LEGS, 4, start_year=START_YEAR)
        df = result.breakdown_dataframe()
        assert list(df.columns) == ["Stocks", "Bonds"]
        assert len(df) == 4


class TestAfterTax:
    def test_taxes_only_growth(self, growth_service):
        result = growth_service.simulate_compound_growth(100000, 0, 0, 5, start_year=START_YEAR)
        taxed = growth_service.apply_after_tax_adjustment(result, 15)
        assert isinstance(taxed, AfterTaxProjectionResult)
        for snap in taxed.yearly_projections:
            assert snap.growth == 0
            assert snap.tax_amount == 0
            assert snap.after_tax_value == snap.investment_value
        assert taxed.total_tax_paid == 0

    def test_yearly_growth_excludes_contributions(self, growth_service, baseline_projection):
        taxed = growth_service.apply_after_tax_adjustment(baseline_projection, 20)
        snaps = baseline_projection.yearly_projections
        first = taxed.yearly_projections[0]
        assert first.growth == pytest.approx(snaps[0].investment_value - snaps[0].total_investment)

        second = taxed.yearly_projections[1]
        expected = (
            snaps[1].investment_value
            - snaps[0].investment_value
            - (snaps[1].total_investment - snaps[0].total_investment)
        )
        assert second.growth == pytest.approx(expected)
        assert second.tax_amount == pytest.approx(expected * 0.2)
        assert second.after_tax_value == pytest.approx(snaps[1].investment_value - expected * 0.2)

    def test_final_fields(self, growth_service, baseline_projection):
        taxed = growth_service.apply_after_tax_adjustment(baseline_projection, 15)
        assert taxed.final_after_tax_value == taxed.yearly_projections[-1].after_tax_value
        assert taxed.total_tax_paid == pytest.approx(
            baseline_projection.final_investment_value - taxed.final_after_tax_value
        )
        assert taxed.final_investment_value == baseline_projection.final_investment_value
        assert taxed.total_growth == baseline_projection.total_growth

    def test_negative_growth_gives_tax_credit(self, growth_service):
        result = growth_service.simulate_compound_growth(100000, 0, -10, 3, start_year=START_YEAR)
        taxed = growth_service.apply_after_tax_adjustment(result, 25)
        for snap in taxed.yearly_projections:
            assert snap.growth < 0
            assert snap.tax_amount < 0
            assert snap.after_tax_value > snap.investment_value
        assert taxed.total_tax_paid < 0

    def test_zero_tax_rate(self, growth_service, baseline_projection):
        taxed = growth_service.apply_after_tax_adjustment(baseline_projection, 0)
        assert taxed.final_after_tax_value == baseline_projection.final_investment_value

    @pytest.mark.parametrize("rate", [-1, 100.5])
    def test_invalid_tax_rate(self, growth_service, baseline_projection, rate):
        with pytest.raises(ValidationError):
            growth_service.apply_after_tax_adjustment(baseline_projection, rate)

    def test_dataframe_includes_tax_columns(self, growth_service, baseline_projection):
        df = growth_service.apply_after_tax_adjustment(baseline_projection, 15).to_dataframe()
        assert {"growth", "tax_amount", "after_tax_value"} <= set(df.columns)


class TestScenarioComparison:
    def test_compares_named_projections(self, growth_service):
        scenarios = [
            GrowthScenario("Base", 100000, 1000, 7, 20),
            GrowthScenario("Optimistic", 100000, 1000, 10, 20),
        ]
        compared = growth_service.compare_scenarios(scenarios, start_year=START_YEAR)
        assert [scenario.name for scenario, _ in compared] == ["Base", "Optimistic"]
        assert compared[1][1].final_investment_value > compared[0][1].final_investment_value

    def test_requires_scenarios(self, growth_service):
        with pytest.raises(ValidationError):
            growth_service.compare_scenarios([])
