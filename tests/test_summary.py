"""Tests for engine/summary.py — summary statistics and monthly quartiles."""

from __future__ import annotations

import numpy as np
import pytest

from outage_simulator.engine.summary import monthly_quantiles, process_reliability_results
from outage_simulator.models.results import ReliabilitySummary


@pytest.fixture
def small_summary() -> ReliabilitySummary:
    cumulative = np.array([
        [0.9, 0.8, 0.7],
        [0.95, 0.5, 0.25],
    ])
    fuel_survival = np.array([
        [1, 1, 1],
        [1, 1, 0],
    ])
    fuel_used = np.array([[1.23456789, 2.0], [0.5, 0.0]])
    return process_reliability_results(cumulative, fuel_survival, fuel_used)


class TestSummaryVectors:

    def test_unlimited_fuel_statistics(self, small_summary):
        assert small_summary.unlimited_fuel_mean_cumulative_survival_by_duration == pytest.approx([0.925, 0.65, 0.475])
        assert small_summary.unlimited_fuel_min_cumulative_survival_by_duration == pytest.approx([0.9, 0.5, 0.25])
        assert small_summary.unlimited_fuel_cumulative_survival_final_time_step == pytest.approx([0.7, 0.25])

    def test_fuel_statistics(self, small_summary):
        assert small_summary.mean_fuel_survival_by_duration == pytest.approx([1.0, 1.0, 0.5])
        assert small_summary.fuel_outage_survival_final_time_step == [1.0, 0.0]

    def test_combined_statistics(self, small_summary):
        assert small_summary.mean_cumulative_survival_by_duration == pytest.approx([0.925, 0.65, 0.35])
        assert small_summary.min_cumulative_survival_by_duration == pytest.approx([0.9, 0.5, 0.0])
        assert small_summary.cumulative_survival_final_time_step == pytest.approx([0.7, 0.0])
        assert small_summary.mean_cumulative_survival_final_time_step == pytest.approx(0.35)

    def test_rounded_to_six_decimals(self, small_summary):
        assert small_summary.fuel_used[0][0] == 1.234568

    def test_short_series_has_no_monthly_statistics(self, small_summary):
        assert small_summary.monthly_median_cumulative_survival_final_time_step == []
        assert small_summary.monthly_max_cumulative_survival_final_time_step == []

    def test_dumps_to_plain_dict(self, small_summary):
        dumped = small_summary.model_dump()
        assert isinstance(dumped["cumulative_survival_final_time_step"], list)
        assert isinstance(dumped["mean_cumulative_survival_final_time_step"], float)


class TestMonthlyQuantiles:

    def test_hourly_year_partitioned_by_month(self):
        final = np.arange(8760) / 8760
        monthly = monthly_quantiles(final)
        assert monthly.shape == (12, 5)
        # January is hours 0..743
        assert monthly.loc[1, 0.0] == pytest.approx(0.0)
        assert monthly.loc[1, 0.5] == pytest.approx(371.5 / 8760)
        assert monthly.loc[1, 1.0] == pytest.approx(743 / 8760)
        # February starts at hour 744 and has 28 days
        assert monthly.loc[2, 0.0] == pytest.approx(744 / 8760)
        assert monthly.loc[2, 1.0] == pytest.approx((744 + 28 * 24 - 1) / 8760)

    def test_sub_hourly_steps(self):
        # 15-minute steps: January is steps 0..2975
        final = np.arange(4 * 8760, dtype=float)
        monthly = monthly_quantiles(final)
        assert monthly.loc[1, 1.0] == pytest.approx(31 * 24 * 4 - 1)
        assert monthly.loc[12, 1.0] == pytest.approx(4 * 8760 - 1)

    def test_fewer_than_one_step_per_hour(self):
        assert monthly_quantiles(np.ones(4380)) is None

    def test_summary_monthly_lists(self):
        cumulative = np.ones((8760, 2))
        cumulative[:744, 1] = 0.5
        summary = process_reliability_results(cumulative, np.ones((8760, 2), dtype=int), np.zeros((8760, 1)))
        assert len(summary.monthly_min_cumulative_survival_final_time_step) == 12
        assert summary.monthly_upper_quartile_cumulative_survival_final_time_step[0] == 0.5
        assert summary.monthly_lower_quartile_cumulative_survival_final_time_step[1] == 1.0
