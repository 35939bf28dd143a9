"""
Unit tests for window aggregation: window boundaries, zero fill, velocity
and period totals.
"""

import math
from datetime import date, timedelta

import pytest

from goalpulse.engine.window_aggregator import (
    WindowAggregator,
    compute_window_stats,
    period_totals,
    series_from_records,
)
from goalpulse.models.enums import Domain
from goalpulse.models.records import Record

D0 = date(2024, 3, 1)


def day(n: int) -> date:
    return D0 + timedelta(days=n)


class TestComputeWindowStats:
    """Test compute_window_stats over plain series."""

    def test_empty_series_is_insufficient(self):
        stat = compute_window_stats([], 7, day(6))
        assert stat.sufficient_data is False
        assert math.isnan(stat.mean)
        assert stat.mean_or_none is None
        assert stat.velocity_per_week is None
        assert stat.count == 0
        assert stat.total == 0.0

    def test_single_point_is_insufficient(self):
        stat = compute_window_stats([(day(6), 8.0)], 7, day(6))
        assert stat.sufficient_data is False
        assert stat.velocity_per_week is None
        assert stat.count == 1
        assert stat.total == 8.0
        assert stat.last_value == 8.0

    def test_constant_series_mean_and_zero_spread(self):
        series = [(day(i), 8.0) for i in range(7)]
        stat = compute_window_stats(series, 7, day(6))
        assert stat.sufficient_data is True
        assert stat.mean == pytest.approx(8.0)
        assert stat.stdev == pytest.approx(0.0)
        assert stat.velocity_per_week == pytest.approx(0.0)
        assert stat.count == 7

    def test_window_excludes_day_at_lower_boundary(self):
        # (as_of - 7, as_of] holds days 1..7 when as_of is day 7
        series = [(day(i), float(i)) for i in range(8)]
        stat = compute_window_stats(series, 7, day(7))
        assert stat.count == 7
        assert stat.first_value == 1.0
        assert stat.last_value == 7.0

    def test_window_ignores_points_after_as_of(self):
        series = [(day(0), 1.0), (day(1), 1.0), (day(2), 100.0)]
        stat = compute_window_stats(series, 7, day(1))
        assert stat.count == 2
        assert stat.mean == pytest.approx(1.0)

    def test_velocity_per_week_between_halves(self):
        stat = compute_window_stats([(day(0), 1.0), (day(7), 3.0)], 8, day(7))
        assert stat.velocity_per_week == pytest.approx(2.0)

    def test_velocity_negative_for_declining_series(self):
        series = [(day(i), 9.0 - i * 0.5) for i in range(7)]
        stat = compute_window_stats(series, 7, day(6))
        assert stat.velocity_per_week < 0

    def test_population_standard_deviation(self):
        stat = compute_window_stats([(day(0), 2.0), (day(1), 4.0)], 7, day(1))
        assert stat.stdev == pytest.approx(1.0)
        assert stat.variance == pytest.approx(1.0)


class TestZeroFill:
    """Test densification of count series."""

    def test_fill_pads_days_without_events(self):
        stat = compute_window_stats(
            [(day(0), 1.0)], 7, day(6), fill_value=0.0, fill_start=day(0)
        )
        assert stat.count == 7
        assert stat.total == 1.0
        assert stat.mean == pytest.approx(1 / 7)

    def test_fill_does_not_reach_before_tracking_started(self):
        stat = compute_window_stats(
            [(day(5), 2.0)], 7, day(6), fill_value=0.0, fill_start=day(5)
        )
        assert stat.count == 2
        assert stat.total == 2.0

    def test_fill_keeps_observed_values(self):
        series = [(day(0), 3.0), (day(2), 1.0)]
        stat = compute_window_stats(series, 7, day(2), fill_value=0.0, fill_start=day(0))
        assert stat.count == 3
        assert stat.total == 4.0

    def test_fill_without_start_is_a_no_op(self):
        stat = compute_window_stats([(day(6), 2.0)], 7, day(6), fill_value=0.0)
        assert stat.count == 1
        assert stat.sufficient_data is False


class TestPeriodTotals:
    """Test consecutive period aggregation."""

    def test_period_totals_oldest_first(self):
        series = [(day(0), 1.0), (day(7), 2.0), (day(14), 3.0)]
        assert period_totals(series, 7, 3, day(14)) == [1.0, 2.0, 3.0]

    def test_period_totals_sums_within_period(self):
        series = [(day(12), 1.0), (day(13), 1.0), (day(14), 1.0)]
        assert period_totals(series, 7, 2, day(14)) == [0.0, 3.0]

    def test_period_totals_ignores_out_of_range(self):
        series = [(day(0), 5.0), (day(20), 5.0)]
        assert period_totals(series, 7, 2, day(14)) == [0.0, 0.0]


class TestSeriesFromRecords:
    def test_series_skips_records_without_field(self):
        records = [
            Record(date=day(0), domain=Domain.HEALTH, values={"workouts": 1.0}),
            Record(date=day(1), domain=Domain.HEALTH, values={"body_fat_pct": 15.0}),
        ]
        assert series_from_records(records, "workouts") == [(day(0), 1.0)]


class TestWindowAggregator:
    def test_short_and_baseline_use_configured_windows(self):
        aggregator = WindowAggregator(short_window_days=7, baseline_window_days=30)
        series = [(day(i), 1.0) for i in range(30)]
        assert aggregator.short(series, day(29)).count == 7
        assert aggregator.baseline(series, day(29)).count == 30

    def test_custom_window_sizes(self):
        aggregator = WindowAggregator(short_window_days=3, baseline_window_days=10)
        series = [(day(i), 1.0) for i in range(30)]
        assert aggregator.short(series, day(29)).window_days == 3
        assert aggregator.baseline(series, day(29)).count == 10
