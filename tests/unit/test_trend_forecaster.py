"""
Unit tests for TrendForecaster: linear and compound projections, bounds,
termination and achievement probabilities.
"""

import math
import sys
from datetime import timedelta

import pytest

from goalpulse.engine.metrics import MetricContext
from goalpulse.engine.prediction.trend_forecaster import (
    FLAT_PROJECTION,
    INSUFFICIENT_PROJECTION,
    TrendForecaster,
    achievement_probability,
    project_compound,
    project_linear,
)
from goalpulse.engine.window_aggregator import WindowAggregator
from goalpulse.models.analytics import MetricReading
from goalpulse.models.enums import ProjectionMethod
from tests.conftest import AS_OF, make_snapshot, make_store, make_trades


@pytest.fixture
def forecaster():
    return TrendForecaster()


class TestProjectionFunctions:
    """Test the pure projection formulas."""

    def test_project_linear(self):
        assert project_linear(5.0, 1.0, 10.0) == 15.0

    def test_project_linear_zero_velocity_is_current(self):
        assert project_linear(7.5, 0.0, 40.0) == 7.5

    def test_compound_without_contribution(self):
        assert project_compound(100.0, 0.1, 2) == pytest.approx(121.0)

    def test_compound_with_contribution(self):
        # 100 * 1.1^2 + 10 * (1.1^2 - 1) / 0.1
        assert project_compound(100.0, 0.1, 2, 10.0) == pytest.approx(142.0)

    def test_compound_no_growth_no_contribution_is_none(self):
        assert project_compound(100.0, 0.0, 12) is None

    def test_compound_no_growth_with_contribution_is_linear_limit(self):
        assert project_compound(100.0, 0.0, 12, 10.0) == pytest.approx(220.0)

    def test_compound_overflow_saturates(self):
        projected = project_compound(1.0, 1.0, 2000)
        assert projected == sys.float_info.max
        assert not math.isinf(projected)


class TestAchievementProbability:
    """Test probability bounds and direction handling."""

    def test_meeting_target_is_certain(self):
        assert achievement_probability(120.0, 100.0) == 1.0

    def test_ratio_below_target(self):
        assert achievement_probability(50.0, 100.0) == pytest.approx(0.5)

    def test_floor(self):
        assert achievement_probability(-100.0, 100.0) == 0.1

    def test_ceiling_below_target(self):
        assert achievement_probability(99.9, 100.0) == 0.99

    def test_lower_is_better(self):
        assert achievement_probability(15.0, 12.0, lower_is_better=True) == pytest.approx(0.8)
        assert achievement_probability(11.0, 12.0, lower_is_better=True) == 1.0


class TestTrendForecasterProject:
    """Test per-goal projections."""

    def test_boolean_goal_not_projected(self, forecaster, registry):
        reading = MetricReading(value=0.0)
        assert forecaster.project(registry.get("offer_secured"), reading, AS_OF, AS_OF) is None

    def test_missing_value_reports_insufficient(self, forecaster, registry):
        projection = forecaster.project(
            registry.get("daily_score"), MetricReading(), AS_OF + timedelta(days=70), AS_OF
        )
        assert projection.projected_value is None
        assert projection.probability is None
        assert projection.note == INSUFFICIENT_PROJECTION

    @pytest.mark.parametrize("value,expected", [(None, False), (0.0, True), (7.5, True)])
    def test_reading_sufficiency(self, value, expected):
        assert MetricReading(value=value).sufficient_data is expected

    def test_linear_projection(self, forecaster, registry):
        reading = MetricReading(value=5.0, velocity_per_week=0.25)
        projection = forecaster.project(
            registry.get("daily_score"), reading, AS_OF + timedelta(days=28), AS_OF
        )
        assert projection.method == ProjectionMethod.LINEAR
        assert projection.projected_value == pytest.approx(6.0)
        assert projection.probability == pytest.approx(0.75)
        assert projection.weeks_to_target == pytest.approx(12.0)

    def test_missing_velocity_projects_flat(self, forecaster, registry):
        reading = MetricReading(value=7.0)
        projection = forecaster.project(
            registry.get("daily_score"), reading, AS_OF + timedelta(days=70), AS_OF
        )
        assert projection.projected_value == pytest.approx(7.0)
        assert projection.note == FLAT_PROJECTION
        assert projection.weeks_to_target is None

    def test_projection_clamped_to_bounds(self, forecaster, registry):
        reading = MetricReading(value=9.0, velocity_per_week=1.0)
        projection = forecaster.project(
            registry.get("daily_score"), reading, AS_OF + timedelta(days=364), AS_OF
        )
        assert projection.projected_value == 10.0
        assert projection.probability == 1.0

    def test_lower_is_better_projection(self, forecaster, registry):
        reading = MetricReading(value=15.0, velocity_per_week=-0.5)
        projection = forecaster.project(
            registry.get("body_fat"), reading, AS_OF + timedelta(days=84), AS_OF
        )
        assert projection.projected_value == pytest.approx(9.0)
        assert projection.probability == 1.0
        assert projection.weeks_to_target == pytest.approx(6.0)

    def test_moving_away_from_target_has_no_eta(self, forecaster, registry):
        reading = MetricReading(value=15.0, velocity_per_week=0.5)
        projection = forecaster.project(
            registry.get("body_fat"), reading, AS_OF + timedelta(days=84), AS_OF
        )
        assert projection.weeks_to_target is None
        assert 0.1 <= projection.probability < 1.0

    def test_compound_matches_closed_form(self, forecaster, registry):
        reading = MetricReading(value=100000.0)
        projection = forecaster.project(
            registry.get("net_worth"), reading, AS_OF + timedelta(days=360), AS_OF, rate=0.01
        )
        assert projection.method == ProjectionMethod.COMPOUND_GROWTH
        assert projection.projected_value == pytest.approx(100000.0 * 1.01 ** 12, rel=1e-6)

    def test_compound_without_growth_reports_insufficient(self, forecaster, registry):
        projection = forecaster.project(
            registry.get("trading_aum"), MetricReading(value=50000.0), AS_OF + timedelta(days=90), AS_OF
        )
        assert projection.projected_value is None
        assert projection.note == INSUFFICIENT_PROJECTION

    def test_runaway_rate_is_clamped_and_terminates(self, registry):
        forecaster = TrendForecaster(max_periods=24, max_monthly_rate=0.5)
        projection = forecaster.project(
            registry.get("net_worth"),
            MetricReading(value=1000.0),
            AS_OF + timedelta(days=36500),
            AS_OF,
            rate=50.0,
        )
        assert projection.projected_value == pytest.approx(1000.0 * 1.5 ** 24, rel=1e-6)

    def test_horizon_in_the_past_uses_zero_periods(self, forecaster):
        assert forecaster.periods_until(AS_OF, AS_OF - timedelta(days=10)) == 0


class TestCompoundInputs:
    """Test rate and contribution derivation from the snapshot."""

    def test_aum_rate_from_monthly_pnl(self, forecaster, registry):
        store = make_store(
            make_snapshot(
                tradingJournal=make_trades([600.0, 400.0]),
                financialData={"tradingAUM": 50000},
            )
        )
        ctx = MetricContext(store, WindowAggregator())
        rate, contribution = forecaster.compound_inputs(registry.get("trading_aum"), ctx)
        assert rate == pytest.approx(0.02)
        assert contribution == 0.0

    def test_aum_without_capital_has_no_rate(self, forecaster, registry):
        store = make_store(make_snapshot(tradingJournal=make_trades([600.0])))
        ctx = MetricContext(store, WindowAggregator())
        assert forecaster.compound_inputs(registry.get("trading_aum"), ctx) == (0.0, 0.0)

    def test_net_worth_uses_savings_as_contribution(self, forecaster, registry):
        store = make_store(
            make_snapshot(financialData={"monthlyIncome": 5000, "monthlyExpenses": 4500})
        )
        ctx = MetricContext(store, WindowAggregator())
        rate, contribution = forecaster.compound_inputs(registry.get("net_worth"), ctx)
        assert rate == pytest.approx(1.15 ** (1 / 12) - 1)
        assert contribution == 500.0
