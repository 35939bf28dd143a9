"""
Property-based tests using Hypothesis for the GoalPulse engine.

These tests verify mathematical invariants and bounds across the engine
components: score bounds, probability bounds and monotonicity, projection
closed forms, window statistics, recommendation ordering and determinism.
"""

from datetime import date, timedelta

import hypothesis.strategies as st
from hypothesis import assume, given, settings

from goalpulse.config import Settings
from goalpulse.engine.orchestrator import EvaluationOrchestrator
from goalpulse.engine.prediction.trend_forecaster import (
    TrendForecaster,
    achievement_probability,
    project_compound,
)
from goalpulse.engine.recommendation_ranker import RecommendationRanker
from goalpulse.engine.scoring.goal_registry import GoalRegistry
from goalpulse.engine.scoring.goal_scorer import score_goal
from goalpulse.engine.window_aggregator import compute_window_stats
from goalpulse.models.analytics import MetricReading
from goalpulse.models.enums import GoalStatus
from tests.conftest import AS_OF, make_daily_scores, make_goal_score, make_snapshot

REGISTRY = GoalRegistry()
GOALS = REGISTRY.goals
ORCHESTRATOR = EvaluationOrchestrator(settings=Settings())

finite = st.floats(
    min_value=-1e6, max_value=1e6, allow_nan=False, allow_infinity=False, allow_subnormal=False
)
daily_score = st.floats(min_value=0.0, max_value=10.0, allow_nan=False, allow_infinity=False)


# =============================================================================
# Scoring
# =============================================================================


@given(goal_index=st.integers(min_value=0, max_value=len(GOALS) - 1), current=finite)
@settings(max_examples=100)
def test_prop_score_bounds(goal_index: int, current: float):
    """For every goal and any current value, 0 <= score <= 100."""
    score = score_goal(GOALS[goal_index], current)
    assert 0.0 <= score.score <= 100.0
    assert score.status != GoalStatus.INSUFFICIENT_DATA


@given(goal_index=st.integers(min_value=0, max_value=len(GOALS) - 1))
@settings(max_examples=20)
def test_prop_missing_value_always_insufficient(goal_index: int):
    score = score_goal(GOALS[goal_index], None)
    assert score.status == GoalStatus.INSUFFICIENT_DATA
    assert score.gap is None


# =============================================================================
# Forecasting
# =============================================================================


@given(
    a=finite,
    b=finite,
    target=st.floats(min_value=0.01, max_value=1e6, allow_nan=False, allow_infinity=False),
)
@settings(max_examples=100)
def test_prop_probability_bounded_and_monotone(a: float, b: float, target: float):
    low, high = sorted((a, b))
    p_low = achievement_probability(low, target)
    p_high = achievement_probability(high, target)
    assert 0.1 <= p_low <= 1.0
    assert 0.1 <= p_high <= 1.0
    assert p_low <= p_high


@given(projected=finite, target=st.floats(min_value=0.01, max_value=1e6, allow_nan=False))
@settings(max_examples=100)
def test_prop_probability_below_target_never_certain(projected: float, target: float):
    assume(projected < target)
    assert achievement_probability(projected, target) < 1.0


@given(
    current=st.floats(min_value=1.0, max_value=1e6, allow_nan=False),
    rate=st.floats(min_value=-0.5, max_value=0.5, allow_nan=False),
    periods=st.integers(min_value=0, max_value=120),
)
@settings(max_examples=100)
def test_prop_compound_without_contribution_is_closed_form(current: float, rate: float, periods: int):
    assume(abs(rate) >= 1e-6)
    projected = project_compound(current, rate, periods)
    expected = current * (1 + rate) ** periods
    assert abs(projected - expected) <= 1e-9 * max(1.0, abs(expected))


@given(value=daily_score, days=st.integers(min_value=0, max_value=2000))
@settings(max_examples=100)
def test_prop_zero_velocity_projects_current(value: float, days: int):
    forecaster = TrendForecaster()
    projection = forecaster.project(
        REGISTRY.get("daily_score"),
        MetricReading(value=value, velocity_per_week=0.0),
        AS_OF + timedelta(days=days),
        AS_OF,
    )
    assert abs(projection.projected_value - value) < 1e-4


@given(
    rate=st.floats(min_value=-10.0, max_value=1000.0, allow_nan=False),
    contribution=st.floats(min_value=-1e6, max_value=1e6, allow_nan=False),
    days=st.integers(min_value=0, max_value=100000),
)
@settings(max_examples=50, deadline=None)
def test_prop_compound_projection_terminates_finite(rate: float, contribution: float, days: int):
    forecaster = TrendForecaster()
    projection = forecaster.project(
        REGISTRY.get("net_worth"),
        MetricReading(value=100000.0),
        AS_OF + timedelta(days=days),
        AS_OF,
        rate=rate,
        contribution=contribution,
    )
    if projection.projected_value is not None:
        assert projection.projected_value == projection.projected_value
        assert abs(projection.projected_value) != float("inf")
        assert 0.0 < projection.probability <= 1.0


# =============================================================================
# Window statistics
# =============================================================================


@given(values=st.lists(daily_score, min_size=0, max_size=40))
@settings(max_examples=100)
def test_prop_window_mean_within_range(values: list[float]):
    start = date(2024, 1, 1)
    series = [(start + timedelta(days=i), v) for i, v in enumerate(values)]
    as_of = start + timedelta(days=max(len(values) - 1, 0))
    stat = compute_window_stats(series, 30, as_of)

    in_window = values[-30:]
    if len(in_window) < 2:
        assert stat.sufficient_data is False
        assert stat.velocity_per_week is None
    else:
        assert min(in_window) - 1e-9 <= stat.mean <= max(in_window) + 1e-9
        assert stat.stdev >= 0.0


# =============================================================================
# Recommendations
# =============================================================================

statuses = st.sampled_from(
    [s for s in GoalStatus if s not in (GoalStatus.EXCELLENT,)]
)


@given(assignment=st.dictionaries(st.sampled_from([g.id for g in GOALS]), statuses))
@settings(max_examples=100)
def test_prop_recommendations_sorted_by_tier_then_importance(assignment: dict):
    scores = {
        goal_id: make_goal_score(status=status, gap=1.0, current=1.0)
        for goal_id, status in assignment.items()
    }
    recs = RecommendationRanker(max_recommendations=20).rank(REGISTRY, scores, [])
    keys = [(r.priority_tier.rank, r.importance.rank) for r in recs]
    assert keys == sorted(keys)
    assert len({(r.goal_id, r.kind) for r in recs}) == len(recs)


# =============================================================================
# Determinism
# =============================================================================


@given(values=st.lists(daily_score, min_size=0, max_size=35))
@settings(max_examples=25, deadline=None)
def test_prop_evaluate_is_deterministic(values: list[float]):
    snapshot = make_snapshot(dailyScores=make_daily_scores(values))
    first = ORCHESTRATOR.evaluate(snapshot).model_dump(mode="json")
    second = ORCHESTRATOR.evaluate(snapshot).model_dump(mode="json")
    assert first == second
