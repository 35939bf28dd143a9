"""
Unit tests for RecommendationRanker: tiering, ordering, dedupe, cap and
the optional per-goal cache.
"""

import pytest

from goalpulse.engine.recommendation_cache import RecommendationCache
from goalpulse.engine.recommendation_ranker import (
    RecommendationRanker,
    format_number,
    goal_tier,
    signal_tier,
)
from goalpulse.models.enums import (
    GoalStatus,
    Importance,
    PriorityTier,
    RecommendationKind,
    SignalKind,
    SignalPolarity,
    SignalSeverity,
)
from tests.conftest import make_goal_score, make_signal


@pytest.fixture
def ranker():
    return RecommendationRanker(max_recommendations=10)


class TestTiering:
    @pytest.mark.parametrize(
        "status,gap,expected",
        [
            (GoalStatus.CRITICAL, 5.0, PriorityTier.URGENT),
            (GoalStatus.POOR, 5.0, PriorityTier.URGENT),
            (GoalStatus.FAIR, 5.0, PriorityTier.WARNING),
            (GoalStatus.NEEDS_WORK, 1.0, PriorityTier.WARNING),
            (GoalStatus.GOOD, 1.0, PriorityTier.INSIGHT),
            (GoalStatus.VERY_GOOD, 0.5, PriorityTier.INSIGHT),
            (GoalStatus.GOOD, 0.0, None),
            (GoalStatus.EXCELLENT, 0.0, None),
        ],
    )
    def test_goal_tier(self, status, gap, expected):
        assert goal_tier(make_goal_score(status=status, gap=gap)) == expected

    @pytest.mark.parametrize(
        "polarity,severity,expected",
        [
            (SignalPolarity.RISK, SignalSeverity.HIGH, PriorityTier.URGENT),
            (SignalPolarity.RISK, SignalSeverity.MODERATE, PriorityTier.WARNING),
            (SignalPolarity.RISK, SignalSeverity.LOW, None),
            (SignalPolarity.OPPORTUNITY, SignalSeverity.LOW, PriorityTier.INSIGHT),
            (SignalPolarity.OPPORTUNITY, SignalSeverity.HIGH, PriorityTier.INSIGHT),
        ],
    )
    def test_signal_tier(self, polarity, severity, expected):
        assert signal_tier(make_signal(polarity=polarity, severity=severity)) == expected


class TestFormatNumber:
    @pytest.mark.parametrize(
        "value,expected",
        [(12.0, "12"), (7.5, "7.5"), (1250000.0, "1,250,000"), (None, "n/a"), (-3.25, "-3.2")],
    )
    def test_format_number(self, value, expected):
        assert format_number(value) == expected


class TestRank:
    """Test ordering and content of ranked recommendations."""

    def test_sorted_by_tier(self, ranker, registry):
        scores = {
            "daily_score": make_goal_score(GoalStatus.GOOD, gap=1.0, current=7.0, target=8.0),
            "savings_rate": make_goal_score(GoalStatus.FAIR, gap=20.0, current=10.0, target=30.0),
            "job_applications_per_week": make_goal_score(
                GoalStatus.CRITICAL, gap=12.0, current=3.0, target=15.0
            ),
            "net_worth": make_goal_score(GoalStatus.EXCELLENT, gap=-1.0),
        }
        recs = ranker.rank(registry, scores, [])
        assert [r.goal_id for r in recs] == [
            "job_applications_per_week",
            "savings_rate",
            "daily_score",
        ]
        assert [r.priority_tier for r in recs] == [
            PriorityTier.URGENT,
            PriorityTier.WARNING,
            PriorityTier.INSIGHT,
        ]

    def test_importance_breaks_tier_ties(self, ranker, registry):
        scores = {
            "tier1_applications_per_week": make_goal_score(GoalStatus.CRITICAL),
            "trading_aum": make_goal_score(GoalStatus.POOR),
        }
        recs = ranker.rank(registry, scores, [])
        assert [r.goal_id for r in recs] == ["trading_aum", "tier1_applications_per_week"]
        assert recs[0].importance == Importance.CRITICAL

    def test_table_order_breaks_importance_ties(self, ranker, registry):
        scores = {
            "job_applications_per_week": make_goal_score(GoalStatus.CRITICAL),
            "daily_score": make_goal_score(GoalStatus.CRITICAL),
        }
        recs = ranker.rank(registry, scores, [])
        assert [r.goal_id for r in recs] == ["daily_score", "job_applications_per_week"]

    def test_shortfall_message_uses_goal_templates(self, ranker, registry):
        scores = {
            "job_applications_per_week": make_goal_score(
                GoalStatus.CRITICAL, score=20.0, gap=12.0, current=3.0, target=15.0
            )
        }
        [rec] = ranker.rank(registry, scores, [])
        assert rec.kind == RecommendationKind.GOAL_SHORTFALL
        assert rec.message == "Only 3 applications this week against a target of 15"
        assert rec.action.startswith("Add 12 more applications this week")

    def test_lowest_category_named_in_daily_score_action(self, ranker, registry):
        scores = {"daily_score": make_goal_score(GoalStatus.FAIR, current=5.0, target=8.0)}
        [rec] = ranker.rank(registry, scores, [], lowest_category="sleep")
        assert "sleep" in rec.action

    def test_insufficient_data_asks_for_logging(self, ranker, registry):
        scores = {
            "savings_rate": make_goal_score(
                GoalStatus.INSUFFICIENT_DATA, score=0.0, gap=None, current=None
            )
        }
        [rec] = ranker.rank(registry, scores, [])
        assert rec.priority_tier == PriorityTier.INSIGHT
        assert rec.kind == RecommendationKind.INSUFFICIENT_DATA
        assert "finance" in rec.action

    def test_signal_recommendation(self, ranker, registry):
        signal = make_signal(SignalKind.BURNOUT_RISK, mitigation_text="Take a rest day")
        [rec] = ranker.rank(registry, {}, [signal])
        assert rec.priority_tier == PriorityTier.URGENT
        assert rec.kind == RecommendationKind.BURNOUT_RISK
        assert rec.action == "Take a rest day"

    def test_low_risk_signal_produces_nothing(self, ranker, registry):
        signal = make_signal(severity=SignalSeverity.LOW)
        assert ranker.rank(registry, {}, [signal]) == []

    def test_one_recommendation_per_goal_and_kind(self, ranker, registry):
        signals = [
            make_signal(SignalKind.BURNOUT_RISK, severity=SignalSeverity.HIGH),
            make_signal(SignalKind.BURNOUT_RISK, severity=SignalSeverity.MODERATE),
        ]
        [rec] = ranker.rank(registry, {}, signals)
        assert rec.priority_tier == PriorityTier.URGENT

    def test_goal_and_signal_for_same_goal_both_kept(self, ranker, registry):
        scores = {"daily_score": make_goal_score(GoalStatus.CRITICAL)}
        signals = [make_signal(SignalKind.STRESS_TRIGGER, severity=SignalSeverity.MODERATE)]
        recs = ranker.rank(registry, scores, signals)
        assert [r.kind for r in recs] == [
            RecommendationKind.GOAL_SHORTFALL,
            RecommendationKind.STRESS_TRIGGER,
        ]

    def test_signals_for_unknown_goals_ignored(self, ranker, registry):
        assert ranker.rank(registry, {}, [make_signal(goal_id="unknown")]) == []

    def test_cap(self, registry):
        ranker = RecommendationRanker(max_recommendations=2)
        scores = {goal.id: make_goal_score(GoalStatus.CRITICAL) for goal in registry}
        assert len(ranker.rank(registry, scores, [])) == 2


class TestRankWithCache:
    def test_cache_hit_returns_identical_output(self, registry):
        cache = RecommendationCache(ttl_hours=24)
        ranker = RecommendationRanker(cache=cache)
        scores = {"savings_rate": make_goal_score(GoalStatus.FAIR)}
        signals = [make_signal()]

        first = ranker.rank(registry, scores, signals)
        second = ranker.rank(registry, scores, signals)

        assert first == second
        assert cache.hits == len(registry)
        assert cache.misses == len(registry)

    def test_changed_inputs_miss_the_cache(self, registry):
        cache = RecommendationCache(ttl_hours=24)
        ranker = RecommendationRanker(cache=cache)
        ranker.rank(registry, {"savings_rate": make_goal_score(GoalStatus.FAIR)}, [])
        recs = ranker.rank(registry, {"savings_rate": make_goal_score(GoalStatus.POOR)}, [])
        assert recs[0].priority_tier == PriorityTier.URGENT
