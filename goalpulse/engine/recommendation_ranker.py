"""
Recommendation Ranker — ordered, actionable suggestions.

Derives recommendations from two sources:
1. Goal shortfalls (status of each GoalScore)
2. Detected signals (risk and opportunity patterns)

Tiering:
    goal status CRITICAL / POOR          -> URGENT
    goal status FAIR / NEEDS_WORK        -> WARNING
    goal status GOOD / VERY_GOOD, gap>0  -> INSIGHT
    goal status INSUFFICIENT_DATA        -> INSIGHT (log more data)
    signal RISK HIGH                     -> URGENT
    signal RISK MODERATE                 -> WARNING
    signal OPPORTUNITY                   -> INSIGHT
    EXCELLENT goals and LOW risks produce no recommendation

Ordering key: tier, then goal importance, then goal table order, then kind.
At most one recommendation per (goal_id, kind); the list is capped.
"""

from typing import Optional

import structlog

from goalpulse.models.analytics import Signal
from goalpulse.models.enums import (
    GoalStatus,
    PriorityTier,
    RecommendationKind,
    SignalPolarity,
    SignalSeverity,
)
from goalpulse.models.goals import Goal
from goalpulse.models.reports import GoalScore, Recommendation

from .recommendation_cache import RecommendationCache, fingerprint
from .scoring.goal_registry import GoalRegistry

logger = structlog.get_logger()

STATUS_TIERS = {
    GoalStatus.CRITICAL: PriorityTier.URGENT,
    GoalStatus.POOR: PriorityTier.URGENT,
    GoalStatus.FAIR: PriorityTier.WARNING,
    GoalStatus.NEEDS_WORK: PriorityTier.WARNING,
    GoalStatus.GOOD: PriorityTier.INSIGHT,
    GoalStatus.VERY_GOOD: PriorityTier.INSIGHT,
    GoalStatus.INSUFFICIENT_DATA: PriorityTier.INSIGHT,
}

DEFAULT_LOWEST_CATEGORY = "your lowest-scoring category"


def format_number(value: Optional[float]) -> str:
    """Compact display form: 12, 7.5, 1,250,000."""
    if value is None:
        return "n/a"
    if abs(value) >= 1000:
        return f"{value:,.0f}"
    if float(value).is_integer():
        return f"{value:.0f}"
    return f"{value:.1f}"


def signal_tier(signal: Signal) -> Optional[PriorityTier]:
    if signal.polarity == SignalPolarity.OPPORTUNITY:
        return PriorityTier.INSIGHT
    if signal.severity == SignalSeverity.HIGH:
        return PriorityTier.URGENT
    if signal.severity == SignalSeverity.MODERATE:
        return PriorityTier.WARNING
    return None


def goal_tier(score: GoalScore) -> Optional[PriorityTier]:
    tier = STATUS_TIERS.get(score.status)
    if score.status in (GoalStatus.GOOD, GoalStatus.VERY_GOOD) and not (score.gap and score.gap > 0):
        return None
    return tier


class RecommendationRanker:
    """
    Builds the ordered recommendation list for one evaluation.

    Attributes:
        max_recommendations: Cap on returned recommendations
        cache: Optional per-goal recommendation cache

    Example:
        >>> ranker = RecommendationRanker(max_recommendations=10)
        >>> recs = ranker.rank(registry, scores, signals)
        >>> recs[0].priority_tier
        <PriorityTier.URGENT: 'URGENT'>
    """

    def __init__(
        self,
        max_recommendations: int = 10,
        cache: Optional[RecommendationCache] = None,
    ):
        self.max_recommendations = max_recommendations
        self.cache = cache
        self.logger = structlog.get_logger()

    def rank(
        self,
        goals: GoalRegistry,
        scores: dict[str, GoalScore],
        signals: list[Signal],
        lowest_category: Optional[str] = None,
    ) -> list[Recommendation]:
        """
        Rank recommendations for the evaluation.

        Args:
            goals: Goal registry (defines importance and table order)
            scores: GoalScore per goal id
            signals: Detected signals
            lowest_category: Weakest discipline category, named in the
                daily-score action

        Returns:
            Recommendations sorted by tier, importance, table order, kind
        """
        candidates: list[Recommendation] = []
        for goal in goals:
            goal_signals = [s for s in signals if s.goal_id == goal.id]
            score = scores.get(goal.id)
            candidates.extend(
                self._for_goal(goal, score, goal_signals, lowest_category)
            )

        candidates.sort(
            key=lambda rec: (
                rec.priority_tier.rank,
                rec.importance.rank,
                goals.index(rec.goal_id),
                rec.kind.value,
            )
        )

        seen = set()
        ranked = []
        for rec in candidates:
            key = (rec.goal_id, rec.kind)
            if key in seen:
                continue
            seen.add(key)
            ranked.append(rec)

        ranked = ranked[: self.max_recommendations]
        self.logger.info(
            "recommendations_ranked",
            candidates=len(candidates),
            returned=len(ranked),
            urgent=sum(1 for r in ranked if r.priority_tier == PriorityTier.URGENT),
        )
        return ranked

    def _for_goal(
        self,
        goal: Goal,
        score: Optional[GoalScore],
        signals: list[Signal],
        lowest_category: Optional[str],
    ) -> list[Recommendation]:
        if self.cache is None:
            return self._build(goal, score, signals, lowest_category)

        key = fingerprint(
            {
                "goal": goal.model_dump(mode="json"),
                "score": score.model_dump(mode="json") if score else None,
                "signals": [s.model_dump(mode="json") for s in signals],
                "lowest_category": lowest_category,
            }
        )
        cached = self.cache.get(goal.id, key)
        if cached is not None:
            return cached

        recommendations = self._build(goal, score, signals, lowest_category)
        self.cache.put(goal.id, key, recommendations)
        return recommendations

    def _build(
        self,
        goal: Goal,
        score: Optional[GoalScore],
        signals: list[Signal],
        lowest_category: Optional[str],
    ) -> list[Recommendation]:
        recommendations = []

        if score is not None:
            rec = self._goal_recommendation(goal, score, lowest_category)
            if rec is not None:
                recommendations.append(rec)

        for signal in signals:
            tier = signal_tier(signal)
            if tier is None:
                continue
            recommendations.append(
                Recommendation(
                    priority_tier=tier,
                    goal_id=goal.id,
                    kind=RecommendationKind.from_signal(signal.kind),
                    importance=goal.importance,
                    message=signal.message,
                    action=signal.mitigation_text,
                )
            )

        return recommendations

    def _goal_recommendation(
        self, goal: Goal, score: GoalScore, lowest_category: Optional[str]
    ) -> Optional[Recommendation]:
        tier = goal_tier(score)
        if tier is None:
            return None

        if score.status == GoalStatus.INSUFFICIENT_DATA:
            return Recommendation(
                priority_tier=tier,
                goal_id=goal.id,
                kind=RecommendationKind.INSUFFICIENT_DATA,
                importance=goal.importance,
                message=f"Not enough data to score {goal.name.lower()}",
                action=f"Log {goal.category.value} entries on at least two days to track this goal",
            )

        fields = {
            "name": goal.name,
            "current": format_number(score.current),
            "target": format_number(float(goal.target)),
            "gap": format_number(abs(score.gap) if score.gap is not None else None),
            "unit": goal.unit,
            "lowest_category": lowest_category or DEFAULT_LOWEST_CATEGORY,
        }
        return Recommendation(
            priority_tier=tier,
            goal_id=goal.id,
            kind=RecommendationKind.GOAL_SHORTFALL,
            importance=goal.importance,
            message=goal.problem_template.format(**fields),
            action=goal.action_template.format(**fields),
        )
