"""
Goal Scorer — per-goal progress scores and the weighted overall score.

Scoring Algorithm:
    higher_better:  percentage = current / target * 100, gap = target - current
    lower_better:   percentage = target / current * 100, gap = current - target
    boolean:        score 100 (EXCELLENT) when achieved else 0 (NEEDS_WORK),
                    gap 0.0 / 1.0

    score = min(100, max(0, percentage)); status comes from the goal's bands.
    A positive gap always means shortfall, a negative gap means exceeded.

A missing current value yields INSUFFICIENT_DATA with score 0 and no gap.
Such goals are left out of the overall score so missing data does not drag
the user's overall figure down.
"""

from typing import Mapping, Optional

import structlog

from goalpulse.models.enums import GoalStatus, Importance
from goalpulse.models.goals import Goal
from goalpulse.models.reports import GoalScore

logger = structlog.get_logger()

DEFAULT_IMPORTANCE_WEIGHTS = {
    Importance.CRITICAL.value: 1.2,
    Importance.HIGH.value: 1.0,
    Importance.MEDIUM.value: 0.8,
}


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def score_goal(goal: Goal, current_value: Optional[float]) -> GoalScore:
    """
    Score one goal against its current value.

    Args:
        goal: Goal definition
        current_value: Resolved current value (None = insufficient data)

    Returns:
        GoalScore with score in [0, 100]

    Example:
        >>> score_goal(registry.get("savings_rate"), 10.0).score
        33.3
    """
    if current_value is None:
        return GoalScore(
            score=0.0,
            status=GoalStatus.INSUFFICIENT_DATA,
            gap=None,
            percentage=None,
            current=None,
            target=goal.target,
        )

    if goal.is_boolean:
        achieved = bool(current_value) == goal.target
        return GoalScore(
            score=100.0 if achieved else 0.0,
            status=GoalStatus.EXCELLENT if achieved else GoalStatus.NEEDS_WORK,
            gap=0.0 if achieved else 1.0,
            percentage=100.0 if achieved else 0.0,
            current=current_value,
            target=goal.target,
        )

    target = float(goal.target)
    if goal.lower_is_better:
        # At or below zero every positive target is met
        percentage = target / current_value * 100 if current_value > 0 else 100.0
        gap = current_value - target
    else:
        percentage = current_value / target * 100
        gap = target - current_value

    percentage = max(0.0, percentage)
    score = clamp(percentage, 0.0, 100.0)

    return GoalScore(
        score=round(score, 1),
        status=goal.bands.classify(percentage),
        gap=round(gap, 4),
        percentage=round(percentage, 1),
        current=round(current_value, 4),
        target=goal.target,
    )


def weighted_mean(
    values: Mapping[str, float],
    importances: Mapping[str, Importance],
    weights: Mapping[str, float] = DEFAULT_IMPORTANCE_WEIGHTS,
) -> Optional[float]:
    """
    Importance-weighted mean of per-goal values.

    Args:
        values: Value per goal id (only goals to include)
        importances: Importance per goal id
        weights: Weight per importance name

    Returns:
        Weighted mean, or None when there is nothing to average
    """
    weighted_sum = 0.0
    total_weight = 0.0
    for goal_id, value in values.items():
        weight = weights[importances[goal_id].value]
        weighted_sum += value * weight
        total_weight += weight
    return weighted_sum / total_weight if total_weight > 0 else None


class GoalScorer:
    """
    Scores every goal and combines the scores into an overall score.

    Attributes:
        importance_weights: Weight per importance name (CRITICAL/HIGH/MEDIUM)

    Example:
        >>> scorer = GoalScorer()
        >>> scores = scorer.score_all(registry, {"daily_score": 8.0})
        >>> scorer.overall_score(registry, scores)
        100.0
    """

    def __init__(self, importance_weights: Optional[Mapping[str, float]] = None):
        self.importance_weights = dict(importance_weights or DEFAULT_IMPORTANCE_WEIGHTS)
        self.logger = structlog.get_logger()

    def score(self, goal: Goal, current_value: Optional[float]) -> GoalScore:
        return score_goal(goal, current_value)

    def score_all(self, goals, current_values: Mapping[str, Optional[float]]) -> dict[str, GoalScore]:
        """
        Score each goal in table order.

        Args:
            goals: Iterable of Goal (typically a GoalRegistry)
            current_values: Current value per goal id (missing = insufficient)

        Returns:
            GoalScore per goal id, in table order
        """
        scores = {goal.id: score_goal(goal, current_values.get(goal.id)) for goal in goals}

        self.logger.info(
            "goals_scored",
            goal_count=len(scores),
            insufficient=sum(
                1 for s in scores.values() if s.status == GoalStatus.INSUFFICIENT_DATA
            ),
        )
        return scores

    def overall_score(self, goals, scores: Mapping[str, GoalScore]) -> float:
        """
        Importance-weighted mean of scored goals, clamped to [0, 100].

        Goals with INSUFFICIENT_DATA are excluded; with nothing scored the
        overall score is 0.0.
        """
        importances = {goal.id: goal.importance for goal in goals}
        values = {
            goal_id: score.score
            for goal_id, score in scores.items()
            if score.status != GoalStatus.INSUFFICIENT_DATA and goal_id in importances
        }
        overall = weighted_mean(values, importances, self.importance_weights)
        return round(clamp(overall, 0.0, 100.0), 1) if overall is not None else 0.0
