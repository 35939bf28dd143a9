"""
Enumeration types for the goal evaluation engine.

This module defines all enum types used across the system for type safety
and consistent validation. All enums inherit from str to ensure JSON
serialization compatibility, and every tagged value the engine emits
(signal kinds, priority tiers, statuses) is a closed enumeration so
consumers can branch exhaustively instead of string-matching.
"""

from enum import Enum


class Domain(str, Enum):
    """
    Life domains that records are captured for.

    Each domain maps to one collection in the input snapshot.
    """

    DISCIPLINE = "discipline"
    CAREER = "career"
    TRADING = "trading"
    HEALTH = "health"
    FINANCE = "finance"


class Importance(str, Enum):
    """
    Goal importance levels.

    Importance orders recommendations within a priority tier and weights
    goals when per-goal results are combined into overall figures.
    """

    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"

    @property
    def rank(self) -> int:
        """Sort rank (0 = most important)."""
        return _IMPORTANCE_RANK[self]


_IMPORTANCE_RANK = {
    Importance.CRITICAL: 0,
    Importance.HIGH: 1,
    Importance.MEDIUM: 2,
}


class GoalDirection(str, Enum):
    """Which way a goal metric should move."""

    HIGHER_BETTER = "higher_better"
    LOWER_BETTER = "lower_better"
    BOOLEAN = "boolean"


class GoalStatus(str, Enum):
    """
    Status buckets a goal score can land in.

    The cut points that produce each bucket are configured per goal
    (see StatusBands); the set of buckets itself is closed.
    """

    EXCELLENT = "EXCELLENT"
    VERY_GOOD = "VERY_GOOD"
    GOOD = "GOOD"
    FAIR = "FAIR"
    NEEDS_WORK = "NEEDS_WORK"
    POOR = "POOR"
    CRITICAL = "CRITICAL"
    INSUFFICIENT_DATA = "INSUFFICIENT_DATA"


class ProjectionMethod(str, Enum):
    """Forward projection methods."""

    LINEAR = "linear"
    COMPOUND_GROWTH = "compound_growth"


class SignalKind(str, Enum):
    """
    Behavioral patterns detected by the pattern detector.
    """

    BURNOUT_RISK = "burnout_risk"
    MOMENTUM = "momentum"
    STRESS_TRIGGER = "stress_trigger"
    DECLINING_TREND = "declining_trend"
    IMPROVING_TREND = "improving_trend"
    TRADING_EDGE = "trading_edge"
    CAREER_MILESTONE = "career_milestone"
    CONSISTENCY_GAP = "consistency_gap"
    LOW_VOLUME = "low_volume"


class SignalPolarity(str, Enum):
    """Whether a signal threatens or helps goal progress."""

    RISK = "risk"
    OPPORTUNITY = "opportunity"


class SignalSeverity(str, Enum):
    """Signal strength levels."""

    LOW = "LOW"
    MODERATE = "MODERATE"
    HIGH = "HIGH"


class PriorityTier(str, Enum):
    """
    Recommendation priority tiers.

    Recommendation lists are ordered URGENT, then WARNING, then INSIGHT.
    """

    URGENT = "URGENT"
    WARNING = "WARNING"
    INSIGHT = "INSIGHT"

    @property
    def rank(self) -> int:
        """Sort rank (0 = first)."""
        return _TIER_RANK[self]


_TIER_RANK = {
    PriorityTier.URGENT: 0,
    PriorityTier.WARNING: 1,
    PriorityTier.INSIGHT: 2,
}


class RecommendationKind(str, Enum):
    """
    What a recommendation responds to.

    Goal-level recommendations use GOAL_SHORTFALL or INSUFFICIENT_DATA;
    signal-driven recommendations reuse the signal kind value.
    """

    GOAL_SHORTFALL = "goal_shortfall"
    INSUFFICIENT_DATA = "insufficient_data"
    BURNOUT_RISK = "burnout_risk"
    MOMENTUM = "momentum"
    STRESS_TRIGGER = "stress_trigger"
    DECLINING_TREND = "declining_trend"
    IMPROVING_TREND = "improving_trend"
    TRADING_EDGE = "trading_edge"
    CAREER_MILESTONE = "career_milestone"
    CONSISTENCY_GAP = "consistency_gap"
    LOW_VOLUME = "low_volume"

    @classmethod
    def from_signal(cls, kind: SignalKind) -> "RecommendationKind":
        """Map a signal kind onto its recommendation kind."""
        return cls(kind.value)
