"""
Report models returned by the evaluation engine.

Evaluation and Predictions are the two top-level outputs. Every report model
is immutable and serializes with camelCase field names (overallScore,
perGoal, priorityTier, ...). Reports never carry NaN: a value that cannot be
computed is null, with a status or note saying why.
"""

from datetime import date, datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .enums import (
    GoalStatus,
    Importance,
    PriorityTier,
    ProjectionMethod,
    RecommendationKind,
    SignalKind,
    SignalPolarity,
    SignalSeverity,
)

_REPORT_CONFIG = ConfigDict(
    frozen=True,
    alias_generator=to_camel,
    populate_by_name=True,
)


class GoalScore(BaseModel):
    """
    Score for one goal.

    Attributes:
        score: Progress score clamped to [0, 100]
        status: Status bucket from the goal's bands
        gap: Shortfall against target (positive = behind, negative = exceeded)
        percentage: Unclamped progress percentage
        current: Current metric value (None when insufficient data)
        target: Goal target
    """

    model_config = _REPORT_CONFIG

    score: float = Field(ge=0.0, le=100.0, description="Progress score (0-100)")
    status: GoalStatus = Field(description="Status bucket")
    gap: Optional[float] = Field(default=None, description="Shortfall against target")
    percentage: Optional[float] = Field(default=None, ge=0.0, description="Progress percentage")
    current: Optional[float] = Field(default=None, description="Current value")
    target: Union[bool, float] = Field(description="Goal target")


class CategoryProgress(BaseModel):
    """7-day average of one discipline category against its target."""

    model_config = _REPORT_CONFIG

    category: str = Field(description="Discipline category")
    average: float = Field(description="Short-window average (0-10)")
    target: float = Field(description="Category target (0-10)")
    percentage: float = Field(ge=0.0, le=100.0, description="Average as % of target")


class Insight(BaseModel):
    """A detected signal rendered for display."""

    model_config = _REPORT_CONFIG

    kind: SignalKind = Field(description="Detected pattern")
    severity: SignalSeverity = Field(description="Signal strength")
    polarity: SignalPolarity = Field(description="Risk or opportunity")
    goal_id: str = Field(description="Related goal")
    message: str = Field(description="Diagnosis")
    mitigation: str = Field(description="Suggested response")
    evidence: dict[str, Any] = Field(default_factory=dict, description="Triggering values")


class Recommendation(BaseModel):
    """One actionable suggestion."""

    model_config = _REPORT_CONFIG

    priority_tier: PriorityTier = Field(description="URGENT, WARNING or INSIGHT")
    goal_id: str = Field(description="Goal the recommendation is about")
    kind: RecommendationKind = Field(description="What triggered the recommendation")
    importance: Importance = Field(description="Importance of the goal")
    message: str = Field(description="Diagnosis")
    action: str = Field(description="Concrete next action")


class Evaluation(BaseModel):
    """
    Top-level evaluation report.

    Attributes:
        overall_score: Importance-weighted mean of scored goals (0-100)
        per_goal: Score per goal id
        insights: Detected risks and opportunities
        recommendations: Ordered actionable suggestions
        discipline_breakdown: Per-category discipline averages, weakest first
        motivational_message: Encouragement matched to the overall score
        skipped_records: Malformed input rows skipped, per domain
        as_of: Evaluation date derived from the snapshot
        timestamp: as_of at midnight UTC
    """

    model_config = _REPORT_CONFIG

    overall_score: float = Field(ge=0.0, le=100.0, description="Overall score (0-100)")
    per_goal: dict[str, GoalScore] = Field(description="Per-goal scores")
    insights: list[Insight] = Field(default_factory=list, description="Detected signals")
    recommendations: list[Recommendation] = Field(
        default_factory=list, description="Ordered recommendations"
    )
    discipline_breakdown: list[CategoryProgress] = Field(
        default_factory=list, description="Discipline categories, weakest first"
    )
    motivational_message: str = Field(description="Motivational message")
    skipped_records: dict[str, int] = Field(
        default_factory=dict, description="Malformed rows skipped per domain"
    )
    as_of: date = Field(description="Evaluation date")
    timestamp: datetime = Field(description="Evaluation timestamp (UTC)")


class GoalPrediction(BaseModel):
    """Projection for one goal at the horizon date."""

    model_config = _REPORT_CONFIG

    current: Optional[float] = Field(default=None, description="Current value")
    target: float = Field(description="Goal target")
    projected: Optional[float] = Field(default=None, description="Projected value")
    probability: Optional[float] = Field(
        default=None, ge=0.0, le=1.0, description="Probability of reaching target"
    )
    method: ProjectionMethod = Field(description="Projection method")
    velocity_per_week: Optional[float] = Field(default=None, description="Weekly rate of change")
    weeks_to_target: Optional[float] = Field(default=None, description="Weeks to target")
    horizon_date: date = Field(description="Projection horizon")
    note: Optional[str] = Field(default=None, description="Why no projection was made")


class Predictions(BaseModel):
    """
    Forward-looking report across all projectable goals.

    Attributes:
        per_goal: Projection per goal id (boolean goals are not projected)
        overall_score: Importance-weighted mean of current goal scores
        overall_probability: Importance-weighted mean of goal probabilities
        status: Status band of the overall probability
        risk_factors: Risk signal messages
        opportunities: Opportunity signal messages
        confidence: Confidence label from data volume
        outlook: One-sentence outlook
        horizon_date: Projection horizon
        timestamp: as_of at midnight UTC
        skipped_records: Malformed input rows skipped, per domain
    """

    model_config = _REPORT_CONFIG

    per_goal: dict[str, GoalPrediction] = Field(description="Per-goal projections")
    overall_score: float = Field(ge=0.0, le=100.0, description="Overall score (0-100)")
    overall_probability: Optional[float] = Field(
        default=None, ge=0.0, le=1.0, description="Overall achievement probability"
    )
    status: GoalStatus = Field(description="Overall status")
    risk_factors: list[str] = Field(default_factory=list, description="Risk messages")
    opportunities: list[str] = Field(default_factory=list, description="Opportunity messages")
    confidence: str = Field(description="Confidence label")
    outlook: str = Field(description="Outlook sentence")
    horizon_date: date = Field(description="Projection horizon")
    timestamp: datetime = Field(description="Prediction timestamp (UTC)")
    skipped_records: dict[str, int] = Field(
        default_factory=dict, description="Malformed rows skipped per domain"
    )
