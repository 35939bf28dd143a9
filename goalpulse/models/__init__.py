"""
Pydantic v2 data models for the GoalPulse evaluation engine.

Model Organization:
    - enums: Enumeration types for consistent classification
    - records: Raw snapshot rows, the Snapshot itself and normalized Records
    - goals: Goal definitions, status bands and projection settings
    - analytics: Per-call derived values (window stats, readings, signals)
    - reports: Evaluation and Predictions report models

Usage:
    >>> from goalpulse.models import Snapshot
    >>> snapshot = Snapshot.model_validate({
    ...     "dailyScores": [{"date": "2024-01-15", "totalScore": 8.0}],
    ...     "financialData": {"monthlyIncome": 5000, "monthlyExpenses": 4500},
    ... })
"""

# Enumerations
from .enums import (
    Domain,
    GoalDirection,
    GoalStatus,
    Importance,
    PriorityTier,
    ProjectionMethod,
    RecommendationKind,
    SignalKind,
    SignalPolarity,
    SignalSeverity,
)

# Input models
from .records import (
    BodyMetricEntry,
    DailyScoreEntry,
    FinancialData,
    JobApplicationEntry,
    Record,
    Snapshot,
    TradeEntry,
    WorkoutEntry,
)

# Goal configuration
from .goals import Goal, ProjectionSpec, StatusBands

# Derived values
from .analytics import MetricReading, Projection, Signal, WindowStat

# Reports
from .reports import (
    CategoryProgress,
    Evaluation,
    GoalPrediction,
    GoalScore,
    Insight,
    Predictions,
    Recommendation,
)

__all__ = [
    # Enums
    "Domain",
    "GoalDirection",
    "GoalStatus",
    "Importance",
    "PriorityTier",
    "ProjectionMethod",
    "RecommendationKind",
    "SignalKind",
    "SignalPolarity",
    "SignalSeverity",
    # Input
    "BodyMetricEntry",
    "DailyScoreEntry",
    "FinancialData",
    "JobApplicationEntry",
    "Record",
    "Snapshot",
    "TradeEntry",
    "WorkoutEntry",
    # Goals
    "Goal",
    "ProjectionSpec",
    "StatusBands",
    # Derived
    "MetricReading",
    "Projection",
    "Signal",
    "WindowStat",
    # Reports
    "CategoryProgress",
    "Evaluation",
    "GoalPrediction",
    "GoalScore",
    "Insight",
    "Predictions",
    "Recommendation",
]
