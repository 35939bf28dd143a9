"""
Derived analytics value objects.

These are produced per call and never persisted: window statistics over a
series, the resolved current reading for a goal metric, forward projections
and detected behavioral signals.
"""

import math
from datetime import date
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .enums import (
    ProjectionMethod,
    SignalKind,
    SignalPolarity,
    SignalSeverity,
)

_FROZEN_CAMEL = ConfigDict(
    frozen=True,
    alias_generator=to_camel,
    populate_by_name=True,
)


class WindowStat(BaseModel):
    """
    Aggregated view of a series over a trailing window.

    With fewer than two observations the stat is marked insufficient:
    mean is NaN and velocity_per_week is None.

    Attributes:
        window_days: Window length in days
        mean: Arithmetic mean of the observations (NaN when insufficient)
        stdev: Population standard deviation (0.0 when insufficient)
        velocity_per_week: Change per week between the older and recent halves
        sufficient_data: True when at least two observations are in the window
        count: Number of observations in the window
        total: Sum of the observations
        first_value: Oldest observation in the window
        last_value: Newest observation in the window
    """

    model_config = _FROZEN_CAMEL

    window_days: int = Field(description="Window length in days")
    mean: float = Field(description="Arithmetic mean (NaN when insufficient)")
    stdev: float = Field(default=0.0, description="Population standard deviation")
    velocity_per_week: Optional[float] = Field(
        default=None, description="Change per week between window halves"
    )
    sufficient_data: bool = Field(description="At least two observations present")
    count: int = Field(default=0, description="Observations in the window")
    total: float = Field(default=0.0, description="Sum of observations")
    first_value: Optional[float] = Field(default=None, description="Oldest observation")
    last_value: Optional[float] = Field(default=None, description="Newest observation")

    @property
    def mean_or_none(self) -> Optional[float]:
        """Mean with the NaN sentinel mapped to None."""
        return None if math.isnan(self.mean) else self.mean

    @property
    def variance(self) -> float:
        return self.stdev ** 2


class MetricReading(BaseModel):
    """
    Current value of a goal metric plus the window context behind it.

    Attributes:
        value: Current value, None when there is not enough data
        velocity_per_week: Weekly rate of change in the metric's own units
        short: Short-term window stat of the underlying series
        baseline: Baseline window stat of the underlying series
        period_values: Recent period values for momentum checks, oldest first
        data_points: Raw observations that fed the reading
    """

    model_config = _FROZEN_CAMEL

    value: Optional[float] = Field(default=None, description="Current metric value")
    velocity_per_week: Optional[float] = Field(default=None, description="Weekly rate of change")
    short: Optional[WindowStat] = Field(default=None, description="Short window stat")
    baseline: Optional[WindowStat] = Field(default=None, description="Baseline window stat")
    period_values: tuple[float, ...] = Field(
        default=(), description="Recent period values, oldest first"
    )
    data_points: int = Field(default=0, description="Observations behind the reading")

    @property
    def sufficient_data(self) -> bool:
        return self.value is not None


class Projection(BaseModel):
    """
    Forward estimate of a metric at a horizon date.

    projected_value and probability are None when a projection cannot be
    made; note explains why.
    """

    model_config = _FROZEN_CAMEL

    horizon_date: date = Field(description="Date the projection is for")
    projected_value: Optional[float] = Field(default=None, description="Projected metric value")
    method: ProjectionMethod = Field(description="Projection method used")
    probability: Optional[float] = Field(
        default=None, ge=0.0, le=1.0, description="Estimated probability of reaching target"
    )
    weeks_to_target: Optional[float] = Field(
        default=None, description="Weeks until target at the current velocity"
    )
    note: Optional[str] = Field(default=None, description="Why no projection was made")


class Signal(BaseModel):
    """
    A detected risk, opportunity or momentum event.

    Attributes:
        kind: Pattern that fired
        polarity: Whether it threatens or helps progress
        severity: Signal strength
        goal_id: Goal the signal relates to
        message: Diagnosis shown to the user
        mitigation_text: Suggested response
        evidence: Numbers that triggered the rule
    """

    model_config = _FROZEN_CAMEL

    kind: SignalKind = Field(description="Detected pattern")
    polarity: SignalPolarity = Field(description="Risk or opportunity")
    severity: SignalSeverity = Field(description="Signal strength")
    goal_id: str = Field(description="Goal the signal relates to")
    message: str = Field(description="Diagnosis")
    mitigation_text: str = Field(description="Suggested response")
    evidence: dict[str, Any] = Field(default_factory=dict, description="Triggering values")
