"""
Goal definition models.

A Goal is configuration: a target on one metric, how important it is, which
way the metric should move, which status bands grade it and how it is
projected forward. Goal definitions are validated at construction time so
an invalid goal table fails fast instead of producing silent nonsense during
an evaluation.
"""

from typing import Callable, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .enums import Domain, GoalDirection, GoalStatus, Importance, ProjectionMethod


class StatusBands(BaseModel):
    """
    Ordered percentage cut points mapping a goal score to a status.

    A percentage at or above a cut point's threshold gets that cut point's
    status; below every cut point it gets the floor status.

    Example:
        >>> bands = StatusBands(
        ...     name="STANDARD",
        ...     cuts=((90, GoalStatus.EXCELLENT), (70, GoalStatus.GOOD), (50, GoalStatus.FAIR)),
        ...     floor=GoalStatus.CRITICAL,
        ... )
        >>> bands.classify(72.0)
        <GoalStatus.GOOD: 'GOOD'>
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    name: str = Field(description="Preset name")
    cuts: tuple[tuple[float, GoalStatus], ...] = Field(
        description="(min_percentage, status) pairs, highest threshold first"
    )
    floor: GoalStatus = Field(description="Status below the lowest cut point")

    @field_validator("cuts")
    @classmethod
    def validate_cuts(cls, v: tuple) -> tuple:
        if not v:
            raise ValueError("status bands need at least one cut point")
        thresholds = [threshold for threshold, _ in v]
        if any(a <= b for a, b in zip(thresholds, thresholds[1:])):
            raise ValueError(f"band thresholds must be strictly descending, got {thresholds}")
        if any(status == GoalStatus.INSUFFICIENT_DATA for _, status in v):
            raise ValueError("INSUFFICIENT_DATA cannot be a band status")
        return v

    def classify(self, percentage: float) -> GoalStatus:
        for threshold, status in self.cuts:
            if percentage >= threshold:
                return status
        return self.floor


class ProjectionSpec(BaseModel):
    """How a goal metric is projected and the bounds it must stay within."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    method: ProjectionMethod = Field(description="Projection method")
    lower_bound: Optional[float] = Field(default=None, description="Lowest plausible value")
    upper_bound: Optional[float] = Field(default=None, description="Highest plausible value")

    @model_validator(mode="after")
    def validate_bounds(self) -> "ProjectionSpec":
        if (
            self.lower_bound is not None
            and self.upper_bound is not None
            and self.lower_bound > self.upper_bound
        ):
            raise ValueError("lower_bound must not exceed upper_bound")
        return self

    def clamp(self, value: float) -> float:
        if self.lower_bound is not None:
            value = max(self.lower_bound, value)
        if self.upper_bound is not None:
            value = min(self.upper_bound, value)
        return value


class Goal(BaseModel):
    """
    A long-term target being tracked.

    Attributes:
        id: Stable goal identifier (e.g. "job_applications_per_week")
        name: Display name
        metric: Metric key resolved against the snapshot (e.g. "career.applications_per_week")
        target: Numeric target, or True for boolean goals
        importance: CRITICAL, HIGH or MEDIUM
        category: Domain the goal belongs to
        direction: higher_better, lower_better or boolean
        bands: Status bands grading the goal (not used by boolean goals)
        projection: Projection method and plausible bounds (None = not projected)
        unit: Display unit for messages ("%", "$", "")
        problem_template: Diagnosis template, formatted with current/target/gap/unit
        action_template: Concrete next action template, same fields
        current_value_fn: Optional override computing the current value from a
            metric context instead of the registered metric resolver
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str = Field(min_length=1, description="Goal identifier")
    name: str = Field(description="Display name")
    metric: str = Field(description="Metric key")
    target: Union[bool, float] = Field(description="Target value")
    importance: Importance = Field(description="Goal importance")
    category: Domain = Field(description="Goal domain")
    direction: GoalDirection = Field(
        default=GoalDirection.HIGHER_BETTER, description="Desired direction of movement"
    )
    bands: Optional[StatusBands] = Field(default=None, description="Status bands")
    projection: Optional[ProjectionSpec] = Field(default=None, description="Projection settings")
    unit: str = Field(default="", description="Display unit")
    problem_template: str = Field(
        default="{name} is at {current}{unit} against a target of {target}{unit}",
        description="Diagnosis template",
    )
    action_template: str = Field(
        default="Close the {gap}{unit} gap on {name}",
        description="Action template",
    )
    current_value_fn: Optional[Callable[..., Optional[float]]] = Field(
        default=None, exclude=True, description="Current value override"
    )

    @model_validator(mode="after")
    def validate_target(self) -> "Goal":
        if self.direction == GoalDirection.BOOLEAN:
            if not isinstance(self.target, bool):
                raise ValueError(f"boolean goal '{self.id}' needs a boolean target")
            if self.projection is not None:
                raise ValueError(f"boolean goal '{self.id}' cannot be projected")
            return self

        if isinstance(self.target, bool):
            raise ValueError(f"ratio goal '{self.id}' needs a numeric target")
        if self.target <= 0:
            raise ValueError(f"ratio goal '{self.id}' target must be > 0, got {self.target}")
        if self.bands is None:
            raise ValueError(f"ratio goal '{self.id}' needs status bands")
        return self

    @property
    def is_boolean(self) -> bool:
        return self.direction == GoalDirection.BOOLEAN

    @property
    def lower_is_better(self) -> bool:
        return self.direction == GoalDirection.LOWER_BETTER
