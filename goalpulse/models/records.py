"""
Record and snapshot models for the goal evaluation engine.

The input snapshot arrives as camelCase JSON from the capture UI. Rows are
kept raw on the Snapshot so that each one can be validated individually by
the storage layer: a malformed row is skipped and counted, never fatal.

Entry models (DailyScoreEntry, JobApplicationEntry, ...) describe a single
valid row. Record is the normalized, immutable observation the rest of the
engine consumes: one per (domain, date).
"""

import datetime as dt
from typing import Annotated, Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .enums import Domain


def _coerce_date(v: Any) -> Any:
    """Accept ISO dates, ISO datetimes and datetime objects as a calendar date."""
    if isinstance(v, dt.datetime):
        return v.date()
    if isinstance(v, str) and len(v) > 10 and v[4:5] == "-":
        return v[:10]
    return v


class Record(BaseModel):
    """
    One dated observation in a single domain.

    Attributes:
        date: Calendar day the observation belongs to
        domain: Domain the observation was captured in
        values: Numeric fields for that day (e.g. {"applications": 3.0})
    """

    model_config = ConfigDict(frozen=True)

    date: dt.date = Field(description="Calendar day of the observation")
    domain: Domain = Field(description="Domain the observation belongs to")
    values: dict[str, float] = Field(
        default_factory=dict, description="Numeric fields for the day"
    )

    def get(self, field: str, default: Optional[float] = None) -> Optional[float]:
        """Value of one field, or default when the record does not carry it."""
        return self.values.get(field, default)


class _Entry(BaseModel):
    """Base for raw snapshot rows (camelCase, extra keys ignored)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    date: dt.date = Field(description="Calendar day of the entry")

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, v: Any) -> Any:
        return _coerce_date(v)


class DailyScoreEntry(_Entry):
    """
    A daily discipline log.

    totalScore is on a 0-10 scale. When it is missing the mean of the
    per-category scores is used instead.
    """

    scores: dict[str, Annotated[float, Field(ge=0.0, le=10.0)]] = Field(
        default_factory=dict, description="Per-category scores (0-10)"
    )
    total_score: Optional[float] = Field(
        default=None, ge=0.0, le=10.0, description="Overall score for the day (0-10)"
    )

    @model_validator(mode="after")
    def fill_total_score(self) -> "DailyScoreEntry":
        if self.total_score is None:
            if not self.scores:
                raise ValueError("daily score entry needs totalScore or scores")
            self.total_score = sum(self.scores.values()) / len(self.scores)
        return self


_INTERVIEW_STATUSES = {"phone screen", "interview", "interviewing", "final round", "offer"}


class JobApplicationEntry(_Entry):
    """
    A job application.

    Tier is normalized from the formats the UI has used over time
    (1, "1", "tier1", "Tier 1") to an integer.
    """

    tier: Optional[int] = Field(default=None, ge=1, le=4, description="Company tier (1 = top)")
    status: str = Field(default="Applied", description="Pipeline status")
    company: Optional[str] = Field(default=None, description="Company name")

    @field_validator("tier", mode="before")
    @classmethod
    def parse_tier(cls, v: Any) -> Any:
        if isinstance(v, str):
            digits = "".join(ch for ch in v if ch.isdigit())
            return int(digits) if digits else None
        return v

    @property
    def is_tier1(self) -> bool:
        return self.tier == 1

    @property
    def reached_interview(self) -> bool:
        return self.status.strip().lower() in _INTERVIEW_STATUSES

    @property
    def is_offer(self) -> bool:
        return self.status.strip().lower() == "offer"


class TradeEntry(_Entry):
    """A closed trade with its realized P&L."""

    pnl: float = Field(description="Realized profit or loss")


class WorkoutEntry(_Entry):
    """A logged workout."""

    type: str = Field(default="", description="Workout type")
    duration: float = Field(default=0.0, ge=0.0, description="Duration in minutes")


class BodyMetricEntry(_Entry):
    """A body composition measurement."""

    body_fat_pct: Optional[float] = Field(
        default=None, ge=0.0, le=100.0, description="Body fat percentage"
    )
    weight_kg: Optional[float] = Field(default=None, gt=0.0, description="Body weight in kg")

    @model_validator(mode="after")
    def require_measurement(self) -> "BodyMetricEntry":
        if self.body_fat_pct is None and self.weight_kg is None:
            raise ValueError("body metric entry needs bodyFatPct or weightKg")
        return self


class FinancialData(BaseModel):
    """Point-in-time financial figures."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    net_worth: Optional[float] = Field(default=None, description="Total net worth")
    monthly_income: Optional[float] = Field(default=None, ge=0.0, description="Monthly income")
    monthly_expenses: Optional[float] = Field(default=None, ge=0.0, description="Monthly expenses")
    trading_aum: Optional[float] = Field(
        default=None,
        ge=0.0,
        alias="tradingAUM",
        description="Assets under management in the trading account",
    )
    body_fat: Optional[float] = Field(
        default=None, ge=0.0, le=100.0, description="Latest body fat percentage"
    )


class Snapshot(BaseModel):
    """
    Full input snapshot as posted by the UI.

    Collections hold raw rows; validation happens per row during ingestion
    so one bad row never rejects the whole snapshot.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    as_of: Optional[dt.date] = Field(default=None, description="Evaluation date override")
    daily_scores: list[Any] = Field(default_factory=list)
    job_applications: list[Any] = Field(default_factory=list)
    trading_journal: list[Any] = Field(default_factory=list)
    workouts: list[Any] = Field(default_factory=list)
    body_metrics: list[Any] = Field(default_factory=list)
    financial_data: Optional[Any] = Field(default=None)

    @field_validator("as_of", mode="before")
    @classmethod
    def parse_as_of(cls, v: Any) -> Any:
        return _coerce_date(v)
