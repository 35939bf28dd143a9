"""Forward prediction engine: linear and compound-growth goal projections."""

from .trend_forecaster import (
    INSUFFICIENT_PROJECTION,
    TrendForecaster,
    achievement_probability,
    project_compound,
    project_linear,
)

__all__ = [
    "INSUFFICIENT_PROJECTION",
    "TrendForecaster",
    "achievement_probability",
    "project_compound",
    "project_linear",
]
