"""
Window Aggregator — rolling-window statistics over dated series.

Computes mean, population standard deviation and weekly velocity over a
trailing window that ends at the evaluation date (inclusive). A window
covering N days at as_of holds the days in (as_of - N, as_of].

Velocity Algorithm:
    1. Split the window's observations into an older and a recent half
       (with an odd count the middle point joins the recent half)
    2. Take the mean value and the mean date of each half
    3. velocity_per_week = (recent mean - older mean) / weeks between the
       two mean dates

Count series (applications, workouts, trades) are densified with a fill
value so days without events count as zero instead of being absent. Filling
starts at the domain's first tracked day, so a window reaching back before
tracking began is not padded with zeros.

Fewer than two observations never raises: the stat is marked insufficient,
mean is NaN and velocity is None.
"""

from datetime import date, timedelta
from typing import Iterable, Optional, Sequence

import numpy as np
import structlog

from goalpulse.models.analytics import WindowStat
from goalpulse.models.records import Record

logger = structlog.get_logger()

Series = Sequence[tuple[date, float]]


def series_from_records(records: Iterable[Record], field: str) -> list[tuple[date, float]]:
    """
    Extract a (date, value) series for one field.

    Records that do not carry the field are left out.
    """
    return [
        (record.date, record.values[field])
        for record in records
        if field in record.values
    ]


def _window_points(
    series: Series,
    window_days: int,
    as_of: date,
    fill_value: Optional[float] = None,
    fill_start: Optional[date] = None,
) -> list[tuple[date, float]]:
    """Points inside (as_of - window_days, as_of], ascending, optionally densified."""
    start = as_of - timedelta(days=window_days)
    points = {day: value for day, value in series if start < day <= as_of}

    if fill_value is not None and fill_start is not None and fill_start <= as_of:
        day = max(fill_start, start + timedelta(days=1))
        while day <= as_of:
            points.setdefault(day, fill_value)
            day += timedelta(days=1)

    return sorted(points.items())


def _velocity_per_week(points: list[tuple[date, float]]) -> Optional[float]:
    if len(points) < 2:
        return None
    half = len(points) // 2
    older, recent = points[:half], points[half:]

    older_mid = np.mean([day.toordinal() for day, _ in older])
    recent_mid = np.mean([day.toordinal() for day, _ in recent])
    weeks = (recent_mid - older_mid) / 7.0
    if weeks <= 0:
        return 0.0

    older_mean = np.mean([value for _, value in older])
    recent_mean = np.mean([value for _, value in recent])
    return float((recent_mean - older_mean) / weeks)


def compute_window_stats(
    series: Series,
    window_days: int,
    as_of: date,
    fill_value: Optional[float] = None,
    fill_start: Optional[date] = None,
) -> WindowStat:
    """
    Compute statistics over the trailing window ending at as_of.

    Args:
        series: (date, value) pairs, one per day
        window_days: Window length in days
        as_of: Last day of the window (inclusive)
        fill_value: Value for days without an observation (count series)
        fill_start: First day eligible for filling (domain tracking start)

    Returns:
        WindowStat for the window; insufficient when fewer than two points

    Example:
        >>> stat = compute_window_stats([(d1, 8.0), (d2, 8.0)], 7, d2)
        >>> stat.mean, stat.sufficient_data
        (8.0, True)
    """
    points = _window_points(series, window_days, as_of, fill_value, fill_start)
    values = np.array([value for _, value in points], dtype=float)

    first_value = float(values[0]) if len(values) else None
    last_value = float(values[-1]) if len(values) else None
    total = float(values.sum()) if len(values) else 0.0

    if len(values) < 2:
        return WindowStat(
            window_days=window_days,
            mean=float("nan"),
            stdev=0.0,
            velocity_per_week=None,
            sufficient_data=False,
            count=len(values),
            total=total,
            first_value=first_value,
            last_value=last_value,
        )

    return WindowStat(
        window_days=window_days,
        mean=float(np.mean(values)),
        stdev=float(np.std(values)),
        velocity_per_week=_velocity_per_week(points),
        sufficient_data=True,
        count=len(values),
        total=total,
        first_value=first_value,
        last_value=last_value,
    )


def period_totals(
    series: Series,
    period_days: int,
    periods: int,
    as_of: date,
) -> list[float]:
    """
    Sum a series over consecutive periods ending at as_of.

    Args:
        series: (date, value) pairs
        period_days: Length of each period in days
        periods: Number of periods
        as_of: Last day of the most recent period (inclusive)

    Returns:
        Period totals, oldest first; a period without observations totals 0.0
    """
    totals = [0.0] * periods
    span = period_days * periods
    for day, value in series:
        age = (as_of - day).days
        if 0 <= age < span:
            totals[periods - 1 - age // period_days] += value
    return totals


class WindowAggregator:
    """
    Computes short-term and baseline window statistics.

    Binds the configured canonical window sizes; downstream components can
    ask for either, or for an arbitrary window through window().

    Attributes:
        short_window_days: Short-term window (default 7)
        baseline_window_days: Baseline window (default 30)

    Example:
        >>> aggregator = WindowAggregator(short_window_days=7, baseline_window_days=30)
        >>> stat = aggregator.short(series, as_of)
    """

    def __init__(self, short_window_days: int = 7, baseline_window_days: int = 30):
        self.short_window_days = short_window_days
        self.baseline_window_days = baseline_window_days
        self.logger = structlog.get_logger()

    def window(
        self,
        series: Series,
        window_days: int,
        as_of: date,
        fill_value: Optional[float] = None,
        fill_start: Optional[date] = None,
    ) -> WindowStat:
        stat = compute_window_stats(series, window_days, as_of, fill_value, fill_start)
        self.logger.debug(
            "window_stats_computed",
            window_days=window_days,
            count=stat.count,
            sufficient_data=stat.sufficient_data,
        )
        return stat

    def short(
        self,
        series: Series,
        as_of: date,
        fill_value: Optional[float] = None,
        fill_start: Optional[date] = None,
    ) -> WindowStat:
        """Stats over the short-term window."""
        return self.window(series, self.short_window_days, as_of, fill_value, fill_start)

    def baseline(
        self,
        series: Series,
        as_of: date,
        fill_value: Optional[float] = None,
        fill_start: Optional[date] = None,
    ) -> WindowStat:
        """Stats over the baseline window."""
        return self.window(series, self.baseline_window_days, as_of, fill_value, fill_start)

    def period_totals(
        self, series: Series, period_days: int, periods: int, as_of: date
    ) -> list[float]:
        return period_totals(series, period_days, periods, as_of)
