"""
Trend Forecaster — forward projections and achievement probabilities.

Projection Methods:
    linear:           projected = current + velocity_per_week * weeks_remaining
    compound_growth:  projected = current * (1 + r)^n + c * ((1 + r)^n - 1) / r
                      r = monthly rate, n = ceil(days / 30) months,
                      c = monthly contribution

Every projection is clamped to the goal's plausible bounds. Compound growth
with no observed growth (|r| below epsilon) uses the limit current + c * n
when the contribution is positive; with no contribution there is nothing to
project and the result carries a note instead of a value.

Termination:
    n is capped at forecast_max_periods and r is clamped to
    [-0.99, forecast_max_monthly_rate], so a runaway forecast always
    finishes and saturates at the bound instead of overflowing.

Probability:
    1.0 when the projection meets the target (direction aware), otherwise
    clamp(projected / target, floor, ceiling) (lower-better: target / projected).
    Monotone in the projection, never 0 and never 1 below target.
"""

import math
import sys
from datetime import date
from typing import Optional

import structlog

from goalpulse.engine.metrics import MetricContext, resolve_monthly_pnl
from goalpulse.models.analytics import MetricReading, Projection
from goalpulse.models.enums import ProjectionMethod
from goalpulse.models.goals import Goal

logger = structlog.get_logger()

INSUFFICIENT_PROJECTION = "insufficient data for projection"
FLAT_PROJECTION = "no trend observed; projection assumes a flat trajectory"
GROWTH_EPSILON = 1e-9
MIN_MONTHLY_RATE = -0.99
DAYS_PER_PERIOD = 30


def project_linear(current: float, velocity_per_week: float, weeks: float) -> float:
    return current + velocity_per_week * weeks


def project_compound(
    current: float, rate: float, periods: int, contribution: float = 0.0
) -> Optional[float]:
    """
    Compound growth with a fixed per-period contribution.

    Args:
        current: Starting value
        rate: Growth rate per period
        periods: Number of periods
        contribution: Amount added each period

    Returns:
        Projected value, or None when there is no growth and no contribution
    """
    if abs(rate) < GROWTH_EPSILON:
        if contribution <= 0:
            return None
        return current + contribution * periods

    try:
        growth = (1 + rate) ** periods
    except OverflowError:
        return math.copysign(sys.float_info.max, current or 1.0)
    projected = current * growth + contribution * (growth - 1) / rate
    if math.isinf(projected) or math.isnan(projected):
        return math.copysign(sys.float_info.max, current or 1.0)
    return projected


def meets_target(value: float, target: float, lower_is_better: bool = False) -> bool:
    return value <= target if lower_is_better else value >= target


def achievement_probability(
    projected: float,
    target: float,
    lower_is_better: bool = False,
    floor: float = 0.1,
    ceiling: float = 0.99,
) -> float:
    """
    Probability of reaching the target given the projected value.

    Example:
        >>> achievement_probability(50.0, 100.0)
        0.5
        >>> achievement_probability(120.0, 100.0)
        1.0
    """
    if meets_target(projected, target, lower_is_better):
        return 1.0
    if lower_is_better:
        ratio = target / projected if projected > 0 else 1.0
    else:
        ratio = projected / target
    return max(floor, min(ceiling, ratio))


class TrendForecaster:
    """
    Projects goal metrics to a horizon date.

    Attributes:
        max_periods: Upper bound on compounding periods
        max_monthly_rate: Upper clamp on monthly growth rate
        annual_return: Assumed annual investment return for net worth
        probability_floor: Minimum reported probability below target
        probability_ceiling: Maximum reported probability below target

    Example:
        >>> forecaster = TrendForecaster()
        >>> projection = forecaster.project(goal, reading, date(2026, 12, 31), as_of)
        >>> projection.probability
        0.72
    """

    def __init__(
        self,
        max_periods: int = 600,
        max_monthly_rate: float = 1.0,
        annual_return: float = 0.15,
        probability_floor: float = 0.1,
        probability_ceiling: float = 0.99,
    ):
        self.max_periods = max_periods
        self.max_monthly_rate = max_monthly_rate
        self.annual_return = annual_return
        self.probability_floor = probability_floor
        self.probability_ceiling = probability_ceiling
        self.logger = structlog.get_logger()

    @property
    def monthly_return(self) -> float:
        """Configured annual return as an equivalent monthly rate."""
        return (1 + self.annual_return) ** (1 / 12) - 1

    def periods_until(self, as_of: date, horizon_date: date) -> int:
        days = max(0, (horizon_date - as_of).days)
        return min(self.max_periods, math.ceil(days / DAYS_PER_PERIOD))

    def clamp_rate(self, rate: float) -> float:
        return max(MIN_MONTHLY_RATE, min(self.max_monthly_rate, rate))

    def compound_inputs(self, goal: Goal, ctx: MetricContext) -> tuple[float, float]:
        """
        Monthly rate and contribution for a compound-growth goal.

        Trading AUM grows at the trailing 30-day P&L over AUM with no
        contribution. Net worth grows at the configured annual return with
        monthly savings (income - expenses) as the contribution.

        Returns:
            (rate, contribution); (0.0, 0.0) when nothing is known
        """
        if goal.metric == "trading.aum":
            aum = ctx.financial("trading_aum")
            if not aum:
                return 0.0, 0.0
            pnl = resolve_monthly_pnl(ctx).value or 0.0
            return pnl / aum, 0.0

        if goal.metric == "finance.net_worth":
            income = ctx.financial("monthly_income") or 0.0
            expenses = ctx.financial("monthly_expenses") or 0.0
            return self.monthly_return, income - expenses

        return 0.0, 0.0

    def project(
        self,
        goal: Goal,
        reading: MetricReading,
        horizon_date: date,
        as_of: date,
        rate: float = 0.0,
        contribution: float = 0.0,
    ) -> Optional[Projection]:
        """
        Project one goal to the horizon date.

        Args:
            goal: Goal definition (boolean or unprojected goals return None)
            reading: Current reading of the goal's metric
            horizon_date: Date to project to
            as_of: Evaluation date
            rate: Monthly growth rate (compound goals)
            contribution: Monthly contribution (compound goals)

        Returns:
            Projection, or None when the goal is not projectable
        """
        if goal.projection is None or goal.is_boolean:
            return None

        method = goal.projection.method
        if not reading.sufficient_data:
            return Projection(
                horizon_date=horizon_date, method=method, note=INSUFFICIENT_PROJECTION
            )

        current = reading.value
        target = float(goal.target)
        note = None
        weeks_to_target = None

        if method == ProjectionMethod.LINEAR:
            weeks = max(0, (horizon_date - as_of).days) / 7
            velocity = reading.velocity_per_week
            if velocity is None:
                velocity = 0.0
                note = FLAT_PROJECTION
            projected = project_linear(current, velocity, weeks)
            weeks_to_target = self._linear_weeks_to_target(goal, current, velocity)
        else:
            rate = self.clamp_rate(rate)
            periods = self.periods_until(as_of, horizon_date)
            projected = project_compound(current, rate, periods, contribution)
            if projected is None:
                return Projection(
                    horizon_date=horizon_date, method=method, note=INSUFFICIENT_PROJECTION
                )
            weeks_to_target = self._compound_weeks_to_target(
                goal, current, rate, contribution
            )

        projected = goal.projection.clamp(projected)
        probability = achievement_probability(
            projected,
            target,
            lower_is_better=goal.lower_is_better,
            floor=self.probability_floor,
            ceiling=self.probability_ceiling,
        )

        self.logger.debug(
            "goal_projected",
            goal_id=goal.id,
            method=method.value,
            current=current,
            projected=projected,
            probability=probability,
        )

        return Projection(
            horizon_date=horizon_date,
            projected_value=round(projected, 4),
            method=method,
            probability=round(probability, 4),
            weeks_to_target=round(weeks_to_target, 1) if weeks_to_target is not None else None,
            note=note,
        )

    def _linear_weeks_to_target(
        self, goal: Goal, current: float, velocity: float
    ) -> Optional[float]:
        target = float(goal.target)
        if meets_target(current, target, goal.lower_is_better):
            return 0.0
        moving_toward = velocity < 0 if goal.lower_is_better else velocity > 0
        if not moving_toward:
            return None
        return abs(target - current) / abs(velocity)

    def _compound_weeks_to_target(
        self, goal: Goal, current: float, rate: float, contribution: float
    ) -> Optional[float]:
        target = float(goal.target)
        if meets_target(current, target, goal.lower_is_better):
            return 0.0
        for periods in range(1, self.max_periods + 1):
            value = project_compound(current, rate, periods, contribution)
            if value is None:
                return None
            if meets_target(value, target, goal.lower_is_better):
                return periods * DAYS_PER_PERIOD / 7
        return None
