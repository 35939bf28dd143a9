"""
Metric Resolution — current values for goal metrics.

Each goal names a metric key ("career.applications_per_week"). This module
maps every key to a resolver that reads the store through the window
aggregator and returns a MetricReading: the current value, its weekly
velocity, the window stats behind it and recent period values for momentum
checks.

Resolution rules:
- discipline score: short-window mean of total_score
- weekly counts: short-window totals with zero fill, daily velocity x 7
- interview rate, win rate: all-time ratios (x 100), zero denominator -> 0.0
- monthly P&L: baseline-window total
- savings rate: (income - expenses) / income x 100, zero income -> 0.0
- AUM, net worth, body fat: latest observation

A value of None means there is not enough data; the scorer reports such a
goal as INSUFFICIENT_DATA.
"""

from datetime import date, timedelta
from typing import Callable, Optional

import structlog

from goalpulse.models.analytics import MetricReading
from goalpulse.models.enums import Domain
from goalpulse.models.reports import CategoryProgress
from goalpulse.storage.base import TimeSeriesStore
from goalpulse.storage.snapshot_store import CATEGORY_PREFIX

from .window_aggregator import WindowAggregator, series_from_records

logger = structlog.get_logger()


# Discipline categories: (target out of 10, requirement shown as the fix)
CATEGORY_TARGETS = {
    "morningRoutine": (9.0, "Wake 5:00 AM, cold shower, vision review, 30 min reading"),
    "deepWork": (9.0, "4+ hours uninterrupted focus (9-1 PM ideal)"),
    "exercise": (9.0, "45+ mins (strength + cardio balance)"),
    "trading": (9.0, "Execute plan + journal all trades by 4 PM"),
    "learning": (8.0, "60+ mins (courses, reading, podcasts)"),
    "nutrition": (9.0, "Hit macros, 3+ veg, hydrate (100 oz water)"),
    "sleep": (9.0, "7-8 hours, bed by 10 PM, dark room"),
    "social": (7.0, "Meaningful conversation (not scrolling)"),
    "dailyMIT": (10.0, "Finish the day's most important task before noon"),
}


class MetricContext:
    """
    Read-side view handed to metric resolvers.

    Bundles the store, the aggregator and the number of recent periods kept
    for momentum checks.
    """

    def __init__(
        self,
        store: TimeSeriesStore,
        aggregator: WindowAggregator,
        momentum_periods: int = 3,
    ):
        self.store = store
        self.aggregator = aggregator
        self.momentum_periods = momentum_periods

    @property
    def as_of(self) -> date:
        return self.store.as_of

    def series(self, domain: Domain, field: str) -> list[tuple[date, float]]:
        """(date, value) series for one field, up to as_of."""
        return [
            point
            for point in series_from_records(self.store.query(domain), field)
            if point[0] <= self.as_of
        ]

    def tracked(self, domain: Domain) -> bool:
        """True when the domain has at least one record on or before as_of."""
        first = self.store.first_date(domain)
        return first is not None and first <= self.as_of

    def all_time_total(self, domain: Domain, field: str) -> float:
        return sum(value for _, value in self.series(domain, field))

    def financial(self, field: str) -> Optional[float]:
        latest = self.store.latest(Domain.FINANCE)
        return latest.get(field) if latest is not None else None


# =============================================================================
# Resolvers
# =============================================================================


def _weekly_count(ctx: MetricContext, domain: Domain, field: str) -> MetricReading:
    if not ctx.tracked(domain):
        return MetricReading()

    series = ctx.series(domain, field)
    first = ctx.store.first_date(domain)
    short = ctx.aggregator.short(series, ctx.as_of, fill_value=0.0, fill_start=first)
    baseline = ctx.aggregator.baseline(series, ctx.as_of, fill_value=0.0, fill_start=first)
    velocity = short.velocity_per_week * 7 if short.velocity_per_week is not None else None
    weeks = ctx.aggregator.period_totals(series, 7, ctx.momentum_periods, ctx.as_of)

    return MetricReading(
        value=short.total,
        velocity_per_week=velocity,
        short=short,
        baseline=baseline,
        period_values=tuple(weeks),
        data_points=len(series),
    )


def resolve_daily_score(ctx: MetricContext) -> MetricReading:
    series = ctx.series(Domain.DISCIPLINE, "total_score")
    short = ctx.aggregator.short(series, ctx.as_of)
    baseline = ctx.aggregator.baseline(series, ctx.as_of)
    window_start = ctx.as_of - timedelta(days=ctx.aggregator.short_window_days)
    recent = [value for day, value in series if day > window_start]

    return MetricReading(
        value=short.mean_or_none,
        velocity_per_week=short.velocity_per_week,
        short=short,
        baseline=baseline,
        period_values=tuple(recent[-ctx.momentum_periods:]),
        data_points=len(series),
    )


def resolve_applications_per_week(ctx: MetricContext) -> MetricReading:
    return _weekly_count(ctx, Domain.CAREER, "applications")


def resolve_tier1_per_week(ctx: MetricContext) -> MetricReading:
    return _weekly_count(ctx, Domain.CAREER, "tier1")


def resolve_interview_rate(ctx: MetricContext) -> MetricReading:
    applications = ctx.all_time_total(Domain.CAREER, "applications")
    interviews = ctx.all_time_total(Domain.CAREER, "interviews")
    rate = interviews / applications * 100 if applications > 0 else 0.0
    return MetricReading(value=rate, data_points=int(applications))


def resolve_offer_secured(ctx: MetricContext) -> MetricReading:
    if not ctx.tracked(Domain.CAREER):
        return MetricReading()
    offers = ctx.all_time_total(Domain.CAREER, "offers")
    return MetricReading(value=1.0 if offers > 0 else 0.0, data_points=int(offers))


def resolve_win_rate(ctx: MetricContext) -> MetricReading:
    trades = ctx.all_time_total(Domain.TRADING, "trades")
    wins = ctx.all_time_total(Domain.TRADING, "wins")
    rate = wins / trades * 100 if trades > 0 else 0.0
    return MetricReading(value=rate, data_points=int(trades))


def resolve_monthly_pnl(ctx: MetricContext) -> MetricReading:
    if not ctx.tracked(Domain.TRADING):
        return MetricReading()

    series = ctx.series(Domain.TRADING, "pnl")
    first = ctx.store.first_date(Domain.TRADING)
    baseline = ctx.aggregator.baseline(series, ctx.as_of, fill_value=0.0, fill_start=first)
    # A weekly change in mean daily P&L moves the 30-day total by 30x as much
    velocity = (
        baseline.velocity_per_week * ctx.aggregator.baseline_window_days
        if baseline.velocity_per_week is not None
        else None
    )
    return MetricReading(
        value=baseline.total,
        velocity_per_week=velocity,
        baseline=baseline,
        data_points=len(series),
    )


def resolve_aum(ctx: MetricContext) -> MetricReading:
    return MetricReading(value=ctx.financial("trading_aum"), data_points=1)


def resolve_workouts_per_week(ctx: MetricContext) -> MetricReading:
    return _weekly_count(ctx, Domain.HEALTH, "workouts")


def resolve_body_fat(ctx: MetricContext) -> MetricReading:
    series = ctx.series(Domain.HEALTH, "body_fat_pct")
    if not series:
        return MetricReading(value=ctx.financial("body_fat"), data_points=0)

    baseline = ctx.aggregator.baseline(series, ctx.as_of)
    return MetricReading(
        value=series[-1][1],
        velocity_per_week=baseline.velocity_per_week,
        baseline=baseline,
        data_points=len(series),
    )


def resolve_savings_rate(ctx: MetricContext) -> MetricReading:
    income = ctx.financial("monthly_income")
    expenses = ctx.financial("monthly_expenses")
    if income is None or expenses is None:
        return MetricReading()
    rate = (income - expenses) / income * 100 if income > 0 else 0.0
    return MetricReading(value=rate, data_points=1)


def resolve_net_worth(ctx: MetricContext) -> MetricReading:
    return MetricReading(value=ctx.financial("net_worth"), data_points=1)


METRIC_RESOLVERS: dict[str, Callable[[MetricContext], MetricReading]] = {
    "discipline.total_score": resolve_daily_score,
    "career.applications_per_week": resolve_applications_per_week,
    "career.tier1_per_week": resolve_tier1_per_week,
    "career.interview_rate": resolve_interview_rate,
    "career.offer_secured": resolve_offer_secured,
    "trading.win_rate": resolve_win_rate,
    "trading.monthly_pnl": resolve_monthly_pnl,
    "trading.aum": resolve_aum,
    "health.workouts_per_week": resolve_workouts_per_week,
    "health.body_fat_pct": resolve_body_fat,
    "finance.savings_rate": resolve_savings_rate,
    "finance.net_worth": resolve_net_worth,
}


def resolve_metric(metric: str, ctx: MetricContext, override: Optional[Callable] = None) -> MetricReading:
    """
    Resolve the current reading for a metric.

    Args:
        metric: Metric key from the goal table
        ctx: Metric context over the store
        override: Goal-level current_value_fn; its plain value replaces the
            resolver's value while window context is kept when the metric
            is registered

    Returns:
        MetricReading for the metric

    Raises:
        KeyError: If the metric is unknown and no override is given
    """
    if override is not None:
        base = METRIC_RESOLVERS[metric](ctx) if metric in METRIC_RESOLVERS else MetricReading()
        return base.model_copy(update={"value": override(ctx)})
    return METRIC_RESOLVERS[metric](ctx)


def discipline_breakdown(
    store: TimeSeriesStore, short_window_days: int = 7
) -> list[CategoryProgress]:
    """
    Per-category discipline averages over the short window, weakest first.

    Categories never logged in the window are left out. Ties keep the
    category table order.
    """
    start = store.as_of - timedelta(days=short_window_days)
    days = [
        record
        for record in store.query(Domain.DISCIPLINE, since=start)
        if start < record.date <= store.as_of
    ]

    breakdown = []
    for category, (target, _) in CATEGORY_TARGETS.items():
        field = f"{CATEGORY_PREFIX}{category}"
        values = [record.values[field] for record in days if field in record.values]
        if not values:
            continue
        average = sum(values) / len(values)
        breakdown.append(
            CategoryProgress(
                category=category,
                average=round(average, 2),
                target=target,
                percentage=round(min(100.0, max(0.0, average / target * 100)), 1),
            )
        )

    return sorted(breakdown, key=lambda item: item.percentage)
