"""
Pattern Detector — rule-based risk and opportunity signals.

Each rule reads window statistics over the store and emits zero or one
Signal (momentum emits at most one per goal). Thresholds live in
DetectionThresholds so they can be tuned from settings and unit-tested
without touching the rules.

Rules:
    burnout_risk       30-day score variance above threshold AND weekly
                       activity load above threshold -> HIGH; otherwise a
                       negative 30-day trend slope (linregress) -> MODERATE,
                       else LOW
    momentum           last N periods all at/above target and rising -> HIGH,
                       at/above but not rising -> MODERATE
    stress_trigger     most frequent configured trigger on low-score days
    declining_trend    7-day discipline change below -trend_alert_delta
    improving_trend    7-day discipline change above +trend_alert_delta
    trading_edge       win rate over the last trades at/above threshold
    career_milestone   at least one offer
    consistency_gap    fewer logged discipline days than required
    low_volume         baseline weekly applications or workouts below floor

Every signal names the goal it relates to; rules whose goal is not in the
registry are skipped.
"""

import operator
from datetime import timedelta
from typing import Callable, Literal, Optional

import structlog
from pydantic import BaseModel, ConfigDict, Field
from scipy import stats

from goalpulse.config import Settings
from goalpulse.engine.window_aggregator import WindowAggregator, series_from_records
from goalpulse.models.analytics import MetricReading, Signal
from goalpulse.models.enums import Domain, SignalKind, SignalPolarity, SignalSeverity
from goalpulse.storage.base import TimeSeriesStore

logger = structlog.get_logger()

Comparator = Literal["lt", "le", "gt", "ge", "eq"]

_COMPARATORS: dict[str, Callable[[float, float], bool]] = {
    "lt": operator.lt,
    "le": operator.le,
    "gt": operator.gt,
    "ge": operator.ge,
    "eq": operator.eq,
}


class TriggerRule(BaseModel):
    """
    A condition checked on low-score days to explain them.

    Attributes:
        name: Trigger identifier
        label: Human-readable description used in messages
        domain: Domain whose record for the day is inspected
        field: Record field compared against the threshold
        comparator: lt, le, gt, ge or eq
        threshold: Value compared against
        default: Value assumed when the domain has no record (or no field)
            that day; None means the trigger cannot fire without data
        mitigation: Suggested response when this trigger dominates
    """

    model_config = ConfigDict(frozen=True)

    name: str
    label: str
    domain: Domain
    field: str
    comparator: Comparator = "lt"
    threshold: float
    default: Optional[float] = None
    mitigation: str

    def fires(self, value: Optional[float]) -> bool:
        if value is None:
            value = self.default
        if value is None:
            return False
        return _COMPARATORS[self.comparator](value, self.threshold)


DEFAULT_TRIGGER_RULES = (
    TriggerRule(
        name="poor_sleep",
        label="poor sleep",
        domain=Domain.DISCIPLINE,
        field="category.sleep",
        threshold=6.0,
        mitigation="Protect sleep: bed by 10 PM, no screens in the last hour",
    ),
    TriggerRule(
        name="losing_trades",
        label="losing trading days",
        domain=Domain.TRADING,
        field="pnl",
        threshold=0.0,
        mitigation="Cap daily loss and stop trading after two consecutive losers",
    ),
    TriggerRule(
        name="skipped_workout",
        label="skipped workouts",
        domain=Domain.HEALTH,
        field="workouts",
        threshold=1.0,
        default=0.0,
        mitigation="Schedule a short workout first thing on hard days",
    ),
    TriggerRule(
        name="no_applications",
        label="days without applications",
        domain=Domain.CAREER,
        field="applications",
        threshold=1.0,
        default=0.0,
        mitigation="Send one application before noon to bank an early win",
    ),
    TriggerRule(
        name="missed_deep_work",
        label="missed deep work",
        domain=Domain.DISCIPLINE,
        field="category.deepWork",
        threshold=6.0,
        mitigation="Block 9-11 AM for deep work and silence notifications",
    ),
)


class DetectionThresholds(BaseModel):
    """Tunable thresholds for every detection rule."""

    model_config = ConfigDict(frozen=True)

    burnout_variance_threshold: float = Field(default=4.0, ge=0.0)
    burnout_fatigue_threshold: float = Field(default=40.0, ge=0.0)
    stress_score_floor: float = Field(default=6.0)
    stress_min_low_days: int = Field(default=2, ge=1)
    momentum_periods: int = Field(default=3, ge=2)
    trend_alert_delta: float = Field(default=0.5, ge=0.0)
    consistency_min_days: int = Field(default=30, ge=1)
    low_application_volume: float = Field(default=10.0, ge=0.0)
    low_workout_volume: float = Field(default=5.0, ge=0.0)
    trading_edge_win_rate: float = Field(default=60.0, ge=0.0, le=100.0)
    trading_edge_lookback: int = Field(default=20, ge=1)
    trading_edge_min_trades: int = Field(default=5, ge=1)

    @classmethod
    def from_settings(cls, settings: Settings) -> "DetectionThresholds":
        return cls(**{name: getattr(settings, name) for name in cls.model_fields})


class PatternDetector:
    """
    Detects behavioral patterns from the store and resolved goal readings.

    Attributes:
        thresholds: Rule thresholds
        trigger_rules: Stress trigger rules, in tie-breaking order
        aggregator: Window aggregator for short/baseline windows

    Example:
        >>> detector = PatternDetector(DetectionThresholds())
        >>> signals = detector.detect(store, readings, registry)
        >>> [s.kind for s in signals]
        [<SignalKind.BURNOUT_RISK: 'burnout_risk'>, ...]
    """

    def __init__(
        self,
        thresholds: Optional[DetectionThresholds] = None,
        trigger_rules: tuple[TriggerRule, ...] = DEFAULT_TRIGGER_RULES,
        aggregator: Optional[WindowAggregator] = None,
    ):
        self.thresholds = thresholds or DetectionThresholds()
        self.trigger_rules = tuple(trigger_rules)
        self.aggregator = aggregator or WindowAggregator()
        self.logger = structlog.get_logger()

    def detect(
        self,
        store: TimeSeriesStore,
        readings: dict[str, MetricReading],
        goals,
    ) -> list[Signal]:
        """
        Run every rule.

        Args:
            store: Record store for the snapshot
            readings: Resolved reading per goal id
            goals: Goal registry (signals for unknown goals are dropped)

        Returns:
            Signals in rule order
        """
        goal_ids = {goal.id for goal in goals}
        targets = {
            goal.id: float(goal.target)
            for goal in goals
            if not goal.is_boolean and not goal.lower_is_better
        }

        signals: list[Optional[Signal]] = [
            self._burnout_risk(store),
            *self._momentum(readings, targets),
            self._stress_trigger(store),
            self._discipline_trend(store),
            self._trading_edge(store),
            self._career_milestone(store),
            self._consistency_gap(store),
            self._low_volume(readings, "job_applications_per_week", "applications",
                             self.thresholds.low_application_volume),
            self._low_volume(readings, "workouts_per_week", "workouts",
                             self.thresholds.low_workout_volume),
        ]
        detected = [s for s in signals if s is not None and s.goal_id in goal_ids]

        self.logger.info(
            "patterns_detected",
            signal_count=len(detected),
            kinds=[s.kind.value for s in detected],
        )
        return detected

    # =========================================================================
    # Helpers
    # =========================================================================

    def _scores(self, store: TimeSeriesStore) -> list:
        return [
            point
            for point in series_from_records(store.query(Domain.DISCIPLINE), "total_score")
            if point[0] <= store.as_of
        ]

    def _short_total(self, store: TimeSeriesStore, domain: Domain, field: str) -> float:
        series = series_from_records(store.query(domain), field)
        return self.aggregator.short(series, store.as_of).total

    @staticmethod
    def _trend_slope(points: list) -> Optional[float]:
        """Least-squares slope of value per day over the given points."""
        if len(points) < 2:
            return None
        x = [day.toordinal() - points[0][0].toordinal() for day, _ in points]
        y = [value for _, value in points]
        try:
            slope, _, _, _, _ = stats.linregress(x, y)
        except ValueError as e:
            logger.warning("trend_slope_computation_failed", error=str(e), points=len(points))
            return None
        return float(slope)

    # =========================================================================
    # Rules
    # =========================================================================

    def _burnout_risk(self, store: TimeSeriesStore) -> Optional[Signal]:
        scores = self._scores(store)
        baseline = self.aggregator.baseline(scores, store.as_of)
        if not baseline.sufficient_data:
            return None

        fatigue = (
            self._short_total(store, Domain.CAREER, "applications")
            + self._short_total(store, Domain.TRADING, "trades")
            + self._short_total(store, Domain.HEALTH, "workouts")
        )
        start = store.as_of - timedelta(days=self.aggregator.baseline_window_days)
        slope = self._trend_slope([p for p in scores if p[0] > start])

        evidence = {
            "variance": round(baseline.variance, 3),
            "weekly_load": fatigue,
            "trend_slope": round(slope, 4) if slope is not None else None,
        }

        if (
            baseline.variance > self.thresholds.burnout_variance_threshold
            and fatigue > self.thresholds.burnout_fatigue_threshold
        ):
            return Signal(
                kind=SignalKind.BURNOUT_RISK,
                polarity=SignalPolarity.RISK,
                severity=SignalSeverity.HIGH,
                goal_id="daily_score",
                message=(
                    f"High burnout risk: daily score variance {baseline.variance:.1f} "
                    f"with {fatigue:.0f} activities this week"
                ),
                mitigation_text="Schedule a recovery day and cut this week's load by a third",
                evidence=evidence,
            )

        if slope is not None and slope < 0:
            return Signal(
                kind=SignalKind.BURNOUT_RISK,
                polarity=SignalPolarity.RISK,
                severity=SignalSeverity.MODERATE,
                goal_id="daily_score",
                message=f"Moderate burnout risk: daily score sliding {slope * 7:.2f} points per week",
                mitigation_text="Protect sleep and keep one low-intensity day this week",
                evidence=evidence,
            )

        return Signal(
            kind=SignalKind.BURNOUT_RISK,
            polarity=SignalPolarity.RISK,
            severity=SignalSeverity.LOW,
            goal_id="daily_score",
            message="Low burnout risk: daily scores are stable",
            mitigation_text="Keep the current routine",
            evidence=evidence,
        )

    def _momentum(
        self, readings: dict[str, MetricReading], targets: dict[str, float]
    ) -> list[Signal]:
        periods = self.thresholds.momentum_periods
        signals = []
        for goal_id, reading in readings.items():
            target = targets.get(goal_id)
            values = reading.period_values[-periods:]
            if target is None or len(values) < periods:
                continue
            if not all(value >= target for value in values):
                continue

            rising = values[-1] > values[0]
            signals.append(
                Signal(
                    kind=SignalKind.MOMENTUM,
                    polarity=SignalPolarity.OPPORTUNITY,
                    severity=SignalSeverity.HIGH if rising else SignalSeverity.MODERATE,
                    goal_id=goal_id,
                    message=(
                        f"{'Strong' if rising else 'Steady'} momentum: last {periods} periods "
                        f"at or above target {target:g}"
                    ),
                    mitigation_text=(
                        "Raise the bar: the current target is comfortably met"
                        if rising
                        else "Maintain the routine that is keeping you on target"
                    ),
                    evidence={"periods": list(values), "target": target, "rising": rising},
                )
            )
        return signals

    def _stress_trigger(self, store: TimeSeriesStore) -> Optional[Signal]:
        start = store.as_of - timedelta(days=self.aggregator.baseline_window_days)
        low_days = [
            day
            for day, value in self._scores(store)
            if day > start and value < self.thresholds.stress_score_floor
        ]
        if len(low_days) < self.thresholds.stress_min_low_days or not self.trigger_rules:
            return None

        by_domain = {
            domain: {record.date: record for record in store.query(domain, since=low_days[0])}
            for domain in {rule.domain for rule in self.trigger_rules}
        }

        best_rule, best_count = None, 0
        for rule in self.trigger_rules:
            count = 0
            for day in low_days:
                record = by_domain[rule.domain].get(day)
                if rule.fires(record.get(rule.field) if record is not None else None):
                    count += 1
            if count > best_count:
                best_rule, best_count = rule, count

        if best_rule is None:
            return None

        percentage = best_count / len(low_days) * 100
        if percentage >= 75:
            severity = SignalSeverity.HIGH
        elif percentage >= 50:
            severity = SignalSeverity.MODERATE
        else:
            severity = SignalSeverity.LOW

        return Signal(
            kind=SignalKind.STRESS_TRIGGER,
            polarity=SignalPolarity.RISK,
            severity=severity,
            goal_id="daily_score",
            message=(
                f"Stress trigger: {best_rule.label} on {percentage:.0f}% of "
                f"{len(low_days)} low-score days"
            ),
            mitigation_text=best_rule.mitigation,
            evidence={
                "trigger": best_rule.name,
                "occurrences": best_count,
                "low_days": len(low_days),
                "percentage": round(percentage, 1),
            },
        )

    def _discipline_trend(self, store: TimeSeriesStore) -> Optional[Signal]:
        start = store.as_of - timedelta(days=self.aggregator.short_window_days)
        recent = [value for day, value in self._scores(store) if day > start]
        if len(recent) < 3:
            return None

        delta = recent[-1] - recent[0]
        threshold = self.thresholds.trend_alert_delta
        severity = SignalSeverity.HIGH if abs(delta) >= 4 * threshold else SignalSeverity.MODERATE
        evidence = {"first": recent[0], "last": recent[-1], "delta": round(delta, 2)}

        if delta > threshold:
            return Signal(
                kind=SignalKind.IMPROVING_TREND,
                polarity=SignalPolarity.OPPORTUNITY,
                severity=severity,
                goal_id="daily_score",
                message=f"Daily score trending up +{delta:.1f} points over the last week",
                mitigation_text="Maintain: keep doing what changed this week",
                evidence=evidence,
            )
        if delta < -threshold:
            return Signal(
                kind=SignalKind.DECLINING_TREND,
                polarity=SignalPolarity.RISK,
                severity=severity,
                goal_id="daily_score",
                message=f"Daily score trending down {delta:.1f} points over the last week",
                mitigation_text="Analyze what changed: sleep, stress or workload",
                evidence=evidence,
            )
        return None

    def _trading_edge(self, store: TimeSeriesStore) -> Optional[Signal]:
        trades = wins = 0.0
        for record in reversed(store.query(Domain.TRADING)):
            if record.date > store.as_of:
                continue
            if trades >= self.thresholds.trading_edge_lookback:
                break
            trades += record.get("trades", 0.0)
            wins += record.get("wins", 0.0)

        if trades < self.thresholds.trading_edge_min_trades:
            return None
        win_rate = wins / trades * 100
        if win_rate < self.thresholds.trading_edge_win_rate:
            return None

        return Signal(
            kind=SignalKind.TRADING_EDGE,
            polarity=SignalPolarity.OPPORTUNITY,
            severity=SignalSeverity.HIGH,
            goal_id="trading_win_rate",
            message=f"Trading edge detected: {win_rate:.0f}% win rate on the last {trades:.0f} trades",
            mitigation_text="Scale: this is a proven edge, increase size slightly",
            evidence={"win_rate": round(win_rate, 1), "trades": int(trades)},
        )

    def _career_milestone(self, store: TimeSeriesStore) -> Optional[Signal]:
        offers = sum(
            record.get("offers", 0.0)
            for record in store.query(Domain.CAREER)
            if record.date <= store.as_of
        )
        if offers < 1:
            return None

        return Signal(
            kind=SignalKind.CAREER_MILESTONE,
            polarity=SignalPolarity.OPPORTUNITY,
            severity=SignalSeverity.HIGH,
            goal_id="offer_secured",
            message=f"Career milestone: {offers:.0f} offer(s) in pipeline",
            mitigation_text="Close: prepare your negotiation strategy",
            evidence={"offers": int(offers)},
        )

    def _consistency_gap(self, store: TimeSeriesStore) -> Optional[Signal]:
        logged = len(self._scores(store))
        required = self.thresholds.consistency_min_days
        if logged == 0 or logged >= required:
            return None

        return Signal(
            kind=SignalKind.CONSISTENCY_GAP,
            polarity=SignalPolarity.RISK,
            severity=SignalSeverity.MODERATE if logged < required / 2 else SignalSeverity.LOW,
            goal_id="daily_score",
            message=f"Only {logged} of {required} days logged: patterns are not yet reliable",
            mitigation_text="Log your daily score every evening to unlock trend insights",
            evidence={"logged_days": logged, "required_days": required},
        )

    def _low_volume(
        self,
        readings: dict[str, MetricReading],
        goal_id: str,
        label: str,
        floor: float,
    ) -> Optional[Signal]:
        reading = readings.get(goal_id)
        if reading is None or reading.baseline is None or not reading.baseline.sufficient_data:
            return None

        weekly = reading.baseline.mean * 7
        if weekly >= floor:
            return None

        return Signal(
            kind=SignalKind.LOW_VOLUME,
            polarity=SignalPolarity.RISK,
            severity=SignalSeverity.MODERATE,
            goal_id=goal_id,
            message=f"Low volume: averaging {weekly:.1f} {label} per week over the last month",
            mitigation_text=f"Block fixed time slots to bring {label} above {floor:g} per week",
            evidence={"weekly_average": round(weekly, 2), "floor": floor},
        )
