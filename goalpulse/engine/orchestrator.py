"""
Evaluation Orchestrator — snapshot in, report out.

Wires the engine together in one direction:

    SnapshotStore -> WindowAggregator / metric resolvers
                  -> GoalScorer, TrendForecaster, PatternDetector
                  -> RecommendationRanker
                  -> Evaluation / Predictions

evaluate() and predict() are pure functions of the snapshot: the evaluation
date and report timestamp are derived from the snapshot itself, and the
only state kept between calls is the optional recommendation cache, which
never changes output.
"""

from datetime import date, datetime, time, timezone
from typing import Any, Optional, Union

import structlog

from goalpulse.config import Settings, get_settings
from goalpulse.models.analytics import MetricReading
from goalpulse.models.enums import GoalStatus, ProjectionMethod, SignalPolarity, SignalSeverity
from goalpulse.models.records import Snapshot
from goalpulse.models.reports import (
    Evaluation,
    GoalPrediction,
    GoalScore,
    Insight,
    Predictions,
)
from goalpulse.storage.snapshot_store import Clock, SnapshotStore, utc_now

from .detection.pattern_detector import (
    DEFAULT_TRIGGER_RULES,
    DetectionThresholds,
    PatternDetector,
    TriggerRule,
)
from .metrics import MetricContext, discipline_breakdown, resolve_metric
from .motivation import MotivationSelector
from .prediction.trend_forecaster import TrendForecaster
from .recommendation_cache import RecommendationCache
from .recommendation_ranker import RecommendationRanker
from .scoring.goal_registry import LENIENT_BANDS, GoalRegistry
from .scoring.goal_scorer import GoalScorer, weighted_mean
from .window_aggregator import WindowAggregator

logger = structlog.get_logger()

CONFIDENCE_FULL_DATA_POINTS = 500
AT_RISK_PROBABILITY = 0.5


def confidence_label(data_points: int) -> str:
    """Confidence label from the number of logged entries."""
    confidence = min(1.0, data_points / CONFIDENCE_FULL_DATA_POINTS)
    if confidence >= 0.8:
        return "Very High"
    if confidence >= 0.6:
        return "High"
    if confidence >= 0.4:
        return "Moderate"
    return "Low"


def outlook_sentence(probability: Optional[float], horizon_date: date) -> str:
    if probability is None:
        return "Not enough data to forecast yet. Keep logging to unlock projections."
    horizon = horizon_date.isoformat()
    if probability >= 0.85:
        return f"Excellent: on track for most goals by {horizon}. Maintain systems and execute."
    if probability >= 0.70:
        return f"Good: likely to reach most goals by {horizon}. Fix the one or two bottlenecks."
    if probability >= 0.50:
        return f"Fair: goals by {horizon} are within reach only with critical fixes to volume and consistency."
    return f"Poor: most goals by {horizon} are at risk. Focus on the top three goals only."


def _midnight_utc(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


class EvaluationOrchestrator:
    """
    Produces Evaluation and Predictions reports from input snapshots.

    Attributes:
        settings: Engine settings
        registry: Goal table
        aggregator: Window aggregator
        scorer: Goal scorer
        forecaster: Trend forecaster
        detector: Pattern detector
        ranker: Recommendation ranker (with the optional cache)
        motivation: Motivational message selector

    Example:
        >>> orchestrator = EvaluationOrchestrator()
        >>> evaluation = orchestrator.evaluate(snapshot)
        >>> evaluation.overall_score
        64.2
        >>> predictions = orchestrator.predict(snapshot, date(2026, 12, 31))
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        registry: Optional[GoalRegistry] = None,
        cache: Optional[RecommendationCache] = None,
        trigger_rules: tuple[TriggerRule, ...] = DEFAULT_TRIGGER_RULES,
        clock: Clock = utc_now,
    ):
        self.settings = settings or get_settings()
        self.registry = registry or GoalRegistry()
        self.clock = clock

        self.aggregator = WindowAggregator(
            short_window_days=self.settings.short_window_days,
            baseline_window_days=self.settings.baseline_window_days,
        )
        self.scorer = GoalScorer(self.settings.importance_weights)
        self.forecaster = TrendForecaster(
            max_periods=self.settings.forecast_max_periods,
            max_monthly_rate=self.settings.forecast_max_monthly_rate,
            annual_return=self.settings.net_worth_annual_return,
            probability_floor=self.settings.probability_floor,
            probability_ceiling=self.settings.probability_ceiling,
        )
        self.detector = PatternDetector(
            thresholds=DetectionThresholds.from_settings(self.settings),
            trigger_rules=trigger_rules,
            aggregator=self.aggregator,
        )
        if cache is None and self.settings.enable_recommendation_cache:
            cache = RecommendationCache(ttl_hours=self.settings.recommendation_cache_ttl_hours)
        self.ranker = RecommendationRanker(
            max_recommendations=self.settings.max_recommendations,
            cache=cache,
        )
        self.motivation = MotivationSelector(seed=self.settings.motivation_seed)
        self.logger = structlog.get_logger()

    # =========================================================================
    # Public API
    # =========================================================================

    def evaluate(self, snapshot: Union[Snapshot, dict[str, Any]]) -> Evaluation:
        """
        Evaluate progress on every goal.

        Args:
            snapshot: Input snapshot (model or camelCase dict)

        Returns:
            Evaluation report
        """
        store, ctx, readings = self._prepare(snapshot)
        scores = self._score(readings)
        overall = self.scorer.overall_score(self.registry, scores)

        signals = self.detector.detect(store, readings, self.registry)
        breakdown = discipline_breakdown(store, self.settings.short_window_days)
        lowest_category = breakdown[0].category if breakdown else None
        recommendations = self.ranker.rank(self.registry, scores, signals, lowest_category)

        evaluation = Evaluation(
            overall_score=overall,
            per_goal=scores,
            insights=[
                Insight(
                    kind=s.kind,
                    severity=s.severity,
                    polarity=s.polarity,
                    goal_id=s.goal_id,
                    message=s.message,
                    mitigation=s.mitigation_text,
                    evidence=s.evidence,
                )
                for s in signals
            ],
            recommendations=recommendations,
            discipline_breakdown=breakdown,
            motivational_message=self.motivation.select(overall, store.as_of),
            skipped_records=store.skipped_records,
            as_of=store.as_of,
            timestamp=_midnight_utc(store.as_of),
        )

        self.logger.info(
            "evaluation_complete",
            as_of=store.as_of.isoformat(),
            overall_score=overall,
            goals_scored=sum(
                1 for s in scores.values() if s.status != GoalStatus.INSUFFICIENT_DATA
            ),
            insights=len(evaluation.insights),
            recommendations=len(recommendations),
        )
        return evaluation

    def predict(
        self,
        snapshot: Union[Snapshot, dict[str, Any]],
        horizon_date: Optional[date] = None,
    ) -> Predictions:
        """
        Project every projectable goal to the horizon date.

        Args:
            snapshot: Input snapshot (model or camelCase dict)
            horizon_date: Projection horizon (default: configured horizon)

        Returns:
            Predictions report
        """
        horizon = horizon_date or self.settings.forecast_horizon_date
        store, ctx, readings = self._prepare(snapshot)
        scores = self._score(readings)

        per_goal: dict[str, GoalPrediction] = {}
        for goal in self.registry:
            rate, contribution = 0.0, 0.0
            if goal.projection is not None and goal.projection.method == ProjectionMethod.COMPOUND_GROWTH:
                rate, contribution = self.forecaster.compound_inputs(goal, ctx)

            reading = readings[goal.id]
            projection = self.forecaster.project(
                goal, reading, horizon, store.as_of, rate=rate, contribution=contribution
            )
            if projection is None:
                continue

            per_goal[goal.id] = GoalPrediction(
                current=reading.value,
                target=float(goal.target),
                projected=projection.projected_value,
                probability=projection.probability,
                method=projection.method,
                velocity_per_week=reading.velocity_per_week,
                weeks_to_target=projection.weeks_to_target,
                horizon_date=horizon,
                note=projection.note,
            )

        importances = {goal.id: goal.importance for goal in self.registry}
        overall_probability = weighted_mean(
            {
                goal_id: prediction.probability
                for goal_id, prediction in per_goal.items()
                if prediction.probability is not None
            },
            importances,
            self.settings.importance_weights,
        )
        if overall_probability is not None:
            overall_probability = round(min(1.0, max(0.0, overall_probability)), 4)
            status = LENIENT_BANDS.classify(overall_probability * 100)
        else:
            status = GoalStatus.INSUFFICIENT_DATA

        signals = self.detector.detect(store, readings, self.registry)
        risk_factors = [
            f"{self.registry.get(goal_id).name} at risk: "
            f"{prediction.probability:.0%} probability by {horizon.isoformat()}"
            for goal_id, prediction in per_goal.items()
            if prediction.probability is not None
            and prediction.probability < AT_RISK_PROBABILITY
        ]
        risk_factors += [
            s.message
            for s in signals
            if s.polarity == SignalPolarity.RISK and s.severity != SignalSeverity.LOW
        ]
        opportunities = [s.message for s in signals if s.polarity == SignalPolarity.OPPORTUNITY]

        predictions = Predictions(
            per_goal=per_goal,
            overall_score=self.scorer.overall_score(self.registry, scores),
            overall_probability=overall_probability,
            status=status,
            risk_factors=risk_factors,
            opportunities=opportunities,
            confidence=confidence_label(sum(store.entry_counts.values())),
            outlook=outlook_sentence(overall_probability, horizon),
            horizon_date=horizon,
            timestamp=_midnight_utc(store.as_of),
            skipped_records=store.skipped_records,
        )

        self.logger.info(
            "predictions_complete",
            as_of=store.as_of.isoformat(),
            horizon_date=horizon.isoformat(),
            projected_goals=len(per_goal),
            overall_probability=overall_probability,
        )
        return predictions

    # =========================================================================
    # Internals
    # =========================================================================

    def _prepare(
        self, snapshot: Union[Snapshot, dict[str, Any]]
    ) -> tuple[SnapshotStore, MetricContext, dict[str, MetricReading]]:
        if not isinstance(snapshot, Snapshot):
            snapshot = Snapshot.model_validate(snapshot)

        store = SnapshotStore.from_snapshot(snapshot, clock=self.clock)
        ctx = MetricContext(
            store=store,
            aggregator=self.aggregator,
            momentum_periods=self.settings.momentum_periods,
        )
        readings = {
            goal.id: resolve_metric(goal.metric, ctx, goal.current_value_fn)
            for goal in self.registry
        }
        return store, ctx, readings

    def _score(self, readings: dict[str, MetricReading]) -> dict[str, GoalScore]:
        return self.scorer.score_all(
            self.registry, {goal_id: reading.value for goal_id, reading in readings.items()}
        )
