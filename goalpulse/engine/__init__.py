"""
GoalPulse engine core components.

This package contains the analytical engines behind goal evaluation:

- Window aggregation: rolling mean, stdev and velocity over dated series
- Metric resolution: current value of every goal metric
- Scoring: goal table, status band presets and per-goal scores
- Prediction: linear and compound-growth projections with probabilities
- Detection: rule-based risk and opportunity signals
- Recommendations: tiered, ordered, actionable suggestions (optional cache)
- Orchestration: snapshot in, Evaluation / Predictions out

All engine components are designed for:
- Determinism (the same snapshot always yields the same report)
- Comprehensive observability (structured logging with request IDs)
- Type safety (complete Pydantic validation)
- Testability (pure functions with dependency injection)
"""

__version__ = "1.0.0"

__all__ = [
    "EvaluationOrchestrator",
    "RecommendationCache",
]

from goalpulse.engine.orchestrator import EvaluationOrchestrator
from goalpulse.engine.recommendation_cache import RecommendationCache
