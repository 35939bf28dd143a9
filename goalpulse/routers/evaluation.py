"""
Evaluation Router — goal evaluation, predictions and the goal table.

The router is a thin adapter: it accepts a snapshot body, runs the engine and
returns the report unchanged (camelCase) inside the standard response
envelope. It owns no persistence and no authentication.
"""

from datetime import date
from functools import lru_cache
from typing import Optional

from fastapi import APIRouter, Depends, Query

from goalpulse.engine.orchestrator import EvaluationOrchestrator
from goalpulse.models.records import Snapshot
from goalpulse.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter()


@lru_cache
def get_orchestrator() -> EvaluationOrchestrator:
    """
    Get cached orchestrator instance (singleton).

    The orchestrator is stateless apart from the optional recommendation
    cache, so one instance serves every request.
    """
    return EvaluationOrchestrator()


@router.post("/evaluation")
async def evaluate_snapshot(
    snapshot: Snapshot,
    orchestrator: EvaluationOrchestrator = Depends(get_orchestrator),
):
    """
    Evaluate progress on every goal.

    Send the dashboard snapshot (camelCase). Example:
    {
      "dailyScores": [{"date": "2024-01-15", "scores": {"sleep": 8}, "totalScore": 7.5}],
      "jobApplications": [{"date": "2024-01-15", "tier": "Tier 1", "status": "Applied"}],
      "tradingJournal": [{"date": "2024-01-15", "pnl": 250}],
      "workouts": [{"date": "2024-01-15", "type": "strength", "duration": 45}],
      "financialData": {"netWorth": 150000, "monthlyIncome": 8000, "monthlyExpenses": 5000}
    }
    """
    evaluation = orchestrator.evaluate(snapshot)
    logger.info(
        "evaluation_served",
        overall_score=evaluation.overall_score,
        recommendations=len(evaluation.recommendations),
    )
    return {"success": True, "data": evaluation.model_dump(mode="json", by_alias=True)}


@router.post("/predictions")
async def predict_snapshot(
    snapshot: Snapshot,
    horizon_date: Optional[date] = Query(
        default=None, description="Projection horizon (YYYY-MM-DD); defaults to the configured horizon"
    ),
    orchestrator: EvaluationOrchestrator = Depends(get_orchestrator),
):
    """Project every projectable goal to the horizon date."""
    predictions = orchestrator.predict(snapshot, horizon_date)
    logger.info(
        "predictions_served",
        horizon_date=predictions.horizon_date.isoformat(),
        overall_probability=predictions.overall_probability,
    )
    return {"success": True, "data": predictions.model_dump(mode="json", by_alias=True)}


@router.get("/goals")
async def list_goals(orchestrator: EvaluationOrchestrator = Depends(get_orchestrator)):
    """Return the configured goal table in ranking order."""
    goals = [goal.model_dump(mode="json", by_alias=True) for goal in orchestrator.registry]
    return {"success": True, "data": {"goals": goals, "count": len(goals)}}
