"""
Pytest configuration and shared fixtures for the GoalPulse test suite.

Provides snapshot factories, model factories and reusable fixtures across
all test types (unit, integration, golden, property-based).
"""

import os
from datetime import date, datetime, timedelta, timezone
from typing import Optional

import pytest

# Set testing environment BEFORE importing app
os.environ["TESTING"] = "true"
os.environ.setdefault("LOG_LEVEL", "warning")


from goalpulse.config import Settings
from goalpulse.engine.orchestrator import EvaluationOrchestrator
from goalpulse.engine.scoring.goal_registry import STANDARD_BANDS, GoalRegistry
from goalpulse.models.analytics import Signal
from goalpulse.models.enums import (
    Domain,
    GoalStatus,
    Importance,
    SignalKind,
    SignalPolarity,
    SignalSeverity,
)
from goalpulse.models.goals import Goal
from goalpulse.models.records import Snapshot
from goalpulse.models.reports import GoalScore
from goalpulse.storage.snapshot_store import SnapshotStore

AS_OF = date(2024, 3, 31)


# ---------------------------------------------------------------------------
# Snapshot factories (camelCase, as posted by the UI)
# ---------------------------------------------------------------------------


def days_back(n: int, as_of: date = AS_OF) -> list[date]:
    """The last n days ending at as_of, oldest first."""
    return [as_of - timedelta(days=offset) for offset in range(n - 1, -1, -1)]


def make_daily_scores(
    values: list[float],
    as_of: date = AS_OF,
    scores: Optional[dict[str, float]] = None,
) -> list[dict]:
    """One dailyScores row per value, on consecutive days ending at as_of."""
    return [
        {"date": day.isoformat(), "totalScore": value, "scores": dict(scores or {})}
        for day, value in zip(days_back(len(values), as_of), values)
    ]


def make_applications(
    per_day: list[int],
    as_of: date = AS_OF,
    tier: str = "Tier 2",
    status: str = "Applied",
) -> list[dict]:
    """jobApplications rows: per_day[i] applications on the i-th of consecutive days."""
    rows = []
    for day, count in zip(days_back(len(per_day), as_of), per_day):
        rows += [
            {"date": day.isoformat(), "tier": tier, "status": status, "company": f"Co{i}"}
            for i in range(count)
        ]
    return rows


def make_trades(pnls: list[float], as_of: date = AS_OF) -> list[dict]:
    """One tradingJournal row per P&L, on consecutive days ending at as_of."""
    return [
        {"date": day.isoformat(), "pnl": pnl}
        for day, pnl in zip(days_back(len(pnls), as_of), pnls)
    ]


def make_workouts(per_day: list[int], as_of: date = AS_OF) -> list[dict]:
    rows = []
    for day, count in zip(days_back(len(per_day), as_of), per_day):
        rows += [
            {"date": day.isoformat(), "type": "strength", "duration": 45}
            for _ in range(count)
        ]
    return rows


def make_snapshot(as_of: Optional[date] = AS_OF, **collections) -> dict:
    """
    Factory function for creating test snapshot payloads.

    Keyword arguments are camelCase collection names (dailyScores,
    jobApplications, tradingJournal, workouts, bodyMetrics, financialData).
    """
    payload = {
        "dailyScores": [],
        "jobApplications": [],
        "tradingJournal": [],
        "workouts": [],
    }
    if as_of is not None:
        payload["asOf"] = as_of.isoformat()
    payload.update(collections)
    return payload


def make_store(payload: dict) -> SnapshotStore:
    """Build a SnapshotStore from a camelCase snapshot payload."""
    return SnapshotStore.from_snapshot(
        Snapshot.model_validate(payload),
        clock=lambda: datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


# ---------------------------------------------------------------------------
# Model factories
# ---------------------------------------------------------------------------


def make_goal(goal_id: str = "test_goal", **overrides) -> Goal:
    """Factory function for creating test Goal objects."""
    defaults = dict(
        id=goal_id,
        name="Test goal",
        metric="discipline.total_score",
        target=10.0,
        importance=Importance.HIGH,
        category=Domain.DISCIPLINE,
        bands=STANDARD_BANDS,
    )
    defaults.update(overrides)
    return Goal(**defaults)


def make_goal_score(
    status: GoalStatus = GoalStatus.FAIR,
    score: float = 60.0,
    gap: Optional[float] = 4.0,
    current: Optional[float] = 6.0,
    target: float = 10.0,
) -> GoalScore:
    return GoalScore(
        score=score,
        status=status,
        gap=gap,
        percentage=score if current is not None else None,
        current=current,
        target=target,
    )


def make_signal(
    kind: SignalKind = SignalKind.BURNOUT_RISK,
    goal_id: str = "daily_score",
    polarity: SignalPolarity = SignalPolarity.RISK,
    severity: SignalSeverity = SignalSeverity.HIGH,
    message: str = "Test signal",
    mitigation_text: str = "Test mitigation",
) -> Signal:
    """Factory function for creating test Signal objects."""
    return Signal(
        kind=kind,
        polarity=polarity,
        severity=severity,
        goal_id=goal_id,
        message=message,
        mitigation_text=mitigation_text,
    )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings():
    """Fresh settings (defaults plus environment)."""
    return Settings()


@pytest.fixture
def registry():
    return GoalRegistry()


@pytest.fixture
def orchestrator(settings):
    return EvaluationOrchestrator(settings=settings)


@pytest.fixture
def steady_snapshot():
    """Seven days of totalScore 8.0 ending at AS_OF."""
    return make_snapshot(dailyScores=make_daily_scores([8.0] * 7))


@pytest.fixture
def full_snapshot():
    """A month of activity across every domain."""
    return make_snapshot(
        dailyScores=make_daily_scores(
            [7.0 + (i % 3) * 0.5 for i in range(30)],
            scores={"sleep": 8.0, "deepWork": 6.5, "exercise": 9.0, "social": 5.0},
        ),
        jobApplications=make_applications([2] * 30, tier="Tier 1")
        + make_applications([1], status="Phone Screen"),
        tradingJournal=make_trades([300, -120, 450, 80, -60, 220, 150, -90, 310, 75]),
        workouts=make_workouts([1, 1, 0, 1, 1, 1, 0] * 4),
        bodyMetrics=[
            {"date": "2024-03-01", "bodyFatPct": 16.0},
            {"date": "2024-03-30", "bodyFatPct": 15.0},
        ],
        financialData={
            "netWorth": 250000,
            "monthlyIncome": 9000,
            "monthlyExpenses": 5500,
            "tradingAUM": 60000,
        },
    )


@pytest.fixture
def client():
    """FastAPI test client."""
    from fastapi.testclient import TestClient

    from goalpulse.main import app

    with TestClient(app) as test_client:
        yield test_client
