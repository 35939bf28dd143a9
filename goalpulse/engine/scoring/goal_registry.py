"""
Goal Registry — the data-driven goal table.

Every domain's goals live in one table consumed by one scoring engine. Each
entry names its metric, target, importance, direction, status bands and
projection settings, plus the message and action templates used when the
goal falls short.

Status bands are named presets rather than one hard-coded threshold set,
because the goals are graded on different curves:

    STANDARD  90 / 70 / 50        EXCELLENT, GOOD, FAIR, else CRITICAL
    STRICT    90 / 75 / 60 / 45   EXCELLENT, VERY_GOOD, GOOD, FAIR, else POOR
    LENIENT   85 / 70 / 50 / 30   EXCELLENT, VERY_GOOD, GOOD, FAIR, else POOR
    COARSE    80 / 60 / 40        EXCELLENT, GOOD, FAIR, else POOR

Templates are formatted with: name, current, target, gap, unit and
lowest_category (weakest discipline category).
"""

from typing import Iterable, Optional

import structlog

from goalpulse.engine.metrics import METRIC_RESOLVERS
from goalpulse.models.enums import (
    Domain,
    GoalDirection,
    GoalStatus,
    Importance,
    ProjectionMethod,
)
from goalpulse.models.goals import Goal, ProjectionSpec, StatusBands

logger = structlog.get_logger()


# ============================================================================
# Status band presets
# ============================================================================

STANDARD_BANDS = StatusBands(
    name="STANDARD",
    cuts=((90, GoalStatus.EXCELLENT), (70, GoalStatus.GOOD), (50, GoalStatus.FAIR)),
    floor=GoalStatus.CRITICAL,
)

STRICT_BANDS = StatusBands(
    name="STRICT",
    cuts=(
        (90, GoalStatus.EXCELLENT),
        (75, GoalStatus.VERY_GOOD),
        (60, GoalStatus.GOOD),
        (45, GoalStatus.FAIR),
    ),
    floor=GoalStatus.POOR,
)

LENIENT_BANDS = StatusBands(
    name="LENIENT",
    cuts=(
        (85, GoalStatus.EXCELLENT),
        (70, GoalStatus.VERY_GOOD),
        (50, GoalStatus.GOOD),
        (30, GoalStatus.FAIR),
    ),
    floor=GoalStatus.POOR,
)

COARSE_BANDS = StatusBands(
    name="COARSE",
    cuts=((80, GoalStatus.EXCELLENT), (60, GoalStatus.GOOD), (40, GoalStatus.FAIR)),
    floor=GoalStatus.POOR,
)

BAND_PRESETS = {
    bands.name: bands
    for bands in (STANDARD_BANDS, STRICT_BANDS, LENIENT_BANDS, COARSE_BANDS)
}


def _linear(lower: Optional[float] = None, upper: Optional[float] = None) -> ProjectionSpec:
    return ProjectionSpec(method=ProjectionMethod.LINEAR, lower_bound=lower, upper_bound=upper)


def _compound(lower: Optional[float] = None, upper: Optional[float] = None) -> ProjectionSpec:
    return ProjectionSpec(
        method=ProjectionMethod.COMPOUND_GROWTH, lower_bound=lower, upper_bound=upper
    )


# ============================================================================
# Default goal table
# ============================================================================

DEFAULT_GOALS = (
    Goal(
        id="daily_score",
        name="Daily score",
        metric="discipline.total_score",
        target=8.0,
        importance=Importance.CRITICAL,
        category=Domain.DISCIPLINE,
        bands=STANDARD_BANDS,
        projection=_linear(0.0, 10.0),
        unit="/10",
        problem_template="Daily score averages {current}{unit} against a target of {target}{unit}",
        action_template="Focus on {lowest_category} today: set a timer and commit to it",
    ),
    Goal(
        id="job_applications_per_week",
        name="Job applications per week",
        metric="career.applications_per_week",
        target=15,
        importance=Importance.CRITICAL,
        category=Domain.CAREER,
        bands=STANDARD_BANDS,
        projection=_linear(0.0),
        problem_template="Only {current} applications this week against a target of {target}",
        action_template="Add {gap} more applications this week: schedule at least one per day",
    ),
    Goal(
        id="tier1_applications_per_week",
        name="Tier 1 applications per week",
        metric="career.tier1_per_week",
        target=5,
        importance=Importance.HIGH,
        category=Domain.CAREER,
        bands=STANDARD_BANDS,
        projection=_linear(0.0),
        problem_template="{current} Tier 1 applications this week against a target of {target}",
        action_template="Commit one hour daily to researching and applying to Tier 1 companies",
    ),
    Goal(
        id="interview_conversion",
        name="Interview conversion",
        metric="career.interview_rate",
        target=8,
        importance=Importance.HIGH,
        category=Domain.CAREER,
        bands=STRICT_BANDS,
        projection=_linear(0.0, 100.0),
        unit="%",
        problem_template="Interview rate is {current}{unit} against a target of {target}{unit}",
        action_template="Improve resume and cover letter quality; customize each application",
    ),
    Goal(
        id="offer_secured",
        name="Offer secured",
        metric="career.offer_secured",
        target=True,
        importance=Importance.HIGH,
        category=Domain.CAREER,
        direction=GoalDirection.BOOLEAN,
        problem_template="No offer secured yet",
        action_template="Prioritize late-stage interviews and follow up on open processes",
    ),
    Goal(
        id="trading_win_rate",
        name="Trading win rate",
        metric="trading.win_rate",
        target=55,
        importance=Importance.CRITICAL,
        category=Domain.TRADING,
        bands=LENIENT_BANDS,
        projection=_linear(0.0, 100.0),
        unit="%",
        problem_template="Win rate is {current}{unit} against a target of {target}{unit}",
        action_template="Tighten entry criteria and require a minimum 2:1 risk/reward",
    ),
    Goal(
        id="monthly_trading_pnl",
        name="Monthly trading P&L",
        metric="trading.monthly_pnl",
        target=5000,
        importance=Importance.HIGH,
        category=Domain.TRADING,
        bands=LENIENT_BANDS,
        projection=_linear(),
        unit="$",
        problem_template="30-day P&L is {unit}{current} against a target of {unit}{target}",
        action_template="Increase trade size on proven setups or raise the win rate",
    ),
    Goal(
        id="trading_aum",
        name="Trading AUM",
        metric="trading.aum",
        target=500000,
        importance=Importance.CRITICAL,
        category=Domain.TRADING,
        bands=LENIENT_BANDS,
        projection=_compound(0.0),
        unit="$",
        problem_template="AUM is {unit}{current} against a target of {unit}{target}",
        action_template="Scale the trading system and increase capital allocation",
    ),
    Goal(
        id="workouts_per_week",
        name="Workouts per week",
        metric="health.workouts_per_week",
        target=6,
        importance=Importance.HIGH,
        category=Domain.HEALTH,
        bands=COARSE_BANDS,
        projection=_linear(0.0, 14.0),
        problem_template="{current} workouts this week against a target of {target}",
        action_template="Complete {gap} more workouts this week: schedule strength + cardio tomorrow",
    ),
    Goal(
        id="body_fat",
        name="Body fat",
        metric="health.body_fat_pct",
        target=12,
        importance=Importance.MEDIUM,
        category=Domain.HEALTH,
        direction=GoalDirection.LOWER_BETTER,
        bands=COARSE_BANDS,
        projection=_linear(0.0, 100.0),
        unit="%",
        problem_template="Body fat is {current}{unit}, {gap}{unit} above the {target}{unit} target",
        action_template="Maintain 6+ workouts per week and tighten nutrition discipline",
    ),
    Goal(
        id="savings_rate",
        name="Savings rate",
        metric="finance.savings_rate",
        target=30,
        importance=Importance.HIGH,
        category=Domain.FINANCE,
        bands=LENIENT_BANDS,
        projection=_linear(None, 100.0),
        unit="%",
        problem_template="Savings rate is {current}{unit} against a target of {target}{unit}",
        action_template="Cut discretionary spending to close the {gap} point savings gap",
    ),
    Goal(
        id="net_worth",
        name="Net worth",
        metric="finance.net_worth",
        target=2000000,
        importance=Importance.CRITICAL,
        category=Domain.FINANCE,
        bands=LENIENT_BANDS,
        projection=_compound(),
        unit="$",
        problem_template="Net worth is {unit}{current} against a target of {unit}{target}",
        action_template="Raise monthly savings and keep capital invested at target returns",
    ),
)


class GoalRegistry:
    """
    Ordered, validated collection of goals.

    Table order is significant: it breaks ties when recommendations are
    ranked. Construction validates that goal ids are unique and that every
    metric is either registered or overridden by a current_value_fn.

    Example:
        >>> registry = GoalRegistry()
        >>> registry.get("daily_score").target
        8.0
        >>> registry.index("daily_score")
        0
    """

    def __init__(self, goals: Iterable[Goal] = DEFAULT_GOALS):
        self._goals = tuple(goals)
        self._index: dict[str, int] = {}

        for position, goal in enumerate(self._goals):
            if goal.id in self._index:
                raise ValueError(f"Duplicate goal id '{goal.id}'")
            if goal.metric not in METRIC_RESOLVERS and goal.current_value_fn is None:
                raise ValueError(
                    f"Unknown metric '{goal.metric}' for goal '{goal.id}'. "
                    f"Must be one of: {sorted(METRIC_RESOLVERS)}"
                )
            self._index[goal.id] = position

        logger.debug("goal_registry_loaded", goal_count=len(self._goals))

    def __iter__(self):
        return iter(self._goals)

    def __len__(self) -> int:
        return len(self._goals)

    def __contains__(self, goal_id: str) -> bool:
        return goal_id in self._index

    def get(self, goal_id: str) -> Goal:
        """
        Look up a goal by id.

        Raises:
            KeyError: If the goal id is not registered
        """
        return self._goals[self._index[goal_id]]

    def index(self, goal_id: str) -> int:
        """Position of a goal in the table (used as a ranking tie-breaker)."""
        return self._index.get(goal_id, len(self._goals))

    @property
    def goals(self) -> tuple[Goal, ...]:
        return self._goals
