"""Goal scoring: the goal table, status band presets and the per-goal scorer."""

from .goal_registry import BAND_PRESETS, DEFAULT_GOALS, GoalRegistry
from .goal_scorer import GoalScorer, score_goal, weighted_mean

__all__ = [
    "BAND_PRESETS",
    "DEFAULT_GOALS",
    "GoalRegistry",
    "GoalScorer",
    "score_goal",
    "weighted_mean",
]
