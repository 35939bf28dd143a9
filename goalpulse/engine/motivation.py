"""
Motivational message selection.

Messages are grouped into bands by overall score (90 / 75 / 60 / 45). Within
a band one variant is picked with a random.Random seeded from the configured
seed, the evaluation date and the overall score, so the same snapshot always
gets the same message while different days rotate through the variants.
"""

import random
from datetime import date

import structlog

logger = structlog.get_logger()

# (min overall score, variants); first match wins
MOTIVATION_BANDS = (
    (
        90.0,
        (
            "EXCEPTIONAL! You're crushing your goals. Keep this momentum!",
            "Elite consistency. Protect the habits that got you here.",
            "Top form across the board. Raise one target and keep compounding.",
        ),
    ),
    (
        75.0,
        (
            "SOLID PROGRESS! You're on track. Small adjustments = big wins.",
            "Strong week. Tighten the one area still below target.",
            "On track. Keep stacking days like this one.",
        ),
    ),
    (
        60.0,
        (
            "BUILDING! You're making progress. Focus on 1-2 priority areas.",
            "Momentum is forming. Pick the highest-impact goal and push it today.",
            "Halfway there. Consistency beats intensity this week.",
        ),
    ),
    (
        45.0,
        (
            "WAKE UP CALL! Time to refocus. Pick your #1 priority TODAY.",
            "Slipping behind. One focused block today changes the week.",
            "Reset now: choose one goal and win it before noon.",
        ),
    ),
    (
        0.0,
        (
            "CRITICAL! You're off track. Need immediate action plan.",
            "Hard stretch. Start with the smallest action you can finish today.",
            "Rebuild from one habit. Log today and take a single step.",
        ),
    ),
)


class MotivationSelector:
    """
    Picks a motivational message for an overall score.

    Example:
        >>> selector = MotivationSelector(seed=0)
        >>> selector.select(92.0, date(2024, 1, 15))
        'EXCEPTIONAL! ...'
    """

    def __init__(self, seed: int = 0):
        self.seed = seed

    def band(self, overall_score: float) -> tuple[str, ...]:
        for floor, variants in MOTIVATION_BANDS:
            if overall_score >= floor:
                return variants
        return MOTIVATION_BANDS[-1][1]

    def select(self, overall_score: float, as_of: date) -> str:
        variants = self.band(overall_score)
        rng = random.Random(f"{self.seed}:{as_of.isoformat()}:{overall_score:.1f}")
        return rng.choice(variants)
