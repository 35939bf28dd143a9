"""GoalPulse: goal evaluation and forecasting engine for a personal progress dashboard."""

__version__ = "1.0.0"
