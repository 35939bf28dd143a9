"""
Pattern Detection Engine.

Rule-based detection of burnout risk, momentum, stress triggers, trends and
other risk/opportunity signals over a snapshot's records.

Components:
    PatternDetector: Runs every rule and returns the emitted signals
    DetectionThresholds: Tunable rule thresholds (buildable from settings)
    TriggerRule: One stress trigger condition checked on low-score days
"""

from goalpulse.engine.detection.pattern_detector import (
    DEFAULT_TRIGGER_RULES,
    DetectionThresholds,
    PatternDetector,
    TriggerRule,
)

__all__ = [
    "DEFAULT_TRIGGER_RULES",
    "DetectionThresholds",
    "PatternDetector",
    "TriggerRule",
]
