"""
Unit tests for the structlog processors in goalpulse.utils.logging.
"""

import math

import pytest

from goalpulse import __version__
from goalpulse.utils.logging import (
    SERVICE_NAME,
    add_service,
    add_severity,
    drop_non_finite,
    log_event,
)


class RecordingLogger:
    def __init__(self):
        self.calls = []

    def info(self, event, **kwargs):
        self.calls.append(("info", event, kwargs))

    def warning(self, event, **kwargs):
        self.calls.append(("warning", event, kwargs))


class TestProcessors:
    def test_service_and_version_added(self):
        event = add_service(None, "info", {"event": "evaluation_complete"})
        assert event["service"] == SERVICE_NAME
        assert event["version"] == __version__

    def test_severity_upper_cased(self):
        assert add_severity(None, "warning", {})["severity"] == "WARNING"

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), -float("inf")])
    def test_non_finite_floats_become_none(self, value):
        event = drop_non_finite(None, "info", {"mean": value, "count": 1})
        assert event == {"mean": None, "count": 1}

    def test_finite_values_untouched(self):
        event = drop_non_finite(None, "info", {"mean": 7.5, "note": "ok"})
        assert event["mean"] == 7.5
        assert not math.isnan(event["mean"])


class TestLogEvent:
    def test_dispatches_on_level(self):
        logger = RecordingLogger()
        log_event(logger, "WARNING", "snapshot_rows_skipped", total=2)
        assert logger.calls == [("warning", "snapshot_rows_skipped", {"total": 2})]

    def test_unknown_level_falls_back_to_info(self):
        logger = RecordingLogger()
        log_event(logger, "verbose", "snapshot_ingested")
        assert logger.calls[0][0] == "info"
