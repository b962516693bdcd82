"""
Tests for DispatchMonitor.
"""

import logging

import pytest

from assistant.monitoring.monitor import AggregatedMetrics, DispatchMonitor


@pytest.fixture
def monitor() -> DispatchMonitor:
    return DispatchMonitor(max_history=3)


def track(monitor, route="executed", intent="toggle_wifi", success=True, latency_ms=10.0, **kwargs):
    return monitor.track_turn(
        request_id="req",
        session_id="s",
        route=route,
        intent=intent,
        confidence=1.0,
        success=success,
        latency_ms=latency_ms,
        **kwargs,
    )


class TestAggregation:

    def test_empty(self, monitor):
        stats = monitor.get_stats()

        assert stats.total_turns == 0
        assert stats.avg_latency_ms == 0.0
        assert stats.success_rate == 0.0

    def test_counts(self, monitor):
        track(monitor, latency_ms=10.0)
        track(monitor, route="unknown", intent=None, success=False, latency_ms=20.0)
        track(monitor, route="error", success=False, latency_ms=30.0, classification_errors=2)

        stats = monitor.get_stats()
        assert stats.total_turns == 3
        assert stats.successful_turns == 1
        assert stats.failed_turns == 2
        assert stats.avg_latency_ms == pytest.approx(20.0)
        assert stats.classification_errors == 2
        assert stats.turns_by_route == {"executed": 1, "unknown": 1, "error": 1}
        assert stats.turns_by_intent == {"toggle_wifi": 2}

    def test_stats_are_a_snapshot(self, monitor):
        track(monitor)
        stats = monitor.get_stats()

        track(monitor, route="unknown", intent=None, success=False)

        assert stats.total_turns == 1
        assert stats.turns_by_route == {"executed": 1}
        assert monitor.get_stats().total_turns == 2

    def test_to_dict(self):
        stats = AggregatedMetrics(total_turns=4, successful_turns=3, failed_turns=1, total_latency_ms=10.0)

        data = stats.to_dict()

        assert data["success_rate"] == "75.0%"
        assert data["avg_latency_ms"] == 2.5

    def test_history_is_bounded(self, monitor):
        for i in range(5):
            monitor.track_turn(f"req-{i}", "s", "executed", "greeting", 1.0, True, 1.0)

        recent = monitor.get_recent_turns(limit=10)

        assert [t.request_id for t in recent] == ["req-4", "req-3", "req-2"]

    def test_reset(self, monitor):
        track(monitor)

        monitor.reset()

        assert monitor.get_stats().total_turns == 0
        assert monitor.get_recent_turns() == []


class TestLogging:

    def test_failed_turn_logged_as_warning(self, monitor, caplog):
        with caplog.at_level(logging.INFO, logger="assistant.monitoring"):
            track(monitor, route="low_confidence", success=False)

        record = caplog.records[-1]
        assert record.levelno == logging.WARNING
        assert '"route": "low_confidence"' in record.getMessage()

    def test_successful_turn_logged_as_info(self, monitor, caplog):
        with caplog.at_level(logging.INFO, logger="assistant.monitoring"):
            track(monitor)

        assert caplog.records[-1].levelno == logging.INFO
        assert '"event": "dispatch_turn"' in caplog.records[-1].getMessage()
