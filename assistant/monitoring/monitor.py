"""
Dispatch Monitor - Structured turn logs and in-memory metrics.

One call per turn:
1. Writes a structured JSON log line
2. Updates aggregated counters (by route, by intent, latency)

Routes name the path a turn took through the Dispatcher:
executed, confirmation_required, confirmation_executed,
confirmation_cancelled, confirmation_reprompt, confirmation_timeout,
awaiting, unknown, low_confidence, plugin_not_found, error, lost_context.

Usage:
    from assistant.monitoring import dispatch_monitor

    dispatch_monitor.track_turn(
        request_id="abc123",
        session_id="default",
        route="executed",
        intent="toggle_wifi",
        confidence=1.0,
        success=True,
        latency_ms=12.5,
    )

    stats = dispatch_monitor.get_stats()
"""

import json
import logging
import sys
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from threading import Lock
from typing import Any, Dict, List, Optional


# ---------------------------------------------------------------------------
# LOGGING SETUP
# ---------------------------------------------------------------------------
LOG_FORMAT = '[%(asctime)s] %(levelname)s [%(name)s] %(message)s'

logger = logging.getLogger("assistant.monitoring")


def setup_logging(level: str = "INFO") -> None:
    """Attach a stdout handler to the "assistant" logger tree (once)."""
    root = logging.getLogger("assistant")
    root.setLevel(level.upper())

    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')
        handler.setFormatter(formatter)
        root.addHandler(handler)


# ---------------------------------------------------------------------------
# METRICS DATA CLASSES
# ---------------------------------------------------------------------------
@dataclass
class TurnMetrics:
    """Metrics for a single turn."""
    request_id: str
    session_id: str
    route: str
    intent: Optional[str]
    confidence: Optional[float]
    success: bool
    latency_ms: float
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class AggregatedMetrics:
    """Aggregated metrics since start (or last reset)."""
    total_turns: int = 0
    successful_turns: int = 0
    failed_turns: int = 0
    total_latency_ms: float = 0.0
    classification_errors: int = 0
    turns_by_route: Dict[str, int] = field(default_factory=dict)
    turns_by_intent: Dict[str, int] = field(default_factory=dict)

    @property
    def avg_latency_ms(self) -> float:
        if self.total_turns == 0:
            return 0.0
        return self.total_latency_ms / self.total_turns

    @property
    def success_rate(self) -> float:
        if self.total_turns == 0:
            return 0.0
        return (self.successful_turns / self.total_turns) * 100

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_turns": self.total_turns,
            "successful_turns": self.successful_turns,
            "failed_turns": self.failed_turns,
            "success_rate": f"{self.success_rate:.1f}%",
            "avg_latency_ms": round(self.avg_latency_ms, 2),
            "classification_errors": self.classification_errors,
            "turns_by_route": dict(self.turns_by_route),
            "turns_by_intent": dict(self.turns_by_intent),
        }


# ---------------------------------------------------------------------------
# DISPATCH MONITOR
# ---------------------------------------------------------------------------
class DispatchMonitor:
    """
    Logging + metrics for dispatched turns.

    Thread-safe; counters are guarded by a Lock.
    """

    def __init__(self, max_history: int = 1000):
        self._history: List[TurnMetrics] = []
        self._max_history = max_history
        self._lock = Lock()
        self._aggregated = AggregatedMetrics()

    def track_turn(
        self,
        request_id: str,
        session_id: str,
        route: str,
        intent: Optional[str],
        confidence: Optional[float],
        success: bool,
        latency_ms: float,
        classification_errors: int = 0,
    ) -> TurnMetrics:
        metrics = TurnMetrics(
            request_id=request_id,
            session_id=session_id,
            route=route,
            intent=intent,
            confidence=confidence,
            success=success,
            latency_ms=latency_ms,
        )

        log_data = {
            "event": "dispatch_turn",
            "request_id": request_id,
            "session_id": session_id,
            "route": route,
            "intent": intent,
            "confidence": confidence,
            "success": success,
            "latency_ms": round(latency_ms, 2),
            "timestamp": metrics.timestamp.isoformat(),
        }
        if classification_errors:
            log_data["classification_errors"] = classification_errors

        level = logging.INFO if success else logging.WARNING
        logger.log(level, f"Turn: {json.dumps(log_data)}")

        with self._lock:
            self._history.append(metrics)
            if len(self._history) > self._max_history:
                self._history = self._history[-self._max_history:]

            agg = self._aggregated
            agg.total_turns += 1
            if success:
                agg.successful_turns += 1
            else:
                agg.failed_turns += 1
            agg.total_latency_ms += latency_ms
            agg.classification_errors += classification_errors
            agg.turns_by_route[route] = agg.turns_by_route.get(route, 0) + 1
            if intent:
                agg.turns_by_intent[intent] = agg.turns_by_intent.get(intent, 0) + 1

        return metrics

    def get_stats(self) -> AggregatedMetrics:
        """Snapshot of the aggregates; later turns do not change it."""
        with self._lock:
            agg = self._aggregated
            return replace(
                agg,
                turns_by_route=dict(agg.turns_by_route),
                turns_by_intent=dict(agg.turns_by_intent),
            )

    def get_recent_turns(self, limit: int = 10) -> List[TurnMetrics]:
        with self._lock:
            return list(reversed(self._history[-limit:]))

    def reset(self) -> None:
        """Reset all metrics (useful for testing)."""
        with self._lock:
            self._history = []
            self._aggregated = AggregatedMetrics()


# ---------------------------------------------------------------------------
# SINGLETON INSTANCE
# ---------------------------------------------------------------------------
dispatch_monitor = DispatchMonitor()
