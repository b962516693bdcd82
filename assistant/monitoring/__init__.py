"""
Monitoring Module - Turn logging and dispatch metrics.

Usage:
======
    from assistant.monitoring import dispatch_monitor

    dispatch_monitor.track_turn(request_id, session_id, route, intent, confidence, success, latency_ms)
    stats = dispatch_monitor.get_stats()
"""

from assistant.monitoring.monitor import DispatchMonitor, dispatch_monitor, setup_logging

__all__ = [
    "DispatchMonitor",
    "dispatch_monitor",
    "setup_logging",
]
