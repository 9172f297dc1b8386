"""Core probing and aggregation engine for Uptime Monitor."""

from uptime_monitor.core.aggregator import UptimeAggregator
from uptime_monitor.core.prober import Outcome, Prober
from uptime_monitor.core.scheduler import MonitoringScheduler, TickReport
from uptime_monitor.core.store import UptimeStore

__all__ = [
    "UptimeAggregator",
    "Outcome",
    "Prober",
    "MonitoringScheduler",
    "TickReport",
    "UptimeStore",
]
