"""FastAPI dependencies exposing the engine components stored on app.state."""

from fastapi import Request

from uptime_monitor.core.aggregator import UptimeAggregator
from uptime_monitor.core.store import UptimeStore


def get_store(request: Request) -> UptimeStore:
    return request.app.state.store


def get_aggregator(request: Request) -> UptimeAggregator:
    return request.app.state.aggregator
