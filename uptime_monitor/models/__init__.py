"""Database models for Uptime Monitor."""

from uptime_monitor.models.website import Website
from uptime_monitor.models.log import Log

__all__ = ["Website", "Log"]
