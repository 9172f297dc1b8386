"""Pydantic schemas for API request/response validation."""

from uptime_monitor.schemas.website import (
    WebsiteCreate,
    WebsiteResponse,
    WebsiteSummary,
    WebsiteListResponse
)
from uptime_monitor.schemas.stats import (
    UptimeStatsResponse,
    UptimeSeriesResponse,
    IncidentsResponse,
    HealthResponse
)

__all__ = [
    "WebsiteCreate",
    "WebsiteResponse",
    "WebsiteSummary",
    "WebsiteListResponse",
    "UptimeStatsResponse",
    "UptimeSeriesResponse",
    "IncidentsResponse",
    "HealthResponse",
]
