"""Pydantic schemas for statistics endpoints."""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel


class UptimeStatsResponse(BaseModel):
    """Schema for uptime statistics response."""
    alias: str
    period: str
    uptime_percentage: float
    total_checks: int
    successful_checks: int
    failed_checks: int
    last_check: Optional[datetime] = None


class SeriesPointResponse(BaseModel):
    """Schema for one bucket of an uptime series."""
    time: datetime
    total_checks: int
    uptime_percentage: Optional[float] = None

    model_config = {"from_attributes": True}


class UptimeSeriesResponse(BaseModel):
    """Schema for hourly or daily uptime series."""
    alias: str
    bucket: str
    points: List[SeriesPointResponse]


class IncidentResponse(BaseModel):
    """Schema for one failed probe."""
    time: datetime
    status: Optional[int] = None


class IncidentsResponse(BaseModel):
    """Schema for failed probes of a website."""
    alias: str
    period: str
    incidents: List[IncidentResponse]
    total_incidents: int


class HealthResponse(BaseModel):
    """Schema for the service health check."""
    status: str
    version: str
    timestamp: str
    scheduler: str
    next_tick: Optional[str] = None
    last_tick: Optional[dict] = None
