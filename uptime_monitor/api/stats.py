"""Statistics and analytics API routes."""

from fastapi import APIRouter, Depends, Query, Request

from uptime_monitor.api.dependencies import get_aggregator
from uptime_monitor.core.aggregator import UptimeAggregator
from uptime_monitor.core.exceptions import NoDataError
from uptime_monitor.core.rate_limiter import limiter
from uptime_monitor.schemas.stats import (
    UptimeStatsResponse,
    UptimeSeriesResponse,
    SeriesPointResponse,
    IncidentsResponse,
    IncidentResponse
)
from uptime_monitor.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.get("/stats/uptime/{alias}", response_model=UptimeStatsResponse)
@limiter.limit("200/minute")
async def get_uptime_stats(
    request: Request,
    alias: str,
    period: str = Query(default="24h", pattern="^(24h|30d)$"),
    aggregator: UptimeAggregator = Depends(get_aggregator)
):
    """
    Get uptime statistics for a website.

    Args:
        alias: Website alias
        period: Time period (24h, 30d)
    """
    stats = await aggregator.window_stats(alias, period)

    if stats.total_checks == 0:
        raise NoDataError(alias)

    logger.info(
        "Retrieved uptime stats",
        extra={
            "alias": alias,
            "period": period,
            "uptime": stats.uptime_percentage
        }
    )

    return UptimeStatsResponse(
        alias=alias,
        period=period,
        uptime_percentage=round(stats.uptime_percentage, 2),
        total_checks=stats.total_checks,
        successful_checks=stats.successful_checks,
        failed_checks=stats.failed_checks,
        last_check=stats.last_check
    )


@router.get("/stats/series/{alias}", response_model=UptimeSeriesResponse)
@limiter.limit("200/minute")
async def get_uptime_series(
    request: Request,
    alias: str,
    bucket: str = Query(default="hour", pattern="^(hour|day)$"),
    aggregator: UptimeAggregator = Depends(get_aggregator)
):
    """
    Get hourly (last 24 hours) or daily (last 30 days) uptime.

    Buckets without probes have a null percentage.
    """
    points = await aggregator.uptime_series(alias, bucket)

    return UptimeSeriesResponse(
        alias=alias,
        bucket=bucket,
        points=[
            SeriesPointResponse(
                time=point.time,
                total_checks=point.total_checks,
                uptime_percentage=(
                    round(point.uptime_percentage, 2)
                    if point.uptime_percentage is not None else None
                )
            )
            for point in points
        ]
    )


@router.get("/stats/incidents/{alias}", response_model=IncidentsResponse)
@limiter.limit("100/minute")
async def get_incidents(
    request: Request,
    alias: str,
    period: str = Query(default="24h", pattern="^(24h|30d)$"),
    aggregator: UptimeAggregator = Depends(get_aggregator)
):
    """Get failed probes of a website, newest first."""
    failures = await aggregator.incidents(alias, period)

    return IncidentsResponse(
        alias=alias,
        period=period,
        incidents=[IncidentResponse(time=log.created_at, status=log.status) for log in failures],
        total_incidents=len(failures)
    )
