"""Health check and metrics endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter, Request, Response

from uptime_monitor import __version__
from uptime_monitor.schemas.stats import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """
    Health check endpoint.

    Reports whether the scheduler is running and how the last tick went.
    """
    scheduler = request.app.state.scheduler
    job = scheduler.get_job_status() if scheduler.running else None
    last_report = scheduler.last_report

    return HealthResponse(
        status="healthy",
        version=__version__,
        timestamp=datetime.now(timezone.utc).isoformat(),
        scheduler="running" if scheduler.running else "stopped",
        next_tick=job["next_run_time"] if job else None,
        last_tick=last_report.to_dict() if last_report else None
    )


async def metrics(request: Request) -> Response:
    """Prometheus metrics exposition."""
    collector = request.app.state.metrics
    return Response(content=collector.generate(), media_type=collector.content_type)
