"""FastAPI application entry point for Uptime Monitor."""

import uuid
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine

from uptime_monitor import __version__
from uptime_monitor.api import health, stats, websites
from uptime_monitor.config import Config, load_config
from uptime_monitor.core.aggregator import UptimeAggregator
from uptime_monitor.core.exceptions import ConflictError, NoDataError, NotFoundError, TransientError
from uptime_monitor.core.metrics import MetricsCollector
from uptime_monitor.core.prober import Prober
from uptime_monitor.core.rate_limiter import limiter
from uptime_monitor.core.scheduler import MonitoringScheduler
from uptime_monitor.core.store import UptimeStore
from uptime_monitor.database.session import create_engine_from_config
from uptime_monitor.utils.logger import get_logger, setup_logging
from uptime_monitor.utils.retry import retry_with_backoff

logger = get_logger(__name__)


def _ensure_sqlite_directory(database_url: str) -> None:
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Lifespan context manager for FastAPI application.

    Creates the schema (retrying while the database boots), starts the
    scheduler and shuts everything down in reverse order.
    """
    config: Config = app.state.config

    setup_logging(
        level=config.logging.level,
        log_format=config.logging.format,
        log_file=config.logging.file,
        console=config.logging.console
    )
    logger.info("Starting Uptime Monitor application")

    _ensure_sqlite_directory(config.database.url)

    store: UptimeStore = app.state.store
    await retry_with_backoff(store.create_schema, exceptions=(TransientError,))

    scheduler: MonitoringScheduler = app.state.scheduler
    await scheduler.start()

    logger.info(
        "Uptime Monitor started successfully",
        extra={
            "version": __version__,
            "interval": config.monitoring.interval,
            "max_concurrent": config.monitoring.max_concurrent,
            "api_port": config.api.port
        }
    )

    yield

    logger.info("Shutting down Uptime Monitor application")
    await scheduler.stop()
    await store.engine.dispose()
    logger.info("Uptime Monitor shut down successfully")


def _error_response(request: Request, status_code: int, detail: str) -> JSONResponse:
    request_id = getattr(request.state, "request_id", "unknown")
    return JSONResponse(
        status_code=status_code,
        content={"detail": detail, "request_id": request_id},
        headers={"X-Request-ID": request_id}
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Map engine errors to HTTP responses."""

    @app.exception_handler(ConflictError)
    async def conflict_handler(request: Request, exc: ConflictError):
        return _error_response(request, 409, exc.message)

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return _error_response(request, 404, exc.message)

    @app.exception_handler(NoDataError)
    async def no_data_handler(request: Request, exc: NoDataError):
        return _error_response(request, 422, exc.message)

    @app.exception_handler(TransientError)
    async def transient_handler(request: Request, exc: TransientError):
        logger.error(
            "Storage unavailable",
            extra={"path": request.url.path, "error": exc.message}
        )
        response = _error_response(request, 503, "Storage temporarily unavailable")
        response.headers["Retry-After"] = "30"
        return response

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
        logger.warning(
            "Rate limit exceeded",
            extra={"path": request.url.path, "client": get_remote_address(request)}
        )
        response = _error_response(request, 429, "Rate limit exceeded. Please try again later.")
        response.headers["Retry-After"] = "60"
        return response

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception(
            "Unhandled exception",
            extra={
                "request_id": getattr(request.state, "request_id", "unknown"),
                "path": request.url.path,
                "method": request.method,
                "error": str(exc)
            }
        )
        return _error_response(request, 500, "Internal server error")


def create_app(
    config: Optional[Config] = None,
    engine: Optional[AsyncEngine] = None,
    prober: Optional[Prober] = None
) -> FastAPI:
    """
    Build the application and its engine components.

    Args:
        config: Configuration (loaded from YAML/environment when omitted)
        engine: Database engine override (tests pass an in-memory one)
        prober: Prober override

    Returns:
        FastAPI: Application whose lifespan runs the scheduler
    """
    config = config or load_config()
    engine = engine or create_engine_from_config(config.database)
    monitoring = config.monitoring

    metrics_collector = MetricsCollector()
    store = UptimeStore(engine)
    aggregator = UptimeAggregator(store, success_threshold=monitoring.success_threshold)
    prober = prober or Prober(
        success_threshold=monitoring.success_threshold,
        max_connections=monitoring.max_concurrent
    )
    scheduler = MonitoringScheduler(
        store,
        prober,
        interval=monitoring.interval,
        timeout=monitoring.timeout,
        max_concurrent=monitoring.max_concurrent,
        shutdown_grace=monitoring.shutdown_grace,
        metrics=metrics_collector
    )

    app = FastAPI(
        title="Uptime Monitor",
        description="Periodic website probing with 24-hour and 30-day uptime analytics",
        version=__version__,
        lifespan=lifespan
    )
    app.state.config = config
    app.state.store = store
    app.state.aggregator = aggregator
    app.state.scheduler = scheduler
    app.state.metrics = metrics_collector
    app.state.limiter = limiter

    if config.api.cors.enabled:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.api.cors.allow_origins,
            allow_methods=config.api.cors.allow_methods,
            allow_headers=config.api.cors.allow_headers,
        )

    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    register_exception_handlers(app)

    app.include_router(health.router, tags=["Health"])
    app.include_router(websites.router, prefix="/api/v1", tags=["Websites"])
    app.include_router(stats.router, prefix="/api/v1", tags=["Statistics"])
    if config.prometheus.enabled:
        app.add_api_route(config.prometheus.path, health.metrics, include_in_schema=False)

    @app.get("/")
    async def root():
        """Root endpoint with API information."""
        return {
            "name": "Uptime Monitor",
            "version": __version__,
            "status": "running",
            "docs": "/docs",
            "health": "/health"
        }

    return app


def run() -> None:
    """Console entry point: serve the application with uvicorn."""
    import uvicorn

    config = load_config()
    uvicorn.run(
        "uptime_monitor.main:create_app",
        factory=True,
        host=config.api.host,
        port=config.api.port,
        log_level=config.logging.level.lower()
    )


if __name__ == "__main__":
    run()
