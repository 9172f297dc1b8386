"""Pytest configuration and fixtures."""

import asyncio
from datetime import datetime, timezone
from typing import AsyncGenerator, Dict, Optional, Union

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool

from uptime_monitor.config import Config, DatabaseConfig, LoggingConfig
from uptime_monitor.core.aggregator import UptimeAggregator
from uptime_monitor.core.prober import Prober
from uptime_monitor.core.rate_limiter import limiter
from uptime_monitor.core.store import UptimeStore
from uptime_monitor.models.website import Website

# Fixed reference minute used by time-dependent tests
T0 = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


class FakeTransport:
    """
    In-process replacement for the HTTP request made by ``Prober``.

    ``responses`` maps a URL to a status code, an exception instance to
    raise, or a float number of seconds to hang before answering 200.
    """

    def __init__(self, responses: Optional[Dict[str, Union[int, float, BaseException]]] = None):
        self.responses = responses or {}
        self.calls = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def __call__(self, url: str, timeout: float) -> int:
        self.calls.append(url)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            response = self.responses.get(url, 200)
            if isinstance(response, BaseException):
                raise response
            if isinstance(response, float):
                await asyncio.sleep(response)
                return 200
            # Yield so concurrent probes overlap
            await asyncio.sleep(0.01)
            return response
        finally:
            self.in_flight -= 1


@pytest.fixture
async def db_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """File-backed SQLite engine, one database per test."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'uptime_test.db'}",
        poolclass=NullPool,
        echo=False
    )
    yield engine
    await engine.dispose()


@pytest.fixture
async def store(db_engine) -> UptimeStore:
    """Store with the schema created."""
    store = UptimeStore(db_engine)
    await store.create_schema()
    return store


@pytest.fixture
def aggregator(store) -> UptimeAggregator:
    """Aggregator whose clock is pinned to two minutes after T0."""
    return UptimeAggregator(store, clock=lambda: T0.replace(minute=2))


@pytest.fixture
async def site_a(store) -> Website:
    """Sample website."""
    return await store.register_website("https://example.com", "site-a")


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def test_config() -> Config:
    """Create test configuration."""
    return Config(
        database=DatabaseConfig(url="sqlite+aiosqlite:///:memory:"),
        logging=LoggingConfig(file=None, console=False)
    )


@pytest.fixture
def test_app(test_config, db_engine, store, fake_transport):
    """Application wired to the test database and a fake transport."""
    from uptime_monitor.main import create_app

    limiter.reset()
    return create_app(
        test_config,
        engine=db_engine,
        prober=Prober(transport=fake_transport)
    )


@pytest.fixture
async def client(test_app) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client for the application (lifespan not started)."""
    async with AsyncClient(transport=ASGITransport(app=test_app), base_url="http://test") as client:
        yield client
