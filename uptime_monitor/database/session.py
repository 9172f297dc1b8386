"""Database engine and session factory with async support."""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import AsyncAdaptedQueuePool, NullPool

from uptime_monitor.config import DatabaseConfig


def create_engine_from_config(config: DatabaseConfig) -> AsyncEngine:
    """
    Create the async engine for the configured database.

    SQLite gets a ``NullPool`` (connections are created on demand so
    concurrent callers do not serialize on a single connection);
    PostgreSQL gets a real connection pool shared by the scheduler and
    the request handlers.

    Args:
        config: Database configuration

    Returns:
        AsyncEngine: Configured engine
    """
    if config.url.startswith("sqlite"):
        pool_class = NullPool
        pool_kwargs = {}
    else:
        pool_class = AsyncAdaptedQueuePool
        pool_kwargs = {
            "pool_size": config.pool_size,
            "max_overflow": config.max_overflow,
            "pool_pre_ping": config.pool_pre_ping,
            "pool_recycle": 3600,  # Recycle connections after 1 hour
        }

    return create_async_engine(
        config.url,
        echo=config.echo,
        poolclass=pool_class,
        **pool_kwargs
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create the session factory bound to ``engine``."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
