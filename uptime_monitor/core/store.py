"""Persistence of websites and probe logs."""

from contextlib import contextmanager
from datetime import datetime
from typing import AsyncIterator, List, Optional

from sqlalchemy import select, delete
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine

from uptime_monitor.core.exceptions import ConflictError, NotFoundError, TransientError
from uptime_monitor.database.base import Base
from uptime_monitor.database.session import create_session_factory
from uptime_monitor.models.log import Log
from uptime_monitor.models.website import Website, ALIAS_MAX_LENGTH
from uptime_monitor.utils.clock import as_utc, truncate_to_minute
from uptime_monitor.utils.logger import get_logger

logger = get_logger(__name__)

# SMALLINT bounds of logs.status
STATUS_MIN = -32768
STATUS_MAX = 32767

FOREIGN_KEY_VIOLATION = "23503"


@contextmanager
def _storage_errors(operation: str):
    """Re-raise connectivity failures as ``TransientError``."""
    try:
        yield
    except IntegrityError:
        raise
    except (DBAPIError, OSError) as e:
        logger.error(
            "Storage operation failed",
            extra={"operation": operation, "error": str(e)}
        )
        raise TransientError(operation, str(e)) from e


def _is_foreign_key_violation(error: IntegrityError) -> bool:
    orig = error.orig
    if getattr(orig, "sqlstate", None) == FOREIGN_KEY_VIOLATION:
        return True
    return "FOREIGN KEY" in str(orig).upper()


def _validate_alias(alias: str) -> None:
    if not alias or len(alias) > ALIAS_MAX_LENGTH:
        raise ValueError(f"alias must be between 1 and {ALIAS_MAX_LENGTH} characters")


class UptimeStore:
    """
    Durable store for websites and their probe logs.

    Each public operation runs in its own session and transaction, so the
    store can be shared by the scheduler and concurrent request handlers.
    Uniqueness (one alias per website, one log per website and minute) is
    enforced by the database constraints.
    """

    def __init__(self, engine: AsyncEngine, stream_batch_size: int = 500):
        """
        Initialize store.

        Args:
            engine: Async engine (pooled for PostgreSQL)
            stream_batch_size: Rows fetched per round trip by ``query_logs``
        """
        self.engine = engine
        self.session_factory = create_session_factory(engine)
        self.stream_batch_size = stream_batch_size

    async def create_schema(self) -> None:
        """Create the tables if they do not exist yet."""
        with _storage_errors("create_schema"):
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all, checkfirst=True)

    async def register_website(self, url: str, alias: str) -> Website:
        """
        Register a website under a new alias.

        Args:
            url: Address to probe
            alias: Unique short name

        Returns:
            Website: The stored website

        Raises:
            ConflictError: If the alias is already registered
            TransientError: If the database is unavailable
        """
        _validate_alias(alias)

        with _storage_errors("register_website"):
            async with self.session_factory() as session:
                website = Website(url=url, alias=alias)
                session.add(website)
                try:
                    await session.commit()
                except IntegrityError as e:
                    await session.rollback()
                    raise ConflictError(f"Website alias '{alias}' already exists", alias) from e

        logger.info(
            "Registered website",
            extra={"website_id": website.id, "alias": alias, "url": url}
        )
        return website

    async def list_websites(self) -> List[Website]:
        """Return all websites in registration order."""
        with _storage_errors("list_websites"):
            async with self.session_factory() as session:
                result = await session.execute(select(Website).order_by(Website.id))
                return list(result.scalars().all())

    async def get_website(self, alias: str) -> Website:
        """
        Get a website by alias.

        Raises:
            NotFoundError: If no website has this alias
        """
        with _storage_errors("get_website"):
            async with self.session_factory() as session:
                result = await session.execute(select(Website).where(Website.alias == alias))
                website = result.scalar_one_or_none()

        if website is None:
            raise NotFoundError(alias)
        return website

    async def delete_website(self, alias: str) -> int:
        """
        Delete a website together with all of its logs.

        The schema declares no cascade, so the logs are removed first,
        inside the same transaction.

        Returns:
            int: Number of logs deleted

        Raises:
            NotFoundError: If no website has this alias
        """
        with _storage_errors("delete_website"):
            async with self.session_factory() as session:
                async with session.begin():
                    website_id = await session.scalar(
                        select(Website.id).where(Website.alias == alias)
                    )
                    if website_id is None:
                        raise NotFoundError(alias)

                    logs_result = await session.execute(
                        delete(Log).where(Log.website_alias == alias)
                    )
                    await session.execute(delete(Website).where(Website.id == website_id))

        deleted_logs = logs_result.rowcount or 0
        logger.info(
            "Deleted website",
            extra={"alias": alias, "deleted_logs": deleted_logs}
        )
        return deleted_logs

    async def record_probe(
        self,
        alias: str,
        status: Optional[int],
        timestamp: datetime
    ) -> Log:
        """
        Append the outcome of one probe.

        Args:
            alias: Alias of the probed website
            status: HTTP status code, or None if no response was received
            timestamp: Probe time; stored truncated to the minute (UTC)

        Returns:
            Log: The stored log row

        Raises:
            NotFoundError: If the alias is unknown
            ConflictError: If a log already exists for this website and minute
            TransientError: If the database is unavailable
        """
        if status is not None and not (STATUS_MIN <= status <= STATUS_MAX):
            raise ValueError(f"status {status} does not fit in a SMALLINT column")

        created_at = truncate_to_minute(timestamp)

        with _storage_errors("record_probe"):
            async with self.session_factory() as session:
                website_id = await session.scalar(
                    select(Website.id).where(Website.alias == alias)
                )
                if website_id is None:
                    raise NotFoundError(alias)

                log = Log(website_alias=alias, status=status, created_at=created_at)
                session.add(log)
                try:
                    await session.commit()
                except IntegrityError as e:
                    await session.rollback()
                    if _is_foreign_key_violation(e):
                        # Website deleted between the lookup and the insert
                        raise NotFoundError(alias) from e
                    raise ConflictError(
                        f"A log for '{alias}' already exists at {created_at.isoformat()}",
                        alias
                    ) from e

        logger.debug(
            "Recorded probe",
            extra={"alias": alias, "status": status, "created_at": created_at.isoformat()}
        )
        return log

    async def query_logs(
        self,
        alias: str,
        since: datetime,
        until: datetime
    ) -> AsyncIterator[Log]:
        """
        Stream the logs of a website with ``since <= created_at <= until``.

        Rows are fetched in batches and yielded oldest first. Every call
        starts a fresh query, so the sequence can be iterated again.

        Example:
            ```python
            async for log in store.query_logs("site-a", since, until):
                print(log.created_at, log.status)
            ```
        """
        statement = (
            select(Log)
            .where(
                Log.website_alias == alias,
                Log.created_at >= as_utc(since),
                Log.created_at <= as_utc(until),
            )
            .order_by(Log.created_at)
            .execution_options(yield_per=self.stream_batch_size)
        )

        with _storage_errors("query_logs"):
            async with self.session_factory() as session:
                result = await session.stream_scalars(statement)
                async for log in result:
                    yield log
