"""Custom column types."""

from sqlalchemy import DateTime
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.expression import FunctionElement
from sqlalchemy.types import TypeDecorator

from uptime_monitor.utils.clock import as_utc


class UTCDateTime(TypeDecorator):
    """
    ``timestamptz`` column that always round-trips aware UTC datetimes.

    SQLite has no timezone support and hands back naive values; those are
    stored in UTC so the tzinfo is re-attached on the way out.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return as_utc(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return as_utc(value)


class minute_now(FunctionElement):
    """
    Server default for ``logs.created_at``: the current minute.

    Renders ``date_trunc('minute', now())`` on PostgreSQL; other
    backends fall back to ``CURRENT_TIMESTAMP``.
    """

    type = DateTime(timezone=True)
    name = "minute_now"
    inherit_cache = True


@compiles(minute_now)
def _compile_minute_now(element, compiler, **kw):
    return "CURRENT_TIMESTAMP"


@compiles(minute_now, "postgresql")
def _compile_minute_now_postgresql(element, compiler, **kw):
    return "date_trunc('minute', now())"
