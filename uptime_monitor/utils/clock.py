"""UTC time helpers shared by the store, scheduler and aggregator."""

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime (naive values are taken as UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def truncate_to_minute(value: datetime) -> datetime:
    """Drop seconds and microseconds, matching ``date_trunc('minute', ...)``."""
    return as_utc(value).replace(second=0, microsecond=0)


def truncate_to(value: datetime, bucket: str) -> datetime:
    """
    Truncate ``value`` to the start of its hour or day.

    Args:
        value: Datetime to truncate
        bucket: "hour" or "day"

    Returns:
        datetime: Aware UTC start of the bucket
    """
    value = truncate_to_minute(value).replace(minute=0)
    if bucket == "day":
        return value.replace(hour=0)
    if bucket != "hour":
        raise ValueError(f"Invalid bucket: {bucket}. Use 'hour' or 'day'")
    return value
