"""Uptime aggregation over stored probe logs."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Union

from uptime_monitor.core.exceptions import NoDataError
from uptime_monitor.core.prober import DEFAULT_SUCCESS_THRESHOLD, is_success
from uptime_monitor.core.store import UptimeStore
from uptime_monitor.models.log import Log
from uptime_monitor.utils.clock import as_utc, truncate_to, utcnow
from uptime_monitor.utils.logger import get_logger

logger = get_logger(__name__)

WINDOWS: Dict[str, timedelta] = {
    "24h": timedelta(hours=24),
    "30d": timedelta(days=30),
}

# bucket -> (bucket width, default number of buckets)
SERIES_BUCKETS: Dict[str, tuple] = {
    "hour": (timedelta(hours=1), 24),
    "day": (timedelta(days=1), 30),
}


@dataclass
class WindowStats:
    """Counts of the logs of one website within ``[since, until]``."""
    alias: str
    since: datetime
    until: datetime
    total_checks: int = 0
    successful_checks: int = 0
    last_check: Optional[datetime] = None

    @property
    def failed_checks(self) -> int:
        return self.total_checks - self.successful_checks

    @property
    def uptime_percentage(self) -> Optional[float]:
        if self.total_checks == 0:
            return None
        return self.successful_checks / self.total_checks * 100


@dataclass
class SeriesPoint:
    """Uptime of one hour or day bucket; ``uptime_percentage`` is None without logs."""
    time: datetime
    total_checks: int
    uptime_percentage: Optional[float]


class UptimeAggregator:
    """
    Reduces stored logs into uptime percentages.

    Only observed samples count: when the scheduler was down for part of
    a window, the percentage covers the logs that exist and missing
    minutes are neither extrapolated nor counted as downtime.
    """

    def __init__(
        self,
        store: UptimeStore,
        success_threshold: int = DEFAULT_SUCCESS_THRESHOLD,
        clock: Callable[[], datetime] = utcnow
    ):
        """
        Initialize uptime aggregator.

        Args:
            store: Store to read logs from
            success_threshold: Status codes below this count as up
            clock: Source of the current time (aware UTC)
        """
        self.store = store
        self.success_threshold = success_threshold
        self.clock = clock

    @staticmethod
    def resolve_window(window: Union[str, timedelta]) -> timedelta:
        """Accept a named window ("24h", "30d") or an explicit timedelta."""
        if isinstance(window, timedelta):
            if window <= timedelta(0):
                raise ValueError("window must be positive")
            return window
        if window not in WINDOWS:
            raise ValueError(f"Invalid window: {window}. Use one of: {list(WINDOWS.keys())}")
        return WINDOWS[window]

    async def uptime_percent(
        self,
        alias: str,
        window: Union[str, timedelta] = "24h",
        now: Optional[datetime] = None
    ) -> float:
        """
        Uptime percentage of a website over the trailing ``window``.

        Args:
            alias: Website alias
            window: "24h", "30d" or a timedelta
            now: End of the window (defaults to the clock)

        Returns:
            float: Percentage in [0, 100], not rounded

        Raises:
            NotFoundError: If the alias is unknown
            NoDataError: If no logs exist in the window

        Example:
            ```python
            aggregator = UptimeAggregator(store)
            uptime = await aggregator.uptime_percent("site-a", "30d")
            print(f"30-day uptime: {uptime:.2f}%")
            ```
        """
        until = as_utc(now) if now else self.clock()
        since = until - self.resolve_window(window)
        return await self.uptime_between(alias, since, until)

    async def uptime_between(self, alias: str, since: datetime, until: datetime) -> float:
        """Uptime percentage over the inclusive range ``[since, until]``."""
        stats = await self._reduce(alias, since, until)

        if stats.total_checks == 0:
            raise NoDataError(alias)

        logger.debug(
            "Calculated uptime",
            extra={
                "alias": alias,
                "since": stats.since.isoformat(),
                "until": stats.until.isoformat(),
                "total_checks": stats.total_checks,
                "successful_checks": stats.successful_checks
            }
        )
        return stats.uptime_percentage

    async def window_stats(
        self,
        alias: str,
        window: Union[str, timedelta] = "24h",
        now: Optional[datetime] = None
    ) -> WindowStats:
        """
        Check counts over the trailing ``window``.

        Unlike ``uptime_percent`` an empty window is not an error here;
        the returned stats then have ``uptime_percentage`` None.
        """
        until = as_utc(now) if now else self.clock()
        since = until - self.resolve_window(window)
        return await self._reduce(alias, since, until)

    async def uptime_series(
        self,
        alias: str,
        bucket: str = "hour",
        count: Optional[int] = None,
        now: Optional[datetime] = None
    ) -> List[SeriesPoint]:
        """
        Uptime per hour or per day, oldest bucket first.

        Every bucket of the range is present; buckets without logs carry
        ``uptime_percentage=None`` so gaps stay visible.

        Args:
            alias: Website alias
            bucket: "hour" or "day"
            count: Number of buckets (24 hours or 30 days by default)
            now: Time inside the newest bucket (defaults to the clock)
        """
        if bucket not in SERIES_BUCKETS:
            raise ValueError(f"Invalid bucket: {bucket}. Use one of: {list(SERIES_BUCKETS.keys())}")

        step, default_count = SERIES_BUCKETS[bucket]
        count = count or default_count
        until = as_utc(now) if now else self.clock()
        first = truncate_to(until, bucket) - step * (count - 1)

        await self.store.get_website(alias)

        totals: Dict[datetime, List[int]] = {}
        async for log in self.store.query_logs(alias, first, until):
            counts = totals.setdefault(truncate_to(log.created_at, bucket), [0, 0])
            counts[0] += 1
            if is_success(log.status, self.success_threshold):
                counts[1] += 1

        series = []
        for i in range(count):
            start = first + step * i
            total, successes = totals.get(start, (0, 0))
            series.append(SeriesPoint(
                time=start,
                total_checks=total,
                uptime_percentage=successes / total * 100 if total else None
            ))
        return series

    async def incidents(
        self,
        alias: str,
        window: Union[str, timedelta] = "24h",
        now: Optional[datetime] = None
    ) -> List[Log]:
        """Failed probes within the trailing ``window``, newest first."""
        until = as_utc(now) if now else self.clock()
        since = until - self.resolve_window(window)

        await self.store.get_website(alias)

        failures = [
            log async for log in self.store.query_logs(alias, since, until)
            if not is_success(log.status, self.success_threshold)
        ]
        failures.reverse()
        return failures

    async def _reduce(self, alias: str, since: datetime, until: datetime) -> WindowStats:
        # Raises NotFoundError before an empty window could be mistaken for NoData
        await self.store.get_website(alias)

        stats = WindowStats(alias=alias, since=as_utc(since), until=as_utc(until))
        async for log in self.store.query_logs(alias, since, until):
            stats.total_checks += 1
            if is_success(log.status, self.success_threshold):
                stats.successful_checks += 1
            stats.last_check = log.created_at
        return stats
