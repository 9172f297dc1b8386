"""Scheduler for periodic website probing using APScheduler."""

import asyncio
import time
from dataclasses import dataclass, asdict
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from uptime_monitor.core.exceptions import ConflictError, NotFoundError, TransientError
from uptime_monitor.core.metrics import MetricsCollector
from uptime_monitor.core.prober import Outcome, Prober
from uptime_monitor.core.store import UptimeStore
from uptime_monitor.models.website import Website
from uptime_monitor.utils.clock import truncate_to_minute, utcnow
from uptime_monitor.utils.logger import get_logger

logger = get_logger(__name__)

TICK_JOB_ID = "probe_tick"


@dataclass
class TickReport:
    """Summary of one probing round."""
    started_at: datetime
    websites: int = 0
    recorded: int = 0
    failed_probes: int = 0
    record_errors: int = 0
    abandoned: bool = False
    duration: float = 0.0

    def to_dict(self) -> dict:
        data = asdict(self)
        data["started_at"] = self.started_at.isoformat()
        data["duration"] = round(self.duration, 3)
        return data


class MonitoringScheduler:
    """
    Drives periodic probing of every registered website.

    One APScheduler interval job fires a tick every ``interval`` seconds,
    starting on the next minute boundary. Ticks never overlap
    (``max_instances=1``); a tick snapshots the website list, probes all
    websites with at most ``max_concurrent`` requests in flight and writes
    each outcome back to the store.
    """

    def __init__(
        self,
        store: UptimeStore,
        prober: Prober,
        interval: int = 60,
        timeout: float = 10,
        max_concurrent: int = 10,
        shutdown_grace: float = 10.0,
        probe_deadline_buffer: float = 2.0,
        metrics: Optional[MetricsCollector] = None,
        clock: Callable[[], datetime] = utcnow
    ):
        """
        Initialize monitoring scheduler.

        Args:
            store: Website and log store
            prober: Prober used for every website
            interval: Seconds between ticks
            timeout: Per-probe timeout in seconds
            max_concurrent: Maximum probes in flight within one tick
            shutdown_grace: Seconds an in-flight tick may run after ``stop``
            probe_deadline_buffer: Extra seconds before a probe is abandoned
            metrics: Metrics collector
            clock: Source of the current time (aware UTC)
        """
        if interval < 60 or interval % 60 != 0:
            raise ValueError("interval must be a positive multiple of 60 seconds")

        self.store = store
        self.prober = prober
        self.interval = interval
        self.timeout = timeout
        self.max_concurrent = max_concurrent
        self.shutdown_grace = shutdown_grace
        self.probe_deadline_buffer = probe_deadline_buffer
        self.metrics = metrics or MetricsCollector()
        self.clock = clock
        self.scheduler = AsyncIOScheduler(timezone=timezone.utc)
        self.last_report: Optional[TickReport] = None
        self._active_tick: Optional[asyncio.Task] = None

        logger.info(
            "Monitoring scheduler initialized",
            extra={
                "interval": interval,
                "timeout": timeout,
                "max_concurrent": max_concurrent
            }
        )

    @property
    def running(self) -> bool:
        return self.scheduler.running

    async def start(self) -> None:
        """Open the prober session and schedule the tick job."""
        if self.running:
            logger.warning("Monitoring scheduler already running")
            return

        await self.prober.start()

        first_run = truncate_to_minute(self.clock()) + timedelta(minutes=1)
        self.scheduler.add_job(
            self._scheduled_tick,
            trigger=IntervalTrigger(
                seconds=self.interval,
                start_date=first_run,
                timezone=timezone.utc
            ),
            id=TICK_JOB_ID,
            name="Probe all websites",
            max_instances=1,
            coalesce=True,
            misfire_grace_time=self.interval,
            replace_existing=True
        )
        self.scheduler.start()

        logger.info(
            "Monitoring scheduler started",
            extra={"first_run": first_run.isoformat(), "interval": self.interval}
        )

    async def stop(self) -> None:
        """
        Stop scheduling and wait for the in-flight tick.

        The running tick gets ``shutdown_grace`` seconds to finish and is
        cancelled afterwards. Outcomes already recorded stay recorded; a
        partial tick leaves no partial rows because each record is its
        own transaction.
        """
        if not self.running:
            return

        logger.info("Stopping monitoring scheduler")

        # Pausing first keeps the executor from cancelling the tick on shutdown
        self.scheduler.pause()

        tick = self._active_tick
        if tick is not None and not tick.done():
            done, _ = await asyncio.wait({tick}, timeout=self.shutdown_grace)
            if not done:
                logger.warning(
                    "Abandoning in-flight tick",
                    extra={"shutdown_grace": self.shutdown_grace}
                )
                tick.cancel()
                await asyncio.wait({tick})

        self.scheduler.shutdown(wait=False)
        await self.prober.close()

        logger.info("Monitoring scheduler stopped")

    def get_job_status(self) -> Optional[dict]:
        """Return the tick job's next run time, or None when not scheduled."""
        job = self.scheduler.get_job(TICK_JOB_ID)
        if not job:
            return None

        return {
            "job_id": job.id,
            "name": job.name,
            "next_run_time": job.next_run_time.isoformat() if job.next_run_time else None,
            "trigger": str(job.trigger),
        }

    async def _scheduled_tick(self) -> None:
        self._active_tick = asyncio.current_task()
        try:
            await self.run_tick()
        except Exception as e:
            logger.exception(
                "Error during scheduled tick",
                extra={"error": str(e)}
            )
        finally:
            self._active_tick = None

    async def run_tick(self) -> TickReport:
        """
        Probe every registered website once.

        Websites registered while the tick runs are picked up by the next
        tick. A store outage while listing websites abandons the tick; the
        next interval is the retry.

        Returns:
            TickReport: Counts for this tick
        """
        started_at = self.clock()
        start_time = time.monotonic()
        report = TickReport(started_at=started_at)

        try:
            websites = await self.store.list_websites()
        except TransientError as e:
            report.abandoned = True
            logger.error(
                "Tick abandoned, website list unavailable",
                extra={"started_at": started_at.isoformat(), "error": str(e)}
            )
            return self._finish(report, start_time)

        report.websites = len(websites)
        semaphore = asyncio.Semaphore(self.max_concurrent)

        await asyncio.gather(*(
            self._probe_and_record(website, started_at, semaphore, report)
            for website in websites
        ))

        return self._finish(report, start_time)

    def _finish(self, report: TickReport, start_time: float) -> TickReport:
        report.duration = time.monotonic() - start_time
        self.last_report = report
        self.metrics.record_tick(report.abandoned, report.duration, report.websites)

        if not report.abandoned:
            logger.info("Tick completed", extra=report.to_dict())
        return report

    async def _probe_and_record(
        self,
        website: Website,
        started_at: datetime,
        semaphore: asyncio.Semaphore,
        report: TickReport
    ) -> None:
        async with semaphore:
            outcome = await self._probe_with_deadline(website)

        self.metrics.record_probe(outcome.succeeded, outcome.status, outcome.response_time)
        if not outcome.succeeded:
            report.failed_probes += 1
            logger.warning(
                "Website probe failed",
                extra={
                    "alias": website.alias,
                    "status": outcome.status,
                    "error": outcome.error_message
                }
            )

        try:
            await self.store.record_probe(website.alias, outcome.status, started_at)
            report.recorded += 1
        except ConflictError as e:
            report.record_errors += 1
            self.metrics.record_store_error("conflict")
            logger.warning(
                "Probe already recorded for this minute",
                extra={"alias": website.alias, "error": str(e)}
            )
        except NotFoundError:
            report.record_errors += 1
            self.metrics.record_store_error("not_found")
            logger.warning(
                "Website removed during tick",
                extra={"alias": website.alias}
            )
        except TransientError as e:
            report.record_errors += 1
            self.metrics.record_store_error("transient")
            logger.error(
                "Could not store probe outcome",
                extra={"alias": website.alias, "error": str(e)}
            )
        except Exception as e:
            report.record_errors += 1
            self.metrics.record_store_error("unexpected")
            logger.exception(
                "Unexpected error storing probe outcome",
                extra={"alias": website.alias, "error": str(e)}
            )

    async def _probe_with_deadline(self, website: Website) -> Outcome:
        deadline = self.timeout + self.probe_deadline_buffer
        try:
            return await asyncio.wait_for(
                self.prober.probe(website.url, self.timeout),
                timeout=deadline
            )
        except asyncio.TimeoutError:
            logger.error(
                "Probe exceeded hard deadline",
                extra={"alias": website.alias, "deadline": deadline}
            )
            return Outcome.unreachable(f"Probe exceeded {deadline}s deadline")
