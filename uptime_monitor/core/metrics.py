"""Prometheus metrics collection for the probing engine."""

from typing import Optional

from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
    CollectorRegistry,
    generate_latest,
    CONTENT_TYPE_LATEST
)


class MetricsCollector:
    """Prometheus metrics collector for Uptime Monitor."""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        """
        Initialize metrics collector.

        Args:
            registry: Optional custom registry (tests use a fresh one each)
        """
        self.registry = registry or CollectorRegistry()
        self._setup_metrics()

    def _setup_metrics(self) -> None:
        self.probes_total = Counter(
            'uptime_monitor_probes_total',
            'Total number of probes performed',
            ['outcome'],
            registry=self.registry
        )

        self.probe_duration = Histogram(
            'uptime_monitor_probe_duration_seconds',
            'Probe duration in seconds',
            registry=self.registry
        )

        self.record_errors_total = Counter(
            'uptime_monitor_record_errors_total',
            'Probe outcomes that could not be stored',
            ['reason'],
            registry=self.registry
        )

        self.ticks_total = Counter(
            'uptime_monitor_ticks_total',
            'Scheduler ticks by result',
            ['result'],
            registry=self.registry
        )

        self.tick_duration = Histogram(
            'uptime_monitor_tick_duration_seconds',
            'Duration of a full probing tick in seconds',
            buckets=(0.5, 1, 2.5, 5, 10, 20, 30, 60, 120),
            registry=self.registry
        )

        self.websites = Gauge(
            'uptime_monitor_websites',
            'Number of websites in the last tick snapshot',
            registry=self.registry
        )

    def record_probe(self, succeeded: bool, status: Optional[int], duration: Optional[float]) -> None:
        """Count one probe outcome."""
        if succeeded:
            outcome = "up"
        elif status is None:
            outcome = "unreachable"
        else:
            outcome = "down"
        self.probes_total.labels(outcome=outcome).inc()
        if duration is not None:
            self.probe_duration.observe(duration)

    def record_store_error(self, reason: str) -> None:
        """Count an outcome the store rejected or could not persist."""
        self.record_errors_total.labels(reason=reason).inc()

    def record_tick(self, abandoned: bool, duration: float, websites: int) -> None:
        """Count a finished tick."""
        self.ticks_total.labels(result="abandoned" if abandoned else "completed").inc()
        self.tick_duration.observe(duration)
        if not abandoned:
            self.websites.set(websites)

    def generate(self) -> bytes:
        """Render all metrics in the Prometheus text format."""
        return generate_latest(self.registry)

    @property
    def content_type(self) -> str:
        return CONTENT_TYPE_LATEST
