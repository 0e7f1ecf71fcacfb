"""Prometheus metrics collection for the sweep worker."""

from typing import Optional

from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
    CollectorRegistry,
    generate_latest,
    CONTENT_TYPE_LATEST
)

from uptime_monitor.utils.logger import get_logger

logger = get_logger(__name__)

__all__ = ["MetricsCollector", "CONTENT_TYPE_LATEST"]


class MetricsCollector:
    """Prometheus metrics collector for Uptime Monitor."""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        """
        Initialize metrics collector.

        Args:
            registry: Optional custom registry (a private one is created otherwise)
        """
        self.registry = registry or CollectorRegistry()
        self._setup_metrics()

    def _setup_metrics(self) -> None:
        # Probes
        self.probes_total = Counter(
            'uptime_monitor_probes_total',
            'Total number of probes performed',
            ['status'],
            registry=self.registry
        )

        self.probe_latency = Histogram(
            'uptime_monitor_probe_latency_seconds',
            'Probe round-trip time in seconds',
            registry=self.registry
        )

        self.status_transitions_total = Counter(
            'uptime_monitor_status_transitions_total',
            'Number of detected status changes',
            ['new_status'],
            registry=self.registry
        )

        # Notifications
        self.notifications_total = Counter(
            'uptime_monitor_notifications_total',
            'Notification delivery attempts',
            ['channel', 'status'],
            registry=self.registry
        )

        # Storage
        self.storage_errors_total = Counter(
            'uptime_monitor_storage_errors_total',
            'Failed store operations',
            ['operation'],
            registry=self.registry
        )

        # Sweeps
        self.sweeps_total = Counter(
            'uptime_monitor_sweeps_total',
            'Completed sweeps',
            registry=self.registry
        )

        self.active_checks = Gauge(
            'uptime_monitor_active_checks',
            'Active checks loaded by the last sweep',
            registry=self.registry
        )

    def record_probe(self, status: str, latency_ms: Optional[int]) -> None:
        self.probes_total.labels(status=status).inc()
        if latency_ms is not None:
            self.probe_latency.observe(latency_ms / 1000)

    def record_transition(self, new_status: str) -> None:
        self.status_transitions_total.labels(new_status=new_status).inc()

    def record_notification(self, channel: str, status: str) -> None:
        """
        Record a notification attempt.

        Args:
            channel: telegram, webhook or email
            status: sent or failed
        """
        self.notifications_total.labels(channel=channel, status=status).inc()

    def record_storage_error(self, operation: str) -> None:
        self.storage_errors_total.labels(operation=operation).inc()

    def record_sweep(self, active_checks: int) -> None:
        self.sweeps_total.inc()
        self.active_checks.set(active_checks)

    def generate_metrics(self) -> bytes:
        """Prometheus text exposition of the registry."""
        return generate_latest(self.registry)
