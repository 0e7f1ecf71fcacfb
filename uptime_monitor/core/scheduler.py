"""Sweep scheduler: the background loop that probes every active check."""

import asyncio
from enum import Enum
from typing import Awaitable, Callable, List, Optional

from uptime_monitor.config import WorkerConfig
from uptime_monitor.core.errors import StorageError
from uptime_monitor.core.metrics import MetricsCollector
from uptime_monitor.core.notifications import AlertDispatcher
from uptime_monitor.core.probe import ProbeExecutor
from uptime_monitor.core.recorder import ResultRecorder
from uptime_monitor.core.status_tracker import decide
from uptime_monitor.database.base import utcnow
from uptime_monitor.database.store import CheckStore
from uptime_monitor.models.check import Check
from uptime_monitor.utils.logger import get_logger

logger = get_logger(__name__)


class SweepState(Enum):
    """Where the sweep loop currently is."""
    STOPPED = "stopped"
    LOADING = "loading"
    PROBING = "probing"
    SLEEPING = "sleeping"


class SweepScheduler:
    """
    Runs sweeps on a fixed global cadence.

    Each sweep loads the active checks and runs probe, status decision,
    recording and alerting for every one of them. A failure in one check's
    pipeline is logged and the sweep moves on. A failure to load the check
    list is the only retried condition: the loop backs off and loads again.

    Per-check interval_seconds is not used to stagger probes; every active
    check is probed once per sweep.
    """

    def __init__(
        self,
        config: WorkerConfig,
        store: CheckStore,
        probe_executor: ProbeExecutor,
        recorder: ResultRecorder,
        dispatcher: AlertDispatcher,
        metrics: Optional[MetricsCollector] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        """
        Initialize sweep scheduler.

        Args:
            config: Worker configuration
            store: Check store
            probe_executor: Probe executor
            recorder: Result recorder
            dispatcher: Alert dispatcher
            metrics: Optional metrics collector
            sleep: Coroutine used for the SLEEPING state and load backoff
        """
        self.config = config
        self.store = store
        self.probe_executor = probe_executor
        self.recorder = recorder
        self.dispatcher = dispatcher
        self.metrics = metrics
        self._sleep = sleep

        self.state = SweepState.STOPPED
        self.sweeps_completed = 0
        self.load_failures = 0
        self.sweep_errors = 0
        self._task: Optional[asyncio.Task] = None
        self._sweep_lock = asyncio.Lock()

        logger.info(
            "Sweep scheduler initialized",
            extra={
                "sweep_interval_seconds": config.sweep_interval_seconds,
                "load_backoff_seconds": config.load_backoff_seconds,
                "max_concurrent_probes": config.max_concurrent_probes
            }
        )

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the sweep loop as a background task."""
        if self.running:
            logger.warning("Sweep scheduler already running")
            return

        await self.probe_executor.start()
        self._task = asyncio.create_task(self.run_forever(), name="sweep-scheduler")
        logger.info("Sweep scheduler started")

    async def stop(self) -> None:
        """Cancel the sweep loop and release the probe session."""
        logger.info("Stopping sweep scheduler")

        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        self.state = SweepState.STOPPED
        await self.probe_executor.close()
        logger.info("Sweep scheduler stopped")

    async def run_forever(self) -> None:
        """LOADING -> PROBING -> SLEEPING, for the lifetime of the process."""
        while True:
            try:
                await self.run_sweep()
            except StorageError as e:
                self.load_failures += 1
                logger.error(
                    "Error loading checks",
                    extra={
                        "error": str(e),
                        "backoff_seconds": self.config.load_backoff_seconds
                    }
                )
                self.state = SweepState.SLEEPING
                await self._sleep(self.config.load_backoff_seconds)
                continue
            except Exception:
                self.sweep_errors += 1
                logger.exception("Unexpected error during sweep")
                self.state = SweepState.SLEEPING
                await self._sleep(self.config.load_backoff_seconds)
                continue

            self.state = SweepState.SLEEPING
            await self._sleep(self.config.sweep_interval_seconds)

    async def run_sweep(self) -> int:
        """
        Run one sweep over all active checks.

        Returns:
            int: Number of checks processed

        Raises:
            StorageError: If the active checks cannot be loaded
        """
        async with self._sweep_lock:
            self.state = SweepState.LOADING
            checks = await self.store.list_active_checks()

            self.state = SweepState.PROBING
            logger.debug("Sweep started", extra={"checks": len(checks)})

            if self.config.max_concurrent_probes > 1:
                await self._process_concurrently(checks)
            else:
                for check in checks:
                    await self._process_safely(check)

            self.sweeps_completed += 1
            if self.metrics:
                self.metrics.record_sweep(len(checks))

            logger.info(
                "Sweep finished",
                extra={"checks": len(checks), "sweep": self.sweeps_completed}
            )
            return len(checks)

    async def _process_concurrently(self, checks: List[Check]) -> None:
        # Each check appears once per sweep, so no check is probed twice at once
        semaphore = asyncio.Semaphore(self.config.max_concurrent_probes)

        async def bounded(check: Check) -> None:
            async with semaphore:
                await self._process_safely(check)

        await asyncio.gather(*(bounded(check) for check in checks))

    async def _process_safely(self, check: Check) -> None:
        try:
            await self.process_check(check)
        except Exception as e:
            logger.exception(
                "Error processing check",
                extra={"check_id": check.id, "check_name": check.name, "error": str(e)}
            )

    async def process_check(self, check: Check) -> None:
        """
        Probe one check, record the outcome and alert on a status change.

        Args:
            check: Active check loaded by the current sweep
        """
        probe_result = await self.probe_executor.probe(
            check.url,
            timeout=self.config.probe_timeout_seconds
        )
        checked_at = utcnow()

        previous_status = check.current_status
        new_status, changed = decide(previous_status, probe_result)

        if self.metrics:
            self.metrics.record_probe(new_status.value, probe_result.latency_ms)

        await self.recorder.record(check, new_status, probe_result, checked_at)

        if not changed:
            return

        logger.info(
            f"STATUS CHANGE: {check.name} {previous_status.value} -> {new_status.value}",
            extra={
                "check_id": check.id,
                "previous_status": previous_status.value,
                "new_status": new_status.value
            }
        )
        if self.metrics:
            self.metrics.record_transition(new_status.value)

        await self.dispatcher.notify(check, previous_status, new_status)
