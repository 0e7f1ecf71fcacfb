"""Result recorder: persists probe outcomes and caches the latest status."""

from datetime import datetime
from typing import NamedTuple, Optional

from uptime_monitor.core.errors import StorageError
from uptime_monitor.core.metrics import MetricsCollector
from uptime_monitor.core.probe import ProbeResult
from uptime_monitor.database.store import CheckStore
from uptime_monitor.models.check import Check, CheckStatus
from uptime_monitor.models.check_result import CheckResult
from uptime_monitor.utils.logger import get_logger

logger = get_logger(__name__)


class RecordOutcome(NamedTuple):
    """Which of the two writes for a probe went through."""
    result_saved: bool
    status_updated: bool


class ResultRecorder:
    """
    Writes each probe outcome to the store.

    The history insert and the status update on the check row are separate
    transactions. If the process dies between them, last_status lags the
    history by one sweep and the history row stays authoritative. Storage
    failures are logged and reported through RecordOutcome, never raised.
    """

    def __init__(self, store: CheckStore, metrics: Optional[MetricsCollector] = None):
        self.store = store
        self.metrics = metrics

    async def record(
        self,
        check: Check,
        status: CheckStatus,
        probe_result: ProbeResult,
        checked_at: datetime
    ) -> RecordOutcome:
        """
        Persist a probe outcome for a check.

        Args:
            check: Probed check
            status: Status decided for this probe (UP or DOWN)
            probe_result: Probe classification with diagnostics
            checked_at: When the probe ran

        Returns:
            RecordOutcome: Flags for the history insert and the status update
        """
        result_saved = await self._insert_result(check, status, probe_result, checked_at)
        status_updated = await self._update_status(check, status, checked_at)
        return RecordOutcome(result_saved, status_updated)

    async def _insert_result(
        self,
        check: Check,
        status: CheckStatus,
        probe_result: ProbeResult,
        checked_at: datetime
    ) -> bool:
        row = CheckResult(
            check_id=check.id,
            checked_at=checked_at,
            status=status.value,
            http_status=probe_result.http_status,
            latency_ms=probe_result.latency_ms,
            error=probe_result.error
        )
        try:
            await self.store.insert_result(row)
        except StorageError as e:
            self._storage_failed(check, e)
            return False
        return True

    async def _update_status(
        self,
        check: Check,
        status: CheckStatus,
        checked_at: datetime
    ) -> bool:
        try:
            await self.store.update_check_status(check.id, status, checked_at)
        except StorageError as e:
            self._storage_failed(check, e)
            return False
        return True

    def _storage_failed(self, check: Check, error: StorageError) -> None:
        logger.error(
            "Failed to persist probe outcome",
            extra={
                "check_id": check.id,
                "check_name": check.name,
                "operation": error.operation,
                "error": str(error)
            }
        )
        if self.metrics:
            self.metrics.record_storage_error(error.operation)
