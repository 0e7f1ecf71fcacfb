"""Status transition decisions for probe outcomes."""

from typing import NamedTuple

from uptime_monitor.core.probe import ProbeResult
from uptime_monitor.models.check import CheckStatus


class StatusDecision(NamedTuple):
    """New status for a check and whether it differs from the previous one."""
    new_status: CheckStatus
    changed: bool


def decide(previous_status: CheckStatus, probe_result: ProbeResult) -> StatusDecision:
    """
    Decide a check's new status from its previous status and a probe outcome.

    UNKNOWN differs from both UP and DOWN, so the first probe of a check is
    always reported as a change and produces one alert.

    Args:
        previous_status: Status cached on the check before this probe
        probe_result: Classification of the probe

    Returns:
        StatusDecision: (new_status, changed)
    """
    new_status = CheckStatus.UP if probe_result.reachable else CheckStatus.DOWN
    return StatusDecision(new_status, new_status != previous_status)
