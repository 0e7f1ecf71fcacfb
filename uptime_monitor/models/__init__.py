"""Database models for Uptime Monitor."""

from uptime_monitor.models.check import Check, CheckStatus
from uptime_monitor.models.check_result import CheckResult

__all__ = ["Check", "CheckStatus", "CheckResult"]
