"""Core worker components for Uptime Monitor."""

from uptime_monitor.core.errors import (
    UptimeMonitorError,
    ProbeError,
    StorageError,
    NotificationError
)

__all__ = ["UptimeMonitorError", "ProbeError", "StorageError", "NotificationError"]
