"""Exception hierarchy for Uptime Monitor."""


class UptimeMonitorError(Exception):
    """Base exception for all Uptime Monitor errors."""
    pass


class ProbeError(UptimeMonitorError):
    """
    Transport-level failure while probing a target.

    Never surfaces to callers of the probe executor: it is converted into
    a DOWN classification with the error text attached.
    """
    pass


class StorageError(UptimeMonitorError):
    """Raised when the persistence store cannot complete an operation."""

    def __init__(self, operation: str, message: str):
        self.operation = operation
        super().__init__(f"{operation} failed: {message}")


class NotificationError(UptimeMonitorError):
    """Raised when a notification channel fails to deliver a message."""

    def __init__(self, channel: str, message: str):
        self.channel = channel
        super().__init__(f"{channel} delivery failed: {message}")
