"""Utility modules for Uptime Monitor."""

from uptime_monitor.utils.logger import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
