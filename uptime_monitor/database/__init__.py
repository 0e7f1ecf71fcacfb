"""Database module for Uptime Monitor."""

from uptime_monitor.database.base import Base
from uptime_monitor.database.session import create_engine, create_session_factory, init_models

__all__ = ["Base", "create_engine", "create_session_factory", "init_models"]
