"""FastAPI dependencies resolving components stored on app.state."""

from fastapi import Request

from uptime_monitor.config import Config
from uptime_monitor.database.store import CheckStore


def get_store(request: Request) -> CheckStore:
    """Check store shared with the sweep worker."""
    return request.app.state.store


def get_config(request: Request) -> Config:
    return request.app.state.config
