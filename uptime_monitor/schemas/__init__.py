"""Pydantic schemas for API request/response validation."""

from uptime_monitor.schemas.check import (
    CheckCreate,
    CheckUpdate,
    CheckCreatedResponse,
    CheckResponse,
    CheckResultResponse
)

__all__ = [
    "CheckCreate",
    "CheckUpdate",
    "CheckCreatedResponse",
    "CheckResponse",
    "CheckResultResponse",
]
