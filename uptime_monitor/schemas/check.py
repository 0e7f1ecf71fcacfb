"""Pydantic schemas for check operations."""

from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field, field_validator

from uptime_monitor.models.check import CheckStatus


class CheckCreate(BaseModel):
    """Schema for registering a check."""
    name: str = Field(..., min_length=1, max_length=255, description="Display label")
    url: str = Field(..., min_length=1, max_length=2048, description="URL to probe")
    interval_seconds: int = Field(..., description="Requested polling interval in seconds")
    alert_email: Optional[str] = Field(default=None, max_length=320, description="Per-check alert recipient")


class CheckUpdate(BaseModel):
    """Schema for updating a check (all fields optional)."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    url: Optional[str] = Field(None, min_length=1, max_length=2048)
    interval_seconds: Optional[int] = None
    alert_email: Optional[str] = Field(None, max_length=320)
    is_active: Optional[bool] = None


class CheckCreatedResponse(BaseModel):
    """Schema returned after registration."""
    id: str


class CheckResponse(BaseModel):
    """Schema for a check."""
    id: str
    name: str
    url: str
    interval_seconds: int
    alert_email: Optional[str] = None
    is_active: bool
    last_status: CheckStatus = CheckStatus.UNKNOWN
    last_checked_at: Optional[datetime] = None
    created_at: datetime

    model_config = {"from_attributes": True}

    @field_validator("last_status", mode="before")
    @classmethod
    def stored_status_to_enum(cls, v):
        return CheckStatus.from_db(v)


class CheckResultResponse(BaseModel):
    """Schema for one probe outcome."""
    id: int
    check_id: str
    checked_at: datetime
    status: CheckStatus
    http_status: Optional[int] = None
    latency_ms: Optional[int] = None
    error: Optional[str] = None

    model_config = {"from_attributes": True}
