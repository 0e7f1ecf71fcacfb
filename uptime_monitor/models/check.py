"""Check model - an HTTP endpoint registered for uptime monitoring."""

import uuid
from enum import Enum

from sqlalchemy import Column, Integer, String, Boolean

from uptime_monitor.database.base import Base, UTCDateTime, utcnow
from uptime_monitor.utils.logger import get_logger

logger = get_logger(__name__)


class CheckStatus(str, Enum):
    """Availability status of a check."""
    UNKNOWN = "UNKNOWN"
    UP = "UP"
    DOWN = "DOWN"

    @classmethod
    def from_db(cls, value) -> "CheckStatus":
        """
        Map a stored value to a status.

        NULL means never probed. Unrecognised strings are treated as UNKNOWN,
        so the next probe of the check is reported as a change and rewrites
        the stored value.
        """
        if value is None:
            return cls.UNKNOWN
        try:
            return cls(value)
        except ValueError:
            logger.warning("Unrecognised stored status", extra={"last_status": value})
            return cls.UNKNOWN

    def __str__(self) -> str:
        return self.value


def new_check_id() -> str:
    """Generate an opaque identifier for a new check."""
    return str(uuid.uuid4())


class Check(Base):
    """
    Check model representing a monitored endpoint.

    Attributes:
        id: UUID assigned at creation
        name: Display label
        url: Target to probe
        interval_seconds: Requested polling interval (informational)
        alert_email: Optional per-check alert recipient
        is_active: Whether the check takes part in sweeps
        last_status: Cached status string, NULL until the first probe
        last_checked_at: Time of the most recent probe
        created_at: Creation timestamp
    """

    __tablename__ = "checks"

    id = Column(String(36), primary_key=True, default=new_check_id)

    name = Column(String(255), nullable=False)
    url = Column(String(2048), nullable=False)
    interval_seconds = Column(Integer, nullable=False)
    alert_email = Column(String(320), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)

    # Cached outcome of the latest probe
    last_status = Column(String(16), nullable=True)
    last_checked_at = Column(UTCDateTime, nullable=True)

    created_at = Column(UTCDateTime, default=utcnow, nullable=False)

    @property
    def current_status(self) -> CheckStatus:
        """Cached status as a domain enum."""
        return CheckStatus.from_db(self.last_status)

    def __repr__(self) -> str:
        return f"<Check(id='{self.id}', name='{self.name}', url='{self.url}')>"
