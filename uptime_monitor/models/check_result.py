"""CheckResult model - immutable history row for a single probe."""

from sqlalchemy import Column, Integer, String, Text, ForeignKey, Index

from uptime_monitor.database.base import Base, UTCDateTime, utcnow


class CheckResult(Base):
    """
    CheckResult model representing the outcome of one probe.

    Attributes:
        id: Autoincrement primary key
        check_id: Foreign key to check
        checked_at: When the probe ran
        status: UP or DOWN
        http_status: Response status code, if a response arrived
        latency_ms: Round-trip time in milliseconds
        error: Transport error text for DOWN results
    """

    __tablename__ = "check_results"
    __table_args__ = (
        Index("idx_results_check_time", "check_id", "checked_at"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)

    check_id = Column(
        String(36),
        ForeignKey("checks.id", ondelete="CASCADE"),
        nullable=False
    )

    checked_at = Column(UTCDateTime, default=utcnow, nullable=False)
    status = Column(String(16), nullable=False)

    # Diagnostics
    http_status = Column(Integer, nullable=True)
    latency_ms = Column(Integer, nullable=True)
    error = Column(Text, nullable=True)

    def __repr__(self) -> str:
        return (
            f"<CheckResult(id={self.id}, check_id='{self.check_id}', "
            f"status={self.status}, http_status={self.http_status})>"
        )
