"""Persistence store for checks and their probe history."""

from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from uptime_monitor.core.errors import StorageError
from uptime_monitor.models.check import Check, CheckStatus
from uptime_monitor.models.check_result import CheckResult
from uptime_monitor.utils.logger import get_logger

logger = get_logger(__name__)

UPDATABLE_FIELDS = ("name", "url", "interval_seconds", "alert_email", "is_active")


class CheckStore:
    """
    Storage capability shared by the API and the sweep worker.

    Every method opens its own session and commits before returning, so
    each call is an independent short transaction. Database failures are
    re-raised as StorageError.
    """

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    async def insert_check(
        self,
        name: str,
        url: str,
        interval_seconds: int,
        alert_email: Optional[str] = None,
        is_active: bool = True
    ) -> Check:
        """Create a check and return it with its generated id."""
        check = Check(
            name=name,
            url=url,
            interval_seconds=interval_seconds,
            alert_email=alert_email,
            is_active=is_active
        )
        try:
            async with self.session_factory() as db:
                db.add(check)
                await db.commit()
                await db.refresh(check)
        except SQLAlchemyError as e:
            raise StorageError("insert_check", str(e)) from e

        logger.info(
            "Check registered",
            extra={"check_id": check.id, "check_name": check.name}
        )
        return check

    async def get_check(self, check_id: str) -> Optional[Check]:
        try:
            async with self.session_factory() as db:
                result = await db.execute(select(Check).where(Check.id == check_id))
                return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise StorageError("get_check", str(e)) from e

    async def list_checks(self) -> List[Check]:
        try:
            async with self.session_factory() as db:
                result = await db.execute(select(Check).order_by(Check.created_at))
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise StorageError("list_checks", str(e)) from e

    async def list_active_checks(self) -> List[Check]:
        """Checks that take part in the next sweep."""
        try:
            async with self.session_factory() as db:
                result = await db.execute(
                    select(Check)
                    .where(Check.is_active == True)  # noqa: E712
                    .order_by(Check.created_at)
                )
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise StorageError("list_active_checks", str(e)) from e

    async def update_check(self, check_id: str, **fields: Any) -> Optional[Check]:
        """
        Apply operator edits to a check.

        Args:
            check_id: Check to update
            **fields: Subset of name, url, interval_seconds, alert_email, is_active

        Returns:
            Check: Updated check, or None if it does not exist
        """
        unknown = set(fields) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update fields: {sorted(unknown)}")

        try:
            async with self.session_factory() as db:
                result = await db.execute(select(Check).where(Check.id == check_id))
                check = result.scalar_one_or_none()
                if check is None:
                    return None
                for field, value in fields.items():
                    setattr(check, field, value)
                await db.commit()
                await db.refresh(check)
                return check
        except SQLAlchemyError as e:
            raise StorageError("update_check", str(e)) from e

    async def update_check_status(
        self,
        check_id: str,
        status: CheckStatus,
        checked_at: datetime
    ) -> None:
        """Cache the latest probe outcome on the check row."""
        try:
            async with self.session_factory() as db:
                await db.execute(
                    update(Check)
                    .where(Check.id == check_id)
                    .values(last_status=status.value, last_checked_at=checked_at)
                )
                await db.commit()
        except SQLAlchemyError as e:
            raise StorageError("update_check_status", str(e)) from e

    async def insert_result(self, result: CheckResult) -> CheckResult:
        """Append a probe outcome to the check's history."""
        try:
            async with self.session_factory() as db:
                db.add(result)
                await db.commit()
                await db.refresh(result)
                return result
        except SQLAlchemyError as e:
            raise StorageError("insert_result", str(e)) from e

    async def list_results(
        self,
        check_id: str,
        limit: Optional[int] = None
    ) -> List[CheckResult]:
        """History for a check, newest first."""
        query = (
            select(CheckResult)
            .where(CheckResult.check_id == check_id)
            .order_by(CheckResult.checked_at.desc(), CheckResult.id.desc())
        )
        if limit is not None:
            query = query.limit(limit)

        try:
            async with self.session_factory() as db:
                result = await db.execute(query)
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise StorageError("list_results", str(e)) from e
