"""Check registration and history API routes."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from uptime_monitor.api.dependencies import get_config, get_store
from uptime_monitor.config import Config
from uptime_monitor.core.rate_limiter import limiter
from uptime_monitor.database.store import CheckStore
from uptime_monitor.schemas.check import (
    CheckCreate,
    CheckUpdate,
    CheckCreatedResponse,
    CheckResponse,
    CheckResultResponse
)
from uptime_monitor.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


def _validate_interval(interval_seconds: int, config: Config) -> None:
    minimum = config.checks.min_interval_seconds
    if interval_seconds < minimum:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"interval_seconds must be at least {minimum}"
        )


async def _get_check_or_404(store: CheckStore, check_id: str):
    check = await store.get_check(check_id)
    if check is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Check {check_id} not found"
        )
    return check


@router.post("/checks", response_model=CheckCreatedResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("50/minute")
async def create_check(
    request: Request,
    payload: CheckCreate,
    store: CheckStore = Depends(get_store),
    config: Config = Depends(get_config)
):
    """
    Register a check.

    Rejects intervals below the configured minimum with 400.
    """
    _validate_interval(payload.interval_seconds, config)

    check = await store.insert_check(
        name=payload.name,
        url=payload.url,
        interval_seconds=payload.interval_seconds,
        alert_email=payload.alert_email
    )
    return CheckCreatedResponse(id=check.id)


@router.get("/checks", response_model=List[CheckResponse])
@limiter.limit("100/minute")
async def list_checks(request: Request, store: CheckStore = Depends(get_store)):
    """List all checks with their cached status."""
    checks = await store.list_checks()
    return [CheckResponse.model_validate(check) for check in checks]


@router.get("/checks/{check_id}", response_model=CheckResponse)
@limiter.limit("200/minute")
async def get_check(request: Request, check_id: str, store: CheckStore = Depends(get_store)):
    check = await _get_check_or_404(store, check_id)
    return CheckResponse.model_validate(check)


@router.patch("/checks/{check_id}", response_model=CheckResponse)
@limiter.limit("50/minute")
async def update_check(
    request: Request,
    check_id: str,
    payload: CheckUpdate,
    store: CheckStore = Depends(get_store),
    config: Config = Depends(get_config)
):
    """
    Edit a check or toggle whether it is swept.

    Args:
        check_id: Check ID
        payload: Fields to change
    """
    fields = payload.model_dump(exclude_unset=True)
    if fields.get("interval_seconds") is not None:
        _validate_interval(fields["interval_seconds"], config)

    # name, url and is_active are NOT NULL columns
    for field in ("name", "url", "interval_seconds", "is_active"):
        if field in fields and fields[field] is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"{field} cannot be null"
            )

    check = await store.update_check(check_id, **fields)
    if check is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Check {check_id} not found"
        )

    logger.info(
        "Check updated",
        extra={"check_id": check.id, "fields": sorted(fields)}
    )
    return CheckResponse.model_validate(check)


@router.get("/checks/{check_id}/results", response_model=List[CheckResultResponse])
@limiter.limit("200/minute")
async def list_results(
    request: Request,
    check_id: str,
    limit: Optional[int] = Query(default=None, ge=1, le=10000),
    store: CheckStore = Depends(get_store)
):
    """Probe history for a check, newest first."""
    await _get_check_or_404(store, check_id)
    results = await store.list_results(check_id, limit=limit)
    return [CheckResultResponse.model_validate(r) for r in results]
