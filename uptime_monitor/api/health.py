"""Health check and metrics endpoints."""

from fastapi import APIRouter, Request
from fastapi.responses import Response

from uptime_monitor import __version__
from uptime_monitor.core.metrics import CONTENT_TYPE_LATEST
from uptime_monitor.database.base import utcnow

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """Liveness plus the sweep worker's state."""
    scheduler = getattr(request.app.state, "scheduler", None)

    return {
        "status": "ok",
        "version": __version__,
        "timestamp": utcnow().isoformat(),
        "worker": {
            "running": bool(scheduler and scheduler.running),
            "state": scheduler.state.value if scheduler else "stopped",
            "sweeps_completed": scheduler.sweeps_completed if scheduler else 0,
        },
    }


async def metrics_endpoint(request: Request):
    """Prometheus exposition of worker metrics."""
    collector = request.app.state.metrics
    return Response(content=collector.generate_metrics(), media_type=CONTENT_TYPE_LATEST)
