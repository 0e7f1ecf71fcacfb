"""FastAPI application entry point for Uptime Monitor."""

import uuid
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from uptime_monitor import __version__
from uptime_monitor.api import checks, health
from uptime_monitor.config import Config, load_config
from uptime_monitor.core.errors import StorageError
from uptime_monitor.core.metrics import MetricsCollector
from uptime_monitor.core.notifications import AlertDispatcher
from uptime_monitor.core.probe import ProbeExecutor
from uptime_monitor.core.rate_limiter import limiter
from uptime_monitor.core.recorder import ResultRecorder
from uptime_monitor.core.scheduler import SweepScheduler
from uptime_monitor.database.session import create_engine, create_session_factory, init_models
from uptime_monitor.database.store import CheckStore
from uptime_monitor.utils.logger import setup_logging, get_logger

logger = get_logger(__name__)


def _ensure_sqlite_directory(database_url: str) -> None:
    """Create the parent directory of a file-backed SQLite database."""
    if not database_url.startswith("sqlite") or ":memory:" in database_url:
        return
    _, _, path = database_url.partition(":///")
    if path:
        Path(path).parent.mkdir(parents=True, exist_ok=True)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Lifespan context manager for FastAPI application.

    Builds the shared store and starts the sweep worker next to the API;
    on shutdown the worker is cancelled before the engine is disposed.
    """
    config: Config = app.state.config

    setup_logging(
        level=config.logging.level,
        log_format=config.logging.format,
        log_file=config.logging.file or None,
        console=config.logging.console
    )
    logger.info("Starting Uptime Monitor")

    _ensure_sqlite_directory(config.database.url)
    engine = create_engine(config.database)
    await init_models(engine)

    store = CheckStore(create_session_factory(engine))
    app.state.store = store

    metrics = app.state.metrics
    scheduler = SweepScheduler(
        config=config.worker,
        store=store,
        probe_executor=ProbeExecutor(default_timeout=config.worker.probe_timeout_seconds),
        recorder=ResultRecorder(store, metrics),
        dispatcher=AlertDispatcher(config.notifications, metrics),
        metrics=metrics
    )
    app.state.scheduler = scheduler

    if config.worker.enabled:
        await scheduler.start()
    else:
        logger.warning("Sweep worker disabled by configuration")

    logger.info(
        "Uptime Monitor started",
        extra={"version": __version__, "api_port": config.api.port}
    )

    yield

    logger.info("Shutting down Uptime Monitor")
    await scheduler.stop()
    await engine.dispose()
    logger.info("Uptime Monitor shut down")


async def storage_error_handler(request: Request, exc: StorageError):
    """Storage failures surface as 500 with the error text."""
    request_id = getattr(request.state, "request_id", "unknown")
    logger.error(
        "Storage error while handling request",
        extra={"request_id": request_id, "path": request.url.path, "error": str(exc)}
    )
    return JSONResponse(
        status_code=500,
        content={"detail": str(exc), "request_id": request_id},
        headers={"X-Request-ID": request_id}
    )


async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    """Handle rate limit exceeded errors."""
    request_id = getattr(request.state, "request_id", "unknown")
    logger.warning(
        "Rate limit exceeded",
        extra={"request_id": request_id, "path": request.url.path, "client": get_remote_address(request)}
    )
    return JSONResponse(
        status_code=429,
        content={"detail": "Rate limit exceeded. Please try again later.", "request_id": request_id},
        headers={"X-Request-ID": request_id, "Retry-After": "60"}
    )


def create_app(config: Optional[Config] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        config: Application configuration (loaded from file/env when omitted)

    Returns:
        FastAPI: Application whose lifespan runs the sweep worker
    """
    config = config or load_config()

    app = FastAPI(
        title="Uptime Monitor",
        description="HTTP uptime monitoring with status-change alerts",
        version=__version__,
        lifespan=lifespan
    )
    app.state.config = config
    app.state.limiter = limiter
    app.state.metrics = MetricsCollector()

    if config.api.cors.enabled:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.api.cors.allow_origins,
            allow_methods=config.api.cors.allow_methods,
            allow_headers=config.api.cors.allow_headers,
        )

    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    app.add_exception_handler(StorageError, storage_error_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)

    app.include_router(health.router, tags=["Health"])
    app.include_router(checks.router, tags=["Checks"])

    if config.prometheus.enabled:
        app.add_api_route(
            config.prometheus.path,
            health.metrics_endpoint,
            methods=["GET"],
            include_in_schema=False
        )

    return app


if __name__ == "__main__":
    import uvicorn

    app_config = load_config()
    uvicorn.run(
        "uptime_monitor.main:create_app",
        factory=True,
        host=app_config.api.host,
        port=app_config.api.port,
        reload=app_config.api.reload,
        log_level=app_config.logging.level.lower()
    )
