"""Database engine and session factory with SQLite WAL support."""

from typing import Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from uptime_monitor.config import DatabaseConfig
from uptime_monitor.database.base import Base
from uptime_monitor.utils.logger import get_logger

logger = get_logger(__name__)


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def _is_memory(url: str) -> bool:
    return ":memory:" in url or url.rstrip("/").endswith("sqlite+aiosqlite:")


def create_engine(config: Optional[DatabaseConfig] = None) -> AsyncEngine:
    """
    Create the async engine described by the database configuration.

    File-backed SQLite databases run in WAL journal mode with NORMAL
    synchronous writes, so API readers do not block behind the worker.

    Args:
        config: Database configuration (defaults used when omitted)

    Returns:
        AsyncEngine: Configured engine
    """
    config = config or DatabaseConfig()
    url = config.url

    if not _is_sqlite(url):
        engine = create_async_engine(url, echo=config.echo, pool_pre_ping=True)
        logger.info("Database engine created", extra={"dialect": engine.dialect.name})
        return engine

    if _is_memory(url):
        # One shared connection, otherwise every session sees an empty database
        engine = create_async_engine(
            url,
            echo=config.echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_async_engine(
            url,
            echo=config.echo,
            connect_args={"timeout": config.busy_timeout_ms / 1000},
        )

        @event.listens_for(engine.sync_engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA synchronous=NORMAL")
            cursor.execute(f"PRAGMA busy_timeout={config.busy_timeout_ms}")
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    logger.info("SQLite engine created", extra={"url": url})
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """Create the session factory shared by the API and the worker."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def init_models(engine: AsyncEngine) -> None:
    """Create tables that do not exist yet."""
    # Import models so they register with Base.metadata
    from uptime_monitor.models import Check, CheckResult  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all, checkfirst=True)
