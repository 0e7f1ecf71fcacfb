"""Pytest configuration and fixtures."""

import socket
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from uptime_monitor.config import (
    Config,
    DatabaseConfig,
    NotificationsConfig,
    WorkerConfig,
    LoggingConfig
)
from uptime_monitor.core.rate_limiter import limiter
from uptime_monitor.database.session import create_engine, create_session_factory, init_models
from uptime_monitor.database.store import CheckStore
from uptime_monitor.models.check import Check

# Test database URL
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
def unused_port() -> int:
    """A local TCP port nothing is listening on."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.fixture
async def db_engine():
    """Fresh in-memory database per test."""
    engine = create_engine(DatabaseConfig(url=TEST_DATABASE_URL))
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return create_session_factory(db_engine)


@pytest.fixture
def store(session_factory) -> CheckStore:
    """Check store backed by the test database."""
    return CheckStore(session_factory)


@pytest.fixture
def test_config() -> Config:
    """Configuration with no notification channels and no sweep delays."""
    return Config(
        database=DatabaseConfig(url=TEST_DATABASE_URL),
        worker=WorkerConfig(
            sweep_interval_seconds=0,
            load_backoff_seconds=0,
            probe_timeout_seconds=1
        ),
        notifications=NotificationsConfig(enabled=False),
        logging=LoggingConfig(level="DEBUG", format="text", console=False)
    )


@pytest.fixture
async def sample_check(store: CheckStore) -> Check:
    """Registered, active, never-probed check."""
    return await store.insert_check(
        name="Example API",
        url="https://example.com/health",
        interval_seconds=30
    )


@pytest.fixture
def test_app(test_config, store):
    """FastAPI app wired to the test store, without running the worker."""
    from uptime_monitor.main import create_app

    app = create_app(test_config)
    app.state.store = store

    limiter.enabled = False
    yield app
    limiter.enabled = True


@pytest.fixture
async def client(test_app) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client talking to the test app in-process."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
