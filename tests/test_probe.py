"""Tests for the probe executor against local HTTP targets."""

import asyncio

import pytest
from aiohttp import web
from aiohttp import test_utils

from uptime_monitor.core.probe import ProbeExecutor, ProbeResult


@pytest.fixture
async def target_server():
    """Local HTTP server with fast, failing and slow routes."""

    async def ok(request):
        return web.Response(text="ok")

    async def not_found(request):
        return web.Response(status=404, text="missing")

    async def server_error(request):
        return web.Response(status=500, text="boom")

    async def slow(request):
        await asyncio.sleep(2)
        return web.Response(text="late")

    app = web.Application()
    app.router.add_get("/ok", ok)
    app.router.add_get("/missing", not_found)
    app.router.add_get("/error", server_error)
    app.router.add_get("/slow", slow)

    server = test_utils.TestServer(app)
    await server.start_server()
    yield server
    await server.close()


@pytest.fixture
async def executor():
    async with ProbeExecutor(default_timeout=2) as probe_executor:
        yield probe_executor


@pytest.mark.functional
class TestProbeClassification:
    """Reachability is decided by transport success alone."""

    async def test_ok_response_is_reachable(self, executor, target_server):
        result = await executor.probe(str(target_server.make_url("/ok")))

        assert result.reachable is True
        assert result.http_status == 200
        assert result.error is None
        assert result.latency_ms is not None and result.latency_ms >= 0

    @pytest.mark.parametrize("path, status", [("/missing", 404), ("/error", 500)])
    async def test_error_status_is_still_reachable(self, executor, target_server, path, status):
        """A 404 or 500 is an answer, so the target counts as reachable."""
        result = await executor.probe(str(target_server.make_url(path)))

        assert result.reachable is True
        assert result.http_status == status
        assert result.error is None

    async def test_connection_refused_is_unreachable(self, executor, unused_port):
        result = await executor.probe(f"http://127.0.0.1:{unused_port}/")

        assert result.reachable is False
        assert result.http_status is None
        assert "Connection error" in result.error

    async def test_timeout_is_unreachable(self, executor, target_server):
        result = await executor.probe(str(target_server.make_url("/slow")), timeout=0.2)

        assert result.reachable is False
        assert "timed out" in result.error
        assert result.latency_ms < 2000

    async def test_invalid_url_is_unreachable(self, executor):
        result = await executor.probe("not a url")

        assert result.reachable is False
        assert result.error

    async def test_probe_starts_session_lazily(self, target_server):
        probe_executor = ProbeExecutor(default_timeout=2)
        assert probe_executor.session is None

        try:
            result = await probe_executor.probe(str(target_server.make_url("/ok")))
            assert result.reachable is True
            assert probe_executor.session is not None
        finally:
            await probe_executor.close()

        assert probe_executor.session is None


@pytest.mark.unit
def test_probe_result_repr():
    result = ProbeResult(reachable=False, latency_ms=5, error="Connection error")

    assert "reachable=False" in repr(result)
    assert "Connection error" in repr(result)
