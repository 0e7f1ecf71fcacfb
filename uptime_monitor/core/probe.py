"""Probe executor: one bounded HTTP request per check per sweep."""

import asyncio
import time
from typing import Optional

import aiohttp

from uptime_monitor.core.errors import ProbeError
from uptime_monitor.utils.logger import get_logger

logger = get_logger(__name__)


class ProbeResult:
    """Classification of a single probe."""

    def __init__(
        self,
        reachable: bool,
        http_status: Optional[int] = None,
        latency_ms: Optional[int] = None,
        error: Optional[str] = None
    ):
        """
        Initialize probe result.

        Args:
            reachable: True when the request completed without a transport error
            http_status: Response status code, if a response arrived
            latency_ms: Elapsed time in milliseconds
            error: Transport error text for unreachable targets
        """
        self.reachable = reachable
        self.http_status = http_status
        self.latency_ms = latency_ms
        self.error = error

    def __repr__(self) -> str:
        return (
            f"<ProbeResult(reachable={self.reachable}, "
            f"http_status={self.http_status}, "
            f"latency_ms={self.latency_ms}, error={self.error!r})>"
        )


class ProbeExecutor:
    """
    Issues probe requests against check URLs.

    A target counts as reachable whenever the request completes, whatever
    the status code: a 404 or 500 answer is still an answer. Only transport
    failures (DNS, refused connection, timeout, TLS) classify as unreachable.
    There is no retry; one request decides the outcome.
    """

    def __init__(self, default_timeout: float = 10.0, max_connections: int = 20):
        """
        Initialize probe executor.

        Args:
            default_timeout: Total timeout per probe in seconds
            max_connections: Connection pool size of the shared session
        """
        self.default_timeout = default_timeout
        self.max_connections = max_connections
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def start(self) -> None:
        """Start the HTTP session."""
        if self.session is None:
            connector = aiohttp.TCPConnector(limit=self.max_connections)
            self.session = aiohttp.ClientSession(connector=connector)
            logger.info("Probe HTTP session started")

    async def close(self) -> None:
        """Close the HTTP session."""
        if self.session:
            await self.session.close()
            self.session = None
            logger.info("Probe HTTP session closed")

    async def probe(self, url: str, timeout: Optional[float] = None) -> ProbeResult:
        """
        Probe a URL once and classify the outcome.

        Never raises for probe failures; cancellation still propagates.

        Args:
            url: Target to request
            timeout: Total timeout in seconds (defaults to default_timeout)

        Returns:
            ProbeResult: Classification with diagnostics
        """
        timeout = timeout or self.default_timeout
        start_time = time.monotonic()

        try:
            http_status = await self._request(url, timeout)
        except ProbeError as e:
            latency_ms = int((time.monotonic() - start_time) * 1000)
            logger.warning(
                "Probe failed",
                extra={"url": url, "error": str(e), "latency_ms": latency_ms}
            )
            return ProbeResult(reachable=False, latency_ms=latency_ms, error=str(e))

        latency_ms = int((time.monotonic() - start_time) * 1000)
        logger.debug(
            "Probe completed",
            extra={"url": url, "http_status": http_status, "latency_ms": latency_ms}
        )
        return ProbeResult(reachable=True, http_status=http_status, latency_ms=latency_ms)

    async def _request(self, url: str, timeout: float) -> int:
        """Perform the GET and return its status code, raising ProbeError on failure."""
        if not self.session:
            await self.start()

        try:
            async with self.session.get(
                url,
                timeout=aiohttp.ClientTimeout(total=timeout)
            ) as response:
                return response.status

        except asyncio.TimeoutError as e:
            raise ProbeError(f"Request timed out after {timeout}s") from e

        except aiohttp.ClientConnectorError as e:
            raise ProbeError(f"Connection error: {e}") from e

        except aiohttp.InvalidURL as e:
            raise ProbeError(f"Invalid URL: {e}") from e

        except aiohttp.ClientError as e:
            raise ProbeError(f"Client error: {e}") from e

        except Exception as e:
            logger.exception("Unexpected probe error", extra={"url": url})
            raise ProbeError(f"Unexpected error: {e}") from e
