"""HTTP reachability prober for monitored websites."""

import asyncio
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

import aiohttp

from uptime_monitor.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_SUCCESS_THRESHOLD = 500

# (url, timeout) -> HTTP status code; raises on transport failure
Transport = Callable[[str, float], Awaitable[int]]


def is_success(status: Optional[int], threshold: int = DEFAULT_SUCCESS_THRESHOLD) -> bool:
    """A status counts as up when a response arrived and its code is below ``threshold``."""
    return status is not None and status < threshold


@dataclass(frozen=True)
class Outcome:
    """
    Result of one probe.

    ``status`` is None exactly when no HTTP response was received
    (DNS failure, refused connection, TLS error, timeout).
    """

    status: Optional[int]
    succeeded: bool
    response_time: Optional[float] = None
    error_message: Optional[str] = None

    @classmethod
    def unreachable(cls, error_message: str, response_time: Optional[float] = None) -> "Outcome":
        return cls(
            status=None,
            succeeded=False,
            response_time=response_time,
            error_message=error_message
        )


class Prober:
    """
    Performs single reachability checks.

    Uses one shared ``aiohttp`` session (bounded connector) unless a
    transport coroutine is injected, which is how tests fake the network.
    ``probe`` never raises: every failure becomes an unreachable Outcome.
    """

    def __init__(
        self,
        success_threshold: int = DEFAULT_SUCCESS_THRESHOLD,
        max_connections: int = 10,
        transport: Optional[Transport] = None
    ):
        """
        Initialize prober.

        Args:
            success_threshold: Status codes below this count as up
            max_connections: Connection limit of the HTTP session
            transport: Optional replacement for the aiohttp request
        """
        self.success_threshold = success_threshold
        self.max_connections = max_connections
        self.transport = transport or self._aiohttp_transport
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def start(self) -> None:
        """Open the HTTP session."""
        if self.session is None:
            connector = aiohttp.TCPConnector(limit=self.max_connections)
            self.session = aiohttp.ClientSession(connector=connector)
            logger.info("HTTP session started", extra={"max_connections": self.max_connections})

    async def close(self) -> None:
        """Close the HTTP session."""
        if self.session:
            await self.session.close()
            self.session = None
            logger.info("HTTP session closed")

    async def _aiohttp_transport(self, url: str, timeout: float) -> int:
        if self.session is None:
            await self.start()

        async with self.session.get(
            url,
            timeout=aiohttp.ClientTimeout(total=timeout),
            allow_redirects=True
        ) as response:
            return response.status

    async def probe(self, url: str, timeout: float) -> Outcome:
        """
        Check whether ``url`` answers within ``timeout`` seconds.

        Args:
            url: Address to request
            timeout: Deadline for the whole request, in seconds

        Returns:
            Outcome: Status code and success flag, or an unreachable outcome

        Example:
            ```python
            async with Prober(success_threshold=500) as prober:
                outcome = await prober.probe("https://example.com", timeout=10)
                print(outcome.status, outcome.succeeded)
            ```
        """
        start_time = time.monotonic()

        try:
            status = await asyncio.wait_for(self.transport(url, timeout), timeout=timeout)

        except asyncio.TimeoutError:
            logger.warning(
                "Probe timed out",
                extra={"url": url, "timeout": timeout}
            )
            return Outcome.unreachable(
                f"Request timed out after {timeout}s",
                response_time=time.monotonic() - start_time
            )

        except aiohttp.ClientConnectorError as e:
            logger.warning(
                "Probe connection error",
                extra={"url": url, "error": str(e)}
            )
            return Outcome.unreachable(
                f"Connection error: {e}",
                response_time=time.monotonic() - start_time
            )

        except (aiohttp.ClientError, OSError) as e:
            logger.warning(
                "Probe client error",
                extra={"url": url, "error": str(e)}
            )
            return Outcome.unreachable(
                f"Client error: {e}",
                response_time=time.monotonic() - start_time
            )

        except Exception as e:
            logger.exception(
                "Probe unexpected error",
                extra={"url": url, "error": str(e)}
            )
            return Outcome.unreachable(
                f"Unexpected error: {e}",
                response_time=time.monotonic() - start_time
            )

        response_time = time.monotonic() - start_time
        succeeded = is_success(status, self.success_threshold)

        logger.debug(
            "Probe completed",
            extra={
                "url": url,
                "status": status,
                "succeeded": succeeded,
                "response_time": response_time
            }
        )

        return Outcome(
            status=status,
            succeeded=succeeded,
            response_time=response_time,
            error_message=None if succeeded else f"Received status {status}"
        )
