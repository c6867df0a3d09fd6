"""
HTTP transport to seller endpoints.

Sends JSON payloads with fire-and-forget semantics: ``post`` schedules the
request as a background task and returns at once; the outcome is delivered
to the ``on_success`` / ``on_failure`` callbacks when it arrives.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

import httpx
import structlog

from ..errors import UnreachableError

logger = structlog.get_logger()


@dataclass
class SellerReply:
    """Raw HTTP reply from a seller."""
    status_code: int
    body: bytes = b""

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


OnSuccess = Callable[[SellerReply], Awaitable[Any]]
OnFailure = Callable[[UnreachableError], Awaitable[Any]]


def build_url(hostname: str, port: Optional[int], path: str, scheme: str = "http") -> str:
    """Build an absolute URL from address parts."""
    netloc = hostname if port is None else f"{hostname}:{port}"
    if not path.startswith("/"):
        path = "/" + path
    return f"{scheme}://{netloc}{path}"


class HttpTransport:
    """
    Fire-and-forget JSON POST client.

    Usage:
        async with HttpTransport(timeout=5.0) as transport:
            transport.post("localhost", 3001, "/order", payload,
                           on_success=handle_reply, on_failure=handle_error)
            await transport.drain()

    There is no retry and no bound on concurrent requests. A request that
    never completes is ended by the client timeout, which reports it as a
    failure.
    """

    def __init__(
        self,
        timeout: float = 5.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None
        self._in_flight: set[asyncio.Task] = set()

    async def __aenter__(self) -> "HttpTransport":
        await self.connect()
        return self

    async def __aexit__(self, *args) -> None:
        await self.disconnect()

    async def connect(self) -> None:
        """Create the underlying HTTP client if none was injected."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
            self._owns_client = True

    async def disconnect(self) -> None:
        """Wait for in-flight sends, then close the client we own."""
        await self.drain()
        if self._client and self._owns_client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get the HTTP client, raising if not connected."""
        if self._client is None:
            raise RuntimeError("HttpTransport not connected. Call connect() first.")
        return self._client

    @property
    def in_flight(self) -> int:
        """Number of sends that have not completed yet."""
        return len(self._in_flight)

    def post(
        self,
        hostname: str,
        port: Optional[int],
        path: str,
        payload: dict,
        on_success: Optional[OnSuccess] = None,
        on_failure: Optional[OnFailure] = None,
        scheme: str = "http",
    ) -> asyncio.Task:
        """
        Schedule a POST without waiting for it.

        Must be called from within a running event loop.

        Returns:
            The background task (already tracked by the transport)
        """
        task = asyncio.create_task(
            self.deliver(hostname, port, path, payload, on_success, on_failure, scheme)
        )
        self._in_flight.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    async def deliver(
        self,
        hostname: str,
        port: Optional[int],
        path: str,
        payload: dict,
        on_success: Optional[OnSuccess] = None,
        on_failure: Optional[OnFailure] = None,
        scheme: str = "http",
    ) -> None:
        """Perform one POST and hand the outcome to the matching callback."""
        url = build_url(hostname, port, path, scheme)

        try:
            response = await self.client.post(url, json=payload)
        except httpx.HTTPError as e:
            logger.debug("transport.request_failed", url=url, error=repr(e))
            if on_failure is not None:
                await on_failure(UnreachableError(url, e))
            return

        logger.debug("transport.response", url=url, status=response.status_code)
        if on_success is not None:
            await on_success(SellerReply(response.status_code, response.content))

    async def drain(self) -> None:
        """Wait until every send scheduled so far has completed."""
        while self._in_flight:
            await asyncio.gather(*list(self._in_flight), return_exceptions=True)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._in_flight.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("transport.callback_error", error=repr(error))
