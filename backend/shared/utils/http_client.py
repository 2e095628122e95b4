"""
Async HTTP client for fetching results pages.
One GET per call, no internal retries: retry policy belongs to the caller.
"""
from __future__ import annotations

import time
from types import TracebackType
from typing import Optional

import httpx

from shared.config import Settings, get_settings
from shared.errors import FetchError
from shared.utils.logging import get_logger
from shared.utils.metrics import FETCH_LATENCY, PAGE_FETCHES, atrack_latency

logger = get_logger(__name__)


class HtmlPageFetcher:
    """
    Retrieves raw HTML documents over plain HTTP GET.

    Non-2xx responses and transport failures are both reported as FetchError
    so the crawler only has to handle one failure type per page.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        timeout_s: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._timeout = timeout_s or self._settings.fetch_timeout_s
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def start(self) -> None:
        """Initialize the underlying httpx client."""
        headers = {"User-Agent": self._settings.user_agent} if self._settings.user_agent else None
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self._timeout, connect=5.0),
            headers=headers,
            follow_redirects=True,
            transport=self._transport,
        )

    async def close(self) -> None:
        """Close the underlying httpx client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "HtmlPageFetcher":
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def fetch(self, url: str) -> str:
        """
        Fetch one document.

        Args:
            url: Absolute page URL.

        Returns:
            The decoded response body.

        Raises:
            FetchError: On transport failure or a non-success status.
        """
        if not self._client:
            raise RuntimeError("HtmlPageFetcher not started. Call start() first.")

        start_time = time.perf_counter()
        try:
            async with atrack_latency(FETCH_LATENCY):
                resp = await self._client.get(url)
        except httpx.HTTPError as exc:
            PAGE_FETCHES.labels(status="error").inc()
            logger.warning("page_fetch_transport_error", url=url, error=str(exc))
            raise FetchError(url, reason=str(exc) or type(exc).__name__) from exc

        PAGE_FETCHES.labels(status=str(resp.status_code)).inc()
        if not resp.is_success:
            logger.warning("page_fetch_http_error", url=url, status=resp.status_code)
            raise FetchError(url, status=resp.status_code)

        logger.debug(
            "page_fetch_success",
            url=url,
            status=resp.status_code,
            latency_ms=round((time.perf_counter() - start_time) * 1000, 2),
            size=len(resp.content),
        )
        return resp.text
