"""Unit tests for HtmlPageFetcher over a mocked httpx transport."""
from __future__ import annotations

import httpx
import pytest

from shared.config import Settings
from shared.errors import FetchError
from shared.utils.http_client import HtmlPageFetcher

URL = "https://www.matchendirect.fr/europe/ligue-des-champions-uefa/2022-15/"


def _fetcher(handler) -> HtmlPageFetcher:
    return HtmlPageFetcher(Settings(), transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_success_returns_body_text() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, text="<html><body>août</body></html>")

    async with _fetcher(handler) as fetcher:
        body = await fetcher.fetch(URL)

    assert body == "<html><body>août</body></html>"
    assert [(r.method, str(r.url)) for r in seen] == [("GET", URL)]


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [404, 500, 503])
async def test_non_success_status_raises_fetch_error(status: int) -> None:
    async with _fetcher(lambda request: httpx.Response(status)) as fetcher:
        with pytest.raises(FetchError) as exc_info:
            await fetcher.fetch(URL)

    assert exc_info.value.status == status
    assert exc_info.value.url == URL


@pytest.mark.asyncio
async def test_transport_failure_raises_fetch_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _fetcher(handler) as fetcher:
        with pytest.raises(FetchError) as exc_info:
            await fetcher.fetch(URL)

    assert exc_info.value.status is None
    assert "connection refused" in exc_info.value.reason


@pytest.mark.asyncio
async def test_no_retry_on_failure() -> None:
    calls = {"n": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["n"] += 1
        return httpx.Response(502)

    async with _fetcher(handler) as fetcher:
        with pytest.raises(FetchError):
            await fetcher.fetch(URL)

    assert calls["n"] == 1


@pytest.mark.asyncio
async def test_fetch_before_start_is_an_error() -> None:
    fetcher = _fetcher(lambda request: httpx.Response(200))
    with pytest.raises(RuntimeError):
        await fetcher.fetch(URL)


@pytest.mark.asyncio
async def test_configured_user_agent_is_sent() -> None:
    agents: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        agents.append(request.headers["user-agent"])
        return httpx.Response(200, text="ok")

    settings = Settings(user_agent="results-crawler/1.0")
    async with HtmlPageFetcher(settings, transport=httpx.MockTransport(handler)) as fetcher:
        await fetcher.fetch(URL)

    assert agents == ["results-crawler/1.0"]
