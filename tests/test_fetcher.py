"""Unit tests for NzbFetcher."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from nzb_gateway.exceptions import FetchError
from nzb_gateway.net import NzbFetcher


def _response_context(status: int = 200, body: bytes = b"", reason: str = "OK"):
    response = MagicMock(status=status, reason=reason)
    response.read = AsyncMock(return_value=body)
    context = MagicMock()
    context.__aenter__ = AsyncMock(return_value=response)
    context.__aexit__ = AsyncMock(return_value=False)
    return context


def _fetcher_with_session(session) -> NzbFetcher:
    fetcher = NzbFetcher(timeout_s=5)
    fetcher._session = session
    return fetcher


class TestNzbFetcher:
    @pytest.mark.asyncio
    async def test_returns_body(self):
        session = MagicMock(closed=False)
        session.get.return_value = _response_context(body=b"<nzb/>")
        fetcher = _fetcher_with_session(session)

        assert await fetcher.fetch("https://indexer.example.com/getnzb/1") == b"<nzb/>"
        session.get.assert_called_once_with(
            "https://indexer.example.com/getnzb/1", allow_redirects=True
        )

    @pytest.mark.asyncio
    async def test_non_2xx_raises(self):
        session = MagicMock(closed=False)
        session.get.return_value = _response_context(status=503, reason="Service Unavailable")
        fetcher = _fetcher_with_session(session)

        with pytest.raises(FetchError, match="HTTP 503"):
            await fetcher.fetch("https://indexer.example.com/getnzb/1")

    @pytest.mark.asyncio
    async def test_connection_error_raises_fetch_error(self):
        session = MagicMock(closed=False)
        session.get.side_effect = aiohttp.ClientConnectionError("refused")
        fetcher = _fetcher_with_session(session)

        with pytest.raises(FetchError, match="refused"):
            await fetcher.fetch("https://indexer.example.com/getnzb/1")

    @pytest.mark.asyncio
    async def test_timeout_raises_fetch_error(self):
        context = _response_context()
        context.__aenter__ = AsyncMock(side_effect=asyncio.TimeoutError())
        session = MagicMock(closed=False)
        session.get.return_value = context
        fetcher = _fetcher_with_session(session)

        with pytest.raises(FetchError, match="Timeout after 5s"):
            await fetcher.fetch("https://indexer.example.com/getnzb/1")

    @pytest.mark.asyncio
    async def test_close_closes_open_session(self):
        session = MagicMock(closed=False)
        session.close = AsyncMock()
        fetcher = _fetcher_with_session(session)

        await fetcher.close()

        session.close.assert_awaited_once()
        assert fetcher._session is None
