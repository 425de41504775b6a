"""
Fetches NZB content from indexers over HTTP.
"""

import asyncio
import logging

import aiohttp

from nzb_gateway import __version__
from nzb_gateway.exceptions import FetchError

log = logging.getLogger(__name__)


class NzbFetcher:
    """
    Downloads the content behind an indexer link in a single attempt.

    The deadline is enforced here through the session timeout. Every failure
    (connection error, timeout, non-2xx status) is raised as FetchError.
    """

    def __init__(self, timeout_s: int = 30, max_connections: int = 16):
        self.timeout_s = timeout_s
        self.max_connections = max_connections
        self._session: aiohttp.ClientSession | None = None

    async def _initialize_session(self) -> aiohttp.ClientSession:
        """Ensures an active aiohttp session is available."""
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(
                limit=self.max_connections,
                ttl_dns_cache=300,
                enable_cleanup_closed=True,
            )
            self._session = aiohttp.ClientSession(
                connector=connector,
                headers={
                    "User-Agent": f"nzb-gateway/{__version__}",
                    "Accept-Encoding": "gzip, deflate",
                },
                timeout=aiohttp.ClientTimeout(
                    total=self.timeout_s, sock_connect=min(15, self.timeout_s)
                ),
            )
            log.debug(f"Created fetcher session with timeout={self.timeout_s}s")
        return self._session

    async def close(self) -> None:
        """Gracefully closes the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None
            log.debug("Fetcher session closed.")

    async def __aenter__(self) -> "NzbFetcher":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def fetch(self, url: str) -> bytes:
        """Returns the body of a successful GET request to `url`."""
        session = await self._initialize_session()
        try:
            async with session.get(url, allow_redirects=True) as response:
                if not 200 <= response.status < 300:
                    raise FetchError(
                        f"Indexer returned HTTP {response.status} {response.reason}"
                    )
                return await response.read()
        except asyncio.TimeoutError as e:
            raise FetchError(f"Timeout after {self.timeout_s}s") from e
        except aiohttp.ClientError as e:
            raise FetchError(f"Connection error: {e}") from e
