"""
Minimal Newznab API client, used to retrieve NFOs for stored search results.
"""

import asyncio
import logging

import aiohttp

from nzb_gateway.models.config import IndexerConfig
from nzb_gateway.models.download import NfoResult
from nzb_gateway.utils.circuit_breaker import CircuitBreaker, CircuitBreakerError

log = logging.getLogger(__name__)

# Phrases indexers put in the body instead of an NFO
NO_NFO_MARKERS = ("no nfo", "nfo not found", "<error")


class NewznabIndexer:
    """Talks to one Newznab-compatible indexer."""

    def __init__(
        self,
        config: IndexerConfig,
        session: aiohttp.ClientSession | None = None,
        timeout_s: int = 30,
    ):
        self.config = config
        self.timeout_s = timeout_s
        self._session = session
        self._owns_session = session is None
        self._circuit_breaker = CircuitBreaker(config.name)

    @property
    def name(self) -> str:
        return self.config.name

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout_s)
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    def _build_params(self, indexer_guid: str) -> dict[str, str]:
        params = {"t": "getnfo", "id": indexer_guid, "raw": "1"}
        if self.config.api_key:
            params["apikey"] = self.config.api_key
        return params

    async def get_nfo(self, indexer_guid: str) -> NfoResult:
        """
        Asks the indexer for the NFO of one of its releases.

        Args:
            indexer_guid: The release ID as known by the indexer.

        Returns:
            An NfoResult. Transport problems yield a failed result rather than an
            exception so callers can show the reason.
        """
        session = await self._get_session()
        url = f"{self.config.host}/api"
        try:
            async with self._circuit_breaker:
                async with session.get(
                    url, params=self._build_params(indexer_guid)
                ) as response:
                    response.raise_for_status()
                    content = await response.text()
        except CircuitBreakerError as e:
            return NfoResult.failed(str(e))
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            log.warning(f"NFO request to indexer '{self.name}' failed: {e}")
            return NfoResult.failed(
                f"Error while retrieving NFO from indexer {self.name}"
            )

        lowered = content.strip().lower()
        if not lowered or any(lowered.startswith(m) for m in NO_NFO_MARKERS):
            log.debug(f"Indexer '{self.name}' has no NFO for {indexer_guid}")
            return NfoResult.without_nfo()
        return NfoResult.with_nfo(content)
