"""
Collaborator interfaces consumed by the download handler.

The handler only depends on these protocols. The SQLite stores in
`nzb_gateway.storage`, the aiohttp fetcher in `nzb_gateway.net` and the
indexer registry in `nzb_gateway.indexers` are the default implementations.
"""

from typing import Protocol

from nzb_gateway.models.download import DownloadRecord, NfoResult, SearchResult


class SearchResultRepository(Protocol):
    """Read-only lookup of stored search results."""

    async def find_by_id(self, search_result_id: int) -> SearchResult | None:
        """Returns the search result or None if the ID is unknown."""
        ...


class DownloadRepository(Protocol):
    """Append-only download history."""

    async def append(self, record: DownloadRecord) -> bool:
        """Stores a record. Returns False if it could not be written."""
        ...


class OriginFetcher(Protocol):
    """Retrieves the raw bytes behind a URL."""

    async def fetch(self, url: str) -> bytes:
        """Raises FetchError on connection failure, timeout or non-2xx status."""
        ...


class Indexer(Protocol):
    async def get_nfo(self, indexer_guid: str) -> NfoResult: ...


class IndexerProvider(Protocol):
    def get_indexer_by_name(self, name: str) -> Indexer:
        """Raises IndexerNotFoundError for unknown names."""
        ...
