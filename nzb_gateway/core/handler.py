"""
Resolves stored search results into redirects or downloaded NZB content and
records every access in the download history.
"""

import logging
import time

from nzb_gateway.exceptions import (
    FetchError,
    IndexerNotFoundError,
    SearchResultNotFoundError,
)
from nzb_gateway.models.download import (
    AccessResult,
    AccessSource,
    AccessType,
    DownloadRecord,
    NfoResult,
    NzbDownloadResult,
    SearchResult,
)
from nzb_gateway.utils.structured_logger import DownloadEventLogger, create_event_logger

from .interfaces import (
    DownloadRepository,
    IndexerProvider,
    OriginFetcher,
    SearchResultRepository,
)

log = logging.getLogger(__name__)


class NzbHandler:
    """
    Hands out NZBs for stored search results.

    Each call that finds its search result writes exactly one record to the
    download history, after the (optional) fetch and before returning.
    """

    def __init__(
        self,
        search_results: SearchResultRepository,
        downloads: DownloadRepository,
        fetcher: OriginFetcher,
        indexers: IndexerProvider | None = None,
        events: DownloadEventLogger | None = None,
    ):
        self.search_results = search_results
        self.downloads = downloads
        self.fetcher = fetcher
        self.indexers = indexers
        self.events = events or create_event_logger()

    async def get_nzb_by_guid(
        self,
        guid: int,
        access_type: AccessType,
        access_source: AccessSource,
        username_or_ip: str | None = None,
    ) -> NzbDownloadResult:
        """
        Redirects to or downloads the NZB of a stored search result.

        Args:
            guid: ID of the search result.
            access_type: REDIRECT returns the indexer link, PROXY fetches the NZB.
            access_source: Origin of the request, stored in the history only.
            username_or_ip: Who asked, stored in the history only.

        Returns:
            An NzbDownloadResult. Unknown GUIDs and failed fetches produce an
            unsuccessful result, never an exception.
        """
        result = await self.search_results.find_by_id(guid)
        if result is None:
            message = f"NZB download request with invalid/outdated GUID {guid}"
            log.error(message)
            self.events.lookup_miss(guid)
            return NzbDownloadResult.failed(message)
        log.info(
            f"NZB download request for {result.title} from indexer "
            f"{result.indexer_name}"
        )

        if access_type == AccessType.REDIRECT:
            log.debug(f"Redirecting to {result.link}")
            await self._save_download(
                result, AccessType.REDIRECT, access_source, AccessResult.UNKNOWN,
                username_or_ip,
            )
            return NzbDownloadResult.redirect(result.title, result.link)

        self.events.fetch_started(result.id, result.indexer_name)
        start_time = time.monotonic()
        try:
            content = await self.fetcher.fetch(result.link)
        except FetchError as e:
            elapsed_ms = (time.monotonic() - start_time) * 1000
            log.error(f"Error while downloading NZB from URL {result.link}: {e}")
            self.events.fetch_failed(result.id, str(e), elapsed_ms)
            await self._save_download(
                result, AccessType.PROXY, access_source,
                AccessResult.CONNECTION_ERROR, username_or_ip, str(e),
            )
            return NzbDownloadResult.failed(
                f"An error occurred while downloading {result.title} from indexer "
                f"{result.indexer_name}"
            )

        elapsed_ms = (time.monotonic() - start_time) * 1000
        # TODO: detect Newznab <error> documents served with a 200 status
        log.info(f"NZB download from indexer successfully completed in {elapsed_ms:.0f}ms")
        self.events.fetch_completed(result.id, len(content), elapsed_ms)
        await self._save_download(
            result, AccessType.PROXY, access_source, AccessResult.SUCCESSFUL,
            username_or_ip,
        )
        return NzbDownloadResult.downloaded(result.title, content)

    async def get_nfo(self, search_result_id: int) -> NfoResult:
        """
        Retrieves the NFO for a stored search result from the indexer that found it.

        Raises:
            SearchResultNotFoundError: If the ID is unknown.
            IndexerNotFoundError: If the result's indexer is not configured.
        """
        result = await self.search_results.find_by_id(search_result_id)
        if result is None:
            message = (
                "NFO request with invalid/outdated search result ID "
                f"{search_result_id}"
            )
            log.error(message)
            self.events.lookup_miss(search_result_id)
            raise SearchResultNotFoundError(message)
        if self.indexers is None:
            raise IndexerNotFoundError(
                f"Indexer '{result.indexer_name}' is not configured."
            )
        indexer = self.indexers.get_indexer_by_name(result.indexer_name)
        return await indexer.get_nfo(result.indexer_guid)

    async def _save_download(
        self,
        result: SearchResult,
        access_type: AccessType,
        access_source: AccessSource,
        access_result: AccessResult,
        username_or_ip: str | None,
        error: str | None = None,
    ) -> None:
        record = DownloadRecord(
            indexer_name=result.indexer_name,
            search_result_id=result.id,
            title=result.title,
            access_type=access_type,
            access_source=access_source,
            result=access_result,
            username_or_ip=username_or_ip,
            error=error,
        )
        stored = await self.downloads.append(record)
        self.events.audit_written(result.id, access_result.value, stored)
