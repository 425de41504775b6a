"""
Data structures passed between the store, the handler and its callers.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class AccessType(Enum):
    """How an NZB is handed to the caller."""

    REDIRECT = "redirect"  # Caller is sent to the indexer's link
    PROXY = "proxy"  # Content is fetched here and returned inline


class AccessSource(Enum):
    """Where a download request originated. Only recorded, never acted on."""

    INTERNAL = "internal"
    API = "api"


class AccessResult(Enum):
    """Outcome of an access attempt as stored in the download history."""

    UNKNOWN = "unknown"
    SUCCESSFUL = "successful"
    CONNECTION_ERROR = "connection_error"


class DownloadType(Enum):
    """Kind of resource a link points to."""

    NZB = "getnzb"
    TORRENT = "gettorrent"


@dataclass(frozen=True)
class SearchResult:
    """A search result previously stored by the indexing layer."""

    id: int
    title: str
    link: str
    indexer_name: str
    indexer_guid: str
    details_link: str | None = None
    size: int | None = None
    pub_date: datetime | None = None


@dataclass(frozen=True)
class DownloadRecord:
    """One entry of the download history. Never updated after creation."""

    indexer_name: str
    search_result_id: int
    title: str
    access_type: AccessType
    access_source: AccessSource
    result: AccessResult
    username_or_ip: str | None = None
    error: str | None = None
    time: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class NzbDownloadResult:
    """The outcome of a single download request, returned to the caller."""

    successful: bool
    title: str | None = None
    content: bytes | None = None
    redirect_url: str | None = None
    error: str | None = None

    @classmethod
    def redirect(cls, title: str, url: str) -> "NzbDownloadResult":
        return cls(successful=True, title=title, redirect_url=url)

    @classmethod
    def downloaded(cls, title: str, content: bytes) -> "NzbDownloadResult":
        return cls(successful=True, title=title, content=content)

    @classmethod
    def failed(cls, error: str) -> "NzbDownloadResult":
        return cls(successful=False, error=error)

    @property
    def is_redirect(self) -> bool:
        return self.successful and self.redirect_url is not None


@dataclass(frozen=True)
class NfoResult:
    """Result of asking an indexer for the NFO of one of its releases."""

    successful: bool
    has_nfo: bool = False
    content: str | None = None
    error: str | None = None

    @classmethod
    def with_nfo(cls, content: str) -> "NfoResult":
        return cls(successful=True, has_nfo=True, content=content)

    @classmethod
    def without_nfo(cls) -> "NfoResult":
        return cls(successful=True, has_nfo=False)

    @classmethod
    def failed(cls, error: str) -> "NfoResult":
        return cls(successful=False, error=error)
