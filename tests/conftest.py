"""Shared collaborator doubles for handler and bundler tests."""

import pytest

from nzb_gateway.core import NzbHandler, ZipBundler
from nzb_gateway.exceptions import FetchError
from nzb_gateway.models.download import DownloadRecord, SearchResult


def make_result(guid: int, title: str | None = None, indexer: str = "nzbgeek") -> SearchResult:
    return SearchResult(
        id=guid,
        title=title if title is not None else f"Release {guid}",
        link=f"https://{indexer}.example.com/getnzb/{guid}",
        indexer_name=indexer,
        indexer_guid=f"idx-{guid}",
    )


class InMemorySearchResults:
    def __init__(self, results: list[SearchResult]):
        self.results = {r.id: r for r in results}

    async def find_by_id(self, search_result_id: int) -> SearchResult | None:
        return self.results.get(search_result_id)


class RecordingHistory:
    def __init__(self, accept: bool = True):
        self.records: list[DownloadRecord] = []
        self.accept = accept

    async def append(self, record: DownloadRecord) -> bool:
        if self.accept:
            self.records.append(record)
        return self.accept


class FakeFetcher:
    """Returns configured bytes per URL; URLs listed in `failing` raise FetchError."""

    def __init__(self, failing: set[str] | None = None):
        self.failing = failing or set()
        self.calls: list[str] = []

    async def fetch(self, url: str) -> bytes:
        self.calls.append(url)
        if url in self.failing:
            raise FetchError(f"Connection error: refused for {url}")
        return f"<nzb source='{url}'/>".encode()


@pytest.fixture
def history() -> RecordingHistory:
    return RecordingHistory()


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def search_results() -> InMemorySearchResults:
    return InMemorySearchResults([make_result(i, title=str(i)) for i in (1, 2, 3)])


@pytest.fixture
def handler(search_results, history, fetcher) -> NzbHandler:
    return NzbHandler(search_results, history, fetcher)


@pytest.fixture
def scratch_dir(tmp_path):
    path = tmp_path / "scratch"
    path.mkdir()
    return path


@pytest.fixture
def bundler(handler, scratch_dir) -> ZipBundler:
    return ZipBundler(handler, temp_dir=scratch_dir)
