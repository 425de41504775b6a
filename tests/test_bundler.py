"""Unit tests for ZipBundler and create_zip."""

import sqlite3
import zipfile
from pathlib import Path

import aiofiles
import pytest

from nzb_gateway.core import NzbHandler, ZipBundler, create_zip
from nzb_gateway.core import bundler as bundler_module
from nzb_gateway.exceptions import ArchiveAssemblyError, NothingRetrievableError
from nzb_gateway.models.download import AccessResult, AccessSource, AccessType
from nzb_gateway.models.stats import BundleStats

from .conftest import FakeFetcher, InMemorySearchResults, RecordingHistory, make_result


class TestGetNzbsAsZip:
    @pytest.mark.asyncio
    async def test_skips_failed_items_and_keeps_order(
        self, search_results, history, scratch_dir, tmp_path
    ):
        fetcher = FakeFetcher(failing={"https://nzbgeek.example.com/getnzb/2"})
        bundler = ZipBundler(NzbHandler(search_results, history, fetcher), temp_dir=scratch_dir)

        zip_path = await bundler.get_nzbs_as_zip([1, 2, 3], "alice", tmp_path / "out.zip")

        with zipfile.ZipFile(zip_path) as zf:
            assert zf.namelist() == ["1.nzb", "3.nzb"]
            assert zf.read("3.nzb") == b"<nzb source='https://nzbgeek.example.com/getnzb/3'/>"
        assert [r.result for r in history.records] == [
            AccessResult.SUCCESSFUL,
            AccessResult.CONNECTION_ERROR,
            AccessResult.SUCCESSFUL,
        ]
        assert list(scratch_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_always_fetches_as_internal_proxy(self, bundler, history, tmp_path):
        await bundler.get_nzbs_as_zip([3, 1], "alice", tmp_path / "out.zip")

        assert all(r.access_type == AccessType.PROXY for r in history.records)
        assert all(r.access_source == AccessSource.INTERNAL for r in history.records)
        assert all(r.username_or_ip == "alice" for r in history.records)
        assert [r.search_result_id for r in history.records] == [3, 1]

    @pytest.mark.asyncio
    async def test_unknown_guids_are_skipped(self, bundler, history, tmp_path):
        zip_path = await bundler.get_nzbs_as_zip([1, 404], None, tmp_path / "out.zip")

        with zipfile.ZipFile(zip_path) as zf:
            assert zf.namelist() == ["1.nzb"]
        assert len(history.records) == 1

    @pytest.mark.asyncio
    async def test_nothing_retrievable(self, search_results, history, scratch_dir, tmp_path):
        fetcher = FakeFetcher(failing={r.link for r in search_results.results.values()})
        bundler = ZipBundler(NzbHandler(search_results, history, fetcher), temp_dir=scratch_dir)
        destination = tmp_path / "out.zip"

        with pytest.raises(NothingRetrievableError):
            await bundler.get_nzbs_as_zip([1, 2, 3], "alice", destination)

        assert not destination.exists()
        assert list(scratch_dir.iterdir()) == []
        assert len(history.records) == 3

    @pytest.mark.asyncio
    async def test_empty_request_is_nothing_retrievable(self, bundler, history):
        with pytest.raises(NothingRetrievableError):
            await bundler.get_nzbs_as_zip([], "alice")
        assert history.records == []

    @pytest.mark.asyncio
    async def test_duplicate_titles_get_distinct_entries(self, scratch_dir, tmp_path):
        results = InMemorySearchResults(
            [make_result(1, title="Same/Title"), make_result(2, title="Same/Title")]
        )
        bundler = ZipBundler(
            NzbHandler(results, RecordingHistory(), FakeFetcher()), temp_dir=scratch_dir
        )

        zip_path = await bundler.get_nzbs_as_zip([1, 2], None, tmp_path / "out.zip")

        with zipfile.ZipFile(zip_path) as zf:
            assert zf.namelist() == ["SameTitle.nzb", "SameTitle (2).nzb"]

    @pytest.mark.asyncio
    async def test_assembly_failure_cleans_up(self, bundler, scratch_dir, tmp_path):
        destination = tmp_path / "missing-dir" / "out.zip"

        with pytest.raises(ArchiveAssemblyError):
            await bundler.get_nzbs_as_zip([1, 2], "alice", destination)

        assert list(scratch_dir.iterdir()) == []
        assert not destination.exists()

    @pytest.mark.asyncio
    async def test_returns_temporary_zip_when_no_destination(self, bundler):
        zip_path = await bundler.get_nzbs_as_zip([1])
        try:
            assert zip_path.suffix == ".zip"
            with zipfile.ZipFile(zip_path) as zf:
                assert zf.namelist() == ["1.nzb"]
        finally:
            zip_path.unlink()

    @pytest.mark.asyncio
    async def test_long_titles_are_bundled(self, scratch_dir, tmp_path):
        long_title = "A" * 254
        results = InMemorySearchResults(
            [
                make_result(1, title=long_title),
                make_result(2, title="short"),
                make_result(3, title=long_title),
            ]
        )
        history = RecordingHistory()
        bundler = ZipBundler(
            NzbHandler(results, history, FakeFetcher()), temp_dir=scratch_dir
        )

        zip_path = await bundler.get_nzbs_as_zip([1, 2, 3], None, tmp_path / "out.zip")

        with zipfile.ZipFile(zip_path) as zf:
            assert zf.namelist() == [
                "A" * 251 + ".nzb",
                "short.nzb",
                "A" * 247 + " (2).nzb",
            ]
        assert [r.result for r in history.records] == [AccessResult.SUCCESSFUL] * 3

    @pytest.mark.asyncio
    async def test_write_failure_skips_item(self, bundler, history, tmp_path, monkeypatch):
        real_open = aiofiles.open

        def failing_open(path, *args, **kwargs):
            if Path(path).name == "2.nzb":
                raise OSError(28, "No space left on device")
            return real_open(path, *args, **kwargs)

        monkeypatch.setattr(bundler_module.aiofiles, "open", failing_open)
        stats = BundleStats()

        zip_path = await bundler.get_nzbs_as_zip(
            [1, 2, 3], None, tmp_path / "out.zip", stats=stats
        )

        with zipfile.ZipFile(zip_path) as zf:
            assert zf.namelist() == ["1.nzb", "3.nzb"]
        assert (stats.requested, stats.bundled, stats.failed) == (3, 2, 1)

    @pytest.mark.asyncio
    async def test_lookup_error_does_not_abort_batch(self, scratch_dir, tmp_path):
        class LockedStore(InMemorySearchResults):
            async def find_by_id(self, search_result_id):
                if search_result_id == 2:
                    raise sqlite3.OperationalError("database is locked")
                return await super().find_by_id(search_result_id)

        results = LockedStore([make_result(i, title=str(i)) for i in (1, 2, 3)])
        history = RecordingHistory()
        bundler = ZipBundler(
            NzbHandler(results, history, FakeFetcher()), temp_dir=scratch_dir
        )
        stats = BundleStats()

        zip_path = await bundler.get_nzbs_as_zip(
            [1, 2, 3], "alice", tmp_path / "out.zip", stats=stats
        )

        with zipfile.ZipFile(zip_path) as zf:
            assert zf.namelist() == ["1.nzb", "3.nzb"]
        assert [r.search_result_id for r in history.records] == [1, 3]
        assert (stats.bundled, stats.failed) == (2, 1)
        assert list(scratch_dir.iterdir()) == []


class TestCreateZip:
    def test_entries_follow_input_order_and_sources_are_deleted(self, tmp_path):
        artifacts = []
        for name in ("b.nzb", "a.nzb", "c.nzb"):
            path = tmp_path / name
            path.write_bytes(name.encode())
            artifacts.append(path)

        zip_path = create_zip(artifacts, tmp_path / "out.zip")

        with zipfile.ZipFile(zip_path) as zf:
            assert zf.namelist() == ["b.nzb", "a.nzb", "c.nzb"]
            assert zf.read("a.nzb") == b"a.nzb"
        assert not any(path.exists() for path in artifacts)

    def test_empty_input_gives_valid_empty_zip(self, tmp_path):
        zip_path = create_zip([], tmp_path / "empty.zip")

        assert zipfile.is_zipfile(zip_path)
        with zipfile.ZipFile(zip_path) as zf:
            assert zf.namelist() == []

    def test_missing_artifact_raises_and_removes_partial_zip(self, tmp_path):
        destination = tmp_path / "out.zip"

        with pytest.raises(ArchiveAssemblyError):
            create_zip([tmp_path / "gone.nzb"], destination)

        assert not destination.exists()
