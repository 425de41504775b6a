"""
Bundles the NZBs of several search results into a single ZIP file.
"""

import asyncio
import logging
import os
import shutil
import tempfile
import zipfile
from pathlib import Path

import aiofiles

from nzb_gateway.exceptions import ArchiveAssemblyError, NothingRetrievableError
from nzb_gateway.models.download import AccessSource, AccessType
from nzb_gateway.models.stats import BundleStats
from nzb_gateway.utils.path import artifact_name

from .handler import NzbHandler

log = logging.getLogger(__name__)


def create_zip(artifacts: list[Path], destination: Path | None = None) -> Path:
    """
    Packs files into a ZIP, one entry per file named after it, in list order.

    Each file is deleted once it has been added. An empty list gives a valid,
    empty ZIP.

    Args:
        artifacts: Files to add.
        destination: Where to write the ZIP. A new temporary file if omitted.

    Returns:
        The path of the written ZIP.

    Raises:
        ArchiveAssemblyError: If the ZIP could not be written. The partial ZIP
        is removed.
    """
    log.info("Creating ZIP with NZBs")
    if destination is None:
        fd, name = tempfile.mkstemp(prefix="nzb-gateway-", suffix=".zip")
        os.close(fd)
        destination = Path(name)
    log.debug(f"Using ZIP file {destination}")

    try:
        with zipfile.ZipFile(destination, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for artifact in artifacts:
                log.debug(f"Adding file {artifact} to ZIP")
                zf.write(artifact, arcname=artifact.name)
                artifact.unlink()
    except (OSError, zipfile.BadZipFile, zipfile.LargeZipFile) as e:
        destination.unlink(missing_ok=True)
        raise ArchiveAssemblyError(f"Unable to write ZIP file: {e}") from e

    return destination


class ZipBundler:
    """
    Downloads several NZBs through the handler and packs the ones that could be
    retrieved into one ZIP. Individual failures are skipped.
    """

    def __init__(self, handler: NzbHandler, temp_dir: Path | None = None):
        """
        Args:
            handler: Used for every single download, so each one is recorded
            in the download history.
            temp_dir: Parent directory for the per-call scratch directory.
        """
        self.handler = handler
        self.temp_dir = temp_dir

    async def get_nzbs_as_zip(
        self,
        guids: list[int],
        username_or_ip: str | None = None,
        destination: Path | None = None,
        stats: BundleStats | None = None,
    ) -> Path:
        """
        Returns the path of a ZIP containing every NZB that could be downloaded.

        The caller owns the returned file. Scratch files are removed on every
        exit path. A `stats` object passed in is filled with the run's counts.

        Raises:
            NothingRetrievableError: If not a single NZB could be downloaded.
            ArchiveAssemblyError: If writing the ZIP failed.
        """
        if stats is None:
            stats = BundleStats()
        stats.requested = len(guids)
        scratch_dir = Path(
            await asyncio.to_thread(
                tempfile.mkdtemp, prefix="nzb-gateway-", dir=self.temp_dir
            )
        )
        try:
            artifacts = await self._download_all(guids, username_or_ip, scratch_dir, stats)
            if not artifacts:
                raise NothingRetrievableError("No NZBs could be retrieved")

            log.info(
                f"Successfully added {stats.bundled}/{stats.requested} NZBs to ZIP"
            )
            self.handler.events.bundle_summary(
                stats.bundled, stats.requested, stats.total_size
            )
            return await asyncio.to_thread(create_zip, artifacts, destination)
        finally:
            await asyncio.to_thread(shutil.rmtree, scratch_dir, True)

    async def _download_all(
        self,
        guids: list[int],
        username_or_ip: str | None,
        scratch_dir: Path,
        stats: BundleStats,
    ) -> list[Path]:
        artifacts: list[Path] = []
        taken: set[str] = set()
        for guid in guids:
            try:
                result = await self.handler.get_nzb_by_guid(
                    guid, AccessType.PROXY, AccessSource.INTERNAL, username_or_ip
                )
            except Exception as e:
                log.warning(f"Failed to download NZB for GUID {guid}: {e}")
                stats.record_failure()
                continue

            if not result.successful:
                log.debug(f"Skipping GUID {guid} for ZIP: {result.error}")
                stats.record_failure()
                continue

            path = scratch_dir / artifact_name(result.title, taken)
            try:
                async with aiofiles.open(path, "wb") as f:
                    await f.write(result.content)
            except OSError as e:
                log.error(f"Unable to write NZB content to temporary file: {e}")
                stats.record_failure()
                continue

            artifacts.append(path)
            stats.record_success(len(result.content))
        return artifacts
