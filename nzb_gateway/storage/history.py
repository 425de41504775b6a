"""
Append-only SQLite log of every NZB access attempt.
"""

import logging
import sqlite3
from datetime import datetime
from typing import Any

from nzb_gateway.models.download import (
    AccessResult,
    AccessSource,
    AccessType,
    DownloadRecord,
)

from .database import SqliteDatabase

log = logging.getLogger(__name__)


class DownloadHistory(SqliteDatabase):
    """
    Records downloads and redirects. Rows are only ever inserted; nothing in the
    application updates or deletes them.
    """

    def _create_schema(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS nzb_downloads (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                indexer_name TEXT NOT NULL,
                search_result_id INTEGER NOT NULL,
                title TEXT,
                access_type TEXT NOT NULL,
                access_source TEXT NOT NULL,
                result TEXT NOT NULL,
                username_or_ip TEXT,
                error TEXT,
                time TEXT NOT NULL
            );
            """
        )
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_nzb_downloads_search_result ON"
            " nzb_downloads(search_result_id);"
        )

    def _append_sync(self, record: DownloadRecord) -> bool:
        try:
            conn = self._get_connection()
            try:
                with conn:
                    conn.execute(
                        "INSERT INTO nzb_downloads (indexer_name, search_result_id,"
                        " title, access_type, access_source, result, username_or_ip,"
                        " error, time) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
                        (
                            record.indexer_name,
                            record.search_result_id,
                            record.title,
                            record.access_type.value,
                            record.access_source.value,
                            record.result.value,
                            record.username_or_ip,
                            record.error,
                            record.time.isoformat(),
                        ),
                    )
            finally:
                conn.close()
            return True
        except sqlite3.Error as e:
            log.error(
                f"Failed to save download of search result "
                f"{record.search_result_id} to history: {e}"
            )
            return False

    async def append(self, record: DownloadRecord) -> bool:
        """Adds a record to the history."""
        return await self._run_in_executor(self._append_sync, record)

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> DownloadRecord:
        return DownloadRecord(
            indexer_name=row["indexer_name"],
            search_result_id=row["search_result_id"],
            title=row["title"],
            access_type=AccessType(row["access_type"]),
            access_source=AccessSource(row["access_source"]),
            result=AccessResult(row["result"]),
            username_or_ip=row["username_or_ip"],
            error=row["error"],
            time=datetime.fromisoformat(row["time"]),
        )

    def _recent_sync(self, limit: int) -> list[DownloadRecord]:
        conn = self._get_connection()
        try:
            rows = conn.execute(
                "SELECT * FROM nzb_downloads ORDER BY id DESC LIMIT ?", (limit,)
            ).fetchall()
        finally:
            conn.close()
        return [self._row_to_record(row) for row in rows]

    async def recent(self, limit: int = 50) -> list[DownloadRecord]:
        """Returns the newest records first."""
        return await self._run_in_executor(self._recent_sync, limit)

    def _get_stats_sync(self) -> dict[str, Any] | None:
        try:
            conn = self._get_connection()
            try:
                total = conn.execute("SELECT COUNT(*) FROM nzb_downloads").fetchone()[0]
                by_result = conn.execute(
                    "SELECT result, COUNT(*) FROM nzb_downloads GROUP BY result"
                ).fetchall()
                by_indexer = conn.execute(
                    """
                    SELECT indexer_name, COUNT(*) as count
                    FROM nzb_downloads
                    GROUP BY indexer_name
                    ORDER BY count DESC
                    LIMIT 10
                    """
                ).fetchall()
            finally:
                conn.close()
            return {
                "total_downloads": total,
                "by_result": {row[0]: row[1] for row in by_result},
                "top_indexers": [(row[0], row[1]) for row in by_indexer],
            }
        except sqlite3.Error as e:
            log.error(f"Failed to get download history stats: {e}")
            return None

    async def get_stats(self) -> dict[str, Any] | None:
        """Retrieves aggregate counts from the download history."""
        return await self._run_in_executor(self._get_stats_sync)
