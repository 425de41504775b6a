"""
SQLite-backed store of search results, looked up by their numeric GUID.
"""

import logging
import sqlite3
from datetime import datetime

from nzb_gateway.models.download import SearchResult

from .database import SqliteDatabase

log = logging.getLogger(__name__)


class SearchResultStore(SqliteDatabase):
    """
    Holds the search results the indexing layer discovered. The download
    handler only reads from it; `add` exists for importing results.
    """

    def _create_schema(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS search_results (
                id INTEGER PRIMARY KEY NOT NULL,
                title TEXT NOT NULL,
                link TEXT NOT NULL,
                indexer_name TEXT NOT NULL,
                indexer_guid TEXT NOT NULL,
                details_link TEXT,
                size INTEGER,
                pub_date TEXT
            );
            """
        )
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_search_results_indexer ON"
            " search_results(indexer_name);"
        )

    @staticmethod
    def _row_to_result(row: sqlite3.Row) -> SearchResult:
        pub_date = row["pub_date"]
        return SearchResult(
            id=row["id"],
            title=row["title"],
            link=row["link"],
            indexer_name=row["indexer_name"],
            indexer_guid=row["indexer_guid"],
            details_link=row["details_link"],
            size=row["size"],
            pub_date=datetime.fromisoformat(pub_date) if pub_date else None,
        )

    def _find_sync(self, search_result_id: int) -> SearchResult | None:
        conn = self._get_connection()
        try:
            row = conn.execute(
                "SELECT * FROM search_results WHERE id = ?", (search_result_id,)
            ).fetchone()
        finally:
            conn.close()
        return self._row_to_result(row) if row else None

    async def find_by_id(self, search_result_id: int) -> SearchResult | None:
        """Returns the stored search result with this ID, or None."""
        return await self._run_in_executor(self._find_sync, search_result_id)

    def _add_batch_sync(self, results: list[SearchResult]) -> int:
        records = [
            (
                r.id,
                r.title,
                r.link,
                r.indexer_name,
                r.indexer_guid,
                r.details_link,
                r.size,
                r.pub_date.isoformat() if r.pub_date else None,
            )
            for r in results
        ]
        if not records:
            return 0

        conn = self._get_connection()
        try:
            with conn:
                conn.executemany(
                    "INSERT OR REPLACE INTO search_results (id, title, link,"
                    " indexer_name, indexer_guid, details_link, size, pub_date)"
                    " VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                    records,
                )
        finally:
            conn.close()
        return len(records)

    async def add(self, results: list[SearchResult]) -> int:
        """Inserts or replaces search results. Returns the number written."""
        count = await self._run_in_executor(self._add_batch_sync, results)
        log.debug(f"Stored {count} search results.")
        return count
