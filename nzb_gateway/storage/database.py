"""
Shared SQLite plumbing for the search result store and the download history.
"""

import asyncio
import logging
import sqlite3
from pathlib import Path

log = logging.getLogger(__name__)

DATABASE_FILENAME = "nzb_gateway.sqlite"


class SqliteDatabase:
    """
    Base class for thread-offloaded SQLite access with a bounded number of
    concurrent connections. Subclasses provide `_create_schema`.
    """

    def __init__(self, data_dir_path: Path, pool_size: int = 5):
        data_dir_path.mkdir(parents=True, exist_ok=True)
        self.db_path = data_dir_path / DATABASE_FILENAME
        self._connection_semaphore = asyncio.Semaphore(pool_size)
        self._initialize_db()

    def _get_connection(self) -> sqlite3.Connection:
        """Gets a new database connection with optimized PRAGMA settings."""
        try:
            conn = sqlite3.connect(self.db_path, timeout=30, check_same_thread=False)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA journal_mode=WAL;")
            conn.execute("PRAGMA synchronous=NORMAL;")
            return conn
        except sqlite3.Error as e:
            log.error(f"Failed to connect to database: {e}")
            raise

    def _initialize_db(self) -> None:
        try:
            conn = self._get_connection()
            try:
                with conn:
                    self._create_schema(conn)
            finally:
                conn.close()
        except sqlite3.Error as e:
            log.error(f"Failed to initialize database at '{self.db_path}': {e}")

    def _create_schema(self, conn: sqlite3.Connection) -> None:
        raise NotImplementedError

    async def _run_in_executor(self, func, *args):
        """Runs a synchronous database function within the connection pool semaphore."""
        async with self._connection_semaphore:
            return await asyncio.to_thread(func, *args)
