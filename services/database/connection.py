import os
import sqlite3
import logging
from typing import Dict, Tuple

# Tables whose row counts are reported by get_database_info()
REPORTED_TABLES = ("torrent_jobs", "catalog_tracks")


class DatabaseConnection:
    """Opens short-lived SQLite connections to the job database.

    Every store method opens its own connection, so the monitor thread and
    the submission path never share a connection object.
    """

    PRAGMAS = (
        "PRAGMA journal_mode=WAL",
        "PRAGMA synchronous=NORMAL",
    )

    def __init__(self, db_file: str, busy_timeout_ms: int = 30000):
        self.db_file = db_file
        self.busy_timeout_ms = busy_timeout_ms
        self.logger = logging.getLogger("DatabaseService.Connection")

    def connect_db(self) -> Tuple[sqlite3.Connection, sqlite3.Cursor]:
        """Open a connection with row access by column name and lock waiting enabled."""
        try:
            conn = sqlite3.connect(self.db_file, timeout=self.busy_timeout_ms / 1000.0)
            conn.row_factory = sqlite3.Row
            cursor = conn.cursor()
        except sqlite3.Error as e:
            self.logger.error(f"Failed to open job database {self.db_file}: {e}")
            raise

        self._apply_pragmas(cursor)
        return conn, cursor

    def _apply_pragmas(self, cursor: sqlite3.Cursor):
        for pragma in self.PRAGMAS + (f"PRAGMA busy_timeout={int(self.busy_timeout_ms)}",):
            try:
                cursor.execute(pragma)
            except sqlite3.Error as e:
                self.logger.warning(f"Could not apply {pragma}: {e}")

    def test_connection(self) -> bool:
        """Return True when the database answers a trivial query."""
        try:
            conn, cursor = self.connect_db()
        except sqlite3.Error:
            return False
        try:
            cursor.execute("SELECT 1")
            return cursor.fetchone() is not None
        except sqlite3.Error as e:
            self.logger.error(f"Job database check failed: {e}")
            return False
        finally:
            conn.close()

    def get_database_info(self) -> Dict[str, object]:
        """File size plus row counts of the intake tables."""
        info: Dict[str, object] = {'file_path': self.db_file, 'exists': os.path.exists(self.db_file)}
        if not info['exists']:
            return info

        size_bytes = os.path.getsize(self.db_file)
        info['size_mb'] = round(size_bytes / (1024 * 1024), 2)

        conn, cursor = self.connect_db()
        try:
            counts = {}
            for table in REPORTED_TABLES:
                cursor.execute(f"SELECT COUNT(*) FROM {table}")
                counts[table] = cursor.fetchone()[0]
            info['row_counts'] = counts
        except sqlite3.Error as e:
            self.logger.warning(f"Could not count rows in {self.db_file}: {e}")
        finally:
            conn.close()
        return info
