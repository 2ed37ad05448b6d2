"""
Module Name: migrations.py
Description:
    Creates the SQLite schema used by the intake worker: the torrent job
    table tracked by the monitor and the catalog of imported tracks.

Location:
    /services/database/migrations.py

"""

from typing import TYPE_CHECKING

from utils.logger import get_module_logger

if TYPE_CHECKING:
    from .connection import DatabaseConnection


class DatabaseMigrations:
    """Handles database initialization and schema migrations."""

    def __init__(self, connection_manager: "DatabaseConnection", *, logger=None):
        self.connection_manager = connection_manager
        self.logger = logger or get_module_logger("Service.Database.Migrations")

    def initialize_database(self):
        """Create every table and index if missing."""
        conn, cursor = self.connection_manager.connect_db()
        try:
            self._create_torrent_jobs_table(cursor)
            self._create_catalog_tracks_table(cursor)
            conn.commit()
            self.logger.debug("Database schema ensured", extra={"db_file": self.connection_manager.db_file})
        except Exception:
            self.logger.error("Error initializing database", exc_info=True)
            raise
        finally:
            conn.close()

    def _create_torrent_jobs_table(self, cursor):
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS torrent_jobs (
                id TEXT PRIMARY KEY,
                magnet_link TEXT NOT NULL,
                torrent_hash TEXT,
                title TEXT,
                status TEXT NOT NULL,
                progress REAL NOT NULL DEFAULT 0,
                download_speed INTEGER NOT NULL DEFAULT 0,
                seeds INTEGER NOT NULL DEFAULT 0,
                error_message TEXT,
                last_progress_at TEXT,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                completed_at TEXT
            )
        """)
        cursor.execute("CREATE INDEX IF NOT EXISTS ix_torrent_jobs_created_at ON torrent_jobs (created_at)")
        cursor.execute("CREATE INDEX IF NOT EXISTS ix_torrent_jobs_status ON torrent_jobs (status)")

    def _create_catalog_tracks_table(self, cursor):
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS catalog_tracks (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                file_name TEXT NOT NULL UNIQUE,
                title TEXT,
                artist TEXT,
                album TEXT,
                duration_seconds REAL,
                file_size INTEGER,
                imported_at TEXT NOT NULL
            )
        """)
