import logging
import os

from .connection import DatabaseConnection
from .migrations import DatabaseMigrations


def _prepare_db_path(db_file: str) -> str:
    path = os.path.abspath(os.path.normpath(db_file))
    os.makedirs(os.path.dirname(path), exist_ok=True)
    return path


class DatabaseService:
    """Owns the SQLite job database: connection settings plus schema setup.

    Stores and the catalog importer share ``connection_manager``; the schema
    is created once when the service is built.
    """

    def __init__(self, db_file: str, busy_timeout_ms: int = 30000):
        self.logger = logging.getLogger("DatabaseService.Main")
        self.db_file = _prepare_db_path(db_file)

        self.connection_manager = DatabaseConnection(self.db_file, busy_timeout_ms=busy_timeout_ms)
        self.migrations = DatabaseMigrations(self.connection_manager)

        try:
            self.migrations.initialize_database()
        except Exception as e:
            self.logger.error(f"Could not prepare job database {self.db_file}: {e}")
            raise
        self.logger.info(f"Job database ready at {self.db_file}")

    def is_healthy(self) -> bool:
        return self.connection_manager.test_connection()

    def get_database_info(self) -> dict:
        return self.connection_manager.get_database_info()
