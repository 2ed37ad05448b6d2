"""
Import Service - Registers intake files in the music catalog

Location: services/import_service/import_service.py
Purpose: Default catalog importer used by the file pipeline
"""

import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from services.database.connection import DatabaseConnection
from services.database.error_handling import error_handler
from services.file_pipeline.collaborators import BaseCatalogImporter

from .local_metadata_extractor import LocalMetadataExtractor


class CatalogImportError(RuntimeError):
    """An intake file could not be imported into the catalog."""


class CatalogImportService(BaseCatalogImporter):
    """
    Catalog importer backed by the ``catalog_tracks`` table.

    Tracks are keyed by their intake file name; importing the same name
    again refreshes the stored metadata.
    """

    def __init__(
        self,
        connection_manager: DatabaseConnection,
        intake_dir: str,
        extractor: Optional[LocalMetadataExtractor] = None,
    ):
        self.connection_manager = connection_manager
        self.intake_dir = intake_dir
        self.extractor = extractor or LocalMetadataExtractor()
        self.logger = logging.getLogger("ImportService.Catalog")

    def import_file(self, file_name: str) -> None:
        """
        Import one file from the intake directory.

        Raises:
            CatalogImportError: If the file does not exist
        """
        file_path = os.path.join(self.intake_dir, file_name)
        if not os.path.isfile(file_path):
            raise CatalogImportError(f"File to import does not exist: {file_path}")

        metadata = self.extractor.extract_metadata(file_path)
        self._upsert_track(file_name, metadata)
        self.logger.info(
            f"Imported {file_name} into catalog "
            f"(title={metadata.get('title')!r}, artist={metadata.get('artist')!r})"
        )

    @error_handler.with_retry()
    def _upsert_track(self, file_name: str, metadata: Dict[str, Any]) -> None:
        conn, cursor = self.connection_manager.connect_db()
        try:
            cursor.execute("""
                INSERT INTO catalog_tracks
                    (file_name, title, artist, album, duration_seconds, file_size, imported_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(file_name) DO UPDATE SET
                    title=excluded.title,
                    artist=excluded.artist,
                    album=excluded.album,
                    duration_seconds=excluded.duration_seconds,
                    file_size=excluded.file_size,
                    imported_at=excluded.imported_at
            """, (
                file_name,
                metadata.get('title'),
                metadata.get('artist'),
                metadata.get('album'),
                metadata.get('duration_seconds'),
                metadata.get('file_size'),
                datetime.now(timezone.utc).isoformat(timespec="microseconds"),
            ))
            conn.commit()
        finally:
            cursor.close()
            conn.close()

    def get_track(self, file_name: str) -> Optional[Dict[str, Any]]:
        conn, cursor = self.connection_manager.connect_db()
        try:
            cursor.execute("SELECT * FROM catalog_tracks WHERE file_name=?", (file_name,))
            row = cursor.fetchone()
            return dict(row) if row else None
        finally:
            cursor.close()
            conn.close()

    def list_tracks(self) -> List[Dict[str, Any]]:
        conn, cursor = self.connection_manager.connect_db()
        try:
            cursor.execute("SELECT * FROM catalog_tracks ORDER BY imported_at ASC, id ASC")
            return [dict(row) for row in cursor.fetchall()]
        finally:
            cursor.close()
            conn.close()
