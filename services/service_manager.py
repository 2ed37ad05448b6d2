"""
Module Name: service_manager.py
Description:
    Centralized service initialization and access point for the intake
    worker. Every service is built lazily on first access and shared
    afterwards.

Location:
    /services/service_manager.py

"""

import threading
from datetime import timedelta
from typing import Any, Dict, Optional

from utils.logger import get_module_logger
from utils.paths import resolve_database_file


_LOGGER = get_module_logger("Service.Manager")


class ServiceManager:
    """
    Singleton service manager to handle all service instances
    Ensures each service is initialized only once and provides thread-safe access
    """
    _instance: Optional['ServiceManager'] = None
    _lock = threading.RLock()
    _initialized = False

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, *, logger=None):
        if not self._initialized:
            with self._lock:
                if not self._initialized:
                    self._services: Dict[str, Any] = {}
                    self.logger = logger or _LOGGER
                    ServiceManager._initialized = True

    def _log_initialized(self, service_name: str):
        self.logger.debug("Service initialized", extra={"service": service_name})

    def _get_or_create(self, name: str, factory):
        if name not in self._services:
            with self._lock:
                if name not in self._services:
                    self._services[name] = factory()
                    self._log_initialized(name)
        return self._services[name]

    def get_config_service(self):
        """Get or create ConfigService instance"""
        def factory():
            from config.config import Config
            from services.config import ConfigService
            return ConfigService(Config.CONFIG_FILE)
        return self._get_or_create('config', factory)

    def get_database_service(self):
        """Get or create DatabaseService instance"""
        def factory():
            from services.database import DatabaseService
            db_path = self.get_config_service().get_database_path() or resolve_database_file()
            return DatabaseService(db_path)
        return self._get_or_create('database', factory)

    def get_job_store(self):
        """Get or create the SQLite-backed torrent job store"""
        def factory():
            from services.torrent_jobs import SQLiteJobStore
            return SQLiteJobStore(self.get_database_service().connection_manager)
        return self._get_or_create('job_store', factory)

    def get_torrent_client(self):
        """Get or create the qBittorrent client"""
        def factory():
            from services.download_clients import QBittorrentClient
            settings = self.get_config_service().get_torrent_settings()
            return QBittorrentClient(settings.as_client_config())
        return self._get_or_create('torrent_client', factory)

    def get_compression_service(self):
        """Get or create the compressor handed to the file pipeline"""
        def factory():
            from services.conversion_service import AudioCompressionService
            from services.file_pipeline import PassthroughCompressor
            config_service = self.get_config_service()
            settings = config_service.get_compression_settings()
            if not settings.enabled:
                return PassthroughCompressor()
            return AudioCompressionService(
                settings,
                config_service.get_torrent_settings().intake_path,
            )
        return self._get_or_create('compression', factory)

    def get_catalog_import_service(self):
        """Get or create CatalogImportService instance"""
        def factory():
            from services.import_service import CatalogImportService
            return CatalogImportService(
                self.get_database_service().connection_manager,
                self.get_config_service().get_torrent_settings().intake_path,
            )
        return self._get_or_create('catalog_import', factory)

    def get_file_pipeline(self):
        """Get or create the post-download FilePipeline"""
        def factory():
            from services.file_pipeline import FilePipeline
            client = self.get_torrent_client()
            return FilePipeline(
                intake_dir=self.get_config_service().get_torrent_settings().intake_path,
                compressor=self.get_compression_service(),
                importer=self.get_catalog_import_service(),
                path_translator=client.map_to_local_path,
            )
        return self._get_or_create('file_pipeline', factory)

    def get_torrent_monitor(self):
        """Get or create the TorrentMonitor (not started)"""
        def factory():
            from services.torrent_jobs import TorrentMonitor
            settings = self.get_config_service().get_torrent_settings()
            return TorrentMonitor(
                job_store=self.get_job_store(),
                client=self.get_torrent_client(),
                pipeline=self.get_file_pipeline(),
                poll_seconds=settings.poll_seconds,
                stall_timeout=timedelta(seconds=settings.stall_timeout_seconds),
            )
        return self._get_or_create('torrent_monitor', factory)

    def get_submission_service(self):
        """Get or create TorrentSubmissionService instance"""
        def factory():
            from services.torrent_jobs import TorrentSubmissionService
            return TorrentSubmissionService(self.get_job_store(), self.get_torrent_client())
        return self._get_or_create('submission', factory)

    def shutdown(self, timeout: Optional[float] = None):
        """Stop the monitor and drop the backend session.

        The monitor finishes the job it is processing first; ``timeout``
        bounds that wait (None waits for as long as the job takes).
        """
        with self._lock:
            monitor = self._services.get('torrent_monitor')
            if monitor is not None and not monitor.stop(timeout=timeout):
                self.logger.warning(
                    f"Torrent monitor did not finish its current job within {timeout}s; its job may be left PROCESSING"
                )
            client = self._services.get('torrent_client')
            if client is not None:
                client.disconnect()

    def reset(self):
        """Forget every cached service (used by tests)."""
        with self._lock:
            self.shutdown()
            self._services.clear()


# Global service manager instance
service_manager = ServiceManager()

# Convenience functions for easy access
def get_config_service():
    """Get ConfigService instance"""
    return service_manager.get_config_service()

def get_database_service():
    """Get DatabaseService instance"""
    return service_manager.get_database_service()

def get_job_store():
    """Get the torrent job store"""
    return service_manager.get_job_store()

def get_torrent_client():
    """Get the qBittorrent client"""
    return service_manager.get_torrent_client()

def get_file_pipeline():
    """Get the FilePipeline instance"""
    return service_manager.get_file_pipeline()

def get_torrent_monitor():
    """Get the TorrentMonitor instance"""
    return service_manager.get_torrent_monitor()

def get_submission_service():
    """Get TorrentSubmissionService instance"""
    return service_manager.get_submission_service()
