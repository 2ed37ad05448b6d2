"""
Module Name: base_torrent_client.py
Description:
    Abstract base for torrent client implementations and shared interface
    used by the torrent monitor and the submission flow.

Location:
    /services/download_clients/base_torrent_client.py

"""

from abc import ABC, abstractmethod
from typing import Dict, Any, Optional, List

from utils.logger import get_module_logger

from .models import FileInfo, TransferInfo
from .path_translator import PathTranslator


class BaseTorrentClient(ABC):
    """
    Abstract base class for torrent download clients.

    Implementations raise the errors from ``errors.py``
    (BackendUnavailable, BackendAuthFailure, BackendProtocolError) instead
    of returning status dictionaries, so the monitor can decide per call
    whether a failure is job-scoped or tick-scoped.
    """

    def __init__(self, config: Dict[str, Any], *, logger=None):
        """
        Initialize the torrent client.

        Args:
            config: Client configuration dictionary with keys:
                - base_url: Web UI root, e.g. http://qbittorrent:8080
                - username / password: Web UI credentials
                - category: Category applied to submitted transfers
                - downloads_path: Save path on the backend side
                - incoming_path: Local mount of downloads_path
                - timeout: Per-request timeout in seconds (optional)
                - verify_cert: Whether to verify SSL certificate (optional)
        """
        self.config = config
        self.client_type = self.__class__.__name__
        self.last_error: Optional[str] = None
        self.logger = logger or get_module_logger("Service.DownloadClients.BaseTorrentClient")
        self.category = (config.get("category") or "").strip()
        self.path_translator = PathTranslator(
            config.get("downloads_path") or "",
            config.get("incoming_path") or "",
        )

        self.logger.debug("Initializing torrent client", extra={
            "client_type": self.client_type,
            "base_url": config.get("base_url"),
        })

    @abstractmethod
    def submit_job(self, magnet_link: str, title: Optional[str] = None) -> None:
        """
        Ask the backend to start fetching a magnet link.

        The backend does not return an identifier; callers resolve the
        transfer later by listing transfers and matching on name + category.

        Raises:
            ValueError: If magnet_link is blank
            BackendUnavailable / BackendAuthFailure / BackendProtocolError
        """

    @abstractmethod
    def list_transfers(self, hashes: Optional[str] = None) -> List[TransferInfo]:
        """
        Return a snapshot of all transfers, optionally filtered by hash.

        Args:
            hashes: Optional ``|``-separated hash filter
        """

    @abstractmethod
    def list_files(self, torrent_hash: str) -> List[FileInfo]:
        """Return the files of one transfer with per-file progress."""

    @abstractmethod
    def remove_transfer(self, torrent_hash: str, delete_files: bool = False) -> None:
        """
        Remove a transfer from the backend.

        Args:
            torrent_hash: Hash of the transfer to remove
            delete_files: Whether to also delete downloaded data on the backend
        """

    @abstractmethod
    def test_connection(self) -> Dict[str, Any]:
        """
        Test connection to the client and verify credentials.

        Returns:
            Dictionary with:
                - success: bool - Whether connection test passed
                - version: str - Client version if successful
                - error: str - Error message if failed
        """

    def find_transfer(
        self,
        transfers: List[TransferInfo],
        *,
        torrent_hash: Optional[str] = None,
        title: Optional[str] = None,
    ) -> Optional[TransferInfo]:
        """
        Pick the transfer belonging to a job from a snapshot.

        A known hash always wins; title matching is only a fallback for jobs
        that were never resolved, and requires the configured category.
        """
        if torrent_hash:
            wanted = torrent_hash.lower()
            return next((t for t in transfers if t.hash.lower() == wanted), None)

        if not title or not title.strip():
            return None

        wanted_name = title.strip().lower()
        wanted_category = self.category.lower()
        return next(
            (
                t for t in transfers
                if t.name.lower() == wanted_name and t.category.lower() == wanted_category
            ),
            None,
        )

    def map_to_local_path(self, backend_path: Optional[str]) -> Optional[str]:
        """Translate a backend-reported path to the locally mounted path."""
        return self.path_translator.translate(backend_path)

    def get_last_error(self) -> Optional[str]:
        return self.last_error

    def _set_error(self, error: str) -> None:
        self.last_error = error
        self.logger.error("Torrent client error", extra={
            "client_type": self.client_type,
            "error": error
        })

    def _clear_error(self) -> None:
        """Clear the last error message."""
        self.last_error = None

    def disconnect(self) -> None:
        """
        Disconnect from the client.
        Subclasses should override this if they need cleanup.
        """
        self.logger.debug("Torrent client disconnected", extra={
            "client_type": self.client_type
        })

    def __repr__(self) -> str:
        return f"{self.client_type}(base_url={self.config.get('base_url')})"
