"""
Download Clients Module
=======================

Torrent backend client implementations, the transfer snapshot records they
return, and the path translation between backend and local storage.
"""

from .base_torrent_client import BaseTorrentClient
from .errors import BackendAuthFailure, BackendProtocolError, BackendUnavailable, TorrentClientError
from .models import FileInfo, TransferInfo
from .path_translator import PathTranslator
from .qbittorrent_client import QBittorrentClient

__all__ = [
    'BaseTorrentClient',
    'QBittorrentClient',
    'TransferInfo',
    'FileInfo',
    'PathTranslator',
    'TorrentClientError',
    'BackendUnavailable',
    'BackendAuthFailure',
    'BackendProtocolError',
]
