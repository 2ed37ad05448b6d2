"""
Module Name: __init__.py
Description:
	Provide access to the configuration management service.
Location:
	/services/config/__init__.py

"""

from .management import ConfigService
from .settings import CompressionSettings, TorrentSettings

__all__ = ["ConfigService", "TorrentSettings", "CompressionSettings"]
