import configparser
import os
import logging
from typing import Dict

from utils.path_resolver import get_path_resolver


class ConfigDefaults:
    """Handles default configuration generation for Phono Intake"""

    def __init__(self, config_file: str):
        self.config_file = config_file
        self.logger = logging.getLogger("ConfigService.Defaults")

    def ensure_config_exists(self):
        """Ensure configuration file exists, create default if not."""
        if not os.path.exists(self.config_file):
            self.logger.warning("Configuration file not found. Creating default...")
            self.generate_default_config()

    def build_default_config(self) -> configparser.ConfigParser:
        """Return a parser populated with every default section."""
        config = configparser.ConfigParser()

        sections = [
            self._add_qbittorrent_config,
            self._add_torrent_monitor_config,
            self._add_compression_config,
            self._add_database_config,
        ]

        for add_section in sections:
            add_section(config)
        return config

    def generate_default_config(self):
        """Generate a complete default configuration file with all sections."""
        config = self.build_default_config()

        try:
            directory = os.path.dirname(self.config_file)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self.config_file, "w", encoding="utf-8") as configfile:
                config.write(configfile)
            self.logger.info(f"Default configuration created at {self.config_file}")
        except OSError as e:
            self.logger.error(f"Failed to create default configuration: {e}")

    def defaults_for(self, section: str) -> Dict[str, str]:
        config = self.build_default_config()
        if config.has_section(section):
            return dict(config.items(section))
        return {}

    def _add_qbittorrent_config(self, config: configparser.ConfigParser):
        """Add qBittorrent configuration section."""
        config["qbittorrent"] = {
            "base_url": "http://qbittorrent:8080",
            "username": "admin",
            "password": "adminadmin",
            "category": "phono",
            "downloads_path": "/downloads",
            "timeout": "15",
            "verify_cert": "true",
        }

    def _add_torrent_monitor_config(self, config: configparser.ConfigParser):
        """Add reconciliation loop configuration section."""
        resolver = get_path_resolver()
        config["torrent_monitor"] = {
            "enabled": "true",
            "incoming_path": resolver.get_incoming_dir(),
            "intake_path": resolver.get_intake_dir(),
            "poll_seconds": "10",
            "stall_minutes": "30",
        }

    def _add_compression_config(self, config: configparser.ConfigParser):
        """Add audio compression configuration section."""
        config["compression"] = {
            "enabled": "true",
            "bitrate": "192k",
            "min_size_mb": "0",
            "ffmpeg_path": "ffmpeg",
        }

    def _add_database_config(self, config: configparser.ConfigParser):
        """Add database configuration section."""
        config["database"] = {
            "path": os.path.join(get_path_resolver().get_data_dir(), "phono.db"),
        }
