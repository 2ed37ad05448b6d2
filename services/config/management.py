import configparser
import os
import logging
from typing import List, Optional

from utils.paths import resolve_config_path, resolve_setting_dir

from .defaults import ConfigDefaults
from .settings import CompressionSettings, TorrentSettings
from .validation import ConfigValidation

ENV_PREFIX = "PHONO_"


class ConfigService:
    """Configuration management over an INI config.txt with environment overrides.

    Every option can be overridden with ``PHONO_<SECTION>_<KEY>`` (for
    example ``PHONO_QBITTORRENT_PASSWORD``). Missing options fall back to
    the generated defaults.
    """

    def __init__(self, config_file: Optional[str] = None):
        self.config_file = config_file or resolve_config_path("config.txt")
        self.logger = logging.getLogger("ConfigService.Management")

        self.defaults = ConfigDefaults(self.config_file)
        self.validation = ConfigValidation()

        self.defaults.ensure_config_exists()

    def load_config(self) -> configparser.ConfigParser:
        """Load configuration from disk with duplicate section recovery."""
        parser = configparser.ConfigParser()
        try:
            with open(self.config_file, "r", encoding="utf-8") as config_handle:
                parser.read_file(config_handle)
            return parser
        except configparser.DuplicateSectionError as duplicate_error:
            self.logger.warning(
                "Duplicate section detected in config.txt: %s. Falling back to lenient parsing",
                duplicate_error,
            )
            lenient = configparser.ConfigParser(strict=False)
            lenient.read(self.config_file, encoding="utf-8")
            return lenient
        except FileNotFoundError:
            self.logger.error("Configuration file %s not found", self.config_file)
            return parser

    def get_config_value(self, section: str, key: str, fallback: Optional[str] = None) -> Optional[str]:
        """Get a specific configuration value (environment first, then file, then defaults)."""
        section = section.lower()
        key = key.lower()

        env_value = os.environ.get(f"{ENV_PREFIX}{section.upper()}_{key.upper()}")
        if env_value is not None:
            return env_value

        config = self.load_config()
        if config.has_option(section, key):
            return config.get(section, key)

        default_value = self.defaults.defaults_for(section).get(key)
        if default_value is not None:
            return default_value
        return fallback

    def get_config_bool(self, section: str, key: str, fallback: bool = False) -> bool:
        """Get a configuration value as boolean."""
        value = self.get_config_value(section, key)
        if value is None:
            return fallback
        return value.strip().lower() in ('true', '1', 'yes', 'on')

    def get_config_int(self, section: str, key: str, fallback: int = 0) -> int:
        """Get a configuration value as integer."""
        value = self.get_config_value(section, key)
        if value is None:
            return fallback
        try:
            return int(value)
        except ValueError:
            self.logger.warning(f"Invalid integer for [{section}][{key}]: {value!r}; using {fallback}")
            return fallback

    def get_config_float(self, section: str, key: str, fallback: float = 0.0) -> float:
        value = self.get_config_value(section, key)
        if value is None:
            return fallback
        try:
            return float(value)
        except ValueError:
            self.logger.warning(f"Invalid number for [{section}][{key}]: {value!r}; using {fallback}")
            return fallback

    # ------------------------------------------------------------------
    # Typed settings
    # ------------------------------------------------------------------
    def get_torrent_settings(self) -> TorrentSettings:
        """Build the typed settings used by the client, monitor and pipeline."""
        return TorrentSettings(
            base_url=(self.get_config_value('qbittorrent', 'base_url') or '').strip(),
            username=self.get_config_value('qbittorrent', 'username') or '',
            password=self.get_config_value('qbittorrent', 'password') or '',
            category=(self.get_config_value('qbittorrent', 'category') or '').strip(),
            downloads_path=self.get_config_value('qbittorrent', 'downloads_path') or '',
            incoming_path=resolve_setting_dir(self.get_config_value('torrent_monitor', 'incoming_path'), 'incoming'),
            intake_path=resolve_setting_dir(self.get_config_value('torrent_monitor', 'intake_path'), 'intake'),
            poll_seconds=self.get_config_int('torrent_monitor', 'poll_seconds', 10),
            stall_minutes=self.get_config_int('torrent_monitor', 'stall_minutes', 30),
            timeout=self.get_config_float('qbittorrent', 'timeout', 15.0),
            verify_cert=self.get_config_bool('qbittorrent', 'verify_cert', True),
            monitor_enabled=self.get_config_bool('torrent_monitor', 'enabled', True),
        )

    def get_compression_settings(self) -> CompressionSettings:
        return CompressionSettings(
            enabled=self.get_config_bool('compression', 'enabled', True),
            bitrate=self.get_config_value('compression', 'bitrate') or '192k',
            min_size_mb=self.get_config_float('compression', 'min_size_mb', 0.0),
            ffmpeg_path=self.get_config_value('compression', 'ffmpeg_path') or 'ffmpeg',
        )

    def get_database_path(self) -> str:
        return self.get_config_value('database', 'path') or ''

    def validate_config(self) -> List[str]:
        """Validate torrent settings and return the list of problems found."""
        return self.validation.validate_torrent_settings(self.get_torrent_settings())
