import os
import logging
from typing import List

from .settings import TorrentSettings


class ConfigValidation:
    """Handles configuration validation for the intake services"""

    def __init__(self):
        self.logger = logging.getLogger("ConfigService.Validation")

    def validate_torrent_settings(self, settings: TorrentSettings) -> List[str]:
        """Return a list of human-readable problems; empty when the settings look usable."""
        problems: List[str] = []

        if not settings.base_url.strip():
            problems.append("qbittorrent.base_url is empty")
        elif not settings.base_url.lower().startswith(("http://", "https://")):
            problems.append(f"qbittorrent.base_url must start with http:// or https:// ({settings.base_url})")

        if not settings.username:
            problems.append("qbittorrent.username is empty")

        if not settings.category.strip():
            problems.append("qbittorrent.category is empty; title matching would accept only uncategorised transfers")

        if settings.poll_seconds <= 0:
            problems.append(f"torrent_monitor.poll_seconds must be positive ({settings.poll_seconds})")

        if settings.stall_minutes <= 0:
            problems.append(f"torrent_monitor.stall_minutes must be positive ({settings.stall_minutes})")

        for key, path in (("incoming_path", settings.incoming_path), ("intake_path", settings.intake_path)):
            if not path:
                problems.append(f"torrent_monitor.{key} is empty")
            elif not os.path.isabs(path):
                problems.append(f"torrent_monitor.{key} should be absolute ({path})")

        for problem in problems:
            self.logger.warning(f"Configuration problem: {problem}")

        if not problems:
            self.logger.debug("Torrent configuration validation passed")
        return problems
