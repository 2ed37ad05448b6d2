"""Typed view over the [qbittorrent], [torrent_monitor] and [compression] config sections."""

from dataclasses import dataclass


@dataclass(frozen=True)
class TorrentSettings:
    base_url: str = "http://qbittorrent:8080"
    username: str = "admin"
    password: str = "adminadmin"
    category: str = "phono"
    downloads_path: str = "/downloads"
    incoming_path: str = "/app/incoming"
    intake_path: str = "/app/intake"
    poll_seconds: int = 10
    stall_minutes: int = 30
    timeout: float = 15.0
    verify_cert: bool = True
    monitor_enabled: bool = True

    @property
    def stall_timeout_seconds(self) -> int:
        return self.stall_minutes * 60

    def as_client_config(self) -> dict:
        """Configuration dictionary accepted by the torrent client classes."""
        return {
            "base_url": self.base_url,
            "username": self.username,
            "password": self.password,
            "category": self.category,
            "downloads_path": self.downloads_path,
            "incoming_path": self.incoming_path,
            "timeout": self.timeout,
            "verify_cert": self.verify_cert,
        }


@dataclass(frozen=True)
class CompressionSettings:
    enabled: bool = True
    bitrate: str = "192k"
    min_size_mb: float = 0.0
    ffmpeg_path: str = "ffmpeg"

    @property
    def min_size_bytes(self) -> int:
        return int(self.min_size_mb * 1024 * 1024)
