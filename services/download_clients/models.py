"""Snapshot records returned by torrent backend clients."""

from dataclasses import dataclass
from typing import Any, Dict


def _as_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _as_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _as_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


@dataclass(frozen=True)
class TransferInfo:
    """One backend transfer as reported by ``torrents/info``."""

    hash: str
    name: str
    state: str
    progress: float  # fractional, 0.0 - 1.0
    download_speed: int
    seeds: int
    content_path: str
    save_path: str
    category: str

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "TransferInfo":
        return cls(
            hash=_as_str(data.get("hash")),
            name=_as_str(data.get("name")),
            state=_as_str(data.get("state")),
            progress=_as_float(data.get("progress")),
            download_speed=_as_int(data.get("dlspeed")),
            seeds=_as_int(data.get("num_seeds")),
            content_path=_as_str(data.get("content_path")),
            save_path=_as_str(data.get("save_path")),
            category=_as_str(data.get("category")),
        )

    @property
    def is_complete(self) -> bool:
        return self.progress >= 1.0


@dataclass(frozen=True)
class FileInfo:
    """One file inside a transfer as reported by ``torrents/files``."""

    name: str
    size: int
    progress: float

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "FileInfo":
        return cls(
            name=_as_str(data.get("name")),
            size=_as_int(data.get("size")),
            progress=_as_float(data.get("progress")),
        )
