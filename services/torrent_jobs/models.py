"""
Torrent Job Model
=================

The durable record tracking one magnet link from submission to import.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobStatus(str, Enum):
    QUEUED = "queued"
    DOWNLOADING = "downloading"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    STALLED = "stalled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({JobStatus.COMPLETED, JobStatus.FAILED})


@dataclass
class TorrentJob:
    magnet_link: str
    title: Optional[str] = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    torrent_hash: Optional[str] = None
    status: JobStatus = JobStatus.QUEUED
    progress: float = 0.0
    download_speed: int = 0
    seeds: int = 0
    error_message: Optional[str] = None
    last_progress_at: Optional[datetime] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    completed_at: Optional[datetime] = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def to_row(self) -> Dict[str, Any]:
        """Column/value mapping for the torrent_jobs table."""
        return {
            'id': self.id,
            'magnet_link': self.magnet_link,
            'torrent_hash': self.torrent_hash,
            'title': self.title,
            'status': self.status.value,
            'progress': self.progress,
            'download_speed': self.download_speed,
            'seeds': self.seeds,
            'error_message': self.error_message,
            'last_progress_at': format_timestamp(self.last_progress_at),
            'created_at': format_timestamp(self.created_at),
            'updated_at': format_timestamp(self.updated_at),
            'completed_at': format_timestamp(self.completed_at),
        }

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "TorrentJob":
        return cls(
            id=row['id'],
            magnet_link=row['magnet_link'],
            torrent_hash=row.get('torrent_hash'),
            title=row.get('title'),
            status=JobStatus(row['status']),
            progress=float(row.get('progress') or 0.0),
            download_speed=int(row.get('download_speed') or 0),
            seeds=int(row.get('seeds') or 0),
            error_message=row.get('error_message'),
            last_progress_at=parse_timestamp(row.get('last_progress_at')),
            created_at=parse_timestamp(row.get('created_at')) or utcnow(),
            updated_at=parse_timestamp(row.get('updated_at')) or utcnow(),
            completed_at=parse_timestamp(row.get('completed_at')),
        )


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """UTC ISO-8601 with fixed precision so stored values sort as text."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
