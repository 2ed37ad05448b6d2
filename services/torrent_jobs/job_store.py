"""
Job Store
=========

Durable collection of TorrentJob records:
- Create jobs from the submission flow
- List active (non-terminal) jobs oldest first for the monitor
- Persist per-job updates immediately after each reconciliation step
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, List, Optional

from services.database.connection import DatabaseConnection
from services.database.error_handling import error_handler
from utils.logger import get_module_logger

from .models import TERMINAL_STATUSES, JobStatus, TorrentJob, format_timestamp

logger = get_module_logger("TorrentJobs.JobStore")


class JobNotFoundError(LookupError):
    """Raised when updating a job id that is not stored."""


class BaseJobStore(ABC):
    """CRUD contract consumed by the monitor and the submission flow."""

    @abstractmethod
    def create(self, job: TorrentJob) -> TorrentJob:
        """Persist a new job and return it."""

    @abstractmethod
    def get(self, job_id: str) -> Optional[TorrentJob]:
        """Return the job with this id, or None."""

    @abstractmethod
    def list_jobs(
        self,
        statuses: Optional[Iterable[JobStatus]] = None,
        exclude_statuses: Optional[Iterable[JobStatus]] = None,
        newest_first: bool = False,
        limit: Optional[int] = None,
    ) -> List[TorrentJob]:
        """List jobs filtered by status, ordered by creation time."""

    @abstractmethod
    def update(self, job: TorrentJob) -> None:
        """Persist every mutable field of an existing job."""

    def list_active(self) -> List[TorrentJob]:
        """Non-terminal jobs, oldest first."""
        return self.list_jobs(exclude_statuses=TERMINAL_STATUSES)


class SQLiteJobStore(BaseJobStore):
    """
    Job store backed by the ``torrent_jobs`` table.

    A connection is opened per operation; write paths retry while the
    database is locked.
    """

    MUTABLE_COLUMNS = (
        'torrent_hash', 'title', 'status', 'progress', 'download_speed', 'seeds',
        'error_message', 'last_progress_at', 'updated_at', 'completed_at',
    )

    def __init__(self, connection_manager: DatabaseConnection):
        self.connection_manager = connection_manager
        self.logger = logger

    @error_handler.with_retry()
    def create(self, job: TorrentJob) -> TorrentJob:
        row = job.to_row()
        columns = ', '.join(row.keys())
        placeholders = ', '.join(['?' for _ in row])
        query = f"INSERT INTO torrent_jobs ({columns}) VALUES ({placeholders})"

        conn, cursor = self.connection_manager.connect_db()
        try:
            cursor.execute(query, list(row.values()))
            conn.commit()
        finally:
            cursor.close()
            conn.close()

        self.logger.debug(f"Created torrent job {job.id} (title={job.title!r})")
        return job

    def get(self, job_id: str) -> Optional[TorrentJob]:
        conn, cursor = self.connection_manager.connect_db()
        try:
            cursor.execute("SELECT * FROM torrent_jobs WHERE id=?", (job_id,))
            row = cursor.fetchone()
            return TorrentJob.from_row(dict(row)) if row else None
        finally:
            cursor.close()
            conn.close()

    def list_jobs(
        self,
        statuses: Optional[Iterable[JobStatus]] = None,
        exclude_statuses: Optional[Iterable[JobStatus]] = None,
        newest_first: bool = False,
        limit: Optional[int] = None,
    ) -> List[TorrentJob]:
        clauses = []
        params: list = []

        if statuses is not None:
            values = [JobStatus(s).value for s in statuses]
            if not values:
                return []
            clauses.append(f"status IN ({', '.join('?' for _ in values)})")
            params.extend(values)

        if exclude_statuses:
            values = [JobStatus(s).value for s in exclude_statuses]
            clauses.append(f"status NOT IN ({', '.join('?' for _ in values)})")
            params.extend(values)

        query = "SELECT * FROM torrent_jobs"
        if clauses:
            query += " WHERE " + " AND ".join(clauses)
        direction = "DESC" if newest_first else "ASC"
        query += f" ORDER BY created_at {direction}, rowid {direction}"
        if limit is not None:
            query += " LIMIT ?"
            params.append(int(limit))

        conn, cursor = self.connection_manager.connect_db()
        try:
            cursor.execute(query, params)
            return [TorrentJob.from_row(dict(row)) for row in cursor.fetchall()]
        finally:
            cursor.close()
            conn.close()

    @error_handler.with_retry()
    def update(self, job: TorrentJob) -> None:
        row = job.to_row()
        assignments = ', '.join(f"{column}=?" for column in self.MUTABLE_COLUMNS)
        values = [row[column] for column in self.MUTABLE_COLUMNS]

        conn, cursor = self.connection_manager.connect_db()
        try:
            cursor.execute(f"UPDATE torrent_jobs SET {assignments} WHERE id=?", values + [job.id])
            conn.commit()
            if cursor.rowcount == 0:
                raise JobNotFoundError(f"Torrent job {job.id} not found")
        finally:
            cursor.close()
            conn.close()

    @error_handler.with_retry()
    def prune_finished(self, older_than: datetime) -> int:
        """
        Delete terminal jobs last updated before ``older_than``.

        Retention is an external policy; the monitor never calls this.

        Returns:
            Number of deleted rows
        """
        terminal = [status.value for status in TERMINAL_STATUSES]
        conn, cursor = self.connection_manager.connect_db()
        try:
            cursor.execute(
                f"DELETE FROM torrent_jobs WHERE status IN ({', '.join('?' for _ in terminal)}) "
                "AND updated_at < ?",
                terminal + [format_timestamp(older_than)],
            )
            conn.commit()
            deleted = cursor.rowcount
        finally:
            cursor.close()
            conn.close()

        if deleted:
            self.logger.info(f"Pruned {deleted} finished torrent job(s)")
        return deleted
