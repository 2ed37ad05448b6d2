"""
Submission Flow
===============

Creates a job for a magnet link, hands the link to the torrent backend and,
when a title was given, tries once to resolve the new transfer right away so
the first monitor tick already knows its hash.
"""

from typing import Callable, Optional

from services.download_clients.base_torrent_client import BaseTorrentClient
from utils.logger import get_module_logger

from .job_store import BaseJobStore
from .models import JobStatus, TorrentJob, utcnow

logger = get_module_logger("Service.TorrentJobs.Submission")


class SubmissionError(RuntimeError):
    """The backend rejected or could not take a new magnet link."""

    def __init__(self, message: str, job: Optional[TorrentJob] = None):
        super().__init__(message)
        self.job = job


class TorrentSubmissionService:
    """Entry point for new downloads."""

    def __init__(
        self,
        job_store: BaseJobStore,
        client: BaseTorrentClient,
        clock: Callable = utcnow,
    ):
        self.job_store = job_store
        self.client = client
        self.clock = clock

    def submit(self, magnet_link: str, title: Optional[str] = None) -> TorrentJob:
        """
        Submit a magnet link for download.

        Args:
            magnet_link: Magnet URI to fetch
            title: Optional display name; also used to find the transfer later

        Returns:
            The persisted job

        Raises:
            ValueError: If magnet_link is blank (no job is created)
            SubmissionError: If the backend call fails (the job is stored as FAILED)
        """
        if not magnet_link or not magnet_link.strip():
            raise ValueError("Magnet link is required")

        clean_title = title.strip() if title and title.strip() else None
        job = self.job_store.create(TorrentJob(magnet_link=magnet_link.strip(), title=clean_title))
        logger.info(f"Queued torrent job {job.id} (title={clean_title!r})")

        try:
            self.client.submit_job(job.magnet_link, job.title)
            if job.title:
                self._pre_resolve(job)
        except Exception as exc:
            now = self.clock()
            job.status = JobStatus.FAILED
            job.error_message = str(exc)
            job.completed_at = None
            job.updated_at = now
            self.job_store.update(job)
            logger.error(f"Torrent submission failed for job {job.id}: {exc}")
            raise SubmissionError(str(exc), job) from exc

        return job

    def _pre_resolve(self, job: TorrentJob) -> None:
        transfers = self.client.list_transfers()
        transfer = self.client.find_transfer(transfers, title=job.title)
        if transfer is None:
            logger.debug(f"Torrent job {job.id} not visible on the backend yet")
            return

        now = self.clock()
        job.torrent_hash = transfer.hash
        job.progress = round(transfer.progress * 100, 2)
        job.download_speed = transfer.download_speed
        job.seeds = transfer.seeds
        if transfer.progress > 0:
            job.last_progress_at = now
        job.status = JobStatus.PROCESSING if transfer.is_complete else JobStatus.DOWNLOADING
        job.updated_at = now
        self.job_store.update(job)
        logger.debug(f"Torrent job {job.id} resolved to transfer {transfer.hash}")
