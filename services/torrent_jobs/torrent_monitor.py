"""
Torrent Monitor
===============

Background reconciliation loop between the job table and the torrent
backend.

Each tick loads the active jobs oldest first, takes one snapshot of all
backend transfers, and advances every job against it. Completed transfers
are run through the file pipeline, removed from the backend with their
data, and their jobs marked completed.
"""

import threading
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from services.download_clients.base_torrent_client import BaseTorrentClient
from services.download_clients.errors import TorrentClientError
from services.download_clients.models import TransferInfo
from services.file_pipeline.file_pipeline import FilePipeline
from utils.logger import get_module_logger

from .job_store import BaseJobStore
from .models import TorrentJob, utcnow
from .state_machine import JobStateMachine

logger = get_module_logger("Service.TorrentJobs.Monitor")


def content_path_for(transfer: TransferInfo) -> str:
    """Backend path of a transfer's content, falling back to save_path/name."""
    if transfer.content_path and transfer.content_path.strip():
        return transfer.content_path
    save_path = (transfer.save_path or "").rstrip("/\\")
    if not save_path:
        return transfer.name
    return f"{save_path}/{transfer.name}"


class TorrentMonitor:
    """Polls the backend on a daemon thread and reconciles active jobs."""

    def __init__(
        self,
        job_store: BaseJobStore,
        client: BaseTorrentClient,
        pipeline: FilePipeline,
        state_machine: Optional[JobStateMachine] = None,
        poll_seconds: float = 10,
        stall_timeout: timedelta = timedelta(minutes=30),
        clock: Callable[[], datetime] = utcnow,
    ):
        self.job_store = job_store
        self.client = client
        self.pipeline = pipeline
        self.state_machine = state_machine or JobStateMachine(stall_timeout)
        self.poll_seconds = poll_seconds
        self.clock = clock

        self._stop_event = threading.Event()
        self._monitor_lock = threading.Lock()
        self.monitor_thread: Optional[threading.Thread] = None

    # ------------------------------------------------------------------
    # Thread control
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start the monitoring thread.

        If a previous thread was asked to stop but is still finishing its
        current job, wait for it before starting a new one.
        """
        with self._monitor_lock:
            previous = self.monitor_thread
            if previous is not None and previous.is_alive():
                if not self._stop_event.is_set():
                    logger.debug("Torrent monitor thread already running")
                    return
                logger.info("Waiting for the previous torrent monitor thread to finish its current job")
                previous.join()

            logger.info(f"Starting torrent monitor (poll every {self.poll_seconds}s)")
            self._stop_event.clear()
            self.monitor_thread = threading.Thread(
                target=self._monitor_loop,
                name="TorrentMonitor",
                daemon=True,
            )
            self.monitor_thread.start()

    def stop(self, timeout: Optional[float] = None) -> bool:
        """
        Signal the loop to stop and wait for the job in flight to finish.

        Args:
            timeout: Seconds to wait for the thread; None waits until it exits

        Returns:
            True once the thread has exited, False if it is still running
        """
        logger.debug("Stopping torrent monitor thread...")
        self._stop_event.set()
        thread = self.monitor_thread
        if thread is None:
            return True
        if thread is threading.current_thread():
            return False

        thread.join(timeout=timeout)
        if thread.is_alive():
            logger.warning(f"Torrent monitor thread still busy after {timeout}s; it stops after its current job")
            return False

        if self.monitor_thread is thread:
            self.monitor_thread = None
        return True

    @property
    def is_running(self) -> bool:
        return self.monitor_thread is not None and self.monitor_thread.is_alive()

    @property
    def stop_requested(self) -> bool:
        return self._stop_event.is_set()

    def _monitor_loop(self) -> None:
        logger.debug("Torrent monitor thread started")

        while not self._stop_event.is_set():
            try:
                self.run_once()
            except TorrentClientError:
                logger.exception("Could not fetch transfer snapshot; skipping this tick")
            except Exception:
                logger.exception("Error in torrent monitor loop")

            self._stop_event.wait(self.poll_seconds)

        logger.debug("Torrent monitor thread stopped")

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    def run_once(self) -> int:
        """
        Run one reconciliation tick synchronously.

        Returns:
            Number of jobs processed in this tick

        Raises:
            TorrentClientError: The transfer snapshot could not be fetched;
                no job was touched
        """
        jobs = self.job_store.list_active()
        if not jobs:
            return 0

        transfers = self.client.list_transfers()

        processed = 0
        for job in jobs:
            if self._stop_event.is_set():
                logger.debug("Stop requested; leaving remaining jobs for the next run")
                break
            self._reconcile_job(job, transfers)
            processed += 1
        return processed

    def _reconcile_job(self, job: TorrentJob, transfers: List[TransferInfo]) -> None:
        try:
            self._process_job(job, transfers)
        except Exception as exc:
            logger.exception(f"Torrent job {job.id} failed during reconciliation")
            self.state_machine.fail(job, str(exc), self.clock())

        try:
            self.job_store.update(job)
        except Exception:
            logger.exception(f"Could not persist torrent job {job.id}")

    def _process_job(self, job: TorrentJob, transfers: List[TransferInfo]) -> None:
        now = self.clock()
        transfer = self.client.find_transfer(transfers, torrent_hash=job.torrent_hash, title=job.title)
        if transfer is None:
            self.state_machine.touch(job, now)
            return

        result = self.state_machine.observe(job, transfer, now)
        if result.run_pipeline:
            self._run_pipeline(job, transfer)

    def _run_pipeline(self, job: TorrentJob, transfer: TransferInfo) -> None:
        # PROCESSING is stored before the pipeline touches any file
        self.job_store.update(job)

        content_path = content_path_for(transfer)
        logger.info(f"Torrent job {job.id} finished downloading; processing {content_path}")

        try:
            result = self.pipeline.process(content_path)
        except Exception as exc:
            logger.error(f"File pipeline failed for torrent job {job.id}: {exc}")
            self.state_machine.fail(job, str(exc), self.clock())
            return

        self.client.remove_transfer(job.torrent_hash or transfer.hash, delete_files=True)
        self.state_machine.complete(job, self.clock())
        logger.info(f"Torrent job {job.id} completed ({result.imported_count} file(s) imported)")

    def __repr__(self) -> str:
        return f"TorrentMonitor(poll_seconds={self.poll_seconds}, running={self.is_running})"


__all__ = ['TorrentMonitor', 'content_path_for']
