"""
State Machine
=============

Maps qBittorrent transfer observations onto TorrentJob statuses.

Valid state flow:
QUEUED → DOWNLOADING ⇄ STALLED
              ↓              ↓ (no seeders past the stall timeout)
          PROCESSING       FAILED
              ↓
     COMPLETED | FAILED

Precedence, highest first:
1. transfer progress >= 1.0 forces PROCESSING and triggers the file pipeline
2. stall escalation (STALLED, zero seeds, timeout exceeded) forces FAILED
3. the "waiting for seeders" advisory on STALLED
4. the coarse backend label (STATUS_MAP, unknown → DOWNLOADING)

``transition`` is pure; ``JobStateMachine`` applies its result and the
telemetry to a job.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Optional

from services.download_clients.models import TransferInfo

from .models import JobStatus, TorrentJob

logger = logging.getLogger("TorrentJobs.StateMachine")

WAITING_FOR_SEEDERS = "Waiting for active seeders."
STALLED_NO_SEEDERS = "Download stalled: No active seeders found."

STATUS_MAP: Dict[str, JobStatus] = {
    "error": JobStatus.FAILED,
    "missingFiles": JobStatus.FAILED,
    "stalledDL": JobStatus.STALLED,
    "pausedDL": JobStatus.STALLED,
    "queuedDL": JobStatus.QUEUED,
    "checkingDL": JobStatus.DOWNLOADING,
    "downloading": JobStatus.DOWNLOADING,
    "forcedDL": JobStatus.DOWNLOADING,
    "uploading": JobStatus.PROCESSING,
    "stalledUP": JobStatus.PROCESSING,
    "queuedUP": JobStatus.PROCESSING,
}


def map_status(label: Optional[str]) -> JobStatus:
    """Translate a backend state label; anything unrecognised counts as downloading."""
    return STATUS_MAP.get((label or "").strip(), JobStatus.DOWNLOADING)


@dataclass(frozen=True)
class Observation:
    """What one poll saw for a job, reduced to the inputs of ``transition``."""

    label: str
    seeds: int
    fractional_progress: float
    error_message: Optional[str]
    since_last_progress: timedelta


@dataclass(frozen=True)
class Transition:
    status: JobStatus
    error_message: Optional[str]
    run_pipeline: bool = False
    stalled_out: bool = False


def transition(current: JobStatus, observation: Observation, stall_timeout: timedelta) -> Transition:
    """Compute the next status and error message for a non-terminal job."""
    if current.is_terminal:
        return Transition(status=current, error_message=observation.error_message)

    status = map_status(observation.label)
    message = observation.error_message

    if status == JobStatus.FAILED and not (message and message.strip()):
        message = f"Torrent error: {observation.label}"

    waiting_for_seeders = status == JobStatus.STALLED and observation.seeds == 0
    if waiting_for_seeders:
        if message is None:
            message = WAITING_FOR_SEEDERS
    elif message == WAITING_FOR_SEEDERS:
        message = None

    stalled_out = False
    if waiting_for_seeders and observation.since_last_progress > stall_timeout:
        status = JobStatus.FAILED
        message = STALLED_NO_SEEDERS
        stalled_out = True

    if observation.fractional_progress >= 1.0:
        # Messages belong to FAILED/STALLED only; PROCESSING starts clean.
        return Transition(status=JobStatus.PROCESSING, error_message=None, run_pipeline=True)

    return Transition(status=status, error_message=message, stalled_out=stalled_out)


class JobStateMachine:
    """
    Applies transfer observations to jobs.

    Keeps the model invariants in one place: the hash is set once, the
    completion timestamp only accompanies COMPLETED, and error messages are
    cleared on success.
    """

    def __init__(self, stall_timeout: timedelta):
        self.stall_timeout = stall_timeout
        self.logger = logger

    def observe(self, job: TorrentJob, transfer: TransferInfo, now: datetime) -> Transition:
        """Record telemetry from ``transfer`` on ``job`` and apply the resulting transition."""
        previous_progress = job.progress
        previous_status = job.status

        if not job.torrent_hash:
            job.torrent_hash = transfer.hash
        job.progress = round(transfer.progress * 100, 2)
        job.download_speed = transfer.download_speed
        job.seeds = transfer.seeds
        if job.progress > previous_progress:
            job.last_progress_at = now
        job.updated_at = now

        reference = job.last_progress_at or job.created_at
        result = transition(
            job.status,
            Observation(
                label=transfer.state,
                seeds=transfer.seeds,
                fractional_progress=transfer.progress,
                error_message=job.error_message,
                since_last_progress=now - reference,
            ),
            self.stall_timeout,
        )

        job.status = result.status
        job.error_message = result.error_message

        if previous_status != job.status:
            self.logger.debug(f"Torrent job {job.id}: {previous_status.value} → {job.status.value}")
        if result.stalled_out:
            self.logger.warning(
                f"Torrent job {job.id} stalled with no seeders since {reference.isoformat()}; marking failed"
            )
        return result

    def touch(self, job: TorrentJob, now: datetime) -> None:
        job.updated_at = now

    def complete(self, job: TorrentJob, now: datetime) -> None:
        job.status = JobStatus.COMPLETED
        job.completed_at = now
        job.error_message = None
        job.updated_at = now

    def fail(self, job: TorrentJob, message: str, now: datetime) -> None:
        job.status = JobStatus.FAILED
        job.error_message = message or "Unknown error"
        job.completed_at = None
        job.updated_at = now
