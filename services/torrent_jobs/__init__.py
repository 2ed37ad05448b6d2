"""
Torrent Jobs Module
===================

Job model, persistence, state machine, reconciliation loop and submission.
"""

from .job_store import BaseJobStore, JobNotFoundError, SQLiteJobStore
from .models import TERMINAL_STATUSES, JobStatus, TorrentJob
from .state_machine import (
    STALLED_NO_SEEDERS,
    STATUS_MAP,
    WAITING_FOR_SEEDERS,
    JobStateMachine,
    Observation,
    Transition,
    map_status,
    transition,
)
from .submission import SubmissionError, TorrentSubmissionService
from .torrent_monitor import TorrentMonitor, content_path_for

__all__ = [
    'TorrentJob',
    'JobStatus',
    'TERMINAL_STATUSES',
    'BaseJobStore',
    'SQLiteJobStore',
    'JobNotFoundError',
    'JobStateMachine',
    'Observation',
    'Transition',
    'transition',
    'map_status',
    'STATUS_MAP',
    'WAITING_FOR_SEEDERS',
    'STALLED_NO_SEEDERS',
    'TorrentMonitor',
    'content_path_for',
    'TorrentSubmissionService',
    'SubmissionError',
]
