"""Shared fixtures for the intake worker tests."""

import os
import sys
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import pytest

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from services.database import DatabaseService  # noqa: E402
from services.download_clients.base_torrent_client import BaseTorrentClient  # noqa: E402
from services.download_clients.models import FileInfo, TransferInfo  # noqa: E402
from services.file_pipeline.collaborators import BaseCatalogImporter, BaseCompressor  # noqa: E402
from services.torrent_jobs.job_store import SQLiteJobStore  # noqa: E402
from utils.path_resolver import reset_path_resolver  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_paths(tmp_path, monkeypatch):
    """Point every resolved directory into the test's temporary directory."""
    for env_var, name in (
        ("PHONO_CONFIG_DIR", "config"),
        ("PHONO_DATA_DIR", "data"),
        ("PHONO_INCOMING_DIR", "incoming"),
        ("PHONO_INTAKE_DIR", "intake"),
        ("PHONO_LOGS_DIR", "logs"),
    ):
        monkeypatch.setenv(env_var, str(tmp_path / name))
    for key in list(os.environ):
        if key.startswith(("PHONO_QBITTORRENT_", "PHONO_TORRENT_MONITOR_", "PHONO_COMPRESSION_", "PHONO_DATABASE_")):
            monkeypatch.delenv(key, raising=False)
    reset_path_resolver()
    yield
    reset_path_resolver()


@pytest.fixture
def database(tmp_path) -> DatabaseService:
    return DatabaseService(str(tmp_path / "data" / "phono.db"))


@pytest.fixture
def job_store(database) -> SQLiteJobStore:
    return SQLiteJobStore(database.connection_manager)


@pytest.fixture
def incoming_dir(tmp_path) -> str:
    path = tmp_path / "incoming"
    path.mkdir(exist_ok=True)
    return str(path)


@pytest.fixture
def intake_dir(tmp_path) -> str:
    path = tmp_path / "intake"
    path.mkdir(exist_ok=True)
    return str(path)


def make_transfer(**overrides) -> TransferInfo:
    values = {
        "hash": "abc123",
        "name": "Album A",
        "state": "downloading",
        "progress": 0.0,
        "download_speed": 0,
        "seeds": 1,
        "content_path": "",
        "save_path": "/downloads",
        "category": "phono",
    }
    values.update(overrides)
    return TransferInfo(**values)


class FakeTorrentClient(BaseTorrentClient):
    """In-memory backend: transfers are whatever the test puts in ``transfers``."""

    def __init__(self, incoming_path: str = "/app/incoming", category: str = "phono"):
        super().__init__({
            "base_url": "http://qbittorrent.test",
            "category": category,
            "downloads_path": "/downloads",
            "incoming_path": incoming_path,
        })
        self.transfers: List[TransferInfo] = []
        self.submitted: List[tuple] = []
        self.removed: List[tuple] = []
        self.list_calls = 0
        self.list_error: Optional[Exception] = None
        self.submit_error: Optional[Exception] = None
        self.remove_error: Optional[Exception] = None
        self.on_submit = None

    def submit_job(self, magnet_link: str, title: Optional[str] = None) -> None:
        if self.submit_error is not None:
            raise self.submit_error
        self.submitted.append((magnet_link, title))
        if self.on_submit is not None:
            self.on_submit(magnet_link, title)

    def list_transfers(self, hashes: Optional[str] = None) -> List[TransferInfo]:
        self.list_calls += 1
        if self.list_error is not None:
            raise self.list_error
        return list(self.transfers)

    def list_files(self, torrent_hash: str) -> List[FileInfo]:
        return []

    def remove_transfer(self, torrent_hash: str, delete_files: bool = False) -> None:
        if self.remove_error is not None:
            raise self.remove_error
        self.removed.append((torrent_hash, delete_files))
        self.transfers = [t for t in self.transfers if t.hash != torrent_hash]

    def test_connection(self) -> Dict[str, object]:
        return {"success": True, "version": "fake", "error": None}


class RecordingCompressor(BaseCompressor):
    def __init__(self, rename: Optional[Dict[str, str]] = None):
        self.calls: List[str] = []
        self.rename = rename or {}

    def compress(self, file_name: str) -> str:
        self.calls.append(file_name)
        return self.rename.get(file_name, file_name)


class RecordingImporter(BaseCatalogImporter):
    def __init__(self, fail_on: Optional[str] = None):
        self.calls: List[str] = []
        self.fail_on = fail_on

    def import_file(self, file_name: str) -> None:
        if file_name == self.fail_on:
            raise RuntimeError(f"catalog rejected {file_name}")
        self.calls.append(file_name)


class FakeClock:
    """Deterministic clock; advance it with ``advance(minutes=...)``."""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def fake_client(incoming_dir) -> FakeTorrentClient:
    return FakeTorrentClient(incoming_path=incoming_dir)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
