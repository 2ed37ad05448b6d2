import logging
from typing import Any, List, Optional

import pytest
import requests

from services.download_clients.errors import BackendAuthFailure, BackendProtocolError, BackendUnavailable
from services.download_clients.qbittorrent_client import QBittorrentClient

_NO_JSON = object()


class FakeResponse:
    def __init__(self, status_code: int = 200, text: str = "", payload: Any = _NO_JSON):
        self.status_code = status_code
        self.text = text
        self._payload = payload

    def json(self) -> Any:
        if self._payload is _NO_JSON:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeSession:
    """Stands in for requests.Session; replies come from ``responses`` in order."""

    def __init__(self, login: Any = None, responses: Optional[List[Any]] = None):
        self.login = login if login is not None else FakeResponse(200, "Ok.")
        self.responses = list(responses or [])
        self.posts: List[dict] = []
        self.requests: List[dict] = []
        self.closed = False
        self.verify = True
        self.headers: dict = {}

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        self.posts.append({"url": url, **kwargs})
        if url.endswith("auth/login"):
            if isinstance(self.login, Exception):
                raise self.login
            return self.login
        return FakeResponse(200, "Ok.")

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.requests.append({"method": method, "url": url, **kwargs})
        reply = self.responses.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    def close(self) -> None:
        self.closed = True


class SessionQueue(list):
    """Sessions waiting to be handed out, plus the ones already created."""

    def __init__(self) -> None:
        super().__init__()
        self.created: List[FakeSession] = []


CONFIG = {
    "base_url": "http://qbittorrent:8080/",
    "username": "admin",
    "password": "adminadmin",
    "category": "phono",
    "downloads_path": "/downloads",
    "incoming_path": "/app/incoming",
}


@pytest.fixture
def sessions(monkeypatch) -> SessionQueue:
    """Queue of sessions handed out by ``_create_session``; tests append to it."""
    queue = SessionQueue()

    def create_session(self) -> FakeSession:
        session = queue.pop(0)
        queue.created.append(session)
        return session

    monkeypatch.setattr(QBittorrentClient, "_create_session", create_session)
    return queue


def _transfer_payload(**overrides: Any) -> dict:
    payload = {
        "hash": "ABC123",
        "name": "Album A",
        "state": "downloading",
        "progress": 0.4,
        "dlspeed": 1024,
        "num_seeds": 3,
        "content_path": "/downloads/Album A",
        "save_path": "/downloads",
        "category": "phono",
    }
    payload.update(overrides)
    return payload


def test_list_transfers_logs_in_lazily_and_parses_records(sessions) -> None:
    session = FakeSession(responses=[FakeResponse(200, payload=[_transfer_payload()])])
    sessions.append(session)
    client = QBittorrentClient(CONFIG)
    assert not client.is_authenticated

    transfers = client.list_transfers()

    assert client.is_authenticated
    login = session.posts[0]
    assert login["url"] == "http://qbittorrent:8080/api/v2/auth/login"
    assert login["data"] == {"username": "admin", "password": "adminadmin"}
    assert login["timeout"] == 15
    assert session.requests[0]["url"] == "http://qbittorrent:8080/api/v2/torrents/info"
    assert session.requests[0]["timeout"] == 15

    [transfer] = transfers
    assert transfer.hash == "ABC123"
    assert transfer.progress == 0.4
    assert transfer.download_speed == 1024
    assert transfer.seeds == 3
    assert transfer.content_path == "/downloads/Album A"


def test_list_transfers_coerces_missing_and_bad_fields(sessions) -> None:
    sessions.append(FakeSession(responses=[FakeResponse(200, payload=[{"hash": "h1", "progress": "n/a", "num_seeds": None}])]))
    client = QBittorrentClient(CONFIG)

    [transfer] = client.list_transfers()

    assert transfer.name == ""
    assert transfer.progress == 0.0
    assert transfer.seeds == 0
    assert transfer.category == ""


def test_login_body_is_checked_case_insensitively(sessions) -> None:
    sessions.append(FakeSession(login=FakeResponse(200, "OK."), responses=[FakeResponse(200, payload=[])]))
    client = QBittorrentClient(CONFIG)
    assert client.list_transfers() == []


def test_rejected_login_raises_auth_failure(sessions) -> None:
    session = FakeSession(login=FakeResponse(200, "Fails."))
    sessions.append(session)
    client = QBittorrentClient(CONFIG)

    with pytest.raises(BackendAuthFailure):
        client.list_transfers()

    assert session.closed
    assert not client.is_authenticated


def test_login_transport_error_is_backend_unavailable(sessions) -> None:
    sessions.append(FakeSession(login=requests.ConnectionError("refused")))
    client = QBittorrentClient(CONFIG)

    with pytest.raises(BackendUnavailable):
        client.list_transfers()


def test_forbidden_response_triggers_one_reauthentication(sessions) -> None:
    stale = FakeSession(responses=[FakeResponse(403, "Forbidden")])
    fresh = FakeSession(responses=[FakeResponse(200, payload=[_transfer_payload()])])
    sessions.extend([stale, fresh])
    client = QBittorrentClient(CONFIG)

    transfers = client.list_transfers()

    assert len(transfers) == 1
    assert stale.closed
    assert len(fresh.posts) == 1
    assert client.session is fresh


def test_second_rejection_raises_auth_failure(sessions) -> None:
    sessions.extend([
        FakeSession(responses=[FakeResponse(401, "Unauthorized")]),
        FakeSession(responses=[FakeResponse(403, "Forbidden")]),
    ])
    client = QBittorrentClient(CONFIG)

    with pytest.raises(BackendAuthFailure):
        client.list_transfers()
    assert not client.is_authenticated


def test_server_error_is_protocol_error(sessions) -> None:
    sessions.append(FakeSession(responses=[FakeResponse(500, "boom")]))
    client = QBittorrentClient(CONFIG)

    with pytest.raises(BackendProtocolError):
        client.list_transfers()


@pytest.mark.parametrize("response", [FakeResponse(200, "<html>"), FakeResponse(200, payload={"hash": "x"})])
def test_non_list_body_is_protocol_error(sessions, response) -> None:
    sessions.append(FakeSession(responses=[response]))
    client = QBittorrentClient(CONFIG)

    with pytest.raises(BackendProtocolError):
        client.list_transfers()


def test_request_timeout_is_backend_unavailable(sessions) -> None:
    sessions.append(FakeSession(responses=[requests.Timeout("slow")]))
    client = QBittorrentClient(CONFIG)

    with pytest.raises(BackendUnavailable):
        client.list_transfers()


def test_submit_job_posts_magnet_category_and_savepath(sessions) -> None:
    session = FakeSession(responses=[FakeResponse(200, "Ok.")])
    sessions.append(session)
    client = QBittorrentClient(CONFIG)

    client.submit_job(" magnet:?xt=urn:btih:abc ", "Album A")

    sent = session.requests[0]
    assert sent["method"] == "POST"
    assert sent["url"].endswith("/api/v2/torrents/add")
    assert sent["data"] == {"urls": "magnet:?xt=urn:btih:abc", "savepath": "/downloads", "category": "phono"}


def test_submit_job_warns_on_unexpected_body(sessions, caplog) -> None:
    sessions.append(FakeSession(responses=[FakeResponse(200, "Fails.")]))
    client = QBittorrentClient(CONFIG)

    with caplog.at_level(logging.WARNING):
        client.submit_job("magnet:?xt=urn:btih:abc", "Album A")

    assert "Fails." in caplog.text


def test_submit_job_rejects_blank_magnet_without_network(sessions) -> None:
    client = QBittorrentClient(CONFIG)
    with pytest.raises(ValueError):
        client.submit_job("   ")
    assert sessions.created == []


@pytest.mark.parametrize(("delete_files", "flag"), [(True, "true"), (False, "false")])
def test_remove_transfer_sends_delete_flag(sessions, delete_files, flag) -> None:
    session = FakeSession(responses=[FakeResponse(200, "")])
    sessions.append(session)
    client = QBittorrentClient(CONFIG)

    client.remove_transfer("abc123", delete_files=delete_files)

    assert session.requests[0]["data"] == {"hashes": "abc123", "deleteFiles": flag}


def test_list_files_parses_records(sessions) -> None:
    sessions.append(FakeSession(responses=[FakeResponse(200, payload=[{"name": "a.mp3", "size": 10, "progress": 1}])]))
    client = QBittorrentClient(CONFIG)

    [info] = client.list_files("abc123")

    assert (info.name, info.size, info.progress) == ("a.mp3", 10, 1.0)


def test_test_connection_reports_version_and_failures(sessions) -> None:
    sessions.append(FakeSession(responses=[FakeResponse(200, "v4.6.2\n")]))
    client = QBittorrentClient(CONFIG)
    assert client.test_connection() == {"success": True, "version": "v4.6.2", "error": None}

    failing = QBittorrentClient(CONFIG)
    sessions.append(FakeSession(login=FakeResponse(403, "Forbidden")))
    result = failing.test_connection()
    assert result["success"] is False
    assert "auth failed" in result["error"]
    assert failing.get_last_error()


def test_disconnect_logs_out_and_drops_session(sessions) -> None:
    session = FakeSession(responses=[FakeResponse(200, payload=[])])
    sessions.append(session)
    client = QBittorrentClient(CONFIG)
    client.list_transfers()

    client.disconnect()

    assert session.posts[-1]["url"].endswith("auth/logout")
    assert session.closed
    assert client.session is None


def test_find_transfer_prefers_hash_then_title_and_category(sessions) -> None:
    from conftest import make_transfer

    client = QBittorrentClient(CONFIG)
    transfers = [
        make_transfer(hash="AAA", name="Album A", category="other"),
        make_transfer(hash="BBB", name="album a", category="PHONO"),
    ]

    assert client.find_transfer(transfers, torrent_hash="aaa").hash == "AAA"
    assert client.find_transfer(transfers, torrent_hash="zzz", title="Album A") is None
    assert client.find_transfer(transfers, title="ALBUM A").hash == "BBB"
    assert client.find_transfer(transfers, title="  ") is None


def test_map_to_local_path_uses_translator() -> None:
    client = QBittorrentClient(CONFIG)
    assert client.map_to_local_path("/downloads/Album A/01.mp3") == "/app/incoming/Album A/01.mp3"
