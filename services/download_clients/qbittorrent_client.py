"""qBittorrent client implementation for the torrent intake subsystem."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import requests
from requests import Response, Session
from requests.exceptions import RequestException

from .base_torrent_client import BaseTorrentClient
from .errors import BackendAuthFailure, BackendProtocolError, BackendUnavailable
from .models import FileInfo, TransferInfo
from utils.logger import get_module_logger

logger = get_module_logger("DownloadClients.QBittorrent")


class QBittorrentClient(BaseTorrentClient):
	"""Thin wrapper around the qBittorrent Web API v2.

	The authenticated session is created lazily on first use and cached.
	A 401/403 answer invalidates it; the call is retried once after a fresh
	login before BackendAuthFailure is raised.
	"""

	DEFAULT_TIMEOUT = 15
	AUTH_REJECTED_CODES = (401, 403)

	def __init__(self, config: Dict[str, Any]):
		super().__init__(config, logger=logger)
		self._session: Optional[Session] = None
		self.timeout = float(config.get("timeout") or self.DEFAULT_TIMEOUT)
		self.verify_cert = bool(config.get("verify_cert", True))
		self.downloads_path = config.get("downloads_path") or ""
		self.base_url = str(config.get("base_url") or "http://localhost:8080").strip().rstrip("/")
		self.api_url = f"{self.base_url}/api/v2/"

		logger.debug("Initialized QBittorrentClient for %s", self.base_url)

	@property
	def session(self) -> Optional[Session]:
		"""The cached authenticated session, or None before first use."""

		return self._session

	@property
	def is_authenticated(self) -> bool:
		return self._session is not None

	# ------------------------------------------------------------------
	# Public API surface
	# ------------------------------------------------------------------
	def submit_job(self, magnet_link: str, title: Optional[str] = None) -> None:
		if not magnet_link or not magnet_link.strip():
			raise ValueError("magnet_link is required")

		payload = {"urls": magnet_link.strip(), "savepath": self.downloads_path}
		if self.category:
			payload["category"] = self.category

		response = self._request("POST", "torrents/add", data=payload)
		body = (response.text or "").strip()
		if body.lower() != "ok.":
			logger.warning("qBittorrent add magnet response for %r: %s", title or magnet_link[:60], body)
		else:
			logger.info("Submitted magnet to qBittorrent (title=%s, category=%s)", title, self.category)

	def list_transfers(self, hashes: Optional[str] = None) -> List[TransferInfo]:
		params = {"hashes": hashes} if hashes else None
		records = self._request_json_list("torrents/info", params=params)
		return [TransferInfo.from_api(item) for item in records if isinstance(item, dict)]

	def list_files(self, torrent_hash: str) -> List[FileInfo]:
		if not torrent_hash:
			raise ValueError("torrent_hash is required")

		records = self._request_json_list("torrents/files", params={"hash": torrent_hash})
		return [FileInfo.from_api(item) for item in records if isinstance(item, dict)]

	def remove_transfer(self, torrent_hash: str, delete_files: bool = False) -> None:
		if not torrent_hash:
			raise ValueError("torrent_hash is required")

		data = {"hashes": torrent_hash, "deleteFiles": "true" if delete_files else "false"}
		self._request("POST", "torrents/delete", data=data)
		logger.info("Removed torrent %s from qBittorrent (delete_files=%s)", torrent_hash, delete_files)

	def test_connection(self) -> Dict[str, Any]:
		result: Dict[str, Any] = {"success": False, "version": None, "error": None}
		try:
			version = self._request("GET", "app/version").text.strip()
			result.update({"success": True, "version": version})
			self._clear_error()
		except (BackendUnavailable, BackendAuthFailure, BackendProtocolError) as exc:
			result["error"] = str(exc)
			self._set_error(f"Connection test failed: {exc}")
		return result

	def disconnect(self) -> None:
		self._teardown_session()
		super().disconnect()

	# ------------------------------------------------------------------
	# Session handling
	# ------------------------------------------------------------------
	def _create_session(self) -> Session:
		session = requests.Session()
		session.verify = self.verify_cert
		session.headers.update(
			{
				"User-Agent": "PhonoIntake-QBittorrentClient/1.0",
				"Accept": "application/json, text/plain, */*",
				"Referer": self.base_url,
			}
		)
		return session

	def _teardown_session(self) -> None:
		if self._session is None:
			return

		try:
			self._session.post(f"{self.api_url}auth/logout", timeout=self.timeout)
		except RequestException as exc:
			logger.debug("Ignoring logout failure during teardown: %s", exc)
		finally:
			self._session.close()
			self._session = None

	def _invalidate_session(self) -> None:
		if self._session is not None:
			self._session.close()
		self._session = None

	def _ensure_session(self) -> Session:
		if self._session is not None:
			return self._session

		session = self._create_session()
		try:
			self._login(session)
		except Exception:
			session.close()
			raise
		self._session = session
		return session

	def _login(self, session: Session) -> None:
		payload = {
			"username": self.config.get("username", ""),
			"password": self.config.get("password", ""),
		}

		try:
			response = session.post(
				f"{self.api_url}auth/login",
				data=payload,
				timeout=self.timeout,
				allow_redirects=False,
			)
		except RequestException as exc:
			raise BackendUnavailable(f"qBittorrent login request failed: {exc}") from exc

		body = (response.text or "").strip()
		if response.status_code != 200 or body.lower() != "ok.":
			raise BackendAuthFailure(
				f"qBittorrent auth failed: {response.status_code} {body}. "
				"Set the WebUI username/password in qBittorrent and make sure "
				"the [qbittorrent] username/password settings match."
			)

		logger.debug("Authenticated with qBittorrent at %s", self.base_url)

	# ------------------------------------------------------------------
	# HTTP helpers
	# ------------------------------------------------------------------
	def _send(self, method: str, endpoint: str, **kwargs: Any) -> Response:
		session = self._ensure_session()
		url = f"{self.api_url}{endpoint}"
		try:
			return session.request(method, url, timeout=self.timeout, **kwargs)
		except RequestException as exc:
			raise BackendUnavailable(f"HTTP {method} {endpoint} failed: {exc}") from exc

	def _request(self, method: str, endpoint: str, **kwargs: Any) -> Response:
		response = self._send(method, endpoint, **kwargs)

		if response.status_code in self.AUTH_REJECTED_CODES:
			logger.info("qBittorrent session rejected (%s), re-authenticating", response.status_code)
			self._invalidate_session()
			response = self._send(method, endpoint, **kwargs)
			if response.status_code in self.AUTH_REJECTED_CODES:
				self._invalidate_session()
				raise BackendAuthFailure(
					f"HTTP {method} {endpoint} rejected after re-authentication: {response.status_code}"
				)

		if not 200 <= response.status_code < 300:
			raise BackendProtocolError(
				f"HTTP {method} {endpoint} returned {response.status_code}: {(response.text or '').strip()[:200]}"
			)

		return response

	def _request_json_list(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> List[Any]:
		response = self._request("GET", endpoint, params=params)
		try:
			payload = response.json()
		except ValueError as exc:
			raise BackendProtocolError(f"Invalid JSON response from {endpoint}: {exc}") from exc

		if payload is None:
			return []
		if not isinstance(payload, list):
			raise BackendProtocolError(f"Expected a JSON array from {endpoint}, got {type(payload).__name__}")
		return payload
