"""Error taxonomy for torrent backend interactions."""


class TorrentClientError(RuntimeError):
    """Base error raised by torrent backend clients."""


class BackendUnavailable(TorrentClientError):
    """Network or transport failure talking to the backend; retry next tick."""


class BackendAuthFailure(TorrentClientError):
    """The backend rejected the configured credentials."""


class BackendProtocolError(TorrentClientError):
    """The backend answered with an unexpected status or body."""
