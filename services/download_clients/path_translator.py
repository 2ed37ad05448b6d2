"""
Module Name: path_translator.py
Description:
    Maps paths reported by the torrent client (inside its own container or
    host) onto the locally mounted equivalent.

Location:
    /services/download_clients/path_translator.py

"""

import os
from typing import Optional


class PathTranslator:
    """Prefix substitution from the backend downloads root to the local incoming root.

    Paths outside the backend root are returned unchanged; callers treat
    those as a configuration mismatch rather than an error here.
    """

    def __init__(self, remote_root: str, local_root: str):
        self.remote_root = remote_root or ""
        self.local_root = local_root or ""

    def translate(self, backend_path: Optional[str]) -> Optional[str]:
        if not backend_path or not backend_path.strip():
            return backend_path
        if not self.remote_root:
            return backend_path

        if not backend_path.lower().startswith(self.remote_root.lower()):
            return backend_path

        remainder = backend_path[len(self.remote_root):].replace("\\", "/").lstrip("/")
        if not remainder:
            return self.local_root

        segments = [segment for segment in remainder.split("/") if segment]
        return os.path.join(self.local_root, *segments)

    __call__ = translate

    def __repr__(self) -> str:
        return f"PathTranslator({self.remote_root!r} -> {self.local_root!r})"
