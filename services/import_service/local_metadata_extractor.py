"""
Module Name: local_metadata_extractor.py
Description:
    Reads tags and duration from local audio files with mutagen so imported
    tracks carry a title, artist and album.

Location:
    /services/import_service/local_metadata_extractor.py

"""

import os
from typing import Any, Dict, Optional

import mutagen
from mutagen import MutagenError

from utils.logger import get_module_logger


_LOGGER = get_module_logger("Service.Import.MetadataExtractor")


class LocalMetadataExtractor:
    """Reads local audio files to extract track metadata."""

    def __init__(self, *, logger=None) -> None:
        self.logger = logger or _LOGGER

    def extract_metadata(self, file_path: str) -> Dict[str, Any]:
        """Return best-effort metadata from the file's tags, falling back to the file name."""
        file_name = os.path.basename(file_path)
        info: Dict[str, Any] = {
            'file_name': file_name,
            'title': None,
            'artist': None,
            'album': None,
            'duration_seconds': None,
            'file_size': os.path.getsize(file_path) if os.path.exists(file_path) else None,
        }

        easy_tags = self._load_mutagen_tags(file_path, easy=True)
        if easy_tags is not None and easy_tags.tags:
            info['title'] = self._first(easy_tags.tags.get('title'))
            info['artist'] = self._first(
                easy_tags.tags.get('artist')
                or easy_tags.tags.get('albumartist')
            )
            info['album'] = self._first(easy_tags.tags.get('album'))

        info['duration_seconds'] = self._extract_duration_seconds(easy_tags)

        if not info['title']:
            info['title'] = os.path.splitext(file_name)[0]

        return info

    def _load_mutagen_tags(self, file_path: str, easy: bool) -> Optional[Any]:
        try:
            return mutagen.File(file_path, easy=easy)
        except (MutagenError, OSError) as exc:
            self.logger.debug("Unable to load %s tags for %s: %s", 'easy' if easy else 'rich', file_path, exc)
            return None

    def _extract_duration_seconds(self, audio: Optional[Any]) -> Optional[float]:
        info = getattr(audio, 'info', None) if audio is not None else None
        length = getattr(info, 'length', None)
        if length and length > 0:
            return float(length)
        return None

    def _first(self, value: Any) -> Optional[str]:
        if value is None:
            return None
        if isinstance(value, (list, tuple)):
            value = value[0] if value else None
        if value is None:
            return None
        text = str(value).strip()
        return text or None


__all__ = ['LocalMetadataExtractor']
