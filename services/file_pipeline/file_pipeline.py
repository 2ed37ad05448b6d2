"""
File Pipeline
=============

Turns a completed transfer into imported catalog tracks:
content path → local path → eligible audio files → intake directory →
compression → catalog import.

A failure on any file aborts the remaining files and propagates; there is
no partial-success bookkeeping.
"""

import os
from dataclasses import dataclass, field
from typing import Callable, FrozenSet, List, Optional

from utils.logger import get_module_logger

from .collaborators import BaseCatalogImporter, BaseCompressor
from .errors import ContentUnavailable, NoEligibleFiles
from .file_operations import FileOperations

logger = get_module_logger("Service.FilePipeline")

SUPPORTED_EXTENSIONS: FrozenSet[str] = frozenset({".mp3", ".wav", ".flac"})


@dataclass(frozen=True)
class ImportedFile:
    source_path: str
    stored_name: str
    final_name: str


@dataclass
class PipelineResult:
    content_path: str
    files: List[ImportedFile] = field(default_factory=list)

    @property
    def imported_count(self) -> int:
        return len(self.files)


class FilePipeline:
    """Moves, compresses and imports the audio files of one completed transfer."""

    def __init__(
        self,
        intake_dir: str,
        compressor: BaseCompressor,
        importer: BaseCatalogImporter,
        path_translator: Optional[Callable[[str], Optional[str]]] = None,
        file_operations: Optional[FileOperations] = None,
        supported_extensions: FrozenSet[str] = SUPPORTED_EXTENSIONS,
    ):
        self.intake_dir = intake_dir
        self.compressor = compressor
        self.importer = importer
        self.path_translator = path_translator
        self.file_operations = file_operations or FileOperations()
        self.supported_extensions = frozenset(ext.lower() for ext in supported_extensions)
        self.logger = logger

    def process(self, content_path: str) -> PipelineResult:
        """
        Run the pipeline for one transfer.

        Args:
            content_path: Content (or save/name) path as reported by the backend

        Raises:
            ContentUnavailable: If the path cannot be resolved
            NoEligibleFiles: If nothing with a supported extension is found
            PipelineError / collaborator errors: Propagated from the first failing file
        """
        local_path = self.path_translator(content_path) if self.path_translator else content_path
        if not local_path or not local_path.strip():
            raise ContentUnavailable("Download completed but content path was unavailable.")

        audio_files = self.discover_audio_files(local_path)
        if not audio_files:
            raise NoEligibleFiles("No supported audio files found in torrent.")

        self.logger.info(f"Importing {len(audio_files)} audio file(s) from {local_path}")

        result = PipelineResult(content_path=local_path)
        for file_path in audio_files:
            stored_name, _ = self.file_operations.move_unique(file_path, self.intake_dir)
            final_name = self.compressor.compress(stored_name)
            self.importer.import_file(final_name)
            result.files.append(ImportedFile(file_path, stored_name, final_name))
            self.logger.debug(f"Imported {file_path} as {final_name}")

        return result

    def is_supported(self, path: str) -> bool:
        return os.path.splitext(path)[1].lower() in self.supported_extensions

    def discover_audio_files(self, root_path: str) -> List[str]:
        """Eligible files under ``root_path`` (a single file or a directory, searched recursively)."""
        if os.path.isfile(root_path):
            return [root_path] if self.is_supported(root_path) else []

        if not os.path.isdir(root_path):
            self.logger.warning(f"Content path does not exist locally: {root_path}")
            return []

        found: List[str] = []
        for directory, subdirectories, file_names in os.walk(root_path):
            subdirectories.sort()
            for file_name in sorted(file_names):
                if self.is_supported(file_name):
                    found.append(os.path.join(directory, file_name))
        return found
