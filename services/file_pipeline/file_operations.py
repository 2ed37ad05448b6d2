"""
Module Name: file_operations.py
Description:
    Moves finished downloads into the intake directory under a name that is
    not already taken there.

Location:
    /services/file_pipeline/file_operations.py

"""

import os
import shutil
from typing import Tuple

from utils.logger import get_module_logger

from .errors import FileMoveError

_LOGGER = get_module_logger("Service.FilePipeline.FileOperations")


class FileOperations:
    """
    Handles file system operations for the pipeline.

    Name collision checks happen at move time, one file at a time. This is
    only safe while a single pipeline writes to the intake directory.
    """

    def __init__(self, *, logger=None):
        self.logger = logger or _LOGGER

    @staticmethod
    def unique_file_name(directory: str, file_name: str) -> str:
        """Return ``file_name`` or the first free ``stem_N.ext`` variant in ``directory``."""
        stem, extension = os.path.splitext(file_name)
        candidate = file_name
        counter = 1
        while os.path.exists(os.path.join(directory, candidate)):
            candidate = f"{stem}_{counter}{extension}"
            counter += 1
        return candidate

    def move_unique(self, source: str, destination_dir: str) -> Tuple[str, str]:
        """
        Move ``source`` into ``destination_dir`` without overwriting anything.

        Returns:
            Tuple of (stored file name, absolute destination path)

        Raises:
            FileMoveError: If the source is missing or the move fails
        """
        if not os.path.isfile(source):
            raise FileMoveError(f"Source file does not exist: {source}")

        os.makedirs(destination_dir, exist_ok=True)
        target_name = self.unique_file_name(destination_dir, os.path.basename(source))
        destination = os.path.join(destination_dir, target_name)

        try:
            # os.rename when on the same filesystem, copy + delete otherwise
            shutil.move(source, destination)
        except OSError as exc:
            raise FileMoveError(f"File move failed for {source}: {exc}") from exc

        self.logger.info("Moved file into intake", extra={"source": source, "destination": destination})
        return target_name, destination
