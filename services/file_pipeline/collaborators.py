"""Contracts for the collaborators the file pipeline hands each file to."""

from abc import ABC, abstractmethod


class BaseCompressor(ABC):
    """Compresses an intake file in place."""

    @abstractmethod
    def compress(self, file_name: str) -> str:
        """
        Compress ``file_name`` (relative to the intake directory) if needed.

        Returns:
            The name of the file to import, which may differ from the input
        """


class BaseCatalogImporter(ABC):
    """Registers an intake file in the music catalog."""

    @abstractmethod
    def import_file(self, file_name: str) -> None:
        """Import ``file_name`` (relative to the intake directory)."""


class PassthroughCompressor(BaseCompressor):
    """Leaves every file untouched."""

    def compress(self, file_name: str) -> str:
        return file_name
