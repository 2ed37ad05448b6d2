"""
File Pipeline Module
====================

Post-download processing of completed transfers.
"""

from .collaborators import BaseCatalogImporter, BaseCompressor, PassthroughCompressor
from .errors import ContentUnavailable, FileMoveError, NoEligibleFiles, PipelineError
from .file_operations import FileOperations
from .file_pipeline import SUPPORTED_EXTENSIONS, FilePipeline, ImportedFile, PipelineResult

__all__ = [
    'FilePipeline',
    'PipelineResult',
    'ImportedFile',
    'FileOperations',
    'BaseCompressor',
    'BaseCatalogImporter',
    'PassthroughCompressor',
    'PipelineError',
    'ContentUnavailable',
    'NoEligibleFiles',
    'FileMoveError',
    'SUPPORTED_EXTENSIONS',
]
