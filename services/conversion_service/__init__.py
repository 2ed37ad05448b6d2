"""Compression collaborator for the file pipeline."""

from .conversion_service import LOSSLESS_EXTENSIONS, AudioCompressionService, CompressionError
from .ffmpeg_handler import FFmpegError, FFmpegHandler

__all__ = [
    'AudioCompressionService',
    'CompressionError',
    'FFmpegHandler',
    'FFmpegError',
    'LOSSLESS_EXTENSIONS',
]
