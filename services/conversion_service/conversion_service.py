"""
Audio Compression Service

Default compressor for the file pipeline: lossless intake files above a
configurable size are re-encoded to MP3 next to the original, and the
original is deleted.
"""

import os
from typing import Optional

from services.config.settings import CompressionSettings
from services.file_pipeline.collaborators import BaseCompressor
from services.file_pipeline.file_operations import FileOperations
from utils.logger import get_module_logger

from .ffmpeg_handler import FFmpegError, FFmpegHandler

LOSSLESS_EXTENSIONS = frozenset({'.wav', '.flac'})


class CompressionError(RuntimeError):
    """An intake file could not be compressed."""


class AudioCompressionService(BaseCompressor):
    """Compresses lossless files in the intake directory with FFmpeg."""

    def __init__(
        self,
        settings: CompressionSettings,
        intake_dir: str,
        ffmpeg: Optional[FFmpegHandler] = None,
    ):
        self.settings = settings
        self.intake_dir = intake_dir
        self.ffmpeg = ffmpeg or FFmpegHandler(settings.ffmpeg_path)
        self.logger = get_module_logger("Service.Conversion.AudioCompression")

    def should_compress(self, file_path: str) -> bool:
        if not self.settings.enabled:
            return False
        if os.path.splitext(file_path)[1].lower() not in LOSSLESS_EXTENSIONS:
            return False
        return os.path.getsize(file_path) > self.settings.min_size_bytes

    def compress(self, file_name: str) -> str:
        """
        Compress one intake file if it qualifies.

        Args:
            file_name: Name of the file inside the intake directory

        Returns:
            Name of the file to import (the MP3 when compressed)

        Raises:
            CompressionError: If the file is missing or FFmpeg fails
        """
        source = os.path.join(self.intake_dir, file_name)
        if not os.path.isfile(source):
            raise CompressionError(f"File to compress does not exist: {source}")

        if not self.should_compress(source):
            return file_name

        stem = os.path.splitext(file_name)[0]
        output_name = FileOperations.unique_file_name(self.intake_dir, f"{stem}.mp3")
        output_path = os.path.join(self.intake_dir, output_name)

        cmd = self.ffmpeg.build_mp3_command(source, output_path, self.settings.bitrate)
        try:
            self.ffmpeg.run(cmd)
        except FFmpegError as exc:
            if os.path.exists(output_path):
                os.remove(output_path)
            raise CompressionError(f"Compression failed for {file_name}: {exc}") from exc

        if not os.path.isfile(output_path):
            raise CompressionError(f"Compression finished but {output_name} was not written")

        os.remove(source)
        self.logger.info(f"Compressed {file_name} → {output_name} ({self.settings.bitrate})")
        return output_name
