"""
Module Name: ffmpeg_handler.py
Description:
    Builds and executes FFmpeg commands that compress lossless intake files
    to MP3.

Location:
    /services/conversion_service/ffmpeg_handler.py

"""

import re
import subprocess
from typing import Any, Dict, List, Optional

from utils.logger import get_module_logger


class FFmpegError(RuntimeError):
    """FFmpeg could not be started or exited with a failure status."""


class FFmpegHandler:
    """Thin wrapper around the ffmpeg binary."""

    DEFAULT_TIMEOUT = 600

    def __init__(self, ffmpeg_path: str = "ffmpeg", *, timeout: Optional[float] = None, logger=None):
        self.ffmpeg_path = ffmpeg_path or "ffmpeg"
        self.timeout = timeout or self.DEFAULT_TIMEOUT
        self.logger = logger or get_module_logger("Service.Conversion.FFmpegHandler")

    # ============================================================================
    # COMMAND BUILDING
    # ============================================================================

    def build_mp3_command(self, input_file: str, output_file: str, bitrate: str = "192k") -> List[str]:
        """Re-encode ``input_file`` to MP3 at a constant bitrate, keeping its tags."""
        return [
            self.ffmpeg_path,
            '-y',
            '-hide_banner',
            '-loglevel', 'error',
            '-i', input_file,
            '-vn',
            '-map_metadata', '0',
            '-id3v2_version', '3',
            '-c:a', 'libmp3lame',
            '-b:a', bitrate,
            output_file,
        ]

    # ============================================================================
    # EXECUTION
    # ============================================================================

    def run(self, cmd: List[str]) -> None:
        """
        Execute an FFmpeg command and wait for it.

        Raises:
            FFmpegError: If the binary is missing, times out, or exits non-zero
        """
        self.logger.debug("Executing FFmpeg command", extra={"command_preview": ' '.join(cmd[:8])})
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=self.timeout)
        except FileNotFoundError as exc:
            raise FFmpegError(f"FFmpeg not found: {self.ffmpeg_path}") from exc
        except subprocess.TimeoutExpired as exc:
            raise FFmpegError(f"FFmpeg timed out after {self.timeout}s") from exc

        if result.returncode != 0:
            stderr = (result.stderr or '').strip()
            raise FFmpegError(f"FFmpeg exited with status {result.returncode}: {stderr[-500:]}")

    def validate_installation(self) -> Dict[str, Any]:
        """Check that the configured ffmpeg binary runs."""
        try:
            result = subprocess.run([self.ffmpeg_path, '-version'], capture_output=True, text=True, timeout=10)
        except subprocess.TimeoutExpired:
            return {'success': False, 'error': 'FFmpeg validation timed out', 'ffmpeg_available': False}
        except FileNotFoundError:
            return {'success': False, 'error': 'FFmpeg not found in PATH', 'ffmpeg_available': False}

        if result.returncode != 0:
            return {'success': False, 'error': 'FFmpeg not found or not working', 'ffmpeg_available': False}

        version_match = re.search(r'ffmpeg version ([^\s]+)', result.stdout)
        return {
            'success': True,
            'ffmpeg_available': True,
            'version': version_match.group(1) if version_match else 'unknown',
        }
