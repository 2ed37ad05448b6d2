"""
Application Bootstrap - Phono Intake

Starts the torrent intake worker: configures logging, validates settings,
builds the services and runs the reconciliation loop until interrupted.

Usage:
    python app.py                    # run the monitor until SIGINT/SIGTERM
    python app.py --once             # run a single reconciliation tick
    python app.py --submit MAGNET [--title NAME]
    python app.py --check            # test the backend connection
"""

import argparse
import signal
import sys
import threading
from typing import List, Optional

from config.config import Config
from services.conversion_service import AudioCompressionService
from services.download_clients import TorrentClientError
from services.service_manager import service_manager
from services.torrent_jobs import SubmissionError
from utils.logger import setup_logger
from utils.path_resolver import get_path_resolver

logger = None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Phono torrent intake worker")
    parser.add_argument("--once", action="store_true", help="Run one reconciliation tick and exit")
    parser.add_argument("--submit", metavar="MAGNET", help="Submit a magnet link and exit")
    parser.add_argument("--title", help="Display name used to match the submitted transfer")
    parser.add_argument("--check", action="store_true", help="Test the qBittorrent connection and exit")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    return parser


def check_ffmpeg(compressor) -> None:
    """Report whether the compressor's ffmpeg binary runs; compression is optional so this only warns."""
    if not isinstance(compressor, AudioCompressionService):
        logger.info("Compression disabled; skipping FFmpeg check")
        return
    status = compressor.ffmpeg.validate_installation()
    if status["ffmpeg_available"]:
        logger.info(f"FFmpeg available (version {status['version']})")
    else:
        logger.warning(f"FFmpeg unavailable: {status['error']}; lossless files will fail to compress")


def run_worker() -> int:
    """Run the monitor on its thread until a termination signal arrives."""
    settings = service_manager.get_config_service().get_torrent_settings()
    if not settings.monitor_enabled or not Config.MONITOR_ENABLED:
        logger.warning("Torrent monitor is disabled in configuration; nothing to do")
        return 0

    monitor = service_manager.get_torrent_monitor()
    shutdown = threading.Event()

    def handle_signal(signum, _frame):
        logger.info(f"Received signal {signum}; shutting down")
        shutdown.set()

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    monitor.start()
    try:
        while not shutdown.wait(1.0):
            pass
    finally:
        logger.info("Waiting for the torrent monitor to finish its current job")
        service_manager.shutdown()
    logger.info("Phono intake worker stopped")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    global logger
    args = build_parser().parse_args(argv)

    logger = setup_logger(
        args.log_level or Config.LOG_LEVEL,
        Config.LOG_FILE,
        logs_dir=get_path_resolver().get_logs_dir(),
    )
    logger.info("Starting Phono intake worker")

    config_service = service_manager.get_config_service()
    problems = config_service.validate_config()
    if problems:
        logger.warning(f"Configuration has {len(problems)} problem(s); continuing with current values")

    if args.check:
        database = service_manager.get_database_service()
        if not database.is_healthy():
            logger.error(f"Job database {database.db_file} is not usable")
            return 1
        db_info = database.get_database_info()
        logger.info(f"Job database {db_info['file_path']}: {db_info.get('row_counts', {})}")
        check_ffmpeg(service_manager.get_compression_service())
        result = service_manager.get_torrent_client().test_connection()
        if result.get("success"):
            logger.info(f"qBittorrent reachable (version {result.get('version')})")
            return 0
        logger.error(f"qBittorrent connection failed: {result.get('error')}")
        return 1

    if args.submit is not None:
        try:
            job = service_manager.get_submission_service().submit(args.submit, args.title)
        except ValueError as exc:
            logger.error(str(exc))
            return 2
        except SubmissionError as exc:
            logger.error(f"Submission failed: {exc}")
            return 1
        print(job.id)
        return 0

    if args.once:
        try:
            processed = service_manager.get_torrent_monitor().run_once()
        except TorrentClientError as exc:
            logger.error(f"Could not fetch transfer snapshot: {exc}")
            return 1
        finally:
            service_manager.shutdown()
        logger.info(f"Reconciled {processed} job(s)")
        return 0

    return run_worker()


if __name__ == '__main__':
    sys.exit(main())
