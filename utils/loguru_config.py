"""
Module Name: loguru_config.py
Description:
    Loguru sinks for the intake worker (console plus rotating file) and the
    bridge that forwards standard logging records into them.

Location:
    /utils/loguru_config.py

"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

from loguru import logger

DEFAULT_NAME = "PhonoIntake"

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> "
    "| <level>{level: <8}</level> "
    "| <cyan>{extra[logger_name]}</cyan> - "
    "<level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} - {level} - {extra[logger_name]} - {message}"


def _standardize_name(raw_name: Union[str, int]) -> str:
    """Normalize logger names to dotted, capitalized segments (Service.TorrentJobs.Monitor)."""
    if not raw_name:
        return DEFAULT_NAME
    if isinstance(raw_name, int):
        return str(raw_name)

    normalized = str(raw_name)
    for separator in ("\\", "/", "_", " "):
        normalized = normalized.replace(separator, ".")
    return ".".join(part[:1].upper() + part[1:] for part in normalized.split(".") if part)


class InterceptHandler(logging.Handler):
    """Forward standard logging records to Loguru, keeping the caller's location."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: Union[str, int] = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Skip frames inside the logging package so Loguru reports the real caller
        frame, depth = logging.currentframe(), 0
        while frame is not None and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        logger.bind(logger_name=_standardize_name(record.name)).opt(
            depth=depth, exception=record.exc_info
        ).log(level, record.getMessage())


def _coerce_level(level: Union[str, int]) -> Union[str, int]:
    if isinstance(level, int):
        return level
    text = str(level).strip()
    if text.isdigit():
        return int(text)
    return text.upper() or "INFO"


def setup_loguru(
    log_level: Union[str, int] = "INFO",
    log_file: str = "phono_intake.log",
    logger_name: str = DEFAULT_NAME,
    logs_dir: Optional[Union[str, Path]] = None,
    rotation: str = "10 MB",
    retention: int = 5,
):
    """Replace Loguru's sinks and route the root stdlib logger through them."""
    level = _coerce_level(log_level)
    log_dir = Path(logs_dir) if logs_dir else Path(__file__).resolve().parent.parent / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)

    logger.remove()
    logger.configure(extra={"logger_name": _standardize_name(logger_name)})

    # enqueue: the monitor thread and the main thread both log
    logger.add(
        sys.stdout,
        level=level,
        format=CONSOLE_FORMAT,
        enqueue=True,
        backtrace=False,
        diagnose=False,
        colorize=sys.stdout.isatty(),
    )
    logger.add(
        log_dir / log_file,
        level=level,
        format=FILE_FORMAT,
        rotation=rotation,
        retention=retention,
        encoding="utf-8",
        enqueue=True,
        backtrace=False,
        diagnose=False,
    )

    logging.basicConfig(handlers=[InterceptHandler()], level=logging.NOTSET, force=True)
    return logger
