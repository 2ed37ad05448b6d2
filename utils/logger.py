"""
Module Name: logger.py
Description:
    Logger helpers shared by every service. Modules ask for a named stdlib
    logger; the process entrypoint calls setup_logger() once, which routes
    all stdlib records into the Loguru sinks configured in loguru_config.

Location:
    /utils/logger.py

"""

import logging
from typing import Union

from utils.loguru_config import setup_loguru

ROOT_LOGGER_NAME = "PhonoIntake"

_LOGGER_INITIALIZED = False


def setup_logger(level: Union[str, int] = "INFO", log_file: str = "phono_intake.log", logs_dir=None):
    """Configure process-wide logging (idempotent)."""
    global _LOGGER_INITIALIZED

    if _LOGGER_INITIALIZED:
        logging.getLogger(ROOT_LOGGER_NAME).setLevel(level)
        return logging.getLogger(ROOT_LOGGER_NAME)

    setup_loguru(log_level=level, log_file=log_file, logger_name=ROOT_LOGGER_NAME, logs_dir=logs_dir)

    # Quiet chatty HTTP internals; backend polling runs every few seconds
    for noisy in ("urllib3", "urllib3.connectionpool"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    _LOGGER_INITIALIZED = True

    parent_logger = logging.getLogger(ROOT_LOGGER_NAME)
    parent_logger.debug("Logging initialized", extra={"log_file": log_file})
    return parent_logger


def get_module_logger(module_name: str) -> logging.Logger:
    """Get a logger for a specific module.

    Records propagate to the root logger, so they reach Loguru once
    setup_logger() has run and stay visible to pytest's caplog otherwise.
    """
    return logging.getLogger(module_name)


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """Get an existing logger instance."""
    return logging.getLogger(name)
