"""
Module Name: paths.py
Description:
    Helpers for turning configured file locations into absolute paths.
    Blank settings fall back to the directories chosen by the path resolver.
"""

import os
from typing import Optional

from utils.path_resolver import get_path_resolver

DATABASE_FILENAME = "phono.db"


def resolve_config_path(filename: str) -> str:
    """Resolve a filename under the configuration directory."""
    return os.path.join(get_path_resolver().get_config_dir(), filename)


def resolve_database_file() -> str:
    """Return the default path of the job database."""
    return os.path.join(get_path_resolver().get_data_dir(), DATABASE_FILENAME)


def resolve_setting_dir(configured: Optional[str], fallback: str) -> str:
    """Return the configured directory, or the resolver's ``fallback`` directory when it is blank.

    Relative values are returned unchanged so configuration validation can flag them.
    """
    value = (configured or "").strip()
    if not value:
        return get_path_resolver().resolve(fallback)
    return value
