"""
Module Name: __init__.py
Description:
    Shared utility exports for application logging and helpers used across the
    codebase.

Location:
    /utils/__init__.py

"""

from .logger import get_logger, get_module_logger, setup_logger

__all__ = ["setup_logger", "get_logger", "get_module_logger"]
