"""
Database Service Package

Exposes the primary `DatabaseService` class for convenience imports.
"""

from .database_service import DatabaseService


__all__ = ['DatabaseService']
