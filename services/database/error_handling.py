import sqlite3
import logging
import time
from functools import wraps
from typing import Any, Callable

LOCKED_MESSAGES = ("database is locked", "database table is locked")


def is_lock_error(error: sqlite3.OperationalError) -> bool:
    message = str(error).lower()
    return any(text in message for text in LOCKED_MESSAGES)


class DatabaseErrorHandler:
    """Retry policy for job store writes that collide with another writer."""

    def __init__(self):
        self.logger = logging.getLogger("DatabaseService.ErrorHandling")

    def with_retry(self, max_retries: int = 3, retry_delay: float = 0.5):
        """Retry the wrapped call on lock errors with linear backoff; anything else propagates."""
        def decorator(func: Callable) -> Callable:
            @wraps(func)
            def wrapper(*args, **kwargs) -> Any:
                attempt = 1
                while True:
                    try:
                        return func(*args, **kwargs)
                    except sqlite3.OperationalError as e:
                        if not is_lock_error(e):
                            self.logger.error(f"{func.__qualname__} failed: {e}")
                            raise
                        if attempt >= max_retries:
                            self.logger.error(
                                f"{func.__qualname__}: database still locked after {max_retries} attempts"
                            )
                            raise
                        delay = retry_delay * attempt
                        self.logger.warning(
                            f"{func.__qualname__}: database locked, retrying in {delay}s (attempt {attempt})"
                        )
                        time.sleep(delay)
                        attempt += 1
            return wrapper
        return decorator


# Global instance for easy access
error_handler = DatabaseErrorHandler()
