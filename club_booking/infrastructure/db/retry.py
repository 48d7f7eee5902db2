"""
Database retry utilities for handling transient failures.

Provides helpers for retrying storage operations that fail due to deadlocks
or lock wait timeouts.
"""

import asyncio
import logging
from functools import wraps
from typing import Awaitable, Callable, TypeVar

from sqlalchemy.exc import DBAPIError, OperationalError

logger = logging.getLogger(__name__)

T = TypeVar('T')

# MySQL error codes
MYSQL_DEADLOCK_ERROR = "1213"
MYSQL_LOCK_WAIT_TIMEOUT = "1205"
# SQLite busy error text
SQLITE_LOCKED = "database is locked"


def is_deadlock_error(error: Exception) -> bool:
    """
    Check if an exception is a deadlock or lock wait error.

    Args:
        error: The exception to check

    Returns:
        True if the error is transient and the unit of work should be retried
    """
    if isinstance(error, (OperationalError, DBAPIError)):
        error_str = str(error)
        return (
            MYSQL_DEADLOCK_ERROR in error_str
            or MYSQL_LOCK_WAIT_TIMEOUT in error_str
            or SQLITE_LOCKED in error_str
        )
    return False


async def _retry(
    func: Callable[[], Awaitable[T]],
    should_retry: Callable[[Exception], bool],
    max_attempts: int,
    base_delay: float,
) -> T:
    for attempt in range(max_attempts):
        try:
            return await func()
        except Exception as e:
            if not should_retry(e):
                raise

            if attempt < max_attempts - 1:
                delay = base_delay * (2 ** attempt)
                logger.warning(
                    "Transient storage conflict detected, retrying",
                    extra={
                        "attempt": attempt + 1,
                        "max_attempts": max_attempts,
                        "retry_delay": delay,
                        "error": str(e),
                    }
                )
                await asyncio.sleep(delay)
            else:
                logger.error(
                    "Storage conflict persists after max retries",
                    extra={
                        "attempts": max_attempts,
                        "error": str(e),
                    }
                )
                raise

    raise RuntimeError("Unexpected state in retry loop")


async def retry_on_deadlock(
    func: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    base_delay: float = 0.1,
) -> T:
    """
    Retry a function if it fails due to a database deadlock.

    Uses exponential backoff: base_delay * (2 ** attempt)

    Args:
        func: The async function to execute
        max_attempts: Maximum number of attempts (default: 3)
        base_delay: Base delay in seconds for exponential backoff (default: 0.1)

    Returns:
        The result of the function call

    Raises:
        The original exception if max attempts exceeded or non-deadlock error
    """
    return await _retry(func, is_deadlock_error, max_attempts, base_delay)


def with_deadlock_retry(max_attempts: int = 3, base_delay: float = 0.1):
    """
    Decorator to automatically retry async functions on database deadlocks.

    Example:
        @with_deadlock_retry(max_attempts=3)
        async def run_sweep():
            ...
    """
    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            async def execute():
                return await func(*args, **kwargs)

            return await retry_on_deadlock(execute, max_attempts, base_delay)

        return wrapper
    return decorator
