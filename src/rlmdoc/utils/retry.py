"""Retry utilities for transient file-system failures."""

import errno
import functools
import logging
import time
from collections.abc import Callable
from typing import ParamSpec, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
P = ParamSpec("P")

# Failures that retrying cannot fix
PERMANENT_OS_ERRORS = (FileNotFoundError, IsADirectoryError, NotADirectoryError, PermissionError)
PERMANENT_ERRNOS = {errno.ENOSPC, errno.EROFS, errno.ENAMETOOLONG, errno.EINVAL}


def is_transient_io_error(error: BaseException) -> bool:
    """Check if an error is a transient OSError that is safe to retry."""
    if not isinstance(error, OSError) or isinstance(error, PERMANENT_OS_ERRORS):
        return False
    return error.errno not in PERMANENT_ERRNOS


def retry_call(
    func: Callable[[], T],
    *,
    attempts: int = 3,
    delay: float = 0.1,
    backoff: float = 2.0,
    max_delay: float = 5.0,
    should_retry: Callable[[BaseException], bool] = is_transient_io_error,
    description: str = "operation",
) -> T:
    """Call ``func`` until it succeeds or ``attempts`` calls have failed.

    Args:
        func: Zero-argument callable to run
        attempts: Total number of calls, the first included
        delay: Initial delay between attempts in seconds
        backoff: Backoff multiplier for exponential backoff
        max_delay: Maximum delay between attempts
        should_retry: Predicate selecting the exceptions worth retrying
        description: What is being attempted, for log messages

    Returns:
        The value returned by ``func``

    Raises:
        The last exception, once attempts are exhausted or it is not retryable
    """
    current_delay = delay
    for attempt in range(1, attempts + 1):
        try:
            return func()
        except Exception as e:
            if not should_retry(e) or attempt == attempts:
                raise
            logger.warning(
                "Retryable error during %s (attempt %d/%d): %s",
                description,
                attempt,
                attempts,
                e,
            )
            time.sleep(current_delay)
            current_delay = min(current_delay * backoff, max_delay)

    raise RuntimeError("Unexpected retry loop exit")


def with_retry(
    attempts: int = 3,
    delay: float = 0.1,
    backoff: float = 2.0,
    max_delay: float = 5.0,
    should_retry: Callable[[BaseException], bool] = is_transient_io_error,
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """Decorator form of ``retry_call``."""

    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        @functools.wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            return retry_call(
                lambda: func(*args, **kwargs),
                attempts=attempts,
                delay=delay,
                backoff=backoff,
                max_delay=max_delay,
                should_retry=should_retry,
                description=func.__name__,
            )

        return wrapper

    return decorator
