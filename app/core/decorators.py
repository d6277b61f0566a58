"""
Custom decorators for service entry points.

Usage:
    from core.decorators import retry_on_conflict

    class ReturnService(BaseService):
        @classmethod
        @retry_on_conflict()
        def decide(cls, ...):
            ...
"""

from __future__ import annotations

import functools
import logging
import time
from typing import Callable

from core.exceptions import ConcurrencyConflictError

logger = logging.getLogger(__name__)


def retry_on_conflict(retries: int = 1, delay: float = 0.05):
    """
    Retry a call that lost a race with another writer.

    The wrapped function is re-invoked up to ``retries`` more times when it
    raises ConcurrencyConflictError. The last error is re-raised.

    Args:
        retries: Number of additional attempts (default: one)
        delay: Seconds to wait between attempts

    Note:
        The wrapped call must open its own transaction, so that the retry
        starts from a clean read of the locked rows.
    """

    def decorator(func: Callable):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            attempt = 0
            while True:
                try:
                    return func(*args, **kwargs)
                except ConcurrencyConflictError as exc:
                    if attempt >= retries:
                        logger.warning(
                            f"Giving up on {func.__qualname__} after conflict",
                            extra={"attempts": attempt + 1, "error_code": exc.error_code},
                        )
                        raise
                    attempt += 1
                    logger.info(
                        f"Retrying {func.__qualname__} after conflict",
                        extra={"attempt": attempt, "error_code": exc.error_code},
                    )
                    time.sleep(delay)

        return wrapper

    return decorator
