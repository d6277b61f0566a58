"""
Concurrency control utilities.

Two complementary mechanisms:

1. **Distributed Locks** (DistributedLock)
   - Redis-based mutual exclusion across processes/servers
   - TTL prevents deadlocks from crashed processes
   - Use for: operations that call external collaborators

2. **Row Locks** (lock_for_update)
   - SELECT ... FOR UPDATE NOWAIT inside the caller's transaction
   - A busy row surfaces as ConcurrencyConflictError instead of blocking

Usage:

    with DistributedLock(f"return:{return_id}:finalize", ttl=30):
        with transaction.atomic():
            ret = lock_for_update(Return, return_id)
            ...
"""

from __future__ import annotations

import time
import uuid as uuid_module
from typing import TYPE_CHECKING, TypeVar

from django.db import DatabaseError, models
from django_redis import get_redis_connection

from core.exceptions import ConcurrencyConflictError, NotFoundError

if TYPE_CHECKING:
    from typing import Any

    from redis import Redis

T = TypeVar("T", bound=models.Model)


# =============================================================================
# Distributed Locks
# =============================================================================


class DistributedLock:
    """
    Redis-based distributed lock with TTL.

    Features:
        - Automatic TTL prevents deadlocks from crashed processes
        - Token-based ownership prevents accidental release by other processes
        - Blocking and non-blocking acquisition modes
        - Context manager support

    Args:
        key: Lock identifier (will be prefixed with "lock:")
        ttl: Lock TTL in seconds (auto-releases after this time)
        blocking: If True, acquire() waits until lock is available
        timeout: Maximum wait time in seconds (only if blocking=True)

    Raises:
        ConcurrencyConflictError: From acquire() when the lock is held elsewhere.
    """

    RELEASE_SCRIPT = """
    if redis.call("get", KEYS[1]) == ARGV[1] then
        return redis.call("del", KEYS[1])
    else
        return 0
    end
    """

    def __init__(
        self,
        key: str,
        ttl: int = 30,
        blocking: bool = True,
        timeout: float = 5.0,
    ) -> None:
        self.key = f"lock:{key}"
        self.ttl = ttl
        self.blocking = blocking
        self.timeout = timeout
        self._token: str | None = None
        self._redis: Redis | None = None

    def _get_redis(self) -> Redis:
        if self._redis is None:
            self._redis = get_redis_connection("default")
        return self._redis

    def acquire(self) -> bool:
        self._token = str(uuid_module.uuid4())
        redis = self._get_redis()

        if self.blocking:
            end_time = time.time() + self.timeout
            while time.time() < end_time:
                if self._try_acquire(redis):
                    return True
                time.sleep(0.05)

            self._token = None
            raise ConcurrencyConflictError(
                f"Failed to acquire lock '{self.key}' within {self.timeout}s",
                error_code="LOCK_TIMEOUT",
                details={"key": self.key, "timeout": self.timeout},
            )

        if not self._try_acquire(redis):
            self._token = None
            raise ConcurrencyConflictError(
                f"Lock '{self.key}' is already held",
                error_code="LOCK_HELD",
                details={"key": self.key},
            )
        return True

    def _try_acquire(self, redis: Redis) -> bool:
        return bool(redis.set(self.key, self._token, nx=True, ex=self.ttl))

    def release(self) -> bool:
        """
        Release the lock if we hold it.

        Safe to call multiple times. Uses an atomic Lua script so we only
        delete the key while it still carries our token.
        """
        if self._token is None:
            return False

        redis = self._get_redis()
        result = redis.eval(self.RELEASE_SCRIPT, 1, self.key, self._token)
        self._token = None
        return bool(result)

    @property
    def is_held(self) -> bool:
        return self._token is not None

    def __enter__(self) -> DistributedLock:
        self.acquire()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> bool:
        self.release()
        return False


# =============================================================================
# Row Locks
# =============================================================================


def lock_for_update(
    queryset_or_model: type[T] | models.QuerySet,
    pk: Any,
    nowait: bool = True,
) -> T:
    """
    Lock a single row for the rest of the current transaction.

    Args:
        queryset_or_model: Model class, or a queryset to narrow the lookup
        pk: Primary key of the row
        nowait: Fail fast instead of waiting behind another writer

    Raises:
        NotFoundError: If the row doesn't exist (or is filtered out)
        ConcurrencyConflictError: If another transaction holds the row

    Note:
        Must be called inside transaction.atomic().
    """
    if isinstance(queryset_or_model, models.QuerySet):
        queryset = queryset_or_model
    else:
        queryset = queryset_or_model.objects.all()
    model_name = queryset.model.__name__

    try:
        instance = queryset.select_for_update(nowait=nowait).filter(pk=pk).first()
    except DatabaseError as exc:
        raise ConcurrencyConflictError(
            f"{model_name} {pk} is being modified by another request",
            details={"pk": str(pk)},
        ) from exc

    if instance is None:
        raise NotFoundError(
            f"{model_name} {pk} not found",
            error_code=f"{model_name.upper()}_NOT_FOUND",
            details={"pk": str(pk)},
        )
    return instance


__all__ = [
    "DistributedLock",
    "lock_for_update",
]
