"""
Tests for concurrency utilities in core.locks.

DistributedLock runs against the mock Redis client installed by the
project-wide ``mock_redis`` fixture.
"""

import pytest

from core.exceptions import ConcurrencyConflictError, NotFoundError
from core.locks import DistributedLock, lock_for_update


class TestDistributedLock:
    """Tests for DistributedLock class."""

    def test_acquire_success(self, mock_redis):
        """Should acquire lock when available."""
        mock_redis.set.return_value = True

        lock = DistributedLock("test:key", ttl=30, blocking=False)
        result = lock.acquire()

        assert result is True
        assert lock.is_held is True
        call_args = mock_redis.set.call_args
        assert call_args[0][0] == "lock:test:key"
        assert call_args[1]["nx"] is True
        assert call_args[1]["ex"] == 30

    def test_acquire_non_blocking_raises_when_held(self, mock_redis):
        """Non-blocking mode should raise a conflict immediately if the lock is held."""
        mock_redis.set.return_value = False

        lock = DistributedLock("test:key", ttl=30, blocking=False)

        with pytest.raises(ConcurrencyConflictError) as exc_info:
            lock.acquire()

        assert exc_info.value.error_code == "LOCK_HELD"
        assert exc_info.value.details["key"] == "lock:test:key"
        assert lock.is_held is False

    def test_acquire_blocking_waits_and_acquires(self, mock_redis):
        """Blocking mode should wait and eventually acquire."""
        mock_redis.set.side_effect = [False, False, True]

        lock = DistributedLock("test:key", ttl=30, blocking=True, timeout=1.0)

        assert lock.acquire() is True
        assert mock_redis.set.call_count == 3

    def test_acquire_blocking_timeout_raises_error(self, mock_redis):
        """Should raise after timeout in blocking mode."""
        mock_redis.set.return_value = False

        lock = DistributedLock("test:key", ttl=30, blocking=True, timeout=0.1)

        with pytest.raises(ConcurrencyConflictError) as exc_info:
            lock.acquire()

        assert exc_info.value.error_code == "LOCK_TIMEOUT"
        assert exc_info.value.details["timeout"] == 0.1

    def test_release_without_acquire_returns_false(self, mock_redis):
        """Should return False if release called without acquire."""
        lock = DistributedLock("test:key", ttl=30, blocking=False)

        assert lock.release() is False
        mock_redis.eval.assert_not_called()

    def test_context_manager_releases_on_exception(self, mock_redis):
        """Should release lock even if exception occurs inside context."""
        mock_redis.set.return_value = True
        mock_redis.eval.return_value = 1

        with pytest.raises(ValueError):
            with DistributedLock("test:key", ttl=30):
                raise ValueError("boom")

        mock_redis.eval.assert_called_once()


@pytest.mark.django_db
class TestLockForUpdate:
    """Tests for lock_for_update helper."""

    def test_returns_locked_instance(self, user):
        """Should return the row when it exists."""
        from django.contrib.auth import get_user_model
        from django.db import transaction

        User = get_user_model()
        with transaction.atomic():
            locked = lock_for_update(User, user.pk)

        assert locked.pk == user.pk

    def test_missing_row_raises_not_found(self):
        """Should raise NotFoundError with a model-specific code."""
        from django.contrib.auth import get_user_model
        from django.db import transaction

        with transaction.atomic():
            with pytest.raises(NotFoundError) as exc_info:
                lock_for_update(get_user_model(), 987654321)

        assert exc_info.value.error_code == "USER_NOT_FOUND"

    def test_database_error_becomes_conflict(self, user, mocker):
        """A busy row (NOWAIT failure) should surface as a concurrency conflict."""
        from django.contrib.auth import get_user_model
        from django.db import OperationalError, transaction

        User = get_user_model()
        queryset = User.objects.all()
        mocker.patch.object(
            type(queryset),
            "select_for_update",
            side_effect=OperationalError("could not obtain lock"),
        )

        with transaction.atomic():
            with pytest.raises(ConcurrencyConflictError):
                lock_for_update(queryset, user.pk)

