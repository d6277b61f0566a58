"""
Tests for core.decorators.retry_on_conflict.
"""

import pytest

from core.decorators import retry_on_conflict
from core.exceptions import ConcurrencyConflictError, ConflictError


class TestRetryOnConflict:
    """A lost race is retried exactly once by default."""

    def test_returns_result_without_retry(self):
        """Should call the function once when it succeeds."""
        calls = []

        @retry_on_conflict(delay=0)
        def operation():
            calls.append(1)
            return "ok"

        assert operation() == "ok"
        assert len(calls) == 1

    def test_retries_once_then_succeeds(self):
        """Should succeed on the second attempt after one conflict."""
        calls = []

        @retry_on_conflict(delay=0)
        def operation():
            calls.append(1)
            if len(calls) == 1:
                raise ConcurrencyConflictError("row busy")
            return "ok"

        assert operation() == "ok"
        assert len(calls) == 2

    def test_reraises_after_single_retry(self):
        """Should surface the conflict when the retry also loses."""
        calls = []

        @retry_on_conflict(delay=0)
        def operation():
            calls.append(1)
            raise ConcurrencyConflictError("row busy")

        with pytest.raises(ConcurrencyConflictError):
            operation()
        assert len(calls) == 2

    def test_other_conflicts_are_not_retried(self):
        """Should not retry plain ConflictError (e.g. invalid transition)."""
        calls = []

        @retry_on_conflict(delay=0)
        def operation():
            calls.append(1)
            raise ConflictError("already processed")

        with pytest.raises(ConflictError):
            operation()
        assert len(calls) == 1
