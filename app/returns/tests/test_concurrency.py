"""
Tests for serialization of concurrent return operations.

Sequential tests simulate the losing side of a race by making the row lock
or the distributed lock fail. The threaded test needs real row locks and
only runs on PostgreSQL.
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from threading import Barrier

import pytest
from django.db import connection

from core.exceptions import ConcurrencyConflictError
from points.models import PointsLedgerEntry
from returns.exceptions import InvalidTransitionError
from returns.models import Return
from returns.services import ReturnService
from returns.states import ReturnDecision, ReturnStatus
from wallet.models import StoreCredit


@pytest.mark.django_db
class TestSequentialRaces:
    """Two operations on the same return, one after the other."""

    def test_second_decide_loses(self, pending_return, operator):
        """Should let exactly one of two decisions through."""
        ReturnService.decide(pending_return.id, operator, ReturnDecision.APPROVE)

        with pytest.raises(InvalidTransitionError):
            ReturnService.decide(pending_return.id, operator, ReturnDecision.REJECT)

        assert Return.objects.get(pk=pending_return.pk).status == ReturnStatus.APPROVED

    def test_busy_row_is_retried_once(self, pending_return, operator, mocker):
        """Should retry after losing the row lock and succeed the second time."""
        lock = mocker.patch(
            "returns.services.lock_for_update",
            side_effect=[
                ConcurrencyConflictError("Return is being modified"),
                Return.objects.get(pk=pending_return.pk),
            ],
        )

        ret = ReturnService.decide(pending_return.id, operator, ReturnDecision.APPROVE)

        assert ret.status == ReturnStatus.APPROVED
        assert lock.call_count == 2

    def test_busy_row_surfaces_after_retry(self, pending_return, operator, mocker):
        lock = mocker.patch(
            "returns.services.lock_for_update",
            side_effect=ConcurrencyConflictError("Return is being modified"),
        )

        with pytest.raises(ConcurrencyConflictError):
            ReturnService.decide(pending_return.id, operator, ReturnDecision.APPROVE)

        assert lock.call_count == 2
        assert Return.objects.get(pk=pending_return.pk).status == ReturnStatus.PENDING

    def test_finalize_lock_held_elsewhere(self, approved_return, operator, mock_redis):
        """Should not issue anything while another worker holds the finalize lock."""
        mock_redis.set.return_value = False

        with pytest.raises(ConcurrencyConflictError) as exc_info:
            ReturnService.finalize(approved_return.id, operator)

        assert exc_info.value.error_code == "LOCK_HELD"
        assert mock_redis.set.call_count == 2
        assert not StoreCredit.objects.exists()
        assert not PointsLedgerEntry.objects.exists()

    def test_cancel_after_decide(self, pending_return, operator, user):
        ReturnService.decide(pending_return.id, operator, ReturnDecision.REJECT)

        with pytest.raises(InvalidTransitionError):
            ReturnService.cancel(pending_return.id, user)


@pytest.mark.django_db(transaction=True)
@pytest.mark.skipif(
    connection.vendor != "postgresql",
    reason="Row locks need PostgreSQL",
)
class TestThreadedDecide:
    """Concurrent decisions against a real database."""

    def test_exactly_one_decision_wins(self, pending_return, operator):
        barrier = Barrier(2)
        return_id = pending_return.id

        def decide(decision):
            connection.close()  # Force new connection for thread
            barrier.wait()
            try:
                ReturnService.decide(return_id, operator, decision)
                return "ok"
            except (ConcurrencyConflictError, InvalidTransitionError) as exc:
                return exc.__class__.__name__
            finally:
                connection.close()

        with ThreadPoolExecutor(max_workers=2) as executor:
            futures = [
                executor.submit(decide, ReturnDecision.APPROVE),
                executor.submit(decide, ReturnDecision.REJECT),
            ]
            outcomes = [future.result() for future in as_completed(futures)]

        assert outcomes.count("ok") == 1
        ret = Return.objects.get(pk=return_id)
        assert ret.status in (ReturnStatus.APPROVED, ReturnStatus.REJECTED)
        assert ret.history.count() == 2
