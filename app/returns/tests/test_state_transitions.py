"""
Tests for Return state machine transitions using django-fsm.

Exercises the model transitions directly; service-level behaviour
(history, grant release, ledger writes) is covered in test_services.py.
"""

import pytest
from django_fsm import TransitionNotAllowed

from returns.models import Return
from returns.states import ReturnStatus
from returns.tests.factories import ReturnFactory

TERMINAL = [ReturnStatus.REJECTED, ReturnStatus.REFUNDED, ReturnStatus.CANCELLED]


@pytest.mark.django_db
class TestReturnTransitions:
    """Tests for Return state machine transitions."""

    # -------------------------------------------------------------------------
    # Valid Transitions
    # -------------------------------------------------------------------------

    def test_pending_to_approved(self, operator):
        """Should approve and record who decided."""
        ret = ReturnFactory()

        ret.approve(operator=operator, notes="Looks right")
        ret.save()

        assert ret.status == ReturnStatus.APPROVED
        assert ret.processed_by == operator
        assert ret.processed_at is not None
        assert ret.admin_notes == "Looks right"

    def test_pending_to_rejected(self, operator):
        """Should reject and set processed_at."""
        ret = ReturnFactory()

        ret.reject(operator=operator)
        ret.save()

        assert ret.status == ReturnStatus.REJECTED
        assert ret.processed_at is not None

    def test_approved_to_refunded(self):
        """Should record the credit reference and points."""
        ret = ReturnFactory(status=ReturnStatus.APPROVED)

        ret.mark_refunded(credit_reference="store_credit:abc", points_refunded=1900)
        ret.save()

        assert ret.status == ReturnStatus.REFUNDED
        assert ret.credit_reference == "store_credit:abc"
        assert ret.points_refunded == 1900
        assert ret.refunded_at is not None

    @pytest.mark.parametrize("source", [ReturnStatus.PENDING, ReturnStatus.APPROVED])
    def test_cancel_from_open_states(self, source):
        """Should cancel pending and approved returns."""
        ret = ReturnFactory(status=source)

        ret.cancel()
        ret.save()

        assert ret.status == ReturnStatus.CANCELLED
        assert ret.processed_at is not None

    # -------------------------------------------------------------------------
    # Invalid Transitions
    # -------------------------------------------------------------------------

    def test_pending_cannot_be_refunded(self):
        """Should require approval before a refund."""
        ret = ReturnFactory()

        with pytest.raises(TransitionNotAllowed):
            ret.mark_refunded(credit_reference="", points_refunded=0)

    def test_approved_cannot_be_decided_again(self, operator):
        ret = ReturnFactory(status=ReturnStatus.APPROVED)

        with pytest.raises(TransitionNotAllowed):
            ret.reject(operator=operator)

    @pytest.mark.parametrize("terminal", TERMINAL)
    def test_terminal_states_allow_nothing(self, terminal, operator):
        """Should reject every transition out of a terminal status."""
        ret = ReturnFactory(status=terminal)

        for transition in (
            lambda: ret.approve(operator=operator),
            lambda: ret.reject(operator=operator),
            lambda: ret.mark_refunded(credit_reference="", points_refunded=0),
            ret.cancel,
        ):
            with pytest.raises(TransitionNotAllowed):
                transition()

        assert Return.objects.get(pk=ret.pk).status == terminal

    # -------------------------------------------------------------------------
    # Field protection and versioning
    # -------------------------------------------------------------------------

    def test_status_cannot_be_assigned_directly(self):
        """Should only change status through transitions."""
        ret = ReturnFactory()

        with pytest.raises(AttributeError):
            ret.status = ReturnStatus.REFUNDED

    def test_version_increments_on_save(self, operator):
        ret = ReturnFactory()
        assert ret.version == 1

        ret.approve(operator=operator)
        ret.save()

        assert ret.version == 2

    def test_is_terminal(self):
        assert ReturnFactory(status=ReturnStatus.REFUNDED).is_terminal is True
        assert ReturnFactory(status=ReturnStatus.APPROVED).is_terminal is False
