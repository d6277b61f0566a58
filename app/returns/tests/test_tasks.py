"""
Tests for returns Celery tasks.
"""

import uuid

import pytest
from django.core import mail

from returns.adapters import EmailNotificationDispatcher
from returns.tasks import send_return_notification


@pytest.mark.django_db
class TestSendReturnNotification:
    """Tests for send_return_notification task."""

    def test_dispatches_payload(self, approved_return, mock_dispatcher):
        result = send_return_notification(str(approved_return.id), "return_approved")

        assert result is True
        user_id, event, payload = mock_dispatcher.notify.call_args[0]
        assert user_id == approved_return.user_id
        assert event == "return_approved"
        assert payload["return_id"] == str(approved_return.id)
        assert payload["refund_amount"] == "20000.00"
        assert payload["admin_notes"] == "Verified with the vendor"

    def test_missing_return_is_skipped(self, mock_dispatcher):
        result = send_return_notification(str(uuid.uuid4()), "return_approved")

        assert result is False
        mock_dispatcher.notify.assert_not_called()


@pytest.mark.django_db
class TestEmailNotificationDispatcher:
    """Tests for the default email transport."""

    def test_sends_email(self, user):
        sent = EmailNotificationDispatcher().notify(
            user.id,
            "return_rejected",
            {"return_id": "abc", "status": "rejected", "admin_notes": "Key was used"},
        )

        assert sent is True
        assert mail.outbox[0].subject == "Your return has been rejected"
        assert "Key was used" in mail.outbox[0].body

    def test_unknown_user_is_skipped(self):
        sent = EmailNotificationDispatcher().notify(987654321, "return_approved", {})

        assert sent is False
        assert mail.outbox == []
