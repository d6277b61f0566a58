"""
Default collaborators for the returns engine.

Adapters:
    WalletCreditIssuer: Issues store credit through wallet.services.WalletService
    EmailNotificationDispatcher: Emails the customer through Django's mail framework

The active instances are module-level and can be swapped with
set_credit_issuer() / set_notification_dispatcher().
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import TYPE_CHECKING

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.mail import send_mail
from django.db import DatabaseError

from core.exceptions import BaseApplicationError, ExternalServiceError
from wallet.services import WalletService

if TYPE_CHECKING:
    from typing import Any

    from returns.protocols import NotificationDispatcher, StoreCreditIssuer
    from wallet.types import CreditReceipt

logger = logging.getLogger(__name__)


EVENT_SUBJECTS = {
    "return_approved": "Your return has been approved",
    "return_rejected": "Your return has been rejected",
    "return_refunded": "Your refund has been issued",
    "return_cancelled": "Your return has been cancelled",
}


class WalletCreditIssuer:
    """Store credit issuer backed by the wallet app."""

    def issue_store_credit(
        self,
        user_id: int,
        amount: Decimal,
        idempotency_key: str,
        reference: str = "",
    ) -> CreditReceipt:
        try:
            return WalletService.issue_store_credit(
                user_id=user_id,
                amount=amount,
                idempotency_key=idempotency_key,
                reference=reference,
            )
        except (BaseApplicationError, DatabaseError) as exc:
            logger.error(
                "Store credit issuance failed",
                extra={
                    "user_id": user_id,
                    "amount": str(amount),
                    "idempotency_key": idempotency_key,
                    "error": str(exc),
                },
            )
            raise ExternalServiceError(
                "Store credit could not be issued",
                error_code="CREDIT_ISSUANCE_FAILED",
                details={"idempotency_key": idempotency_key},
            ) from exc


class EmailNotificationDispatcher:
    """Sends a plain-text email to the user's address."""

    def notify(self, user_id: int, event: str, payload: dict[str, Any]) -> bool:
        user = get_user_model().objects.filter(pk=user_id).first()
        if user is None or not user.email:
            logger.warning(
                "Notification skipped: no recipient",
                extra={"user_id": user_id, "event": event},
            )
            return False

        subject = EVENT_SUBJECTS.get(event, "Update on your return")
        lines = [f"Return {payload.get('return_id')} is now {payload.get('status')}."]
        if payload.get("admin_notes"):
            lines.append(f"Notes: {payload['admin_notes']}")
        if payload.get("credit_reference"):
            lines.append(
                f"Store credit of {payload.get('refund_amount')} issued "
                f"({payload['credit_reference']})."
            )
        if payload.get("points_refunded"):
            lines.append(f"{payload['points_refunded']} points returned to your balance.")

        sent = send_mail(
            subject,
            "\n".join(lines),
            settings.DEFAULT_FROM_EMAIL,
            [user.email],
        )
        return bool(sent)


_credit_issuer: StoreCreditIssuer = WalletCreditIssuer()
_notification_dispatcher: NotificationDispatcher = EmailNotificationDispatcher()


def get_credit_issuer() -> StoreCreditIssuer:
    return _credit_issuer


def set_credit_issuer(issuer: StoreCreditIssuer) -> None:
    global _credit_issuer
    _credit_issuer = issuer


def get_notification_dispatcher() -> NotificationDispatcher:
    return _notification_dispatcher


def set_notification_dispatcher(dispatcher: NotificationDispatcher) -> None:
    global _notification_dispatcher
    _notification_dispatcher = dispatcher
