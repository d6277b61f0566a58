"""
Wallet service: issuing and expiring store credit.
"""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal
from typing import TYPE_CHECKING

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from core.exceptions import ValidationError
from core.services import BaseService
from wallet.models import StoreCredit, StoreCreditStatus
from wallet.types import CreditReceipt

if TYPE_CHECKING:
    from django.db.models import QuerySet


def _receipt(credit: StoreCredit, created: bool) -> CreditReceipt:
    return CreditReceipt(
        credit_id=credit.id,
        user_id=credit.user_id,
        amount=credit.amount,
        expires_at=credit.expires_at,
        created=created,
    )


class WalletService(BaseService):
    """
    Store credit operations.

    Issuance is idempotent on ``idempotency_key``: a retry returns a
    receipt for the credit issued the first time.
    """

    @classmethod
    def issue_store_credit(
        cls,
        user_id: int,
        amount: Decimal,
        idempotency_key: str,
        reference: str = "",
    ) -> CreditReceipt:
        """
        Credit ``amount`` to the user's wallet.

        Raises:
            ValidationError: If the amount is not positive or the key is missing
        """
        cls.validate_required(user_id=user_id, idempotency_key=idempotency_key)
        amount = Decimal(amount)
        if amount <= 0:
            raise ValidationError(
                "Store credit amount must be positive",
                error_code="INVALID_CREDIT_AMOUNT",
                details={"amount": str(amount)},
            )

        existing = StoreCredit.objects.filter(idempotency_key=idempotency_key).first()
        if existing is not None:
            cls.get_logger().info(
                "Store credit already issued",
                extra={"credit_id": str(existing.id), "idempotency_key": idempotency_key},
            )
            return _receipt(existing, created=False)

        expires_at = timezone.now() + timedelta(days=settings.STORE_CREDIT_VALIDITY_DAYS)
        try:
            with transaction.atomic():
                credit = StoreCredit.objects.create(
                    user_id=user_id,
                    amount=amount,
                    balance=amount,
                    expires_at=expires_at,
                    reference=reference,
                    idempotency_key=idempotency_key,
                )
        except IntegrityError:
            credit = StoreCredit.objects.get(idempotency_key=idempotency_key)
            return _receipt(credit, created=False)

        cls.get_logger().info(
            "Store credit issued",
            extra={
                "credit_id": str(credit.id),
                "user_id": user_id,
                "amount": str(amount),
                "reference": reference,
            },
        )
        return _receipt(credit, created=True)

    @classmethod
    def list_for_user(cls, user_id: int) -> QuerySet[StoreCredit]:
        return StoreCredit.objects.filter(user_id=user_id).order_by("-created_at")

    @classmethod
    def expire_due(cls, now=None) -> int:
        """Mark active credits past their expiry as expired. Returns the count."""
        now = now or timezone.now()
        count = StoreCredit.objects.filter(
            status=StoreCreditStatus.ACTIVE,
            expires_at__lte=now,
        ).update(status=StoreCreditStatus.EXPIRED, updated_at=now)
        if count:
            cls.get_logger().info("Expired store credits", extra={"count": count})
        return count
