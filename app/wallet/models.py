"""
Store credit models.
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import F, Q

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel


class StoreCreditStatus(models.TextChoices):
    ACTIVE = "active", "Active"
    USED = "used", "Used"
    EXPIRED = "expired", "Expired"


class StoreCredit(UUIDPrimaryKeyMixin, BaseModel):
    """
    A store credit instrument held in a user's wallet.

    Fields:
        user: Holder of the credit
        amount: Amount issued
        balance: Amount still available
        status: active, used or expired
        expires_at: When the remaining balance lapses
        reference: Business reference of the issuer (e.g. "return:<id>")
        idempotency_key: Unique key so a retried issuance returns the same credit
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="store_credits",
    )
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    balance = models.DecimalField(max_digits=12, decimal_places=2)
    status = models.CharField(
        max_length=20,
        choices=StoreCreditStatus.choices,
        default=StoreCreditStatus.ACTIVE,
        db_index=True,
    )
    expires_at = models.DateTimeField(db_index=True)
    reference = models.CharField(max_length=100, blank=True, default="")
    idempotency_key = models.CharField(max_length=255, unique=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount__gt=Decimal("0")),
                name="store_credit_amount_positive",
            ),
            models.CheckConstraint(
                condition=Q(balance__gte=Decimal("0")) & Q(balance__lte=F("amount")),
                name="store_credit_balance_within_amount",
            ),
        ]

    def __str__(self) -> str:
        return f"Store credit {self.balance}/{self.amount} ({self.status})"
