"""
Points ledger models.

- PointsAccount: One row per user, used only as the lock anchor that
  serializes appends for that user. It holds no balance.
- PointsLedgerEntry: Immutable, signed point movement.

Usage:
    from points.models import PointsLedgerEntry, EntryType

    PointsLedgerEntry.objects.filter(user=user).aggregate(Sum("amount"))
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.db.models import Q

from core.model_mixins import UUIDPrimaryKeyMixin


class EntryType(models.TextChoices):
    """
    Types of points ledger entries.

    Values:
        EARNED: Points awarded for a purchase
        SPENT: Points redeemed against an order (negative amount)
        REFUND: Points given back for a returned purchase
        ADJUSTMENT: Manual correction by an operator (either sign)
    """

    EARNED = "earned", "Earned"
    SPENT = "spent", "Spent"
    REFUND = "refund", "Refund"
    ADJUSTMENT = "adjustment", "Adjustment"


class PointsAccount(models.Model):
    """
    Per-user lock anchor for the points ledger.

    Appends lock this row with select_for_update before recomputing the
    balance, so two concurrent spends for the same user cannot both pass
    the sufficiency check.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="points_account",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"Points account of {self.user_id}"


class PointsLedgerEntry(UUIDPrimaryKeyMixin, models.Model):
    """
    A signed movement of loyalty points.

    Entries are immutable once created; corrections are made with new
    ``adjustment`` entries.

    Fields:
        user: Owner of the points
        amount: Signed points (positive = credit, negative = debit)
        entry_type: earned, spent, refund or adjustment
        description: Human-readable description
        order: Optional correlated order
        return_id: Optional correlated return
        created_by: Identifier of the service/operator that wrote the entry
        idempotency_key: Unique key to prevent duplicate entries

    Constraints:
        - amount must be non-zero
        - spent entries are negative; earned and refund entries are positive
        - idempotency_key must be unique
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="points_entries",
    )
    amount = models.IntegerField(
        help_text="Signed points (positive = credit, negative = debit)",
    )
    entry_type = models.CharField(
        max_length=20,
        choices=EntryType.choices,
        help_text="Category of this entry",
    )
    description = models.CharField(max_length=255, blank=True, default="")
    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="points_entries",
    )
    return_id = models.UUIDField(
        null=True,
        blank=True,
        db_index=True,
        help_text="Return this entry was written for, if any",
    )
    created_by = models.CharField(max_length=255, blank=True, default="")
    idempotency_key = models.CharField(
        max_length=255,
        unique=True,
        help_text="Unique key to prevent duplicate entries",
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        db_index=True,
        help_text="Timestamp when this entry was recorded",
    )

    class Meta:
        ordering = ["-created_at"]
        verbose_name_plural = "points ledger entries"
        indexes = [
            models.Index(fields=["user", "-created_at"], name="points_poin_user_id_8c1f3a_idx"),
            models.Index(fields=["entry_type"], name="points_poin_entry_t_4d2e9b_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=~Q(amount=0),
                name="points_entry_amount_non_zero",
            ),
            models.CheckConstraint(
                condition=~Q(entry_type="spent") | Q(amount__lt=0),
                name="points_entry_spent_negative",
            ),
            models.CheckConstraint(
                condition=~Q(entry_type__in=["earned", "refund"]) | Q(amount__gt=0),
                name="points_entry_credit_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.get_entry_type_display()}: {self.amount:+d} points"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Points ledger entries are immutable")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("Points ledger entries cannot be deleted")
