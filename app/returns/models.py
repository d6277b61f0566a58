"""
Return models.

Models:
    Return: A customer's request to return some of an order's license keys
    ReturnItem: One license key grant claimed by a return
    ReturnStatusHistory: Audit trail of status changes

State machine (django-fsm, protected field):
    pending → approved → refunded
    pending → rejected
    pending/approved → cancelled

Grant claims:
    A ReturnItem claims its grant while ``claim_active`` is True. A partial
    unique constraint allows at most one active claim per grant, so the same
    license key can never be refunded twice. Rejecting or cancelling a return
    clears ``claim_active`` on its items in the same transaction.
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone
from django_fsm import FSMField, transition

from core.model_mixins import UUIDPrimaryKeyMixin, VersionedMixin
from core.models import BaseModel
from returns.states import RefundMethod, ReturnReason, ReturnStatus


class Return(UUIDPrimaryKeyMixin, VersionedMixin, BaseModel):
    """
    A return request against a completed order.

    Fields:
        order: Order the returned grants were sold under
        user: Customer who requested the return
        status: Current lifecycle state (django-fsm, protected)
        reason_code: Categorized reason
        reason: Free-text reason (required)
        customer_notes: Optional extra notes from the customer
        refund_amount: Sum of the returned grants' unit prices, fixed at request time
        points_to_refund: Points refund computed at request time (advisory)
        points_refunded: Points actually credited by finalize
        refund_method: Payout method (store credit by policy)
        admin_notes: Operator notes from the decision
        processed_by: Operator who decided the return
        processed_at: When the return was decided or cancelled
        refunded_at: When credit and points were issued
        credit_reference: Receipt reference of the issued store credit
        version: Optimistic locking version (from VersionedMixin)
    """

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.PROTECT,
        related_name="returns",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="returns",
    )
    status = FSMField(
        default=ReturnStatus.PENDING,
        choices=ReturnStatus.choices,
        protected=True,
        db_index=True,
        help_text="Current return status",
    )
    reason_code = models.CharField(
        max_length=30,
        choices=ReturnReason.choices,
        default=ReturnReason.OTHER,
    )
    reason = models.TextField(help_text="Customer's explanation")
    customer_notes = models.TextField(blank=True, default="")

    refund_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0"),
        help_text="Authoritative monetary refund",
    )
    points_to_refund = models.PositiveIntegerField(
        default=0,
        help_text="Points refund computed when the return was requested",
    )
    points_refunded = models.PositiveIntegerField(
        default=0,
        help_text="Points credited when the return was finalized",
    )
    refund_method = models.CharField(
        max_length=30,
        choices=RefundMethod.choices,
        default=RefundMethod.STORE_CREDIT,
    )

    admin_notes = models.TextField(blank=True, default="")
    processed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="processed_returns",
    )
    processed_at = models.DateTimeField(null=True, blank=True)
    refunded_at = models.DateTimeField(null=True, blank=True)
    credit_reference = models.CharField(max_length=100, blank=True, default="")

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "-created_at"], name="returns_ret_user_id_a3c9e2_idx"),
            models.Index(fields=["status", "-created_at"], name="returns_ret_status_7f41b0_idx"),
        ]

    def __str__(self) -> str:
        return f"Return {self.pk} ({self.status})"

    # ==========================================================================
    # State Transitions (django-fsm)
    # ==========================================================================

    @transition(
        field=status,
        source=ReturnStatus.PENDING,
        target=ReturnStatus.APPROVED,
    )
    def approve(self, operator=None, notes: str = ""):
        """
        Approve the return. No money moves until finalize.

        Transition: PENDING -> APPROVED
        """
        self.processed_by = operator
        self.processed_at = timezone.now()
        if notes:
            self.admin_notes = notes

    @transition(
        field=status,
        source=ReturnStatus.PENDING,
        target=ReturnStatus.REJECTED,
    )
    def reject(self, operator=None, notes: str = ""):
        """
        Reject the return.

        Transition: PENDING -> REJECTED
        """
        self.processed_by = operator
        self.processed_at = timezone.now()
        if notes:
            self.admin_notes = notes

    @transition(
        field=status,
        source=ReturnStatus.APPROVED,
        target=ReturnStatus.REFUNDED,
    )
    def mark_refunded(self, credit_reference: str, points_refunded: int):
        """
        Record that credit and points were issued.

        Transition: APPROVED -> REFUNDED
        """
        self.credit_reference = credit_reference
        self.points_refunded = points_refunded
        self.refunded_at = timezone.now()

    @transition(
        field=status,
        source=[ReturnStatus.PENDING, ReturnStatus.APPROVED],
        target=ReturnStatus.CANCELLED,
    )
    def cancel(self):
        """
        Cancel the return.

        Transition: PENDING/APPROVED -> CANCELLED
        """
        if self.processed_at is None:
            self.processed_at = timezone.now()

    # ==========================================================================
    # Properties
    # ==========================================================================

    @property
    def is_terminal(self) -> bool:
        return self.status in ReturnStatus.terminal()


class ReturnItem(models.Model):
    """
    A license key grant claimed by a return.

    Fields:
        return_request: Owning return
        order_item: Line item the grant was sold under
        grant: The returned license key
        unit_price: Price of the grant at time of sale
        reason: Optional per-item reason
        claim_active: Whether this item currently holds its grant
    """

    return_request = models.ForeignKey(
        Return,
        on_delete=models.CASCADE,
        related_name="items",
    )
    order_item = models.ForeignKey(
        "orders.OrderItem",
        on_delete=models.PROTECT,
        related_name="return_items",
    )
    grant = models.ForeignKey(
        "orders.LicenseKeyGrant",
        on_delete=models.PROTECT,
        related_name="return_items",
    )
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    reason = models.TextField(blank=True, default="")
    claim_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["id"]
        constraints = [
            models.UniqueConstraint(
                fields=["grant"],
                condition=Q(claim_active=True),
                name="unique_active_grant_claim",
            ),
        ]

    def __str__(self) -> str:
        return f"Return item {self.pk} (grant {self.grant_id})"


class ReturnStatusHistory(models.Model):
    """
    One status change of a return. Written in the same transaction as the change.

    ``old_status`` is empty for the creation row.
    """

    return_request = models.ForeignKey(
        Return,
        on_delete=models.CASCADE,
        related_name="history",
    )
    old_status = models.CharField(max_length=20, blank=True, default="")
    new_status = models.CharField(max_length=20, choices=ReturnStatus.choices)
    changed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    notes = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]
        verbose_name_plural = "return status history"

    def __str__(self) -> str:
        return f"{self.old_status or '-'} -> {self.new_status}"
