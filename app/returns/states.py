"""
State enums for the returns app.

Return States:
    pending → approved → refunded
    pending → rejected
    pending/approved → cancelled

Terminal states: REJECTED, REFUNDED, CANCELLED. No transition leaves them.
"""

from django.db import models


class ReturnStatus(models.TextChoices):
    """
    States for the Return model lifecycle.

    State Flow:
        PENDING → APPROVED → REFUNDED

    Decision Flow:
        PENDING → REJECTED

    Cancellation Flow:
        PENDING → CANCELLED
        APPROVED → CANCELLED
    """

    PENDING = "pending", "Pending"
    APPROVED = "approved", "Approved"
    REJECTED = "rejected", "Rejected"
    REFUNDED = "refunded", "Refunded"
    CANCELLED = "cancelled", "Cancelled"

    @classmethod
    def terminal(cls) -> frozenset:
        return frozenset({cls.REJECTED, cls.REFUNDED, cls.CANCELLED})

    @classmethod
    def claiming(cls) -> frozenset:
        """Statuses in which a return holds its grants."""
        return frozenset({cls.PENDING, cls.APPROVED, cls.REFUNDED})


class RefundMethod(models.TextChoices):
    """How the refund amount is paid out. Policy currently fixes store credit."""

    ORIGINAL_PAYMENT = "original_payment", "Original Payment"
    STORE_CREDIT = "store_credit", "Store Credit"
    BANK_TRANSFER = "bank_transfer", "Bank Transfer"


class ReturnReason(models.TextChoices):
    """Categorized reason picked by the customer alongside the free text."""

    DEFECTIVE = "defective", "Defective"
    WRONG_ITEM = "wrong_item", "Wrong Item"
    NOT_AS_DESCRIBED = "not_as_described", "Not As Described"
    CHANGED_MIND = "changed_mind", "Changed Mind"
    BETTER_PRICE = "better_price", "Better Price"
    LICENSE_NOT_WORKING = "license_not_working", "License Not Working"
    OTHER = "other", "Other"


class ReturnDecision(models.TextChoices):
    """Operator decision on a pending return."""

    APPROVE = "approve", "Approve"
    REJECT = "reject", "Reject"
