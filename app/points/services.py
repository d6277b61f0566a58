"""
Points ledger service.

All points writes go through PointsLedgerService to get:
- Idempotency via unique keys (safe to retry)
- Balance validation before debits, under a per-user row lock
- An audit log line for every append

Usage:
    from points.services import PointsLedgerService

    balance = PointsLedgerService.get_balance(user.id)
    PointsLedgerService.adjust(user.id, -50, reason="Duplicate award", operator=op)
"""

from __future__ import annotations

import uuid
from decimal import Decimal
from typing import TYPE_CHECKING

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import Count, F, Q, Sum
from django.db.models.functions import Coalesce

from core.exceptions import ConflictError, NotFoundError, ValidationError
from core.services import BaseService
from points.exceptions import InsufficientBalanceError
from points.models import EntryType, PointsAccount, PointsLedgerEntry
from points.types import AppendEntryParams, PointsBalance

if TYPE_CHECKING:
    from django.db.models import QuerySet


# Sign each entry type must carry; adjustments may go either way.
_REQUIRED_SIGN = {
    EntryType.EARNED: 1,
    EntryType.REFUND: 1,
    EntryType.SPENT: -1,
}

USER_SORT_FIELDS = ("balance", "total_earned", "total_spent")


def _balance_aggregates(prefix: str = "") -> dict:
    amount = f"{prefix}amount"
    entry_type = f"{prefix}entry_type"
    return {
        "balance": Coalesce(Sum(amount), 0),
        "total_earned": Coalesce(Sum(amount, filter=Q(**{f"{amount}__gt": 0})), 0),
        "spent_sum": Coalesce(Sum(amount, filter=Q(**{entry_type: EntryType.SPENT})), 0),
    }


class PointsLedgerService(BaseService):
    """
    Service class for the points ledger.

    All methods are classmethods - no instance state is maintained.
    """

    @classmethod
    def pesos_per_point(cls) -> int:
        return settings.POINTS_PESOS_PER_POINT

    @classmethod
    def get_balance(cls, user_id: int) -> PointsBalance:
        """
        Recompute a user's balance from the full entry set.

        There is no stored balance to drift from the ledger.
        """
        totals = PointsLedgerEntry.objects.filter(user_id=user_id).aggregate(
            **_balance_aggregates()
        )
        return PointsBalance(
            balance=totals["balance"],
            total_earned=totals["total_earned"],
            total_spent=-totals["spent_sum"],
        )

    @classmethod
    def get_entries(cls, user_id: int) -> QuerySet[PointsLedgerEntry]:
        """A user's entries, newest first."""
        return PointsLedgerEntry.objects.filter(user_id=user_id).order_by("-created_at")

    @classmethod
    def _lock_account(cls, user_id: int) -> PointsAccount:
        account, _ = PointsAccount.objects.get_or_create(user_id=user_id)
        return PointsAccount.objects.select_for_update().get(pk=account.pk)

    @classmethod
    def _validate_params(cls, params: AppendEntryParams) -> None:
        if params.entry_type not in EntryType.values:
            raise ValidationError(
                f"Unknown entry type {params.entry_type!r}",
                error_code="INVALID_ENTRY_TYPE",
            )
        if not isinstance(params.amount, int) or params.amount == 0:
            raise ValidationError(
                "Points amount must be a non-zero integer",
                error_code="INVALID_POINTS_AMOUNT",
                details={"amount": params.amount},
            )
        sign = _REQUIRED_SIGN.get(params.entry_type)
        if sign is not None and params.amount * sign < 0:
            raise ValidationError(
                f"{params.entry_type} entries must be {'positive' if sign > 0 else 'negative'}",
                error_code="INVALID_POINTS_AMOUNT",
                details={"amount": params.amount, "entry_type": params.entry_type},
            )
        if not params.idempotency_key:
            raise ValidationError(
                "An idempotency key is required",
                error_code="IDEMPOTENCY_KEY_REQUIRED",
            )

    @classmethod
    def _replayed(cls, existing: PointsLedgerEntry, params: AppendEntryParams) -> PointsLedgerEntry:
        """
        Return the stored entry for a retried append.

        Raises:
            ConflictError: If the key was already used for a different movement
        """
        mismatched = {
            field: {"stored": stored, "requested": requested}
            for field, stored, requested in (
                ("user_id", existing.user_id, params.user_id),
                ("amount", existing.amount, params.amount),
                ("entry_type", existing.entry_type, params.entry_type),
            )
            if stored != requested
        }
        if mismatched:
            cls.get_logger().warning(
                "Idempotency key reused for a different points entry",
                extra={"idempotency_key": params.idempotency_key, "entry_id": str(existing.id)},
            )
            raise ConflictError(
                "Idempotency key was already used for a different points entry",
                error_code="IDEMPOTENCY_KEY_REUSED",
                details={"idempotency_key": params.idempotency_key, "mismatched": mismatched},
            )
        return existing

    @classmethod
    def append_entry(cls, params: AppendEntryParams) -> PointsLedgerEntry:
        """
        Append one entry to a user's ledger.

        Idempotent - if an entry with the same idempotency_key already
        exists for the same user, amount and type, it is returned unchanged.

        Raises:
            ValidationError: If the parameters are malformed
            InsufficientBalanceError: If a debit would make the balance negative
            ConflictError: If the idempotency key belongs to a different entry

        Note:
            Joins the caller's transaction when there is one, so a ledger
            write and the state change that caused it commit together.
        """
        cls._validate_params(params)
        logger = cls.get_logger()

        with transaction.atomic():
            cls._lock_account(params.user_id)

            # Idempotency is checked before the balance, under the lock, so a
            # retried debit never counts itself twice.
            existing = PointsLedgerEntry.objects.filter(
                idempotency_key=params.idempotency_key
            ).first()
            if existing is not None:
                logger.info(
                    "Points entry already recorded",
                    extra={
                        "idempotency_key": params.idempotency_key,
                        "entry_id": str(existing.id),
                    },
                )
                return cls._replayed(existing, params)

            if params.amount < 0:
                current = cls.get_balance(params.user_id).balance
                if current + params.amount < 0:
                    logger.warning(
                        "Rejected points debit: insufficient balance",
                        extra={
                            "user_id": params.user_id,
                            "amount": params.amount,
                            "available": current,
                        },
                    )
                    raise InsufficientBalanceError(
                        user_id=params.user_id,
                        required=-params.amount,
                        available=current,
                    )

            try:
                with transaction.atomic():
                    entry = PointsLedgerEntry.objects.create(
                        user_id=params.user_id,
                        amount=params.amount,
                        entry_type=params.entry_type,
                        description=params.description,
                        order_id=params.order_id,
                        return_id=params.return_id,
                        created_by=params.created_by,
                        idempotency_key=params.idempotency_key,
                    )
            except IntegrityError:
                # Another writer stored the same key between our check and insert
                return cls._replayed(
                    PointsLedgerEntry.objects.get(idempotency_key=params.idempotency_key), params
                )

        logger.info(
            "Points entry appended",
            extra={
                "entry_id": str(entry.id),
                "user_id": params.user_id,
                "amount": params.amount,
                "entry_type": params.entry_type,
            },
        )
        return entry

    @classmethod
    def adjust(
        cls,
        user_id: int,
        amount: int,
        reason: str,
        operator=None,
        idempotency_key: str | None = None,
    ) -> PointsLedgerEntry:
        """
        Operator correction of a user's points.

        Negative adjustments are subject to the same balance check as spends.
        """
        cls.validate_required(reason=reason)
        if not get_user_model().objects.filter(pk=user_id).exists():
            raise NotFoundError(
                f"User {user_id} not found",
                error_code="USER_NOT_FOUND",
                details={"user_id": user_id},
            )
        return cls.append_entry(
            AppendEntryParams(
                user_id=user_id,
                amount=amount,
                entry_type=EntryType.ADJUSTMENT,
                description=reason.strip(),
                idempotency_key=idempotency_key or f"adjustment:{uuid.uuid4()}",
                created_by=f"operator:{operator.pk}" if operator is not None else "",
            )
        )

    @classmethod
    def order_breakdown(cls, order) -> dict:
        """Points metadata of an order plus points already refunded for it."""
        refunded = PointsLedgerEntry.objects.filter(
            order=order, entry_type=EntryType.REFUND
        ).aggregate(total=Coalesce(Sum("amount"), 0))["total"]
        return {
            "order_id": order.pk,
            "points_used": order.points_used,
            "points_earned": order.points_earned,
            "discount_amount": order.discount_amount,
            "points_refunded": refunded,
        }

    @classmethod
    def stats(cls) -> dict:
        """Ledger-wide totals for operators."""
        totals = PointsLedgerEntry.objects.aggregate(**_balance_aggregates())
        by_type = {
            row["entry_type"]: {"count": row["count"], "points": row["points"]}
            for row in PointsLedgerEntry.objects.values("entry_type")
            .annotate(count=Count("id"), points=Sum("amount"))
            .order_by("entry_type")
        }
        pesos_per_point = cls.pesos_per_point()
        return {
            "total_points_in_circulation": totals["balance"],
            "total_points_earned": totals["total_earned"],
            "total_points_spent": -totals["spent_sum"],
            "value_in_pesos": Decimal(totals["balance"]) * pesos_per_point,
            "pesos_per_point": pesos_per_point,
            "transactions_by_type": by_type,
        }

    @classmethod
    def user_balances(cls, sort_by: str = "balance"):
        """
        Users with their derived balances, for operator listings.

        Raises:
            ValidationError: If sort_by is not a known column
        """
        if sort_by not in USER_SORT_FIELDS:
            raise ValidationError(
                f"sort_by must be one of {', '.join(USER_SORT_FIELDS)}",
                error_code="INVALID_SORT",
            )
        return (
            get_user_model()
            .objects.annotate(**_balance_aggregates("points_entries__"))
            .annotate(total_spent=F("spent_sum") * -1)
            .order_by(f"-{sort_by}", "id")
        )
