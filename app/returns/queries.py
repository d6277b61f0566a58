"""
Read side of the returns engine: lookups, listings and the operator summary.

Nothing here writes. Listings return querysets so views can paginate and
filter them (see returns.filters).
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import Avg, Count, Q, Sum
from django.db.models.functions import Coalesce

from core.exceptions import NotFoundError
from core.services import BaseService
from orders.models import Order
from returns.models import Return, ReturnStatusHistory
from returns.states import ReturnStatus

if TYPE_CHECKING:
    from django.db.models import QuerySet

ZERO = Decimal("0")


class ReturnQueryService(BaseService):
    """Read-only return queries for customers and operators."""

    @classmethod
    def _base(cls) -> QuerySet[Return]:
        return Return.objects.select_related("order", "user", "processed_by").prefetch_related(
            "items__grant",
            "items__order_item__product",
        )

    @classmethod
    def list_for_user(cls, user) -> QuerySet[Return]:
        return cls._base().filter(user_id=user.pk).order_by("-created_at")

    @classmethod
    def list_all(cls) -> QuerySet[Return]:
        return cls._base().order_by("-created_at")

    @classmethod
    def get_for_user(cls, return_id, user) -> Return:
        """
        A return the caller may see: their own, or any for operators.

        Raises:
            NotFoundError: Unknown id, or someone else's return
        """
        queryset = cls._base()
        if not getattr(user, "is_operator", False):
            queryset = queryset.filter(user_id=user.pk)
        try:
            return queryset.get(pk=return_id)
        except (Return.DoesNotExist, DjangoValidationError, ValueError) as exc:
            raise NotFoundError(
                f"Return {return_id} not found",
                error_code="RETURN_NOT_FOUND",
                details={"return_id": str(return_id)},
            ) from exc

    @classmethod
    def history(cls, return_id, user) -> QuerySet[ReturnStatusHistory]:
        ret = cls.get_for_user(return_id, user)
        return ret.history.select_related("changed_by").order_by("created_at", "id")

    @classmethod
    def summary(cls, queryset: QuerySet[Return] | None = None) -> dict:
        """
        Counts per status and refund totals.

        ``return_rate`` is orders with at least one return over orders in a
        returnable status.
        """
        queryset = queryset if queryset is not None else Return.objects.all()
        refunded = Q(status=ReturnStatus.REFUNDED)

        counts = {value: 0 for value in ReturnStatus.values}
        for row in queryset.order_by().values("status").annotate(count=Count("id")):
            counts[row["status"]] = row["count"]

        totals = queryset.aggregate(
            total_refunded=Coalesce(Sum("refund_amount", filter=refunded), ZERO),
            average_refund_amount=Avg("refund_amount", filter=refunded),
            total_points_refunded=Coalesce(Sum("points_refunded", filter=refunded), 0),
            returned_orders=Count("order_id", distinct=True),
        )
        eligible_orders = Order.objects.filter(
            status__in=settings.RETURNS_ELIGIBLE_ORDER_STATUSES
        ).count()
        return_rate = (
            (Decimal(totals["returned_orders"]) / eligible_orders).quantize(
                Decimal("0.0001"), rounding=ROUND_HALF_UP
            )
            if eligible_orders
            else ZERO
        )
        average = totals["average_refund_amount"]

        return {
            "total_returns": sum(counts.values()),
            "counts_by_status": counts,
            "total_refunded": totals["total_refunded"],
            "average_refund_amount": (
                Decimal(average).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
                if average is not None
                else ZERO
            ),
            "total_points_refunded": totals["total_points_refunded"],
            "return_rate": return_rate,
        }
