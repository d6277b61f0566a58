"""
Read-only catalog service used by the returns engine and the points API.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.exceptions import NotFoundError
from core.services import BaseService
from orders.models import LicenseKeyGrant, Order, OrderItem

if TYPE_CHECKING:
    from django.db.models import QuerySet


class OrderCatalog(BaseService):
    """
    Narrow read interface over orders.

    Ownership checks are the caller's job: the catalog only answers
    whether an order exists.
    """

    @classmethod
    def get_order(cls, order_id) -> Order:
        try:
            return Order.objects.select_related("user").get(pk=order_id)
        except (Order.DoesNotExist, ValueError, TypeError):
            raise NotFoundError(
                f"Order {order_id} not found",
                error_code="ORDER_NOT_FOUND",
                details={"order_id": str(order_id)},
            )

    @classmethod
    def get_order_items(cls, order_id) -> QuerySet[OrderItem]:
        """Items of an order with product and grants prefetched."""
        return (
            OrderItem.objects.filter(order_id=order_id)
            .select_related("product")
            .prefetch_related("grants")
        )

    @classmethod
    def get_grants(cls, order_id) -> QuerySet[LicenseKeyGrant]:
        """All grants sold under an order, with their item and product."""
        return (
            LicenseKeyGrant.objects.filter(order_item__order_id=order_id)
            .select_related("order_item", "order_item__product")
            .order_by("id")
        )
