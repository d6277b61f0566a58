"""
Eligibility checker.

Decides which license keys of an order can still be returned:

- The order must belong to the caller (operators may check any order).
  Someone else's order looks exactly like a missing one.
- The order status must be in RETURNS_ELIGIBLE_ORDER_STATUSES.
- The request must fall within RETURNS_WINDOW_DAYS of the order date.
- A key held by a pending, approved or refunded return is not available.
  Rejected and cancelled returns release their keys.
"""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

from django.conf import settings
from django.utils import timezone

from core.exceptions import NotFoundError, ValidationError
from core.services import BaseService
from orders.models import GrantStatus
from orders.services import OrderCatalog
from returns.models import ReturnItem
from returns.types import EligibilityResult, EligibleGrant

if TYPE_CHECKING:
    from datetime import datetime

    from orders.models import Order


class EligibilityChecker(BaseService):
    """Read-only eligibility rules shared by the API and ReturnService.create."""

    @classmethod
    def get_owned_order(cls, order_id, user) -> Order:
        """
        Load an order the caller may act on.

        Raises:
            NotFoundError: If the order doesn't exist or belongs to someone else
        """
        order = OrderCatalog.get_order(order_id)
        if order.user_id != user.pk and not getattr(user, "is_operator", False):
            cls.get_logger().info(
                "Order ownership check failed",
                extra={"order_id": order.pk, "user_id": user.pk},
            )
            raise NotFoundError(
                f"Order {order_id} not found",
                error_code="ORDER_NOT_FOUND",
                details={"order_id": str(order_id)},
            )
        return order

    @classmethod
    def window_ends_at(cls, order: Order) -> datetime:
        return order.created_at + timedelta(days=settings.RETURNS_WINDOW_DAYS)

    @classmethod
    def _closed_because(cls, order: Order, now=None) -> tuple[str, str] | None:
        now = now or timezone.now()
        if order.status not in settings.RETURNS_ELIGIBLE_ORDER_STATUSES:
            return (
                "ORDER_NOT_RETURNABLE",
                f"Orders in status '{order.status}' cannot be returned",
            )
        if now > cls.window_ends_at(order):
            return (
                "RETURN_WINDOW_EXPIRED",
                f"The {settings.RETURNS_WINDOW_DAYS}-day return window "
                f"ended on {cls.window_ends_at(order):%Y-%m-%d}",
            )
        return None

    @classmethod
    def ineligibility_reason(cls, order: Order, now=None) -> str:
        """Why returns are closed for this order, or "" if they are open."""
        closed = cls._closed_because(order, now)
        return closed[1] if closed else ""

    @classmethod
    def ensure_open(cls, order: Order) -> None:
        """
        Raises:
            ValidationError: If the order status or the return window rule it out
        """
        closed = cls._closed_because(order)
        if closed is not None:
            error_code, message = closed
            raise ValidationError(
                message,
                error_code=error_code,
                details={
                    "order_id": order.pk,
                    "window_ends_at": cls.window_ends_at(order).isoformat(),
                },
            )

    @classmethod
    def claimed_grant_ids(cls, order_id) -> set[int]:
        """Grants of the order held by an active claim."""
        return set(
            ReturnItem.objects.filter(
                grant__order_item__order_id=order_id,
                claim_active=True,
            ).values_list("grant_id", flat=True)
        )

    @classmethod
    def available_grants(cls, order: Order) -> list[EligibleGrant]:
        claimed = cls.claimed_grant_ids(order.pk)
        grants = OrderCatalog.get_grants(order.pk).filter(status=GrantStatus.ACTIVE)
        return [
            EligibleGrant(
                grant_id=grant.pk,
                order_item_id=grant.order_item_id,
                masked_key=grant.masked_key,
                product_id=grant.order_item.product_id,
                product_name=grant.order_item.product.name,
                unit_price=grant.order_item.unit_price,
                purchase_date=order.created_at,
            )
            for grant in grants
            if grant.pk not in claimed
        ]

    @classmethod
    def check(cls, order_id, user) -> EligibilityResult:
        """
        Full eligibility verdict for an order.

        Raises:
            NotFoundError: If the order doesn't exist or isn't the caller's
        """
        return cls.evaluate(cls.get_owned_order(order_id, user))

    @classmethod
    def evaluate(cls, order: Order) -> EligibilityResult:
        """Eligibility verdict for an order already known to be the caller's."""
        reason = cls.ineligibility_reason(order)
        keys = [] if reason else cls.available_grants(order)
        if not reason and not keys:
            reason = "All license keys from this order are already in a return"

        return EligibilityResult(
            eligible=bool(keys),
            order_id=order.pk,
            purchase_date=order.created_at,
            window_ends_at=cls.window_ends_at(order),
            reason=reason,
            available_keys=keys,
        )

    @classmethod
    def get_eligible_grants(cls, order_id, user) -> list[EligibleGrant]:
        """Returnable keys of an order. Empty, not an error, when none are left."""
        return cls.check(order_id, user).available_keys
