"""
Order and catalog models.

Models:
    Product: Sellable digital product
    Order: A placed order with its points metadata
    OrderItem: Line item of an order
    LicenseKeyGrant: One sold license key (the atomic unit of a return)

Note:
    Orders are immutable once paid as far as the returns engine is
    concerned. The engine only reads them through orders.services.OrderCatalog.
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from core.models import BaseModel


class OrderStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    PAID = "paid", "Paid"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"


class GrantStatus(models.TextChoices):
    ACTIVE = "active", "Active"
    REVOKED = "revoked", "Revoked"


class Product(BaseModel):
    """Digital product sold as license keys."""

    name = models.CharField(max_length=200)
    sku = models.CharField(max_length=64, unique=True)
    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0"))],
    )

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class Order(BaseModel):
    """
    Customer order.

    Fields:
        user: Buyer
        status: Order status; only some statuses allow returns
        total_amount: Order total before the points discount
        points_used: Points redeemed against this order
        points_earned: Points awarded for this order
        discount_amount: Pesos covered by redeemed points
        created_at: When the order was placed (start of the return window)
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders",
    )
    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
        db_index=True,
    )
    total_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0"))],
    )
    points_used = models.PositiveIntegerField(default=0)
    points_earned = models.PositiveIntegerField(default=0)
    discount_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0"),
    )
    created_at = models.DateTimeField(
        default=timezone.now,
        db_index=True,
        help_text="When the order was placed",
    )

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "-created_at"], name="orders_orde_user_id_5b7e11_idx"),
        ]

    def __str__(self) -> str:
        return f"Order {self.pk} ({self.status})"


class OrderItem(models.Model):
    """Line item of an order. Quantity equals the number of grants sold."""

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name="order_items")
    unit_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0"))],
    )
    quantity = models.PositiveIntegerField(default=1)

    class Meta:
        ordering = ["id"]

    def __str__(self) -> str:
        return f"{self.quantity} x {self.product_id} @ {self.unit_price}"


class LicenseKeyGrant(models.Model):
    """A single sold license key."""

    order_item = models.ForeignKey(
        OrderItem,
        on_delete=models.CASCADE,
        related_name="grants",
    )
    license_key = models.CharField(max_length=128, unique=True)
    status = models.CharField(
        max_length=20,
        choices=GrantStatus.choices,
        default=GrantStatus.ACTIVE,
    )
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["id"]

    def __str__(self) -> str:
        return f"Grant {self.pk} ({self.masked_key})"

    @property
    def masked_key(self) -> str:
        """Key preview showing only the last four characters."""
        visible = self.license_key[-4:]
        return f"{'*' * max(len(self.license_key) - 4, 4)}{visible}"
