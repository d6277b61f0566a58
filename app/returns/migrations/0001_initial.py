import decimal
import uuid

import django.db.models.deletion
import django_fsm
from django.conf import settings
from django.db import migrations, models

RETURN_STATUS_CHOICES = [
    ("pending", "Pending"),
    ("approved", "Approved"),
    ("rejected", "Rejected"),
    ("refunded", "Refunded"),
    ("cancelled", "Cancelled"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("orders", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Return",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier for this record",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "version",
                    models.PositiveIntegerField(
                        default=1, help_text="Version for optimistic locking - incremented on each save"
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True, db_index=True, help_text="Timestamp when this record was created"
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified"),
                ),
                (
                    "status",
                    django_fsm.FSMField(
                        choices=RETURN_STATUS_CHOICES,
                        db_index=True,
                        default="pending",
                        help_text="Current return status",
                        max_length=50,
                        protected=True,
                    ),
                ),
                (
                    "reason_code",
                    models.CharField(
                        choices=[
                            ("defective", "Defective"),
                            ("wrong_item", "Wrong Item"),
                            ("not_as_described", "Not As Described"),
                            ("changed_mind", "Changed Mind"),
                            ("better_price", "Better Price"),
                            ("license_not_working", "License Not Working"),
                            ("other", "Other"),
                        ],
                        default="other",
                        max_length=30,
                    ),
                ),
                ("reason", models.TextField(help_text="Customer's explanation")),
                ("customer_notes", models.TextField(blank=True, default="")),
                (
                    "refund_amount",
                    models.DecimalField(
                        decimal_places=2,
                        default=decimal.Decimal("0"),
                        help_text="Authoritative monetary refund",
                        max_digits=12,
                    ),
                ),
                (
                    "points_to_refund",
                    models.PositiveIntegerField(
                        default=0, help_text="Points refund computed when the return was requested"
                    ),
                ),
                (
                    "points_refunded",
                    models.PositiveIntegerField(default=0, help_text="Points credited when the return was finalized"),
                ),
                (
                    "refund_method",
                    models.CharField(
                        choices=[
                            ("original_payment", "Original Payment"),
                            ("store_credit", "Store Credit"),
                            ("bank_transfer", "Bank Transfer"),
                        ],
                        default="store_credit",
                        max_length=30,
                    ),
                ),
                ("admin_notes", models.TextField(blank=True, default="")),
                ("processed_at", models.DateTimeField(blank=True, null=True)),
                ("refunded_at", models.DateTimeField(blank=True, null=True)),
                ("credit_reference", models.CharField(blank=True, default="", max_length=100)),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="returns", to="orders.order"
                    ),
                ),
                (
                    "processed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="processed_returns",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="returns",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["user", "-created_at"], name="returns_ret_user_id_a3c9e2_idx"),
                    models.Index(fields=["status", "-created_at"], name="returns_ret_status_7f41b0_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ReturnItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("unit_price", models.DecimalField(decimal_places=2, max_digits=12)),
                ("reason", models.TextField(blank=True, default="")),
                ("claim_active", models.BooleanField(default=True)),
                (
                    "grant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="return_items",
                        to="orders.licensekeygrant",
                    ),
                ),
                (
                    "order_item",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="return_items",
                        to="orders.orderitem",
                    ),
                ),
                (
                    "return_request",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="items", to="returns.return"
                    ),
                ),
            ],
            options={
                "ordering": ["id"],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("claim_active", True)),
                        fields=("grant",),
                        name="unique_active_grant_claim",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ReturnStatusHistory",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("old_status", models.CharField(blank=True, default="", max_length=20)),
                ("new_status", models.CharField(choices=RETURN_STATUS_CHOICES, max_length=20)),
                ("notes", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "changed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "return_request",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="history", to="returns.return"
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "return status history",
                "ordering": ["created_at", "id"],
            },
        ),
    ]
