import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("orders", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="PointsAccount",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "user",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="points_account",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
        ),
        migrations.CreateModel(
            name="PointsLedgerEntry",
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
                ("amount", models.IntegerField(help_text="Signed points (positive = credit, negative = debit)")),
                (
                    "entry_type",
                    models.CharField(
                        choices=[
                            ("earned", "Earned"),
                            ("spent", "Spent"),
                            ("refund", "Refund"),
                            ("adjustment", "Adjustment"),
                        ],
                        help_text="Category of this entry",
                        max_length=20,
                    ),
                ),
                ("description", models.CharField(blank=True, default="", max_length=255)),
                (
                    "return_id",
                    models.UUIDField(
                        blank=True, db_index=True, help_text="Return this entry was written for, if any", null=True
                    ),
                ),
                ("created_by", models.CharField(blank=True, default="", max_length=255)),
                (
                    "idempotency_key",
                    models.CharField(
                        help_text="Unique key to prevent duplicate entries", max_length=255, unique=True
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True, db_index=True, help_text="Timestamp when this entry was recorded"
                    ),
                ),
                (
                    "order",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="points_entries",
                        to="orders.order",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="points_entries",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "points ledger entries",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["user", "-created_at"], name="points_poin_user_id_8c1f3a_idx"),
                    models.Index(fields=["entry_type"], name="points_poin_entry_t_4d2e9b_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("amount", 0), _negated=True),
                        name="points_entry_amount_non_zero",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(models.Q(("entry_type", "spent"), _negated=True), ("amount__lt", 0), _connector="OR"),
                        name="points_entry_spent_negative",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(("entry_type__in", ["earned", "refund"]), _negated=True),
                            ("amount__gt", 0),
                            _connector="OR",
                        ),
                        name="points_entry_credit_positive",
                    ),
                ],
            },
        ),
    ]
