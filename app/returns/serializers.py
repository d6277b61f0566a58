"""
Serializers for the returns API.

Request serializers only check shape; business rules (reason length,
eligibility, transitions) live in the services so every caller gets them.
"""

from rest_framework import serializers

from returns.models import Return, ReturnItem, ReturnStatusHistory
from returns.states import RefundMethod, ReturnReason, ReturnStatus
from wallet.models import StoreCredit


class ReturnItemSerializer(serializers.ModelSerializer):
    masked_key = serializers.CharField(source="grant.masked_key", read_only=True)
    product_name = serializers.CharField(source="order_item.product.name", read_only=True)

    class Meta:
        model = ReturnItem
        fields = [
            "id",
            "grant_id",
            "order_item_id",
            "masked_key",
            "product_name",
            "unit_price",
            "reason",
            "claim_active",
        ]
        read_only_fields = fields


class ReturnSerializer(serializers.ModelSerializer):
    items = ReturnItemSerializer(many=True, read_only=True)

    class Meta:
        model = Return
        fields = [
            "id",
            "order_id",
            "user_id",
            "status",
            "reason_code",
            "reason",
            "customer_notes",
            "refund_amount",
            "points_to_refund",
            "points_refunded",
            "refund_method",
            "admin_notes",
            "processed_by_id",
            "processed_at",
            "refunded_at",
            "credit_reference",
            "version",
            "created_at",
            "updated_at",
            "items",
        ]
        read_only_fields = fields


class CreateReturnSerializer(serializers.Serializer):
    """
    POST /returns/ body.

    Empty reasons and grant lists pass through so the service can reject
    them with its own error codes.
    """

    order_id = serializers.IntegerField()
    grant_ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1),
        allow_empty=True,
    )
    reason = serializers.CharField(allow_blank=True, trim_whitespace=False)
    reason_code = serializers.ChoiceField(
        choices=ReturnReason.choices,
        default=ReturnReason.OTHER,
    )
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    item_reasons = serializers.DictField(
        child=serializers.CharField(allow_blank=True),
        required=False,
        default=dict,
    )

    def validate_item_reasons(self, value):
        try:
            return {int(grant_id): reason for grant_id, reason in value.items()}
        except ValueError:
            raise serializers.ValidationError("Keys must be grant ids.")


class ProcessReturnSerializer(serializers.Serializer):
    """POST /returns/admin/{id}/process/ body."""

    status = serializers.ChoiceField(
        choices=[ReturnStatus.APPROVED, ReturnStatus.REJECTED],
    )
    admin_notes = serializers.CharField(required=False, allow_blank=True, default="")
    refund_method = serializers.ChoiceField(
        choices=RefundMethod.choices,
        required=False,
        allow_null=True,
        default=None,
    )
    finalize = serializers.BooleanField(required=False, default=False)


class RefundPreviewRequestSerializer(serializers.Serializer):
    grant_ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1),
        allow_empty=True,
    )


class RefundPreviewSerializer(serializers.Serializer):
    order_id = serializers.IntegerField()
    grant_ids = serializers.ListField(child=serializers.IntegerField())
    monetary_refund = serializers.DecimalField(max_digits=14, decimal_places=2)
    points_to_refund = serializers.IntegerField()
    refund_percentage = serializers.DecimalField(max_digits=7, decimal_places=4)
    points_discount = serializers.DecimalField(max_digits=14, decimal_places=2)
    actual_paid = serializers.DecimalField(max_digits=14, decimal_places=2)
    pesos_per_point = serializers.IntegerField()


class EligibleGrantSerializer(serializers.Serializer):
    grant_id = serializers.IntegerField()
    order_item_id = serializers.IntegerField()
    masked_key = serializers.CharField()
    product_id = serializers.IntegerField()
    product_name = serializers.CharField()
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2)
    purchase_date = serializers.DateTimeField()


class EligibilitySerializer(serializers.Serializer):
    eligible = serializers.BooleanField()
    order_id = serializers.IntegerField()
    purchase_date = serializers.DateTimeField()
    window_ends_at = serializers.DateTimeField()
    reason = serializers.CharField(allow_blank=True)
    available_keys = EligibleGrantSerializer(many=True)


class ReturnStatusHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = ReturnStatusHistory
        fields = ["id", "old_status", "new_status", "changed_by_id", "notes", "created_at"]
        read_only_fields = fields


class ReturnSummarySerializer(serializers.Serializer):
    total_returns = serializers.IntegerField()
    counts_by_status = serializers.DictField(child=serializers.IntegerField())
    total_refunded = serializers.DecimalField(max_digits=16, decimal_places=2)
    average_refund_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_points_refunded = serializers.IntegerField()
    return_rate = serializers.DecimalField(max_digits=7, decimal_places=4)


class StoreCreditSerializer(serializers.ModelSerializer):
    class Meta:
        model = StoreCredit
        fields = ["id", "amount", "balance", "status", "reference", "expires_at", "created_at"]
        read_only_fields = fields
