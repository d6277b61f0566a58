"""
Serializers for the points API.
"""

from rest_framework import serializers

from points.models import PointsLedgerEntry


class PointsBalanceSerializer(serializers.Serializer):
    balance = serializers.IntegerField()
    total_earned = serializers.IntegerField()
    total_spent = serializers.IntegerField()
    value_in_pesos = serializers.DecimalField(max_digits=14, decimal_places=2)
    pesos_per_point = serializers.IntegerField()


class PointsLedgerEntrySerializer(serializers.ModelSerializer):
    class Meta:
        model = PointsLedgerEntry
        fields = [
            "id",
            "amount",
            "entry_type",
            "description",
            "order_id",
            "return_id",
            "created_at",
        ]
        read_only_fields = fields


class OrderPointsSerializer(serializers.Serializer):
    order_id = serializers.IntegerField()
    points_used = serializers.IntegerField()
    points_earned = serializers.IntegerField()
    discount_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    points_refunded = serializers.IntegerField()


class PointsAdjustmentSerializer(serializers.Serializer):
    """Operator adjustment payload. The amount may be negative but not zero."""

    user_id = serializers.IntegerField()
    amount = serializers.IntegerField()
    reason = serializers.CharField(max_length=255, trim_whitespace=True)

    def validate_amount(self, value):
        if value == 0:
            raise serializers.ValidationError("Amount must not be zero.")
        return value


class PointsStatsSerializer(serializers.Serializer):
    total_points_in_circulation = serializers.IntegerField()
    total_points_earned = serializers.IntegerField()
    total_points_spent = serializers.IntegerField()
    value_in_pesos = serializers.DecimalField(max_digits=16, decimal_places=2)
    pesos_per_point = serializers.IntegerField()
    transactions_by_type = serializers.DictField()


class UserPointsSerializer(serializers.Serializer):
    user_id = serializers.IntegerField(source="id")
    email = serializers.EmailField()
    full_name = serializers.CharField()
    balance = serializers.IntegerField()
    total_earned = serializers.IntegerField()
    total_spent = serializers.IntegerField()
