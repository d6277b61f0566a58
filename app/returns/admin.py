"""
Django admin configuration for returns.

Key features:
- Items and status history shown inline, read-only
- Status cannot be edited here; decisions go through the API so that
  grants, ledger entries and notifications stay consistent
"""

from django.contrib import admin

from returns.models import Return, ReturnItem, ReturnStatusHistory


class ReturnItemInline(admin.TabularInline):
    model = ReturnItem
    extra = 0
    can_delete = False
    fields = ["grant", "order_item", "unit_price", "reason", "claim_active"]
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


class ReturnStatusHistoryInline(admin.TabularInline):
    model = ReturnStatusHistory
    extra = 0
    can_delete = False
    fields = ["created_at", "old_status", "new_status", "changed_by", "notes"]
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Return)
class ReturnAdmin(admin.ModelAdmin):
    list_display = [
        "id",
        "created_at",
        "user",
        "order",
        "status",
        "reason_code",
        "refund_amount",
        "points_refunded",
        "processed_by",
    ]
    list_filter = ["status", "reason_code", "created_at"]
    search_fields = ["id", "user__email", "order__id", "credit_reference"]
    ordering = ["-created_at"]
    date_hierarchy = "created_at"
    inlines = [ReturnItemInline, ReturnStatusHistoryInline]
    readonly_fields = [
        "id",
        "order",
        "user",
        "status",
        "reason_code",
        "reason",
        "customer_notes",
        "refund_amount",
        "points_to_refund",
        "points_refunded",
        "refund_method",
        "processed_by",
        "processed_at",
        "refunded_at",
        "credit_reference",
        "version",
        "created_at",
        "updated_at",
    ]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
