"""
Django admin configuration for the points ledger.

Key features:
- PointsLedgerEntry is immutable (no add/edit/delete permissions)
- Derived balance displayed on the PointsAccount list view
"""

from django.contrib import admin

from points.models import PointsAccount, PointsLedgerEntry
from points.services import PointsLedgerService


@admin.register(PointsAccount)
class PointsAccountAdmin(admin.ModelAdmin):
    """
    Points accounts with their balance, computed from the ledger on display.
    """

    list_display = ["id", "user", "balance_display", "created_at"]
    search_fields = ["user__email"]
    readonly_fields = ["user", "created_at", "balance_display"]

    @admin.display(description="Balance")
    def balance_display(self, obj: PointsAccount) -> int:
        return PointsLedgerService.get_balance(obj.user_id).balance

    def has_add_permission(self, request):
        return False


@admin.register(PointsLedgerEntry)
class PointsLedgerEntryAdmin(admin.ModelAdmin):
    """
    Ledger entries are read-only. Corrections are made through the
    adjustment endpoint, which appends a new entry.
    """

    list_display = [
        "id",
        "created_at",
        "user",
        "entry_type",
        "amount",
        "order",
        "return_id",
        "created_by",
    ]
    list_filter = ["entry_type", "created_at"]
    search_fields = ["id", "idempotency_key", "user__email", "description"]
    ordering = ["-created_at"]
    date_hierarchy = "created_at"

    def get_readonly_fields(self, request, obj=None):
        return [field.name for field in self.model._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
