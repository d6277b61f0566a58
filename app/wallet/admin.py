"""
Django admin configuration for wallet models.
"""

from django.contrib import admin

from wallet.models import StoreCredit


@admin.register(StoreCredit)
class StoreCreditAdmin(admin.ModelAdmin):
    """Store credits are issued by the returns engine, not by hand."""

    list_display = ["id", "user", "amount", "balance", "status", "expires_at", "reference"]
    list_filter = ["status", "expires_at"]
    search_fields = ["id", "user__email", "reference", "idempotency_key"]
    readonly_fields = ["id", "user", "amount", "idempotency_key", "reference", "created_at", "updated_at"]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
