"""
Django admin configuration for order models.
"""

from django.contrib import admin

from orders.models import LicenseKeyGrant, Order, OrderItem, Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "sku", "price")
    search_fields = ("name", "sku")


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    raw_id_fields = ("product",)


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """Orders with their items and points metadata."""

    list_display = (
        "id",
        "user",
        "status",
        "total_amount",
        "points_used",
        "points_earned",
        "created_at",
    )
    list_filter = ("status", "created_at")
    search_fields = ("id", "user__email")
    raw_id_fields = ("user",)
    inlines = [OrderItemInline]
    date_hierarchy = "created_at"


@admin.register(LicenseKeyGrant)
class LicenseKeyGrantAdmin(admin.ModelAdmin):
    list_display = ("id", "masked_key", "order_item", "status", "created_at")
    list_filter = ("status",)
    raw_id_fields = ("order_item",)
