"""
Django admin configuration for order models.

Orders are read-only here: status changes must go through
OrderLifecycleService so history, refunds and settlement stay consistent.
Coupons are editable.
"""

from django.contrib import admin

from orders.models import (
    CancellationRequest,
    Coupon,
    Order,
    OrderItem,
    OrderStatusHistory,
    OrderTransaction,
    VendorBreakdown,
)


class ReadOnlyInline(admin.TabularInline):
    extra = 0
    can_delete = False

    def has_add_permission(self, request, obj=None) -> bool:
        return False

    def has_change_permission(self, request, obj=None) -> bool:
        return False


class OrderItemInline(ReadOnlyInline):
    model = OrderItem
    fields = ["product_id", "vendor_id", "name", "quantity", "unit_price_cents", "line_total_cents"]


class VendorBreakdownInline(ReadOnlyInline):
    model = VendorBreakdown
    fields = ["vendor_id", "subtotal_cents", "commission_rate", "commission_cents"]


class OrderStatusHistoryInline(ReadOnlyInline):
    model = OrderStatusHistory
    fields = ["created_at", "status", "actor_role", "actor_id", "note"]
    readonly_fields = fields


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = [
        "code",
        "customer_id",
        "status",
        "payment_status",
        "total_cents",
        "funds_released",
        "created_at",
    ]
    list_filter = ["status", "payment_status", "funds_released"]
    search_fields = ["code", "customer_id"]
    date_hierarchy = "created_at"
    inlines = [OrderItemInline, VendorBreakdownInline, OrderStatusHistoryInline]

    def has_add_permission(self, request) -> bool:
        return False

    def has_change_permission(self, request, obj=None) -> bool:
        return False

    def has_delete_permission(self, request, obj=None) -> bool:
        return False


@admin.register(CancellationRequest)
class CancellationRequestAdmin(admin.ModelAdmin):
    list_display = ["order", "original_status", "resolution", "created_at", "resolved_at"]
    list_filter = ["resolution"]
    readonly_fields = [
        "order",
        "original_status",
        "reason",
        "requested_by",
        "resolution",
        "resolved_at",
    ]


@admin.register(OrderTransaction)
class OrderTransactionAdmin(admin.ModelAdmin):
    list_display = ["code", "order", "type", "amount_cents", "status", "method", "created_at"]
    list_filter = ["type", "status", "method"]
    search_fields = ["code", "customer_id"]

    def has_change_permission(self, request, obj=None) -> bool:
        return False

    def has_delete_permission(self, request, obj=None) -> bool:
        return False


@admin.register(Coupon)
class CouponAdmin(admin.ModelAdmin):
    list_display = ["code", "is_active", "usage_count", "created_at"]
    list_filter = ["is_active"]
    search_fields = ["code"]
    readonly_fields = ["usage_count"]
