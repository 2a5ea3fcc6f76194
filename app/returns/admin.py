"""
Django admin configuration for return models.

The return policy is edited here. Returns and refunds are read-only;
review and refunds go through ReturnService.
"""

from django.contrib import admin

from returns.models import (
    RefundTransaction,
    ReturnItem,
    ReturnPolicy,
    ReturnRequest,
    ReturnStatusHistory,
)


@admin.register(ReturnPolicy)
class ReturnPolicyAdmin(admin.ModelAdmin):
    list_display = [
        "return_window_days",
        "auto_approve_enabled",
        "auto_approve_max_amount_cents",
        "refund_method",
        "updated_at",
    ]

    def has_add_permission(self, request) -> bool:
        return not ReturnPolicy.objects.exists()

    def has_delete_permission(self, request, obj=None) -> bool:
        return False


class ReturnItemInline(admin.TabularInline):
    model = ReturnItem
    extra = 0
    can_delete = False
    fields = ["product_id", "name", "quantity", "unit_price_cents", "reason"]
    readonly_fields = fields


class ReturnStatusHistoryInline(admin.TabularInline):
    model = ReturnStatusHistory
    extra = 0
    can_delete = False
    fields = ["created_at", "status", "actor_role", "actor_id", "note"]
    readonly_fields = fields


@admin.register(ReturnRequest)
class ReturnRequestAdmin(admin.ModelAdmin):
    list_display = [
        "code",
        "order",
        "customer_id",
        "vendor_id",
        "refund_amount_cents",
        "status",
        "refund_status",
        "created_at",
    ]
    list_filter = ["status", "refund_status", "reason"]
    search_fields = ["code", "customer_id", "vendor_id"]
    inlines = [ReturnItemInline, ReturnStatusHistoryInline]

    def has_add_permission(self, request) -> bool:
        return False

    def has_change_permission(self, request, obj=None) -> bool:
        return False

    def has_delete_permission(self, request, obj=None) -> bool:
        return False


@admin.register(RefundTransaction)
class RefundTransactionAdmin(admin.ModelAdmin):
    list_display = ["code", "return_request", "amount_cents", "status", "processed_by_role", "processed_at"]
    list_filter = ["status", "method"]
    search_fields = ["code", "customer_id", "vendor_id"]

    def has_add_permission(self, request) -> bool:
        return False

    def has_change_permission(self, request, obj=None) -> bool:
        return False

    def has_delete_permission(self, request, obj=None) -> bool:
        return False
