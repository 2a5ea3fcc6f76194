"""
Django admin configuration for wallet models.

Wallet balances and ledger entries are read-only in the admin: every
change must go through VendorWalletService/CustomerWalletService so a
ledger entry is written with it.
"""

from django.contrib import admin

from wallets.models import (
    CustomerWallet,
    CustomerWalletTransaction,
    VendorWallet,
    VendorWalletTransaction,
    WithdrawalRequest,
)
from wallets.types import Money


class ReadOnlyAdmin(admin.ModelAdmin):
    def has_add_permission(self, request) -> bool:
        return False

    def has_change_permission(self, request, obj=None) -> bool:
        return False

    def has_delete_permission(self, request, obj=None) -> bool:
        return False


@admin.register(VendorWallet)
class VendorWalletAdmin(ReadOnlyAdmin):
    list_display = [
        "vendor_id",
        "balance_display",
        "pending_display",
        "total_withdrawn_cents",
        "last_withdrawal_at",
    ]
    search_fields = ["vendor_id"]
    ordering = ["-updated_at"]

    @admin.display(description="Balance")
    def balance_display(self, obj: VendorWallet) -> str:
        return str(Money(obj.balance_cents))

    @admin.display(description="Pending")
    def pending_display(self, obj: VendorWallet) -> str:
        return str(Money(obj.pending_balance_cents))


@admin.register(VendorWalletTransaction)
class VendorWalletTransactionAdmin(ReadOnlyAdmin):
    list_display = [
        "created_at",
        "vendor_id",
        "type",
        "amount_cents",
        "balance_bucket",
        "balance_before_cents",
        "balance_after_cents",
        "reference_type",
        "reference_id",
    ]
    list_filter = ["type", "balance_bucket", "reference_type"]
    search_fields = ["vendor_id", "reference_id", "description"]
    date_hierarchy = "created_at"


@admin.register(WithdrawalRequest)
class WithdrawalRequestAdmin(ReadOnlyAdmin):
    list_display = [
        "id",
        "vendor_id",
        "amount_cents",
        "status",
        "requested_at",
        "processed_at",
    ]
    list_filter = ["status"]
    search_fields = ["vendor_id", "external_transaction_id"]


@admin.register(CustomerWallet)
class CustomerWalletAdmin(ReadOnlyAdmin):
    list_display = ["customer_id", "balance_cents", "updated_at"]
    search_fields = ["customer_id"]


@admin.register(CustomerWalletTransaction)
class CustomerWalletTransactionAdmin(ReadOnlyAdmin):
    list_display = [
        "created_at",
        "customer_id",
        "type",
        "amount_cents",
        "balance_after_cents",
        "reference_id",
    ]
    list_filter = ["type", "reference_type"]
    search_fields = ["customer_id", "reference_id"]
