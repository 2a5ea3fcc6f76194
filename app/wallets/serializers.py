"""
Serializers for wallet API.

Serializers:
    VendorWalletSerializer: Vendor wallet balances
    VendorWalletTransactionSerializer: Ledger entries (read-only)
    WithdrawalRequestSerializer: Withdrawal requests (read-only)
    WithdrawalCreateSerializer: Input for filing a withdrawal
    WithdrawalApproveSerializer / WithdrawalRejectSerializer: Admin input
    CustomerWalletSerializer: Customer wallet with recent entries
    WalletStatsSerializer: Admin dashboard totals
"""

from __future__ import annotations

from rest_framework import serializers

from wallets.models import (
    CustomerWallet,
    CustomerWalletTransaction,
    VendorWallet,
    VendorWalletTransaction,
    WithdrawalRequest,
)


class VendorWalletSerializer(serializers.ModelSerializer):
    class Meta:
        model = VendorWallet
        fields = [
            "id",
            "vendor_id",
            "balance_cents",
            "pending_balance_cents",
            "total_withdrawn_cents",
            "last_withdrawal_at",
            "updated_at",
        ]
        read_only_fields = fields


class VendorWalletTransactionSerializer(serializers.ModelSerializer):
    class Meta:
        model = VendorWalletTransaction
        fields = [
            "id",
            "type",
            "amount_cents",
            "balance_before_cents",
            "balance_after_cents",
            "balance_bucket",
            "description",
            "reference_id",
            "reference_type",
            "performed_by",
            "metadata",
            "created_at",
        ]
        read_only_fields = fields


class WithdrawalRequestSerializer(serializers.ModelSerializer):
    class Meta:
        model = WithdrawalRequest
        fields = [
            "id",
            "vendor_id",
            "amount_cents",
            "status",
            "payment_method",
            "requested_at",
            "processed_at",
            "processed_by",
            "admin_notes",
            "rejection_reason",
            "external_transaction_id",
        ]
        read_only_fields = fields


class WithdrawalCreateSerializer(serializers.Serializer):
    payment_method = serializers.CharField(
        max_length=32, required=False, default="bank_transfer"
    )


class WithdrawalApproveSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    transaction_id = serializers.CharField(
        max_length=128, required=False, allow_blank=True, default=""
    )


class WithdrawalRejectSerializer(serializers.Serializer):
    reason = serializers.CharField(allow_blank=False)


class CustomerWalletTransactionSerializer(serializers.ModelSerializer):
    class Meta:
        model = CustomerWalletTransaction
        fields = [
            "id",
            "type",
            "amount_cents",
            "balance_before_cents",
            "balance_after_cents",
            "description",
            "reference_id",
            "reference_type",
            "created_at",
        ]
        read_only_fields = fields


class CustomerWalletSerializer(serializers.ModelSerializer):
    recent_transactions = serializers.SerializerMethodField()

    class Meta:
        model = CustomerWallet
        fields = ["id", "customer_id", "balance_cents", "recent_transactions"]
        read_only_fields = fields

    def get_recent_transactions(self, obj: CustomerWallet) -> list[dict]:
        entries = obj.transactions.order_by("-created_at")[:20]
        return CustomerWalletTransactionSerializer(entries, many=True).data


class WalletStatsSerializer(serializers.Serializer):
    wallet_count = serializers.IntegerField()
    total_balance_cents = serializers.IntegerField()
    total_pending_cents = serializers.IntegerField()
    total_withdrawn_cents = serializers.IntegerField()
    pending_withdrawal_count = serializers.IntegerField()
    pending_withdrawal_cents = serializers.IntegerField()
