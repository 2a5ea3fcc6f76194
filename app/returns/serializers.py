"""
Serializers for return API.

Input:
    ReturnItemInputSerializer / ReturnRequestCreateSerializer: Filing a return
    ReturnStatusUpdateSerializer: Staff review

Output:
    ReturnRequestSerializer: Return with items, history and refunds
    EligibilitySerializer: Result of an eligibility check
"""

from __future__ import annotations

from rest_framework import serializers

from returns.models import (
    RefundMethod,
    RefundTransaction,
    ReturnItem,
    ReturnReason,
    ReturnRequest,
    ReturnStatusHistory,
)
from returns.services import REVIEW_STATUSES


class ReturnItemInputSerializer(serializers.Serializer):
    order_item_id = serializers.UUIDField(required=False)
    product_id = serializers.UUIDField(required=False)
    quantity = serializers.IntegerField(min_value=1)
    reason = serializers.ChoiceField(choices=ReturnReason.choices, required=False)

    def validate(self, attrs):
        if not attrs.get("order_item_id") and not attrs.get("product_id"):
            raise serializers.ValidationError(
                "Either order_item_id or product_id is required."
            )
        return attrs


class ReturnRequestCreateSerializer(serializers.Serializer):
    order = serializers.CharField(help_text="Order id or ORD-... code")
    items = ReturnItemInputSerializer(many=True, allow_empty=False)
    reason = serializers.ChoiceField(choices=ReturnReason.choices)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    refund_method = serializers.ChoiceField(choices=RefundMethod.choices, required=False)


class ReturnStatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=list(REVIEW_STATUSES))
    note = serializers.CharField(required=False, allow_blank=True, default="")
    rejection_reason = serializers.CharField(required=False, allow_blank=True, default="")


class ReturnItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = ReturnItem
        fields = ["id", "order_item", "product_id", "name", "quantity", "unit_price_cents", "reason"]
        read_only_fields = fields


class ReturnStatusHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = ReturnStatusHistory
        fields = ["status", "actor_id", "actor_role", "note", "created_at"]
        read_only_fields = fields


class RefundTransactionSerializer(serializers.ModelSerializer):
    class Meta:
        model = RefundTransaction
        fields = [
            "id",
            "code",
            "amount_cents",
            "method",
            "status",
            "customer_wallet_entry",
            "vendor_wallet_entry",
            "processed_by",
            "processed_by_role",
            "processed_at",
        ]
        read_only_fields = fields


class ReturnRequestSerializer(serializers.ModelSerializer):
    order_code = serializers.CharField(source="order.code", read_only=True)
    items = ReturnItemSerializer(many=True, read_only=True)
    status_history = ReturnStatusHistorySerializer(many=True, read_only=True)
    refund_transactions = RefundTransactionSerializer(many=True, read_only=True)

    class Meta:
        model = ReturnRequest
        fields = [
            "id",
            "code",
            "order",
            "order_code",
            "customer_id",
            "vendor_id",
            "reason",
            "description",
            "refund_amount_cents",
            "status",
            "refund_status",
            "refund_method",
            "rejection_reason",
            "admin_notes",
            "vendor_notes",
            "refunded_at",
            "items",
            "status_history",
            "refund_transactions",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class EligibilitySerializer(serializers.Serializer):
    eligible = serializers.BooleanField()
    reason = serializers.CharField(allow_blank=True)
    days_remaining = serializers.IntegerField(allow_null=True)
