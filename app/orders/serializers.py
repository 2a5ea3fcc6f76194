"""
Serializers for order API.

Input:
    OrderCreateSerializer: Checkout payload
    OrderStatusChangeSerializer: Target status and note
    CancellationRequestCreateSerializer: Customer's cancellation reason

Output:
    OrderSerializer: Full order with items, vendor breakdown and history
    OrderListSerializer: Compact order row for listings
"""

from __future__ import annotations

from rest_framework import serializers

from orders.models import (
    CancellationRequest,
    Order,
    OrderItem,
    OrderStatus,
    OrderStatusHistory,
    PaymentMethod,
    PaymentStatus,
    VendorBreakdown,
)


class OrderItemInputSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    vendor_id = serializers.UUIDField()
    name = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    quantity = serializers.IntegerField(min_value=1)
    unit_price_cents = serializers.IntegerField(min_value=1)


class OrderCreateSerializer(serializers.Serializer):
    items = OrderItemInputSerializer(many=True, allow_empty=False)
    payment_method = serializers.ChoiceField(
        choices=PaymentMethod.choices, default=PaymentMethod.ONLINE
    )
    payment_status = serializers.ChoiceField(
        choices=[PaymentStatus.PENDING, PaymentStatus.COMPLETED],
        default=PaymentStatus.PENDING,
        help_text="completed when the payment was captured at checkout",
    )
    coupon_code = serializers.CharField(max_length=50, required=False, allow_blank=True)
    shipping_cents = serializers.IntegerField(min_value=0, default=0)
    tax_cents = serializers.IntegerField(min_value=0, default=0)
    discount_cents = serializers.IntegerField(min_value=0, default=0)


class OrderStatusChangeSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderStatus.choices)
    note = serializers.CharField(required=False, allow_blank=True, default="")


class CancellationRequestCreateSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class OrderItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderItem
        fields = [
            "id",
            "product_id",
            "vendor_id",
            "name",
            "quantity",
            "unit_price_cents",
            "line_total_cents",
        ]
        read_only_fields = fields


class VendorBreakdownSerializer(serializers.ModelSerializer):
    earnings_cents = serializers.IntegerField(read_only=True)

    class Meta:
        model = VendorBreakdown
        fields = [
            "vendor_id",
            "subtotal_cents",
            "shipping_cents",
            "tax_cents",
            "discount_cents",
            "commission_rate",
            "commission_cents",
            "earnings_cents",
        ]
        read_only_fields = fields


class OrderStatusHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderStatusHistory
        fields = ["status", "actor_id", "actor_role", "note", "created_at"]
        read_only_fields = fields


class CancellationRequestSerializer(serializers.ModelSerializer):
    class Meta:
        model = CancellationRequest
        fields = [
            "original_status",
            "reason",
            "requested_by",
            "resolution",
            "resolved_at",
            "created_at",
        ]
        read_only_fields = fields


class OrderListSerializer(serializers.ModelSerializer):
    class Meta:
        model = Order
        fields = [
            "id",
            "code",
            "customer_id",
            "status",
            "payment_status",
            "total_cents",
            "created_at",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)
    vendor_breakdown = VendorBreakdownSerializer(many=True, read_only=True)
    status_history = OrderStatusHistorySerializer(many=True, read_only=True)
    cancellation_request = serializers.SerializerMethodField()
    coupon_code = serializers.CharField(source="coupon.code", read_only=True, default=None)

    class Meta:
        model = Order
        fields = [
            "id",
            "code",
            "customer_id",
            "status",
            "payment_status",
            "payment_method",
            "coupon_code",
            "subtotal_cents",
            "shipping_cents",
            "tax_cents",
            "discount_cents",
            "total_cents",
            "delivered_at",
            "return_window_expires_at",
            "funds_released",
            "cancelled_at",
            "cancelled_by",
            "cancelled_by_role",
            "cancellation_reason",
            "refund_status",
            "refund_amount_cents",
            "cancellation_request",
            "items",
            "vendor_breakdown",
            "status_history",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_cancellation_request(self, obj: Order) -> dict | None:
        request = CancellationRequest.objects.filter(order=obj).first()
        if request is None:
            return None
        return CancellationRequestSerializer(request).data


class SweepResultSerializer(serializers.Serializer):
    total_orders = serializers.IntegerField()
    processed_count = serializers.IntegerField()
    total_released_cents = serializers.IntegerField()
    errors = serializers.ListField(child=serializers.DictField())
