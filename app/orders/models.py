"""
Order models.

An Order is created at checkout and afterwards changed only through
orders.services.OrderLifecycleService. Orders are never deleted;
cancellation is a status.

Models:
    Coupon: Promo code with a usage counter
    Order: Order header, status, cancellation record and settlement flags
    OrderItem: Line item (product, vendor, quantity, unit price)
    VendorBreakdown: Per-vendor slice of an order used for settlement
    OrderStatusHistory: Append-only status log
    CancellationRequest: Pending reversal target for a cancellation request
    OrderTransaction: Payment and refund records for an order
"""

from __future__ import annotations

from django.db import models
from django.db.models import Q
from django_fsm import RETURN_VALUE, FSMField, transition

from core.model_mixins import AppendOnlyMixin, CodeMixin, UUIDPrimaryKeyMixin
from core.models import BaseModel


class OrderStatus(models.TextChoices):
    """
    Order lifecycle states.

    Which role may move an order between two states is defined in
    orders.transitions, not on the model.

    Main flow:
        PENDING → PROCESSING → READY_TO_SHIP → DISPATCHED → SHIPPED_SELLER → DELIVERED

    Cancellation flow:
        PENDING/PROCESSING → CANCELLATION_REQUESTED → CANCELLED
        CANCELLATION_REQUESTED → CANCELLATION_REJECTED → (original status)
    """

    PENDING = "pending", "Pending"
    PROCESSING = "processing", "Processing"
    READY_TO_SHIP = "ready_to_ship", "Ready to Ship"
    DISPATCHED = "dispatched", "Dispatched"
    SHIPPED_SELLER = "shipped_seller", "Shipped by Seller"
    SHIPPED = "shipped", "Shipped"
    OUT_FOR_DELIVERY = "out_for_delivery", "Out for Delivery"
    DELIVERED = "delivered", "Delivered"
    CANCELLATION_REQUESTED = "cancellation_requested", "Cancellation Requested"
    CANCELLATION_REJECTED = "cancellation_rejected", "Cancellation Rejected"
    CANCELLED = "cancelled", "Cancelled"
    REFUNDED = "refunded", "Refunded"
    ON_HOLD = "on_hold", "On Hold"


class PaymentStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    COMPLETED = "completed", "Completed"
    FAILED = "failed", "Failed"
    REFUNDED = "refunded", "Refunded"


class PaymentMethod(models.TextChoices):
    ONLINE = "online", "Online"
    WALLET = "wallet", "Wallet"
    COD = "cod", "Cash on Delivery"


class CancellationRefundStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    COMPLETED = "completed", "Completed"
    FAILED = "failed", "Failed"
    NOT_APPLICABLE = "not_applicable", "Not Applicable"


class CancellationResolution(models.TextChoices):
    PENDING = "pending", "Pending"
    APPROVED = "approved", "Approved"
    REJECTED = "rejected", "Rejected"


class OrderTransactionType(models.TextChoices):
    PAYMENT = "payment", "Payment"
    REFUND = "refund", "Refund"


class OrderTransactionStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    COMPLETED = "completed", "Completed"
    FAILED = "failed", "Failed"


class Coupon(UUIDPrimaryKeyMixin, BaseModel):
    """Promo code applied at checkout. usage_count never drops below zero."""

    code = models.CharField(
        max_length=50,
        unique=True,
        help_text="Code entered by the customer",
    )
    is_active = models.BooleanField(
        default=True,
        help_text="Whether the code can still be applied",
    )
    usage_count = models.PositiveIntegerField(
        default=0,
        help_text="Number of live orders using this code",
    )

    def __str__(self) -> str:
        return f"{self.code} (used {self.usage_count})"


class Order(UUIDPrimaryKeyMixin, CodeMixin, BaseModel):
    """
    A customer order.

    Fields (settlement):
        delivered_at: Set once, on the first transition to DELIVERED
        return_window_expires_at: delivered_at + return window
        funds_released: Vendor earnings settled; only ever goes False -> True

    Fields (cancellation record, set once when the order is cancelled):
        cancelled_at, cancelled_by, cancelled_by_role, cancellation_reason,
        refund_status, refund_amount_cents
    """

    CODE_PREFIX = "ORD"

    customer_id = models.UUIDField(
        db_index=True,
        help_text="Customer who placed the order",
    )
    coupon = models.ForeignKey(
        Coupon,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="orders",
        help_text="Promo code applied at checkout",
    )

    # Pricing (minor units)
    subtotal_cents = models.BigIntegerField(
        default=0,
        help_text="Sum of line totals",
    )
    shipping_cents = models.BigIntegerField(
        default=0,
        help_text="Delivery charge",
    )
    tax_cents = models.BigIntegerField(
        default=0,
        help_text="Tax amount",
    )
    discount_cents = models.BigIntegerField(
        default=0,
        help_text="Coupon or promotional discount",
    )
    total_cents = models.BigIntegerField(
        default=0,
        help_text="Amount charged to the customer",
    )

    status = FSMField(
        default=OrderStatus.PENDING,
        choices=OrderStatus.choices,
        db_index=True,
        protected=True,
        help_text="Current lifecycle status (managed by FSM)",
    )
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
        help_text="Payment state of the order",
    )
    payment_method = models.CharField(
        max_length=20,
        choices=PaymentMethod.choices,
        default=PaymentMethod.ONLINE,
        help_text="How the customer paid",
    )

    # Delivery and settlement
    delivered_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the order was first marked delivered",
    )
    return_window_expires_at = models.DateTimeField(
        null=True,
        blank=True,
        db_index=True,
        help_text="End of the return window",
    )
    funds_released = models.BooleanField(
        default=False,
        db_index=True,
        help_text="Whether vendor earnings for this order have been settled",
    )

    # Cancellation record
    cancelled_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the order was cancelled",
    )
    cancelled_by = models.UUIDField(
        null=True,
        blank=True,
        help_text="Actor who cancelled the order",
    )
    cancelled_by_role = models.CharField(
        max_length=16,
        blank=True,
        default="",
        help_text="Role of the actor who cancelled the order",
    )
    cancellation_reason = models.TextField(
        blank=True,
        default="",
        help_text="Reason recorded at cancellation",
    )
    refund_status = models.CharField(
        max_length=20,
        choices=CancellationRefundStatus.choices,
        blank=True,
        default="",
        help_text="Refund state for a cancelled or returned order",
    )
    refund_amount_cents = models.BigIntegerField(
        default=0,
        help_text="Amount refunded to the customer",
    )

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(
                fields=["customer_id", "-created_at"],
                name="order_customer_created_idx",
            ),
            models.Index(
                fields=["status", "funds_released", "return_window_expires_at"],
                name="order_settlement_scan_idx",
            ),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(total_cents__gte=0),
                name="order_total_non_negative",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.code} [{self.status}]"

    @property
    def is_cancellation_recorded(self) -> bool:
        return self.cancelled_at is not None

    @transition(field=status, source="*", target=RETURN_VALUE(*OrderStatus.values))
    def move_to(self, new_status: str) -> str:
        """
        Set the status to new_status.

        Role rules are checked by OrderLifecycleService before calling this.
        """
        return new_status


class OrderItem(UUIDPrimaryKeyMixin, BaseModel):
    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name="items",
        help_text="Order this line belongs to",
    )
    product_id = models.UUIDField(
        db_index=True,
        help_text="Catalog product",
    )
    vendor_id = models.UUIDField(
        db_index=True,
        help_text="Vendor selling the product",
    )
    name = models.CharField(
        max_length=255,
        blank=True,
        default="",
        help_text="Product name at checkout",
    )
    quantity = models.PositiveIntegerField(
        help_text="Units ordered",
    )
    unit_price_cents = models.BigIntegerField(
        help_text="Price per unit at checkout",
    )
    line_total_cents = models.BigIntegerField(
        help_text="quantity x unit price",
    )

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__gt=0),
                name="order_item_quantity_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.name or self.product_id} x{self.quantity}"


class VendorBreakdown(UUIDPrimaryKeyMixin, BaseModel):
    """
    Per-vendor slice of an order.

    Shipping, tax and discount are apportioned from the order totals in
    proportion to the vendor's subtotal. commission_rate is the rate in
    force when the order was placed; settlement always uses it.
    """

    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name="vendor_breakdown",
        help_text="Order this slice belongs to",
    )
    vendor_id = models.UUIDField(
        db_index=True,
        help_text="Vendor receiving this slice",
    )
    position = models.PositiveSmallIntegerField(
        default=0,
        help_text="Order of appearance (0 = primary vendor)",
    )
    subtotal_cents = models.BigIntegerField(
        help_text="Sum of this vendor's line totals",
    )
    shipping_cents = models.BigIntegerField(
        default=0,
        help_text="Apportioned shipping",
    )
    tax_cents = models.BigIntegerField(
        default=0,
        help_text="Apportioned tax",
    )
    discount_cents = models.BigIntegerField(
        default=0,
        help_text="Apportioned discount",
    )
    commission_rate = models.DecimalField(
        max_digits=5,
        decimal_places=4,
        help_text="Platform commission rate at order time (0.1000 = 10%)",
    )
    commission_cents = models.BigIntegerField(
        default=0,
        help_text="Platform commission on the subtotal",
    )

    class Meta:
        ordering = ["position"]
        constraints = [
            models.UniqueConstraint(
                fields=["order", "vendor_id"],
                name="unique_vendor_per_order",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.order_id}/{self.vendor_id}: {self.subtotal_cents}"

    @property
    def earnings_cents(self) -> int:
        return self.subtotal_cents - self.commission_cents


class OrderStatusHistory(AppendOnlyMixin, BaseModel):
    """
    One entry per status change, never updated or reordered.

    Integer primary key so entries written in the same transaction keep
    their insertion order.
    """

    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name="status_history",
        help_text="Order whose status changed",
    )
    status = models.CharField(
        max_length=32,
        choices=OrderStatus.choices,
        help_text="Status entered",
    )
    actor_id = models.UUIDField(
        null=True,
        blank=True,
        help_text="Actor who made the change",
    )
    actor_role = models.CharField(
        max_length=16,
        help_text="Role of the actor",
    )
    note = models.TextField(
        blank=True,
        default="",
        help_text="Free-text note",
    )

    class Meta:
        ordering = ["created_at", "id"]
        verbose_name_plural = "order status history"

    def __str__(self) -> str:
        return f"{self.order_id} -> {self.status} by {self.actor_role}"


class CancellationRequest(UUIDPrimaryKeyMixin, BaseModel):
    """
    Cancellation requested for an order, with the status to revert to.

    original_status is restricted to OrderStatus values so the revert
    target of a rejected request is always a real status.
    """

    order = models.OneToOneField(
        Order,
        on_delete=models.CASCADE,
        related_name="cancellation_request",
        help_text="Order the request is for",
    )
    original_status = models.CharField(
        max_length=32,
        choices=OrderStatus.choices,
        help_text="Status the order returns to if the request is rejected",
    )
    reason = models.TextField(
        blank=True,
        default="",
        help_text="Reason given by the requester",
    )
    requested_by = models.UUIDField(
        null=True,
        blank=True,
        help_text="Actor who requested the cancellation",
    )
    resolution = models.CharField(
        max_length=16,
        choices=CancellationResolution.choices,
        default=CancellationResolution.PENDING,
        help_text="Outcome of the request",
    )
    resolved_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the request was approved or rejected",
    )

    def __str__(self) -> str:
        return f"Cancellation of {self.order_id} [{self.resolution}]"


class OrderTransaction(UUIDPrimaryKeyMixin, CodeMixin, BaseModel):
    """Payment or refund record for an order (TXN-... code)."""

    CODE_PREFIX = "TXN"

    order = models.ForeignKey(
        Order,
        on_delete=models.PROTECT,
        related_name="transactions",
        help_text="Order this transaction belongs to",
    )
    customer_id = models.UUIDField(
        db_index=True,
        help_text="Customer paying or being refunded",
    )
    type = models.CharField(
        max_length=16,
        choices=OrderTransactionType.choices,
        help_text="payment or refund",
    )
    amount_cents = models.BigIntegerField(
        help_text="Amount in minor units",
    )
    status = models.CharField(
        max_length=16,
        choices=OrderTransactionStatus.choices,
        default=OrderTransactionStatus.PENDING,
        help_text="Processing state",
    )
    method = models.CharField(
        max_length=20,
        choices=PaymentMethod.choices,
        help_text="Payment method, or wallet for wallet refunds",
    )

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount_cents__gt=0),
                name="order_txn_amount_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.code} {self.type} {self.amount_cents}"
